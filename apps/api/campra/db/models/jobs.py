"""Background job queue table."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Index, Integer, String, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column

from campra.db.base import Base, JSONType
from campra.db.enums import DEFAULT_JOB_STATUS
from campra.utils.ids import gen_id


class Job(Base):
    """
    Background job for async processing.

    Used for: custom emoji ZIP imports, note moderation scans.
    Workers poll for pending jobs and process them.
    """

    __tablename__ = "job"
    __table_args__ = (
        Index("idx_job_pending", "status", "run_at"),
        Index(
            "uq_job_idempotency",
            "idempotency_key",
            unique=True,
            postgresql_where=text("idempotency_key IS NOT NULL"),
            sqlite_where=text("idempotency_key IS NOT NULL"),
        ),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=gen_id)
    job_type: Mapped[str] = mapped_column(String(50), nullable=False)
    payload: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    run_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        server_default=DEFAULT_JOB_STATUS.value,
        default=DEFAULT_JOB_STATUS.value,
        nullable=False,
    )
    attempts: Mapped[int] = mapped_column(Integer, server_default="0", default=0, nullable=False)
    max_attempts: Mapped[int] = mapped_column(Integer, server_default="3", default=3, nullable=False)
    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(server_default=func.now(), nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(nullable=True)

    idempotency_key: Mapped[str | None] = mapped_column(String(255), nullable=True)
