"""Notes (posts)."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, false, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campra.db.base import Base, JSONType
from campra.db.enums import NoteVisibility
from campra.utils.ids import gen_id

if TYPE_CHECKING:
    from campra.db.models import User


class Note(Base):
    __tablename__ = "note"
    __table_args__ = (
        Index("IDX_note_userId", "userId"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=gen_id)
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", server_default=func.now(), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        "userId", String(32), ForeignKey("user.id", ondelete="CASCADE"), nullable=False
    )
    text: Mapped[str | None] = mapped_column(Text, nullable=True)
    cw: Mapped[str | None] = mapped_column(String(512), nullable=True)
    visibility: Mapped[str] = mapped_column(
        String(16), nullable=False, default=NoteVisibility.PUBLIC.value,
        server_default=NoteVisibility.PUBLIC.value,
    )
    is_hidden: Mapped[bool] = mapped_column(
        "isHidden", Boolean, server_default=false(), default=False, nullable=False
    )

    # Set when the note was posted through a Campra-specific surface (e.g. a school feed)
    campra_for: Mapped[str | None] = mapped_column("campraFor", String(128), nullable=True)

    # Latest Iffy ingest response for this note
    iffy_scan_result: Mapped[dict | None] = mapped_column("iffyScanResult", JSONType, nullable=True)
    iffy_scan_url: Mapped[str | None] = mapped_column("iffyScanUrl", String(512), nullable=True)

    user: Mapped["User"] = relationship()
