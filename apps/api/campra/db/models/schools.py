"""Schools (tenants for student accounts)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, Index, String, false, func, true
from sqlalchemy.orm import Mapped, mapped_column

from campra.db.base import Base
from campra.utils.ids import gen_id


class School(Base):
    __tablename__ = "schools"
    __table_args__ = (
        Index("IDX_schools_type", "type"),
        Index("IDX_schools_isActive", "isActive"),
        Index("IDX_schools_isDemo", "isDemo"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=gen_id)
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        "updatedAt", server_default=func.now(), onupdate=func.now(), nullable=False
    )
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    domain: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    type: Mapped[str] = mapped_column(String(32), nullable=False, server_default="high_school")
    location: Mapped[str | None] = mapped_column(String(512), nullable=True)
    description: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    logo_url: Mapped[str | None] = mapped_column("logoUrl", String(512), nullable=True)
    logo_id: Mapped[str | None] = mapped_column("logoId", String(32), nullable=True)
    website_url: Mapped[str | None] = mapped_column("websiteUrl", String(512), nullable=True)
    is_active: Mapped[bool] = mapped_column(
        "isActive", Boolean, server_default=true(), default=True, nullable=False
    )
    is_demo: Mapped[bool] = mapped_column(
        "isDemo", Boolean, server_default=false(), default=False, nullable=False
    )
