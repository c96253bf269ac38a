"""Custom emojis and avatar decorations."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, Index, String, false, func
from sqlalchemy.orm import Mapped, mapped_column

from campra.db.base import Base, JSONType
from campra.utils.ids import gen_id


class Emoji(Base):
    __tablename__ = "emoji"
    __table_args__ = (
        Index("IDX_emoji_name_host", "name", "host", unique=True),
        Index("IDX_emoji_host", "host"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=gen_id)
    updated_at: Mapped[datetime | None] = mapped_column(
        "updatedAt", server_default=func.now(), nullable=True
    )
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    host: Mapped[str | None] = mapped_column(String(128), nullable=True)
    category: Mapped[str | None] = mapped_column(String(128), nullable=True)
    original_url: Mapped[str] = mapped_column("originalUrl", String(512), nullable=False)
    public_url: Mapped[str] = mapped_column("publicUrl", String(512), nullable=False, default="")
    type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    aliases: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)


class Decoration(Base):
    """Avatar decoration. Same storage shape as an emoji plus plan flags."""

    __tablename__ = "decoration"
    __table_args__ = (
        Index("IDX_decoration_name_host", "name", "host", unique=True),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=gen_id)
    updated_at: Mapped[datetime | None] = mapped_column(
        "updatedAt", server_default=func.now(), nullable=True
    )
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    host: Mapped[str | None] = mapped_column(String(128), nullable=True)
    category: Mapped[str | None] = mapped_column(String(128), nullable=True)
    original_url: Mapped[str] = mapped_column("originalUrl", String(512), nullable=False)
    public_url: Mapped[str] = mapped_column("publicUrl", String(512), nullable=False, default="")
    type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    aliases: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    is_plus: Mapped[bool] = mapped_column(
        "isPlus", Boolean, server_default=false(), default=False, nullable=False
    )
    is_mplus: Mapped[bool] = mapped_column(
        "isMPlus", Boolean, server_default=false(), default=False, nullable=False
    )
    # User id credited for the artwork
    credit: Mapped[str | None] = mapped_column(String(32), nullable=True)
