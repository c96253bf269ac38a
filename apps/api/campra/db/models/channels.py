"""Channels and channel invitations."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campra.db.base import Base
from campra.utils.ids import gen_id

if TYPE_CHECKING:
    from campra.db.models import User


class Channel(Base):
    __tablename__ = "channel"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=gen_id)
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", server_default=func.now(), nullable=False
    )
    user_id: Mapped[str | None] = mapped_column(
        "userId", String(32), ForeignKey("user.id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str | None] = mapped_column(String(2048), nullable=True)


class ChannelInvitation(Base):
    __tablename__ = "channel_invitation"
    __table_args__ = (
        Index("IDX_channel_invitation_userId", "userId"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=gen_id)
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", server_default=func.now(), nullable=False
    )
    channel_id: Mapped[str] = mapped_column(
        "channelId", String(32), ForeignKey("channel.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        "userId", String(32), ForeignKey("user.id", ondelete="CASCADE"), nullable=False
    )

    channel: Mapped["Channel"] = relationship()
    user: Mapped["User"] = relationship()
