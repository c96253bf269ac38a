"""Direct and group messaging."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, false, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campra.db.base import Base, JSONType
from campra.utils.ids import gen_id

if TYPE_CHECKING:
    from campra.db.models import DriveFile, User


class UserGroup(Base):
    __tablename__ = "user_group"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=gen_id)
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", server_default=func.now(), nullable=False
    )
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    user_id: Mapped[str] = mapped_column(
        "userId", String(32), ForeignKey("user.id", ondelete="CASCADE"), nullable=False
    )


class MessagingMessage(Base):
    __tablename__ = "messaging_message"
    __table_args__ = (
        Index("IDX_messaging_message_userId", "userId"),
        Index("IDX_messaging_message_recipientId", "recipientId"),
        Index("IDX_messaging_message_groupId", "groupId"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=gen_id)
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", server_default=func.now(), nullable=False
    )
    user_id: Mapped[str] = mapped_column(
        "userId", String(32), ForeignKey("user.id", ondelete="CASCADE"), nullable=False
    )
    recipient_id: Mapped[str | None] = mapped_column(
        "recipientId", String(32), ForeignKey("user.id", ondelete="CASCADE"), nullable=True
    )
    group_id: Mapped[str | None] = mapped_column(
        "groupId", String(32), ForeignKey("user_group.id", ondelete="CASCADE"), nullable=True
    )
    text: Mapped[str | None] = mapped_column(Text, nullable=True)
    file_id: Mapped[str | None] = mapped_column(
        "fileId", String(32), ForeignKey("drive_file.id", ondelete="CASCADE"), nullable=True
    )
    is_read: Mapped[bool] = mapped_column(
        "isRead", Boolean, server_default=false(), default=False, nullable=False
    )
    # Ids of group members who have read the message
    reads: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    reply_id: Mapped[str | None] = mapped_column(
        "replyId", String(32), ForeignKey("messaging_message.id", ondelete="SET NULL"), nullable=True
    )
    reaction_counts: Mapped[dict | None] = mapped_column("reactionCounts", JSONType, nullable=True)
    is_deleted: Mapped[bool] = mapped_column(
        "isDeleted", Boolean, server_default=false(), default=False, nullable=False
    )

    user: Mapped["User"] = relationship(foreign_keys=[user_id])
    recipient: Mapped["User | None"] = relationship(foreign_keys=[recipient_id])
    group: Mapped["UserGroup | None"] = relationship()
    file: Mapped["DriveFile | None"] = relationship()
    reply: Mapped["MessagingMessage | None"] = relationship(remote_side=[id])


class MessagingMessageReaction(Base):
    __tablename__ = "messaging_message_reaction"
    __table_args__ = (
        Index("IDX_messaging_message_reaction_message_user", "messageId", "userId"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=gen_id)
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", server_default=func.now(), nullable=False
    )
    message_id: Mapped[str] = mapped_column(
        "messageId", String(32), ForeignKey("messaging_message.id", ondelete="CASCADE"),
        nullable=False,
    )
    user_id: Mapped[str] = mapped_column(
        "userId", String(32), ForeignKey("user.id", ondelete="CASCADE"), nullable=False
    )
    reaction: Mapped[str] = mapped_column(String(260), nullable=False)
