"""Messaging schemas."""

from __future__ import annotations

from campra.schemas.common import CampraModel
from campra.schemas.drive import DriveFilePacked
from campra.schemas.user import UserLite


class UserGroupPacked(CampraModel):
    id: str
    created_at: str
    name: str
    owner_id: str


class MessagingMessagePacked(CampraModel):
    id: str
    created_at: str
    text: str | None
    user_id: str
    user: UserLite
    recipient_id: str | None
    recipient: UserLite | None = None
    group_id: str | None
    group: UserGroupPacked | None = None
    file_id: str | None
    file: DriveFilePacked | None = None
    is_read: bool
    reads: list[str]
    reply_id: str | None
    reply: MessagingMessagePacked | None = None
    reaction_counts: dict[str, int]
    user_reactions: list[str]
    is_deleted: bool
