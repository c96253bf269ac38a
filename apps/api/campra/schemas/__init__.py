"""Pydantic schemas for API request/response models."""

from campra.schemas.channel import ChannelInvitationPacked, ChannelPacked
from campra.schemas.common import CampraModel, SuccessResponse
from campra.schemas.drive import DriveFileShowRequest, DriveFilePacked, DriveFolderPacked
from campra.schemas.emoji import DecorationPacked, EmojiImportZipRequest, EmojiPacked
from campra.schemas.messaging import MessagingMessagePacked, UserGroupPacked
from campra.schemas.school import SchoolPacked, SchoolShowRequest
from campra.schemas.user import UserLite

__all__ = [
    "CampraModel",
    "ChannelInvitationPacked",
    "ChannelPacked",
    "DecorationPacked",
    "DriveFilePacked",
    "DriveFileShowRequest",
    "DriveFolderPacked",
    "EmojiImportZipRequest",
    "EmojiPacked",
    "MessagingMessagePacked",
    "SchoolPacked",
    "SchoolShowRequest",
    "SuccessResponse",
    "UserGroupPacked",
    "UserLite",
]
