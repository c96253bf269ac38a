"""SQLAlchemy ORM models."""

from campra.db.models.channels import Channel, ChannelInvitation
from campra.db.models.drive import IMAGE_MIME_TYPES, DriveFile, DriveFolder
from campra.db.models.emojis import Decoration, Emoji
from campra.db.models.jobs import Job
from campra.db.models.messaging import MessagingMessage, MessagingMessageReaction, UserGroup
from campra.db.models.meta import Meta
from campra.db.models.notes import Note
from campra.db.models.schools import School
from campra.db.models.users import User

__all__ = [
    "Channel",
    "ChannelInvitation",
    "Decoration",
    "DriveFile",
    "DriveFolder",
    "Emoji",
    "IMAGE_MIME_TYPES",
    "Job",
    "Meta",
    "MessagingMessage",
    "MessagingMessageReaction",
    "Note",
    "School",
    "User",
    "UserGroup",
]
