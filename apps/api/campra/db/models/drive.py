"""Drive files and folders."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, Boolean, ForeignKey, Index, String, false, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campra.db.base import Base, JSONType
from campra.utils.ids import gen_id

if TYPE_CHECKING:
    from campra.db.models import User


IMAGE_MIME_TYPES = frozenset(
    {
        "image/png",
        "image/apng",
        "image/gif",
        "image/jpeg",
        "image/webp",
        "image/svg+xml",
        "image/avif",
    }
)


class DriveFolder(Base):
    __tablename__ = "drive_folder"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=gen_id)
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", server_default=func.now(), nullable=False
    )
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    user_id: Mapped[str | None] = mapped_column(
        "userId", String(32), ForeignKey("user.id", ondelete="CASCADE"), nullable=True
    )
    parent_id: Mapped[str | None] = mapped_column(
        "parentId", String(32), ForeignKey("drive_folder.id", ondelete="SET NULL"), nullable=True
    )


class DriveFile(Base):
    """
    An uploaded file.

    Files are either stored internally (served from `url`) or in object
    storage, in which case the access key columns hold the object keys used to
    produce signed URLs.
    """

    __tablename__ = "drive_file"
    __table_args__ = (
        Index("IDX_drive_file_userId", "userId"),
        Index("IDX_drive_file_folderId", "folderId"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=gen_id)
    created_at: Mapped[datetime] = mapped_column(
        "createdAt", server_default=func.now(), nullable=False
    )
    user_id: Mapped[str | None] = mapped_column(
        "userId", String(32), ForeignKey("user.id", ondelete="SET NULL"), nullable=True
    )
    user_host: Mapped[str | None] = mapped_column("userHost", String(512), nullable=True)
    md5: Mapped[str] = mapped_column(String(32), nullable=False)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    type: Mapped[str] = mapped_column(String(128), nullable=False)
    size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    comment: Mapped[str | None] = mapped_column(String(512), nullable=True)
    blurhash: Mapped[str | None] = mapped_column(String(128), nullable=True)
    properties: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)

    stored_internal: Mapped[bool] = mapped_column(
        "storedInternal", Boolean, server_default=false(), default=False, nullable=False
    )
    url: Mapped[str] = mapped_column(String(512), nullable=False)
    thumbnail_url: Mapped[str | None] = mapped_column("thumbnailUrl", String(512), nullable=True)
    webpublic_url: Mapped[str | None] = mapped_column("webpublicUrl", String(512), nullable=True)
    webpublic_type: Mapped[str | None] = mapped_column("webpublicType", String(128), nullable=True)
    access_key: Mapped[str | None] = mapped_column("accessKey", String(256), nullable=True)
    thumbnail_access_key: Mapped[str | None] = mapped_column(
        "thumbnailAccessKey", String(256), nullable=True
    )
    webpublic_access_key: Mapped[str | None] = mapped_column(
        "webpublicAccessKey", String(256), nullable=True
    )
    uri: Mapped[str | None] = mapped_column(String(512), nullable=True)
    is_link: Mapped[bool] = mapped_column(
        "isLink", Boolean, server_default=false(), default=False, nullable=False
    )
    is_sensitive: Mapped[bool] = mapped_column(
        "isSensitive", Boolean, server_default=false(), default=False, nullable=False
    )
    folder_id: Mapped[str | None] = mapped_column(
        "folderId", String(32), ForeignKey("drive_folder.id", ondelete="SET NULL"), nullable=True
    )

    user: Mapped["User | None"] = relationship()
    folder: Mapped["DriveFolder | None"] = relationship()

    @property
    def is_image(self) -> bool:
        return self.type in IMAGE_MIME_TYPES
