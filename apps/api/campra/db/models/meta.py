"""Instance-wide settings (singleton row)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Integer, String, false, true
from sqlalchemy.orm import Mapped, mapped_column, relationship

from campra.db.base import Base
from campra.db.enums import DEFAULT_IFFY_CONFIDENCE_THRESHOLD, META_SINGLETON_ID

if TYPE_CHECKING:
    from campra.db.models import User


class Meta(Base):
    """
    Singleton configuration row (id "x").

    Holds the content moderation settings read by the auto-moderator at
    worker boot and the object storage settings used to sign media URLs.
    """

    __tablename__ = "meta"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=META_SINGLETON_ID)
    name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    description: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    # Content moderation (Iffy)
    enable_content_moderation: Mapped[bool] = mapped_column(
        "enableContentModeration", Boolean, server_default=false(), default=False, nullable=False
    )
    iffy_api_key: Mapped[str | None] = mapped_column("iffyApiKey", String(256), nullable=True)
    iffy_api_url: Mapped[str | None] = mapped_column("iffyApiUrl", String(512), nullable=True)
    iffy_confidence_threshold: Mapped[str | None] = mapped_column(
        "iffyConfidenceThreshold",
        String(16),
        server_default=DEFAULT_IFFY_CONFIDENCE_THRESHOLD.value,
        default=DEFAULT_IFFY_CONFIDENCE_THRESHOLD.value,
        nullable=True,
    )
    auto_hide_inappropriate_content: Mapped[bool] = mapped_column(
        "autoHideInappropriateContent", Boolean, server_default=true(), default=True, nullable=False
    )
    automod_account_id: Mapped[str | None] = mapped_column(
        "automodAccountId",
        String(32),
        ForeignKey("user.id", ondelete="SET NULL", name="FK_automod_account_id"),
        nullable=True,
    )

    # Object storage
    use_object_storage: Mapped[bool] = mapped_column(
        "useObjectStorage", Boolean, server_default=false(), default=False, nullable=False
    )
    object_storage_base_url: Mapped[str | None] = mapped_column(
        "objectStorageBaseUrl", String(512), nullable=True
    )
    object_storage_bucket: Mapped[str | None] = mapped_column(
        "objectStorageBucket", String(512), nullable=True
    )
    object_storage_prefix: Mapped[str | None] = mapped_column(
        "objectStoragePrefix", String(512), nullable=True
    )
    object_storage_endpoint: Mapped[str | None] = mapped_column(
        "objectStorageEndpoint", String(512), nullable=True
    )
    object_storage_region: Mapped[str | None] = mapped_column(
        "objectStorageRegion", String(512), nullable=True
    )
    object_storage_port: Mapped[int | None] = mapped_column(
        "objectStoragePort", Integer, nullable=True
    )
    object_storage_access_key: Mapped[str | None] = mapped_column(
        "objectStorageAccessKey", String(512), nullable=True
    )
    object_storage_secret_key: Mapped[str | None] = mapped_column(
        "objectStorageSecretKey", String(512), nullable=True
    )
    object_storage_use_ssl: Mapped[bool] = mapped_column(
        "objectStorageUseSSL", Boolean, server_default=true(), default=True, nullable=False
    )

    automod_account: Mapped["User | None"] = relationship(foreign_keys=[automod_account_id])

    @property
    def object_storage_url(self) -> str:
        """Base URL that stored object keys are appended to."""
        if self.object_storage_base_url:
            return self.object_storage_base_url.rstrip("/")
        scheme = "https" if self.object_storage_use_ssl else "http"
        port = f":{self.object_storage_port}" if self.object_storage_port else ""
        return f"{scheme}://{self.object_storage_endpoint}{port}/{self.object_storage_bucket}"
