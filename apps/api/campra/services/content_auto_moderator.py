"""Automatic content moderation for new notes and uploads.

Content is never blocked here: submissions go to Iffy for asynchronous
review and the caller is always told to let the content through.
"""

from __future__ import annotations

import logging

import httpx
from sqlalchemy.orm import Session

from campra.core.config import Settings
from campra.db.models import DriveFile, Note, User
from campra.services import meta_service
from campra.services.iffy_client import IffyClient, ModerationRequest

logger = logging.getLogger(__name__)


class ContentAutoModerator:
    def __init__(self, settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None):
        self._settings = settings
        self._transport = transport
        self._client: IffyClient | None = None
        self._automod_account_id: str | None = None

    @property
    def client(self) -> IffyClient | None:
        return self._client

    @property
    def automod_account_id(self) -> str | None:
        """User that automated moderation actions are attributed to."""
        return self._automod_account_id

    def is_available(self) -> bool:
        return self._client is not None

    async def initialize(self, db: Session) -> None:
        """
        Load moderation settings from meta.

        Stays disabled when moderation is off or no API key is configured.
        Any other initialization failure is logged and also leaves it disabled.
        """
        self._client = None
        self._automod_account_id = None
        try:
            meta = meta_service.fetch_meta(db)
            logger.info(
                "Initializing content auto-moderation (enabled=%s, api_key=%s, api_url=%s)",
                meta.enable_content_moderation,
                bool(meta.iffy_api_key),
                meta.iffy_api_url or "default",
            )
            if not meta.enable_content_moderation or not meta.iffy_api_key:
                logger.info("Content auto-moderation disabled - not configured in instance settings")
                return

            self._client = IffyClient.from_meta(
                meta,
                public_url=self._settings.URL,
                default_api_url=self._settings.IFFY_DEFAULT_API_URL,
                timeout=self._settings.HTTP_TIMEOUT_SECONDS,
                max_attempts=self._settings.HTTP_MAX_ATTEMPTS,
                transport=self._transport,
            )
            self._automod_account_id = meta.automod_account_id
            logger.info("Content auto-moderation initialized with Iffy")
        except Exception:
            self._client = None
            logger.exception("Content auto-moderation disabled - initialization failed")

    async def reinitialize(self, db: Session) -> None:
        """Re-read meta after moderation settings change."""
        await self.initialize(db)

    async def moderate_note(self, db: Session, note: Note) -> bool:
        """
        Submit a note for review and record the scan on the note.

        Always returns True; review results arrive asynchronously.
        """
        if self._client is None or not note.text:
            return True

        user = db.get(User, note.user_id)
        request = ModerationRequest(
            content=note.text,
            content_type="text",
            user_id=note.user_id,
            content_id=note.id,
            school_id=user.school_id if user else None,
        )
        result = await self._client.submit_text(request)

        note.iffy_scan_result = result.to_dict()
        note.iffy_scan_url = result.iffy_url
        db.commit()

        logger.info(
            "Note %s submitted to Iffy for moderation (category=%s, record=%s)",
            note.id,
            result.category,
            result.iffy_record_id,
        )
        return True

    async def moderate_image(self, db: Session, file: DriveFile, image_url: str) -> bool:
        """Submit an uploaded image for review. Always returns True."""
        if self._client is None:
            return True

        user = db.get(User, file.user_id) if file.user_id else None
        request = ModerationRequest(
            content=image_url,
            content_type="image",
            user_id=file.user_id or "",
            content_id=file.id,
            school_id=user.school_id if user else None,
        )
        result = await self._client.submit_image(request, image_url)
        logger.info(
            "Image %s submitted to Iffy for moderation (category=%s, record=%s)",
            file.id,
            result.category,
            result.iffy_record_id,
        )
        return True
