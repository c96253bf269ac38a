"""Custom emoji job handlers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from campra.services import emoji_import_service
from campra.utils.ids import is_valid_id

if TYPE_CHECKING:
    from campra.boot.container import ServiceContainer

logger = logging.getLogger(__name__)


async def process_import_custom_emojis(db, job, services: ServiceContainer) -> None:
    """
    Import custom emojis from an uploaded ZIP archive.

    Payload:
        - file_id: drive file holding the archive
        - user_id: moderator who requested the import
    """
    payload = job.payload or {}
    file_id = payload.get("file_id")
    if not is_valid_id(file_id):
        raise ValueError("Missing or invalid file_id in payload")

    result = await emoji_import_service.import_custom_emojis(
        db,
        file_id,
        storage=services.storage,
        timeout=services.settings.HTTP_TIMEOUT_SECONDS,
        transport=services.http_transport,
    )
    if result is None:
        logger.info("Emoji import job %s had no archive to import", job.id)
