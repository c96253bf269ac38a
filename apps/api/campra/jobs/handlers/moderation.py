"""Content moderation job handlers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from campra.db.models import Note

if TYPE_CHECKING:
    from campra.boot.container import ServiceContainer

logger = logging.getLogger(__name__)


async def process_moderate_note(db, job, services: ServiceContainer) -> None:
    """
    Submit a note to the auto-moderator.

    Payload:
        - note_id: note to scan
    """
    note_id = (job.payload or {}).get("note_id")
    if not note_id:
        raise ValueError("Missing note_id in payload")

    note = db.get(Note, note_id)
    if note is None:
        logger.info("Note %s deleted before moderation, skipping", note_id)
        return

    moderator = services.moderator
    if not moderator.is_available():
        logger.info("Auto-moderation unavailable, note %s not scanned", note_id)
        return

    await moderator.moderate_note(db, note)
