"""Job handler registry."""

from __future__ import annotations

from typing import Awaitable, Callable, Mapping

from campra.db.enums import JobType
from campra.jobs.handlers import emojis, moderation

JobHandler = Callable[[object, object, object], Awaitable[None]]

JOB_HANDLERS: Mapping[str, JobHandler] = {
    JobType.IMPORT_CUSTOM_EMOJIS.value: emojis.process_import_custom_emojis,
    JobType.MODERATE_NOTE.value: moderation.process_moderate_note,
}


def resolve_job_handler(job_type: str) -> JobHandler:
    handler = JOB_HANDLERS.get(job_type)
    if not handler:
        raise ValueError(f"Unknown job type: {job_type}")
    return handler
