"""Admin emoji router - bulk import of custom emojis."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from campra.core.deps import get_db, require_moderator
from campra.core.structured_logging import build_log_context
from campra.db.enums import JobType
from campra.db.models import User
from campra.schemas.common import SuccessResponse
from campra.schemas.emoji import EmojiImportZipRequest
from campra.services import job_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/emoji", tags=["admin"])


@router.post("/import-zip", response_model=SuccessResponse)
def import_zip(
    body: EmojiImportZipRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_moderator),
):
    """Queue an import of the emoji archive in drive file `fileId`.

    Returns immediately; the outcome of the import is not reported here.
    """
    job = job_service.schedule_job(
        db,
        JobType.IMPORT_CUSTOM_EMOJIS,
        {"user_id": user.id, "file_id": body.file_id},
    )
    logger.info(
        "Scheduled emoji import for file %s",
        body.file_id,
        extra=build_log_context(user_id=user.id, job_id=job.id),
    )
    return SuccessResponse()
