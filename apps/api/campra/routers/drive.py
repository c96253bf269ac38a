"""Drive router - file details and locally stored file delivery."""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from campra.core.deps import get_container, get_current_user, get_db
from campra.db.models import DriveFile, User
from campra.repositories import drive_files
from campra.repositories.refs import Loaded
from campra.schemas.drive import DriveFilePacked, DriveFileShowRequest
from campra.services import meta_service

router = APIRouter(tags=["drive"])


@router.post("/api/drive/files/show", response_model=DriveFilePacked)
def show_file(
    body: DriveFileShowRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Details of one of the caller's own drive files."""
    file = db.get(DriveFile, body.file_id)
    if file is None or file.user_id != user.id:
        raise HTTPException(status_code=404, detail="File not found")

    meta = meta_service.fetch_meta(db)
    return drive_files.pack(db, Loaded(file), meta, detail=True, self_=True)


@router.get("/files/{access_key}")
def serve_local_file(
    access_key: str,
    db: Session = Depends(get_db),
    services=Depends(get_container),
):
    """Serve a file from the local files directory."""
    stem, _, _ = access_key.partition(".")
    if not stem or "/" in access_key or ".." in access_key:
        raise HTTPException(status_code=404, detail="File not found")

    file = (
        db.query(DriveFile)
        .filter(DriveFile.access_key == access_key, DriveFile.stored_internal.is_(True))
        .first()
    )
    path = services.storage.local_path(access_key)
    if file is None or not path.is_file():
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(path, media_type=file.type, filename=file.name)
