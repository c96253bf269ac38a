"""Drive storage - persisting uploaded files locally or in object storage."""

import hashlib
import logging
import mimetypes
import shutil
import uuid
from pathlib import Path

from sqlalchemy.orm import Session

from campra.core.config import Settings
from campra.db.models import DriveFile, User
from campra.services import meta_service, storage_client

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


def calculate_md5(path: Path) -> str:
    md5 = hashlib.md5()
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(8192), b""):
            md5.update(chunk)
    return md5.hexdigest()


def detect_type(name: str) -> str:
    mime, _ = mimetypes.guess_type(name)
    return mime or DEFAULT_MIME_TYPE


class DriveStorage:
    """
    Stores files and records them as drive files.

    Backend is chosen per call from the meta row: object storage when
    `useObjectStorage` is on, otherwise the local files directory served
    under `{URL}/files/`.
    """

    def __init__(self, settings: Settings):
        self.base_url = settings.URL.rstrip("/")
        self.local_dir = Path(settings.LOCAL_STORAGE_DIR)

    def local_path(self, access_key: str) -> Path:
        return self.local_dir / access_key

    def add_file(
        self,
        db: Session,
        path: Path,
        *,
        name: str,
        user: User | None = None,
        folder_id: str | None = None,
        comment: str | None = None,
        is_sensitive: bool = False,
    ) -> DriveFile:
        """Store the file at `path` and insert its drive_file row."""
        file_type = detect_type(name)
        md5 = calculate_md5(path)
        size = path.stat().st_size
        access_key = f"{uuid.uuid4()}{Path(name).suffix.lower()}"

        meta = meta_service.fetch_meta(db)
        if meta.use_object_storage:
            key = f"{meta.object_storage_prefix}/{access_key}" if meta.object_storage_prefix else access_key
            client = storage_client.get_s3_client(meta)
            with open(path, "rb") as fh:
                client.upload_fileobj(
                    fh,
                    meta.object_storage_bucket,
                    key,
                    ExtraArgs={"ContentType": file_type},
                )
            url = f"{meta.object_storage_url}/{key}"
            stored_internal = False
            access_key = key
        else:
            self.local_dir.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(path, self.local_path(access_key))
            url = f"{self.base_url}/files/{access_key}"
            stored_internal = True

        drive_file = DriveFile(
            user_id=user.id if user else None,
            user_host=user.host if user else None,
            md5=md5,
            name=name,
            type=file_type,
            size=size,
            comment=comment,
            properties={},
            stored_internal=stored_internal,
            url=url,
            access_key=access_key,
            is_sensitive=is_sensitive,
            folder_id=folder_id,
        )
        db.add(drive_file)
        db.commit()
        db.refresh(drive_file)

        logger.info(
            "Stored drive file %s (%s, %s bytes, internal=%s)",
            drive_file.id,
            file_type,
            size,
            stored_internal,
        )
        return drive_file
