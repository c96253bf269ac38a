"""Drive file packs and URL helpers."""

from __future__ import annotations

import copy
import logging
from typing import Any

from sqlalchemy.orm import Session

from campra.db.models import DriveFile, DriveFolder, Meta
from campra.repositories import users
from campra.repositories.refs import ById, Ref, resolve, resolve_optional
from campra.schemas.drive import DriveFilePacked, DriveFolderPacked
from campra.services.signed_url import DEFAULT_EXPIRES_SECONDS, SignedUrlError, sign_on_base_url
from campra.utils.dates import isoformat_utc

logger = logging.getLogger(__name__)

MAX_FILE_NAME_LENGTH = 200


def validate_file_name(name: str) -> bool:
    return (
        len(name.strip()) > 0
        and len(name) <= MAX_FILE_NAME_LENGTH
        and "\\" not in name
        and "/" not in name
        and ".." not in name
    )


def get_public_properties(file: DriveFile) -> dict[str, Any]:
    """Properties as displayed: EXIF orientation applied to width/height, then dropped."""
    properties = file.properties or {}
    orientation = properties.get("orientation")
    if orientation is None:
        return properties

    public = copy.deepcopy(properties)
    if orientation >= 5:
        public["width"], public["height"] = properties.get("height"), properties.get("width")
    del public["orientation"]
    return public


def get_public_url(file: DriveFile, thumbnail: bool = False) -> str | None:
    if thumbnail:
        if file.thumbnail_url:
            return file.thumbnail_url
        return (file.webpublic_url or file.url) if file.is_image else None
    return file.webpublic_url or file.url


def _object_key(file: DriveFile, thumbnail: bool) -> str | None:
    if thumbnail:
        return file.thumbnail_access_key or file.webpublic_access_key or file.access_key
    return file.webpublic_access_key or file.access_key


def get_secure_url(
    file: DriveFile, meta: Meta, thumbnail: bool = False, *, expires: int = DEFAULT_EXPIRES_SECONDS
) -> str | None:
    """
    URL a client may fetch the file from.

    Internally stored files are served as-is. Object storage files get a
    presigned URL on the configured base URL; on signing failure the public
    URL is returned.
    """
    if file.stored_internal or not meta.use_object_storage:
        return get_public_url(file, thumbnail)

    key = _object_key(file, thumbnail)
    if not key:
        return get_public_url(file, thumbnail)

    try:
        return sign_on_base_url(meta, key, expires)
    except (SignedUrlError, ValueError) as exc:
        logger.debug("Signing drive file %s failed, using public URL: %s", file.id, exc)
        return get_public_url(file, thumbnail)


def pack_folder(db: Session, ref: Ref) -> DriveFolderPacked:
    folder = resolve(db, DriveFolder, ref)
    return DriveFolderPacked(
        id=folder.id,
        created_at=isoformat_utc(folder.created_at),
        name=folder.name,
        parent_id=folder.parent_id,
    )


def _pack_file(
    db: Session,
    file: DriveFile,
    meta: Meta,
    *,
    detail: bool,
    self_: bool,
    with_user: bool,
) -> DriveFilePacked:
    return DriveFilePacked(
        id=file.id,
        created_at=isoformat_utc(file.created_at),
        name=file.name,
        type=file.type,
        md5=file.md5,
        size=file.size,
        is_sensitive=file.is_sensitive,
        blurhash=file.blurhash,
        properties=file.properties if self_ else get_public_properties(file),
        url=get_secure_url(file, meta, False),
        thumbnail_url=get_secure_url(file, meta, True),
        comment=file.comment,
        folder_id=file.folder_id,
        folder=pack_folder(db, ById(file.folder_id)) if detail and file.folder_id else None,
        user_id=file.user_id if with_user else None,
        user=users.pack_lite(db, ById(file.user_id)) if with_user and file.user_id else None,
    )


def pack(
    db: Session,
    ref: Ref,
    meta: Meta,
    *,
    detail: bool = False,
    self_: bool = False,
    with_user: bool = False,
) -> DriveFilePacked:
    file = resolve(db, DriveFile, ref)
    return _pack_file(db, file, meta, detail=detail, self_=self_, with_user=with_user)


def pack_nullable(
    db: Session,
    ref: Ref,
    meta: Meta,
    *,
    detail: bool = False,
    self_: bool = False,
    with_user: bool = False,
) -> DriveFilePacked | None:
    file = resolve_optional(db, DriveFile, ref)
    if file is None:
        return None
    return _pack_file(db, file, meta, detail=detail, self_=self_, with_user=with_user)


def pack_many(
    db: Session,
    refs: list[Ref],
    meta: Meta,
    *,
    detail: bool = False,
    self_: bool = False,
    with_user: bool = False,
) -> list[DriveFilePacked]:
    """Pack every file that still exists; missing ids are dropped."""
    packed = (
        pack_nullable(db, ref, meta, detail=detail, self_=self_, with_user=with_user)
        for ref in refs
    )
    return [item for item in packed if item is not None]
