"""Drive schemas."""

from typing import Any

from campra.schemas.common import CampraModel
from campra.schemas.user import UserLite
from campra.utils.ids import CampraId


class DriveFolderPacked(CampraModel):
    id: str
    created_at: str
    name: str
    parent_id: str | None


class DriveFilePacked(CampraModel):
    id: str
    created_at: str
    name: str
    type: str
    md5: str
    size: int
    is_sensitive: bool
    blurhash: str | None
    properties: dict[str, Any]
    url: str | None
    thumbnail_url: str | None
    comment: str | None
    folder_id: str | None
    folder: DriveFolderPacked | None = None
    user_id: str | None = None
    user: UserLite | None = None


class DriveFileShowRequest(CampraModel):
    file_id: CampraId
