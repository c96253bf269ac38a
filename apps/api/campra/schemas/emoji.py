"""Emoji and decoration schemas."""

from pydantic import Field

from campra.schemas.common import CampraModel
from campra.utils.ids import CampraId


class EmojiPacked(CampraModel):
    id: str
    aliases: list[str]
    name: str
    category: str | None
    host: str | None
    url: str


class DecorationPacked(EmojiPacked):
    is_plus: bool
    is_mplus: bool = Field(alias="isMPlus")
    # User id credited for the artwork
    credit: str | None


class EmojiImportZipRequest(CampraModel):
    """Body of POST /api/admin/emoji/import-zip."""

    file_id: CampraId
