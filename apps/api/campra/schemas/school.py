"""School schemas."""

from campra.schemas.common import CampraModel
from campra.utils.ids import CampraId


class SchoolPacked(CampraModel):
    id: str
    name: str
    logo_url: str | None
    is_demo: bool


class SchoolShowRequest(CampraModel):
    school_id: CampraId
