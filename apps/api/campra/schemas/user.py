"""User schemas."""

from campra.schemas.common import CampraModel


class UserLite(CampraModel):
    """Embedded user representation."""

    id: str
    name: str | None
    username: str
    host: str | None
    is_teacher: bool
    is_admin: bool
    is_moderator: bool
