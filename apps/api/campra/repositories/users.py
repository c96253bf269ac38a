from sqlalchemy.orm import Session

from campra.db.models import User
from campra.repositories.refs import Ref, resolve
from campra.schemas.user import UserLite


def pack_lite(db: Session, ref: Ref) -> UserLite:
    user = resolve(db, User, ref)
    return UserLite(
        id=user.id,
        name=user.name,
        username=user.username,
        host=user.host,
        is_teacher=user.is_teacher,
        is_admin=user.is_admin,
        is_moderator=user.is_moderator,
    )
