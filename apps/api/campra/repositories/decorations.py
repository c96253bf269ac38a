from sqlalchemy.orm import Session

from campra.db.models import Decoration, Meta
from campra.repositories.emojis import display_url
from campra.repositories.refs import Ref, resolve
from campra.schemas.emoji import DecorationPacked
from campra.services.signed_url import DEFAULT_EXPIRES_SECONDS


def pack(db: Session, ref: Ref, meta: Meta, *, expires: int = DEFAULT_EXPIRES_SECONDS) -> DecorationPacked:
    decoration = resolve(db, Decoration, ref)
    return DecorationPacked(
        id=decoration.id,
        aliases=list(decoration.aliases or []),
        name=decoration.name,
        category=decoration.category,
        host=decoration.host,
        url=display_url(meta, decoration.public_url, decoration.original_url, expires),
        is_plus=decoration.is_plus,
        is_mplus=decoration.is_mplus,
        credit=decoration.credit,
    )


def pack_many(
    db: Session, refs: list[Ref], meta: Meta, *, expires: int = DEFAULT_EXPIRES_SECONDS
) -> list[DecorationPacked]:
    return [pack(db, ref, meta, expires=expires) for ref in refs]
