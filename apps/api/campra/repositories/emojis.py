"""Custom emoji packs.

Stored URLs in object storage carry signatures that expire, so `url` is
re-signed on every pack when object storage is enabled.
"""

from sqlalchemy.orm import Session

from campra.db.models import Emoji, Meta
from campra.repositories.refs import Ref, resolve
from campra.schemas.emoji import EmojiPacked
from campra.services.signed_url import DEFAULT_EXPIRES_SECONDS, resign_stored_url


def display_url(meta: Meta, public_url: str | None, original_url: str, expires: int) -> str:
    # publicUrl falls back to originalUrl for rows imported before publicUrl existed
    url = public_url or original_url
    return resign_stored_url(meta, url, expires) or url


def pack(db: Session, ref: Ref, meta: Meta, *, expires: int = DEFAULT_EXPIRES_SECONDS) -> EmojiPacked:
    emoji = resolve(db, Emoji, ref)
    return EmojiPacked(
        id=emoji.id,
        aliases=list(emoji.aliases or []),
        name=emoji.name,
        category=emoji.category,
        host=emoji.host,
        url=display_url(meta, emoji.public_url, emoji.original_url, expires),
    )


def pack_many(
    db: Session, refs: list[Ref], meta: Meta, *, expires: int = DEFAULT_EXPIRES_SECONDS
) -> list[EmojiPacked]:
    return [pack(db, ref, meta, expires=expires) for ref in refs]


def list_local(db: Session) -> list[Emoji]:
    """Local emojis ordered for the picker (category, then name)."""
    return (
        db.query(Emoji)
        .filter(Emoji.host.is_(None))
        .order_by(Emoji.category, Emoji.name)
        .all()
    )
