"""Emoji list router."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from campra.core.deps import get_container, get_db
from campra.repositories import emojis
from campra.repositories.refs import Loaded
from campra.schemas.emoji import EmojiPacked
from campra.services import meta_service

router = APIRouter(prefix="/api", tags=["emojis"])


@router.post("/emojis", response_model=list[EmojiPacked])
def list_emojis(db: Session = Depends(get_db), services=Depends(get_container)):
    """Local custom emojis, ordered by category then name."""
    meta = meta_service.fetch_meta(db)
    return emojis.pack_many(
        db,
        [Loaded(emoji) for emoji in emojis.list_local(db)],
        meta,
        expires=services.settings.SIGNED_URL_EXPIRES_SECONDS,
    )
