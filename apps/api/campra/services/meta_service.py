"""Instance meta (singleton settings row)."""

import logging

from sqlalchemy.orm import Session

from campra.db.enums import META_SINGLETON_ID
from campra.db.models import Meta

logger = logging.getLogger(__name__)


def fetch_meta(db: Session) -> Meta:
    """Return the meta row, creating it with defaults on first use."""
    meta = db.get(Meta, META_SINGLETON_ID)
    if meta is not None:
        return meta

    meta = Meta(id=META_SINGLETON_ID)
    db.add(meta)
    db.commit()
    db.refresh(meta)
    logger.info("Created default instance meta")
    return meta
