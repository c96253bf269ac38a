"""FastAPI dependencies for authentication, authorization, and database access."""

from __future__ import annotations

from typing import TYPE_CHECKING, Generator

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from campra.db.models import User

if TYPE_CHECKING:
    from campra.boot.container import ServiceContainer

BEARER_PREFIX = "bearer "


def get_container(request: Request) -> "ServiceContainer":
    """The per-process service container attached by `create_app`."""
    return request.app.state.services


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = get_container(request).session_factory()
    try:
        yield db
    finally:
        db.close()


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    if not header.lower().startswith(BEARER_PREFIX):
        return None
    return header[len(BEARER_PREFIX):].strip() or None


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """
    Resolve the local user owning the bearer token.

    Raises:
        HTTPException 401: missing or unknown credential
    """
    token = _bearer_token(request)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user = db.query(User).filter(User.token == token, User.host.is_(None)).first()
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credential")
    return user


def require_moderator(user: User = Depends(get_current_user)) -> User:
    """Allow moderators and admins only."""
    if not user.can_moderate:
        raise HTTPException(status_code=403, detail="Moderator access required")
    return user
