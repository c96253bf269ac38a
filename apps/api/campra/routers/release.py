"""Release notes router."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request

from campra.core.config import settings
from campra.core.deps import get_container
from campra.core.rate_limit import limiter
from campra.services import release_service

router = APIRouter(prefix="/api", tags=["meta"])


@router.api_route("/release", methods=["GET", "POST"])
@limiter.limit(settings.RATE_LIMIT_RELEASE)
async def release(request: Request, services=Depends(get_container)) -> Any:
    """Upstream release feed, passed through unmodified."""
    config = services.settings
    try:
        return await release_service.fetch_release(
            config.RELEASE_URL,
            timeout=config.HTTP_TIMEOUT_SECONDS,
            max_attempts=config.HTTP_MAX_ATTEMPTS,
            transport=services.http_transport,
        )
    except release_service.ReleaseFetchError as exc:
        raise HTTPException(status_code=502, detail="Failed to fetch release notes") from exc
