"""Release notes fetched from the upstream release feed."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from campra.core.structured_logging import safe_url
from campra.services.http_service import build_async_client, request_with_retries

logger = logging.getLogger(__name__)


class ReleaseFetchError(RuntimeError):
    """Raised when the release feed cannot be fetched or decoded."""


async def fetch_release(
    url: str,
    *,
    timeout: float,
    max_attempts: int = 3,
    transport: httpx.AsyncBaseTransport | None = None,
) -> Any:
    """Return the release feed JSON exactly as published upstream."""
    async with build_async_client(timeout=timeout, transport=transport) as client:
        try:
            response = await request_with_retries(
                lambda: client.get(url, headers={"Accept": "application/json"}),
                max_attempts=max_attempts,
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as exc:
            logger.warning("Release feed request failed: %s (%s)", safe_url(url), type(exc).__name__)
            raise ReleaseFetchError("Failed to fetch release feed") from exc
        except ValueError as exc:
            logger.warning("Release feed returned invalid JSON: %s", safe_url(url))
            raise ReleaseFetchError("Release feed returned invalid JSON") from exc
