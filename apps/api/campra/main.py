"""FastAPI application factory."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text

from campra.core.rate_limit import limiter
from campra.routers import (
    admin_emoji_router,
    drive_router,
    emojis_router,
    release_router,
    schools_router,
)

if TYPE_CHECKING:
    from campra.boot.container import ServiceContainer

logger = logging.getLogger(__name__)


def init_sentry(dsn: str, environment: str) -> None:
    """Optional error tracking for production."""
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=0.1,
        send_default_pii=False,
    )
    logger.info("Sentry initialized for error tracking")


def create_app(container: "ServiceContainer") -> FastAPI:
    """Build the API app around one process's service container."""
    settings = container.settings

    if settings.SENTRY_DSN and not settings.is_dev:
        init_sentry(settings.SENTRY_DSN, settings.ENV)

    app = FastAPI(
        title="Campra API",
        version=settings.VERSION,
        docs_url="/docs" if settings.is_dev else None,
        redoc_url="/redoc" if settings.is_dev else None,
    )
    app.state.services = container

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.include_router(admin_emoji_router)
    app.include_router(release_router)
    app.include_router(schools_router)
    app.include_router(emojis_router)
    app.include_router(drive_router)

    @app.get("/health")
    def health():
        """
        Health check endpoint.

        Verifies database connectivity and returns environment info.
        """
        with container.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return {"status": "ok", "env": settings.ENV, "version": settings.VERSION}

    return app
