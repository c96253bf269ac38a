"""Per-process service wiring."""

from __future__ import annotations

from dataclasses import dataclass, field

import httpx
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from campra.core.config import Settings
from campra.db.session import create_db_engine, create_session_factory
from campra.jobs.queue import JobQueue
from campra.services.content_auto_moderator import ContentAutoModerator
from campra.services.drive_service import DriveStorage


@dataclass
class ServiceContainer:
    """
    Everything a worker process shares between the HTTP app and the job queue.

    Built once per process by `build_container`; nothing here is a module
    global, so tests can build as many isolated containers as they need.
    """

    settings: Settings
    engine: Engine
    session_factory: sessionmaker[Session]
    moderator: ContentAutoModerator
    storage: DriveStorage
    # Outbound HTTP transport override (tests inject httpx.MockTransport)
    http_transport: httpx.AsyncBaseTransport | None = None
    queue: JobQueue | None = field(default=None, init=False)

    def close(self) -> None:
        self.engine.dispose()


def build_container(
    settings: Settings,
    *,
    engine: Engine | None = None,
    http_transport: httpx.AsyncBaseTransport | None = None,
    worker_id: int | str | None = None,
) -> ServiceContainer:
    engine = engine or create_db_engine(settings.DATABASE_URL)
    container = ServiceContainer(
        settings=settings,
        engine=engine,
        session_factory=create_session_factory(engine),
        moderator=ContentAutoModerator(settings, transport=http_transport),
        storage=DriveStorage(settings),
        http_transport=http_transport,
    )
    container.queue = JobQueue(
        container.session_factory,
        container,
        poll_interval=settings.WORKER_POLL_INTERVAL,
        batch_size=settings.WORKER_BATCH_SIZE,
        worker_id=worker_id,
    )
    return container
