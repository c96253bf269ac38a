"""
Worker process bootstrap.

Startup order is fixed: database, content moderation, HTTP server, then the
job queue. Everything before the queue is awaited; the queue is started in
the background and does not hold up readiness. A worker spawned by the
master reports "ready" over its pipe once all of that is done.
"""

from __future__ import annotations

import asyncio
import logging
import os
import socket
from multiprocessing.connection import Connection

import uvicorn
from sqlalchemy import text

from campra.boot.container import ServiceContainer, build_container
from campra.core.config import Settings, settings as default_settings
from campra.core.migrations import ensure_migrations
from campra.core.structured_logging import build_log_context, configure_logging
from campra.main import create_app

logger = logging.getLogger(__name__)

READY_MESSAGE = "ready"
LISTEN_FAILED_MESSAGE = "listenFailed"
SERVER_START_POLL_SECONDS = 0.05


class WorkerStartupError(RuntimeError):
    """Raised when a worker cannot finish booting."""


async def init_db(container: ServiceContainer) -> None:
    """Check connectivity and bring the schema up to date (or warn)."""
    with container.engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    ensure_migrations(container.engine, container.settings.AUTO_MIGRATE)


async def init_moderation(container: ServiceContainer) -> None:
    with container.session_factory() as db:
        await container.moderator.initialize(db)


async def start_http_server(
    container: ServiceContainer, sock: socket.socket | None = None
) -> tuple[uvicorn.Server, asyncio.Task]:
    """Start uvicorn on the current loop and wait until it is accepting connections."""
    config = uvicorn.Config(
        create_app(container),
        host=container.settings.HOST,
        port=container.settings.PORT,
        log_config=None,
    )
    server = uvicorn.Server(config)
    task = asyncio.create_task(server.serve(sockets=[sock] if sock else None))

    while not server.started:
        if task.done():
            # serve() returned or raised before binding
            task.result()
            raise WorkerStartupError("HTTP server exited during startup")
        await asyncio.sleep(SERVER_START_POLL_SECONDS)

    return server, task


async def run_worker(
    container: ServiceContainer,
    *,
    ready_conn: Connection | None = None,
    sock: socket.socket | None = None,
) -> None:
    context = build_log_context(worker_id=os.getpid())

    await init_db(container)
    await init_moderation(container)

    try:
        server, server_task = await start_http_server(container, sock=sock)
    except BaseException:
        if ready_conn is not None:
            ready_conn.send(LISTEN_FAILED_MESSAGE)
        raise

    container.queue.start()

    if ready_conn is not None:
        ready_conn.send(READY_MESSAGE)
    logger.info("Worker ready", extra=context)

    try:
        await server_task
    finally:
        await container.queue.stop()


def worker_main(
    ready_conn: Connection | None = None,
    sock: socket.socket | None = None,
    settings: Settings | None = None,
) -> None:
    """Entry point for a worker process (or the whole server when clustering is off)."""
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    container = build_container(settings, worker_id=os.getpid())
    try:
        asyncio.run(run_worker(container, ready_conn=ready_conn, sock=sock))
    except KeyboardInterrupt:
        logger.info("Worker shutting down")
    except Exception:
        logger.exception(
            "Worker crashed",
            extra=build_log_context(worker_id=os.getpid(), route="worker", method="boot"),
        )
        raise
    finally:
        container.close()
        if ready_conn is not None:
            ready_conn.close()
