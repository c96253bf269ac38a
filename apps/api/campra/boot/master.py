"""
Master process bootstrap.

The master verifies configuration and the database, binds the listening
socket once, and spawns worker processes that share it. Each worker must
report ready within WORKER_READY_TIMEOUT or the master gives up.
"""

from __future__ import annotations

import logging
import multiprocessing
import os
import platform
import socket
import time
from multiprocessing.connection import Connection
from multiprocessing.context import BaseContext
from multiprocessing.process import BaseProcess

from sqlalchemy import text

from campra.boot.worker import (
    LISTEN_FAILED_MESSAGE,
    READY_MESSAGE,
    WorkerStartupError,
    worker_main,
)
from campra.core.config import Settings, settings as default_settings
from campra.core.migrations import ensure_migrations
from campra.core.structured_logging import configure_logging, safe_url
from campra.db.session import create_db_engine

logger = logging.getLogger("campra.boot")

LISTEN_BACKLOG = 2048


def greet(settings: Settings) -> None:
    logger.info("Welcome to Campra!")
    logger.info("Campra v%s", settings.VERSION)
    logger.info(
        "--- %s (PID: %s) --- Python %s",
        platform.node(),
        os.getpid(),
        platform.python_version(),
    )
    if settings.is_dev:
        logger.warning("The environment is not in production mode.")
        logger.warning("DO NOT USE FOR PRODUCTION PURPOSE!")


def connect_db(settings: Settings) -> None:
    """Verify the database is reachable and migrations are in place."""
    logger.info("Connecting to database...")
    engine = create_db_engine(settings.DATABASE_URL)
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        status = ensure_migrations(engine, settings.AUTO_MIGRATE)
        logger.info(
            "Database connected (revision=%s)",
            ",".join(status.current_heads) or "none",
        )
    finally:
        engine.dispose()


def bind_socket(host: str, port: int) -> socket.socket:
    """Bind the shared listening socket workers will inherit."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    sock.bind((host, port))
    sock.listen(LISTEN_BACKLOG)
    sock.set_inheritable(True)
    return sock


def wait_for_ready(conn: Connection, timeout: float, *, worker_name: str) -> None:
    """Block until the worker sends "ready"; any other outcome is a startup failure."""
    if not conn.poll(timeout):
        raise WorkerStartupError(f"{worker_name} did not report ready within {timeout}s")
    try:
        message = conn.recv()
    except EOFError as exc:
        raise WorkerStartupError(f"{worker_name} exited before reporting ready") from exc

    if message == LISTEN_FAILED_MESSAGE:
        raise WorkerStartupError(f"{worker_name} failed to start its HTTP server")
    if message != READY_MESSAGE:
        raise WorkerStartupError(f"{worker_name} sent unexpected message {message!r}")


def start_worker(
    ctx: BaseContext,
    sock: socket.socket,
    settings: Settings,
    index: int,
) -> tuple[BaseProcess, Connection]:
    """Start one worker; returns it with the read end of its readiness pipe."""
    parent_conn, child_conn = ctx.Pipe(duplex=False)
    process = ctx.Process(
        target=worker_main,
        kwargs={"ready_conn": child_conn, "sock": sock, "settings": settings},
        name=f"campra-worker-{index}",
    )
    try:
        process.start()
    except BaseException:
        parent_conn.close()
        raise
    finally:
        # Only the child writes; closing our copy lets recv() see EOF if it dies.
        child_conn.close()
    return process, parent_conn


def spawn_workers(
    settings: Settings,
    sock: socket.socket,
    ctx: BaseContext | None = None,
) -> list[BaseProcess]:
    """Start every worker at once, then wait until all of them report ready."""
    ctx = ctx or multiprocessing.get_context("spawn")
    count = settings.cluster_size
    logger.info("Starting %s worker%s...", count, "" if count == 1 else "s")

    workers: list[BaseProcess] = []
    pipes: list[Connection] = []
    try:
        for index in range(count):
            process, conn = start_worker(ctx, sock, settings, index)
            workers.append(process)
            pipes.append(conn)

        deadline = time.monotonic() + settings.WORKER_READY_TIMEOUT
        for process, conn in zip(workers, pipes):
            remaining = max(0.0, deadline - time.monotonic())
            wait_for_ready(conn, remaining, worker_name=process.name)
    except BaseException:
        terminate_workers(workers)
        raise
    finally:
        for conn in pipes:
            conn.close()

    logger.info("All workers started")
    return workers


def terminate_workers(workers: list[BaseProcess]) -> None:
    for process in workers:
        if process.is_alive():
            process.terminate()
    for process in workers:
        process.join(timeout=10)


def master_main(settings: Settings | None = None) -> None:
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    try:
        greet(settings)
        connect_db(settings)
    except Exception:
        logger.exception("Fatal error occurred during initialization")
        raise

    logger.info("Campra initialized")

    if settings.DISABLE_CLUSTERING:
        logger.info("Clustering disabled, serving in-process on %s", safe_url(settings.URL))
        worker_main(settings=settings)
        return

    sock = bind_socket(settings.HOST, settings.PORT)
    workers: list[BaseProcess] = []
    try:
        workers = spawn_workers(settings, sock)
        logger.info("Now listening on port %s on %s", settings.PORT, safe_url(settings.URL))
        for process in workers:
            process.join()
    except KeyboardInterrupt:
        logger.info("Master shutting down")
    finally:
        terminate_workers(workers)
        sock.close()
