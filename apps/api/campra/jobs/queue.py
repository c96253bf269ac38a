"""In-process job queue polling the job table."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session, sessionmaker

from campra.core.structured_logging import build_log_context
from campra.jobs.registry import resolve_job_handler
from campra.services import job_service

if TYPE_CHECKING:
    from campra.boot.container import ServiceContainer

logger = logging.getLogger(__name__)


class JobQueue:
    """
    Polls for pending jobs and runs their handlers on the server's event loop.

    Each poll opens a fresh session. Every worker process runs its own queue,
    so a job only runs once its row has been claimed. A failing job is
    recorded (and retried until it runs out of attempts); the loop itself
    keeps going. Handlers share the loop with HTTP requests, so blocking
    work inside them goes through the threadpool.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        services: "ServiceContainer",
        *,
        poll_interval: float = 5.0,
        batch_size: int = 10,
        worker_id: int | str | None = None,
    ):
        self.session_factory = session_factory
        self.services = services
        self.poll_interval = poll_interval
        self.batch_size = batch_size
        self.worker_id = worker_id
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        """Launch the polling loop and return without waiting for it."""
        if self.running:
            return self._task
        logger.info(
            "Job queue starting (poll interval: %ss, batch size: %s)",
            self.poll_interval,
            self.batch_size,
            extra=build_log_context(worker_id=self.worker_id),
        )
        self._task = asyncio.create_task(self._loop(), name="campra-job-queue")
        return self._task

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Job queue stopped")

    async def _loop(self) -> None:
        while True:
            try:
                await self.run_once()
            except Exception:
                logger.exception("Error in job queue loop")
            await asyncio.sleep(self.poll_interval)

    async def run_once(self) -> int:
        """Process one batch of due jobs; returns how many were attempted."""
        with self.session_factory() as db:
            jobs = job_service.get_pending_jobs(db, limit=self.batch_size)
            if jobs:
                logger.info("Found %s pending jobs", len(jobs))

            for job in jobs:
                await self._process(db, job)
            return len(jobs)

    async def _process(self, db: Session, job) -> None:
        context = build_log_context(job_id=job.id, worker_id=self.worker_id)
        if not job_service.claim_job(db, job):
            logger.info("Job %s already claimed by another worker", job.id, extra=context)
            return

        try:
            logger.info(
                "Processing job %s (type=%s, attempt=%s)",
                job.id,
                job.job_type,
                job.attempts,
                extra=context,
            )
            handler = resolve_job_handler(job.job_type)
            await handler(db, job, self.services)
            job_service.mark_job_completed(db, job)
            logger.info("Job %s completed successfully", job.id, extra=context)
        except Exception as exc:
            db.rollback()
            job_service.mark_job_failed(db, job, f"{type(exc).__name__}: {exc}")
            logger.error("Job %s failed: %s", job.id, type(exc).__name__, extra=context)
