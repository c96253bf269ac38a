"""Background job rows: scheduling, claiming, and the retry state machine."""

from datetime import datetime, timedelta, timezone

from sqlalchemy import update
from sqlalchemy.orm import Session

from campra.db.enums import JobStatus, JobType
from campra.db.models import Job

RETRY_BASE_SECONDS = 30
RETRY_MAX_SECONDS = 15 * 60


def _now() -> datetime:
    return datetime.now(timezone.utc)


def retry_delay(attempts: int) -> timedelta:
    """Delay before the next attempt; doubles per failure up to a cap."""
    seconds = RETRY_BASE_SECONDS * 2 ** max(attempts - 1, 0)
    return timedelta(seconds=min(seconds, RETRY_MAX_SECONDS))


def schedule_job(
    db: Session,
    job_type: JobType,
    payload: dict,
    run_at: datetime | None = None,
    idempotency_key: str | None = None,
    max_attempts: int = 3,
) -> Job:
    """
    Queue a job for the worker.

    Without `run_at` the job is due immediately. A repeated
    `idempotency_key` violates the unique index and raises IntegrityError;
    callers that may enqueue twice should catch it.
    """
    job = Job(
        job_type=job_type.value,
        payload=payload,
        run_at=run_at or _now(),
        status=JobStatus.PENDING.value,
        max_attempts=max_attempts,
        idempotency_key=idempotency_key,
    )
    db.add(job)
    db.commit()
    db.refresh(job)
    return job


def get_pending_jobs(db: Session, limit: int = 10) -> list[Job]:
    """
    Due pending jobs, oldest `run_at` first.

    On PostgreSQL rows already locked by another worker's poll are skipped.
    Selection alone does not reserve a job; callers must `claim_job` it.
    """
    query = (
        db.query(Job)
        .filter(Job.status == JobStatus.PENDING.value, Job.run_at <= _now())
        .order_by(Job.run_at)
        .limit(limit)
    )
    if db.get_bind().dialect.name == "postgresql":
        query = query.with_for_update(skip_locked=True)
    return query.all()


def claim_job(db: Session, job: Job) -> bool:
    """
    Move a pending job to running and count the attempt, atomically.

    Returns False when another worker got there first; the job must then
    be left alone.
    """
    result = db.execute(
        update(Job)
        .where(Job.id == job.id, Job.status == JobStatus.PENDING.value)
        .values(status=JobStatus.RUNNING.value, attempts=Job.attempts + 1)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    if result.rowcount != 1:
        return False
    db.refresh(job)
    return True


def mark_job_completed(db: Session, job: Job) -> Job:
    job.status = JobStatus.COMPLETED.value
    job.completed_at = _now()
    job.last_error = None
    db.commit()
    db.refresh(job)
    return job


def mark_job_failed(db: Session, job: Job, error: str) -> Job:
    """
    Record a failed attempt.

    While attempts remain the job goes back to pending with `run_at` pushed
    out by `retry_delay`; after the last attempt it stays failed.
    """
    job.last_error = error
    if job.attempts < job.max_attempts:
        job.status = JobStatus.PENDING.value
        job.run_at = _now() + retry_delay(job.attempts)
    else:
        job.status = JobStatus.FAILED.value
    db.commit()
    db.refresh(job)
    return job
