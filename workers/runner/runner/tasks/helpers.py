"""Shared helpers for worker tasks."""

from __future__ import annotations

import json
from datetime import datetime
from collections.abc import Callable
from typing import Any
from uuid import UUID

import structlog
from app.db import models
from redis import Redis
from redis.exceptions import RedisError
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session

from runner.config import settings

QUEUE_PROGRESS_PREFIX = "lesson_builder:progress"

logger = structlog.get_logger()


def open_session() -> Session:
    """Open a database session using the worker settings."""
    engine = create_engine(settings.database_url)
    return Session(engine)


def load_job(db: Session, job_id: str) -> models.Job | None:
    """Fetch a job row by its string id."""
    return db.execute(
        select(models.Job).where(models.Job.id == UUID(job_id))
    ).scalar_one_or_none()


def publish_progress(
    job_id: str,
    progress: int,
    step: str,
    status: str | None = None,
) -> None:
    """Publish progress updates to Redis for streaming clients.

    Progress is advisory, so an unreachable Redis is logged and ignored.
    """
    payload = json.dumps({"progress": progress, "step": step, "status": status})
    try:
        client = Redis.from_url(settings.redis_url)
        client.publish(f"{QUEUE_PROGRESS_PREFIX}:{job_id}", payload)
    except RedisError as exc:
        logger.warning("progress_publish_failed", job_id=job_id, error=str(exc))


def record_job_event(
    db: Session,
    job: models.Job,
    *,
    level: str,
    message: str,
    step: str | None,
    progress: int | None,
    details: dict | None = None,
) -> None:
    """Persist an append-only event entry for a job."""
    db.add(
        models.JobEvent(
            job_id=job.id,
            level=level,
            message=message,
            step=step,
            progress=progress,
            details_json=details,
        )
    )


def update_job_progress(
    db: Session,
    job: models.Job,
    progress: int,
    step: str,
    status: str | None = None,
    *,
    event_message: str | None = None,
    event_level: str = "info",
    event_details: dict | None = None,
) -> None:
    """Persist job progress to the database and publish updates."""
    job.progress = progress
    job.current_step = step
    if status:
        job.status = status
        if status in {"completed", "failed"}:
            job.finished_at = datetime.utcnow()
    record_job_event(
        db,
        job,
        level=event_level,
        message=event_message or step,
        step=step,
        progress=progress,
        details=event_details,
    )
    db.commit()
    publish_progress(str(job.id), progress, step, job.status)


def run_job(
    job_id: str,
    job_type: str,
    label: str,
    work: Callable[[Session, dict[str, Any]], dict[str, Any]],
) -> dict[str, Any]:
    """Run a batch job and record its lifecycle.

    Args:
        job_id: Job to run
        job_type: Expected job type
        label: Event name prefix for logs
        work: Callable taking (db, options) and returning a summary dict

    Returns:
        The summary produced by ``work``

    Raises:
        ValueError: If the job does not exist or has another type
        Exception: Whatever ``work`` raised, after the job is marked failed
    """
    logger.info(f"{label}_started", job_id=job_id)

    with open_session() as db:
        job = load_job(db, job_id)
        if not job:
            raise ValueError(f"Job not found: {job_id}")

        try:
            if job.job_type != job_type:
                raise ValueError(f"Unexpected job type: {job.job_type}")

            update_job_progress(db, job, 10, "Selecting lessons", status="running")
            summary = work(db, job.options_json or {})

            job.result_json = summary
            update_job_progress(
                db,
                job,
                100,
                "Complete",
                status="completed",
                event_details=summary,
            )
            logger.info(f"{label}_completed", job_id=job_id, **_log_counts(summary))
            return summary
        except Exception as exc:
            db.rollback()
            job.error_message = str(exc)
            update_job_progress(
                db,
                job,
                100,
                "Failed",
                status="failed",
                event_message=f"Job failed: {exc}",
                event_level="error",
            )
            logger.exception(f"{label}_failed", job_id=job_id, error=str(exc))
            raise


def _log_counts(summary: dict[str, Any]) -> dict[str, Any]:
    """Pick the scalar fields of a summary for a log line."""
    return {k: v for k, v in summary.items() if isinstance(v, (int, bool))}
