"""Main worker process that consumes jobs from Redis queue."""

import json
import logging
import signal
import sys
from collections.abc import Callable
from datetime import datetime
from typing import Any, NoReturn

import structlog
from redis import Redis

from runner.config import settings
from runner.tasks.convert_lessons import run_conversion_job
from runner.tasks.helpers import load_job, open_session, record_job_event
from runner.tasks.rollback_conversion import run_rollback_job

logger = structlog.get_logger()

QUEUE_NAME = "lesson_builder:jobs"

JOB_HANDLERS: dict[str, Callable[[str], dict[str, Any]]] = {
    "lesson_conversion": run_conversion_job,
    "conversion_rollback": run_rollback_job,
}


def create_redis_connection() -> Redis:
    """Create Redis connection from settings."""
    return Redis.from_url(settings.redis_url)


def dequeue_task(redis_conn: Redis, timeout: int = 5) -> dict[str, Any] | None:
    """Block until a task payload is available or timeout occurs."""
    result = redis_conn.blpop(QUEUE_NAME, timeout=timeout)
    if not result:
        return None
    _, data = result
    try:
        payload = json.loads(data)
    except json.JSONDecodeError:
        logger.warning("invalid_task_payload", payload=data)
        return None
    if not isinstance(payload, dict):
        logger.warning("unexpected_task_payload", payload=payload)
        return None
    return payload


def _dispatch_job(job_id: str) -> None:
    """Dispatch a job based on its job_type."""
    with open_session() as db:
        job = load_job(db, job_id)
        if not job:
            logger.warning("job_not_found", job_id=job_id)
            return

        if job.status != "pending":
            logger.info("job_skipped", job_id=job_id, status=job.status)
            record_job_event(
                db,
                job,
                level="info",
                message=f"Job skipped (status={job.status})",
                step=job.current_step,
                progress=job.progress,
                details={
                    "skipped_at": datetime.utcnow().isoformat(),
                    "status": job.status,
                },
            )
            db.commit()
            return

        job_type = job.job_type

    handler = JOB_HANDLERS.get(job_type)
    if handler is None:
        logger.warning("unknown_job_type", job_id=job_id, job_type=job_type)
        return
    handler(job_id)


def handle_task(payload: dict[str, Any]) -> None:
    """Dispatch a task payload to the correct handler."""
    if payload.get("kind") != "job":
        logger.warning("unknown_task_kind", payload=payload)
        return

    job_id = payload.get("job_id")
    if not isinstance(job_id, str):
        logger.warning("missing_job_id", payload=payload)
        return
    _dispatch_job(job_id)


def configure_logging() -> None:
    """Filter structlog output by the configured level."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(level))


def handle_shutdown(signum: int, frame) -> NoReturn:
    """Handle shutdown signals gracefully."""
    logger.info("received_shutdown_signal", signal=signum)
    sys.exit(0)


def main() -> None:
    """Main entry point for the worker."""
    configure_logging()
    signal.signal(signal.SIGTERM, handle_shutdown)
    signal.signal(signal.SIGINT, handle_shutdown)

    logger.info(
        "starting_worker",
        worker_id=settings.worker_id,
        redis_url=settings.redis_url,
        log_level=settings.log_level,
        queue=QUEUE_NAME,
    )

    redis_conn = create_redis_connection()
    logger.info("worker_ready")

    while True:
        payload = dequeue_task(redis_conn, timeout=settings.dequeue_timeout)
        if not payload:
            continue

        try:
            logger.info("task_received", kind=payload.get("kind"))
            handle_task(payload)
        except Exception as exc:
            # A failing task must not stop the worker; the task marks its job failed.
            logger.exception("task_failed", error=str(exc))


if __name__ == "__main__":
    main()
