"""Task for undoing legacy markup conversions."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any
from uuid import UUID

import structlog
from app.db import models
from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from runner.tasks.helpers import run_job

logger = structlog.get_logger()

JOB_TYPE = "conversion_rollback"


@dataclass
class RollbackOptions:
    """Which migrated lessons to roll back."""

    dry_run: bool = False
    lesson_id: UUID | None = None
    module_id: str | None = None
    all: bool = False

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> RollbackOptions:
        lesson_id = data.get("lesson_id")
        return cls(
            dry_run=bool(data.get("dry_run", False)),
            lesson_id=UUID(str(lesson_id)) if lesson_id else None,
            module_id=data.get("module_id") or None,
            all=bool(data.get("all", False)),
        )


@dataclass
class RollbackSummary:
    """Outcome counts for one rollback run."""

    dry_run: bool = False
    found: int = 0
    rolled_back: int = 0
    errors: int = 0
    blocks_removed: int = 0
    lessons: list[dict[str, Any]] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def rollback_conversion(db: Session, options: RollbackOptions) -> RollbackSummary:
    """Delete converted blocks and clear the migrated flag.

    The legacy markup stays on the lesson, so the next editor load converts
    it again.

    Args:
        db: Database session
        options: Selection and dry-run options

    Returns:
        RollbackSummary with per-lesson outcomes

    Raises:
        ValueError: If no lesson, module or ``all`` was given
    """
    if not (options.lesson_id or options.module_id or options.all):
        raise ValueError("Rollback needs lesson_id, module_id or all")

    query = select(models.Lesson).where(models.Lesson.content_migrated.is_(True))
    if options.lesson_id:
        query = query.where(models.Lesson.id == options.lesson_id)
    if options.module_id:
        query = query.where(models.Lesson.module_id == options.module_id)
    lessons = list(db.execute(query).scalars().all())

    summary = RollbackSummary(dry_run=options.dry_run, found=len(lessons))
    logger.info("rollback_selected", lessons=len(lessons), dry_run=options.dry_run)

    for lesson in lessons:
        lesson_id = str(lesson.id)
        block_count = db.execute(
            select(func.count(models.LessonBlock.id)).where(
                models.LessonBlock.lesson_id == lesson.id
            )
        ).scalar_one()
        if options.dry_run:
            summary.lessons.append({"lesson_id": lesson_id, "blocks": block_count})
            continue

        try:
            db.execute(
                delete(models.LessonBlock).where(
                    models.LessonBlock.lesson_id == lesson.id
                )
            )
            lesson.content_migrated = False
            db.commit()
        except Exception as exc:
            db.rollback()
            summary.errors += 1
            summary.lessons.append({"lesson_id": lesson_id, "error": str(exc)})
            logger.warning("lesson_rollback_failed", lesson_id=lesson_id, error=str(exc))
            continue

        summary.rolled_back += 1
        summary.blocks_removed += block_count
        summary.lessons.append({"lesson_id": lesson_id, "blocks": block_count})
        logger.info("lesson_rolled_back", lesson_id=lesson_id, blocks=block_count)

    return summary


def run_rollback_job(job_id: str) -> dict[str, Any]:
    """Run a queued conversion rollback job."""
    return run_job(
        job_id,
        JOB_TYPE,
        "conversion_rollback",
        lambda db, options: rollback_conversion(
            db, RollbackOptions.from_json(options)
        ).as_dict(),
    )
