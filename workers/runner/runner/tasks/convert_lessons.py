"""Task for converting legacy lesson markup into stored blocks."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any
from uuid import UUID

import structlog
from app.db import models
from lesson_builder_core.config import ConverterConfig
from lesson_builder_core.converter import convert_legacy_markup
from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import Session

from runner.config import settings
from runner.tasks.helpers import run_job

logger = structlog.get_logger()

JOB_TYPE = "lesson_conversion"
SAVED_BY = "lesson-conversion"


@dataclass
class ConversionOptions:
    """Which lessons to convert and whether to write anything."""

    dry_run: bool = False
    lesson_id: UUID | None = None
    module_id: str | None = None
    limit: int | None = None
    force: bool = False

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> ConversionOptions:
        lesson_id = data.get("lesson_id")
        return cls(
            dry_run=bool(data.get("dry_run", False)),
            lesson_id=UUID(str(lesson_id)) if lesson_id else None,
            module_id=data.get("module_id") or None,
            limit=data.get("limit") or None,
            force=bool(data.get("force", False)),
        )


@dataclass
class ConversionSummary:
    """Outcome counts for one conversion run."""

    dry_run: bool = False
    processed: int = 0
    converted: int = 0
    skipped: int = 0
    errors: int = 0
    total_blocks: int = 0
    lessons: list[dict[str, Any]] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


def select_lessons(db: Session, options: ConversionOptions) -> list[models.Lesson]:
    """Select lessons with legacy markup, oldest modules first.

    Already migrated lessons are left out unless ``force`` is set.
    """
    query = select(models.Lesson).where(
        models.Lesson.content.is_not(None),
        func.length(func.trim(models.Lesson.content)) > 0,
    )
    if not options.force:
        query = query.where(
            or_(
                models.Lesson.content_migrated.is_(None),
                models.Lesson.content_migrated.is_(False),
            )
        )
    if options.lesson_id:
        query = query.where(models.Lesson.id == options.lesson_id)
    if options.module_id:
        query = query.where(models.Lesson.module_id == options.module_id)

    query = query.order_by(models.Lesson.module_id, models.Lesson.order_index)
    if options.limit:
        query = query.limit(options.limit)
    return list(db.execute(query).scalars().all())


def _replace_blocks(db: Session, lesson: models.Lesson, payloads: list[dict]) -> None:
    """Swap a lesson's blocks for converted ones and snapshot the result."""
    db.execute(
        delete(models.LessonBlock).where(models.LessonBlock.lesson_id == lesson.id)
    )
    for payload in payloads:
        db.add(
            models.LessonBlock(
                id=payload["id"],
                lesson_id=lesson.id,
                block_type=payload["block_type"],
                content=payload["content"],
                style=payload["style"],
                order_index=payload["order_index"],
            )
        )

    version_count = db.execute(
        select(func.count(models.LessonVersion.id)).where(
            models.LessonVersion.lesson_id == lesson.id
        )
    ).scalar_one()
    db.add(
        models.LessonVersion(
            lesson_id=lesson.id,
            version_number=version_count + 1,
            blocks_snapshot=payloads,
            saved_by=SAVED_BY,
        )
    )
    lesson.content_migrated = True


def convert_lessons(
    db: Session,
    options: ConversionOptions,
    config: ConverterConfig | None = None,
) -> ConversionSummary:
    """Convert legacy markup for every selected lesson.

    Each lesson commits on its own, so one bad lesson never undoes the others.
    The legacy markup itself is never modified.

    Args:
        db: Database session
        options: Selection and dry-run options
        config: Converter options; defaults follow the worker settings

    Returns:
        ConversionSummary with per-lesson outcomes
    """
    config = config or ConverterConfig(standalone_headings=settings.standalone_headings)
    summary = ConversionSummary(dry_run=options.dry_run)
    lessons = select_lessons(db, options)
    logger.info(
        "conversion_selected",
        lessons=len(lessons),
        dry_run=options.dry_run,
        force=options.force,
    )

    for lesson in lessons:
        summary.processed += 1
        lesson_id = str(lesson.id)
        markup = (lesson.content or "").strip()
        if not markup:
            summary.skipped += 1
            continue

        try:
            result = convert_legacy_markup(markup, config)
            payloads = [block.to_payload() for block in result.blocks]
            if not options.dry_run:
                _replace_blocks(db, lesson, payloads)
                db.commit()
        except Exception as exc:
            db.rollback()
            summary.errors += 1
            summary.lessons.append({"lesson_id": lesson_id, "error": str(exc)})
            logger.warning("lesson_conversion_failed", lesson_id=lesson_id, error=str(exc))
            continue

        summary.converted += 1
        summary.total_blocks += len(payloads)
        summary.lessons.append(
            {
                "lesson_id": lesson_id,
                "blocks": len(payloads),
                "block_types": [p["block_type"] for p in payloads],
                "used_fallback": result.used_fallback,
                "warnings": result.warnings,
            }
        )
        logger.info(
            "lesson_converted",
            lesson_id=lesson_id,
            blocks=len(payloads),
            dry_run=options.dry_run,
        )

    return summary


def run_conversion_job(job_id: str) -> dict[str, Any]:
    """Run a queued legacy conversion job."""
    return run_job(
        job_id,
        JOB_TYPE,
        "lesson_conversion",
        lambda db, options: convert_lessons(
            db, ConversionOptions.from_json(options)
        ).as_dict(),
    )
