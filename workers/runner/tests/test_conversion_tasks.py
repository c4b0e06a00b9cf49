"""Tests for the legacy conversion and rollback tasks."""

import importlib

import pytest
from app.db import models
from sqlalchemy import select
from sqlalchemy.orm import Session

from runner import worker
from runner.tasks.convert_lessons import (
    ConversionOptions,
    convert_lessons,
    run_conversion_job,
)
from runner.tasks.rollback_conversion import RollbackOptions, rollback_conversion

# The package re-exports the convert_lessons function, shadowing the submodule.
convert_module = importlib.import_module("runner.tasks.convert_lessons")

MARKUP = "<h2>Intro</h2><p>Hello</p><hr/><p>Bye</p>"


def stored_blocks(db: Session, lesson: models.Lesson) -> list[models.LessonBlock]:
    db.expire_all()
    return list(
        db.execute(
            select(models.LessonBlock)
            .where(models.LessonBlock.lesson_id == lesson.id)
            .order_by(models.LessonBlock.order_index)
        )
        .scalars()
        .all()
    )


class TestConvertLessons:
    """Tests for converting stored legacy markup."""

    def test_dry_run_writes_nothing(self, db: Session, add_lesson) -> None:
        """Test that a dry run reports blocks without storing them."""
        lesson = add_lesson()

        summary = convert_lessons(db, ConversionOptions(dry_run=True))

        assert summary.converted == 1
        assert summary.total_blocks == 4
        assert summary.lessons[0]["block_types"] == ["text", "text", "divider", "text"]
        assert stored_blocks(db, lesson) == []
        assert lesson.content_migrated is False

    def test_live_run(self, db: Session, add_lesson) -> None:
        """Test that blocks are stored in order and the lesson is marked."""
        lesson = add_lesson()

        summary = convert_lessons(db, ConversionOptions())

        blocks = stored_blocks(db, lesson)
        assert [b.block_type for b in blocks] == ["text", "text", "divider", "text"]
        assert [b.order_index for b in blocks] == [0, 1, 2, 3]
        assert lesson.content_migrated is True
        assert lesson.content == MARKUP
        assert summary.as_dict()["converted"] == 1

        versions = db.execute(select(models.LessonVersion)).scalars().all()
        assert len(versions) == 1
        assert len(versions[0].blocks_snapshot) == 4

    def test_migrated_lessons_skipped_unless_forced(
        self, db: Session, add_lesson
    ) -> None:
        """Test the force option."""
        add_lesson()
        convert_lessons(db, ConversionOptions())

        assert convert_lessons(db, ConversionOptions()).processed == 0
        assert convert_lessons(db, ConversionOptions(force=True)).converted == 1

    def test_selection_filters(self, db: Session, add_lesson) -> None:
        """Test lesson, module and limit filters and empty markup."""
        target = add_lesson(module_id="m2")
        add_lesson(module_id="m1")
        add_lesson(module_id="m1")
        add_lesson(content=None)
        add_lesson(content="   ")

        assert convert_lessons(db, ConversionOptions(dry_run=True)).processed == 3
        only = convert_lessons(db, ConversionOptions(dry_run=True, lesson_id=target.id))
        assert [entry["lesson_id"] for entry in only.lessons] == [str(target.id)]
        assert convert_lessons(db, ConversionOptions(dry_run=True, module_id="m1")).processed == 2
        assert convert_lessons(db, ConversionOptions(dry_run=True, limit=1)).processed == 1

    def test_one_failure_does_not_stop_the_run(
        self, db: Session, add_lesson, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test per-lesson error isolation."""
        bad = add_lesson(content="<p>boom</p>", module_id="a")
        good = add_lesson(module_id="b")
        real_convert = convert_module.convert_legacy_markup

        def flaky(markup, config=None):
            if "boom" in markup:
                raise RuntimeError("parser exploded")
            return real_convert(markup, config)

        monkeypatch.setattr(convert_module, "convert_legacy_markup", flaky)
        summary = convert_lessons(db, ConversionOptions())

        assert summary.errors == 1
        assert summary.converted == 1
        assert stored_blocks(db, bad) == []
        assert bad.content_migrated is False
        assert len(stored_blocks(db, good)) == 4

    def test_options_from_job_json(self) -> None:
        """Test parsing stored job options."""
        options = ConversionOptions.from_json(
            {"dry_run": True, "lesson_id": None, "module_id": "", "limit": 3}
        )
        assert options == ConversionOptions(dry_run=True, limit=3)


class TestRollbackConversion:
    """Tests for undoing conversions."""

    def test_requires_scope(self, db: Session) -> None:
        """Test that a rollback must name its target."""
        with pytest.raises(ValueError):
            rollback_conversion(db, RollbackOptions())

    def test_rollback_restores_legacy_state(self, db: Session, add_lesson) -> None:
        """Test that blocks go away and the markup stays."""
        lesson = add_lesson()
        convert_lessons(db, ConversionOptions())

        preview = rollback_conversion(db, RollbackOptions(dry_run=True, all=True))
        assert preview.found == 1
        assert preview.lessons[0]["blocks"] == 4
        assert len(stored_blocks(db, lesson)) == 4

        summary = rollback_conversion(db, RollbackOptions(lesson_id=lesson.id))
        assert summary.rolled_back == 1
        assert summary.blocks_removed == 4
        assert stored_blocks(db, lesson) == []
        assert lesson.content_migrated is False
        assert lesson.content == MARKUP

        again = convert_lessons(db, ConversionOptions())
        assert again.converted == 1

    def test_module_scope(self, db: Session, add_lesson) -> None:
        """Test that only the named module is rolled back."""
        keep = add_lesson(module_id="keep")
        drop = add_lesson(module_id="drop")
        convert_lessons(db, ConversionOptions())

        rollback_conversion(db, RollbackOptions(module_id="drop"))

        assert len(stored_blocks(db, keep)) == 4
        assert stored_blocks(db, drop) == []


class TestConversionJobs:
    """Tests for running queued jobs."""

    def test_job_completes_with_summary(
        self, db: Session, add_lesson, published
    ) -> None:
        """Test the job lifecycle and recorded events."""
        add_lesson()
        job = models.Job(job_type="lesson_conversion", options_json={"dry_run": False})
        db.add(job)
        db.commit()

        summary = run_conversion_job(str(job.id))

        db.expire_all()
        assert summary["converted"] == 1
        assert job.status == "completed"
        assert job.progress == 100
        assert job.result_json["total_blocks"] == 4
        assert job.finished_at is not None
        assert [m["status"] for m in published] == ["running", "completed"]
        steps = [e.step for e in db.execute(select(models.JobEvent)).scalars()]
        assert steps == ["Selecting lessons", "Complete"]

    def test_job_failure_is_recorded(self, db: Session, published) -> None:
        """Test that a failing job is marked failed with an error event."""
        job = models.Job(job_type="conversion_rollback", options_json={})
        db.add(job)
        db.commit()

        with pytest.raises(ValueError):
            run_conversion_job(str(job.id))

        db.expire_all()
        assert job.status == "failed"
        assert "Unexpected job type" in job.error_message
        levels = [e.level for e in db.execute(select(models.JobEvent)).scalars()]
        assert levels == ["error"]

    def test_worker_dispatch(self, db: Session, add_lesson, published) -> None:
        """Test dispatching queue payloads by job type and status."""
        lesson = add_lesson()
        job = models.Job(job_type="lesson_conversion", options_json={})
        cancelled = models.Job(job_type="lesson_conversion", status="cancelled")
        db.add_all([job, cancelled])
        db.commit()

        worker.handle_task({"kind": "job", "job_id": str(cancelled.id)})
        assert stored_blocks(db, lesson) == []

        worker.handle_task({"kind": "job", "job_id": str(job.id)})
        assert len(stored_blocks(db, lesson)) == 4
        assert job.status == "completed"

        worker.handle_task({"kind": "export", "job_id": str(job.id)})
        worker.handle_task({"kind": "job"})
