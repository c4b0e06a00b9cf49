"""Shared fixtures for worker task tests."""

from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
from app.db import models
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from runner.config import settings
from runner.tasks import helpers

LEGACY_MARKUP = "<h2>Intro</h2><p>Hello</p><hr/><p>Bye</p>"


@pytest.fixture
def database_url(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    """Point the worker at a fresh SQLite file with all tables created."""
    url = f"sqlite:///{tmp_path / 'worker.db'}"
    monkeypatch.setattr(settings, "database_url", url)
    engine = create_engine(url)
    models.Base.metadata.create_all(engine)
    engine.dispose()
    return url


@pytest.fixture
def db(database_url: str) -> Generator[Session, None, None]:
    """Session on the worker database."""
    engine = create_engine(database_url)
    with Session(engine) as session:
        yield session
    engine.dispose()


@pytest.fixture
def published(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, Any]]:
    """Record progress messages instead of publishing to Redis."""
    messages: list[dict[str, Any]] = []

    def fake_publish(job_id: str, progress: int, step: str, status: str | None = None) -> None:
        messages.append(
            {"job_id": job_id, "progress": progress, "step": step, "status": status}
        )

    monkeypatch.setattr(helpers, "publish_progress", fake_publish)
    return messages


@pytest.fixture
def add_lesson(db: Session) -> Callable[..., models.Lesson]:
    """Factory inserting committed lessons."""

    def create(**fields: Any) -> models.Lesson:
        values = {"title": "Lesson", "module_id": "m1", "content": LEGACY_MARKUP, **fields}
        lesson = models.Lesson(**values)
        db.add(lesson)
        db.commit()
        return lesson

    return create
