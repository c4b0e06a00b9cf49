"""Shared fixtures for API tests.

The app reads its settings at import time, so the database URL is pointed at a
temporary SQLite file before anything from ``app`` is imported.
"""

import os
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

DB_PATH = Path(tempfile.mkdtemp(prefix="lesson-builder-api-")) / "api.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{DB_PATH}"
os.environ["DEBUG"] = "false"
os.environ["ADMIN_EMAILS"] = "[]"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from app.main import app  # noqa: E402
from app.routers import jobs as jobs_router  # noqa: E402
from app.settings import settings  # noqa: E402


@pytest.fixture(scope="session")
def client() -> Generator[TestClient, None, None]:
    """One client for the whole run so the async engine stays on one loop."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def sync_db(client: TestClient) -> Generator[Session, None, None]:
    """Plain SQLite session for seeding rows the API has no endpoint for."""
    engine = create_engine(f"sqlite:///{DB_PATH}")
    with Session(engine) as session:
        yield session
    engine.dispose()


@pytest.fixture
def enqueued(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    """Capture queued job ids instead of talking to Redis."""
    calls: list[str] = []

    async def fake_enqueue(job_id: str) -> None:
        calls.append(job_id)

    monkeypatch.setattr(jobs_router, "enqueue_job", fake_enqueue)
    return calls


@pytest.fixture
def admins(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    """Leave local mode: only the listed email may edit."""
    emails = ["editor@example.com"]
    monkeypatch.setattr(settings, "admin_emails", emails)
    return emails


@pytest.fixture
def make_lesson(client: TestClient) -> Callable[..., dict[str, Any]]:
    """Factory creating lessons through the API."""

    def create(**fields: Any) -> dict[str, Any]:
        body = {"title": "Fractions", "module_id": "module-a", **fields}
        response = client.post("/api/v1/lessons", json=body)
        assert response.status_code == 201, response.text
        return response.json()

    return create
