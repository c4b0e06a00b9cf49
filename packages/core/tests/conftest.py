"""Shared fixtures for the core test suite."""

import asyncio
import uuid
from typing import Any

import pytest

from lesson_builder_core.errors import LessonNotFoundError, ServiceError
from lesson_builder_core.schemas.blocks import Block
from lesson_builder_core.schemas.lessons import (
    LessonMeta,
    LessonStatus,
    LinkedContent,
    LinkedItem,
    QuestionCandidate,
)
from lesson_builder_core.schemas.templates import BlockTemplate, TemplateBlock
from lesson_builder_core.services.base import BaseLessonService


class FakeLessonService(BaseLessonService):
    """In-memory lesson service with switchable failures."""

    def __init__(self) -> None:
        self.lessons: dict[str, LessonMeta] = {}
        self.blocks: dict[str, list[dict[str, Any]]] = {}
        self.templates: dict[str, BlockTemplate] = {}
        self.questions: list[QuestionCandidate] = []
        self.linked = LinkedContent()
        self.save_calls: list[list[dict[str, Any]]] = []
        self.fail_saves = False
        self.fail_all = False
        self.save_gate: asyncio.Event | None = None

    def _check(self) -> None:
        if self.fail_all:
            raise ServiceError("service unavailable", status_code=503)

    async def get_lesson(self, lesson_id: str) -> LessonMeta:
        self._check()
        if lesson_id not in self.lessons:
            raise LessonNotFoundError(lesson_id)
        return self.lessons[lesson_id]

    async def get_blocks(self, lesson_id: str) -> list[Block]:
        self._check()
        return [Block.from_payload(p) for p in self.blocks.get(lesson_id, [])]

    async def save_blocks(self, lesson_id: str, blocks: list[dict[str, Any]]) -> int:
        self._check()
        self.save_calls.append(blocks)
        if self.save_gate is not None:
            await self.save_gate.wait()
        if self.fail_saves:
            raise ServiceError("save rejected", status_code=500)
        self.blocks[lesson_id] = blocks
        return len(blocks)

    async def set_status(self, lesson_id: str, status: LessonStatus) -> LessonMeta:
        self._check()
        meta = self.lessons[lesson_id].model_copy(update={"status": status})
        self.lessons[lesson_id] = meta
        return meta

    async def list_templates(self, category: str | None = None) -> list[BlockTemplate]:
        self._check()
        return [
            t for t in self.templates.values() if category is None or t.category == category
        ]

    async def create_template(
        self,
        name: str,
        description: str,
        category: str,
        blocks: list[TemplateBlock],
    ) -> BlockTemplate:
        self._check()
        template = BlockTemplate(
            id=uuid.uuid4().hex,
            name=name,
            description=description,
            category=category,
            blocks=[b.model_copy(deep=True) for b in blocks],
        )
        self.templates[template.id] = template
        return template

    async def update_template(self, template_id: str, **fields: Any) -> BlockTemplate:
        self._check()
        template = self.templates[template_id].model_copy(update=fields)
        self.templates[template_id] = template
        return template

    async def delete_template(self, template_id: str) -> None:
        self._check()
        template = self.templates.get(template_id)
        if template is None:
            raise ServiceError("Template not found", status_code=404)
        if template.is_builtin:
            raise ServiceError("Cannot delete built-in templates", status_code=403)
        del self.templates[template_id]

    async def list_question_candidates(self, lesson_id: str) -> list[QuestionCandidate]:
        self._check()
        return list(self.questions)

    async def get_linked_content(self, lesson_id: str) -> LinkedContent:
        self._check()
        return self.linked


@pytest.fixture
def fake_service() -> FakeLessonService:
    """Service holding one draft lesson with legacy markup and no blocks."""
    service = FakeLessonService()
    service.lessons["lesson-1"] = LessonMeta(
        id="lesson-1",
        title="Intro",
        module_id="module-1",
        content="<h2>Intro</h2><p>Hello</p><hr/><p>Bye</p>",
    )
    service.questions = [
        QuestionCandidate(
            id="q1",
            question_text="2 + 2?",
            options=["3", "4"],
            correct_answer="4",
        )
    ]
    service.linked = LinkedContent(
        questions=[LinkedItem(id="q1", title="2 + 2?")],
        articles=[LinkedItem(id="a1", title="Arithmetic")],
    )
    return service
