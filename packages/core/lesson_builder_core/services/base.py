"""Lesson service interface.

The editor reaches persistence, templates and the question bank only through
this request/response boundary. Implementations raise ``ServiceError`` for
transport failures and unexpected responses, and ``LessonNotFoundError`` when
a lesson does not exist.
"""

from abc import ABC, abstractmethod
from typing import Any

from lesson_builder_core.schemas.blocks import Block
from lesson_builder_core.schemas.lessons import (
    LessonMeta,
    LessonStatus,
    LinkedContent,
    QuestionCandidate,
)
from lesson_builder_core.schemas.templates import BlockTemplate, TemplateBlock


class BaseLessonService(ABC):
    """Abstract base class for lesson service clients."""

    @abstractmethod
    async def get_lesson(self, lesson_id: str) -> LessonMeta:
        """Load lesson metadata.

        Args:
            lesson_id: Lesson identifier

        Returns:
            Title, status, parent module and optional legacy markup

        Raises:
            LessonNotFoundError: If the lesson does not exist
        """
        pass

    @abstractmethod
    async def get_blocks(self, lesson_id: str) -> list[Block]:
        """Load the persisted block sequence, ordered by order index."""
        pass

    @abstractmethod
    async def save_blocks(self, lesson_id: str, blocks: list[dict[str, Any]]) -> int:
        """Replace the whole persisted block sequence.

        Args:
            lesson_id: Lesson identifier
            blocks: Full ordered list of block payloads

        Returns:
            Number of blocks stored
        """
        pass

    @abstractmethod
    async def set_status(self, lesson_id: str, status: LessonStatus) -> LessonMeta:
        """Change the publish state of a lesson."""
        pass

    @abstractmethod
    async def list_templates(self, category: str | None = None) -> list[BlockTemplate]:
        """List block templates, optionally restricted to one category."""
        pass

    @abstractmethod
    async def create_template(
        self,
        name: str,
        description: str,
        category: str,
        blocks: list[TemplateBlock],
    ) -> BlockTemplate:
        """Store a new block template."""
        pass

    @abstractmethod
    async def update_template(
        self, template_id: str, **fields: Any
    ) -> BlockTemplate:
        """Update name, description, category or blocks of a template."""
        pass

    @abstractmethod
    async def delete_template(self, template_id: str) -> None:
        """Delete a template."""
        pass

    @abstractmethod
    async def list_question_candidates(self, lesson_id: str) -> list[QuestionCandidate]:
        """Fetch single/multi choice questions that can become quiz blocks."""
        pass

    @abstractmethod
    async def get_linked_content(self, lesson_id: str) -> LinkedContent:
        """Fetch questions, flashcards and articles associated with a lesson."""
        pass

    async def close(self) -> None:
        """Release any transport resources."""
        return None
