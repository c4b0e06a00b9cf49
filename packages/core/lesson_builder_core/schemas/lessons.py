"""Lesson metadata and reference content schemas.

These mirror the payloads returned by the lesson service. Only the fields the
editor reads are modelled; anything else is ignored.
"""

import re
from enum import Enum

from pydantic import BaseModel, Field

from lesson_builder_core.errors import QuestionImportError

ANSWER_SEPARATORS = re.compile(r"[,;|]")


class LessonStatus(str, Enum):
    """Publish state of a lesson."""

    DRAFT = "draft"
    PUBLISHED = "published"


class LessonMeta(BaseModel):
    """Lesson metadata loaded alongside the block sequence."""

    id: str
    title: str = ""
    status: LessonStatus = LessonStatus.DRAFT
    module_id: str | None = Field(None, description="Parent grouping identifier")
    estimated_minutes: int = 0
    content: str | None = Field(None, description="Legacy free-form markup body")
    content_migrated: bool = False

    @property
    def is_draft(self) -> bool:
        return self.status == LessonStatus.DRAFT


class QuestionType(str, Enum):
    """Question bank shapes."""

    MULTIPLE_CHOICE = "multiple_choice"
    MULTI_SELECT = "multi_select"
    TRUE_FALSE = "true_false"
    SHORT_ANSWER = "short_answer"
    NUMERIC = "numeric"


IMPORTABLE_QUESTION_TYPES = frozenset(
    {QuestionType.MULTIPLE_CHOICE, QuestionType.MULTI_SELECT}
)


class QuestionCandidate(BaseModel):
    """A question bank entry that can be imported into a quiz block."""

    id: str
    question_text: str
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE
    options: list[str] = Field(default_factory=list)
    correct_answer: str = ""
    explanation: str = ""

    def correct_index(self) -> int:
        """Resolve the stored answer to the index of one option.

        Options are compared case-insensitively after trimming. A separated
        answer list (``"B, C"``) is accepted only when it names a single
        option, since a quiz block has exactly one correct option.

        Raises:
            QuestionImportError: If the answer matches no option or several
        """
        normalized = [option.strip().casefold() for option in self.options]
        answer = self.correct_answer.strip().casefold()
        if answer in normalized:
            return normalized.index(answer)

        parts = {part.strip() for part in ANSWER_SEPARATORS.split(answer) if part.strip()}
        unknown = parts - set(normalized)
        if not parts or unknown:
            raise QuestionImportError(
                self.id, f"answer {self.correct_answer!r} matches no option"
            )
        matches = sorted({normalized.index(part) for part in parts})
        if len(matches) > 1:
            raise QuestionImportError(
                self.id,
                f"answer {self.correct_answer!r} names {len(matches)} options; "
                "a quiz block holds one",
            )
        return matches[0]

    def to_quiz_content(self) -> dict:
        """Build a quiz block payload referencing this question.

        Raises:
            QuestionImportError: If the correct answer cannot be resolved
        """
        correct = self.correct_index()
        return {
            "question": self.question_text,
            "options": list(self.options) or ["", ""],
            "correct": correct,
            "explanation": self.explanation,
            "question_id": self.id,
        }


class LinkedItem(BaseModel):
    """A reference to content associated with a lesson."""

    id: str
    title: str


class LinkedContent(BaseModel):
    """Read-only cross-navigation references for a lesson."""

    questions: list[LinkedItem] = Field(default_factory=list)
    flashcards: list[LinkedItem] = Field(default_factory=list)
    articles: list[LinkedItem] = Field(default_factory=list)
