"""Pydantic schemas for API request and response models."""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from lesson_builder_core.schemas.content import BlockType
from lesson_builder_core.schemas.lessons import LessonStatus
from lesson_builder_core.schemas.style import BlockStyle
from pydantic import BaseModel, ConfigDict, Field


class LessonCreate(BaseModel):
    """Payload for creating a lesson."""

    title: str
    module_id: str | None = None
    status: LessonStatus = LessonStatus.DRAFT
    order_index: int = 0
    estimated_minutes: int = Field(0, ge=0)
    content: str | None = None


class LessonUpdate(BaseModel):
    """Partial update payload for lesson metadata."""

    title: str | None = None
    module_id: str | None = None
    order_index: int | None = None
    estimated_minutes: int | None = Field(None, ge=0)
    content: str | None = None


class LessonStatusUpdate(BaseModel):
    """Payload for switching a lesson between draft and published."""

    status: LessonStatus


class LessonResponse(BaseModel):
    """Lesson response payload."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    module_id: str | None = None
    title: str
    status: str
    order_index: int
    estimated_minutes: int
    content: str | None = None
    content_migrated: bool
    created_at: datetime
    updated_at: datetime


class LessonListResponse(BaseModel):
    """List response for lessons."""

    lessons: list[LessonResponse]


class BlockPayload(BaseModel):
    """A block as sent by the editor when saving."""

    id: str | None = Field(None, max_length=64)
    block_type: BlockType
    content: dict[str, Any] = Field(default_factory=dict)
    order_index: int | None = Field(None, ge=0)
    style: BlockStyle | None = None


class BlockResponse(BaseModel):
    """Stored block payload."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    lesson_id: UUID
    block_type: str
    content: dict[str, Any]
    style: dict[str, Any] | None = None
    order_index: int


class BlockListResponse(BaseModel):
    """List response for a lesson's blocks."""

    blocks: list[BlockResponse]


class BlocksSaveRequest(BaseModel):
    """Wholesale replacement of a lesson's block sequence."""

    blocks: list[BlockPayload]


class BlocksSaveResponse(BaseModel):
    """Result of a block save."""

    block_count: int
    version_number: int


class LessonVersionResponse(BaseModel):
    """Saved block snapshot."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    lesson_id: UUID
    version_number: int
    blocks_snapshot: list[dict[str, Any]]
    saved_by: str | None = None
    created_at: datetime


class LessonVersionListResponse(BaseModel):
    """List response for lesson versions."""

    versions: list[LessonVersionResponse]


class TemplateBlockPayload(BaseModel):
    """A block snapshot inside a template."""

    block_type: BlockType
    content: dict[str, Any] = Field(default_factory=dict)
    style: BlockStyle | None = None


class TemplateCreate(BaseModel):
    """Payload for creating a block template."""

    name: str
    description: str = ""
    category: str = "custom"
    blocks: list[TemplateBlockPayload] = Field(default_factory=list)


class TemplateUpdate(BaseModel):
    """Partial update payload for a block template."""

    name: str | None = None
    description: str | None = None
    category: str | None = None
    blocks: list[TemplateBlockPayload] | None = None


class TemplateResponse(BaseModel):
    """Block template response payload."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str
    category: str
    blocks: list[dict[str, Any]]
    is_builtin: bool
    created_by: str | None = None
    created_at: datetime


class TemplateListResponse(BaseModel):
    """List response for block templates."""

    templates: list[TemplateResponse]


class QuestionCandidateResponse(BaseModel):
    """A question that can be imported into a quiz block."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    question_text: str
    question_type: str
    options: list[str]
    correct_answer: str
    explanation: str


class QuestionCandidateListResponse(BaseModel):
    """List response for importable questions."""

    questions: list[QuestionCandidateResponse]


class LinkedItemResponse(BaseModel):
    """A reference to content associated with a lesson."""

    id: UUID
    title: str


class LinkedContentResponse(BaseModel):
    """Linked questions, flashcards and articles for a lesson."""

    questions: list[LinkedItemResponse] = Field(default_factory=list)
    flashcards: list[LinkedItemResponse] = Field(default_factory=list)
    articles: list[LinkedItemResponse] = Field(default_factory=list)


class ConversionJobCreate(BaseModel):
    """Payload for queueing a legacy conversion or a rollback."""

    job_type: Literal["lesson_conversion", "conversion_rollback"] = (
        "lesson_conversion"
    )
    dry_run: bool = False
    lesson_id: UUID | None = None
    module_id: str | None = None
    limit: int | None = Field(None, ge=1)
    force: bool = False
    all: bool = False


class JobResponse(BaseModel):
    """Job response payload."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    job_type: str
    status: str
    progress: int
    current_step: str | None = None
    error_message: str | None = None
    options_json: dict | None = None
    result_json: dict | None = None
    created_at: datetime
    finished_at: datetime | None = None


class JobListResponse(BaseModel):
    """List response for jobs."""

    jobs: list[JobResponse]


class JobEventResponse(BaseModel):
    """Job event response payload."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    job_id: UUID
    level: str
    message: str
    step: str | None = None
    progress: int | None = None
    details_json: dict | None = None
    created_at: datetime


class JobEventListResponse(BaseModel):
    """List response for job events."""

    events: list[JobEventResponse]
