"""Data schemas for the lesson builder.

This module exports the block model (types, payload schemas, style overlay),
template snapshots, and the lesson service payloads the editor consumes.
"""

from lesson_builder_core.schemas.blocks import Block, new_block_id
from lesson_builder_core.schemas.content import (
    CONTENT_SCHEMAS,
    BlockContent,
    BlockType,
    CalloutKind,
    default_content,
    read_content,
    set_content_path,
    validate_content,
)
from lesson_builder_core.schemas.lessons import (
    IMPORTABLE_QUESTION_TYPES,
    LessonMeta,
    LessonStatus,
    LinkedContent,
    LinkedItem,
    QuestionCandidate,
    QuestionType,
)
from lesson_builder_core.schemas.style import BlockStyle, BlockWidth, ShadowTier
from lesson_builder_core.schemas.templates import BlockTemplate, TemplateBlock

__all__ = [
    # Blocks
    "Block",
    "BlockContent",
    "BlockType",
    "CalloutKind",
    "CONTENT_SCHEMAS",
    "default_content",
    "new_block_id",
    "read_content",
    "set_content_path",
    "validate_content",
    # Style
    "BlockStyle",
    "BlockWidth",
    "ShadowTier",
    # Templates
    "BlockTemplate",
    "TemplateBlock",
    # Lessons
    "IMPORTABLE_QUESTION_TYPES",
    "LessonMeta",
    "LessonStatus",
    "LinkedContent",
    "LinkedItem",
    "QuestionCandidate",
    "QuestionType",
]
