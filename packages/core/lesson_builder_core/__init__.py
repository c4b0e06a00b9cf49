"""lesson-builder-core: Structured block editor for course lessons.

A lesson is an ordered sequence of typed blocks (text, media, callouts,
quizzes, flashcards, layout containers...). This package provides the block
model, the editing controller with undo/redo, drag reordering and
multi-selection, templates, debounced autosave and the edit/preview
projections a front end renders from.

Editing a lesson against the lesson service:

    >>> from lesson_builder_core import EditorSession, HttpLessonService
    >>> session = EditorSession(HttpLessonService(), lesson_id)
    >>> await session.load()
    >>> session.editor.insert_block(BlockType.CALLOUT)
    >>> await session.close()

Converting a legacy lesson body without an editor:

    >>> from lesson_builder_core.converter import convert_legacy_markup
    >>> result = convert_legacy_markup(html)
    >>> [block.type for block in result.blocks]
"""

from lesson_builder_core.autosave import AutosaveScheduler
from lesson_builder_core.config import ConverterConfig, EditorConfig
from lesson_builder_core.document import LessonDocument, LessonEditor
from lesson_builder_core.schemas.blocks import Block
from lesson_builder_core.schemas.content import BlockType
from lesson_builder_core.schemas.style import BlockStyle
from lesson_builder_core.services import BaseLessonService, HttpLessonService
from lesson_builder_core.session import EditorSession, LoadStatus

__version__ = "0.1.0"

__all__ = [
    # Editing
    "EditorSession",
    "LessonEditor",
    "LessonDocument",
    "LoadStatus",
    "AutosaveScheduler",
    # Config
    "ConverterConfig",
    "EditorConfig",
    # Schemas
    "Block",
    "BlockStyle",
    "BlockType",
    # Services
    "BaseLessonService",
    "HttpLessonService",
]
