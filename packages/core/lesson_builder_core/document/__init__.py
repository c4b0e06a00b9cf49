"""Lesson document model, history and editing controller."""

from lesson_builder_core.document.editor import LessonEditor
from lesson_builder_core.document.history import HistoryManager
from lesson_builder_core.document.model import LessonDocument
from lesson_builder_core.document.reorder import (
    DragPhase,
    DragSession,
    MoveRequest,
    Selection,
    compute_target_index,
)

__all__ = [
    "DragPhase",
    "DragSession",
    "HistoryManager",
    "LessonDocument",
    "LessonEditor",
    "MoveRequest",
    "Selection",
    "compute_target_index",
]
