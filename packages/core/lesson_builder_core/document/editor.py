"""Editor controller composing the document, history, selection and drag state.

Every externally visible mutation goes through ``LessonEditor`` so that it is
captured in history exactly once. Undo and redo restore snapshots with history
capture suppressed, which keeps a restore from being recorded as a new edit.
"""

from collections.abc import Callable, Iterable, Sequence
from typing import Any

from lesson_builder_core.config import EditorConfig
from lesson_builder_core.converter.legacy import ConversionResult
from lesson_builder_core.document.history import HistoryManager
from lesson_builder_core.document.model import LessonDocument
from lesson_builder_core.document.reorder import (
    DragSession,
    Selection,
    compute_target_index,
)
from lesson_builder_core.schemas.blocks import Block
from lesson_builder_core.schemas.content import BlockType, set_content_path
from lesson_builder_core.schemas.lessons import QuestionCandidate
from lesson_builder_core.schemas.style import BlockStyle
from lesson_builder_core.schemas.templates import TemplateBlock
from lesson_builder_core.templates.store import instantiate_template
from lesson_builder_core.utils.logging import get_logger

logger = get_logger(__name__)

ChangeListener = Callable[[], None]


class LessonEditor:
    """Mutating front end over a single lesson document."""

    def __init__(
        self,
        blocks: Iterable[Block] | None = None,
        config: EditorConfig | None = None,
    ):
        self.config = config or EditorConfig()
        self.document = LessonDocument(blocks)
        self.history = HistoryManager(self.config.history_limit)
        self.history.reset(self.document.blocks)
        self.selection = Selection()
        self.drag = DragSession()
        self.dirty = False
        self.pending_conversion = False
        self.conversion_warnings: list[str] = []
        # Bumped on every committed change; used to detect edits during a save
        self.revision = 0
        self._listeners: list[ChangeListener] = []

    # State

    @property
    def blocks(self) -> list[Block]:
        return self.document.blocks

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    def add_listener(self, listener: ChangeListener) -> None:
        """Register a callback fired after every content change."""
        self._listeners.append(listener)

    def load(self, blocks: Iterable[Block]) -> None:
        """Replace the document with persisted blocks and start a fresh history."""
        self.document.replace_all(blocks)
        self.history.reset(self.document.blocks)
        self.selection.clear()
        self.dirty = False
        self.pending_conversion = False
        self.conversion_warnings = []

    def apply_conversion(self, result: ConversionResult) -> None:
        """Adopt converted legacy blocks as unsaved state.

        The converted sequence becomes the history baseline, so it cannot be
        undone back to an empty lesson. Listeners are not notified; the
        blocks stay pending until the next explicit or autosaved write.
        """
        self.document.replace_all(result.blocks)
        self.history.reset(self.document.blocks)
        self.selection.clear()
        self.pending_conversion = True
        self.conversion_warnings = list(result.warnings)
        self.dirty = True

    def mark_saved(self, revision: int | None = None) -> None:
        """Clear the dirty flag, unless edits were made after ``revision``."""
        if revision is not None and revision != self.revision:
            return
        self.dirty = False
        self.pending_conversion = False

    def _commit(self) -> bool:
        recorded = self.history.record(self.document.blocks)
        self.revision += 1
        self.selection.prune(self.document.ids())
        self.dirty = True
        self._notify()
        return recorded

    def _notify(self) -> None:
        for listener in self._listeners:
            listener()

    # Single-block operations

    def insert_block(self, block_type: BlockType, at_index: int | None = None) -> Block:
        block = self.document.insert(block_type, at_index)
        self._commit()
        return block

    def delete_block(self, block_id: str) -> Block:
        block = self.document.remove(block_id)
        self._commit()
        return block

    def duplicate_block(self, block_id: str) -> Block:
        copy = self.document.duplicate(block_id)
        self._commit()
        return copy

    def move_up(self, block_id: str) -> bool:
        moved = self.document.move_up(block_id)
        if moved:
            self._commit()
        return moved

    def move_down(self, block_id: str) -> bool:
        moved = self.document.move_down(block_id)
        if moved:
            self._commit()
        return moved

    def update_content(self, block_id: str, content: dict[str, Any]) -> Block:
        """Replace a block's whole payload."""
        block = self.document.update_content(block_id, content)
        self._commit()
        return block

    def set_field(self, block_id: str, path: str, value: Any) -> Block:
        """Change one value inside a block's payload by dotted path."""
        block = self.document.get(block_id)
        return self.update_content(block_id, set_content_path(block.content, path, value))

    def update_style(self, block_id: str, style: BlockStyle | None) -> Block:
        """Replace or clear a block's style overlay."""
        block = self.document.update_style(block_id, style)
        self._commit()
        return block

    # Selection and bulk operations

    def select(self, block_id: str) -> None:
        self.document.index_of(block_id)
        self.selection.click(block_id)

    def toggle_select(self, block_id: str) -> None:
        self.document.index_of(block_id)
        self.selection.toggle(block_id)

    def extend_select(self, block_id: str) -> None:
        self.document.index_of(block_id)
        self.selection.extend_to(block_id, self.document.ids())

    def select_all(self) -> None:
        self.selection.replace(self.document.ids())

    def clear_selection(self) -> None:
        self.selection.clear()

    def selected_blocks(self) -> list[Block]:
        return [self.document.get(i) for i in self.selection.ordered(self.document.ids())]

    def delete_selected(self) -> list[Block]:
        """Delete every selected block as one undoable step."""
        if not len(self.selection):
            return []
        removed = self.document.remove_many(self.selection.ids)
        self.selection.clear()
        self._commit()
        logger.info(f"Deleted {len(removed)} selected blocks")
        return removed

    def duplicate_selected(self) -> list[Block]:
        """Duplicate every selected block as one undoable step.

        The copies become the new selection.
        """
        if not len(self.selection):
            return []
        copies = self.document.duplicate_many(self.selection.ids)
        self.selection.replace(block.id for block in copies)
        self._commit()
        return copies

    # Drag and drop

    def start_drag(self, block_id: str) -> None:
        self.document.index_of(block_id)
        self.drag.start(block_id)

    def hover_drag(self, drop_index: int) -> None:
        self.drag.hover(min(drop_index, len(self.document)))

    def cancel_drag(self) -> None:
        self.drag.cancel()

    def drop(self) -> bool:
        """Commit the current drag. Returns whether the document changed."""
        request = self.drag.commit()
        source = self.document.index_of(request.source_id)
        target = compute_target_index(source, request.drop_index)
        moved = self.document.move_to(request.source_id, target)
        if moved:
            self._commit()
        return moved

    def move_block(self, block_id: str, drop_index: int) -> bool:
        """Run a whole drag gesture in one call.

        A gesture that fails part way is cancelled so the next drag can start.
        """
        self.start_drag(block_id)
        try:
            self.hover_drag(drop_index)
            return self.drop()
        finally:
            if self.drag.active:
                self.drag.cancel()

    # Templates and question import

    def apply_template(
        self,
        template_blocks: Sequence[TemplateBlock],
        at_index: int | None = None,
    ) -> list[Block]:
        """Insert fresh copies of template blocks at a position."""
        if not template_blocks:
            return []
        position = len(self.document) if at_index is None else at_index
        instances = instantiate_template(template_blocks, position)
        self.document.insert_blocks(instances, at_index)
        self._commit()
        return instances

    def import_question(
        self,
        candidate: QuestionCandidate,
        at_index: int | None = None,
    ) -> Block:
        """Insert a quiz block pre-filled from a question bank entry.

        Raises:
            QuestionImportError: If the answer does not resolve to one option
        """
        content = candidate.to_quiz_content()
        block = self.document.insert(BlockType.QUIZ, at_index)
        self.document.update_content(block.id, content)
        self._commit()
        return block

    # History

    def undo(self) -> bool:
        return self._restore(self.history.undo())

    def redo(self) -> bool:
        return self._restore(self.history.redo())

    def _restore(self, state: list[Block] | None) -> bool:
        if state is None:
            return False
        with self.history.suppressed():
            self.document.replace_all(state)
            self._commit()
        return True
