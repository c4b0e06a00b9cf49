"""Snapshot-based undo/redo history.

The undo stack's top entry always mirrors the live document. Undo moves the
top entry to the redo stack and hands back the entry below it; redo reverses
that. Entries are deep copies so restoring one never aliases live blocks.
"""

from collections import deque
from collections.abc import Iterator, Sequence
from contextlib import contextmanager

from lesson_builder_core.schemas.blocks import Block
from lesson_builder_core.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_HISTORY_LIMIT = 50


def _copy(blocks: Sequence[Block]) -> list[Block]:
    return [block.model_copy(deep=True) for block in blocks]


class HistoryManager:
    """Bounded undo/redo stack pair over block sequence snapshots."""

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT):
        if limit < 1:
            raise ValueError("History limit must be at least 1")
        self.limit = limit
        self._undo: deque[list[Block]] = deque(maxlen=limit)
        self._redo: deque[list[Block]] = deque(maxlen=limit)
        self._suppress_depth = 0

    @property
    def can_undo(self) -> bool:
        return len(self._undo) > 1

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    @property
    def undo_depth(self) -> int:
        return len(self._undo)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    @property
    def is_suppressed(self) -> bool:
        return self._suppress_depth > 0

    @contextmanager
    def suppressed(self) -> Iterator[None]:
        """Disable capture while a programmatic restore runs."""
        self._suppress_depth += 1
        try:
            yield
        finally:
            self._suppress_depth -= 1

    def reset(self, blocks: Sequence[Block]) -> None:
        """Drop all entries and start over from a baseline state."""
        self._undo.clear()
        self._redo.clear()
        self._undo.append(_copy(blocks))

    def record(self, blocks: Sequence[Block]) -> bool:
        """Capture the current state after a mutation.

        Returns:
            True if a new entry was pushed; False if capture is suppressed or
            the state equals the current top entry
        """
        if self.is_suppressed:
            return False
        if self._undo and self._undo[-1] == list(blocks):
            return False
        # deque(maxlen) drops the oldest entry once full
        self._undo.append(_copy(blocks))
        self._redo.clear()
        return True

    def undo(self) -> list[Block] | None:
        """Step back one entry.

        Returns:
            A copy of the state to restore, or None if nothing can be undone
        """
        if not self.can_undo:
            return None
        self._redo.append(self._undo.pop())
        logger.debug(f"Undo: {len(self._undo)} undo / {len(self._redo)} redo entries")
        return _copy(self._undo[-1])

    def redo(self) -> list[Block] | None:
        """Step forward one entry.

        Returns:
            A copy of the state to restore, or None if nothing can be redone
        """
        if not self._redo:
            return None
        entry = self._redo.pop()
        self._undo.append(entry)
        logger.debug(f"Redo: {len(self._undo)} undo / {len(self._redo)} redo entries")
        return _copy(entry)
