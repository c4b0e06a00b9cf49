"""Drag-and-drop reordering and multi-selection.

Drop positions are *slots*: slot ``k`` is the gap before the block currently
at index ``k`` (slot ``n`` is the end of the document). Because the dragged
block is removed before it is re-inserted, a slot after the source maps to
``slot - 1`` as the final index.

The drag state machine is independent of any input transport:

    idle -> dragging(source_id) -> hovering(drop_index) -> committed | cancelled
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

from lesson_builder_core.errors import InvalidDragTransition


def compute_target_index(source_index: int, drop_index: int) -> int:
    """Translate a drop slot into the dragged block's final index.

    Args:
        source_index: Current index of the dragged block
        drop_index: Slot the block was dropped on

    Returns:
        Index the block occupies after the move
    """
    if drop_index > source_index:
        return drop_index - 1
    return drop_index


class DragPhase(str, Enum):
    """States of a drag session."""

    IDLE = "idle"
    DRAGGING = "dragging"
    HOVERING = "hovering"
    COMMITTED = "committed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class MoveRequest:
    """A committed drag, ready to be applied to a document."""

    source_id: str
    drop_index: int


class DragSession:
    """Explicit state machine for one drag gesture."""

    def __init__(self) -> None:
        self.phase = DragPhase.IDLE
        self.source_id: str | None = None
        self.drop_index: int | None = None

    @property
    def active(self) -> bool:
        return self.phase in (DragPhase.DRAGGING, DragPhase.HOVERING)

    def start(self, source_id: str) -> None:
        """Begin dragging a block. Finished sessions may be restarted."""
        if self.active:
            raise InvalidDragTransition(f"Cannot start a drag while {self.phase.value}")
        self.phase = DragPhase.DRAGGING
        self.source_id = source_id
        self.drop_index = None

    def hover(self, drop_index: int) -> None:
        """Move the pointer over a drop slot."""
        if not self.active:
            raise InvalidDragTransition(f"Cannot hover while {self.phase.value}")
        if drop_index < 0:
            raise ValueError("Drop index must be non-negative")
        self.phase = DragPhase.HOVERING
        self.drop_index = drop_index

    def leave(self) -> None:
        """Pointer left every drop slot; keep dragging."""
        if not self.active:
            raise InvalidDragTransition(f"Cannot leave while {self.phase.value}")
        self.phase = DragPhase.DRAGGING
        self.drop_index = None

    def commit(self) -> MoveRequest:
        """Drop on the hovered slot."""
        if self.phase != DragPhase.HOVERING:
            raise InvalidDragTransition(f"Cannot drop while {self.phase.value}")
        if self.source_id is None or self.drop_index is None:
            raise InvalidDragTransition("Cannot drop without a source and a drop slot")
        self.phase = DragPhase.COMMITTED
        return MoveRequest(source_id=self.source_id, drop_index=self.drop_index)

    def cancel(self) -> None:
        """Abort the drag without moving anything."""
        if not self.active:
            raise InvalidDragTransition(f"Cannot cancel while {self.phase.value}")
        self.phase = DragPhase.CANCELLED
        self.drop_index = None


class Selection:
    """Multi-block selection with a range anchor.

    The anchor is the last block selected by a plain click; shift-click ranges
    are computed by array position between the anchor and the clicked block.
    """

    def __init__(self) -> None:
        self._selected: set[str] = set()
        self.anchor_id: str | None = None

    def __contains__(self, block_id: str) -> bool:
        return block_id in self._selected

    def __len__(self) -> int:
        return len(self._selected)

    @property
    def ids(self) -> frozenset[str]:
        return frozenset(self._selected)

    def ordered(self, order: Sequence[str]) -> list[str]:
        """Selected ids in document order."""
        return [block_id for block_id in order if block_id in self._selected]

    def click(self, block_id: str) -> None:
        """Select exactly one block."""
        self._selected = {block_id}
        self.anchor_id = block_id

    def toggle(self, block_id: str) -> None:
        """Add or remove one block, leaving the rest of the selection alone."""
        if block_id in self._selected:
            self._selected.discard(block_id)
        else:
            self._selected.add(block_id)

    def extend_to(self, block_id: str, order: Sequence[str]) -> None:
        """Select the inclusive range between the anchor and ``block_id``.

        Falls back to a plain click when there is no usable anchor.
        """
        if self.anchor_id is None or self.anchor_id not in order:
            self.click(block_id)
            return
        start = order.index(self.anchor_id)
        end = order.index(block_id)
        low, high = min(start, end), max(start, end)
        self._selected = set(order[low : high + 1])

    def clear(self) -> None:
        self._selected.clear()
        self.anchor_id = None

    def replace(self, block_ids: Iterable[str]) -> None:
        self._selected = set(block_ids)

    def prune(self, valid_ids: Iterable[str]) -> None:
        """Forget ids that are no longer in the document."""
        valid = set(valid_ids)
        self._selected &= valid
        if self.anchor_id not in valid:
            self.anchor_id = None
