"""Transient reader-side state for preview interactions.

Quiz answers, flipped cards, active tabs and reveal toggles live here, keyed
by block id, and never in block content. The store is discarded with the
editor and is never serialized.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass
class BlockViewState:
    """Everything a reader can change about one block while previewing."""

    quiz_selected: set[int] = field(default_factory=set)
    quiz_submitted: bool = False
    card_index: int = 0
    card_flipped: bool = False
    tab_index: int = 0
    open_sections: set[int] = field(default_factory=set)
    slide_index: int = 0
    revealed: bool = False
    expanded: bool = False


class ViewStateStore:
    """Side table of view state keyed by block id."""

    def __init__(self) -> None:
        self._states: dict[str, BlockViewState] = {}

    def __contains__(self, block_id: str) -> bool:
        return block_id in self._states

    def __len__(self) -> int:
        return len(self._states)

    def get(self, block_id: str) -> BlockViewState:
        """Return the state for a block, creating a fresh one on first use."""
        if block_id not in self._states:
            self._states[block_id] = BlockViewState()
        return self._states[block_id]

    def peek(self, block_id: str) -> BlockViewState:
        """Return the state without storing a new entry."""
        return self._states.get(block_id) or BlockViewState()

    def discard(self, block_id: str) -> None:
        self._states.pop(block_id, None)

    def prune(self, valid_ids: Iterable[str]) -> None:
        """Drop state for blocks that are no longer in the document."""
        valid = set(valid_ids)
        for block_id in list(self._states):
            if block_id not in valid:
                del self._states[block_id]

    def clear(self) -> None:
        self._states.clear()
