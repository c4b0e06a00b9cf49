"""Ordered block collection for a single lesson.

``LessonDocument`` exposes the structural primitives every editing feature is
built from. After any structural change the blocks' ``order_index`` values are
renumbered so they always equal their position.
"""

from collections.abc import Iterable, Iterator
from typing import Any

from lesson_builder_core.errors import BlockNotFoundError, LessonBuilderError
from lesson_builder_core.schemas.blocks import Block
from lesson_builder_core.schemas.content import BlockType
from lesson_builder_core.schemas.style import BlockStyle


class LessonDocument:
    """The ordered sequence of blocks owned by one lesson."""

    def __init__(self, blocks: Iterable[Block] | None = None):
        self._blocks: list[Block] = []
        if blocks is not None:
            self.replace_all(blocks)

    def __len__(self) -> int:
        return len(self._blocks)

    def __iter__(self) -> Iterator[Block]:
        return iter(self._blocks)

    def __getitem__(self, index: int) -> Block:
        return self._blocks[index]

    @property
    def blocks(self) -> list[Block]:
        """The live block list. Callers must not mutate it directly."""
        return self._blocks

    def ids(self) -> list[str]:
        return [block.id for block in self._blocks]

    def index_of(self, block_id: str) -> int:
        """Return the position of a block.

        Raises:
            BlockNotFoundError: If no block has this id
        """
        for idx, block in enumerate(self._blocks):
            if block.id == block_id:
                return idx
        raise BlockNotFoundError(block_id)

    def get(self, block_id: str) -> Block:
        return self._blocks[self.index_of(block_id)]

    def renumber(self) -> None:
        """Reset every order index to the block's position."""
        for idx, block in enumerate(self._blocks):
            if block.order_index != idx:
                block.order_index = idx

    def insert(self, block_type: BlockType, at_index: int | None = None) -> Block:
        """Insert a block with default content.

        Args:
            block_type: Variant of the new block
            at_index: Target position, clamped to the document; None appends

        Returns:
            The inserted block
        """
        block = Block.create(block_type)
        self.insert_blocks([block], at_index)
        return block

    def insert_blocks(self, blocks: list[Block], at_index: int | None = None) -> None:
        """Splice already-built blocks in at a position and renumber once."""
        existing = set(self.ids())
        incoming = [block.id for block in blocks]
        if len(set(incoming)) != len(incoming) or existing.intersection(incoming):
            raise LessonBuilderError("Block ids must be unique within a document")

        idx = self._clamp(at_index)
        self._blocks[idx:idx] = blocks
        self.renumber()

    def remove(self, block_id: str) -> Block:
        """Remove a block and return it."""
        block = self._blocks.pop(self.index_of(block_id))
        self.renumber()
        return block

    def remove_many(self, block_ids: Iterable[str]) -> list[Block]:
        """Remove several blocks, renumbering once at the end.

        Unknown ids are ignored.
        """
        targets = set(block_ids)
        removed = [block for block in self._blocks if block.id in targets]
        self._blocks = [block for block in self._blocks if block.id not in targets]
        self.renumber()
        return removed

    def duplicate(self, block_id: str) -> Block:
        """Insert a copy of a block directly after it under a new id."""
        idx = self.index_of(block_id)
        copy = self._blocks[idx].clone()
        self._blocks.insert(idx + 1, copy)
        self.renumber()
        return copy

    def duplicate_many(self, block_ids: Iterable[str]) -> list[Block]:
        """Duplicate several blocks, each copy placed after its original.

        Copies are inserted in one pass and the document is renumbered once.
        """
        targets = set(block_ids)
        result: list[Block] = []
        copies: list[Block] = []
        for block in self._blocks:
            result.append(block)
            if block.id in targets:
                copy = block.clone()
                result.append(copy)
                copies.append(copy)
        self._blocks = result
        self.renumber()
        return copies

    def move_up(self, block_id: str) -> bool:
        """Swap a block with its predecessor. Returns False at the top."""
        idx = self.index_of(block_id)
        if idx == 0:
            return False
        self._swap(idx, idx - 1)
        return True

    def move_down(self, block_id: str) -> bool:
        """Swap a block with its successor. Returns False at the bottom."""
        idx = self.index_of(block_id)
        if idx == len(self._blocks) - 1:
            return False
        self._swap(idx, idx + 1)
        return True

    def move_to(self, block_id: str, target_index: int) -> bool:
        """Move a block so it ends up at ``target_index``.

        This takes the final position, not a drop slot; see
        ``lesson_builder_core.document.reorder`` for drop slot handling.
        """
        source = self.index_of(block_id)
        target = max(0, min(target_index, len(self._blocks) - 1))
        if source == target:
            return False
        block = self._blocks.pop(source)
        self._blocks.insert(target, block)
        self.renumber()
        return True

    def update_content(self, block_id: str, content: dict[str, Any]) -> Block:
        """Replace a block's payload wholesale. No merging is performed."""
        block = self.get(block_id)
        block.content = content
        return block

    def update_style(self, block_id: str, style: BlockStyle | None) -> Block:
        """Replace or clear a block's style overlay."""
        block = self.get(block_id)
        block.style = style
        return block

    def snapshot(self) -> list[Block]:
        """Return a deep copy of the block sequence."""
        return [block.model_copy(deep=True) for block in self._blocks]

    def replace_all(self, blocks: Iterable[Block]) -> None:
        """Replace the whole sequence with deep copies of ``blocks``.

        Blocks are ordered by their ``order_index`` first, then renumbered.
        """
        ordered = sorted(
            (block.model_copy(deep=True) for block in blocks),
            key=lambda b: b.order_index,
        )
        ids = [block.id for block in ordered]
        if len(set(ids)) != len(ids):
            raise LessonBuilderError("Block ids must be unique within a document")
        self._blocks = ordered
        self.renumber()

    def to_payload(self) -> list[dict[str, Any]]:
        """Serialize the sequence to the service wire shape."""
        self.renumber()
        return [block.to_payload() for block in self._blocks]

    def _clamp(self, at_index: int | None) -> int:
        if at_index is None:
            return len(self._blocks)
        return max(0, min(at_index, len(self._blocks)))

    def _swap(self, a: int, b: int) -> None:
        self._blocks[a], self._blocks[b] = self._blocks[b], self._blocks[a]
        self.renumber()
