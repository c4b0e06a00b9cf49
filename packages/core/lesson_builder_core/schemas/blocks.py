"""Block schema: the atomic content unit of a lesson document."""

import uuid
from typing import Any

from pydantic import AliasChoices, BaseModel, Field

from lesson_builder_core.schemas.content import (
    BlockContent,
    BlockType,
    default_content,
    read_content,
)
from lesson_builder_core.schemas.style import BlockStyle


def new_block_id() -> str:
    """Generate an opaque block identifier."""
    return uuid.uuid4().hex


class Block(BaseModel):
    """A typed content unit within a lesson document."""

    id: str = Field(default_factory=new_block_id, frozen=True)
    type: BlockType = Field(
        ...,
        frozen=True,
        validation_alias=AliasChoices("type", "block_type"),
        description="Block variant; never changes after creation",
    )
    content: dict[str, Any] = Field(
        default_factory=dict, description="Type-specific payload"
    )
    order_index: int = Field(0, ge=0, description="Position within the document")
    style: BlockStyle | None = Field(None, description="Presentation overlay")

    @classmethod
    def create(cls, block_type: BlockType) -> "Block":
        """Create a block with the type's default content and no style."""
        return cls(type=block_type, content=default_content(block_type))

    def typed_content(self) -> BlockContent:
        """Return the payload read through its type schema."""
        return read_content(self.type, self.content)

    def clone(self, fresh_id: bool = True) -> "Block":
        """Deep-copy the block, optionally under a new identifier."""
        copied = self.model_copy(deep=True)
        if not fresh_id:
            return copied
        return Block(
            type=copied.type,
            content=copied.content,
            order_index=copied.order_index,
            style=copied.style,
        )

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the wire shape used by the lesson service."""
        return {
            "id": self.id,
            "block_type": self.type.value,
            "content": self.model_dump(mode="json")["content"],
            "order_index": self.order_index,
            "style": self.style.model_dump(mode="json") if self.style else None,
        }

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "Block":
        """Parse a block from the lesson service wire shape."""
        return cls.model_validate(data)
