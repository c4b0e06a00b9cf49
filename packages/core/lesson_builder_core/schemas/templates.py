"""Block template schemas."""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, Field

from lesson_builder_core.schemas.content import BlockType
from lesson_builder_core.schemas.style import BlockStyle


class TemplateBlock(BaseModel):
    """A block content snapshot without identity or position."""

    type: BlockType = Field(
        ..., validation_alias=AliasChoices("type", "block_type")
    )
    content: dict[str, Any] = Field(default_factory=dict)
    style: BlockStyle | None = None

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the wire shape used by the lesson service."""
        return {
            "block_type": self.type.value,
            "content": self.model_dump(mode="json")["content"],
            "style": self.style.model_dump(mode="json") if self.style else None,
        }


class BlockTemplate(BaseModel):
    """A named, categorized group of reusable block snapshots."""

    id: str = Field(..., description="Template identifier")
    name: str = Field(..., description="Display name")
    description: str = Field("", description="What the template is for")
    category: str = Field("custom", description="Grouping in the template picker")
    blocks: list[TemplateBlock] = Field(default_factory=list)
    is_builtin: bool = Field(False, description="Shipped templates cannot be deleted")
    created_by: str | None = None
    created_at: datetime | None = None
