"""Saving block groups as templates and instantiating them again.

Templates hold content snapshots only. Instantiation always deep-copies and
assigns fresh identifiers, so a document never keeps a live reference to the
template it was built from.
"""

from collections.abc import Iterable, Sequence
from typing import Any

from lesson_builder_core.errors import ServiceError
from lesson_builder_core.schemas.blocks import Block
from lesson_builder_core.schemas.templates import BlockTemplate, TemplateBlock
from lesson_builder_core.services.base import BaseLessonService
from lesson_builder_core.utils.logging import get_logger, log_exceptions

logger = get_logger(__name__)


def template_blocks_from(blocks: Iterable[Block]) -> list[TemplateBlock]:
    """Strip identity and position from blocks, keeping type, content and style."""
    snapshots: list[TemplateBlock] = []
    for block in blocks:
        copied = block.model_copy(deep=True)
        snapshots.append(
            TemplateBlock(type=copied.type, content=copied.content, style=copied.style)
        )
    return snapshots


def instantiate_template(
    template_blocks: Sequence[TemplateBlock], at_index: int = 0
) -> list[Block]:
    """Build fresh blocks from template snapshots.

    Args:
        template_blocks: Stored block definitions
        at_index: Order index assigned to the first new block

    Returns:
        New blocks with unique ids and sequential order indices
    """
    instances: list[Block] = []
    for offset, definition in enumerate(template_blocks):
        copied = definition.model_copy(deep=True)
        instances.append(
            Block(
                type=copied.type,
                content=copied.content,
                style=copied.style,
                order_index=at_index + offset,
            )
        )
    return instances


class TemplateStore:
    """Template operations backed by the lesson service.

    Service failures are logged and absorbed: callers get ``None``, an empty
    list or ``False`` and the editor keeps working.
    """

    def __init__(self, service: BaseLessonService):
        self.service = service
        self._cache: dict[str, BlockTemplate] = {}

    @property
    def cached(self) -> list[BlockTemplate]:
        return list(self._cache.values())

    @log_exceptions(logger, absorb=(ServiceError,), default=[])
    async def list_templates(self, category: str | None = None) -> list[BlockTemplate]:
        templates = await self.service.list_templates(category)
        if category is None:
            self._cache = {t.id: t for t in templates}
        else:
            self._cache.update({t.id: t for t in templates})
        return templates

    @log_exceptions(logger, absorb=(ServiceError,), default=None)
    async def save_as_template(
        self,
        blocks: Sequence[Block],
        name: str,
        category: str = "custom",
        description: str = "",
    ) -> BlockTemplate | None:
        """Store one block, a selection or a whole document as a template."""
        if not name.strip():
            raise ValueError("Template name is required")
        if not blocks:
            raise ValueError("A template needs at least one block")
        template = await self.service.create_template(
            name=name.strip(),
            description=description,
            category=category or "custom",
            blocks=template_blocks_from(blocks),
        )
        self._cache[template.id] = template
        logger.info(f"Saved template '{template.name}' with {len(template.blocks)} blocks")
        return template

    @log_exceptions(logger, absorb=(ServiceError,), default=None)
    async def update_template(self, template_id: str, **fields: Any) -> BlockTemplate | None:
        template = await self.service.update_template(template_id, **fields)
        self._cache[template.id] = template
        return template

    @log_exceptions(logger, absorb=(ServiceError,), default=False)
    async def delete_template(self, template_id: str) -> bool:
        """Delete a template. Documents built from it are unaffected."""
        await self.service.delete_template(template_id)
        self._cache.pop(template_id, None)
        return True
