"""Reusable block templates."""

from lesson_builder_core.templates.store import (
    TemplateStore,
    instantiate_template,
    template_blocks_from,
)

__all__ = ["TemplateStore", "instantiate_template", "template_blocks_from"]
