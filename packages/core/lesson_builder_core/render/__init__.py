"""Edit and preview projections of a lesson document."""

from lesson_builder_core.render.edit import (
    EDIT_FIELDS,
    EditSurface,
    FieldControl,
    PickerEntry,
    Toolbar,
    block_picker,
    edit_fields,
    render_edit,
)
from lesson_builder_core.render.markup import (
    MARKUP_RENDERERS,
    render_block_markup,
    render_markup,
)
from lesson_builder_core.render.preview import (
    PREVIEW_PROJECTIONS,
    PreviewNode,
    PreviewRenderer,
)
from lesson_builder_core.render.style import StyleDescriptor, resolve_style
from lesson_builder_core.render.view_state import BlockViewState, ViewStateStore

__all__ = [
    "BlockViewState",
    "EDIT_FIELDS",
    "EditSurface",
    "FieldControl",
    "MARKUP_RENDERERS",
    "PREVIEW_PROJECTIONS",
    "PickerEntry",
    "PreviewNode",
    "PreviewRenderer",
    "StyleDescriptor",
    "Toolbar",
    "ViewStateStore",
    "block_picker",
    "edit_fields",
    "render_block_markup",
    "render_edit",
    "render_markup",
    "resolve_style",
]
