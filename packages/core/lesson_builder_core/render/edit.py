"""Edit-mode projection of a document.

Each block becomes an ``EditSurface``: the controls an author needs to change
its content, bound to dotted content paths (``cards.1.back``), plus the
per-block toolbar. The projection is pure; applying a control's new value is
the editor's job (``LessonEditor.set_field``).
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from lesson_builder_core.document.model import LessonDocument
from lesson_builder_core.document.reorder import Selection
from lesson_builder_core.schemas.blocks import Block
from lesson_builder_core.schemas.content import BlockType, CalloutKind

_ALIGNMENTS = ("left", "center", "right")
_VIDEO_SOURCES = ("youtube", "vimeo", "upload")
_HIGHLIGHT_COLORS = ("yellow", "green", "blue", "pink", "orange")
_DISPLAY_MODES = ("block", "inline")
_GAPS = ("sm", "md", "lg")


@dataclass(frozen=True)
class FieldControl:
    """One editable value inside a block's content."""

    path: str
    kind: str
    label: str
    value: Any = None
    options: tuple[str, ...] = ()


@dataclass(frozen=True)
class Toolbar:
    """Per-block actions and whether each is currently available."""

    can_move_up: bool
    can_move_down: bool
    actions: tuple[str, ...] = ("duplicate", "delete", "style", "save_as_template")


@dataclass(frozen=True)
class EditSurface:
    block_id: str
    type: BlockType
    fields: list[FieldControl] = field(default_factory=list)
    toolbar: Toolbar | None = None
    selected: bool = False
    styled: bool = False


@dataclass(frozen=True)
class PickerEntry:
    type: BlockType
    label: str
    category: str


def _get(content: dict, key: str, default: Any = "") -> Any:
    return content.get(key, default)


def _text_fields(c: dict) -> list[FieldControl]:
    return [FieldControl("html", "richtext", "Text", _get(c, "html"))]


def _raw_markup_fields(c: dict) -> list[FieldControl]:
    return [FieldControl("code", "code", "Markup", _get(c, "code"))]


def _image_fields(c: dict) -> list[FieldControl]:
    return [
        FieldControl("url", "url", "Image URL", _get(c, "url")),
        FieldControl("alt", "text", "Alt text", _get(c, "alt")),
        FieldControl("caption", "text", "Caption", _get(c, "caption")),
        FieldControl(
            "alignment", "select", "Alignment", _get(c, "alignment", "center"),
            _ALIGNMENTS,
        ),
    ]


def _video_fields(c: dict) -> list[FieldControl]:
    return [
        FieldControl("url", "url", "Video URL", _get(c, "url")),
        FieldControl(
            "type", "select", "Source", _get(c, "type", "youtube"), _VIDEO_SOURCES
        ),
        FieldControl("caption", "text", "Caption", _get(c, "caption")),
    ]


def _audio_fields(c: dict) -> list[FieldControl]:
    return [
        FieldControl("url", "url", "Audio URL", _get(c, "url")),
        FieldControl("title", "text", "Title", _get(c, "title")),
        FieldControl("transcript", "textarea", "Transcript", _get(c, "transcript")),
    ]


def _callout_fields(c: dict) -> list[FieldControl]:
    return [
        FieldControl(
            "type", "select", "Callout type", _get(c, "type", "info"),
            tuple(k.value for k in CalloutKind),
        ),
        FieldControl("text", "richtext", "Text", _get(c, "text")),
    ]


def _highlight_fields(c: dict) -> list[FieldControl]:
    return [
        FieldControl("text", "textarea", "Text", _get(c, "text")),
        FieldControl(
            "color", "select", "Colour", _get(c, "color", "yellow"), _HIGHLIGHT_COLORS
        ),
    ]


def _key_takeaways_fields(c: dict) -> list[FieldControl]:
    fields = [FieldControl("title", "text", "Title", _get(c, "title"))]
    for i, item in enumerate(_get(c, "items", [])):
        fields.append(FieldControl(f"items.{i}", "text", f"Takeaway {i + 1}", item))
    return fields


def _divider_fields(c: dict) -> list[FieldControl]:
    return []


def _quiz_fields(c: dict) -> list[FieldControl]:
    options = list(_get(c, "options", []))
    fields = [FieldControl("question", "textarea", "Question", _get(c, "question"))]
    for i, option in enumerate(options):
        fields.append(FieldControl(f"options.{i}", "text", f"Option {i + 1}", option))
    fields.append(
        FieldControl(
            "correct", "select", "Correct option", _get(c, "correct", 0),
            tuple(str(i) for i in range(len(options))),
        )
    )
    fields.append(
        FieldControl("explanation", "textarea", "Explanation", _get(c, "explanation"))
    )
    return fields


def _embed_fields(c: dict) -> list[FieldControl]:
    return [
        FieldControl("url", "url", "Embed URL", _get(c, "url")),
        FieldControl("height", "number", "Height (px)", _get(c, "height", 400)),
    ]


def _table_fields(c: dict) -> list[FieldControl]:
    fields = [
        FieldControl(f"headers.{i}", "text", f"Header {i + 1}", header)
        for i, header in enumerate(_get(c, "headers", []))
    ]
    for r, row in enumerate(_get(c, "rows", [])):
        for col, cell in enumerate(row):
            fields.append(
                FieldControl(
                    f"rows.{r}.{col}", "text", f"Row {r + 1}, column {col + 1}", cell
                )
            )
    return fields


def _file_fields(c: dict) -> list[FieldControl]:
    return [
        FieldControl("url", "url", "File URL", _get(c, "url")),
        FieldControl("name", "text", "File name", _get(c, "name")),
    ]


def _slideshow_fields(c: dict) -> list[FieldControl]:
    fields = []
    for i, image in enumerate(_get(c, "images", [])):
        fields.append(
            FieldControl(f"images.{i}.url", "url", f"Slide {i + 1} URL", image.get("url", ""))
        )
        fields.append(
            FieldControl(
                f"images.{i}.caption", "text", f"Slide {i + 1} caption",
                image.get("caption", ""),
            )
        )
    return fields


def _link_list_fields(c: dict) -> list[FieldControl]:
    fields = [FieldControl("title", "text", "Title", _get(c, "title"))]
    for i, link in enumerate(_get(c, "links", [])):
        for key, kind in (("title", "text"), ("url", "url"), ("description", "text")):
            fields.append(
                FieldControl(
                    f"links.{i}.{key}", kind, f"Link {i + 1} {key}", link.get(key, "")
                )
            )
    return fields


def _flashcard_fields(c: dict) -> list[FieldControl]:
    fields = [FieldControl("title", "text", "Deck title", _get(c, "title"))]
    for i, card in enumerate(_get(c, "cards", [])):
        fields.append(
            FieldControl(f"cards.{i}.front", "textarea", f"Card {i + 1} front", card.get("front", ""))
        )
        fields.append(
            FieldControl(f"cards.{i}.back", "textarea", f"Card {i + 1} back", card.get("back", ""))
        )
    return fields


def _expandable_article_fields(c: dict) -> list[FieldControl]:
    return [
        FieldControl("title", "text", "Title", _get(c, "title")),
        FieldControl("summary", "textarea", "Summary", _get(c, "summary")),
        FieldControl("html", "richtext", "Article body", _get(c, "html")),
    ]


def _page_link_fields(c: dict) -> list[FieldControl]:
    return [
        FieldControl("title", "text", "Title", _get(c, "title")),
        FieldControl("url", "url", "URL", _get(c, "url")),
        FieldControl("description", "textarea", "Description", _get(c, "description")),
    ]


def _equation_fields(c: dict) -> list[FieldControl]:
    return [
        FieldControl("latex", "code", "LaTeX", _get(c, "latex")),
        FieldControl(
            "display_mode", "select", "Display", _get(c, "display_mode", "block"),
            _DISPLAY_MODES,
        ),
    ]


def _tabs_fields(c: dict) -> list[FieldControl]:
    fields = []
    for i, tab in enumerate(_get(c, "tabs", [])):
        fields.append(FieldControl(f"tabs.{i}.label", "text", f"Tab {i + 1} label", tab.get("label", "")))
        fields.append(FieldControl(f"tabs.{i}.html", "richtext", f"Tab {i + 1} body", tab.get("html", "")))
    return fields


def _accordion_fields(c: dict) -> list[FieldControl]:
    fields = []
    for i, item in enumerate(_get(c, "items", [])):
        fields.append(FieldControl(f"items.{i}.title", "text", f"Section {i + 1} title", item.get("title", "")))
        fields.append(FieldControl(f"items.{i}.html", "richtext", f"Section {i + 1} body", item.get("html", "")))
    fields.append(
        FieldControl(
            "allow_multiple", "checkbox", "Allow several open sections",
            _get(c, "allow_multiple", False),
        )
    )
    return fields


def _columns_fields(c: dict) -> list[FieldControl]:
    fields = [
        FieldControl(f"columns.{i}.html", "richtext", f"Column {i + 1}", column.get("html", ""))
        for i, column in enumerate(_get(c, "columns", []))
    ]
    fields.append(FieldControl("gap", "select", "Gap", _get(c, "gap", "md"), _GAPS))
    return fields


EDIT_FIELDS: dict[BlockType, Callable[[dict], list[FieldControl]]] = {
    BlockType.TEXT: _text_fields,
    BlockType.RAW_MARKUP: _raw_markup_fields,
    BlockType.IMAGE: _image_fields,
    BlockType.VIDEO: _video_fields,
    BlockType.AUDIO: _audio_fields,
    BlockType.CALLOUT: _callout_fields,
    BlockType.HIGHLIGHT: _highlight_fields,
    BlockType.KEY_TAKEAWAYS: _key_takeaways_fields,
    BlockType.DIVIDER: _divider_fields,
    BlockType.QUIZ: _quiz_fields,
    BlockType.EMBED: _embed_fields,
    BlockType.TABLE: _table_fields,
    BlockType.FILE: _file_fields,
    BlockType.SLIDESHOW: _slideshow_fields,
    BlockType.LINK_LIST: _link_list_fields,
    BlockType.FLASHCARD_DECK: _flashcard_fields,
    BlockType.EXPANDABLE_ARTICLE: _expandable_article_fields,
    BlockType.PAGE_LINK: _page_link_fields,
    BlockType.EQUATION: _equation_fields,
    BlockType.TABS: _tabs_fields,
    BlockType.ACCORDION: _accordion_fields,
    BlockType.COLUMNS: _columns_fields,
}

_PICKER: list[tuple[BlockType, str, str]] = [
    (BlockType.TEXT, "Text", "basic"),
    (BlockType.RAW_MARKUP, "Raw markup", "basic"),
    (BlockType.CALLOUT, "Callout", "basic"),
    (BlockType.HIGHLIGHT, "Highlight", "basic"),
    (BlockType.KEY_TAKEAWAYS, "Key takeaways", "basic"),
    (BlockType.DIVIDER, "Divider", "basic"),
    (BlockType.TABLE, "Table", "basic"),
    (BlockType.EQUATION, "Equation", "basic"),
    (BlockType.IMAGE, "Image", "media"),
    (BlockType.VIDEO, "Video", "media"),
    (BlockType.AUDIO, "Audio", "media"),
    (BlockType.SLIDESHOW, "Slideshow", "media"),
    (BlockType.EMBED, "Embed", "media"),
    (BlockType.FILE, "File", "media"),
    (BlockType.QUIZ, "Quiz", "interactive"),
    (BlockType.FLASHCARD_DECK, "Flashcards", "interactive"),
    (BlockType.TABS, "Tabs", "layout"),
    (BlockType.ACCORDION, "Accordion", "layout"),
    (BlockType.COLUMNS, "Columns", "layout"),
    (BlockType.LINK_LIST, "Link list", "reference"),
    (BlockType.EXPANDABLE_ARTICLE, "Expandable article", "reference"),
    (BlockType.PAGE_LINK, "Page link", "reference"),
]


def block_picker() -> list[PickerEntry]:
    """Insertable block types grouped for the insert menu."""
    return [PickerEntry(t, label, category) for t, label, category in _PICKER]


def edit_fields(block: Block) -> list[FieldControl]:
    return EDIT_FIELDS[block.type](block.content)


def render_edit(
    document: LessonDocument,
    selection: Selection | None = None,
) -> list[EditSurface]:
    """Project a document into edit surfaces, one per block in order.

    Args:
        document: Document to render
        selection: Current multi-selection, used to flag selected blocks

    Returns:
        Edit surfaces in document order
    """
    last = len(document) - 1
    surfaces = []
    for idx, block in enumerate(document):
        surfaces.append(
            EditSurface(
                block_id=block.id,
                type=block.type,
                fields=edit_fields(block),
                toolbar=Toolbar(can_move_up=idx > 0, can_move_down=idx < last),
                selected=selection is not None and block.id in selection,
                styled=block.style is not None,
            )
        )
    return surfaces

