"""Convert legacy free-form lesson markup into blocks.

The converter walks the parsed markup in document order and recognises a
handful of structural elements (rules, tables, images, iframes, styled callout
containers, section headings). Everything else accumulates into a pending
markup buffer that becomes a ``text`` block whenever a structural element is
reached, and once more at the end.

Conversion never raises and never drops the source: if parsing fails or no
block is produced from non-empty input, the whole source becomes a single
``text`` block verbatim.
"""

from dataclasses import dataclass, field

from bs4 import BeautifulSoup
from bs4.element import (
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    PageElement,
    ProcessingInstruction,
    Tag,
)

from lesson_builder_core.config import ConverterConfig
from lesson_builder_core.schemas.blocks import Block
from lesson_builder_core.schemas.content import BlockType, CalloutKind
from lesson_builder_core.utils.logging import get_logger

logger = get_logger(__name__)

_SKIPPED_STRINGS = (Comment, Declaration, Doctype, ProcessingInstruction)

# Inline-style colour signatures used by the old authoring templates, checked
# in order. The first match wins.
_CALLOUT_SIGNATURES: list[tuple[CalloutKind, tuple[str, ...], tuple[str, ...]]] = [
    (CalloutKind.FORMULA, ("#1a1a2e",), ()),
    (CalloutKind.NOTE, ("#f0f4f8",), ("#2563eb",)),
    (CalloutKind.EXAMPLE, ("#fffbeb",), ()),
    (CalloutKind.TIP, ("#ecfdf5",), ()),
    (CalloutKind.DANGER, ("#fee2e2", "#fef2f2"), ("#dc2626",)),
    (CalloutKind.WARNING, ("#fef3c7", "#f59e0b"), ()),
    (CalloutKind.INFO, ("#eff6ff", "#dbeafe"), ()),
]

_CALLOUT_CLASS_MARKERS = ("callout", "alert", "note", "warning", "tip")


@dataclass
class ConversionResult:
    """Blocks produced from legacy markup plus anything worth a second look."""

    blocks: list[Block] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    used_fallback: bool = False


def needs_conversion(block_count: int, markup: str | None) -> bool:
    """True when a lesson has no blocks yet but still carries legacy markup."""
    return block_count == 0 and bool(markup and markup.strip())


def match_callout_styles(style: str) -> list[CalloutKind]:
    """Return every callout kind whose signature appears in an inline style.

    Args:
        style: Raw ``style`` attribute value

    Returns:
        Matching kinds in priority order (empty if none match)
    """
    s = style.lower()
    matches: list[CalloutKind] = []
    for kind, colours, left_border_colours in _CALLOUT_SIGNATURES:
        if any(colour in s for colour in colours):
            matches.append(kind)
        elif "border-left" in s and any(c in s for c in left_border_colours):
            matches.append(kind)
    return matches


def detect_callout_type(style: str) -> CalloutKind | None:
    """Map an inline style to a callout kind, or None if it is not a callout."""
    matches = match_callout_styles(style)
    return matches[0] if matches else None


def callout_kind_from_classes(class_names: str) -> CalloutKind | None:
    """Map container class names to a callout kind."""
    cls = class_names.lower()
    if not any(marker in cls for marker in _CALLOUT_CLASS_MARKERS):
        return None
    if "warning" in cls or "danger" in cls:
        return CalloutKind.WARNING
    if "tip" in cls or "success" in cls:
        return CalloutKind.TIP
    if "example" in cls:
        return CalloutKind.EXAMPLE
    if "note" in cls:
        return CalloutKind.NOTE
    return CalloutKind.INFO


class _MarkupWalker:
    """Single-use tree walker that accumulates blocks."""

    def __init__(self, config: ConverterConfig):
        self.config = config
        self.blocks: list[Block] = []
        self.warnings: list[str] = []
        self.pending = ""

    def emit(self, block_type: BlockType, content: dict) -> None:
        self.blocks.append(Block(type=block_type, content=content))

    def flush(self) -> None:
        trimmed = self.pending.strip()
        self.pending = ""
        if trimmed:
            self.emit(BlockType.TEXT, {"html": trimmed})

    def visit(self, node: PageElement) -> None:
        if isinstance(node, NavigableString):
            if isinstance(node, _SKIPPED_STRINGS):
                return
            if node.strip():
                self.pending += node.output_ready(formatter="minimal")
            return

        if not isinstance(node, Tag):
            return

        tag = node.name.lower()

        if tag == "hr":
            self.flush()
            self.emit(BlockType.DIVIDER, {})
            return

        if tag == "table":
            self.flush()
            self.emit(BlockType.TABLE, _table_content(node))
            return

        if tag == "img":
            self.flush()
            self.emit(
                BlockType.IMAGE,
                {
                    "url": node.get("src", ""),
                    "alt": node.get("alt", ""),
                    "caption": "",
                    "alignment": "center",
                },
            )
            return

        if tag == "div":
            kind = self._callout_kind(node)
            if kind is not None:
                self.flush()
                self.emit(
                    BlockType.CALLOUT,
                    {"type": kind.value, "text": node.decode_contents().strip()},
                )
                return
            for child in list(node.children):
                self.visit(child)
            return

        if tag == "iframe" and self.config.convert_iframes:
            self.flush()
            self._emit_iframe(node)
            return

        if tag in self.config.heading_tags:
            self.flush()
            self.pending = str(node)
            if self.config.standalone_headings:
                self.flush()
            return

        self.pending += str(node)

    def _callout_kind(self, node: Tag) -> CalloutKind | None:
        style = node.get("style", "")
        matches = match_callout_styles(style)
        if matches:
            if len(set(matches)) > 1:
                self.warnings.append(
                    f"Ambiguous callout style {style!r} matches "
                    f"{', '.join(m.value for m in matches)}; using {matches[0].value}"
                )
            return matches[0]
        if self.config.detect_class_callouts:
            classes = " ".join(node.get("class", []))
            kind = callout_kind_from_classes(classes)
            if kind is not None:
                self.warnings.append(
                    f"Callout detected from class names {classes!r} as {kind.value}"
                )
            return kind
        return None

    def _emit_iframe(self, node: Tag) -> None:
        src = node.get("src", "")
        if any(host in src for host in self.config.video_hosts):
            video_type = "vimeo" if "vimeo" in src else "youtube"
            self.emit(BlockType.VIDEO, {"url": src, "type": video_type, "caption": ""})
            return
        try:
            height = int(node.get("height", self.config.default_embed_height))
        except (TypeError, ValueError):
            height = self.config.default_embed_height
        self.emit(BlockType.EMBED, {"url": src, "height": height})


def _row_cells(row: Tag) -> list[str]:
    return [
        cell.decode_contents().strip()
        for cell in row.find_all(["th", "td"], recursive=False)
    ]


def _table_content(table: Tag) -> dict:
    """Extract headers and rows from a table element.

    Header cells come from ``<thead>``. Without one, the first row is used as
    the header list and removed from the data rows.
    """
    own_rows = [tr for tr in table.find_all("tr") if tr.find_parent("table") is table]
    header_rows = [tr for tr in own_rows if tr.find_parent("thead") is not None]
    body_rows = [tr for tr in own_rows if tr.find_parent("thead") is None]

    headers: list[str] = []
    if header_rows:
        headers = _row_cells(header_rows[0])
    elif body_rows:
        headers = _row_cells(body_rows[0])
        body_rows = body_rows[1:]

    rows = [cells for cells in (_row_cells(tr) for tr in body_rows) if cells]
    return {"headers": headers, "rows": rows}


def convert_legacy_markup(
    markup: str | None,
    config: ConverterConfig | None = None,
) -> ConversionResult:
    """Convert legacy markup into a fresh block sequence.

    Args:
        markup: Legacy lesson body
        config: Conversion options

    Returns:
        ConversionResult with renumbered blocks and any heuristic warnings
    """
    if not markup or not markup.strip():
        return ConversionResult()

    config = config or ConverterConfig()
    walker = _MarkupWalker(config)
    try:
        soup = BeautifulSoup(markup, "html.parser")
        for child in list(soup.children):
            walker.visit(child)
        walker.flush()
    except Exception as e:
        logger.warning(f"Legacy markup conversion failed, keeping source verbatim: {e}")
        walker.blocks = []

    result = ConversionResult(blocks=walker.blocks, warnings=walker.warnings)
    if not result.blocks:
        result.blocks = [Block(type=BlockType.TEXT, content={"html": markup})]
        result.used_fallback = True

    for idx, block in enumerate(result.blocks):
        block.order_index = idx

    logger.info(
        f"Converted legacy markup into {len(result.blocks)} blocks"
        + (" (verbatim fallback)" if result.used_fallback else "")
    )
    for warning in result.warnings:
        logger.warning(warning)
    return result
