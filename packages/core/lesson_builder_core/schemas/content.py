"""Block types and their content payload schemas.

Every block type owns exactly one payload schema. The schemas accept and keep
unknown keys so content written by newer editors survives a round-trip through
older ones. Blocks themselves store the raw payload dict; these models are used
to read it with defaults filled in.
"""

import copy
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from lesson_builder_core.utils.logging import get_logger

logger = get_logger(__name__)


class BlockType(str, Enum):
    """Closed set of block variants."""

    TEXT = "text"
    RAW_MARKUP = "raw-markup"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    CALLOUT = "callout"
    HIGHLIGHT = "highlight"
    KEY_TAKEAWAYS = "key-takeaways"
    DIVIDER = "divider"
    QUIZ = "quiz"
    EMBED = "embed"
    TABLE = "table"
    FILE = "file"
    SLIDESHOW = "slideshow"
    LINK_LIST = "link-list"
    FLASHCARD_DECK = "flashcard-deck"
    EXPANDABLE_ARTICLE = "expandable-article"
    PAGE_LINK = "page-link"
    EQUATION = "equation"
    TABS = "tabs"
    ACCORDION = "accordion"
    COLUMNS = "columns"


class CalloutKind(str, Enum):
    """Callout subtypes."""

    INFO = "info"
    NOTE = "note"
    FORMULA = "formula"
    EXAMPLE = "example"
    TIP = "tip"
    WARNING = "warning"
    DANGER = "danger"


class BlockContent(BaseModel):
    """Base class for block payloads."""

    model_config = ConfigDict(extra="allow")


class TextContent(BlockContent):
    html: str = Field("<p>Enter text here...</p>", description="Rich text markup")


class RawMarkupContent(BlockContent):
    code: str = Field("", description="Markup rendered verbatim")


class ImageContent(BlockContent):
    url: str = ""
    alt: str = ""
    caption: str = ""
    alignment: str = Field("center", description="left, center or right")


class VideoContent(BlockContent):
    url: str = ""
    type: str = Field("youtube", description="youtube, vimeo or upload")
    caption: str = ""


class AudioContent(BlockContent):
    url: str = ""
    title: str = ""
    transcript: str = ""


class CalloutContent(BlockContent):
    type: CalloutKind = CalloutKind.INFO
    text: str = "Important information here."


class HighlightContent(BlockContent):
    text: str = ""
    color: str = "yellow"


class KeyTakeawaysContent(BlockContent):
    title: str = "Key Takeaways"
    items: list[str] = Field(default_factory=lambda: [""])


class DividerContent(BlockContent):
    pass


class QuizContent(BlockContent):
    question: str = ""
    options: list[str] = Field(default_factory=lambda: ["", ""])
    correct: int = Field(0, ge=0, description="Index of the correct option")
    explanation: str = ""
    question_id: str | None = Field(
        None, description="Question bank entry this quiz was imported from"
    )


class EmbedContent(BlockContent):
    url: str = ""
    height: int = 400


class TableContent(BlockContent):
    headers: list[str] = Field(default_factory=lambda: ["Column 1", "Column 2"])
    rows: list[list[str]] = Field(default_factory=lambda: [["", ""]])


class FileContent(BlockContent):
    url: str = ""
    name: str = ""
    size: int = 0
    type: str = ""


class SlideImage(BlockContent):
    url: str = ""
    caption: str = ""


class SlideshowContent(BlockContent):
    images: list[SlideImage] = Field(default_factory=list)


class LinkItem(BlockContent):
    title: str = ""
    url: str = ""
    description: str = ""


class LinkListContent(BlockContent):
    title: str = ""
    links: list[LinkItem] = Field(default_factory=list)


class FlashcardItem(BlockContent):
    front: str = ""
    back: str = ""


class FlashcardDeckContent(BlockContent):
    title: str = ""
    cards: list[FlashcardItem] = Field(default_factory=lambda: [FlashcardItem()])


class ExpandableArticleContent(BlockContent):
    title: str = ""
    summary: str = ""
    html: str = ""
    article_id: str | None = None


class PageLinkContent(BlockContent):
    title: str = ""
    url: str = ""
    description: str = ""
    lesson_id: str | None = None


class EquationContent(BlockContent):
    latex: str = ""
    display_mode: str = Field("block", description="block or inline")


class TabPane(BlockContent):
    label: str = ""
    html: str = ""


class TabsContent(BlockContent):
    tabs: list[TabPane] = Field(
        default_factory=lambda: [TabPane(label="Tab 1"), TabPane(label="Tab 2")]
    )


class AccordionItem(BlockContent):
    title: str = ""
    html: str = ""


class AccordionContent(BlockContent):
    items: list[AccordionItem] = Field(
        default_factory=lambda: [AccordionItem(title="Section 1")]
    )
    allow_multiple: bool = False


class Column(BlockContent):
    html: str = ""


class ColumnsContent(BlockContent):
    columns: list[Column] = Field(default_factory=lambda: [Column(), Column()])
    gap: str = "md"


CONTENT_SCHEMAS: dict[BlockType, type[BlockContent]] = {
    BlockType.TEXT: TextContent,
    BlockType.RAW_MARKUP: RawMarkupContent,
    BlockType.IMAGE: ImageContent,
    BlockType.VIDEO: VideoContent,
    BlockType.AUDIO: AudioContent,
    BlockType.CALLOUT: CalloutContent,
    BlockType.HIGHLIGHT: HighlightContent,
    BlockType.KEY_TAKEAWAYS: KeyTakeawaysContent,
    BlockType.DIVIDER: DividerContent,
    BlockType.QUIZ: QuizContent,
    BlockType.EMBED: EmbedContent,
    BlockType.TABLE: TableContent,
    BlockType.FILE: FileContent,
    BlockType.SLIDESHOW: SlideshowContent,
    BlockType.LINK_LIST: LinkListContent,
    BlockType.FLASHCARD_DECK: FlashcardDeckContent,
    BlockType.EXPANDABLE_ARTICLE: ExpandableArticleContent,
    BlockType.PAGE_LINK: PageLinkContent,
    BlockType.EQUATION: EquationContent,
    BlockType.TABS: TabsContent,
    BlockType.ACCORDION: AccordionContent,
    BlockType.COLUMNS: ColumnsContent,
}


def default_content(block_type: BlockType) -> dict[str, Any]:
    """Return the payload a freshly inserted block of this type starts with."""
    schema = CONTENT_SCHEMAS[BlockType(block_type)]
    return schema().model_dump(mode="json", exclude_none=True)


def validate_content(block_type: BlockType, content: dict[str, Any]) -> BlockContent:
    """Validate a raw payload against its type schema.

    Raises:
        pydantic.ValidationError: If the payload does not fit the schema
    """
    schema = CONTENT_SCHEMAS[BlockType(block_type)]
    return schema.model_validate(content)


def read_content(block_type: BlockType, content: dict[str, Any]) -> BlockContent:
    """Read a payload for display, falling back to defaults if it is malformed."""
    try:
        return validate_content(block_type, content)
    except ValidationError as e:
        logger.warning(f"Malformed {BlockType(block_type).value} payload: {e}")
        return CONTENT_SCHEMAS[BlockType(block_type)]()


def set_content_path(content: dict[str, Any], path: str, value: Any) -> dict[str, Any]:
    """Return a copy of ``content`` with the value at a dotted path replaced.

    Numeric segments index into lists. Missing dict keys are created; list
    indices must already exist.

    Raises:
        KeyError: If the path does not resolve
    """
    updated = copy.deepcopy(content)
    parts = path.split(".")
    node: Any = updated
    try:
        for part in parts[:-1]:
            if isinstance(node, list):
                node = node[int(part)]
            else:
                node = node.setdefault(part, {})
        last = parts[-1]
        if isinstance(node, list):
            node[int(last)] = value
        elif isinstance(node, dict):
            node[last] = value
        else:
            raise KeyError(path)
    except (IndexError, ValueError, AttributeError) as e:
        raise KeyError(path) from e
    return updated
