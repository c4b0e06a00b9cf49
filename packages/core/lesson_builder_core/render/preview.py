"""Preview-mode projection and reader interactions.

The preview shows a lesson as a reader sees it. Interactive blocks (quizzes,
flashcards, tabs, accordions, slideshows) and style reveal/collapse toggles
keep their state in a ``ViewStateStore``; block content is only ever read.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from lesson_builder_core.document.model import LessonDocument
from lesson_builder_core.render.style import StyleDescriptor, resolve_style
from lesson_builder_core.render.view_state import BlockViewState, ViewStateStore
from lesson_builder_core.schemas.blocks import Block
from lesson_builder_core.schemas.content import (
    AccordionContent,
    BlockContent,
    BlockType,
    FlashcardDeckContent,
    QuizContent,
    SlideshowContent,
    TabsContent,
)


@dataclass(frozen=True)
class PreviewNode:
    """Reader-facing projection of one block."""

    block_id: str
    type: BlockType
    props: dict[str, Any] = field(default_factory=dict)
    style: StyleDescriptor = field(default_factory=StyleDescriptor)
    visible: bool = True
    expanded: bool = True


def _plain(content: BlockContent, state: BlockViewState) -> dict[str, Any]:
    return content.model_dump(mode="json", exclude_none=True)


def _quiz(content: QuizContent, state: BlockViewState) -> dict[str, Any]:
    props: dict[str, Any] = {
        "question": content.question,
        "options": list(content.options),
        "selected": sorted(state.quiz_selected),
        "submitted": state.quiz_submitted,
    }
    if state.quiz_submitted:
        props["correct"] = content.correct
        props["is_correct"] = state.quiz_selected == {content.correct}
        props["explanation"] = content.explanation
    return props


def _flashcards(content: FlashcardDeckContent, state: BlockViewState) -> dict[str, Any]:
    total = len(content.cards)
    props: dict[str, Any] = {
        "title": content.title,
        "total": total,
        "index": state.card_index,
        "flipped": state.card_flipped,
    }
    if total:
        card = content.cards[min(state.card_index, total - 1)]
        props["face"] = card.back if state.card_flipped else card.front
    return props


def _tabs(content: TabsContent, state: BlockViewState) -> dict[str, Any]:
    labels = [tab.label for tab in content.tabs]
    props: dict[str, Any] = {"labels": labels, "active": state.tab_index}
    if content.tabs:
        props["html"] = content.tabs[min(state.tab_index, len(labels) - 1)].html
    return props


def _accordion(content: AccordionContent, state: BlockViewState) -> dict[str, Any]:
    return {
        "allow_multiple": content.allow_multiple,
        "items": [
            {"title": item.title, "html": item.html, "open": i in state.open_sections}
            for i, item in enumerate(content.items)
        ],
    }


def _slideshow(content: SlideshowContent, state: BlockViewState) -> dict[str, Any]:
    total = len(content.images)
    props: dict[str, Any] = {"total": total, "index": state.slide_index}
    if total:
        props["slide"] = content.images[min(state.slide_index, total - 1)].model_dump(
            mode="json"
        )
    return props


PREVIEW_PROJECTIONS: dict[BlockType, Callable[[Any, BlockViewState], dict[str, Any]]] = {
    BlockType.TEXT: _plain,
    BlockType.RAW_MARKUP: _plain,
    BlockType.IMAGE: _plain,
    BlockType.VIDEO: _plain,
    BlockType.AUDIO: _plain,
    BlockType.CALLOUT: _plain,
    BlockType.HIGHLIGHT: _plain,
    BlockType.KEY_TAKEAWAYS: _plain,
    BlockType.DIVIDER: _plain,
    BlockType.QUIZ: _quiz,
    BlockType.EMBED: _plain,
    BlockType.TABLE: _plain,
    BlockType.FILE: _plain,
    BlockType.SLIDESHOW: _slideshow,
    BlockType.LINK_LIST: _plain,
    BlockType.FLASHCARD_DECK: _flashcards,
    BlockType.EXPANDABLE_ARTICLE: _plain,
    BlockType.PAGE_LINK: _plain,
    BlockType.EQUATION: _plain,
    BlockType.TABS: _tabs,
    BlockType.ACCORDION: _accordion,
    BlockType.COLUMNS: _plain,
}


class PreviewRenderer:
    """Renders documents for readers and applies reader interactions."""

    def __init__(self, view_state: ViewStateStore | None = None):
        self.view_state = view_state or ViewStateStore()

    def render_block(self, block: Block) -> PreviewNode:
        state = self.view_state.peek(block.id)
        descriptor = resolve_style(block.style)
        visible = not descriptor.hidden_until_revealed or state.revealed
        # Unrevealed blocks carry only the reveal control.
        props = (
            PREVIEW_PROJECTIONS[block.type](block.typed_content(), state)
            if visible
            else {}
        )
        return PreviewNode(
            block_id=block.id,
            type=block.type,
            props=props,
            style=descriptor,
            visible=visible,
            expanded=not descriptor.collapsible or state.expanded,
        )

    def render(self, document: LessonDocument) -> list[PreviewNode]:
        """Project every block in order, dropping state for removed blocks."""
        self.view_state.prune(document.ids())
        return [self.render_block(block) for block in document]

    # Quiz

    def select_quiz_option(self, block: Block, option: int) -> None:
        """Pick an answer. Ignored once the quiz has been submitted."""
        content = _typed(block, BlockType.QUIZ)
        state = self.view_state.get(block.id)
        if state.quiz_submitted:
            return
        if not 0 <= option < len(content.options):
            raise IndexError(f"Quiz has no option {option}")
        state.quiz_selected = {option}

    def submit_quiz(self, block: Block) -> bool | None:
        """Submit the selected answer.

        Returns:
            Whether the answer is correct, or None if nothing is selected
        """
        content = _typed(block, BlockType.QUIZ)
        state = self.view_state.get(block.id)
        if not state.quiz_selected:
            return None
        state.quiz_submitted = True
        return state.quiz_selected == {content.correct}

    def reset_quiz(self, block: Block) -> None:
        state = self.view_state.get(block.id)
        state.quiz_selected = set()
        state.quiz_submitted = False

    # Flashcards

    def flip_card(self, block: Block) -> None:
        _typed(block, BlockType.FLASHCARD_DECK)
        state = self.view_state.get(block.id)
        state.card_flipped = not state.card_flipped

    def next_card(self, block: Block) -> int:
        total = len(_typed(block, BlockType.FLASHCARD_DECK).cards)
        return self._step_card(block, total, 1)

    def previous_card(self, block: Block) -> int:
        total = len(_typed(block, BlockType.FLASHCARD_DECK).cards)
        return self._step_card(block, total, -1)

    def _step_card(self, block: Block, total: int, step: int) -> int:
        state = self.view_state.get(block.id)
        if total:
            state.card_index = (state.card_index + step) % total
        state.card_flipped = False
        return state.card_index

    # Tabs and accordion

    def select_tab(self, block: Block, index: int) -> None:
        tabs = _typed(block, BlockType.TABS).tabs
        if not 0 <= index < len(tabs):
            raise IndexError(f"Tabs block has no tab {index}")
        self.view_state.get(block.id).tab_index = index

    def toggle_accordion(self, block: Block, index: int) -> bool:
        """Open or close one section. Returns whether it is now open.

        When the accordion does not allow several open sections, opening one
        closes the others.
        """
        content = _typed(block, BlockType.ACCORDION)
        if not 0 <= index < len(content.items):
            raise IndexError(f"Accordion has no section {index}")
        state = self.view_state.get(block.id)
        if index in state.open_sections:
            state.open_sections.discard(index)
            return False
        if not content.allow_multiple:
            state.open_sections.clear()
        state.open_sections.add(index)
        return True

    # Slideshow

    def next_slide(self, block: Block) -> int:
        return self._step_slide(block, 1)

    def previous_slide(self, block: Block) -> int:
        return self._step_slide(block, -1)

    def _step_slide(self, block: Block, step: int) -> int:
        total = len(_typed(block, BlockType.SLIDESHOW).images)
        state = self.view_state.get(block.id)
        if total:
            state.slide_index = (state.slide_index + step) % total
        return state.slide_index

    # Style toggles

    def reveal(self, block: Block) -> None:
        self.view_state.get(block.id).revealed = True

    def rehide(self, block: Block) -> None:
        self.view_state.get(block.id).revealed = False

    def toggle_collapsed(self, block: Block) -> bool:
        """Expand or collapse a collapsible block. Returns the new expanded flag."""
        state = self.view_state.get(block.id)
        state.expanded = not state.expanded
        return state.expanded


def _typed(block: Block, expected: BlockType) -> Any:
    if block.type != expected:
        raise TypeError(f"Expected a {expected.value} block, got {block.type.value}")
    return block.typed_content()
