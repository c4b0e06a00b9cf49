"""Tests for the editor controller."""

import pytest

from lesson_builder_core.config import EditorConfig
from lesson_builder_core.converter import convert_legacy_markup
from lesson_builder_core.document.editor import LessonEditor
from lesson_builder_core.document.reorder import DragPhase
from lesson_builder_core.errors import (
    BlockNotFoundError,
    InvalidDragTransition,
    QuestionImportError,
)
from lesson_builder_core.schemas.blocks import Block
from lesson_builder_core.schemas.content import BlockType
from lesson_builder_core.schemas.lessons import QuestionCandidate, QuestionType
from lesson_builder_core.schemas.style import BlockStyle, ShadowTier
from lesson_builder_core.templates.store import template_blocks_from


def labelled(*labels: str) -> list[Block]:
    """Text blocks whose html is their label, for readable assertions."""
    return [
        Block(type=BlockType.TEXT, content={"html": label}, order_index=i)
        for i, label in enumerate(labels)
    ]


def labels(editor: LessonEditor) -> list[str]:
    return [block.content.get("html", "") for block in editor.document]


def by_label(editor: LessonEditor, label: str) -> str:
    for block in editor.document:
        if block.content.get("html") == label:
            return block.id
    raise AssertionError(label)


@pytest.fixture
def editor() -> LessonEditor:
    """Editor over [A, B, C, D, E]."""
    return LessonEditor(labelled("A", "B", "C", "D", "E"))


class TestScenarios:
    """End-to-end editing scenarios."""

    def test_drag_reorder(self) -> None:
        """Test dragging A to drop slot 3 in [A, B, C, D]."""
        editor = LessonEditor(labelled("A", "B", "C", "D"))
        editor.start_drag(by_label(editor, "A"))
        editor.hover_drag(3)
        assert editor.drop() is True
        assert labels(editor) == ["B", "C", "A", "D"]
        assert [b.order_index for b in editor.document] == [0, 1, 2, 3]

    def test_bulk_delete(self, editor: LessonEditor) -> None:
        """Test deleting a {B, D} selection from [A, B, C, D, E]."""
        editor.select(by_label(editor, "B"))
        editor.toggle_select(by_label(editor, "D"))
        removed = editor.delete_selected()

        assert sorted(b.content["html"] for b in removed) == ["B", "D"]
        assert labels(editor) == ["A", "C", "E"]
        assert [b.order_index for b in editor.document] == [0, 1, 2]
        assert len(editor.selection) == 0


class TestEditorHistory:
    """Tests for history capture through the controller."""

    def test_every_mutation_is_undoable(self, editor: LessonEditor) -> None:
        """Test undo after each kind of mutation."""
        before = editor.document.snapshot()
        a = by_label(editor, "A")

        editor.insert_block(BlockType.DIVIDER, 2)
        editor.duplicate_block(a)
        editor.move_down(a)
        editor.update_content(a, {"html": "A2"})
        editor.update_style(a, BlockStyle(shadow=ShadowTier.MD))
        editor.delete_block(by_label(editor, "E"))

        for _ in range(6):
            assert editor.undo() is True
        assert editor.undo() is False
        assert editor.document.snapshot() == before

    def test_undo_redo_duality(self, editor: LessonEditor) -> None:
        """Test that redo after undo restores the exact state."""
        editor.insert_block(BlockType.QUIZ, 0)
        after = editor.document.snapshot()
        editor.undo()
        editor.redo()
        assert editor.document.snapshot() == after

    def test_restore_is_not_recorded(self, editor: LessonEditor) -> None:
        """Test that undo does not push a new entry."""
        editor.insert_block(BlockType.TEXT)
        depth = editor.history.undo_depth
        editor.undo()
        assert editor.history.undo_depth == depth - 1
        assert editor.can_redo is True

    def test_noop_moves_not_recorded(self, editor: LessonEditor) -> None:
        """Test that boundary moves add no history."""
        assert editor.move_up(by_label(editor, "A")) is False
        assert editor.can_undo is False
        assert editor.dirty is False

    def test_bulk_operation_is_one_entry(self, editor: LessonEditor) -> None:
        """Test that a bulk duplicate is undone in one step."""
        editor.select_all()
        copies = editor.duplicate_selected()
        assert len(copies) == 5
        assert len(editor.document) == 10
        assert editor.selection.ids == {c.id for c in copies}
        editor.undo()
        assert labels(editor) == ["A", "B", "C", "D", "E"]

    def test_history_limit_from_config(self) -> None:
        """Test that the configured capacity is used."""
        editor = LessonEditor(config=EditorConfig(history_limit=2))
        for _ in range(4):
            editor.insert_block(BlockType.TEXT)
        assert editor.undo() is True
        assert editor.undo() is False


class TestEditorOperations:
    """Tests for the remaining editor operations."""

    def test_range_selection_uses_document_order(self, editor: LessonEditor) -> None:
        """Test shift-click selection through the editor."""
        editor.select(by_label(editor, "D"))
        editor.extend_select(by_label(editor, "B"))
        assert [b.content["html"] for b in editor.selected_blocks()] == ["B", "C", "D"]

    def test_delete_prunes_selection(self, editor: LessonEditor) -> None:
        """Test that removed blocks leave the selection."""
        b = by_label(editor, "B")
        editor.select(b)
        editor.delete_block(b)
        assert len(editor.selection) == 0

    def test_cancelled_drag_changes_nothing(self, editor: LessonEditor) -> None:
        """Test cancelling a drag."""
        editor.start_drag(by_label(editor, "A"))
        editor.hover_drag(4)
        editor.cancel_drag()
        assert editor.drag.phase == DragPhase.CANCELLED
        with pytest.raises(InvalidDragTransition):
            editor.drop()
        assert labels(editor) == ["A", "B", "C", "D", "E"]

    def test_drop_on_own_slot_is_noop(self, editor: LessonEditor) -> None:
        """Test that dropping a block where it already is adds no history."""
        assert editor.move_block(by_label(editor, "C"), 3) is False
        assert editor.can_undo is False

    def test_drop_past_end_clamps(self, editor: LessonEditor) -> None:
        """Test that oversized drop slots mean the end of the document."""
        editor.move_block(by_label(editor, "A"), 99)
        assert labels(editor) == ["B", "C", "D", "E", "A"]

    def test_failed_move_releases_the_drag(self, editor: LessonEditor) -> None:
        """Test that a rejected drop slot does not block later moves."""
        with pytest.raises(ValueError):
            editor.move_block(by_label(editor, "A"), -1)
        assert editor.drag.active is False
        assert labels(editor) == ["A", "B", "C", "D", "E"]

        assert editor.move_block(by_label(editor, "A"), 2) is True
        assert labels(editor) == ["B", "A", "C", "D", "E"]

        with pytest.raises(BlockNotFoundError):
            editor.move_block("missing", 0)
        editor.start_drag(by_label(editor, "C"))
        assert editor.drag.phase == DragPhase.DRAGGING

    def test_set_field(self) -> None:
        """Test path-based content edits."""
        editor = LessonEditor()
        deck = editor.insert_block(BlockType.FLASHCARD_DECK)
        editor.set_field(deck.id, "cards.0.front", "Q")
        assert editor.document.get(deck.id).content["cards"][0]["front"] == "Q"
        editor.undo()
        assert editor.document.get(deck.id).content["cards"][0]["front"] == ""

    def test_apply_template(self, editor: LessonEditor) -> None:
        """Test splicing template blocks with fresh ids."""
        source = [editor.document.get(by_label(editor, "A"))]
        template = template_blocks_from(source)
        inserted = editor.apply_template(template, at_index=2)

        assert labels(editor) == ["A", "B", "A", "C", "D", "E"]
        assert inserted[0].id != source[0].id
        assert [b.order_index for b in editor.document] == list(range(6))
        assert editor.apply_template([]) == []

    def test_import_question(self) -> None:
        """Test quiz blocks built from question bank entries."""
        editor = LessonEditor()
        candidate = QuestionCandidate(
            id="q1",
            question_text="Capital of France?",
            question_type=QuestionType.MULTIPLE_CHOICE,
            options=["Berlin", "Paris"],
            correct_answer="Paris",
            explanation="It is Paris.",
        )
        block = editor.import_question(candidate)
        assert block.type == BlockType.QUIZ
        assert block.content == {
            "question": "Capital of France?",
            "options": ["Berlin", "Paris"],
            "correct": 1,
            "explanation": "It is Paris.",
            "question_id": "q1",
        }
        assert editor.history.undo_depth == 2

    def test_import_multi_select_question(self) -> None:
        """Test how multi-select answers resolve to a single correct option."""
        editor = LessonEditor()
        single = QuestionCandidate(
            id="q2",
            question_text="Pick the vowel",
            question_type=QuestionType.MULTI_SELECT,
            options=["A", "B", "C"],
            correct_answer=" a ; ",
        )
        assert editor.import_question(single).content["correct"] == 0

        several = single.model_copy(update={"id": "q3", "correct_answer": "B,C"})
        with pytest.raises(QuestionImportError, match="names 2 options"):
            editor.import_question(several)

        unknown = single.model_copy(update={"id": "q4", "correct_answer": "D"})
        with pytest.raises(QuestionImportError, match="matches no option"):
            editor.import_question(unknown)

        assert len(editor.document) == 1
        assert editor.history.undo_depth == 2

    def test_listeners_fire_on_change(self, editor: LessonEditor) -> None:
        """Test change notifications."""
        calls = []
        editor.add_listener(lambda: calls.append(1))
        editor.insert_block(BlockType.TEXT)
        editor.undo()
        assert len(calls) == 2

    def test_apply_conversion_is_pending_baseline(self) -> None:
        """Test converted blocks are unsaved and not undoable to empty."""
        editor = LessonEditor()
        editor.apply_conversion(convert_legacy_markup("<p>a</p><hr><p>b</p>"))
        assert len(editor.document) == 3
        assert editor.pending_conversion is True
        assert editor.dirty is True
        assert editor.can_undo is False

        revision = editor.revision
        editor.insert_block(BlockType.TEXT)
        editor.mark_saved(revision)
        assert editor.dirty is True
        editor.mark_saved(editor.revision)
        assert editor.dirty is False
        assert editor.pending_conversion is False
