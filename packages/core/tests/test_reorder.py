"""Tests for drag reordering and multi-selection."""

import pytest

from lesson_builder_core.document.model import LessonDocument
from lesson_builder_core.document.reorder import (
    DragPhase,
    DragSession,
    MoveRequest,
    Selection,
    compute_target_index,
)
from lesson_builder_core.errors import InvalidDragTransition
from lesson_builder_core.schemas.content import BlockType


def apply_move(document: LessonDocument, request: MoveRequest) -> None:
    source = document.index_of(request.source_id)
    document.move_to(request.source_id, compute_target_index(source, request.drop_index))


class TestComputeTargetIndex:
    """Tests for drop slot translation."""

    def test_drop_before_source(self) -> None:
        """Test that slots before the source are used as-is."""
        assert compute_target_index(3, 0) == 0
        assert compute_target_index(3, 3) == 3

    def test_drop_after_source(self) -> None:
        """Test that slots after the source shift down by one."""
        assert compute_target_index(0, 3) == 2
        assert compute_target_index(1, 4) == 3

    def test_every_move_lands_on_target(self) -> None:
        """Test that the dragged block ends up at the computed index."""
        for size in range(1, 6):
            for source in range(size):
                for drop in range(size + 1):
                    document = LessonDocument()
                    for _ in range(size):
                        document.insert(BlockType.TEXT)
                    dragged = document[source].id
                    others = [i for i in document.ids() if i != dragged]

                    apply_move(document, MoveRequest(dragged, drop))

                    target = compute_target_index(source, drop)
                    assert document.index_of(dragged) == target
                    assert [i for i in document.ids() if i != dragged] == others
                    assert [b.order_index for b in document] == list(range(size))


class TestDragSession:
    """Tests for the drag state machine."""

    def test_full_gesture(self) -> None:
        """Test idle -> dragging -> hovering -> committed."""
        session = DragSession()
        assert session.phase == DragPhase.IDLE
        session.start("a")
        assert session.phase == DragPhase.DRAGGING
        session.hover(2)
        assert session.phase == DragPhase.HOVERING
        session.hover(3)
        assert session.commit() == MoveRequest("a", 3)
        assert session.phase == DragPhase.COMMITTED

    def test_leave_returns_to_dragging(self) -> None:
        """Test that leaving every slot keeps the drag alive."""
        session = DragSession()
        session.start("a")
        session.hover(1)
        session.leave()
        assert session.phase == DragPhase.DRAGGING
        with pytest.raises(InvalidDragTransition):
            session.commit()

    def test_cancel(self) -> None:
        """Test cancelling a drag."""
        session = DragSession()
        session.start("a")
        session.hover(1)
        session.cancel()
        assert session.phase == DragPhase.CANCELLED
        with pytest.raises(InvalidDragTransition):
            session.commit()

    def test_invalid_transitions(self) -> None:
        """Test events the current phase cannot accept."""
        session = DragSession()
        with pytest.raises(InvalidDragTransition):
            session.hover(0)
        with pytest.raises(InvalidDragTransition):
            session.cancel()
        session.start("a")
        with pytest.raises(InvalidDragTransition):
            session.start("b")

    def test_restart_after_finish(self) -> None:
        """Test that a finished session can start a new gesture."""
        session = DragSession()
        session.start("a")
        session.cancel()
        session.start("b")
        assert session.source_id == "b"
        assert session.drop_index is None

    def test_commit_without_drop_slot(self) -> None:
        """Test that a hovering session missing its slot refuses to drop."""
        session = DragSession()
        session.start("a")
        session.phase = DragPhase.HOVERING
        with pytest.raises(InvalidDragTransition, match="drop slot"):
            session.commit()


class TestSelection:
    """Tests for click, toggle and range selection."""

    ORDER = ["a", "b", "c", "d", "e"]

    def test_click_selects_one(self) -> None:
        """Test that click replaces the selection."""
        selection = Selection()
        selection.click("a")
        selection.click("c")
        assert selection.ids == {"c"}
        assert selection.anchor_id == "c"

    def test_toggle(self) -> None:
        """Test adding and removing single blocks."""
        selection = Selection()
        selection.click("a")
        selection.toggle("c")
        assert selection.ids == {"a", "c"}
        selection.toggle("a")
        assert selection.ids == {"c"}

    def test_range_from_anchor(self) -> None:
        """Test shift-click ranges in both directions."""
        selection = Selection()
        selection.click("b")
        selection.extend_to("d", self.ORDER)
        assert selection.ordered(self.ORDER) == ["b", "c", "d"]
        selection.extend_to("a", self.ORDER)
        assert selection.ordered(self.ORDER) == ["a", "b"]

    def test_range_without_anchor_is_click(self) -> None:
        """Test range selection with no anchor."""
        selection = Selection()
        selection.extend_to("c", self.ORDER)
        assert selection.ids == {"c"}
        assert selection.anchor_id == "c"

    def test_prune_and_clear(self) -> None:
        """Test dropping ids that left the document."""
        selection = Selection()
        selection.click("a")
        selection.toggle("b")
        selection.prune(["b", "c"])
        assert selection.ids == {"b"}
        assert selection.anchor_id is None
        selection.clear()
        assert len(selection) == 0
