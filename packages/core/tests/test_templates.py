"""Tests for template snapshots and the template store."""

import pytest

from lesson_builder_core.document.editor import LessonEditor
from lesson_builder_core.schemas.blocks import Block
from lesson_builder_core.schemas.content import BlockType
from lesson_builder_core.schemas.style import BlockStyle, BlockWidth
from lesson_builder_core.schemas.templates import BlockTemplate
from lesson_builder_core.templates import (
    TemplateStore,
    instantiate_template,
    template_blocks_from,
)


@pytest.fixture
def source_blocks() -> list[Block]:
    """A styled callout followed by a table."""
    return [
        Block(
            type=BlockType.CALLOUT,
            content={"type": "tip", "text": "Remember"},
            order_index=0,
            style=BlockStyle(width=BlockWidth.WIDE),
        ),
        Block.create(BlockType.TABLE).model_copy(update={"order_index": 1}),
    ]


class TestTemplateSnapshots:
    """Tests for stripping and instantiating template blocks."""

    def test_snapshot_strips_identity(self, source_blocks: list[Block]) -> None:
        """Test that snapshots keep type, content and style only."""
        snapshot = template_blocks_from(source_blocks)
        assert [t.type for t in snapshot] == [BlockType.CALLOUT, BlockType.TABLE]
        payload = snapshot[0].to_payload()
        assert set(payload) == {"block_type", "content", "style"}
        assert payload["style"]["width"] == "wide"

    def test_instantiate_assigns_fresh_ids(self, source_blocks: list[Block]) -> None:
        """Test that every instantiation yields new ids and sequential indices."""
        snapshot = template_blocks_from(source_blocks)
        first = instantiate_template(snapshot, at_index=4)
        second = instantiate_template(snapshot, at_index=4)

        assert [b.order_index for b in first] == [4, 5]
        ids = {b.id for b in first} | {b.id for b in second}
        assert len(ids) == 4
        assert not ids & {b.id for b in source_blocks}

    def test_instances_are_isolated(self, source_blocks: list[Block]) -> None:
        """Test that editing an instance never touches the template or source."""
        snapshot = template_blocks_from(source_blocks)
        instance = instantiate_template(snapshot)[1]
        instance.content["rows"][0][0] = "changed"

        assert snapshot[1].content["rows"][0][0] == ""
        assert source_blocks[1].content["rows"][0][0] == ""


class TestTemplateStore:
    """Tests for service-backed template operations."""

    @pytest.mark.asyncio
    async def test_save_and_list(self, fake_service, source_blocks: list[Block]) -> None:
        """Test saving blocks as a template and listing by category."""
        store = TemplateStore(fake_service)
        template = await store.save_as_template(
            source_blocks, "  Tip + table ", category="layouts"
        )

        assert template is not None
        assert template.name == "Tip + table"
        assert len(template.blocks) == 2
        assert [t.id for t in await store.list_templates("layouts")] == [template.id]
        assert await store.list_templates("other") == []

    @pytest.mark.asyncio
    async def test_validation(self, fake_service, source_blocks: list[Block]) -> None:
        """Test that names and blocks are required."""
        store = TemplateStore(fake_service)
        with pytest.raises(ValueError):
            await store.save_as_template(source_blocks, "   ")
        with pytest.raises(ValueError):
            await store.save_as_template([], "Empty")

    @pytest.mark.asyncio
    async def test_delete_does_not_affect_instances(
        self, fake_service, source_blocks: list[Block]
    ) -> None:
        """Test template isolation after deletion."""
        store = TemplateStore(fake_service)
        template = await store.save_as_template(source_blocks, "Pair")
        editor = LessonEditor()
        inserted = editor.apply_template(template.blocks)
        before = editor.document.snapshot()

        assert await store.delete_template(template.id) is True
        assert editor.document.snapshot() == before
        assert [b.id for b in editor.document] == [b.id for b in inserted]
        assert store.cached == []

    @pytest.mark.asyncio
    async def test_builtin_delete_is_absorbed(self, fake_service) -> None:
        """Test that a refused delete is logged and reported as False."""
        builtin = BlockTemplate(id="t1", name="Lecture", is_builtin=True)
        fake_service.templates[builtin.id] = builtin
        store = TemplateStore(fake_service)

        assert await store.delete_template("t1") is False
        assert "t1" in fake_service.templates

    @pytest.mark.asyncio
    async def test_update(self, fake_service, source_blocks: list[Block]) -> None:
        """Test renaming a template."""
        store = TemplateStore(fake_service)
        template = await store.save_as_template(source_blocks, "Old")
        updated = await store.update_template(template.id, name="New")
        assert updated.name == "New"

    @pytest.mark.asyncio
    async def test_service_failures_absorbed(
        self, fake_service, source_blocks: list[Block]
    ) -> None:
        """Test that unavailable services degrade to empty results."""
        fake_service.fail_all = True
        store = TemplateStore(fake_service)
        assert await store.list_templates() == []
        assert await store.save_as_template(source_blocks, "X") is None
        assert await store.delete_template("x") is False
