"""Tests for legacy markup conversion."""

import pytest
from bs4 import BeautifulSoup

from lesson_builder_core.config import ConverterConfig
from lesson_builder_core.converter import (
    callout_kind_from_classes,
    convert_legacy_markup,
    detect_callout_type,
    match_callout_styles,
    needs_conversion,
)
from lesson_builder_core.render.markup import render_markup
from lesson_builder_core.schemas.content import BlockType, CalloutKind


def visible_text(markup: str) -> list[str]:
    """Words a reader sees, ignoring markup and whitespace layout."""
    return BeautifulSoup(markup, "html.parser").get_text(" ").split()


@pytest.fixture
def legacy_lesson() -> str:
    """A legacy lesson body using most recognised structures."""
    return (
        "<h2>Overview</h2>"
        "<p>Welcome to <strong>module one</strong> &amp; friends.</p>"
        '<div style="background-color: #eff6ff; padding: 12px">Read carefully.</div>'
        "<h3>Details</h3>"
        "<ul><li>First</li><li>Second</li></ul>"
        '<img src="diagram.png" alt="Diagram">'
        "<hr/>"
        "<table><thead><tr><th>Term</th><th>Meaning</th></tr></thead>"
        "<tbody><tr><td>API</td><td>Interface</td></tr></tbody></table>"
        '<div class="wrapper"><p>Nested paragraph</p></div>'
        "<p>Closing words</p>"
    )


class TestNeedsConversion:
    """Tests for the conversion trigger."""

    def test_only_when_empty_with_markup(self) -> None:
        """Test that conversion runs once, for empty documents only."""
        assert needs_conversion(0, "<p>x</p>") is True
        assert needs_conversion(3, "<p>x</p>") is False
        assert needs_conversion(0, None) is False
        assert needs_conversion(0, "   ") is False


class TestConvertLegacyMarkup:
    """Tests for the markup walker."""

    def test_bootstrap_scenario(self) -> None:
        """Test heading, paragraph, rule and table become four blocks."""
        markup = (
            "<h2>Intro</h2><p>Hello</p><hr/>"
            "<table><tr><th>Name</th><th>Age</th></tr>"
            "<tr><td>Ann</td><td>30</td></tr></table>"
        )
        result = convert_legacy_markup(markup)

        assert [b.type for b in result.blocks] == [
            BlockType.TEXT,
            BlockType.TEXT,
            BlockType.DIVIDER,
            BlockType.TABLE,
        ]
        assert result.blocks[0].content == {"html": "<h2>Intro</h2>"}
        assert result.blocks[1].content == {"html": "<p>Hello</p>"}
        assert result.blocks[3].content == {
            "headers": ["Name", "Age"],
            "rows": [["Ann", "30"]],
        }
        assert [b.order_index for b in result.blocks] == [0, 1, 2, 3]
        assert len({b.id for b in result.blocks}) == 4
        assert result.used_fallback is False

    def test_heading_accumulation_mode(self) -> None:
        """Test that headings can start a section the following markup joins."""
        config = ConverterConfig(standalone_headings=False)
        result = convert_legacy_markup("<p>Lead</p><h2>T</h2><p>x</p><hr>", config)

        assert [b.type for b in result.blocks] == [
            BlockType.TEXT,
            BlockType.TEXT,
            BlockType.DIVIDER,
        ]
        assert result.blocks[0].content["html"] == "<p>Lead</p>"
        assert result.blocks[1].content["html"] == "<h2>T</h2><p>x</p>"

    def test_table_with_thead(self) -> None:
        """Test headers from thead and rows from tbody."""
        markup = (
            "<table><thead><tr><th>H</th></tr></thead>"
            "<tbody><tr><td>1</td></tr><tr><td>2</td></tr></tbody></table>"
        )
        block = convert_legacy_markup(markup).blocks[0]
        assert block.content == {"headers": ["H"], "rows": [["1"], ["2"]]}

    def test_image(self) -> None:
        """Test image extraction."""
        block = convert_legacy_markup('<img src="a.png" alt="A">').blocks[0]
        assert block.type == BlockType.IMAGE
        assert block.content == {
            "url": "a.png",
            "alt": "A",
            "caption": "",
            "alignment": "center",
        }

    def test_style_callout(self) -> None:
        """Test colour signature callouts keep their inner markup."""
        markup = '<div style="background: #ecfdf5"><p>Try <em>this</em></p></div>'
        block = convert_legacy_markup(markup).blocks[0]
        assert block.type == BlockType.CALLOUT
        assert block.content == {"type": "tip", "text": "<p>Try <em>this</em></p>"}

    def test_class_callout_is_flagged(self) -> None:
        """Test class-name callouts convert with a warning."""
        result = convert_legacy_markup('<div class="alert alert-warning">Careful</div>')
        assert result.blocks[0].content["type"] == "warning"
        assert len(result.warnings) == 1

    def test_class_callouts_can_be_disabled(self) -> None:
        """Test that class detection is optional."""
        config = ConverterConfig(detect_class_callouts=False)
        result = convert_legacy_markup('<div class="note"><p>Plain</p></div>', config)
        assert result.blocks[0].type == BlockType.TEXT

    def test_ambiguous_callout_uses_first_match_and_warns(self) -> None:
        """Test that ambiguous colour signatures are flagged, not silently fixed."""
        markup = '<div style="background: #fffbeb; border: 1px solid #f59e0b">Hm</div>'
        result = convert_legacy_markup(markup)
        assert result.blocks[0].content["type"] == "example"
        assert len(result.warnings) == 1
        assert "example" in result.warnings[0]
        assert "warning" in result.warnings[0]

    def test_plain_div_children_visited(self) -> None:
        """Test that non-callout containers are unwrapped."""
        result = convert_legacy_markup("<div><p>A</p><hr><p>B</p></div>")
        assert [b.type for b in result.blocks] == [
            BlockType.TEXT,
            BlockType.DIVIDER,
            BlockType.TEXT,
        ]
        assert result.blocks[2].content["html"] == "<p>B</p>"

    def test_iframes(self) -> None:
        """Test video hosts become video blocks and others embeds."""
        markup = (
            '<iframe src="https://www.youtube.com/embed/abc"></iframe>'
            '<iframe src="https://player.vimeo.com/video/1"></iframe>'
            '<iframe src="https://maps.example.com/x" height="300"></iframe>'
            '<iframe src="https://example.com/y" height="auto"></iframe>'
        )
        blocks = convert_legacy_markup(markup).blocks
        assert blocks[0].type == BlockType.VIDEO
        assert blocks[0].content["type"] == "youtube"
        assert blocks[1].content["type"] == "vimeo"
        assert blocks[2].content == {"url": "https://maps.example.com/x", "height": 300}
        assert blocks[3].content["height"] == 400

    def test_comment_only_source_falls_back_verbatim(self) -> None:
        """Test that zero blocks from non-empty input keeps the whole source."""
        markup = "<!-- nothing to see -->"
        result = convert_legacy_markup(markup)
        assert result.used_fallback is True
        assert len(result.blocks) == 1
        assert result.blocks[0].type == BlockType.TEXT
        assert result.blocks[0].content == {"html": markup}

    def test_empty_source(self) -> None:
        """Test that empty input produces nothing."""
        assert convert_legacy_markup("").blocks == []
        assert convert_legacy_markup(None).blocks == []

    def test_no_visible_text_is_lost(self, legacy_lesson: str) -> None:
        """Test that converted blocks render the same reader-visible text."""
        result = convert_legacy_markup(legacy_lesson)
        rendered = render_markup(result.blocks, wrap=False)
        assert visible_text(rendered) == visible_text(legacy_lesson)

    def test_sample_lesson_structure(self, legacy_lesson: str) -> None:
        """Test the block sequence produced for a typical lesson."""
        types = [b.type for b in convert_legacy_markup(legacy_lesson).blocks]
        assert types == [
            BlockType.TEXT,  # Overview
            BlockType.TEXT,  # welcome paragraph
            BlockType.CALLOUT,
            BlockType.TEXT,  # Details
            BlockType.TEXT,  # list
            BlockType.IMAGE,
            BlockType.DIVIDER,
            BlockType.TABLE,
            BlockType.TEXT,  # nested paragraph + closing words
        ]


class TestCalloutDetection:
    """Tests for the callout heuristics."""

    @pytest.mark.parametrize(
        "style,expected",
        [
            ("background:#1a1a2e;color:white", CalloutKind.FORMULA),
            ("background: #f0f4f8", CalloutKind.NOTE),
            ("border-left: 4px solid #2563eb", CalloutKind.NOTE),
            ("background: #fffbeb", CalloutKind.EXAMPLE),
            ("background: #ecfdf5", CalloutKind.TIP),
            ("background: #FEE2E2", CalloutKind.DANGER),
            ("border-left: 3px solid #dc2626", CalloutKind.DANGER),
            ("background: #fef3c7", CalloutKind.WARNING),
            ("background: #dbeafe", CalloutKind.INFO),
        ],
    )
    def test_style_signatures(self, style: str, expected: CalloutKind) -> None:
        """Test each colour signature."""
        assert detect_callout_type(style) == expected

    def test_no_match(self) -> None:
        """Test unrelated styles."""
        assert detect_callout_type("color: red") is None
        assert match_callout_styles("") == []

    def test_class_names(self) -> None:
        """Test class-name mapping."""
        assert callout_kind_from_classes("callout danger") == CalloutKind.WARNING
        assert callout_kind_from_classes("tip-box") == CalloutKind.TIP
        assert callout_kind_from_classes("callout example") == CalloutKind.EXAMPLE
        assert callout_kind_from_classes("note") == CalloutKind.NOTE
        assert callout_kind_from_classes("alert") == CalloutKind.INFO
        assert callout_kind_from_classes("card") is None
