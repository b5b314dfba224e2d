"""Tests for the block model and the character-cell text layout."""

import functools

import pytest

from folio.blocks import Block, BlockKind, BlockRange, Document, exhaustive
from folio.layout import TextLayout, hanging_indent_width, wrap_text
from folio.measurer import CaretCoords, CaretPosition, MeasurementError, safe_coords


def test_wrap_text_breaks_on_words():
    lines, counts = wrap_text("aaa bbb ccc", 8)
    assert lines == ["aaa bbb", "ccc"]
    assert counts == [8, 11]


def test_wrap_text_hard_breaks_long_words():
    lines, _ = wrap_text("abcdefghij", 4)
    assert lines == ["abcd", "efgh", "ij"]


def test_wrap_text_empty():
    assert wrap_text("", 10) == ([""], [0])


def test_hanging_indent_for_list_items():
    assert hanging_indent_width("- item") == 2
    assert hanging_indent_width("12. item") == 4
    assert hanging_indent_width("plain") == 0
    lines, _ = wrap_text("- one two three four", 10, hanging=2)
    assert all(line.startswith("  ") for line in lines[1:])


def test_from_text_recognises_block_kinds():
    doc = Document.from_text(
        "# Title\nBody\n- item\n> quote\n    code\n---\n![seal](40)\n|a|b|\n|c|d|\n\\pagebreak\n\f\nEnd",
        title="Brief")
    kinds = [b.kind for b in doc.blocks]
    assert kinds == [
        BlockKind.HEADING, BlockKind.PARAGRAPH, BlockKind.LIST_ITEM, BlockKind.BLOCKQUOTE,
        BlockKind.CODE_BLOCK, BlockKind.HORIZONTAL_RULE, BlockKind.IMAGE, BlockKind.TABLE,
        BlockKind.PAGE_BREAK, BlockKind.PAGE_BREAK, BlockKind.PARAGRAPH,
    ]
    assert doc.blocks[7].rows == (("a", "b"), ("c", "d"))
    assert doc.blocks[6].height == 40
    assert doc.title == "Brief"
    assert len(doc.manual_breaks()) == 2
    assert len({b.id for b in doc.blocks}) == len(doc.blocks)


def test_document_versions_and_content_comparison():
    doc = Document.from_text("a\nb")
    edited = doc.replace_blocks(doc.blocks)
    assert edited.version == doc.version + 1
    assert edited.same_content(doc)
    assert not doc.same_content(None)
    assert not doc.same_content(Document.from_text("a\nc"))


def test_exhaustive_rejects_missing_kinds():
    with pytest.raises(TypeError):
        exhaustive({BlockKind.PARAGRAPH: 1}, "incomplete")


def test_block_range_indices():
    assert list(BlockRange(1, 3).indices(5)) == [1, 2]
    assert list(BlockRange(2).indices(4)) == [2, 3]


class TestTextLayout:
    def setup_method(self):
        self.layout = TextLayout(604)  # 67 columns

    def test_columns(self):
        assert self.layout.columns == 67

    def test_heading_margin_and_offsets(self):
        doc = Document.from_text("# Title\nBody")
        heights = self.layout.block_heights(doc)
        assert heights[0].offset == 18
        assert heights[0].margin_top == 18
        assert heights[1].offset == 36
        assert self.layout.total_height(doc) == 54
        assert self.layout.render_lines(doc)[0].text == "TITLE"

    def test_long_paragraph_wraps_into_several_lines(self):
        doc = Document.from_text("word " * 60)
        heights = self.layout.block_heights(doc)
        assert heights[0].height == 18 * len(self.layout.render_lines(doc))
        assert heights[0].height > 18

    def test_image_height_is_its_intrinsic_height(self):
        doc = Document.from_text("![seal](40)\nafter")
        heights = self.layout.block_heights(doc)
        assert heights[0].height == 40
        assert heights[1].offset == 40

    def test_page_break_marker_is_zero_height_when_paginated(self):
        doc = Document.from_text("a\n\\pagebreak\nb")
        heights = self.layout.block_heights(doc)
        assert heights[1].height == 0
        assert heights[2].offset == 18

    def test_page_break_marker_visible_in_scroll_mode(self):
        layout = TextLayout(604, show_page_breaks=True)
        doc = Document.from_text("a\n\\pagebreak\nb")
        lines = layout.render_lines(doc)
        assert "page break" in lines[1].text
        assert layout.block_heights(doc)[1].height == 18

    def test_height_of_range(self):
        doc = Document.from_text("a\nb\nc")
        assert self.layout.height_of(doc, BlockRange(1, 3)) == 36
        assert self.layout.height_of(doc, BlockRange(3, 3)) == 0

    def test_coords_at_caret(self):
        doc = Document.from_text("first\nsecond")
        coords = self.layout.coords_at(doc, CaretPosition(1, 3))
        assert coords == CaretCoords(18, 27, 36)

    def test_coords_at_wrapped_line(self):
        doc = Document.from_text("aaa bbb ccc")
        layout = TextLayout(72)  # 8 columns
        assert layout.coords_at(doc, CaretPosition(0, 8)).top == 18
        assert layout.coords_at(doc, CaretPosition(0, 7)).top == 0

    def test_coords_outside_document_raise(self):
        doc = Document.from_text("a")
        with pytest.raises(MeasurementError):
            self.layout.coords_at(doc, CaretPosition(5, 0))

    def test_safe_coords_swallows_measurement_errors(self):
        doc = Document.from_text("a")
        coords_at = functools.partial(self.layout.coords_at, doc)
        assert safe_coords(coords_at, CaretPosition(5, 0)) is None
        assert safe_coords(coords_at, CaretPosition(0, 0)) == CaretCoords(0, 0, 18)

    def test_pos_at_maps_back_to_caret(self):
        doc = Document.from_text("first\nsecond")
        assert self.layout.pos_at(doc, 27, 20) == CaretPosition(1, 3)
        assert self.layout.pos_at(doc, 900, 0) == CaretPosition(0, 5)

    def test_table_rows_are_joined(self):
        doc = Document.from_text("|a|b|")
        assert " │ " in self.layout.render_lines(doc)[0].text
