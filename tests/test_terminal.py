"""Tests for terminal rendering with blessed."""

import blessed
import pytest

from folio.blocks import Document
from folio.config import PageSettings, ScrollBreakStyle
from folio.dimensions import PageDimensionProvider
from folio.frames import build_frame
from folio.layout import TextLayout
from folio.mirror import clip_lines
from folio.page_breaks import compute_pages
from folio.terminal import TerminalPageRenderer, compose_band, page_break_rule
from folio.variables import HeaderFooterContent, HeaderFooterSettings

SIXTY_LINES = "\n".join(f"line {i}" for i in range(60))


@pytest.fixture
def renderer():
    # No styling: bold/dim return the text unchanged
    return TerminalPageRenderer(blessed.Terminal(force_styling=None))


@pytest.fixture
def laid_out():
    layout = TextLayout(604)
    document = Document.from_text(SIXTY_LINES, title="Brief")
    pages = compute_pages(layout.block_heights(document), document.manual_breaks(), 893,
                          layout.total_height(document))
    return layout, document, pages


def frame_for(laid_out, index, settings=None, mounted=True, active=False):
    layout, document, pages = laid_out
    dimensions = PageDimensionProvider(settings or PageSettings())
    clip = clip_lines(layout.render_lines(document), pages[index], 893) if mounted else None
    return build_frame(pages[index], len(pages), dimensions, clip, active, mounted, 1.0,
                       document)


def test_compose_band():
    assert compose_band(HeaderFooterContent("L", "C", "R"), 9) == "L   C   R"
    assert compose_band(HeaderFooterContent(center="Page 1 / 2"), 20) == "     Page 1 / 2     "
    assert compose_band(HeaderFooterContent(), 4) == "    "


def test_page_break_rule():
    assert page_break_rule(2, 20) == "──────" + " Page 2 " + "──────"
    assert page_break_rule(12, 5) == " Page"


def test_frame_box(renderer, laid_out):
    rows = renderer.render_frame(frame_for(laid_out, 0, active=True))
    assert rows[0] == "┌" + " 1/2 * ".ljust(67, "─") + "┐"
    assert rows[1] == "│" + "line 0".ljust(67) + "│"
    # Top border, 49 content rows, footer separator and band, bottom border
    assert len(rows) == 1 + 49 + 2 + 1
    assert "Page 1 / 2" in rows[-2]
    assert rows[-1] == "└" + "─" * 67 + "┘"
    assert all(len(row) == 69 for row in rows)


def test_second_page_content_starts_at_its_own_top(renderer, laid_out):
    rows = renderer.render_frame(frame_for(laid_out, 1))
    assert rows[0].startswith("┌ 2/2 ─")
    assert rows[1].startswith("│line 49")
    assert rows[12].startswith("│" + " " * 10)


def test_placeholder_frame(renderer, laid_out):
    rows = renderer.render_frame(frame_for(laid_out, 1, mounted=False))
    assert rows[1] == "│" + "·" * 67 + "│"
    assert "Page 2 / 2" in rows[-2]


def test_header_band(renderer, laid_out):
    settings = PageSettings(header_footer=HeaderFooterSettings(
        header_enabled=True, header_content=HeaderFooterContent(left="{{document.title}}")))
    rows = renderer.render_frame(frame_for(laid_out, 0, settings))
    assert rows[1] == "│" + "Brief".ljust(67) + "│"
    assert rows[2] == "├" + "┄" * 67 + "┤"


def test_grid_places_frames_side_by_side(renderer, laid_out):
    frames = [frame_for(laid_out, 0), frame_for(laid_out, 1)]
    side_by_side = renderer.render_grid(frames, pages_per_row=2)
    assert len(side_by_side) == 53
    assert side_by_side[0].startswith("┌ 1/2 ")
    assert " 2/2 " in side_by_side[0]
    assert len(side_by_side[0]) == 69 * 2 + 2
    stacked = renderer.render_grid(frames, pages_per_row=1)
    assert len(stacked) == 53 * 2 + 1
    assert stacked[53] == ""


def test_break_indicator_styles(renderer):
    footer = HeaderFooterContent(center="Page 1 / 3")
    header = HeaderFooterContent(left="Brief")
    line = renderer.break_indicator(ScrollBreakStyle.LINE, 2, 20, footer, header)
    assert line == [page_break_rule(2, 20)]

    compact = renderer.break_indicator(ScrollBreakStyle.COMPACT, 2, 20, footer, header)
    assert compact == ["", compose_band(footer, 20), page_break_rule(2, 20),
                       compose_band(header, 20), ""]

    full = renderer.break_indicator(ScrollBreakStyle.FULL, 2, 20, footer, header)
    assert len(full) == 2 + 1 + 1 + 1 + 2

    bare = renderer.break_indicator(ScrollBreakStyle.FULL, 2, 20)
    assert bare == [page_break_rule(2, 20)]


def test_render_scroll_without_indicators(renderer, laid_out):
    layout, document, pages = laid_out
    out = renderer.render_scroll(layout.render_lines(document), pages, PageSettings(),
                                 document, 67)
    assert out == [f"line {i}" for i in range(60)]


def test_render_scroll_inserts_indicator_at_page_start(renderer, laid_out):
    layout, document, pages = laid_out
    settings = PageSettings(show_scroll_page_breaks=True,
                            scroll_page_break_style=ScrollBreakStyle.LINE)
    out = renderer.render_scroll(layout.render_lines(document), pages, settings,
                                 document, 67)
    assert len(out) == 61
    assert out[48] == "line 48"
    assert out[49] == page_break_rule(2, 67)
    assert out[50] == "line 49"

    compact = settings.with_changes(scroll_page_break_style=ScrollBreakStyle.COMPACT)
    out = renderer.render_scroll(layout.render_lines(document), pages, compact,
                                 document, 67)
    # Default footer on page 1, no header on page 2
    assert out[49:52] == ["", compose_band(HeaderFooterContent(center="Page 1 / 2"), 67),
                          page_break_rule(2, 67)]
    assert out[52] == "line 49"
