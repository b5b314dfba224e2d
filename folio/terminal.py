"""Terminal rendering of page frames using Blessed."""

from __future__ import annotations

import math
from typing import Iterable, List, Optional, Sequence

import blessed

from .blocks import Document
from .config import PageSettings, ScrollBreakStyle
from .constants import EngineConstants
from .frames import PageFrame, resolve_band
from .layout import RenderedLine
from .page_breaks import PageInfo
from .variables import HeaderFooterContent

# Band heights (pixels) of the scroll-mode break indicator styles
COMPACT_BAND_HEIGHT = 24
FULL_FOOTER_HEIGHT = 40
FULL_HEADER_HEIGHT = 50


def compose_band(content: HeaderFooterContent, width: int) -> str:
    """Lay out left/center/right parts on one line of ``width`` columns."""
    left, center, right = content.left, content.center, content.right
    line = [" "] * width

    def place(text: str, start: int) -> None:
        for i, ch in enumerate(text):
            if 0 <= start + i < width:
                line[start + i] = ch

    place(center, max(0, (width - len(center)) // 2))
    place(left, 0)
    place(right, max(0, width - len(right)))
    return "".join(line)


def page_break_rule(page_number: int, width: int) -> str:
    """Create a centered page break line with page number."""
    label = EngineConstants.PAGE_BREAK_LABEL.format(page_number)
    if len(label) >= width:
        return label[:width]
    padding = (width - len(label)) // 2
    rule = EngineConstants.PAGE_BREAK_RULE
    return rule * padding + label + rule * (width - padding - len(label))


class TerminalPageRenderer:
    """Draws page frames as boxes of text.

    One pixel row of a frame maps to ``1 / line_height`` terminal rows and
    one character cell to ``char_width`` pixels, the same metrics the text
    layout uses, so clipped content lands on whole rows.
    """

    def __init__(self, terminal: Optional[blessed.Terminal] = None,
                 line_height: float = EngineConstants.LINE_HEIGHT,
                 char_width: float = EngineConstants.CHAR_WIDTH):
        self.term = terminal or blessed.Terminal()
        self.line_height = line_height
        self.char_width = char_width

    def _columns(self, pixels: float) -> int:
        return max(1, int(pixels // self.char_width))

    def _rows(self, pixels: float) -> int:
        return max(1, int(pixels // self.line_height))

    def _style(self, text: str, frame: PageFrame) -> str:
        if frame.is_active:
            return self.term.bold(text)
        return text

    def render_frame(self, frame: PageFrame) -> List[str]:
        width = self._columns(frame.content_width)
        rows = self._rows(frame.content_height)
        out: List[str] = []

        label = f" {frame.page_number}/{frame.total_pages} "
        if frame.is_active:
            label += "* "
        out.append(self._style("┌" + label.ljust(width, "─")[:width] + "┐", frame))

        if frame.header is not None:
            out.append(self._style("│", frame) + compose_band(frame.header, width)
                       + self._style("│", frame))
            out.append(self._style("├" + "┄" * width + "┤", frame))

        if frame.content is None:
            body = [EngineConstants.PLACEHOLDER_FILL * width] * rows
        else:
            body = [""] * rows
            for y, line in frame.content.lines:
                row = int(y // self.line_height)
                if 0 <= row < rows:
                    body[row] = line.text
        for text in body:
            out.append(self._style("│", frame) + text[:width].ljust(width) + self._style("│", frame))

        if frame.footer is not None:
            out.append(self._style("├" + "┄" * width + "┤", frame))
            out.append(self._style("│", frame) + compose_band(frame.footer, width)
                       + self._style("│", frame))

        out.append(self._style("└" + "─" * width + "┘", frame))
        return out

    def render_row(self, frames: Sequence[PageFrame], gap: int = 2) -> List[str]:
        """Frames of one grid row side by side."""
        boxes = [self.render_frame(frame) for frame in frames]
        if not boxes:
            return []
        widths = [self._columns(frame.content_width) + 2 for frame in frames]
        height = max(len(box) for box in boxes)
        lines = []
        for i in range(height):
            parts = []
            for box, width in zip(boxes, widths):
                parts.append(box[i] if i < len(box) else " " * width)
            lines.append((" " * gap).join(parts))
        return lines

    def render_grid(self, frames: Sequence[PageFrame], pages_per_row: int = 1) -> List[str]:
        pages_per_row = max(1, pages_per_row)
        out: List[str] = []
        for start in range(0, len(frames), pages_per_row):
            if start:
                out.append("")
            out.extend(self.render_row(frames[start:start + pages_per_row]))
        return out

    def break_indicator(self, style: ScrollBreakStyle, next_page_number: int, width: int,
                        previous_footer: Optional[HeaderFooterContent] = None,
                        next_header: Optional[HeaderFooterContent] = None) -> List[str]:
        """Rows drawn between two pages in scroll mode."""
        rule = page_break_rule(next_page_number, width)
        if style is ScrollBreakStyle.LINE:
            return [self.term.dim(rule)]

        if style is ScrollBreakStyle.COMPACT:
            footer_rows = header_rows = math.ceil(COMPACT_BAND_HEIGHT / self.line_height)
        else:
            footer_rows = math.ceil(FULL_FOOTER_HEIGHT / self.line_height)
            header_rows = math.ceil(FULL_HEADER_HEIGHT / self.line_height)

        out: List[str] = []
        if previous_footer is not None:
            out.extend([""] * (footer_rows - 1))
            out.append(self.term.dim(compose_band(previous_footer, width)))
        out.append(self.term.dim(rule))
        if next_header is not None:
            out.append(self.term.dim(compose_band(next_header, width)))
            out.extend([""] * (header_rows - 1))
        return out

    def render_scroll(self, lines: Iterable[RenderedLine], pages: Sequence[PageInfo],
                      settings: PageSettings, document: Document, width: int,
                      today=None) -> List[str]:
        """The single flowing surface of scroll mode, with optional break indicators."""
        starts = [page.start_offset for page in pages[1:]]
        hf = settings.header_footer
        total = len(pages)
        out: List[str] = []
        next_break = 0
        for line in lines:
            while (settings.show_scroll_page_breaks and next_break < len(starts)
                   and line.offset >= starts[next_break]):
                number = next_break + 2
                out.extend(self.break_indicator(
                    settings.scroll_page_break_style, number, width,
                    resolve_band(hf.footer_for(number - 1), number - 1, total, document, today),
                    resolve_band(hf.header_for(number), number, total, document, today)))
                next_break += 1
            out.append(line.text[:width])
        return out

    def write(self, lines: Iterable[str]) -> None:
        for line in lines:
            print(line)
