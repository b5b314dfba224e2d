"""Character-cell text layout.

Lays a document out into fixed-pitch lines the way a typewriter page would:
every line is ``LINE_HEIGHT`` pixels tall and every character ``CHAR_WIDTH``
pixels wide. The same layout backs block measurement, caret coordinates and
the rendered lines used by page mirrors, so all three always agree.
"""

from __future__ import annotations

import bisect
import logging
import math
import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from .blocks import Block, BlockHeight, BlockKind, Document, exhaustive
from .constants import EngineConstants
from .measurer import CaretCoords, CaretPosition, LayoutMeasurer, MeasurementError

logger = logging.getLogger(__name__)


def hanging_indent_width(text: str) -> int:
    """Return hanging indent width for bullet/numbered paragraphs.

    Optional leading spaces, then ``-`` or ``*`` or digits followed by ``.``
    or ``)``, then exactly one space. Returns the number of columns before the
    first text character, or 0.
    """
    m = re.match(r"^(\s*)(?:([-*]) (?=\S)|(\d+[.)]) (?=\S))", text)
    if not m:
        return 0
    marker = m.group(2) or m.group(3)
    return len(m.group(1) or "") + len(marker) + 1


def wrap_text(text: str, columns: int, hanging: int = 0) -> Tuple[List[str], List[int]]:
    """Word-wrap ``text`` into lines at most ``columns`` wide.

    Returns (lines, cumulative_counts): cumulative_counts[i] is the number of
    characters of ``text`` consumed by the end of line i, including the space
    swallowed at the wrap point. Continuation lines are prefixed with
    ``hanging`` spaces, which are not counted.
    """
    if not text:
        return [""], [0]
    columns = max(1, columns)

    def width_for(line_index: int) -> int:
        if line_index == 0 or hanging <= 0:
            return columns
        return max(1, columns - hanging)

    lines: List[str] = []
    counts: List[int] = []
    consumed = 0
    current: Optional[str] = None
    for word in text.split(" "):
        if current is not None and len(current) + 1 + len(word) < width_for(len(lines)):
            current += " " + word
            continue
        if current is not None:
            lines.append(current)
            consumed += len(current) + 1
            counts.append(consumed)
        width = width_for(len(lines))
        # Words longer than the line are hard-broken
        while len(word) >= width:
            lines.append(word[:width])
            consumed += width
            counts.append(consumed)
            word = word[width:]
            width = width_for(len(lines))
        current = word
    assert current is not None
    lines.append(current)
    consumed += len(current)
    counts.append(consumed)

    if hanging > 0:
        lines = [lines[0]] + [" " * hanging + line for line in lines[1:]]
    return lines, counts


@dataclass(frozen=True)
class RenderedLine:
    """One laid-out line of content, positioned in document coordinates."""

    offset: float
    height: float
    text: str
    block_id: str
    kind: BlockKind
    char_start: int = 0
    char_end: int = 0
    indent: int = 0

    @property
    def bottom(self) -> float:
        return self.offset + self.height


@dataclass(frozen=True)
class _BlockLines:
    texts: Tuple[str, ...]
    counts: Tuple[int, ...]
    indent: int
    margin_top: float
    margin_bottom: float
    pixel_height: Optional[float] = None


@dataclass(frozen=True)
class LaidOutDocument:
    lines: Tuple[RenderedLine, ...]
    heights: Tuple[BlockHeight, ...]
    total_height: float


def _paragraph(block: Block, layout: "TextLayout") -> _BlockLines:
    lines, counts = wrap_text(block.text, layout.columns)
    return _BlockLines(tuple(lines), tuple(counts), 0, 0, layout.paragraph_spacing)


def _heading(block: Block, layout: "TextLayout") -> _BlockLines:
    text = block.text.upper() if block.level == 1 else block.text
    lines, counts = wrap_text(text, layout.columns)
    return _BlockLines(tuple(lines), tuple(counts), 0, layout.heading_spacing,
                       layout.paragraph_spacing)


def _list_item(block: Block, layout: "TextLayout") -> _BlockLines:
    hanging = hanging_indent_width(block.text)
    lines, counts = wrap_text(block.text, layout.columns, hanging)
    return _BlockLines(tuple(lines), tuple(counts), hanging, 0, layout.paragraph_spacing)


def _blockquote(block: Block, layout: "TextLayout") -> _BlockLines:
    lines, counts = wrap_text(block.text, layout.columns - 2)
    return _BlockLines(tuple("│ " + line for line in lines), tuple(counts), 2, 0,
                       layout.paragraph_spacing)


def _code_block(block: Block, layout: "TextLayout") -> _BlockLines:
    cols = layout.columns
    text = block.text
    chunks = [text[i:i + cols] for i in range(0, len(text), cols)] or [""]
    counts = [min(len(text), (i + 1) * cols) for i in range(len(chunks))]
    return _BlockLines(tuple(chunks), tuple(counts), 0, 0, layout.paragraph_spacing)


def _table(block: Block, layout: "TextLayout") -> _BlockLines:
    rows = block.rows or ((),)
    ncols = max(1, max(len(r) for r in rows))
    cell_width = max(1, (layout.columns - 3 * (ncols - 1)) // ncols)
    out: List[str] = []
    for row in rows:
        cells = [wrap_text(row[c] if c < len(row) else "", cell_width)[0]
                 for c in range(ncols)]
        for i in range(max(len(c) for c in cells)):
            parts = [(c[i] if i < len(c) else "").ljust(cell_width) for c in cells]
            out.append(" │ ".join(parts).rstrip())
    return _BlockLines(tuple(out), tuple(0 for _ in out), 0, 0, layout.paragraph_spacing)


def _image(block: Block, layout: "TextLayout") -> _BlockLines:
    rows = max(1, math.ceil(block.height / layout.line_height))
    label = f"[image: {block.text}]" if block.text else "[image]"
    texts = (label[:layout.columns],) + ("",) * (rows - 1)
    return _BlockLines(texts, tuple(0 for _ in texts), 0, 0, layout.paragraph_spacing,
                       pixel_height=max(float(block.height), layout.line_height))


def _horizontal_rule(block: Block, layout: "TextLayout") -> _BlockLines:
    return _BlockLines(("─" * layout.columns,), (0,), 0, 0, layout.paragraph_spacing)


def _page_break(block: Block, layout: "TextLayout") -> _BlockLines:
    if not layout.show_page_breaks:
        return _BlockLines((), (), 0, 0, 0)
    label = " page break "
    side = max(0, (layout.columns - len(label)) // 2)
    line = "┄" * side + label + "┄" * max(0, layout.columns - side - len(label))
    return _BlockLines((line,), (0,), 0, 0, 0)


_RENDERERS: Dict[BlockKind, Callable[[Block, "TextLayout"], _BlockLines]] = exhaustive({
    BlockKind.PARAGRAPH: _paragraph,
    BlockKind.HEADING: _heading,
    BlockKind.LIST_ITEM: _list_item,
    BlockKind.BLOCKQUOTE: _blockquote,
    BlockKind.CODE_BLOCK: _code_block,
    BlockKind.TABLE: _table,
    BlockKind.IMAGE: _image,
    BlockKind.HORIZONTAL_RULE: _horizontal_rule,
    BlockKind.PAGE_BREAK: _page_break,
}, "TextLayout")


# Blocks without addressable text positions; the caret sits on their first line
_ATOMIC_KINDS = frozenset({BlockKind.TABLE, BlockKind.IMAGE,
                           BlockKind.HORIZONTAL_RULE, BlockKind.PAGE_BREAK})


class TextLayout(LayoutMeasurer):
    """Fixed-pitch layout of a document into a column of given pixel width.

    ``show_page_breaks`` controls whether manual page break markers take a
    visible line (scroll mode) or collapse to zero height (paginated modes,
    where the page boundary itself shows the break).
    """

    def __init__(self, content_width: float,
                 line_height: float = EngineConstants.LINE_HEIGHT,
                 char_width: float = EngineConstants.CHAR_WIDTH,
                 show_page_breaks: bool = False,
                 paragraph_spacing: float = EngineConstants.PARAGRAPH_SPACING,
                 heading_spacing: float = EngineConstants.HEADING_SPACING):
        self.content_width = content_width
        self.line_height = line_height
        self.char_width = char_width
        self.show_page_breaks = show_page_breaks
        self.paragraph_spacing = paragraph_spacing
        self.heading_spacing = heading_spacing
        self._cache_key: Optional[tuple] = None
        self._cache: Optional[LaidOutDocument] = None

    @property
    def columns(self) -> int:
        if self.char_width <= 0:
            return 1
        return max(1, int(self.content_width // self.char_width))

    def _key(self, document: Document) -> tuple:
        return (document.blocks, self.columns, self.line_height,
                self.show_page_breaks, self.paragraph_spacing, self.heading_spacing)

    def layout(self, document: Document) -> LaidOutDocument:
        """Lay out ``document``; the last result is cached by content."""
        key = self._key(document)
        if key == self._cache_key and self._cache is not None:
            return self._cache

        lines: List[RenderedLine] = []
        heights: List[BlockHeight] = []
        y = 0.0
        prev_margin_bottom = 0.0
        for index, block in enumerate(document.blocks):
            rendered = _RENDERERS[block.kind](block, self)
            # Adjacent vertical margins collapse to the larger of the two
            gap = max(prev_margin_bottom, rendered.margin_top) if index > 0 else rendered.margin_top
            offset = y + gap
            for i, text in enumerate(rendered.texts):
                start = rendered.counts[i - 1] if i > 0 else 0
                lines.append(RenderedLine(
                    offset=offset + i * self.line_height,
                    height=self.line_height,
                    text=text,
                    block_id=block.id,
                    kind=block.kind,
                    char_start=start,
                    char_end=rendered.counts[i],
                    indent=rendered.indent if i > 0 or block.kind is BlockKind.BLOCKQUOTE else 0,
                ))
            height = rendered.pixel_height
            if height is None:
                height = len(rendered.texts) * self.line_height
            heights.append(BlockHeight(block.id, offset, height,
                                       rendered.margin_top, rendered.margin_bottom))
            y = offset + height
            prev_margin_bottom = rendered.margin_bottom
        total = y + prev_margin_bottom if heights else 0.0

        self._cache_key = key
        self._cache = LaidOutDocument(tuple(lines), tuple(heights), total)
        logger.debug(f"Laid out {len(heights)} blocks into {len(lines)} lines ({total}px)")
        return self._cache

    def block_heights(self, document: Document) -> List[BlockHeight]:
        return list(self.layout(document).heights)

    def total_height(self, document: Document) -> float:
        return self.layout(document).total_height

    def render_lines(self, document: Document) -> Tuple[RenderedLine, ...]:
        return self.layout(document).lines

    def _block_lines(self, laid_out: LaidOutDocument, block_id: str) -> List[RenderedLine]:
        return [line for line in laid_out.lines if line.block_id == block_id]

    def coords_at(self, document: Document, caret: CaretPosition) -> Optional[CaretCoords]:
        if not 0 <= caret.block_index < len(document.blocks):
            raise MeasurementError(f"block index {caret.block_index} outside document")
        laid_out = self.layout(document)
        block = document.blocks[caret.block_index]
        measured = laid_out.heights[caret.block_index]
        block_lines = self._block_lines(laid_out, block.id)
        if not block_lines:
            return CaretCoords(measured.offset, 0, measured.offset + self.line_height)

        char_index = max(0, caret.character_index)
        if block.kind in _ATOMIC_KINDS:
            first = block_lines[0]
            return CaretCoords(first.offset, 0, first.bottom)
        line = block_lines[-1]
        for candidate in block_lines[:-1]:
            # A caret exactly at a wrap point belongs to the start of the next line
            if char_index < candidate.char_end:
                line = candidate
                break
        column = max(0, char_index - line.char_start) + line.indent
        return CaretCoords(line.offset, column * self.char_width, line.bottom)

    def pos_at(self, document: Document, x: float, y: float) -> Optional[CaretPosition]:
        """Map document coordinates to the nearest caret position."""
        laid_out = self.layout(document)
        if not laid_out.lines:
            return CaretPosition(0, 0) if document.blocks else None
        offsets = [line.offset for line in laid_out.lines]
        i = max(0, bisect.bisect_right(offsets, y) - 1)
        line = laid_out.lines[i]
        block_index = document.block_index(line.block_id)
        if block_index is None:
            return None
        column = int(max(0, x) // self.char_width) if self.char_width > 0 else 0
        char_index = line.char_start + max(0, column - line.indent)
        text_length = len(document.blocks[block_index].text)
        return CaretPosition(block_index, min(char_index, line.char_end, text_length))
