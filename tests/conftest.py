"""Shared fixtures for the folio tests."""

import datetime
from typing import Dict, List, Optional

import pytest

from folio.blocks import Block, BlockHeight, BlockKind, Document
from folio.measurer import CaretCoords, CaretPosition, LayoutMeasurer, MeasurementError
from folio.scheduler import FrameScheduler


class FixedMeasurer(LayoutMeasurer):
    """Measurer with a fixed pixel height per block id; breaks are zero-height."""

    def __init__(self, heights: Optional[Dict[str, float]] = None, default: float = 100):
        self.heights = heights or {}
        self.default = default
        self.fail = False
        self.calls = 0

    def block_heights(self, document: Document) -> List[BlockHeight]:
        self.calls += 1
        out = []
        y = 0.0
        for block in document.blocks:
            h = 0.0 if block.is_page_break else self.heights.get(block.id, self.default)
            out.append(BlockHeight(block.id, y, h))
            y += h
        return out

    def coords_at(self, document: Document, caret: CaretPosition) -> Optional[CaretCoords]:
        if self.fail:
            raise MeasurementError("boom")
        heights = self.block_heights(document)
        if not 0 <= caret.block_index < len(heights):
            raise MeasurementError("outside document")
        top = heights[caret.block_index].offset
        return CaretCoords(top, 0, top + 18)


def make_document(*heights_or_breaks, title="Brief"):
    """Document of paragraphs b0, b1... ; the string "break" inserts a marker."""
    blocks = []
    for i, item in enumerate(heights_or_breaks):
        if item == "break":
            blocks.append(Block(f"b{i}", BlockKind.PAGE_BREAK))
        else:
            blocks.append(Block(f"b{i}", BlockKind.PARAGRAPH, text=f"block {i}"))
    return Document(tuple(blocks), title=title)


@pytest.fixture
def scheduler():
    return FrameScheduler()


@pytest.fixture
def today():
    return datetime.date(2024, 3, 5)


@pytest.fixture
def long_text():
    """Plain text long enough to span several A4 pages."""
    return "\n".join(f"Paragraph {i}: " + "lorem ipsum dolor sit amet " * 6
                     for i in range(1, 121))
