"""Geometry of page frames inside the scroll container.

Page mode lays frames out in a grid (``pages_per_row`` columns, rows
separated by ``gap``, the whole grid surrounded by ``padding``). Continuous
mode stacks sheets whose stride is the zoomed usable height. Scroll mode has
no frames at all; ``FlowGeometry`` maps offsets straight onto the
pagination so the page indicator still works there.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

from .config import PagesPerRow
from .constants import EngineConstants
from .page_breaks import PageInfo, page_for_offset


def _fits(count: int, scaled_width: float, available: float, gap: float) -> bool:
    return available >= scaled_width * count + gap * (count - 1)


def effective_pages_per_row(setting: PagesPerRow, page_width: float, zoom: float,
                            container_width: float,
                            gap: float = EngineConstants.PAGE_GAP) -> int:
    """Pages per row that actually fit the container.

    An explicit 3 or 2 is reduced when the container is too narrow; ``auto``
    picks 3 or 2 only past the width breakpoints and only if they fit.
    """
    scaled_width = page_width * zoom
    available = container_width - EngineConstants.CONTAINER_PADDING

    if setting != "auto":
        count = int(setting)
        while count > 1 and not _fits(count, scaled_width, available, gap):
            count -= 1
        return count

    if container_width >= EngineConstants.THREE_PAGES_BREAKPOINT and _fits(
            3, scaled_width, available, gap):
        return 3
    if container_width >= EngineConstants.TWO_PAGES_BREAKPOINT and _fits(
            2, scaled_width, available, gap):
        return 2
    return 1


@dataclass(frozen=True)
class FrameRect:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class GridGeometry:
    page_width: float
    page_height: float
    zoom: float = 1.0
    pages_per_row: int = 1
    total_pages: int = 1
    padding: float = EngineConstants.GRID_PADDING
    gap: float = EngineConstants.PAGE_GAP

    @classmethod
    def stacked(cls, page_width: float, usable_height: float, zoom: float,
                total_pages: int) -> "GridGeometry":
        """Continuous mode: one sheet per row, stride of one usable height."""
        return cls(page_width, usable_height, zoom, 1, total_pages, padding=0, gap=0)

    @property
    def scaled_width(self) -> float:
        return self.page_width * self.zoom

    @property
    def scaled_height(self) -> float:
        return self.page_height * self.zoom

    @property
    def row_height(self) -> float:
        return self.scaled_height + self.gap

    @property
    def row_count(self) -> int:
        return max(1, math.ceil(self.total_pages / self.pages_per_row))

    def clamp(self, page_index: int) -> int:
        return max(0, min(page_index, self.total_pages - 1))

    def row_of(self, page_index: int) -> int:
        return page_index // self.pages_per_row

    def page_to_offset(self, page_index: int) -> float:
        return self.padding + self.row_of(self.clamp(page_index)) * self.row_height

    def offset_to_page(self, scroll_top: float) -> int:
        """First page of the row at ``scroll_top``."""
        if self.row_height <= 0:
            return 0
        row = max(0, math.floor((scroll_top - self.padding) / self.row_height))
        return self.clamp(row * self.pages_per_row)

    def centre_page(self, scroll_top: float, viewport_height: float) -> int:
        """First page of the row under the middle of the viewport."""
        if self.row_height <= 0:
            return 0
        row = math.floor((scroll_top + viewport_height / 2) / self.row_height)
        return self.clamp(row * self.pages_per_row)

    def frame_rect(self, page_index: int) -> FrameRect:
        row, column = divmod(page_index, self.pages_per_row)
        return FrameRect(self.padding + column * (self.scaled_width + self.gap),
                         self.padding + row * self.row_height,
                         self.scaled_width, self.scaled_height)

    def content_height(self) -> float:
        return 2 * self.padding + self.row_count * self.row_height - self.gap


@dataclass(frozen=True)
class FlowGeometry:
    """Scroll mode: a single unclipped surface, pages only as offsets."""

    pages: Tuple[PageInfo, ...]
    zoom: float = 1.0

    @classmethod
    def of(cls, pages: Sequence[PageInfo], zoom: float) -> "FlowGeometry":
        return cls(tuple(pages), zoom)

    @property
    def total_pages(self) -> int:
        return len(self.pages)

    @property
    def pages_per_row(self) -> int:
        return 1

    def clamp(self, page_index: int) -> int:
        return max(0, min(page_index, self.total_pages - 1))

    def row_of(self, page_index: int) -> int:
        return page_index

    def page_to_offset(self, page_index: int) -> float:
        return self.pages[self.clamp(page_index)].start_offset * self.zoom

    def offset_to_page(self, scroll_top: float) -> int:
        return page_for_offset(self.pages, scroll_top / self.zoom)

    def centre_page(self, scroll_top: float, viewport_height: float) -> int:
        return page_for_offset(self.pages, (scroll_top + viewport_height / 2) / self.zoom)

    def break_offsets(self) -> Tuple[float, ...]:
        """Zoomed offsets where scroll-mode page break indicators go."""
        return tuple(page.start_offset * self.zoom for page in self.pages[1:])

    def content_height(self) -> float:
        return self.pages[-1].end_offset * self.zoom if self.pages else 0.0
