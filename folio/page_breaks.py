"""Page break computation.

Partitions the full, infinitely tall content into pages. Pages are always
contiguous, start at 0, end at the total content height and there is always
at least one of them.
"""

from __future__ import annotations

import bisect
import logging
import math
from dataclasses import dataclass
from typing import AbstractSet, Callable, List, Optional, Sequence, Tuple

from .blocks import BlockHeight, Document
from .constants import EngineConstants
from .measurer import LayoutMeasurer
from .scheduler import Debouncer, FrameScheduler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageInfo:
    index: int
    start_offset: float
    end_offset: float
    has_manual_break: bool = False

    @property
    def height(self) -> float:
        return self.end_offset - self.start_offset

    def contains(self, offset: float) -> bool:
        return self.start_offset <= offset < self.end_offset


def _content_bottom(blocks: Sequence[BlockHeight]) -> float:
    if not blocks:
        return 0.0
    last = blocks[-1]
    return last.bottom + last.margin_bottom


def compute_pages(blocks: Sequence[BlockHeight], manual_breaks: AbstractSet[str],
                  usable_height: float,
                  total_height: Optional[float] = None) -> List[PageInfo]:
    """Greedy partition of measured blocks into pages.

    Args:
        blocks: Block measurements in document order.
        manual_breaks: Ids of blocks that are manual page break markers.
        usable_height: Content height available on one page.
        total_height: Full content height; defaults to the bottom of the last
            block including its bottom margin.

    Returns:
        Pages covering ``[0, total_height]``. A block is never split: one
        taller than ``usable_height`` overflows its page.
    """
    if total_height is None:
        total_height = _content_bottom(blocks)
    total_height = max(0.0, total_height)

    if usable_height <= 0 or not blocks:
        return [PageInfo(0, 0.0, total_height, False)]

    pages: List[PageInfo] = []
    page_start = 0.0
    accumulated = 0.0
    prev_margin_bottom = 0.0

    for block in blocks:
        if block.block_id in manual_breaks:
            # The break is a boundary regardless of how full the page is
            pages.append(PageInfo(len(pages), page_start, block.offset, True))
            page_start = block.offset
            accumulated = 0.0
            prev_margin_bottom = 0.0
            continue

        if accumulated > 0:
            collapsed_margin = max(prev_margin_bottom, block.margin_top)
        else:
            collapsed_margin = block.margin_top
        charged = block.height + collapsed_margin

        if accumulated + charged > usable_height and accumulated > 0:
            pages.append(PageInfo(len(pages), page_start, block.offset, False))
            page_start = block.offset
            # The top margin sits above block.offset, on the page just closed
            accumulated = block.height
        else:
            accumulated += charged
        prev_margin_bottom = block.margin_bottom

    pages.append(PageInfo(len(pages), page_start, max(page_start, total_height), False))
    return pages


def compute_uniform_pages(total_height: float, usable_height: float) -> List[PageInfo]:
    """Fixed-stride pages of ``usable_height`` each, as stacked sheets use."""
    total_height = max(0.0, total_height)
    if usable_height <= 0 or total_height <= usable_height:
        return [PageInfo(0, 0.0, total_height, False)]
    count = max(1, math.ceil(total_height / usable_height))
    return [PageInfo(i, i * usable_height, min((i + 1) * usable_height, total_height), False)
            for i in range(count)]


def page_for_offset(pages: Sequence[PageInfo], offset: float) -> int:
    """Index of the page enclosing ``offset``, clamped to the page range."""
    if not pages:
        return 0
    starts = [p.start_offset for p in pages]
    i = bisect.bisect_right(starts, offset) - 1
    return max(0, min(i, len(pages) - 1))


def validate_pages(pages: Sequence[PageInfo], total_height: float) -> None:
    """Raise ValueError if ``pages`` break the coverage invariants."""
    if not pages:
        raise ValueError("no pages")
    if pages[0].start_offset != 0:
        raise ValueError(f"first page starts at {pages[0].start_offset}")
    for prev, nxt in zip(pages, pages[1:]):
        if prev.end_offset != nxt.start_offset:
            raise ValueError(f"gap between page {prev.index} and {nxt.index}")
        if nxt.index != prev.index + 1:
            raise ValueError(f"page {nxt.index} out of order")
    if pages[-1].end_offset != total_height:
        raise ValueError(f"last page ends at {pages[-1].end_offset}, not {total_height}")


PagesListener = Callable[[Tuple[PageInfo, ...]], None]


class PageBreakCalculator:
    """Owns the current page list and recomputes it when inputs change.

    Edits schedule a debounced recomputation; ``recalculate()`` runs it now.
    A recomputation whose result equals the current pages does not notify.
    """

    def __init__(self, measurer: LayoutMeasurer, scheduler: FrameScheduler,
                 usable_height: float, uniform: bool = False,
                 debounce_ms: float = EngineConstants.RECALCULATE_DEBOUNCE_MS):
        self._measurer = measurer
        self.usable_height = usable_height
        self.uniform = uniform
        self._document: Optional[Document] = None
        self._pages: Tuple[PageInfo, ...] = (PageInfo(0, 0.0, 0.0, False),)
        self._inputs: Optional[tuple] = None
        self._listeners: List[PagesListener] = []
        self._debouncer = Debouncer(scheduler, debounce_ms, self.recalculate)

    @property
    def pages(self) -> Tuple[PageInfo, ...]:
        return self._pages

    @property
    def total_pages(self) -> int:
        return len(self._pages)

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def subscribe(self, listener: PagesListener) -> None:
        self._listeners.append(listener)

    def set_document(self, document: Document, immediate: bool = False) -> None:
        self._document = document
        if immediate:
            self._debouncer.cancel()
            self.recalculate()
        else:
            self._debouncer.trigger()

    def configure(self, measurer: Optional[LayoutMeasurer] = None,
                  usable_height: Optional[float] = None,
                  uniform: Optional[bool] = None) -> None:
        """Change layout inputs and recompute from scratch."""
        if measurer is not None:
            self._measurer = measurer
        if usable_height is not None:
            self.usable_height = usable_height
        if uniform is not None:
            self.uniform = uniform
        self._inputs = None
        self._debouncer.cancel()
        self.recalculate()

    def recalculate(self) -> Tuple[PageInfo, ...]:
        self._debouncer.cancel()
        document = self._document if self._document is not None else Document()
        heights = self._measurer.block_heights(document)
        total = self._measurer.total_height(document)
        inputs = (tuple(heights), document.manual_breaks(), self.usable_height,
                  self.uniform, total)
        if inputs == self._inputs:
            return self._pages
        self._inputs = inputs

        if self.uniform:
            pages = compute_uniform_pages(total, self.usable_height)
        else:
            pages = compute_pages(heights, document.manual_breaks(), self.usable_height, total)
        new_pages = tuple(pages)
        if new_pages == self._pages:
            return self._pages
        logger.debug(f"Repaginated document v{document.version}: "
                     f"{len(self._pages)} -> {len(new_pages)} pages")
        self._pages = new_pages
        for listener in list(self._listeners):
            listener(new_pages)
        return self._pages

    def page_for_offset(self, offset: float) -> int:
        return page_for_offset(self._pages, offset)

    def cancel(self) -> None:
        self._debouncer.cancel()
