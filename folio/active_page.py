"""Tracks which page owns the single live editing surface.

Exactly one page is active at a time. Ownership changes through
``_migrate`` only: the index is reassigned in one step and listeners are told
``(old, new)`` afterwards, so nobody ever sees zero or two active pages.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, List, Optional, Sequence, Tuple

from .measurer import CaretCoords, CaretPosition, safe_coords
from .page_breaks import PageInfo, page_for_offset
from .surface import EditingSurface

logger = logging.getLogger(__name__)

MigrationListener = Callable[[int, int], None]


class ActivePageTracker:
    """Maps caret movement, clicks and scroll settling to the active page."""

    def __init__(self, surface: EditingSurface, pages: Sequence[PageInfo] = (),
                 uniform: bool = False, usable_height: float = 0.0,
                 scroll_to_page: Optional[Callable[[int], None]] = None):
        self._surface = surface
        self._pages: Tuple[PageInfo, ...] = tuple(pages) or (PageInfo(0, 0.0, 0.0),)
        self.uniform = uniform
        self.usable_height = usable_height
        self.scroll_to_page = scroll_to_page
        self._active = 0
        self._listeners: List[MigrationListener] = []
        self._placing_click = False
        self._unsubscribe = surface.on_selection_change(self.on_selection_change)

    @property
    def active_page(self) -> int:
        return self._active

    @property
    def total_pages(self) -> int:
        return len(self._pages)

    def subscribe(self, listener: MigrationListener) -> None:
        self._listeners.append(listener)

    def is_editable(self, page_index: int) -> bool:
        return page_index == self._active

    def _clamp(self, page_index: int) -> int:
        return max(0, min(page_index, len(self._pages) - 1))

    def _migrate(self, new_index: int, reason: str) -> None:
        old_index = self._active
        if new_index == old_index:
            return
        self._active = new_index
        logger.debug(f"Active page {old_index} -> {new_index} ({reason})")
        for listener in list(self._listeners):
            listener(old_index, new_index)

    def set_pages(self, pages: Sequence[PageInfo], uniform: Optional[bool] = None,
                  usable_height: Optional[float] = None) -> None:
        """Take a new pagination; the active page is clamped into range."""
        self._pages = tuple(pages) or (PageInfo(0, 0.0, 0.0),)
        if uniform is not None:
            self.uniform = uniform
        if usable_height is not None:
            self.usable_height = usable_height
        self._migrate(self._clamp(self._active), "repagination")

    def page_for_coords(self, coords: CaretCoords) -> int:
        if self.uniform:
            if self.usable_height <= 0:
                return 0
            return self._clamp(math.floor(coords.top / self.usable_height))
        return self._clamp(page_for_offset(self._pages, coords.top))

    def on_selection_change(self, caret: Optional[CaretPosition] = None) -> None:
        if self._placing_click:
            return
        caret = caret if caret is not None else self._surface.caret
        coords = safe_coords(self._surface.coords_at, caret)
        if coords is None:
            return
        page_index = self.page_for_coords(coords)
        if page_index == self._active:
            return
        self._migrate(page_index, "caret")
        if self.scroll_to_page is not None:
            self.scroll_to_page(page_index)

    def on_page_click(self, page_index: int, x: float, y: float) -> None:
        """Handle a click at (x, y) relative to a page's content area."""
        page_index = self._clamp(page_index)
        self._migrate(page_index, "click")
        page = self._pages[page_index]
        doc_y = page.start_offset + max(0.0, y)
        if page.end_offset > page.start_offset:
            doc_y = min(doc_y, page.end_offset - 1)
        pos = self._surface.pos_at_coords(x, doc_y)
        if pos is None:
            return
        # A line straddling the page top still belongs to the clicked page
        self._placing_click = True
        try:
            self._surface.set_caret(pos)
        finally:
            self._placing_click = False

    def activate(self, page_index: int) -> None:
        """Activate a page without moving the viewport (scroll settled on it)."""
        self._migrate(self._clamp(page_index), "scroll")

    def close(self) -> None:
        self._unsubscribe()
        self._listeners.clear()
