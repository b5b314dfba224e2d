"""Viewport virtualization.

Decides which pages are mounted (fully rendered) and which are drawn as
fixed-size placeholders. A page is mounted when its rectangle comes within
``preload_margin`` pixels of the viewport, or when it sits within
``overscan`` pages of such a page.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, List, Optional

from .constants import EngineConstants
from .scheduler import FrameScheduler, FrameThrottle

logger = logging.getLogger(__name__)

VisibilityListener = Callable[[FrozenSet[int]], None]


@dataclass(frozen=True)
class Rect:
    """Vertical extent of a page frame inside the scroll container."""

    top: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def intersects(self, top: float, bottom: float) -> bool:
        return self.top < bottom and self.bottom > top


class ViewportVisibilityTracker:
    def __init__(self, scheduler: Optional[FrameScheduler] = None,
                 overscan: int = EngineConstants.DEFAULT_OVERSCAN,
                 preload_margin: float = EngineConstants.PRELOAD_MARGIN):
        self.overscan = max(0, overscan)
        self.preload_margin = preload_margin
        self._rects: Dict[int, Rect] = {}
        self._scroll_top = 0.0
        self._viewport_height = 0.0
        self._visible: FrozenSet[int] = frozenset({0})
        self._listeners: List[VisibilityListener] = []
        # Without a scheduler updates apply immediately
        self._throttle = FrameThrottle(scheduler, self._on_frame) if scheduler else None

    @property
    def visible_set(self) -> FrozenSet[int]:
        return self._visible

    def is_visible(self, page_index: int) -> bool:
        return page_index in self._visible

    def subscribe(self, listener: VisibilityListener) -> None:
        self._listeners.append(listener)

    def observe(self, page_index: int, rect: Rect) -> None:
        self._rects[page_index] = rect
        self._schedule()

    def unobserve(self, page_index: int) -> None:
        if self._rects.pop(page_index, None) is not None:
            self._schedule()

    def reset(self) -> None:
        """Stop observing every page (layout is about to be rebuilt)."""
        self._rects.clear()
        self._schedule()

    def update_viewport(self, scroll_top: float, viewport_height: float) -> None:
        self._scroll_top = scroll_top
        self._viewport_height = max(0.0, viewport_height)
        self._schedule()

    def _schedule(self) -> None:
        if self._throttle is None:
            self.refresh()
        else:
            self._throttle.request()

    def _on_frame(self, timestamp: float) -> None:
        self.refresh()

    def intersecting(self) -> List[int]:
        top = self._scroll_top - self.preload_margin
        bottom = self._scroll_top + self._viewport_height + self.preload_margin
        return sorted(i for i, rect in self._rects.items() if rect.intersects(top, bottom))

    def refresh(self) -> FrozenSet[int]:
        """Recompute the mounted set now; listeners hear only about changes."""
        mounted = set()
        for i in self.intersecting():
            for j in range(i - self.overscan, i + self.overscan + 1):
                if j in self._rects:
                    mounted.add(j)
        if not mounted:
            mounted.add(0)
        visible = frozenset(mounted)
        if visible != self._visible:
            logger.debug(f"Mounted pages: {sorted(visible)}")
            self._visible = visible
            for listener in list(self._listeners):
                listener(visible)
        return self._visible

    def cancel(self) -> None:
        if self._throttle is not None:
            self._throttle.cancel()
