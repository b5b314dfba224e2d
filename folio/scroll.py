"""Scroll synchronization between the viewport and the page indicator.

Programmatic scrolls (``scroll_to_page``) are animated frame by frame with an
ease-in-out curve. While one is running, and for a short settling period
after it arrives, scroll events are recognised as our own echo and do not
move the current page or start the idle timer. User scrolls update the
current page from the offset and, once the viewport has been still for
``idle_ms``, activate the page at the centre of the viewport.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol, Union

from .constants import EngineConstants
from .scheduler import FrameScheduler

logger = logging.getLogger(__name__)


def ease_in_out_cubic(t: float) -> float:
    t = max(0.0, min(1.0, t))
    if t < 0.5:
        return 4 * t * t * t
    return 1 - (-2 * t + 2) ** 3 / 2


class ScrollGeometry(Protocol):
    total_pages: int
    pages_per_row: int

    def clamp(self, page_index: int) -> int: ...
    def row_of(self, page_index: int) -> int: ...
    def page_to_offset(self, page_index: int) -> float: ...
    def offset_to_page(self, scroll_top: float) -> int: ...
    def centre_page(self, scroll_top: float, viewport_height: float) -> int: ...
    def content_height(self) -> float: ...


@dataclass
class ScrollViewport:
    """The scrollable container: its position and visible height."""

    scroll_top: float = 0.0
    viewport_height: float = 0.0
    content_height: float = 0.0

    @property
    def max_scroll(self) -> float:
        return max(0.0, self.content_height - self.viewport_height)

    def scroll_to(self, offset: float) -> float:
        self.scroll_top = max(0.0, min(offset, self.max_scroll))
        return self.scroll_top


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Animating:
    target_offset: float
    target_page: int
    start_offset: float
    start_time: Optional[float] = None  # Set by the first frame
    duration: float = EngineConstants.SCROLL_ANIMATION_MS


@dataclass(frozen=True)
class Settling:
    target_page: int
    until: float


ScrollState = Union[Idle, Animating, Settling]


class ScrollSynchronizer:
    def __init__(self, viewport: ScrollViewport, scheduler: FrameScheduler,
                 geometry: ScrollGeometry,
                 activate: Optional[Callable[[int], None]] = None,
                 animation_ms: float = EngineConstants.SCROLL_ANIMATION_MS,
                 idle_ms: float = EngineConstants.SCROLL_IDLE_MS,
                 settle_ms: float = EngineConstants.SCROLL_SETTLE_MS):
        self.viewport = viewport
        self._scheduler = scheduler
        self._geometry = geometry
        self.activate = activate
        self.animation_ms = animation_ms
        self.idle_ms = idle_ms
        self.settle_ms = settle_ms
        self._state: ScrollState = Idle()
        self._current_page = 0
        self._frame: Optional[int] = None
        self._idle_timer: Optional[int] = None
        self._settle_timer: Optional[int] = None
        self._listeners: List[Callable[[int], None]] = []
        self._position_listeners: List[Callable[[float], None]] = []
        self.viewport.content_height = geometry.content_height()

    @property
    def state(self) -> ScrollState:
        return self._state

    @property
    def is_auto_scrolling(self) -> bool:
        return not isinstance(self._state, Idle)

    @property
    def current_page(self) -> int:
        return self._current_page

    @property
    def geometry(self) -> ScrollGeometry:
        return self._geometry

    def subscribe(self, listener: Callable[[int], None]) -> None:
        """Listen for current page changes."""
        self._listeners.append(listener)

    def on_position(self, listener: Callable[[float], None]) -> None:
        """Listen for programmatic changes of the scroll position."""
        self._position_listeners.append(listener)

    def _set_current_page(self, page_index: int) -> None:
        if page_index == self._current_page:
            return
        self._current_page = page_index
        for listener in list(self._listeners):
            listener(page_index)

    def set_geometry(self, geometry: ScrollGeometry) -> None:
        """New layout (zoom, pages per row, pagination, view mode)."""
        self._geometry = geometry
        self.viewport.content_height = geometry.content_height()
        self.viewport.scroll_to(self.viewport.scroll_top)
        self._set_current_page(geometry.clamp(self._current_page))

    def page_to_offset(self, page_index: int) -> float:
        return self._geometry.page_to_offset(page_index)

    def offset_to_page(self, scroll_top: float) -> int:
        return self._geometry.offset_to_page(scroll_top)

    # --- Programmatic scrolling ---
    def scroll_to_page(self, page_index: int, animate: bool = True) -> int:
        """Bring a page into view; out-of-range indices are clamped."""
        page_index = self._geometry.clamp(page_index)
        target = max(0.0, min(self._geometry.page_to_offset(page_index),
                              self.viewport.max_scroll))
        self._cancel_timers()
        self._set_current_page(page_index)
        if not animate:
            self._start_settling(page_index)
            self._move_to(target)
            return page_index

        self._state = Animating(target, page_index, self.viewport.scroll_top,
                                duration=self.animation_ms)
        logger.debug(f"Scrolling to page {page_index} at offset {target:.0f}")
        self._frame = self._scheduler.request_frame(self._on_frame)
        return page_index

    def _on_frame(self, timestamp: float) -> None:
        self._frame = None
        state = self._state
        if not isinstance(state, Animating):
            return
        if state.start_time is None:
            state = Animating(state.target_offset, state.target_page, state.start_offset,
                              timestamp, state.duration)
            self._state = state
        progress = 1.0 if state.duration <= 0 else (timestamp - state.start_time) / state.duration
        if progress >= 1.0:
            self._move_to(state.target_offset)
            self._start_settling(state.target_page)
            return
        eased = ease_in_out_cubic(progress)
        self._move_to(state.start_offset + (state.target_offset - state.start_offset) * eased)
        self._frame = self._scheduler.request_frame(self._on_frame)

    def _start_settling(self, page_index: int) -> None:
        self._state = Settling(page_index, self._scheduler.now() + self.settle_ms)
        self._settle_timer = self._scheduler.set_timeout(self._on_settled, self.settle_ms)

    def _on_settled(self) -> None:
        self._settle_timer = None
        self._state = Idle()

    def _move_to(self, offset: float) -> None:
        self.viewport.scroll_to(offset)
        for listener in list(self._position_listeners):
            listener(self.viewport.scroll_top)
        # A programmatic scroll still produces a scroll event
        self.on_scroll()

    # --- User scrolling ---
    def on_scroll(self, scroll_top: Optional[float] = None) -> None:
        if scroll_top is not None:
            self.viewport.scroll_to(scroll_top)
        if self.is_auto_scrolling:
            return

        derived = self._geometry.offset_to_page(self.viewport.scroll_top)
        if self._geometry.row_of(self._current_page) != self._geometry.row_of(derived):
            self._set_current_page(derived)

        self._scheduler.clear_timeout(self._idle_timer)
        self._idle_timer = self._scheduler.set_timeout(self._on_idle, self.idle_ms)

    def _on_idle(self) -> None:
        self._idle_timer = None
        if self.is_auto_scrolling:
            return
        centre = self._geometry.centre_page(self.viewport.scroll_top,
                                            self.viewport.viewport_height)
        logger.debug(f"Scroll settled, centre page {centre}")
        if self.activate is not None:
            self.activate(centre)

    # --- Teardown ---
    def _cancel_timers(self) -> None:
        self._scheduler.cancel_frame(self._frame)
        self._scheduler.clear_timeout(self._idle_timer)
        self._scheduler.clear_timeout(self._settle_timer)
        self._frame = self._idle_timer = self._settle_timer = None

    def cancel(self) -> None:
        self._cancel_timers()
        self._state = Idle()
