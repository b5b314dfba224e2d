"""The page view system: the application-facing API of the engine.

``PageViewSystem`` wires the pieces together around one editing surface:

- the ``PageBreakCalculator`` turns measurements into pages,
- the ``MirrorRenderer`` keeps the read-only snapshot for inactive pages,
- the ``ViewportVisibilityTracker`` decides which pages are mounted,
- the ``ActivePageTracker`` owns the single live surface,
- the ``ScrollSynchronizer`` keeps the viewport and the page indicator in step.

All configuration comes from the ``PageSettings`` record given to the
constructor or to ``update_settings``; nothing is read from globals.
"""

from __future__ import annotations

import datetime
import logging
from typing import Callable, List, Optional, Union

from .active_page import ActivePageTracker
from .blocks import Document
from .config import PAGES_PER_ROW_CHOICES, PagesPerRow, PageSettings, clamp_zoom
from .constants import EngineConstants
from .dimensions import PageDimensionProvider
from .frames import PageFrame, build_frame
from .grid import FlowGeometry, GridGeometry, effective_pages_per_row
from .layout import TextLayout
from .mirror import MirrorRenderer
from .page_breaks import PageBreakCalculator, PageInfo
from .scheduler import FrameScheduler
from .scroll import ScrollSynchronizer, ScrollViewport
from .surface import EditingSurface
from .view_mode import ViewMode
from .visibility import Rect, ViewportVisibilityTracker

logger = logging.getLogger(__name__)

Geometry = Union[GridGeometry, FlowGeometry]


class PageViewSystem:
    def __init__(self, surface: EditingSurface, settings: Optional[PageSettings] = None,
                 scheduler: Optional[FrameScheduler] = None,
                 container_width: float = 1200, viewport_height: float = 900,
                 today: Optional[datetime.date] = None):
        self._surface = surface
        self._scheduler = scheduler or FrameScheduler()
        self._settings = settings or PageSettings()
        self._dimensions = PageDimensionProvider(self._settings)
        self._container_width = container_width
        self.today = today
        self._closed = False
        self._follow_caret = False
        self._listeners: List[Callable[[], None]] = []

        self._layout = self._make_layout()
        surface.attach_layout(self._layout)
        self._viewport = ScrollViewport(0.0, viewport_height)

        self._calculator = PageBreakCalculator(
            self._layout, self._scheduler, self._dimensions.usable_height(),
            uniform=self._uniform)
        self._mirror = MirrorRenderer(self._layout, self._scheduler,
                                      lambda: self._surface.document)
        self._visibility = ViewportVisibilityTracker(self._scheduler)
        self._tracker = ActivePageTracker(surface, uniform=self._uniform,
                                          usable_height=self._dimensions.usable_height(),
                                          scroll_to_page=self._scroll_to_caret_page)
        self._scroll = ScrollSynchronizer(self._viewport, self._scheduler,
                                          self._geometry(), activate=self._tracker.activate)

        self._calculator.subscribe(self._sync_pages)
        self._tracker.subscribe(self._on_migration)
        self._scroll.subscribe(lambda page: self._notify())
        self._scroll.on_position(self._on_scroll_position)
        self._visibility.subscribe(lambda visible: self._notify())
        self._unsubscribe_update = surface.on_update(self._on_document_update)

        self._calculator.set_document(surface.document, immediate=True)
        self._mirror.refresh_now()
        self._sync_pages(self._calculator.pages)

    # --- Derived configuration ---
    @property
    def _uniform(self) -> bool:
        return self._settings.view_mode is ViewMode.CONTINUOUS

    def _make_layout(self) -> TextLayout:
        show_markers = (self._settings.view_mode is ViewMode.SCROLL
                        and self._settings.show_page_breaks)
        return TextLayout(self._dimensions.content_width(), show_page_breaks=show_markers)

    def _geometry(self) -> Geometry:
        size = self._dimensions.page_dimensions()
        total = self._calculator.total_pages
        mode = self._settings.view_mode
        if mode is ViewMode.PAGE:
            return GridGeometry(size.width, size.height, self.zoom,
                                self.effective_pages_per_row, total)
        if mode is ViewMode.CONTINUOUS:
            return GridGeometry.stacked(size.width, self._dimensions.usable_height(),
                                        self.zoom, total)
        return FlowGeometry.of(self._calculator.pages, self.zoom)

    # --- Reacting to changes ---
    def _on_document_update(self, document: Document, internal: bool) -> None:
        if self._closed:
            return
        if internal:
            # Typing: wait for a pause before repaginating
            self._calculator.set_document(document)
            self._mirror.request_refresh()
            self._follow_caret = True
        else:
            # A different document: stale work must not run against it
            self._calculator.set_document(document, immediate=True)
            self._mirror.refresh_now()
        self._notify()

    def _sync_pages(self, pages) -> None:
        self._tracker.set_pages(pages, uniform=self._uniform,
                                usable_height=self._dimensions.usable_height())
        self._apply_geometry()
        if self._follow_caret:
            # Text typed at the caret may have pushed it onto another page
            self._follow_caret = False
            self._tracker.on_selection_change()

    def _apply_geometry(self) -> None:
        geometry = self._geometry()
        self._scroll.set_geometry(geometry)
        self._visibility.reset()
        for i in range(self.total_pages):
            if isinstance(geometry, GridGeometry):
                rect = geometry.frame_rect(i)
                self._visibility.observe(i, Rect(rect.y, rect.height))
            else:
                page = self.pages[i]
                self._visibility.observe(i, Rect(page.start_offset * self.zoom,
                                                 page.height * self.zoom))
        self._visibility.update_viewport(self._viewport.scroll_top,
                                         self._viewport.viewport_height)
        self._visibility.refresh()
        self._notify()

    def _on_migration(self, old: int, new: int) -> None:
        self._notify()

    def _scroll_to_caret_page(self, page_index: int) -> None:
        self._scroll.scroll_to_page(page_index)

    def _on_scroll_position(self, scroll_top: float) -> None:
        self._visibility.update_viewport(scroll_top, self._viewport.viewport_height)

    def subscribe(self, listener: Callable[[], None]) -> None:
        """Listen for anything that changes what should be drawn."""
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    # --- Queries ---
    @property
    def settings(self) -> PageSettings:
        return self._settings

    @property
    def dimensions(self) -> PageDimensionProvider:
        return self._dimensions

    @property
    def layout(self) -> TextLayout:
        return self._layout

    @property
    def pages(self):
        return self._calculator.pages

    @property
    def total_pages(self) -> int:
        return self._calculator.total_pages

    @property
    def current_page(self) -> int:
        return self._scroll.current_page

    @property
    def active_page(self) -> int:
        return self._tracker.active_page

    @property
    def visible_pages(self):
        return self._visibility.visible_set | {self._tracker.active_page}

    @property
    def scroll_top(self) -> float:
        return self._viewport.scroll_top

    @property
    def is_auto_scrolling(self) -> bool:
        return self._scroll.is_auto_scrolling

    @property
    def geometry(self) -> Geometry:
        return self._scroll.geometry

    @property
    def scheduler(self) -> FrameScheduler:
        return self._scheduler

    @property
    def mirror(self) -> MirrorRenderer:
        return self._mirror

    # --- Navigation ---
    def navigate_to_page(self, page_index: int, animate: bool = True) -> int:
        """Scroll to a page and make it editable. Out-of-range values are clamped."""
        page_index = max(0, min(page_index, self.total_pages - 1))
        self._tracker.activate(page_index)
        return self._scroll.scroll_to_page(page_index, animate=animate)

    def next_page(self) -> int:
        return self.navigate_to_page(self.current_page + 1)

    def previous_page(self) -> int:
        return self.navigate_to_page(self.current_page - 1)

    def on_scroll(self, scroll_top: float) -> None:
        """Scroll event from the container (user scrolling)."""
        self._scroll.on_scroll(scroll_top)
        self._visibility.update_viewport(self._viewport.scroll_top,
                                         self._viewport.viewport_height)

    def click(self, page_index: int, x: float, y: float) -> None:
        """Click at (x, y) inside a page's content area."""
        self._tracker.on_page_click(page_index, x, y)

    # --- Zoom ---
    @property
    def zoom(self) -> float:
        return self._settings.zoom

    @zoom.setter
    def zoom(self, value: float) -> None:
        value = clamp_zoom(value)
        if value == self._settings.zoom:
            return
        self._settings = self._settings.with_changes(zoom=value)
        self._dimensions = PageDimensionProvider(self._settings)
        self._apply_geometry()

    def zoom_in(self) -> float:
        self.zoom = round(self.zoom + EngineConstants.ZOOM_STEP, 1)
        return self.zoom

    def zoom_out(self) -> float:
        self.zoom = round(self.zoom - EngineConstants.ZOOM_STEP, 1)
        return self.zoom

    # --- Pages per row ---
    @property
    def pages_per_row(self) -> PagesPerRow:
        return self._settings.pages_per_row

    @pages_per_row.setter
    def pages_per_row(self, value: PagesPerRow) -> None:
        if value not in PAGES_PER_ROW_CHOICES:
            raise ValueError(f"pages_per_row must be one of {PAGES_PER_ROW_CHOICES}")
        self._settings = self._settings.with_changes(pages_per_row=value)
        self._dimensions = PageDimensionProvider(self._settings)
        self._apply_geometry()

    @property
    def effective_pages_per_row(self) -> int:
        if self._settings.view_mode is not ViewMode.PAGE:
            return 1
        return effective_pages_per_row(self._settings.pages_per_row,
                                       self._dimensions.page_dimensions().width,
                                       self.zoom, self._container_width)

    # --- View mode ---
    @property
    def view_mode(self) -> ViewMode:
        return self._settings.view_mode

    @view_mode.setter
    def view_mode(self, mode: ViewMode) -> None:
        if mode is self._settings.view_mode:
            return
        self.update_settings(self._settings.with_changes(view_mode=mode))

    def toggle_view_mode(self) -> ViewMode:
        self.view_mode = self.view_mode.next()
        return self.view_mode

    # --- Settings and container ---
    def update_settings(self, settings: PageSettings) -> None:
        """Apply new settings; pages are recomputed from scratch."""
        old = self._settings
        self._settings = settings
        self._follow_caret = False
        self._dimensions = PageDimensionProvider(settings)
        logger.debug(f"Page settings changed ({old.view_mode.value} -> "
                     f"{settings.view_mode.value}), usable height "
                     f"{self._dimensions.usable_height()}")
        self._layout = self._make_layout()
        self._surface.attach_layout(self._layout)
        self._mirror.set_renderer(self._layout)
        self._calculator.configure(measurer=self._layout,
                                   usable_height=self._dimensions.usable_height(),
                                   uniform=self._uniform)
        self._sync_pages(self._calculator.pages)

    def resize(self, container_width: Optional[float] = None,
               viewport_height: Optional[float] = None) -> None:
        if container_width is not None:
            self._container_width = container_width
        if viewport_height is not None:
            self._viewport.viewport_height = max(0.0, viewport_height)
        self._apply_geometry()

    def flush(self) -> None:
        """Run pending repagination and mirror refresh now."""
        if self._calculator.pending:
            self._calculator.recalculate()
        if self._mirror.refresh_now():
            self._notify()

    # --- Frames ---
    def page_frame(self, page_index: int, mount: bool = False) -> PageFrame:
        """Frame of one page; ``mount`` renders it even if it is off screen."""
        page_index = max(0, min(page_index, self.total_pages - 1))
        page: PageInfo = self.pages[page_index]
        is_active = self._tracker.is_editable(page_index)
        is_mounted = mount or page_index in self.visible_pages
        usable = self._dimensions.usable_height()
        clip = None
        if is_mounted:
            if is_active:
                clip = self._mirror.live_clip(page, usable, self._surface.document)
            else:
                clip = self._mirror.clip(page, usable)
        return build_frame(page, self.total_pages, self._dimensions, clip, is_active,
                           is_mounted, self.zoom, self._surface.document, self.today)

    def frames(self, mount_all: bool = False) -> List[PageFrame]:
        return [self.page_frame(i, mount_all) for i in range(self.total_pages)]

    # --- Teardown ---
    def close(self) -> None:
        """Cancel every pending callback and detach from the surface."""
        if self._closed:
            return
        self._closed = True
        self._unsubscribe_update()
        self._calculator.cancel()
        self._mirror.cancel()
        self._visibility.cancel()
        self._scroll.cancel()
        self._tracker.close()
        self._listeners.clear()
        logger.debug("Page view closed")
