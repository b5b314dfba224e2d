"""Read-only mirrors of the document for pages that are not being edited.

Every inactive page shows the same snapshot of the whole document, shifted up
by the page's start offset inside a fixed-height viewport. The snapshot is
regenerated at most once per animation frame, and only when the content
actually differs from what it was built from.
"""

from __future__ import annotations

import bisect
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence, Tuple

from .blocks import Document
from .layout import RenderedLine
from .page_breaks import PageInfo
from .scheduler import FrameScheduler, FrameThrottle

logger = logging.getLogger(__name__)


class ContentRenderer(Protocol):
    def render_lines(self, document: Document) -> Sequence[RenderedLine]:
        ...


@dataclass(frozen=True)
class MirrorSnapshot:
    document: Document
    lines: Tuple[RenderedLine, ...]
    generation: int

    @property
    def total_height(self) -> float:
        return self.lines[-1].bottom if self.lines else 0.0


@dataclass(frozen=True)
class PageClip:
    """Content visible through one page's viewport.

    ``offset`` is the vertical shift applied to the full content
    (``-page.start_offset``); each entry of ``lines`` is (y within the
    viewport, line).
    """

    page_index: int
    offset: float
    height: float
    lines: Tuple[Tuple[float, RenderedLine], ...]
    editable: bool = False

    def texts(self) -> list:
        return [line.text for _, line in self.lines]


def clip_lines(lines: Sequence[RenderedLine], page: PageInfo,
               viewport_height: float, editable: bool = False) -> PageClip:
    """Clip ``lines`` to one page's viewport.

    Lines starting at or after the page's end belong to the next page and are
    masked; a line taller than what is left of the viewport is cut by it.
    """
    top = page.start_offset
    bottom = top + max(0.0, viewport_height)
    offsets = [line.offset for line in lines]
    first = bisect.bisect_left(offsets, top)
    # Include a line that started above the page but still reaches into it
    while first > 0 and lines[first - 1].bottom > top:
        first -= 1
    visible = []
    for line in lines[first:]:
        if line.offset >= bottom or line.offset >= page.end_offset:
            break
        if line.bottom <= top:
            continue
        visible.append((line.offset - top, line))
    return PageClip(page.index, -top, viewport_height, tuple(visible), editable)


class MirrorRenderer:
    """Keeps a snapshot of the document in step with the live surface."""

    def __init__(self, renderer: ContentRenderer, scheduler: FrameScheduler,
                 source: Callable[[], Document]):
        self._renderer = renderer
        self._source = source
        self._snapshot: Optional[MirrorSnapshot] = None
        self._generation = 0
        self._throttle = FrameThrottle(scheduler, self._on_frame)

    @property
    def snapshot(self) -> Optional[MirrorSnapshot]:
        return self._snapshot

    @property
    def generation(self) -> int:
        """Number of snapshots generated so far."""
        return self._generation

    def set_renderer(self, renderer: ContentRenderer) -> None:
        """Switch layout (e.g. new content width); the snapshot is rebuilt."""
        self._renderer = renderer
        self._snapshot = None
        self.refresh_now()

    def request_refresh(self) -> None:
        """Ask for a refresh on the next frame; repeated calls coalesce."""
        self._throttle.request()

    def _on_frame(self, timestamp: float) -> None:
        self.refresh_now()

    def refresh_now(self) -> bool:
        """Regenerate the snapshot if the content changed. Returns True if it did."""
        document = self._source()
        if self._snapshot is not None and document.same_content(self._snapshot.document):
            return False
        self._generation += 1
        self._snapshot = MirrorSnapshot(document, tuple(self._renderer.render_lines(document)),
                                        self._generation)
        logger.debug(f"Mirror snapshot #{self._generation} for document v{document.version}")
        return True

    def clip(self, page: PageInfo, viewport_height: float) -> PageClip:
        """Mirror content for an inactive page."""
        if self._snapshot is None:
            self.refresh_now()
        assert self._snapshot is not None
        return clip_lines(self._snapshot.lines, page, viewport_height)

    def live_clip(self, page: PageInfo, viewport_height: float,
                  document: Document) -> PageClip:
        """Live surface content for the active page, clipped the same way."""
        return clip_lines(self._renderer.render_lines(document), page, viewport_height,
                          editable=True)

    def cancel(self) -> None:
        self._throttle.cancel()
