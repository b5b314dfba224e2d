"""Cooperative single-threaded scheduling.

Everything in the engine runs on one UI thread. Expensive work is never done
inside an input handler; it is deferred to a timer (debounced edits) or to
the next animation frame (resize, scroll, content-height changes). The
scheduler keeps both kinds of callbacks, runs them from ``tick()`` and can
cancel them all on teardown so stale callbacks never touch a discarded view.

Time is in milliseconds. Without a clock the scheduler keeps its own manual
time, advanced with ``advance()``; that is what tests and the CLI use.
"""

from __future__ import annotations

import heapq
import itertools
import logging
from typing import Callable, Dict, List, Optional, Tuple

from .constants import EngineConstants

logger = logging.getLogger(__name__)

FrameCallback = Callable[[float], None]
TimerCallback = Callable[[], None]


class FrameScheduler:
    """Animation-frame and timer queue driven by explicit ticks."""

    def __init__(self, clock: Optional[Callable[[], float]] = None,
                 frame_interval: float = EngineConstants.FRAME_INTERVAL_MS):
        self._clock = clock
        self._manual_now = 0.0
        self.frame_interval = frame_interval
        self._ids = itertools.count(1)
        self._frames: Dict[int, FrameCallback] = {}
        self._timers: List[Tuple[float, int]] = []
        self._timer_callbacks: Dict[int, TimerCallback] = {}

    def now(self) -> float:
        if self._clock is not None:
            return self._clock()
        return self._manual_now

    # --- Animation frames ---
    def request_frame(self, callback: FrameCallback) -> int:
        handle = next(self._ids)
        self._frames[handle] = callback
        return handle

    def cancel_frame(self, handle: Optional[int]) -> None:
        if handle is not None:
            self._frames.pop(handle, None)

    # --- Timers ---
    def set_timeout(self, callback: TimerCallback, delay_ms: float) -> int:
        handle = next(self._ids)
        heapq.heappush(self._timers, (self.now() + max(0.0, delay_ms), handle))
        self._timer_callbacks[handle] = callback
        return handle

    def clear_timeout(self, handle: Optional[int]) -> None:
        if handle is not None:
            # Lazily dropped from the heap when it comes due
            self._timer_callbacks.pop(handle, None)

    def cancel_all(self) -> None:
        """Drop every pending frame and timer."""
        if self._frames or self._timer_callbacks:
            logger.debug(f"Cancelling {len(self._frames)} frames and "
                         f"{len(self._timer_callbacks)} timers")
        self._frames.clear()
        self._timers.clear()
        self._timer_callbacks.clear()

    @property
    def pending(self) -> bool:
        return bool(self._frames or self._timer_callbacks)

    # --- Driving ---
    def tick(self) -> int:
        """Run due timers, then one animation frame. Returns callbacks run."""
        ran = 0
        now = self.now()
        while self._timers and self._timers[0][0] <= now:
            _, handle = heapq.heappop(self._timers)
            callback = self._timer_callbacks.pop(handle, None)
            if callback is not None:
                callback()
                ran += 1

        # Frames requested while running this batch wait for the next tick
        batch = list(self._frames.items())
        self._frames.clear()
        for _, callback in batch:
            callback(now)
            ran += 1
        return ran

    def advance(self, ms: float) -> None:
        """Advance manual time by ``ms``, ticking once per frame interval."""
        if self._clock is not None:
            raise RuntimeError("advance() requires a scheduler without a clock")
        end = self._manual_now + ms
        while True:
            step = min(self.frame_interval, end - self._manual_now)
            if step <= 0:
                break
            self._manual_now += step
            self.tick()

    def run_until_idle(self, limit_ms: float = 10_000) -> None:
        """Advance manual time until nothing is pending (or ``limit_ms`` passes)."""
        spent = 0.0
        while self.pending and spent < limit_ms:
            self.advance(self.frame_interval)
            spent += self.frame_interval


class Debouncer:
    """Run ``callback`` once, ``delay_ms`` after the last ``trigger()``."""

    def __init__(self, scheduler: FrameScheduler, delay_ms: float,
                 callback: TimerCallback):
        self._scheduler = scheduler
        self.delay_ms = delay_ms
        self._callback = callback
        self._handle: Optional[int] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        self._scheduler.clear_timeout(self._handle)
        self._handle = self._scheduler.set_timeout(self._fire, self.delay_ms)

    def _fire(self) -> None:
        self._handle = None
        self._callback()

    def flush(self) -> None:
        """Run a pending callback now."""
        if self._handle is not None:
            self.cancel()
            self._callback()

    def cancel(self) -> None:
        self._scheduler.clear_timeout(self._handle)
        self._handle = None


class FrameThrottle:
    """Coalesce requests so ``callback`` runs at most once per frame."""

    def __init__(self, scheduler: FrameScheduler, callback: FrameCallback):
        self._scheduler = scheduler
        self._callback = callback
        self._handle: Optional[int] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def request(self) -> None:
        if self._handle is None:
            self._handle = self._scheduler.request_frame(self._fire)

    def _fire(self, timestamp: float) -> None:
        self._handle = None
        self._callback(timestamp)

    def cancel(self) -> None:
        self._scheduler.cancel_frame(self._handle)
        self._handle = None
