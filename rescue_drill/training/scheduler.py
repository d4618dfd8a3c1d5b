"""
Timer scheduling for the training engine.

The engine never sleeps or spawns threads. Every countdown is a callback
registered on a Scheduler, and every callback can be cancelled:

- ManualScheduler: virtual clock advanced explicitly (tests, scripted drills,
  and the terminal driver which feeds it wall-clock time)
- AsyncioScheduler: real time on an asyncio event loop
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from collections.abc import Callable
from typing import Any, Protocol

from loguru import logger


class TimerHandle(Protocol):
    """Handle returned by Scheduler.call_later."""

    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Clock plus deferred callbacks."""

    def now(self) -> float:
        """Current time in seconds (monotonic)."""
        ...

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        """Run callback(*args) after delay seconds."""
        ...


class ManualTimer:
    """A pending callback on a ManualScheduler."""

    __slots__ = ("when", "callback", "args", "_cancelled")

    def __init__(self, when: float, callback: Callable[..., Any], args: tuple):
        self.when = when
        self.callback = callback
        self.args = args
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler:
    """
    Deterministic scheduler driven by a virtual clock.

    Time only moves when advance() or advance_to() is called. Due callbacks
    run in (time, registration) order, and the clock reads the callback's
    due time while it runs.
    """

    def __init__(self, start: float = 0.0):
        self._now = start
        self._queue: list[tuple[float, int, ManualTimer]] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> ManualTimer:
        timer = ManualTimer(self._now + max(0.0, delay), callback, args)
        heapq.heappush(self._queue, (timer.when, next(self._seq), timer))
        return timer

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing due callbacks. Returns how many ran."""
        if seconds < 0:
            raise ValueError("Cannot move the clock backwards")
        return self.advance_to(self._now + seconds)

    def advance_to(self, target: float) -> int:
        """Move the clock to an absolute time, firing due callbacks."""
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            when, _, timer = heapq.heappop(self._queue)
            if timer.cancelled():
                continue
            self._now = max(self._now, when)
            timer.callback(*timer.args)
            fired += 1
        self._now = max(self._now, target)
        return fired

    @property
    def pending(self) -> int:
        """Number of live (not cancelled) callbacks."""
        return sum(1 for _, _, timer in self._queue if not timer.cancelled())

    def next_due(self) -> float | None:
        live = [when for when, _, timer in self._queue if not timer.cancelled()]
        return min(live) if live else None


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now(self) -> float:
        return self.loop.time()

    def call_later(
        self, delay: float, callback: Callable[..., Any], *args: Any
    ) -> asyncio.TimerHandle:
        logger.debug(f"Scheduling {getattr(callback, '__name__', callback)} in {delay:.2f}s")
        return self.loop.call_later(delay, callback, *args)


class SerializedScheduler:
    """
    Wraps a scheduler so every callback runs while holding a lock.

    Timer callbacks then share the single state-update path with learner
    events, even when the underlying scheduler fires from another thread.
    """

    def __init__(self, inner: Scheduler, lock: Any):
        self._inner = inner
        self._lock = lock

    def now(self) -> float:
        return self._inner.now()

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        def _locked(*cb_args: Any) -> None:
            with self._lock:
                callback(*cb_args)

        _locked.__name__ = getattr(callback, "__name__", "callback")
        return self._inner.call_later(delay, _locked, *args)
