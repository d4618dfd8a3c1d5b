"""
Unit tests for the timer schedulers.
"""

import asyncio
import threading

import pytest

from rescue_drill.training.scheduler import AsyncioScheduler, ManualScheduler, SerializedScheduler


class TestManualScheduler:
    """Tests for the virtual clock."""

    def test_callbacks_fire_in_due_order(self, scheduler):
        fired = []
        scheduler.call_later(2.0, fired.append, "b")
        scheduler.call_later(1.0, fired.append, "a")
        scheduler.call_later(2.0, fired.append, "c")

        assert scheduler.advance(5) == 3
        assert fired == ["a", "b", "c"]

    def test_clock_reads_due_time_inside_callback(self, scheduler):
        seen = []
        scheduler.call_later(1.5, lambda: seen.append(scheduler.now()))
        scheduler.advance(10)

        assert seen == [1.5]
        assert scheduler.now() == 10

    def test_callbacks_scheduled_while_advancing_can_fire(self, scheduler):
        fired = []

        def first():
            fired.append("first")
            scheduler.call_later(1.0, fired.append, "second")

        scheduler.call_later(1.0, first)
        scheduler.advance(3)

        assert fired == ["first", "second"]

    def test_cancelled_timer_does_not_fire(self, scheduler):
        fired = []
        timer = scheduler.call_later(1.0, fired.append, "x")
        timer.cancel()

        assert scheduler.advance(2) == 0
        assert fired == []
        assert scheduler.pending == 0

    def test_next_due(self, scheduler):
        assert scheduler.next_due() is None
        scheduler.call_later(3.0, lambda: None)
        scheduler.call_later(1.0, lambda: None).cancel()

        assert scheduler.next_due() == 3.0

    def test_negative_advance_rejected(self, scheduler):
        with pytest.raises(ValueError):
            scheduler.advance(-1)

    def test_custom_start(self):
        assert ManualScheduler(start=100.0).now() == 100.0


class TestSerializedScheduler:
    """Tests for lock-wrapped callbacks."""

    def test_callback_runs_under_lock(self, scheduler):
        lock = threading.RLock()
        held = []
        wrapped = SerializedScheduler(scheduler, lock)

        def probe():
            # RLock has no public "is held" check; a non-blocking acquire from
            # another thread fails while we hold it.
            result = []
            t = threading.Thread(target=lambda: result.append(lock.acquire(blocking=False)))
            t.start()
            t.join()
            held.append(not result[0])

        wrapped.call_later(1.0, probe)
        scheduler.advance(1)

        assert held == [True]

    def test_delegates_clock(self, scheduler):
        wrapped = SerializedScheduler(scheduler, threading.RLock())
        scheduler.advance(4)
        assert wrapped.now() == 4


class TestAsyncioScheduler:
    """Tests for the event-loop scheduler."""

    @pytest.mark.asyncio
    async def test_call_later_fires_on_loop(self):
        scheduler = AsyncioScheduler()
        done = asyncio.Event()
        scheduler.call_later(0.01, done.set)

        await asyncio.wait_for(done.wait(), timeout=1.0)
        assert done.is_set()

    @pytest.mark.asyncio
    async def test_cancel(self):
        scheduler = AsyncioScheduler()
        fired = []
        handle = scheduler.call_later(0.01, fired.append, 1)
        handle.cancel()

        await asyncio.sleep(0.05)
        assert fired == []

    @pytest.mark.asyncio
    async def test_now_is_loop_time(self):
        scheduler = AsyncioScheduler()
        assert scheduler.now() == pytest.approx(asyncio.get_running_loop().time(), abs=0.1)
