"""Unit tests for the frame clocks."""

from __future__ import annotations

import asyncio

import pytest
from runmark.infrastructure.clock import AsyncioFrameClock, ManualFrameClock

pytestmark = pytest.mark.unit


class TestManualFrameClock:
    def test_tick_runs_frames_then_soon_callbacks(self):
        clock = ManualFrameClock()
        order: list[str] = []

        def frame():
            order.append("frame")
            clock.call_soon(lambda: order.append("soon"))

        clock.request_frame(frame)
        assert clock.tick() == 1
        assert order == ["frame", "soon"]

    def test_frames_requested_during_tick_wait_for_next_tick(self):
        clock = ManualFrameClock()
        seen: list[int] = []
        clock.request_frame(lambda: clock.request_frame(lambda: seen.append(2)))
        clock.tick()
        assert seen == []
        assert clock.pending_frames == 1
        clock.tick()
        assert seen == [2]

    def test_cancel_frame(self):
        clock = ManualFrameClock()
        handle = clock.request_frame(lambda: pytest.fail("cancelled frame ran"))
        clock.cancel_frame(handle)
        assert clock.tick() == 0

    def test_soon_callbacks_drain_even_if_frame_raises(self):
        clock = ManualFrameClock()
        drained: list[bool] = []

        def boom():
            clock.call_soon(lambda: drained.append(True))
            raise RuntimeError("boom")

        clock.request_frame(boom)
        with pytest.raises(RuntimeError):
            clock.tick()
        assert drained == [True]

    def test_run_until_idle_is_bounded(self):
        clock = ManualFrameClock()

        def again():
            clock.request_frame(again)

        clock.request_frame(again)
        assert clock.run_until_idle(max_ticks=5) == 5
        assert clock.frames_run == 5


class TestAsyncioFrameClock:
    def test_rejects_negative_interval(self):
        with pytest.raises(ValueError):
            AsyncioFrameClock(frame_interval=-1)

    def test_frame_and_soon_run_on_the_loop(self):
        async def scenario() -> list[str]:
            clock = AsyncioFrameClock(frame_interval=0)
            order: list[str] = []
            clock.request_frame(lambda: order.append("frame"))
            clock.call_soon(lambda: order.append("soon"))
            cancelled = clock.request_frame(lambda: order.append("cancelled"))
            clock.cancel_frame(cancelled)
            await asyncio.sleep(0.01)
            return order

        order = asyncio.run(scenario())
        assert sorted(order) == ["frame", "soon"]
