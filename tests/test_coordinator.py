"""Tests for the resettable poll timer."""

import asyncio
from datetime import timedelta

import pytest

from httpcurtain import PollTimer, TransportError


class _Refresher:
    def __init__(self, values=None, error=None):
        self.calls = 0
        self.values = list(values or [50])
        self.error = error
        self.received = []

    async def refresh(self) -> int:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.values[min(self.calls, len(self.values)) - 1]

    def on_value(self, value: int) -> None:
        self.received.append(value)


def _make_timer(refresher: _Refresher, seconds: float = 0.1) -> PollTimer:
    return PollTimer(timedelta(seconds=seconds), refresher.refresh, refresher.on_value)


class TestPollTimer:
    @pytest.mark.asyncio
    async def test_fires_and_pushes_value(self):
        refresher = _Refresher(values=[10, 20])
        timer = _make_timer(refresher, 0.05)
        timer.start()
        await asyncio.sleep(0.18)
        timer.stop()
        assert refresher.calls >= 2
        assert refresher.received[:2] == [10, 20]

    @pytest.mark.asyncio
    async def test_not_running_until_started(self):
        refresher = _Refresher()
        timer = _make_timer(refresher, 0.05)
        assert not timer.running
        assert timer.next_fire is None
        await asyncio.sleep(0.1)
        assert refresher.calls == 0

    @pytest.mark.asyncio
    async def test_reset_pushes_next_fire_a_full_interval_out(self):
        loop = asyncio.get_running_loop()
        timer = _make_timer(_Refresher(), 0.5)
        timer.start()
        first = timer.next_fire
        await asyncio.sleep(0.1)
        timer.reset()
        assert timer.next_fire > first
        assert timer.next_fire >= loop.time() + 0.5 - 0.01
        timer.stop()

    @pytest.mark.asyncio
    async def test_reset_before_interval_elapses_prevents_fire(self):
        refresher = _Refresher()
        timer = _make_timer(refresher, 0.3)
        timer.start()
        await asyncio.sleep(0.2)
        timer.reset()
        await asyncio.sleep(0.2)
        assert refresher.calls == 0
        await asyncio.sleep(0.2)
        assert refresher.calls == 1
        timer.stop()

    @pytest.mark.asyncio
    async def test_failed_poll_keeps_schedule_running(self):
        refresher = _Refresher(error=TransportError("unreachable"))
        timer = _make_timer(refresher, 0.05)
        timer.start()
        await asyncio.sleep(0.08)
        assert refresher.calls == 1
        assert refresher.received == []
        assert timer.next_fire is not None
        timer.stop()

    @pytest.mark.asyncio
    async def test_stop_cancels_pending_fire(self):
        refresher = _Refresher()
        timer = _make_timer(refresher, 0.05)
        timer.start()
        timer.stop()
        await asyncio.sleep(0.12)
        assert refresher.calls == 0
        assert timer.next_fire is None

    @pytest.mark.asyncio
    async def test_reset_after_stop_does_not_reschedule(self):
        timer = _make_timer(_Refresher(), 0.05)
        timer.start()
        timer.stop()
        timer.reset()
        assert timer.next_fire is None
        assert not timer.running

    def test_scheduling_without_start_raises(self):
        timer = _make_timer(_Refresher(), 0.05)
        with pytest.raises(RuntimeError):
            timer._schedule()
