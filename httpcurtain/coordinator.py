from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import Awaitable, Callable

from .api import HttpCurtainError

_LOGGER = logging.getLogger(__name__)


class PollTimer:
    """Resettable periodic refresh of the current position.

    The next fire is always a full interval after the last completed read,
    whichever path performed it; call reset() after any read to push it back.
    """

    def __init__(
        self,
        interval: timedelta,
        refresh: Callable[[], Awaitable[int]],
        on_value: Callable[[int], None],
    ) -> None:
        self.interval = interval
        self._refresh = refresh
        self._on_value = on_value
        self._loop: asyncio.AbstractEventLoop | None = None
        self._handle: asyncio.TimerHandle | None = None
        self._task: asyncio.Task[None] | None = None
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def next_fire(self) -> float | None:
        """Loop time of the next scheduled fire, None when nothing is scheduled."""
        if self._handle is None:
            return None
        return self._handle.when()

    def start(self) -> None:
        if self._running:
            return
        self._loop = asyncio.get_running_loop()
        self._running = True
        self._schedule()

    def stop(self) -> None:
        self._running = False
        self._cancel()

    def reset(self) -> None:
        if not self._running:
            return
        self._cancel()
        self._schedule()

    def _cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _schedule(self) -> None:
        if self._loop is None:
            raise RuntimeError("PollTimer.start() must be called before scheduling")
        self._handle = self._loop.call_later(self.interval.total_seconds(), self._fire)

    def _fire(self) -> None:
        self._handle = None
        if not self._running:
            return
        self._task = self._loop.create_task(self._async_poll())

    async def _async_poll(self) -> None:
        try:
            value = await self._refresh()
        except HttpCurtainError as e:
            _LOGGER.debug("Poll failed: %s", e)
        else:
            self._on_value(value)
        finally:
            self.reset()
