"""Periodic page reload task.

A ReloadScheduler ticks at a fixed interval and calls back into the
owning session's reload primitive on every tick. It starts running as
soon as it is constructed and stops for good once cancelled: a new
schedule always means a new scheduler.
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class ReloadScheduler:
    """One cancellable periodic-reload loop.

    Ticks land on ``start + n * interval`` of the event loop's monotonic
    clock, so a slow reload does not shift the cadence. Boundaries missed
    while a reload was in flight are skipped rather than fired in a burst.

    Cancellation is cooperative: ``cancel()`` sets a one-shot event that
    the loop checks right before every tick. A reload already in flight
    is allowed to finish, but no tick starts after ``cancel()`` returns.

    Must be constructed from within a running event loop.
    """

    def __init__(self, reload: Callable[[], Awaitable[object]], interval: float) -> None:
        if not interval > 0 or not math.isfinite(interval):
            raise ValueError(f"Reload interval must be a positive number, got {interval!r}")
        self._reload = reload
        self._interval = float(interval)
        self._cancelled = asyncio.Event()
        self._ticks = 0
        loop = asyncio.get_running_loop()
        self._started_at = loop.time()
        self._task = loop.create_task(self._run(), name=f"reload-every-{interval}s")
        logger.info("Reload schedule started (every %ss)", interval)

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def tick_count(self) -> int:
        """Number of reloads this scheduler has started."""
        return self._ticks

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def is_active(self) -> bool:
        return not self._cancelled.is_set() and not self._task.done()

    def cancel(self) -> bool:
        """Request the loop to stop. Returns False if it was already cancelled."""
        if self._cancelled.is_set():
            return False
        self._cancelled.set()
        logger.info("Reload schedule cancelled (every %ss, %d ticks)", self._interval, self._ticks)
        return True

    async def wait_closed(self) -> None:
        """Wait for the background task to exit after cancellation."""
        await self._task

    def add_done_callback(self, callback: Callable[[ReloadScheduler], object]) -> None:
        self._task.add_done_callback(lambda _task: callback(self))

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        next_tick = self._started_at + self._interval
        while not self._cancelled.is_set():
            delay = next_tick - loop.time()
            if delay > 0:
                try:
                    await asyncio.wait_for(self._cancelled.wait(), timeout=delay)
                except asyncio.TimeoutError:
                    pass
            if self._cancelled.is_set():
                break

            self._ticks += 1
            logger.debug("Reload tick %d", self._ticks)
            try:
                await self._reload()
            except Exception as e:
                logger.warning("Reload tick %d failed: %s", self._ticks, e)

            next_tick += self._interval
            now = loop.time()
            if next_tick <= now:
                missed = math.floor((now - next_tick) / self._interval) + 1
                next_tick += missed * self._interval
                logger.debug("Skipped %d reload tick(s) behind schedule", missed)

    def __repr__(self) -> str:
        state = "active" if self.is_active else "cancelled" if self.is_cancelled else "stopped"
        return f"<ReloadScheduler every {self._interval}s {state} ticks={self._ticks}>"
