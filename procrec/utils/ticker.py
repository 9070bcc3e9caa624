from __future__ import annotations

import asyncio
from typing import Optional

from procrec.observability import TICKERS_ACTIVE


class Ticker:
    """Fixed-period timer for sampling loops.

    Must be held with ``async with``; leaving the block releases the timer on
    every exit path. Iterating yields once per period. Ticks the consumer
    falls behind on are dropped rather than queued. When ``wake`` is given,
    setting that event ends the current wait early so the loop can observe
    it at the next tick boundary without sleeping out the period.
    """

    def __init__(self, period: float, wake: Optional[asyncio.Event] = None):
        if period <= 0:
            raise ValueError("ticker period must be positive")
        self.period = period
        self.wake = wake
        self.ticks = 0
        self._deadline: float | None = None
        self._held = False

    @property
    def held(self) -> bool:
        return self._held

    async def __aenter__(self) -> "Ticker":
        loop = asyncio.get_running_loop()
        self._deadline = loop.time() + self.period
        self._held = True
        TICKERS_ACTIVE.inc()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self._held = False
        self._deadline = None
        TICKERS_ACTIVE.dec()

    def __aiter__(self) -> "Ticker":
        return self

    async def __anext__(self) -> float:
        if not self._held or self._deadline is None:
            raise StopAsyncIteration
        loop = asyncio.get_running_loop()
        delay = self._deadline - loop.time()
        if delay > 0:
            await self._sleep(delay)
        now = loop.time()
        self._deadline += self.period
        if self._deadline <= now:
            missed = int((now - self._deadline) // self.period) + 1
            self._deadline += missed * self.period
        self.ticks += 1
        return now

    async def _sleep(self, delay: float) -> None:
        if self.wake is None:
            await asyncio.sleep(delay)
            return
        if self.wake.is_set():
            return
        try:
            await asyncio.wait_for(self.wake.wait(), delay)
        except asyncio.TimeoutError:
            pass
