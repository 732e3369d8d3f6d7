"""Single-flight throttle for upstream calls.

N2YO counts transactions per API key, so every endpoint shares one queue:
one call in flight at a time, consecutive calls started at least
``min_interval`` seconds apart, and one retry after a rate-limit rejection.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, TypeVar

from sattrack.core.errors import UpstreamRateLimited

logger = logging.getLogger(__name__)

T = TypeVar("T")

MIN_INTERVAL_SECONDS = 3.0
RETRY_DELAY_SECONDS = 2.0


class RequestThrottle:
    def __init__(
        self,
        min_interval: float = MIN_INTERVAL_SECONDS,
        retry_delay: float = RETRY_DELAY_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.min_interval = min_interval
        self.retry_delay = retry_delay
        self._clock = clock
        self._sleep = sleep
        # asyncio.Lock wakes waiters in acquisition order, which gives FIFO.
        self._lock = asyncio.Lock()
        self._last_start: Optional[float] = None

    async def schedule(self, task: Callable[[], Awaitable[T]]) -> T:
        """Run ``task`` once it reaches the head of the queue.

        ``task`` is called again for the retry, so it must build a fresh
        awaitable on each call.
        """
        async with self._lock:
            try:
                return await self._attempt(task)
            except UpstreamRateLimited:
                logger.warning("Upstream rate limit hit, retrying once in %.1fs", self.retry_delay)
                await self._sleep(self.retry_delay)
                return await self._attempt(task)

    async def _attempt(self, task: Callable[[], Awaitable[T]]) -> T:
        if self._last_start is not None:
            wait = self.min_interval - (self._clock() - self._last_start)
            if wait > 0:
                logger.debug("Throttling upstream call for %.2fs", wait)
                await self._sleep(wait)
        self._last_start = self._clock()
        return await task()
