"""Minimum-spacing rate limiter shared by every call on one client."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable


class RateLimiter:
    """Enforces a minimum interval between consecutive request starts.

    One lock guards one "last request" timestamp, so concurrent callers
    queue behind each other no matter which endpoint they hit. ``clock``
    and ``sleep`` are injectable so tests can run against a fake timeline.
    """

    def __init__(
        self,
        min_interval: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if min_interval < 0:
            raise ValueError("min_interval must be >= 0")
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._last_request: float | None = None

    @property
    def last_request(self) -> float | None:
        return self._last_request

    async def wait(self) -> float:
        """Block until the spacing has elapsed, then claim the slot.

        Returns the recorded start time of this call.
        """
        async with self._lock:
            if self._last_request is not None:
                remaining = self._last_request + self.min_interval - self._clock()
                if remaining > 0:
                    await self._sleep(remaining)
            self._last_request = self._clock()
            return self._last_request
