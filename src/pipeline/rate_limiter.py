"""Sliding-window rate limiter for generative model calls.

At most ``max_calls`` acquisitions inside any rolling ``window_seconds``.
One instance is shared by every caller in the process; callers that find the
window full are suspended until the oldest call ages out.
"""

import asyncio
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class SlidingWindowRateLimiter:
    """Usage::

        limiter = SlidingWindowRateLimiter(max_calls=5, window_seconds=60)
        await limiter.acquire()
        response = await provider.generate(prompt)
    """

    def __init__(
        self,
        max_calls: int = 5,
        window_seconds: float = 60.0,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_calls < 1:
            msg = f"max_calls must be at least 1, got {max_calls}"
            raise ValueError(msg)
        self._max_calls = max_calls
        self._window = window_seconds
        self._clock = clock
        self._sleep = sleep
        self._calls: deque[float] = deque()
        self._lock = asyncio.Lock()

    @property
    def in_window(self) -> int:
        """Calls recorded within the current window."""
        self._evict(self._clock())
        return len(self._calls)

    async def acquire(self) -> None:
        """Wait until a slot is free, then record a call."""
        async with self._lock:
            while True:
                now = self._clock()
                self._evict(now)
                if len(self._calls) < self._max_calls:
                    self._calls.append(now)
                    return
                wait = self._calls[0] + self._window - now
                logger.info("Rate limit reached, waiting %.1fs", wait)
                await self._sleep(max(wait, 0.0))

    def _evict(self, now: float) -> None:
        while self._calls and now - self._calls[0] >= self._window:
            self._calls.popleft()
