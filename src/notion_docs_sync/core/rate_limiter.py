"""Pacing gate shared by every outbound Notion API call."""

import asyncio
import logging
import time
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class RateLimiter:
    """Allow at most ``max_calls`` calls per fixed window of ``interval`` seconds.

    When the budget of the current window is spent, ``wait()`` suspends the
    caller until the window rolls over.  Waiters are serialized through an
    ``asyncio.Lock`` so calls are released in the order they arrived; none
    are dropped.

    One instance is meant to be shared by a whole run, so pacing carries
    over from one document to the next.

    Args:
        max_calls: Budget per window (default 3, i.e. ~3 requests/second).
        interval: Window length in seconds.
        clock: Monotonic clock, injectable for tests.
        sleep: Async sleep function, injectable for tests.
    """

    def __init__(
        self,
        max_calls: int = 3,
        interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_calls < 1:
            raise ValueError("max_calls must be at least 1")
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.max_calls = max_calls
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._window_start: float | None = None
        self._count = 0
        self._lock: asyncio.Lock | None = None

    @property
    def calls_in_window(self) -> int:
        return self._count

    async def wait(self) -> None:
        """Block until one more call fits into the current window."""
        # Created lazily so the limiter can be built outside a running loop.
        if self._lock is None:
            self._lock = asyncio.Lock()

        async with self._lock:
            now = self._clock()
            if (
                self._window_start is None
                or now - self._window_start >= self.interval
            ):
                self._window_start = now
                self._count = 0
            elif self._count >= self.max_calls:
                delay = self.interval - (now - self._window_start)
                logger.debug(
                    "Rate limit reached (%d calls), sleeping %.3fs",
                    self._count,
                    delay,
                )
                await self._sleep(delay)
                self._window_start = self._clock()
                self._count = 0

            self._count += 1
