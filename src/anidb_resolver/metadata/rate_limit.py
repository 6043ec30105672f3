"""Shared request pacing for the AniDB HTTP API.

AniDB bans clients that request more often than once every two seconds and
expects roughly one request every four seconds on average. A single
``RateLimiter`` must therefore be shared by every series resolution in the
process; it is created once (see ``SeriesResolver.from_settings``) and passed
to whoever talks to AniDB.
"""

import random
import time
from collections import deque
from collections.abc import Awaitable, Callable

import anyio
import structlog

from anidb_resolver.core.constants import (
    AVG_REQUEST_INTERVAL,
    MIN_REQUEST_INTERVAL,
    RATE_LIMIT_WINDOW,
)

__all__ = ["RateLimiter"]

logger = structlog.get_logger(__name__)


class RateLimiter:
    """Spaces out requests with jitter and a sliding burst window.

    Every grant is at least ``min_interval`` after the previous one, with a
    random extra delay up to ``avg_interval``. Within any ``max_window`` no more
    than ``max_window / avg_interval`` requests are granted, so a long burst
    settles to the average rate.
    """

    def __init__(
        self,
        min_interval: float = MIN_REQUEST_INTERVAL,
        avg_interval: float = AVG_REQUEST_INTERVAL,
        max_window: float = RATE_LIMIT_WINDOW,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = anyio.sleep,
        jitter: Callable[[float, float], float] = random.uniform,
    ) -> None:
        """Initialize the limiter.

        Args:
            min_interval: Minimum seconds between two grants
            avg_interval: Target average seconds between grants
            max_window: Sliding window (seconds) used to bound bursts
            clock: Monotonic time source
            sleep: Async sleep used while waiting
            jitter: Draws the spacing for the next grant in [min, avg]

        Raises:
            ValueError: If the intervals are negative or out of order
        """
        if min_interval < 0 or avg_interval < min_interval:
            raise ValueError("require 0 <= min_interval <= avg_interval")
        if max_window < avg_interval:
            raise ValueError("max_window must be at least avg_interval")

        self.min_interval = min_interval
        self.avg_interval = avg_interval
        self.max_window = max_window
        self._clock = clock
        self._sleep = sleep
        self._jitter = jitter

        self._lock = anyio.Lock()
        self._last_granted: float | None = None
        self._grants: deque[float] = deque()
        self._window_capacity = (
            max(1, int(max_window / avg_interval)) if avg_interval > 0 else 0
        )

    @property
    def last_granted(self) -> float | None:
        """Clock value of the most recent grant, if any."""
        return self._last_granted

    def _spacing(self) -> float:
        spacing = self._jitter(self.min_interval, self.avg_interval)
        return min(max(spacing, self.min_interval), self.avg_interval)

    def _earliest_allowed(self, now: float) -> float:
        while self._grants and self._grants[0] <= now - self.max_window:
            self._grants.popleft()

        earliest = now
        if self._last_granted is not None:
            earliest = max(earliest, self._last_granted + self._spacing())
        if self._window_capacity and len(self._grants) >= self._window_capacity:
            earliest = max(earliest, self._grants[0] + self.max_window)
        return earliest

    async def wait(self) -> None:
        """Block until the caller may send one request to AniDB.

        Cancellation while waiting aborts without recording a grant.
        """
        async with self._lock:
            now = self._clock()
            earliest = self._earliest_allowed(now)
            delay = earliest - now
            if delay > 0:
                logger.debug("anidb.rate_limit.wait", delay=round(delay, 3))
                await self._sleep(delay)

            granted = max(self._clock(), earliest)
            self._last_granted = granted
            self._grants.append(granted)
