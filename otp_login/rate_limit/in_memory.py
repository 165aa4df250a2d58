"""
In-Memory Rate Limiter
======================
Fixed window rate limiter for development, tests and single-process hosts.
"""

import asyncio
import math
import time
from typing import Callable, Dict, Optional

from .base import RateLimiter
from .models import RateLimitInfo


class InMemoryRateLimiter(RateLimiter):
    """
    Process-local fixed window counter.

    Use RedisRateLimiter when several workers share limits.
    """

    def __init__(
        self,
        rate: int = 5,
        window: int = 60,
        clock: Callable[[], float] = time.time,
    ):
        super().__init__(rate, window)
        self._clock = clock
        self._buckets: Dict[str, dict] = {}
        self._lock = asyncio.Lock()

    async def attempt(self, key: str, max_attempts: Optional[int] = None) -> RateLimitInfo:
        limit = max_attempts or self.rate

        async with self._lock:
            now = self._clock()
            bucket = self._buckets.get(key)

            # Start a new window on first use or once the old one elapsed
            if bucket is None or now >= bucket["reset_at"]:
                self._prune(now)
                bucket = {"reset_at": now + self.window, "count": 0}
                self._buckets[key] = bucket

            reset_at = bucket["reset_at"]

            if bucket["count"] >= limit:
                return RateLimitInfo(
                    key=key,
                    allowed=False,
                    remaining=0,
                    limit=limit,
                    reset_at=math.ceil(reset_at),
                    retry_after=max(1, math.ceil(reset_at - now)),
                )

            bucket["count"] += 1
            return RateLimitInfo(
                key=key,
                allowed=True,
                remaining=limit - bucket["count"],
                limit=limit,
                reset_at=math.ceil(reset_at),
            )

    def _prune(self, now: float) -> None:
        """Drop windows that have elapsed. Caller holds the lock."""
        elapsed = [key for key, bucket in self._buckets.items() if now >= bucket["reset_at"]]
        for key in elapsed:
            del self._buckets[key]
