"""
Redis Rate Limiter
==================
Redis-backed fixed window rate limiter using a Lua script for atomic operations.
"""

import time
from typing import Optional

import structlog
from redis.exceptions import RedisError

from otp_login.errors import InfrastructureError
from .base import RateLimiter
from .models import RateLimitInfo

logger = structlog.get_logger(__name__)

# Lua script for an atomic fixed window counter in Redis.
# The key expires with the window, so blocked attempts never extend it.
FIXED_WINDOW_SCRIPT = """
local key = KEYS[1]
local limit = tonumber(ARGV[1])
local window = tonumber(ARGV[2])

local count = tonumber(redis.call('GET', key) or '0')

if count >= limit then
    local ttl = redis.call('TTL', key)
    if ttl < 0 then
        ttl = window
    end
    return {0, 0, ttl}
end

count = redis.call('INCR', key)
if count == 1 then
    redis.call('EXPIRE', key, window)
end

local ttl = redis.call('TTL', key)
if ttl < 0 then
    ttl = window
end

return {1, limit - count, ttl}
"""


class RedisRateLimiter(RateLimiter):
    """
    Redis-backed fixed window rate limiter.

    Uses a Lua script so the check and the increment happen atomically.
    """

    def __init__(
        self,
        redis_client,
        rate: int = 5,
        window: int = 60,
        prefix: str = "otp_login:ratelimit",
    ):
        """
        Args:
            redis_client: Async Redis client (``redis.asyncio.Redis``)
            rate: Attempts per window
            window: Window size in seconds
            prefix: Namespace for rate limit keys
        """
        super().__init__(rate, window)
        self.redis = redis_client
        self.prefix = prefix
        self._script_sha: Optional[str] = None

    async def _ensure_script(self) -> str:
        """Load Lua script into Redis if needed."""
        if self._script_sha is None:
            self._script_sha = await self.redis.script_load(FIXED_WINDOW_SCRIPT)
        return self._script_sha

    async def attempt(self, key: str, max_attempts: Optional[int] = None) -> RateLimitInfo:
        limit = max_attempts or self.rate

        try:
            script_sha = await self._ensure_script()
            result = await self.redis.evalsha(
                script_sha,
                1,
                f"{self.prefix}:{key}",
                limit,
                self.window,
            )
        except RedisError as e:
            logger.error("Rate limit check failed", error=str(e))
            raise InfrastructureError("Rate limiter unavailable") from e

        allowed, remaining, ttl = (int(value) for value in result)
        reset_at = int(time.time()) + ttl

        if not allowed:
            return RateLimitInfo(
                key=key,
                allowed=False,
                remaining=0,
                limit=limit,
                reset_at=reset_at,
                retry_after=max(1, ttl),
            )

        return RateLimitInfo(
            key=key,
            allowed=True,
            remaining=remaining,
            limit=limit,
            reset_at=reset_at,
        )
