"""
Rate Limiting
=============
Attempt ceilings for credential checks, code issuance and code submission.
"""

from .models import RateLimitDecision, RateLimitInfo
from .base import RateLimiter
from .in_memory import InMemoryRateLimiter
from .redis_limiter import RedisRateLimiter, FIXED_WINDOW_SCRIPT

__all__ = [
    # Models
    "RateLimitDecision",
    "RateLimitInfo",
    # Limiters
    "RateLimiter",
    "InMemoryRateLimiter",
    "RedisRateLimiter",
    # Scripts
    "FIXED_WINDOW_SCRIPT",
]
