"""
Rate Limit Models
=================
Outcome of a single rate-limited attempt.
"""

from typing import Optional
from dataclasses import dataclass
from enum import Enum


class RateLimitDecision(str, Enum):
    ALLOWED = "allowed"
    THROTTLED = "throttled"


@dataclass(frozen=True)
class RateLimitInfo:
    """Decision for one attempt against an actor key."""
    key: str
    allowed: bool
    remaining: int
    limit: int
    reset_at: int  # Unix timestamp the window closes
    retry_after: Optional[int] = None  # Seconds until the key is usable, when throttled

    @property
    def decision(self) -> RateLimitDecision:
        return RateLimitDecision.ALLOWED if self.allowed else RateLimitDecision.THROTTLED
