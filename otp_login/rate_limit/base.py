"""
Rate Limiter Interface
======================
"""

from abc import ABC, abstractmethod
from typing import Optional

from .models import RateLimitInfo


class RateLimiter(ABC):
    """
    Bounds attempts per actor key within a window.

    The window opens on the first attempt for a key and lasts ``window``
    seconds. Attempts made while blocked are not counted and do not
    extend the block.
    """

    def __init__(self, rate: int = 5, window: int = 60):
        """
        Args:
            rate: Attempts allowed per window
            window: Window size in seconds
        """
        self.rate = rate
        self.window = window

    @classmethod
    def from_config(cls, config, **kwargs) -> "RateLimiter":
        """Build a limiter using the ceiling and window of an OTPLoginConfig."""
        return cls(rate=config.max_attempts, window=config.rate_limit_window, **kwargs)

    @abstractmethod
    async def attempt(self, key: str, max_attempts: Optional[int] = None) -> RateLimitInfo:
        """
        Record an attempt for ``key``.

        Args:
            key: Actor key (e.g. ``credentials:user@example.com``)
            max_attempts: Ceiling for this call, defaults to ``rate``

        Returns:
            RateLimitInfo; ``retry_after`` is set when blocked
        """

    def get_key(self, action: str, identity: str, origin: Optional[str] = None) -> str:
        """Build the actor key for an action."""
        key = f"{action}:{identity}"
        if origin:
            key = f"{key}|{origin}"
        return key
