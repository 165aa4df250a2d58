"""
Code Generator
==============
Fixed-length numeric codes, unique among currently active codes.
"""

import secrets
from typing import Callable, Optional

import structlog

from otp_login.errors import CodeSpaceExhausted
from .store import CodeStore

logger = structlog.get_logger(__name__)


def generate_numeric_code(
    length: int = 6,
    randbelow: Callable[[int], int] = secrets.randbelow,
) -> str:
    """
    Generate a uniformly distributed, zero-padded numeric code.

    Args:
        length: Number of digits
        randbelow: Source of randomness, ``secrets.randbelow`` by default

    Returns:
        Code string of exactly ``length`` digits
    """
    if length < 1:
        raise ValueError("Code length must be at least 1")
    return str(randbelow(10 ** length)).zfill(length)


class CodeGenerator:
    """
    Draws codes and resamples on collision with an active code.

    The resampling loop is bounded; if the active code space is saturated
    ``CodeSpaceExhausted`` is raised instead of spinning forever.
    """

    def __init__(
        self,
        store: CodeStore,
        length: int = 6,
        max_attempts: int = 100,
        randbelow: Callable[[int], int] = secrets.randbelow,
    ):
        self.store = store
        self.length = length
        self.max_attempts = max_attempts
        self._randbelow = randbelow

    async def generate(self, length: Optional[int] = None) -> str:
        """
        Return a code not held by any active record.

        Does not persist anything; the caller issues the code.
        """
        if length is None:
            length = self.length

        for attempt in range(1, self.max_attempts + 1):
            code = generate_numeric_code(length, self._randbelow)
            if not await self.store.is_code_active(code):
                return code
            logger.debug("Generated code collides with an active code", attempt=attempt)

        logger.error(
            "Code space exhausted",
            length=length,
            attempts=self.max_attempts,
        )
        raise CodeSpaceExhausted(length, self.max_attempts)
