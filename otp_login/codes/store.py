"""
Code Store
==========
Keyed storage for outstanding one-time codes.
"""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

import structlog

from otp_login.errors import CodeCollisionError
from .models import OneTimeCode, hash_identity, utcnow

logger = structlog.get_logger(__name__)


class CodeStore(ABC):
    """
    Storage contract for one-time codes.

    Implementations must make ``issue`` an atomic upsert keyed by identity
    and ``consume`` an atomic compare-and-delete. Expired records are only
    deleted lazily (or by ``purge_expired``).
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self._clock = clock or utcnow

    def now(self) -> datetime:
        return self._clock()

    @abstractmethod
    async def issue(self, identity: str, code: str, ttl: int) -> OneTimeCode:
        """
        Replace the active code for ``identity``.

        Raises:
            CodeCollisionError: ``code`` is held by another active record
        """

    @abstractmethod
    async def lookup(self, code: str) -> Optional[OneTimeCode]:
        """Exact match on the code value; ``None`` when not found."""

    @abstractmethod
    async def consume(self, record: OneTimeCode) -> bool:
        """
        Delete ``record`` if it is still the stored one.

        Returns:
            True if this call deleted it, False if it was already gone
        """

    @abstractmethod
    async def is_code_active(self, code: str) -> bool:
        """Whether an unexpired record holds ``code``."""

    @abstractmethod
    async def purge_expired(self) -> int:
        """Delete expired records, returning how many were removed."""

    def is_valid(self, record: OneTimeCode) -> bool:
        return record.is_valid_at(self.now())


class InMemoryCodeStore(CodeStore):
    """
    Process-local code store.

    For development, tests and single-process hosts.
    Use SQLAlchemyCodeStore when several workers share codes.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        super().__init__(clock)
        self._by_identity: Dict[str, OneTimeCode] = {}
        self._by_code: Dict[str, OneTimeCode] = {}
        self._lock = asyncio.Lock()

    async def issue(self, identity: str, code: str, ttl: int) -> OneTimeCode:
        async with self._lock:
            now = self.now()

            holder = self._by_code.get(code)
            if holder is not None:
                if holder.identity != identity and holder.is_valid_at(now):
                    raise CodeCollisionError()
                # Expired holder: drop it so the value can be reused
                self._remove(holder)

            previous = self._by_identity.get(identity)
            if previous is not None:
                self._remove(previous)

            record = OneTimeCode(
                identity=identity,
                code=code,
                issued_at=now,
                expires_at=now + timedelta(seconds=ttl),
            )
            self._by_identity[identity] = record
            self._by_code[code] = record

        logger.debug(
            "Code stored",
            identity_hash=hash_identity(identity),
            replaced=previous is not None,
        )
        return record

    async def lookup(self, code: str) -> Optional[OneTimeCode]:
        return self._by_code.get(code)

    async def consume(self, record: OneTimeCode) -> bool:
        async with self._lock:
            if self._by_code.get(record.code) != record:
                return False
            self._remove(record)
            return True

    async def is_code_active(self, code: str) -> bool:
        holder = self._by_code.get(code)
        return holder is not None and holder.is_valid_at(self.now())

    async def purge_expired(self) -> int:
        async with self._lock:
            now = self.now()
            expired = [r for r in self._by_code.values() if not r.is_valid_at(now)]
            for record in expired:
                self._remove(record)
        return len(expired)

    def _remove(self, record: OneTimeCode) -> None:
        if self._by_code.get(record.code) == record:
            del self._by_code[record.code]
        if self._by_identity.get(record.identity) == record:
            del self._by_identity[record.identity]
