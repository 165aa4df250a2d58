"""
Code Models
===========
The one-time code record and identity helpers.
"""

import hashlib
import re
from dataclasses import dataclass
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_identity(identity: str) -> str:
    """
    Normalize an identity before it keys codes and rate-limit windows.

    Email addresses are case-insensitive; anything else only loses
    surrounding whitespace.
    """
    cleaned = identity.strip()
    if "@" in cleaned:
        return cleaned.lower()
    return re.sub(r"\s+", "", cleaned)


def hash_identity(identity: str) -> str:
    """Truncated SHA-256 of an identity, safe to put in logs."""
    return hashlib.sha256(identity.encode()).hexdigest()[:16]


@dataclass(frozen=True)
class OneTimeCode:
    """An outstanding one-time code. At most one exists per identity."""
    identity: str
    code: str
    issued_at: datetime
    expires_at: datetime

    def is_valid_at(self, now: datetime) -> bool:
        return now < self.expires_at

    @property
    def ttl_seconds(self) -> int:
        return int((self.expires_at - self.issued_at).total_seconds())
