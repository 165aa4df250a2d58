"""
Shared fixtures for otp_login tests.
"""

import secrets
from datetime import datetime, timedelta, timezone

import pytest

from otp_login.auth import DeliveryChannel, SessionEstablisher, SessionDecision
from otp_login.credentials import CredentialStore


class FakeClock:
    """Manually advanced clock for TTL and window expiry."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def time(self) -> float:
        return self.current.timestamp()

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


def sequence_randbelow(*values):
    """randbelow replacement yielding ``values`` first, then real randomness."""
    remaining = list(values)

    def randbelow(upper: int) -> int:
        if remaining:
            return remaining.pop(0)
        return secrets.randbelow(upper)

    return randbelow


class PlainCredentialStore(CredentialStore):
    """Plaintext passwords so flow tests skip Argon2 cost."""

    def __init__(self, passwords):
        self._passwords = dict(passwords)

    async def exists(self, identity):
        return self._passwords.get(identity)

    async def verify(self, identity, secret):
        stored = await self.exists(identity)
        return stored is not None and stored == secret


class RecordingDelivery(DeliveryChannel):
    """Records sent codes and whether they were already stored when sent."""

    def __init__(self, store=None, fail: bool = False):
        self.store = store
        self.fail = fail
        self.sent = []
        self.stored_at_send = []

    async def notify(self, identity, code):
        if self.fail:
            raise ConnectionError("SMTP server unreachable")
        if self.store is not None:
            self.stored_at_send.append(await self.store.lookup(code) is not None)
        self.sent.append((identity, code))

    @property
    def last_code(self):
        return self.sent[-1][1]


class StubSessions(SessionEstablisher):
    def __init__(self, decision: SessionDecision = SessionDecision.ALLOWED):
        self.decision = decision
        self.established = []

    async def establish(self, identity, remember=False):
        self.established.append((identity, remember))
        return self.decision


@pytest.fixture
def clock():
    return FakeClock()
