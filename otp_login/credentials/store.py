"""
Credential Stores
=================
Host-side password check used before a code is issued.
"""

from abc import ABC, abstractmethod
from functools import lru_cache
from typing import Awaitable, Callable, Dict, Optional

from otp_login.codes.models import normalize_identity
from .passwords import hash_password_sync, verify_password


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    # Verified against for unknown identities so both paths cost one hash
    return hash_password_sync("otp-login-unknown-identity")


class CredentialStore(ABC):
    """Looks up password hashes and verifies secrets against them."""

    @abstractmethod
    async def exists(self, identity: str) -> Optional[str]:
        """Return the stored password hash for ``identity``, or None."""

    async def verify(self, identity: str, secret: str) -> bool:
        """
        Check ``secret`` for ``identity``.

        Unknown identities and wrong secrets are indistinguishable,
        including in timing.
        """
        password_hash = await self.exists(identity)
        if password_hash is None:
            await verify_password(secret, _dummy_hash())
            return False
        return await verify_password(secret, password_hash)


class InMemoryCredentialStore(CredentialStore):
    """
    Dict-backed credential store for development and tests.

    Identities are keyed in normalized form, matching what the
    authenticator looks up.
    """

    def __init__(self, hashes: Optional[Dict[str, str]] = None):
        self._hashes: Dict[str, str] = {
            normalize_identity(identity): password_hash
            for identity, password_hash in (hashes or {}).items()
        }

    def add(self, identity: str, password: str) -> None:
        self._hashes[normalize_identity(identity)] = hash_password_sync(password)

    async def exists(self, identity: str) -> Optional[str]:
        return self._hashes.get(normalize_identity(identity))


class CallbackCredentialStore(CredentialStore):
    """
    Adapts a host lookup coroutine, e.g. a user-table query.

    The lookup receives the normalized identity: stripped, and lowercased
    for emails. Hosts storing mixed-case emails must match case-insensitively.

    Example:
        async def load_hash(email):
            user = await users.get_by_email(email)
            return user.password if user else None

        store = CallbackCredentialStore(load_hash)
    """

    def __init__(self, lookup: Callable[[str], Awaitable[Optional[str]]]):
        self._lookup = lookup

    async def exists(self, identity: str) -> Optional[str]:
        return await self._lookup(identity)
