"""
Credentials
===========
Password verification against the host's stored hashes.

Argon2id is used for new hashes; bcrypt hashes are still accepted so
hosts migrating from older schemes keep working.
"""

from .hasher import get_cached_hasher
from .passwords import (
    hash_password,
    verify_password,
    hash_password_sync,
    verify_password_sync,
)
from .store import CredentialStore, InMemoryCredentialStore, CallbackCredentialStore

__all__ = [
    # Hasher
    "get_cached_hasher",
    # Passwords
    "hash_password",
    "verify_password",
    "hash_password_sync",
    "verify_password_sync",
    # Stores
    "CredentialStore",
    "InMemoryCredentialStore",
    "CallbackCredentialStore",
]
