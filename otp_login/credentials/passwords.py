"""
Password Verification
=====================
Argon2id hashing and verification, with bcrypt accepted for legacy hashes.

The async variants run in the default executor so the event loop is not
blocked for the duration of a hash.
"""

import asyncio

import bcrypt
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from .hasher import get_cached_hasher

BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


def hash_password_sync(password: str) -> str:
    """Synchronous version of hash_password (use async version when possible)."""
    if not password:
        raise ValueError("Password cannot be empty")
    return get_cached_hasher().hash(password)


def verify_password_sync(password: str, hash: str) -> bool:
    """
    Verify a password against an Argon2id or bcrypt hash.

    Unknown hash formats never verify.
    """
    if not password or not hash:
        return False

    if hash.startswith("$argon2"):
        try:
            return get_cached_hasher().verify(hash, password)
        except (VerifyMismatchError, VerificationError, InvalidHashError):
            return False
    elif hash.startswith(BCRYPT_PREFIXES):
        try:
            return bcrypt.checkpw(password.encode("utf-8"), hash.encode("utf-8"))
        except ValueError:
            return False

    return False


async def hash_password(password: str) -> str:
    """
    Hash a password using Argon2id.

    Returns:
        Argon2id hash string (includes algorithm, parameters, salt, and hash)
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, hash_password_sync, password)


async def verify_password(password: str, hash: str) -> bool:
    """Async version of verify_password_sync."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, verify_password_sync, password, hash)
