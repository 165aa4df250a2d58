"""
One-Time Codes
==============
Code records, generation and storage.
"""

from .models import OneTimeCode, normalize_identity, hash_identity, utcnow
from .generator import generate_numeric_code, CodeGenerator
from .store import CodeStore, InMemoryCodeStore
from .sql_store import SQLAlchemyCodeStore, OTPCodeRecord

__all__ = [
    # Models
    "OneTimeCode",
    "normalize_identity",
    "hash_identity",
    "utcnow",
    # Generator
    "generate_numeric_code",
    "CodeGenerator",
    # Stores
    "CodeStore",
    "InMemoryCodeStore",
    "SQLAlchemyCodeStore",
    "OTPCodeRecord",
]
