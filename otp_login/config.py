"""
OTP Login Configuration
=======================
Tunables for code generation, expiry and rate limiting.
"""

import os
from dataclasses import dataclass, field


def _env_int(name: str, default: int) -> int:
    return int(os.environ.get(name, str(default)))


def _env_bool(name: str, default: bool = False) -> bool:
    raw_value = os.environ.get(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "y", "on"}


@dataclass
class OTPLoginConfig:
    """Configuration for the one-time code login flow."""
    code_length: int = field(default_factory=lambda: _env_int("OTP_CODE_LENGTH", 6))
    code_ttl: int = field(default_factory=lambda: _env_int("OTP_CODE_TTL", 120))  # seconds
    max_attempts: int = field(
        default_factory=lambda: _env_int("OTP_RATE_LIMIT_MAX_ATTEMPTS", 5)
    )
    rate_limit_window: int = field(
        default_factory=lambda: _env_int("OTP_RATE_LIMIT_WINDOW", 60)
    )
    max_generation_attempts: int = field(
        default_factory=lambda: _env_int("OTP_MAX_GENERATION_ATTEMPTS", 100)
    )
    strict_delivery: bool = field(
        default_factory=lambda: _env_bool("OTP_STRICT_DELIVERY")
    )

    def __post_init__(self):
        if self.code_length < 1:
            raise ValueError("code_length must be at least 1")
        if self.code_ttl <= 0:
            raise ValueError("code_ttl must be positive")
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.rate_limit_window <= 0:
            raise ValueError("rate_limit_window must be positive")
        if self.max_generation_attempts < 1:
            raise ValueError("max_generation_attempts must be at least 1")
