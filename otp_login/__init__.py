"""
OTP Login Core
==============
One-time code second factor for password logins.
"""

__version__ = "0.1.0"

# Config
from otp_login.config import OTPLoginConfig

# Errors
from otp_login.errors import (
    OTPLoginError,
    AuthenticationFailure,
    Throttled,
    InvalidCredentials,
    InvalidCode,
    ExpiredCode,
    PolicyRejected,
    InfrastructureError,
    CodeSpaceExhausted,
    InvalidTransition,
)

# Logging
from otp_login.logging_setup import setup_logging

# Database
from otp_login.database import (
    Base,
    create_async_engine,
    create_session_factory,
    create_tables,
    dispose_engine,
)

# Codes
from otp_login.codes import (
    OneTimeCode,
    CodeGenerator,
    CodeStore,
    InMemoryCodeStore,
    SQLAlchemyCodeStore,
    generate_numeric_code,
    normalize_identity,
)

# Rate Limiting
from otp_login.rate_limit import (
    RateLimiter,
    InMemoryRateLimiter,
    RedisRateLimiter,
    RateLimitInfo,
)

# Credentials
from otp_login.credentials import (
    CredentialStore,
    InMemoryCredentialStore,
    CallbackCredentialStore,
    hash_password,
    verify_password,
)

# Login Flow
from otp_login.auth import (
    OtpAuthenticator,
    LoginFlow,
    LoginState,
    CodeIssued,
    SessionDecision,
    DeliveryChannel,
    SessionEstablisher,
)

__all__ = [
    # Config
    "OTPLoginConfig",
    # Errors
    "OTPLoginError",
    "AuthenticationFailure",
    "Throttled",
    "InvalidCredentials",
    "InvalidCode",
    "ExpiredCode",
    "PolicyRejected",
    "InfrastructureError",
    "CodeSpaceExhausted",
    "InvalidTransition",
    # Logging
    "setup_logging",
    # Database
    "Base",
    "create_async_engine",
    "create_session_factory",
    "create_tables",
    "dispose_engine",
    # Codes
    "OneTimeCode",
    "CodeGenerator",
    "CodeStore",
    "InMemoryCodeStore",
    "SQLAlchemyCodeStore",
    "generate_numeric_code",
    "normalize_identity",
    # Rate Limiting
    "RateLimiter",
    "InMemoryRateLimiter",
    "RedisRateLimiter",
    "RateLimitInfo",
    # Credentials
    "CredentialStore",
    "InMemoryCredentialStore",
    "CallbackCredentialStore",
    "hash_password",
    "verify_password",
    # Login Flow
    "OtpAuthenticator",
    "LoginFlow",
    "LoginState",
    "CodeIssued",
    "SessionDecision",
    "DeliveryChannel",
    "SessionEstablisher",
]
