"""
OTP Login Errors
================
Failure taxonomy for the login flow.

User-facing failures carry a friendly message and never reveal whether an
identity is registered. Infrastructure failures keep their technical cause
chained for the logs while the host shows a generic message.
"""

import math


class OTPLoginError(Exception):
    """Base class for all OTP login errors."""
    pass


class AuthenticationFailure(OTPLoginError):
    """A recoverable, user-facing authentication outcome."""

    code = "AUTH_FAILED"
    user_message = "Authentication failed."

    def __init__(self, message: str = None):
        super().__init__(message or self.user_message)


class Throttled(AuthenticationFailure):
    """Too many attempts within the current rate-limit window."""

    code = "THROTTLED"

    def __init__(self, seconds_remaining: int):
        self.seconds_remaining = seconds_remaining
        self.minutes_remaining = math.ceil(seconds_remaining / 60)
        super().__init__(self.user_message)

    @property
    def user_message(self) -> str:
        return (
            f"Too many attempts. Please try again in {self.seconds_remaining} "
            f"seconds ({self.minutes_remaining} min)."
        )


class InvalidCredentials(AuthenticationFailure):
    """Credential check failed (unknown identity or wrong secret)."""

    code = "INVALID_CREDENTIALS"
    user_message = "These credentials do not match our records."


class InvalidCode(AuthenticationFailure):
    code = "INVALID_CODE"
    user_message = "The code you entered is invalid."


class ExpiredCode(AuthenticationFailure):
    code = "EXPIRED_CODE"
    user_message = "The code you entered has expired. Please request a new one."


class PolicyRejected(AuthenticationFailure):
    """The host refused to open a session for an authenticated identity."""

    code = "POLICY_REJECTED"
    user_message = "These credentials do not match our records."


class InfrastructureError(OTPLoginError):
    """A storage or collaborator failure. Never retried by the core."""
    pass


class CodeSpaceExhausted(InfrastructureError):
    """No free code value was found within the generation attempt bound."""

    def __init__(self, length: int, attempts: int):
        self.length = length
        self.attempts = attempts
        super().__init__(
            f"No unused {length}-digit code found after {attempts} attempts"
        )


class CodeCollisionError(OTPLoginError):
    """The code value or identity slot was taken concurrently; retry with a fresh code."""
    pass


class InvalidTransition(OTPLoginError):
    """An operation was invoked from a state that does not allow it."""
    pass
