"""
Login Flow Models
=================
States and results of the two-step login.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class LoginState(str, Enum):
    """Steps of the login flow."""
    AWAITING_CREDENTIALS = "awaiting_credentials"
    AWAITING_CODE = "awaiting_code"
    AUTHENTICATED = "authenticated"


class SessionDecision(str, Enum):
    """Host decision after a code was verified."""
    ALLOWED = "allowed"
    REJECTED = "rejected"


@dataclass
class LoginFlow:
    """One user's pass through the login steps."""
    state: LoginState = LoginState.AWAITING_CREDENTIALS
    identity: Optional[str] = None
    remember: bool = False
    code_expires_at: Optional[datetime] = None

    def reset(self) -> None:
        self.state = LoginState.AWAITING_CREDENTIALS
        self.identity = None
        self.remember = False
        self.code_expires_at = None

    @property
    def is_authenticated(self) -> bool:
        return self.state is LoginState.AUTHENTICATED


@dataclass
class CodeIssued:
    """Outcome of issuing (or re-issuing) a code."""
    identity: str
    expires_at: datetime
    ttl_seconds: int
    delivered: bool = True

    @property
    def message(self) -> str:
        return (
            "We sent you a login code. "
            f"It expires in {self.ttl_seconds} seconds."
        )
