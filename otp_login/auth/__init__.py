"""
Login Flow
==========
Password check followed by a single-use emailed (or texted) code.
"""

from .models import LoginState, LoginFlow, CodeIssued, SessionDecision
from .collaborators import DeliveryChannel, SessionEstablisher
from .authenticator import OtpAuthenticator

__all__ = [
    # Models
    "LoginState",
    "LoginFlow",
    "CodeIssued",
    "SessionDecision",
    # Collaborators
    "DeliveryChannel",
    "SessionEstablisher",
    # Authenticator
    "OtpAuthenticator",
]
