"""
Host Collaborators
==================
Interfaces the host application implements around the login flow.
"""

from abc import ABC, abstractmethod

from .models import SessionDecision


class DeliveryChannel(ABC):
    """Sends a plaintext code to the user (email, SMS, ...)."""

    @abstractmethod
    async def notify(self, identity: str, code: str) -> None:
        ...


class SessionEstablisher(ABC):
    """Opens the host session once the code is verified."""

    @abstractmethod
    async def establish(self, identity: str, remember: bool = False) -> SessionDecision:
        """
        Log ``identity`` in.

        Returns:
            SessionDecision.REJECTED when host policy refuses the identity
            (e.g. panel access revoked), otherwise SessionDecision.ALLOWED
        """
