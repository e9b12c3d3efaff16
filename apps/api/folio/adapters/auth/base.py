"""Authentication provider interfaces."""

from abc import ABC, abstractmethod

from folio.schemas.auth import AuthIdentity


class AuthVerificationError(Exception):
    """Raised when a token cannot be verified or normalized."""


class CredentialVerifier(ABC):
    """Provider-neutral bearer credential verification interface."""

    @abstractmethod
    async def verify_token(self, token: str) -> AuthIdentity:
        """Verify token and return the identity it asserts."""


__all__ = ["AuthVerificationError", "CredentialVerifier"]
