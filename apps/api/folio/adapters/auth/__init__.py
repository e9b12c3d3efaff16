"""Credential verifier adapters."""

from .base import AuthVerificationError, CredentialVerifier
from .firebase_auth import FirebaseCredentialVerifier
from .mock_auth import MockCredentialVerifier

__all__ = [
    "AuthVerificationError",
    "CredentialVerifier",
    "FirebaseCredentialVerifier",
    "MockCredentialVerifier",
]
