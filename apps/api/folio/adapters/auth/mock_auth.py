"""Mock credential verifier for local development and tests."""

from folio.adapters.auth.base import AuthVerificationError, CredentialVerifier
from folio.schemas.auth import AuthIdentity


class MockCredentialVerifier(CredentialVerifier):
    """Accepts deterministic test tokens only.

    Expected token format: ``test:<identity_id>``. Permission and subscription
    come from the member record, never from the token.
    """

    async def verify_token(self, token: str) -> AuthIdentity:
        prefix, separator, identity_id = token.partition(":")
        if prefix != "test" or not separator:
            raise AuthVerificationError("Invalid bearer token")

        identity_id = identity_id.strip()
        if not identity_id or ":" in identity_id:
            raise AuthVerificationError("Bearer token missing user identity")

        return AuthIdentity(identity_id=identity_id)


__all__ = ["MockCredentialVerifier"]
