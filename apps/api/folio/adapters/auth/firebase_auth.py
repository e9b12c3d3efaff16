"""Firebase Auth credential verifier adapter."""

from __future__ import annotations

import asyncio

from folio.adapters.auth.base import AuthVerificationError, CredentialVerifier
from folio.schemas.auth import AuthIdentity


class FirebaseCredentialVerifier(CredentialVerifier):
    """Verifies Firebase ID tokens and extracts the asserted identity."""

    def __init__(self, project_id: str | None, audience: str | None) -> None:
        self._project_id = project_id
        self._audience = audience

    async def verify_token(self, token: str) -> AuthIdentity:
        # firebase-admin verification is blocking (certificate fetch + revocation check).
        decoded = await asyncio.to_thread(self._decode, token)
        return self._identity_from_claims(decoded)

    def _decode(self, token: str) -> dict:
        try:
            import firebase_admin
            from firebase_admin import auth as firebase_auth
        except ImportError as exc:  # pragma: no cover - depends on optional package
            raise AuthVerificationError("Firebase auth verifier is unavailable") from exc

        if not firebase_admin._apps:
            firebase_admin.initialize_app()

        try:
            return firebase_auth.verify_id_token(token, check_revoked=True)
        except Exception as exc:  # pragma: no cover - provider exception surface
            raise AuthVerificationError("Invalid bearer token") from exc

    def _identity_from_claims(self, decoded: dict) -> AuthIdentity:
        if self._audience and decoded.get("aud") != self._audience:
            raise AuthVerificationError("Invalid bearer token audience")

        if self._project_id:
            issuer = str(decoded.get("iss", ""))
            audience = str(decoded.get("aud", ""))
            if self._project_id not in issuer and audience != self._project_id:
                raise AuthVerificationError("Invalid bearer token issuer")

        identity_id = str(decoded.get("uid") or decoded.get("sub") or "").strip()
        if not identity_id:
            raise AuthVerificationError("Bearer token missing user identity")

        return AuthIdentity(identity_id=identity_id)


__all__ = ["FirebaseCredentialVerifier"]
