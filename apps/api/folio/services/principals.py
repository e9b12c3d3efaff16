"""Bearer credential to principal resolution."""

from __future__ import annotations

import logging

from folio.adapters.auth import AuthVerificationError, CredentialVerifier
from folio.core.logging_safety import safe_log_identifier
from folio.errors import DatabaseError, ProfileNotFoundError, UnauthenticatedError
from folio.repositories.base import RelationalStore, StoreError, eq
from folio.schemas.auth import PermissionLevel, Principal

logger = logging.getLogger(__name__)

TABLE_MEMBERS = "members"
_PRINCIPAL_COLUMNS = ("id", "permission", "is_subscriber")


class PrincipalResolver:
    """Turns an optional bearer credential into a ``Principal``.

    ``resolve`` holds the single resolution path; ``resolve_strict`` and
    ``resolve_optional`` only differ in what they do with its outcome.
    """

    def __init__(self, verifier: CredentialVerifier, store: RelationalStore) -> None:
        self._verifier = verifier
        self._store = store

    async def resolve(self, credential: str | None) -> Principal | None:
        if not credential:
            return None

        try:
            identity = await self._verifier.verify_token(credential)
        except AuthVerificationError as exc:
            raise UnauthenticatedError(str(exc) or "Invalid bearer token") from exc

        try:
            member = await self._store.select_one(
                TABLE_MEMBERS,
                [eq("id", identity.identity_id)],
                columns=_PRINCIPAL_COLUMNS,
            )
        except StoreError as exc:
            raise DatabaseError("Failed to load member profile") from exc

        if member is None:
            raise ProfileNotFoundError("Member not found")

        return Principal(
            identity_id=member["id"],
            permission_level=PermissionLevel(member.get("permission") or PermissionLevel.GUEST.value),
            is_subscriber=bool(member.get("is_subscriber")),
        )

    async def resolve_strict(self, credential: str | None) -> Principal:
        principal = await self.resolve(credential)
        if principal is None:
            raise UnauthenticatedError("Invalid or missing bearer token")
        return principal

    async def resolve_optional(self, credential: str | None) -> Principal | None:
        try:
            return await self.resolve(credential)
        except (UnauthenticatedError, ProfileNotFoundError) as exc:
            logger.warning(
                "auth.degraded_to_anonymous reason=%s token=%s",
                exc.code,
                safe_log_identifier(credential, prefix="tok"),
            )
            return None
