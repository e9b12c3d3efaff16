"""Role and ownership gates."""

from folio.errors import ForbiddenError, InsufficientPermissionError, UnauthenticatedError
from folio.schemas.auth import PermissionLevel, Principal


def require_permission(principal: Principal | None, minimum: PermissionLevel) -> Principal:
    """Return ``principal`` unchanged if its level is at least ``minimum``."""
    if principal is None:
        raise UnauthenticatedError("Authentication required")

    if not principal.permission_level.satisfies(minimum):
        raise InsufficientPermissionError(
            "Insufficient permissions",
            details={
                "required_permission": minimum.value,
                "current_permission": principal.permission_level.value,
            },
        )
    return principal


def ensure_owner(principal: Principal, owner_id: str, *, action: str) -> None:
    """Reject mutations of content owned by another member."""
    if principal.identity_id != owner_id:
        raise ForbiddenError(f"You do not have permission to {action}.")
