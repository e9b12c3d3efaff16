"""Read access rules for published, paid and draft content."""

from folio.errors import ForbiddenError, NotFoundError, UnauthenticatedError
from folio.schemas.auth import Principal
from folio.schemas.content import AccessDecision, AccessHint, ContentMeta, Visibility

_FULL = Visibility(decision=AccessDecision.FULL)
_NOT_FOUND = Visibility(decision=AccessDecision.NOT_FOUND)
_PREVIEW_AUTH_REQUIRED = Visibility(decision=AccessDecision.PREVIEW_ONLY, hint=AccessHint.AUTH_REQUIRED)
_PREVIEW_SUBSCRIPTION_REQUIRED = Visibility(
    decision=AccessDecision.PREVIEW_ONLY,
    hint=AccessHint.SUBSCRIPTION_REQUIRED,
)


def resolve_access(principal: Principal | None, meta: ContentMeta) -> Visibility:
    """Decide how much of a content item the caller may see.

    Rules are evaluated in order and the first match wins:

    1. drafts are invisible to everyone but their owner, and answer as absent;
    2. free published content is open to everyone;
    3. owners always see their own content in full;
    4. subscribers see paid content in full;
    5. anonymous callers get a preview and must authenticate;
    6. everyone else gets a preview and must subscribe.
    """
    is_owner = principal is not None and principal.identity_id == meta.owner_id

    if not meta.published and not is_owner:
        return _NOT_FOUND
    if not meta.is_paid:
        return _FULL
    if is_owner:
        return _FULL
    if principal is not None and principal.is_subscriber:
        return _FULL
    if principal is None:
        return _PREVIEW_AUTH_REQUIRED
    return _PREVIEW_SUBSCRIPTION_REQUIRED


def ensure_full_access(visibility: Visibility) -> None:
    """Map a non-full decision to the error a full-detail endpoint must raise."""
    if visibility.decision is AccessDecision.FULL:
        return
    if visibility.decision is AccessDecision.NOT_FOUND:
        raise NotFoundError()
    if visibility.hint is AccessHint.AUTH_REQUIRED:
        raise UnauthenticatedError(
            "Authentication required to access this content",
            details={"access_hint": AccessHint.AUTH_REQUIRED.value},
        )
    raise ForbiddenError(
        "Subscription required to access this content",
        details={"access_hint": AccessHint.SUBSCRIPTION_REQUIRED.value},
    )
