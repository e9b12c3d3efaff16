"""Dependency wiring for routes."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
import logging
from typing import Annotated
from uuid import uuid4

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from folio.adapters.auth import CredentialVerifier, FirebaseCredentialVerifier, MockCredentialVerifier
from folio.core.config import Settings, get_settings
from folio.core.logging_safety import safe_log_identifier
from folio.domain.permissions import require_permission
from folio.errors import ApiError
from folio.repositories.base import RelationalStore
from folio.schemas.auth import PermissionLevel, Principal
from folio.services.articles import ArticleService
from folio.services.courses import CourseService
from folio.services.lessons import LessonService
from folio.services.likes import LikeService
from folio.services.members import MemberService
from folio.services.portfolio import PortfolioService
from folio.services.principals import PrincipalResolver
from folio.services.slugs import SlugAllocator
from folio.services.tags import TagService

bearer_scheme = HTTPBearer(auto_error=False, scheme_name="bearerAuth")
logger = logging.getLogger(__name__)


def _request_correlation_id(request: Request) -> str:
    existing = getattr(request.state, "correlation_id", None)
    if isinstance(existing, str) and existing:
        return existing

    correlation_id = request.headers.get("X-Correlation-Id") or f"req-{uuid4()}"
    request.state.correlation_id = correlation_id
    return correlation_id


def _bearer_token(credentials: HTTPAuthorizationCredentials | None) -> str | None:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        return None
    return credentials.credentials


def get_token_verifier(settings: Annotated[Settings, Depends(get_settings)]) -> CredentialVerifier:
    """Resolve provider adapter from configuration."""
    if settings.auth_provider == "firebase":
        return FirebaseCredentialVerifier(
            project_id=settings.firebase_project_id,
            audience=settings.firebase_audience,
        )
    return MockCredentialVerifier()


def get_store(request: Request) -> RelationalStore:
    return request.app.state.store


def get_principal_resolver(
    verifier: Annotated[CredentialVerifier, Depends(get_token_verifier)],
    store: Annotated[RelationalStore, Depends(get_store)],
) -> PrincipalResolver:
    return PrincipalResolver(verifier, store)


async def get_principal(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
    resolver: Annotated[PrincipalResolver, Depends(get_principal_resolver)],
) -> Principal:
    """Resolve the caller or fail closed."""
    safe_correlation_id = safe_log_identifier(_request_correlation_id(request), prefix="cid")
    try:
        principal = await resolver.resolve_strict(_bearer_token(credentials))
    except ApiError as exc:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s reason=%s",
            safe_correlation_id,
            request.method,
            request.url.path,
            exc.code,
        )
        raise

    logger.info(
        "auth.accepted correlation_id=%s method=%s path=%s principal_id=%s permission=%s",
        safe_correlation_id,
        request.method,
        request.url.path,
        safe_log_identifier(principal.identity_id, prefix="pid"),
        principal.permission_level.value,
    )
    return principal


async def get_optional_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
    resolver: Annotated[PrincipalResolver, Depends(get_principal_resolver)],
) -> Principal | None:
    """Resolve the caller if possible; bad or orphaned credentials read as anonymous."""
    return await resolver.resolve_optional(_bearer_token(credentials))


def require_member(minimum: PermissionLevel) -> Callable[..., Awaitable[Principal]]:
    """Build a dependency that admits callers at ``minimum`` level or above."""

    async def _require(principal: Annotated[Principal, Depends(get_principal)]) -> Principal:
        return require_permission(principal, minimum)

    return _require


require_author = require_member(PermissionLevel.AUTHOR)
require_admin = require_member(PermissionLevel.ADMIN)


def get_slug_allocator(
    store: Annotated[RelationalStore, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> SlugAllocator:
    return SlugAllocator(
        store,
        fallback=settings.slug_fallback,
        conflict_retries=settings.slug_conflict_retries,
    )


def get_tag_service(
    store: Annotated[RelationalStore, Depends(get_store)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TagService:
    return TagService(store, conflict_retries=settings.tag_conflict_retries)


def get_course_service(
    store: Annotated[RelationalStore, Depends(get_store)],
    slugs: Annotated[SlugAllocator, Depends(get_slug_allocator)],
    tags: Annotated[TagService, Depends(get_tag_service)],
) -> CourseService:
    return CourseService(store, slugs, tags)


def get_lesson_service(
    store: Annotated[RelationalStore, Depends(get_store)],
    slugs: Annotated[SlugAllocator, Depends(get_slug_allocator)],
    tags: Annotated[TagService, Depends(get_tag_service)],
) -> LessonService:
    return LessonService(store, slugs, tags)


def get_article_service(
    store: Annotated[RelationalStore, Depends(get_store)],
    slugs: Annotated[SlugAllocator, Depends(get_slug_allocator)],
    tags: Annotated[TagService, Depends(get_tag_service)],
) -> ArticleService:
    return ArticleService(store, slugs, tags)


def get_portfolio_service(
    store: Annotated[RelationalStore, Depends(get_store)],
    slugs: Annotated[SlugAllocator, Depends(get_slug_allocator)],
    tags: Annotated[TagService, Depends(get_tag_service)],
) -> PortfolioService:
    return PortfolioService(store, slugs, tags)


def get_member_service(store: Annotated[RelationalStore, Depends(get_store)]) -> MemberService:
    return MemberService(store)


def get_like_service(store: Annotated[RelationalStore, Depends(get_store)]) -> LikeService:
    return LikeService(store)
