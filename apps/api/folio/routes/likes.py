"""Like routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from folio.routes.dependencies import get_like_service, get_optional_principal, get_principal
from folio.schemas.auth import Principal
from folio.schemas.error import ErrorResponse
from folio.schemas.like import LikeContentType, LikeSummary, ToggleLikeResponse
from folio.services.likes import LikeService

router = APIRouter(prefix="/likes", tags=["Likes"])


@router.post(
    "/{contentType}/{contentId}",
    response_model=ToggleLikeResponse,
    responses={401: {"model": ErrorResponse}},
)
async def toggle_like(
    content_type: Annotated[LikeContentType, Path(alias="contentType")],
    content_id: Annotated[str, Path(alias="contentId")],
    principal: Annotated[Principal, Depends(get_principal)],
    service: Annotated[LikeService, Depends(get_like_service)],
) -> ToggleLikeResponse:
    return await service.toggle_like(principal=principal, content_type=content_type, content_id=content_id)


@router.get("/{contentType}/{contentId}", response_model=LikeSummary)
async def get_like_summary(
    content_type: Annotated[LikeContentType, Path(alias="contentType")],
    content_id: Annotated[str, Path(alias="contentId")],
    principal: Annotated[Principal | None, Depends(get_optional_principal)],
    service: Annotated[LikeService, Depends(get_like_service)],
) -> LikeSummary:
    return await service.get_like_summary(content_type=content_type, content_id=content_id, principal=principal)
