"""Portfolio routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, Response, status

from folio.routes.dependencies import get_optional_principal, get_portfolio_service, require_author
from folio.schemas.auth import Principal
from folio.schemas.error import ErrorResponse, NoLeakNotFoundError
from folio.schemas.portfolio import (
    CreatePortfolioProjectRequest,
    PortfolioProject,
    UpdatePortfolioProjectRequest,
)
from folio.services.portfolio import PortfolioService

router = APIRouter(prefix="/portfolio", tags=["Portfolio"])


@router.post(
    "",
    response_model=PortfolioProject,
    status_code=status.HTTP_201_CREATED,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def create_project(
    payload: CreatePortfolioProjectRequest,
    principal: Annotated[Principal, Depends(require_author)],
    service: Annotated[PortfolioService, Depends(get_portfolio_service)],
) -> PortfolioProject:
    return await service.create_project(principal=principal, payload=payload)


@router.get("", response_model=list[PortfolioProject])
async def list_projects(
    service: Annotated[PortfolioService, Depends(get_portfolio_service)],
    member_id: Annotated[str | None, Query(alias="memberId")] = None,
) -> list[PortfolioProject]:
    return await service.list_projects(member_id=member_id)


@router.get(
    "/{projectSlug}",
    response_model=PortfolioProject,
    responses={404: {"model": NoLeakNotFoundError}},
)
async def get_project(
    project_slug: Annotated[str, Path(alias="projectSlug")],
    principal: Annotated[Principal | None, Depends(get_optional_principal)],
    service: Annotated[PortfolioService, Depends(get_portfolio_service)],
) -> PortfolioProject:
    return await service.get_project(slug=project_slug, principal=principal)


@router.put(
    "/{projectSlug}",
    response_model=PortfolioProject,
    responses={403: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
async def update_project(
    project_slug: Annotated[str, Path(alias="projectSlug")],
    payload: UpdatePortfolioProjectRequest,
    principal: Annotated[Principal, Depends(require_author)],
    service: Annotated[PortfolioService, Depends(get_portfolio_service)],
) -> PortfolioProject:
    return await service.update_project(slug=project_slug, principal=principal, payload=payload)


@router.delete(
    "/{projectSlug}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
async def delete_project(
    project_slug: Annotated[str, Path(alias="projectSlug")],
    principal: Annotated[Principal, Depends(require_author)],
    service: Annotated[PortfolioService, Depends(get_portfolio_service)],
) -> Response:
    await service.delete_project(slug=project_slug, principal=principal)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
