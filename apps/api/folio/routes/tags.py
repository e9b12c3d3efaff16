"""Tag routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status

from folio.errors import NotFoundError
from folio.routes.dependencies import get_tag_service, require_admin
from folio.schemas.auth import Principal
from folio.schemas.error import ErrorResponse, NoLeakNotFoundError
from folio.schemas.tag import CreateTagRequest, Tag, TagDeletion, UpdateTagRequest
from folio.services.tags import TagService

router = APIRouter(prefix="/tags", tags=["Tags"])


@router.post(
    "",
    response_model=Tag,
    status_code=status.HTTP_201_CREATED,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def create_tag(
    payload: CreateTagRequest,
    _admin: Annotated[Principal, Depends(require_admin)],
    service: Annotated[TagService, Depends(get_tag_service)],
) -> Tag:
    return await service.create_tag(payload.name)


@router.get("", response_model=list[Tag])
async def list_tags(service: Annotated[TagService, Depends(get_tag_service)]) -> list[Tag]:
    return await service.list_tags()


@router.get("/{tagId}", response_model=Tag, responses={404: {"model": NoLeakNotFoundError}})
async def get_tag(
    tag_id: Annotated[str, Path(alias="tagId")],
    service: Annotated[TagService, Depends(get_tag_service)],
) -> Tag:
    tag = await service.get_tag(tag_id)
    if tag is None:
        raise NotFoundError()
    return tag


@router.put(
    "/{tagId}",
    response_model=Tag,
    responses={404: {"model": NoLeakNotFoundError}, 409: {"model": ErrorResponse}},
)
async def update_tag(
    tag_id: Annotated[str, Path(alias="tagId")],
    payload: UpdateTagRequest,
    _admin: Annotated[Principal, Depends(require_admin)],
    service: Annotated[TagService, Depends(get_tag_service)],
) -> Tag:
    tag = await service.update_tag(tag_id, payload.name)
    if tag is None:
        raise NotFoundError()
    return tag


@router.delete(
    "/{tagId}",
    response_model=TagDeletion,
    responses={404: {"model": NoLeakNotFoundError}, 500: {"model": ErrorResponse}},
)
async def delete_tag(
    tag_id: Annotated[str, Path(alias="tagId")],
    _admin: Annotated[Principal, Depends(require_admin)],
    service: Annotated[TagService, Depends(get_tag_service)],
) -> TagDeletion:
    result = await service.delete_tag(tag_id)
    if result.count == 0:
        raise NotFoundError()
    return result
