"""Member routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from folio.routes.dependencies import get_member_service, get_principal, require_admin
from folio.schemas.auth import Principal
from folio.schemas.error import ErrorResponse, NoLeakNotFoundError
from folio.schemas.member import Member, UpdatePermissionRequest
from folio.services.members import MemberService

router = APIRouter(prefix="/members", tags=["Members"])


@router.get("/me", response_model=Member, responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}})
async def get_me(
    principal: Annotated[Principal, Depends(get_principal)],
    service: Annotated[MemberService, Depends(get_member_service)],
) -> Member:
    return await service.get_member(principal.identity_id)


@router.get("/{memberId}", response_model=Member, responses={404: {"model": NoLeakNotFoundError}})
async def get_member(
    member_id: Annotated[str, Path(alias="memberId")],
    service: Annotated[MemberService, Depends(get_member_service)],
) -> Member:
    return await service.get_member(member_id)


@router.put(
    "/{memberId}/permission",
    response_model=Member,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
async def update_member_permission(
    member_id: Annotated[str, Path(alias="memberId")],
    payload: UpdatePermissionRequest,
    admin: Annotated[Principal, Depends(require_admin)],
    service: Annotated[MemberService, Depends(get_member_service)],
) -> Member:
    return await service.update_permission(admin=admin, member_id=member_id, permission=payload.permission)
