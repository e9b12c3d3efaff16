"""Member API schemas."""

from datetime import datetime

from pydantic import BaseModel

from folio.schemas.auth import PermissionLevel


class Member(BaseModel):
    id: str
    username: str
    permission: PermissionLevel
    is_subscriber: bool
    bio: str | None = None
    created_at: datetime


class UpdatePermissionRequest(BaseModel):
    permission: PermissionLevel
