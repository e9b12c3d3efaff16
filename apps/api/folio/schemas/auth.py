"""Authentication schemas."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PermissionLevel(str, Enum):
    """Member role, stored by name and compared by rank."""

    GUEST = "guest"
    AUTHOR = "author"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        return _PERMISSION_RANKS[self]

    def satisfies(self, minimum: "PermissionLevel") -> bool:
        return self.rank >= minimum.rank


_PERMISSION_RANKS: dict[PermissionLevel, int] = {
    PermissionLevel.GUEST: 1,
    PermissionLevel.AUTHOR: 2,
    PermissionLevel.ADMIN: 3,
}


class AuthIdentity(BaseModel):
    """Identity asserted by the credential verifier."""

    identity_id: str = Field(min_length=1)


class Principal(BaseModel):
    """Resolved caller for one request; never persisted."""

    model_config = ConfigDict(frozen=True)

    identity_id: str = Field(min_length=1)
    permission_level: PermissionLevel = PermissionLevel.GUEST
    is_subscriber: bool = False
