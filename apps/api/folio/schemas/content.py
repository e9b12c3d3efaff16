"""Content access schemas shared by every content type."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class ContentMeta(BaseModel):
    """Minimal projection of a content row needed for a visibility decision."""

    model_config = ConfigDict(frozen=True)

    owner_id: str
    published: bool = True
    is_paid: bool = False


class AccessDecision(str, Enum):
    FULL = "FULL"
    PREVIEW_ONLY = "PREVIEW_ONLY"
    NOT_FOUND = "NOT_FOUND"


class AccessHint(str, Enum):
    AUTH_REQUIRED = "AUTH_REQUIRED"
    SUBSCRIPTION_REQUIRED = "SUBSCRIPTION_REQUIRED"


class Visibility(BaseModel):
    model_config = ConfigDict(frozen=True)

    decision: AccessDecision
    hint: AccessHint | None = None

    @property
    def is_full(self) -> bool:
        return self.decision is AccessDecision.FULL
