"""Like API schemas."""

from enum import Enum

from pydantic import BaseModel


class LikeContentType(str, Enum):
    ARTICLE = "article_module"
    PROJECT = "project"


class LikeSummary(BaseModel):
    content_type: LikeContentType
    content_id: str
    count: int
    liked: bool


class ToggleLikeResponse(BaseModel):
    liked: bool
    count: int
