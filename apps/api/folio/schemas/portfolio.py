"""Portfolio API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from folio.schemas.tag import Tag


class CreatePortfolioProjectRequest(BaseModel):
    title: str = Field(min_length=1)
    description: str | None = None
    repo_url: str | None = None
    tag_names: list[str] | None = None


class UpdatePortfolioProjectRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    repo_url: str | None = None
    tag_names: list[str] | None = None


class PortfolioProject(BaseModel):
    id: str
    slug: str
    title: str
    member_id: str
    created_at: datetime
    updated_at: datetime | None = None
    description: str | None = None
    repo_url: str | None = None
    tags: list[Tag] = Field(default_factory=list)
