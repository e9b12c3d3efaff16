"""Article API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from folio.schemas.tag import Tag


class CreateArticleModuleRequest(BaseModel):
    title: str = Field(min_length=1)
    description: str | None = None
    published: bool = False
    tag_names: list[str] | None = None


class UpdateArticleModuleRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    published: bool | None = None
    tag_names: list[str] | None = None


class CreateSubArticleRequest(BaseModel):
    title: str = Field(min_length=1)
    content: str = ""
    tag_names: list[str] | None = None


class ArticleModule(BaseModel):
    id: str
    slug: str
    title: str
    member_id: str
    published: bool
    created_at: datetime
    description: str | None = None
    tags: list[Tag] = Field(default_factory=list)


class SubArticle(BaseModel):
    id: str
    module_id: str
    slug: str
    title: str
    content: str
    member_id: str
    created_at: datetime
    tags: list[Tag] = Field(default_factory=list)


class UpdateSubArticleRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1)
    content: str | None = None
    tag_names: list[str] | None = None
