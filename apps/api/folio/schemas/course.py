"""Course API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from folio.schemas.content import AccessHint
from folio.schemas.tag import Tag


class CreateCourseRequest(BaseModel):
    title: str = Field(min_length=1)
    description: str | None = None
    is_paid: bool = False
    tag_names: list[str] | None = None


class UpdateCourseRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    is_paid: bool | None = None
    tag_names: list[str] | None = None


class PublishCourseRequest(BaseModel):
    published: bool


class CreateCourseModuleRequest(BaseModel):
    title: str = Field(min_length=1)
    description: str | None = None
    order: int = Field(ge=0)


class CourseModulePreview(BaseModel):
    id: str
    title: str
    slug: str
    order: int


class CourseModule(BaseModel):
    id: str
    course_id: str
    title: str
    slug: str
    order: int
    description: str | None = None
    created_at: datetime


class Course(BaseModel):
    """Course projection; preview responses omit the description and module bodies."""

    id: str
    slug: str
    title: str
    member_id: str
    is_paid: bool
    published: bool
    created_at: datetime
    updated_at: datetime | None = None
    description: str | None = None
    tags: list[Tag] = Field(default_factory=list)
    modules: list[CourseModule | CourseModulePreview] = Field(default_factory=list)
    preview: bool = False
    access_hint: AccessHint | None = None


class UpdateCourseModuleRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    order: int | None = Field(default=None, ge=0)
