"""Tag API schemas."""

from pydantic import BaseModel, Field


class Tag(BaseModel):
    id: str
    name: str


class CreateTagRequest(BaseModel):
    name: str = Field(min_length=1, max_length=64)


class UpdateTagRequest(BaseModel):
    name: str = Field(min_length=1, max_length=64)


class TagDeletion(BaseModel):
    count: int
