"""Lesson API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class CreateLessonRequest(BaseModel):
    order: int = Field(ge=0)
    question_prompt: str = Field(min_length=5)
    exercise_type: str = Field(min_length=3)
    expected_answer: str = Field(min_length=1)
    options_data: Any | None = None
    answer_placeholder: str | None = Field(default=None, max_length=100)
    answer_format_hint: str | None = Field(default=None, max_length=200)


class UpdateLessonRequest(BaseModel):
    order: int | None = Field(default=None, ge=0)
    question_prompt: str | None = Field(default=None, min_length=5)
    exercise_type: str | None = Field(default=None, min_length=3)
    expected_answer: str | None = Field(default=None, min_length=1)
    options_data: Any | None = None
    answer_placeholder: str | None = Field(default=None, max_length=100)
    answer_format_hint: str | None = Field(default=None, max_length=200)


class Lesson(BaseModel):
    """An exercise inside a course module; carries the expected answer."""

    id: str
    course_module_id: str
    order: int
    question_prompt: str
    exercise_type: str
    expected_answer: str
    options_data: Any | None = None
    answer_placeholder: str | None = None
    answer_format_hint: str | None = None
    created_at: datetime
    updated_at: datetime | None = None
