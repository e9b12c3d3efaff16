"""Lesson service layer."""

from __future__ import annotations

import logging
import re

from folio.core.logging_safety import safe_log_identifier
from folio.domain.permissions import ensure_owner
from folio.domain.visibility import ensure_full_access, resolve_access
from folio.errors import DatabaseError, NotFoundError
from folio.repositories.base import Row, StoreError, eq
from folio.schemas.auth import Principal
from folio.schemas.content import AccessDecision
from folio.schemas.lesson import CreateLessonRequest, Lesson, UpdateLessonRequest
from folio.services.content import ContentService, content_meta
from folio.services.courses import TABLE_COURSE_MODULES, TABLE_COURSES, TABLE_LESSONS

logger = logging.getLogger(__name__)

# Exercise types whose answer shape can be hinted by masking it.
_MASKED_EXERCISE_TYPES = frozenset({"flag", "text_input"})
_ANSWER_CHARACTER = re.compile(r"[a-zA-Z0-9]")

_UPDATABLE_LESSON_FIELDS = (
    "order",
    "question_prompt",
    "exercise_type",
    "expected_answer",
    "options_data",
    "answer_placeholder",
    "answer_format_hint",
)
_NULLABLE_LESSON_FIELDS = frozenset({"options_data", "answer_placeholder", "answer_format_hint"})


def answer_placeholder_for(exercise_type: str, expected_answer: str) -> str | None:
    """Mask letters and digits of the answer for flag and free-text exercises."""
    if exercise_type not in _MASKED_EXERCISE_TYPES:
        return None
    return _ANSWER_CHARACTER.sub(".", expected_answer)


class LessonService(ContentService):
    """Lessons live inside a course module and share the course's access rules."""

    async def list_lessons(
        self,
        *,
        course_slug: str,
        module_slug: str,
        principal: Principal | None,
    ) -> list[Lesson]:
        module = await self._readable_module(course_slug, module_slug, principal)
        rows = await self._select(TABLE_LESSONS, [eq("course_module_id", module["id"])], order_by="order")
        return [self._to_lesson(row) for row in rows]

    async def get_lesson(
        self,
        *,
        course_slug: str,
        module_slug: str,
        lesson_id: str,
        principal: Principal | None,
    ) -> Lesson:
        module = await self._readable_module(course_slug, module_slug, principal)
        row = await self._require_one(TABLE_LESSONS, self._lesson_filters(module, lesson_id))
        return self._to_lesson(row)

    async def create_lesson(
        self,
        *,
        course_slug: str,
        module_slug: str,
        principal: Principal,
        payload: CreateLessonRequest,
    ) -> Lesson:
        module = await self._owned_module(course_slug, module_slug, principal, action="add lessons to this course")

        placeholder = payload.answer_placeholder or answer_placeholder_for(
            payload.exercise_type,
            payload.expected_answer,
        )
        try:
            inserted = await self._store.insert(
                TABLE_LESSONS,
                {
                    "course_module_id": module["id"],
                    "order": payload.order,
                    "question_prompt": payload.question_prompt,
                    "exercise_type": payload.exercise_type,
                    "expected_answer": payload.expected_answer,
                    "options_data": payload.options_data,
                    "answer_placeholder": placeholder,
                    "answer_format_hint": payload.answer_format_hint,
                    "updated_at": None,
                },
            )
        except StoreError as exc:
            raise DatabaseError("Failed to create lesson") from exc

        logger.info(
            "lesson.created module_id=%s lesson_id=%s",
            safe_log_identifier(module["id"], prefix="mod"),
            safe_log_identifier(inserted[0]["id"], prefix="lsn"),
        )
        return self._to_lesson(inserted[0])

    async def update_lesson(
        self,
        *,
        course_slug: str,
        module_slug: str,
        lesson_id: str,
        principal: Principal,
        payload: UpdateLessonRequest,
    ) -> Lesson:
        module = await self._owned_module(course_slug, module_slug, principal, action="update lessons in this course")
        row = await self._require_one(TABLE_LESSONS, self._lesson_filters(module, lesson_id))

        changes = payload.model_dump(exclude_unset=True)
        patch = {
            key: changes[key]
            for key in _UPDATABLE_LESSON_FIELDS
            if key in changes and (changes[key] is not None or key in _NULLABLE_LESSON_FIELDS)
        }
        # A new answer re-derives the placeholder unless one was sent alongside it.
        if "expected_answer" in patch and "answer_placeholder" not in changes:
            exercise_type = patch.get("exercise_type", row["exercise_type"])
            derived = answer_placeholder_for(exercise_type, patch["expected_answer"])
            if derived is not None:
                patch["answer_placeholder"] = derived

        if patch:
            row = await self._update(TABLE_LESSONS, [eq("id", row["id"])], patch)
        return self._to_lesson(row)

    async def delete_lesson(
        self,
        *,
        course_slug: str,
        module_slug: str,
        lesson_id: str,
        principal: Principal,
    ) -> None:
        module = await self._owned_module(course_slug, module_slug, principal, action="delete lessons from this course")
        row = await self._require_one(TABLE_LESSONS, self._lesson_filters(module, lesson_id))
        await self._delete(TABLE_LESSONS, [eq("id", row["id"])])

    async def _readable_module(self, course_slug: str, module_slug: str, principal: Principal | None) -> Row:
        # Lessons include expected answers, so reading them needs full course access.
        course = await self._require_one(TABLE_COURSES, [eq("slug", course_slug)])
        ensure_full_access(resolve_access(principal, content_meta(course)))
        return await self._require_one(
            TABLE_COURSE_MODULES,
            [eq("course_id", course["id"]), eq("slug", module_slug)],
        )

    async def _owned_module(self, course_slug: str, module_slug: str, principal: Principal, *, action: str) -> Row:
        course = await self._require_one(TABLE_COURSES, [eq("slug", course_slug)])
        if resolve_access(principal, content_meta(course)).decision is AccessDecision.NOT_FOUND:
            raise NotFoundError()
        ensure_owner(principal, course["member_id"], action=action)
        return await self._require_one(
            TABLE_COURSE_MODULES,
            [eq("course_id", course["id"]), eq("slug", module_slug)],
        )

    @staticmethod
    def _lesson_filters(module: Row, lesson_id: str):
        return [eq("id", lesson_id), eq("course_module_id", module["id"])]

    @staticmethod
    def _to_lesson(row: Row) -> Lesson:
        return Lesson(
            id=row["id"],
            course_module_id=row["course_module_id"],
            order=row["order"],
            question_prompt=row["question_prompt"],
            exercise_type=row["exercise_type"],
            expected_answer=row["expected_answer"],
            options_data=row.get("options_data"),
            answer_placeholder=row.get("answer_placeholder"),
            answer_format_hint=row.get("answer_format_hint"),
            created_at=row["created_at"],
            updated_at=row.get("updated_at"),
        )
