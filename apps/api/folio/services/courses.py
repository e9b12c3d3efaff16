"""Course and course module service layer."""

from __future__ import annotations

import logging

from folio.core.logging_safety import safe_log_identifier
from folio.domain.permissions import ensure_owner
from folio.domain.visibility import ensure_full_access, resolve_access
from folio.errors import NotFoundError
from folio.repositories.base import Row, eq, in_
from folio.schemas.auth import Principal
from folio.schemas.content import AccessDecision, Visibility
from folio.schemas.course import (
    Course,
    CourseModule,
    CourseModulePreview,
    CreateCourseModuleRequest,
    CreateCourseRequest,
    UpdateCourseModuleRequest,
    UpdateCourseRequest,
)
from folio.schemas.tag import Tag
from folio.services.content import ContentService, content_meta
from folio.services.slugs import SlugNamespace
from folio.services.tags import TaggedContent

logger = logging.getLogger(__name__)

TABLE_COURSES = "courses"
TABLE_COURSE_MODULES = "course_modules"
TABLE_LESSONS = "lessons"

_UPDATABLE_COURSE_FIELDS = frozenset({"title", "description", "is_paid"})
_NULLABLE_COURSE_FIELDS = frozenset({"description"})


class CourseService(ContentService):
    async def create_course(self, *, principal: Principal, payload: CreateCourseRequest) -> Course:
        row = await self._slugs.create_with_slug(
            payload.title,
            SlugNamespace.global_(TABLE_COURSES),
            lambda slug: {
                "member_id": principal.identity_id,
                "title": payload.title,
                "description": payload.description,
                "is_paid": payload.is_paid,
                "published": False,
                "verified": False,
                "updated_at": None,
            },
        )
        tags = await self._tag_new_row(TABLE_COURSES, TaggedContent.COURSE, row["id"], payload.tag_names)
        logger.info(
            "course.created course_id=%s member_id=%s slug=%s",
            safe_log_identifier(row["id"], prefix="crs"),
            safe_log_identifier(principal.identity_id, prefix="pid"),
            row["slug"],
        )
        return self._to_course(row, tags=tags, modules=[], visibility=None)

    async def list_courses(self, *, principal: Principal | None) -> list[Course]:
        """Published courses; paid ones the caller cannot open are rendered as previews."""
        rows = await self._select(TABLE_COURSES, [eq("published", True)], order_by="-created_at")
        courses: list[Course] = []
        for row in rows:
            visibility = resolve_access(principal, content_meta(row))
            if visibility.decision is AccessDecision.NOT_FOUND:
                continue
            tags = await self._current_tags(TaggedContent.COURSE, row["id"])
            courses.append(self._to_course(row, tags=tags, modules=[], visibility=visibility))
        return courses

    async def get_course(self, *, slug: str, principal: Principal | None) -> Course:
        """Full course detail; raises unless the caller may see the whole course."""
        row = await self._require_one(TABLE_COURSES, [eq("slug", slug)])
        visibility = resolve_access(principal, content_meta(row))
        ensure_full_access(visibility)

        tags = await self._current_tags(TaggedContent.COURSE, row["id"])
        modules = await self._module_rows(row["id"])
        return self._to_course(
            row,
            tags=tags,
            modules=[self._to_module(module) for module in modules],
            visibility=visibility,
        )

    async def get_course_preview(self, *, slug: str, principal: Principal | None) -> Course:
        """Course detail reduced to what a preview may show when access is not full."""
        row = await self._require_one(TABLE_COURSES, [eq("slug", slug)])
        visibility = resolve_access(principal, content_meta(row))
        if visibility.decision is AccessDecision.NOT_FOUND:
            raise NotFoundError()

        tags = await self._current_tags(TaggedContent.COURSE, row["id"])
        module_rows = await self._module_rows(row["id"])
        if visibility.is_full:
            modules = [self._to_module(module) for module in module_rows]
        else:
            modules = [self._to_module_preview(module) for module in module_rows]
        return self._to_course(row, tags=tags, modules=modules, visibility=visibility)

    async def update_course(self, *, slug: str, principal: Principal, payload: UpdateCourseRequest) -> Course:
        row = await self._require_one(TABLE_COURSES, [eq("slug", slug)])
        ensure_owner(principal, row["member_id"], action="update this course")

        # Slug and publication state are never touched here, even when the title changes.
        patch = {
            key: value
            for key, value in payload.model_dump(exclude_unset=True).items()
            if key in _UPDATABLE_COURSE_FIELDS and (value is not None or key in _NULLABLE_COURSE_FIELDS)
        }
        if patch:
            row = await self._update(TABLE_COURSES, [eq("id", row["id"])], patch)

        if "tag_names" in payload.model_fields_set:
            tags = await self._replace_tags(TaggedContent.COURSE, row["id"], payload.tag_names)
        else:
            tags = await self._current_tags(TaggedContent.COURSE, row["id"])

        modules = await self._module_rows(row["id"])
        return self._to_course(row, tags=tags, modules=[self._to_module(m) for m in modules], visibility=None)

    async def set_published(self, *, slug: str, principal: Principal, published: bool) -> Course:
        row = await self._require_one(TABLE_COURSES, [eq("slug", slug)])
        ensure_owner(principal, row["member_id"], action="publish this course")

        if bool(row.get("published")) != published:
            row = await self._update(TABLE_COURSES, [eq("id", row["id"])], {"published": published})
            logger.info(
                "course.publication_changed course_id=%s published=%s",
                safe_log_identifier(row["id"], prefix="crs"),
                published,
            )
        tags = await self._current_tags(TaggedContent.COURSE, row["id"])
        return self._to_course(row, tags=tags, modules=[], visibility=None)

    async def delete_course(self, *, slug: str, principal: Principal) -> None:
        row = await self._require_one(TABLE_COURSES, [eq("slug", slug)])
        ensure_owner(principal, row["member_id"], action="delete this course")

        module_ids = [module["id"] for module in await self._module_rows(row["id"])]
        if module_ids:
            await self._delete(TABLE_LESSONS, [in_("course_module_id", module_ids)])
        await self._delete(TaggedContent.COURSE.junction_table, [eq("course_id", row["id"])])
        await self._delete(TABLE_COURSE_MODULES, [eq("course_id", row["id"])])
        await self._delete(TABLE_COURSES, [eq("id", row["id"])])
        logger.info("course.deleted course_id=%s", safe_log_identifier(row["id"], prefix="crs"))

    async def create_module(
        self,
        *,
        course_slug: str,
        principal: Principal,
        payload: CreateCourseModuleRequest,
    ) -> CourseModule:
        course = await self._visible_course(course_slug, principal)
        ensure_owner(principal, course["member_id"], action="add modules to this course")

        row = await self._slugs.create_with_slug(
            payload.title,
            SlugNamespace.scoped(TABLE_COURSE_MODULES, "course_id", course["id"]),
            lambda slug: {
                "title": payload.title,
                "description": payload.description,
                "order": payload.order,
                "updated_at": None,
            },
        )
        return self._to_module(row)

    async def list_modules(
        self,
        *,
        course_slug: str,
        principal: Principal | None,
    ) -> list[CourseModule | CourseModulePreview]:
        course = await self._visible_course(course_slug, principal)
        visibility = resolve_access(principal, content_meta(course))
        rows = await self._module_rows(course["id"])
        if visibility.is_full:
            return [self._to_module(row) for row in rows]
        return [self._to_module_preview(row) for row in rows]

    async def get_module(self, *, course_slug: str, module_slug: str, principal: Principal | None) -> CourseModule:
        course = await self._require_one(TABLE_COURSES, [eq("slug", course_slug)])
        ensure_full_access(resolve_access(principal, content_meta(course)))

        row = await self._require_one(
            TABLE_COURSE_MODULES,
            [eq("course_id", course["id"]), eq("slug", module_slug)],
        )
        return self._to_module(row)

    async def update_module(
        self,
        *,
        course_slug: str,
        module_slug: str,
        principal: Principal,
        payload: UpdateCourseModuleRequest,
    ) -> CourseModule:
        course = await self._visible_course(course_slug, principal)
        ensure_owner(principal, course["member_id"], action="update modules in this course")
        row = await self._require_one(
            TABLE_COURSE_MODULES,
            [eq("course_id", course["id"]), eq("slug", module_slug)],
        )

        changes = payload.model_dump(exclude_unset=True)
        patch = {
            key: changes[key]
            for key in ("title", "description", "order")
            if key in changes and (changes[key] is not None or key == "description")
        }
        if patch:
            row = await self._update(TABLE_COURSE_MODULES, [eq("id", row["id"])], patch)
        return self._to_module(row)

    async def delete_module(self, *, course_slug: str, module_slug: str, principal: Principal) -> None:
        course = await self._visible_course(course_slug, principal)
        ensure_owner(principal, course["member_id"], action="delete modules from this course")
        row = await self._require_one(
            TABLE_COURSE_MODULES,
            [eq("course_id", course["id"]), eq("slug", module_slug)],
        )

        await self._delete(TABLE_LESSONS, [eq("course_module_id", row["id"])])
        await self._delete(TABLE_COURSE_MODULES, [eq("id", row["id"])])
        logger.info(
            "course_module.deleted course_id=%s module_id=%s",
            safe_log_identifier(course["id"], prefix="crs"),
            safe_log_identifier(row["id"], prefix="mod"),
        )

    async def _visible_course(self, slug: str, principal: Principal | None) -> Row:
        row = await self._require_one(TABLE_COURSES, [eq("slug", slug)])
        if resolve_access(principal, content_meta(row)).decision is AccessDecision.NOT_FOUND:
            raise NotFoundError()
        return row

    async def _module_rows(self, course_id: str) -> list[Row]:
        return await self._select(TABLE_COURSE_MODULES, [eq("course_id", course_id)], order_by="order")

    @staticmethod
    def _to_course(
        row: Row,
        *,
        tags: list[Tag],
        modules: list[CourseModule | CourseModulePreview],
        visibility: Visibility | None,
    ) -> Course:
        preview = visibility is not None and not visibility.is_full
        return Course(
            id=row["id"],
            slug=row["slug"],
            title=row["title"],
            member_id=row["member_id"],
            is_paid=bool(row.get("is_paid")),
            published=bool(row.get("published")),
            created_at=row["created_at"],
            updated_at=row.get("updated_at"),
            description=None if preview else row.get("description"),
            tags=tags,
            modules=modules,
            preview=preview,
            access_hint=visibility.hint if preview else None,
        )

    @staticmethod
    def _to_module(row: Row) -> CourseModule:
        return CourseModule(
            id=row["id"],
            course_id=row["course_id"],
            title=row["title"],
            slug=row["slug"],
            order=row["order"],
            description=row.get("description"),
            created_at=row["created_at"],
        )

    @staticmethod
    def _to_module_preview(row: Row) -> CourseModulePreview:
        return CourseModulePreview(id=row["id"], title=row["title"], slug=row["slug"], order=row["order"])
