"""Course routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response, status

from folio.routes.dependencies import get_course_service, get_lesson_service, get_optional_principal, require_author
from folio.schemas.auth import Principal
from folio.schemas.course import (
    Course,
    CourseModule,
    CourseModulePreview,
    CreateCourseModuleRequest,
    CreateCourseRequest,
    PublishCourseRequest,
    UpdateCourseModuleRequest,
    UpdateCourseRequest,
)
from folio.schemas.error import ErrorResponse, NoLeakNotFoundError
from folio.schemas.lesson import CreateLessonRequest, Lesson, UpdateLessonRequest
from folio.services.courses import CourseService
from folio.services.lessons import LessonService

router = APIRouter(prefix="/courses", tags=["Courses"])


@router.post(
    "",
    response_model=Course,
    status_code=status.HTTP_201_CREATED,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def create_course(
    payload: CreateCourseRequest,
    principal: Annotated[Principal, Depends(require_author)],
    service: Annotated[CourseService, Depends(get_course_service)],
) -> Course:
    return await service.create_course(principal=principal, payload=payload)


@router.get("", response_model=list[Course])
async def list_courses(
    principal: Annotated[Principal | None, Depends(get_optional_principal)],
    service: Annotated[CourseService, Depends(get_course_service)],
) -> list[Course]:
    return await service.list_courses(principal=principal)


@router.get(
    "/{courseSlug}",
    response_model=Course,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": NoLeakNotFoundError},
    },
)
async def get_course(
    course_slug: Annotated[str, Path(alias="courseSlug")],
    principal: Annotated[Principal | None, Depends(get_optional_principal)],
    service: Annotated[CourseService, Depends(get_course_service)],
) -> Course:
    return await service.get_course(slug=course_slug, principal=principal)


@router.get(
    "/{courseSlug}/preview",
    response_model=Course,
    responses={404: {"model": NoLeakNotFoundError}},
)
async def get_course_preview(
    course_slug: Annotated[str, Path(alias="courseSlug")],
    principal: Annotated[Principal | None, Depends(get_optional_principal)],
    service: Annotated[CourseService, Depends(get_course_service)],
) -> Course:
    return await service.get_course_preview(slug=course_slug, principal=principal)


@router.put(
    "/{courseSlug}",
    response_model=Course,
    responses={403: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
async def update_course(
    course_slug: Annotated[str, Path(alias="courseSlug")],
    payload: UpdateCourseRequest,
    principal: Annotated[Principal, Depends(require_author)],
    service: Annotated[CourseService, Depends(get_course_service)],
) -> Course:
    return await service.update_course(slug=course_slug, principal=principal, payload=payload)


@router.put(
    "/{courseSlug}/publication",
    response_model=Course,
    responses={403: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
async def publish_course(
    course_slug: Annotated[str, Path(alias="courseSlug")],
    payload: PublishCourseRequest,
    principal: Annotated[Principal, Depends(require_author)],
    service: Annotated[CourseService, Depends(get_course_service)],
) -> Course:
    return await service.set_published(slug=course_slug, principal=principal, published=payload.published)


@router.delete(
    "/{courseSlug}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
async def delete_course(
    course_slug: Annotated[str, Path(alias="courseSlug")],
    principal: Annotated[Principal, Depends(require_author)],
    service: Annotated[CourseService, Depends(get_course_service)],
) -> Response:
    await service.delete_course(slug=course_slug, principal=principal)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{courseSlug}/modules",
    response_model=CourseModule,
    status_code=status.HTTP_201_CREATED,
    responses={403: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
async def create_module(
    course_slug: Annotated[str, Path(alias="courseSlug")],
    payload: CreateCourseModuleRequest,
    principal: Annotated[Principal, Depends(require_author)],
    service: Annotated[CourseService, Depends(get_course_service)],
) -> CourseModule:
    return await service.create_module(course_slug=course_slug, principal=principal, payload=payload)


@router.get(
    "/{courseSlug}/modules",
    response_model=list[CourseModule | CourseModulePreview],
    responses={404: {"model": NoLeakNotFoundError}},
)
async def list_modules(
    course_slug: Annotated[str, Path(alias="courseSlug")],
    principal: Annotated[Principal | None, Depends(get_optional_principal)],
    service: Annotated[CourseService, Depends(get_course_service)],
) -> list[CourseModule | CourseModulePreview]:
    return await service.list_modules(course_slug=course_slug, principal=principal)


@router.get(
    "/{courseSlug}/modules/{moduleSlug}",
    response_model=CourseModule,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": NoLeakNotFoundError},
    },
)
async def get_module(
    course_slug: Annotated[str, Path(alias="courseSlug")],
    module_slug: Annotated[str, Path(alias="moduleSlug")],
    principal: Annotated[Principal | None, Depends(get_optional_principal)],
    service: Annotated[CourseService, Depends(get_course_service)],
) -> CourseModule:
    return await service.get_module(course_slug=course_slug, module_slug=module_slug, principal=principal)


@router.put(
    "/{courseSlug}/modules/{moduleSlug}",
    response_model=CourseModule,
    responses={403: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
async def update_module(
    course_slug: Annotated[str, Path(alias="courseSlug")],
    module_slug: Annotated[str, Path(alias="moduleSlug")],
    payload: UpdateCourseModuleRequest,
    principal: Annotated[Principal, Depends(require_author)],
    service: Annotated[CourseService, Depends(get_course_service)],
) -> CourseModule:
    return await service.update_module(
        course_slug=course_slug,
        module_slug=module_slug,
        principal=principal,
        payload=payload,
    )


@router.delete(
    "/{courseSlug}/modules/{moduleSlug}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
async def delete_module(
    course_slug: Annotated[str, Path(alias="courseSlug")],
    module_slug: Annotated[str, Path(alias="moduleSlug")],
    principal: Annotated[Principal, Depends(require_author)],
    service: Annotated[CourseService, Depends(get_course_service)],
) -> Response:
    await service.delete_module(course_slug=course_slug, module_slug=module_slug, principal=principal)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{courseSlug}/modules/{moduleSlug}/lessons",
    response_model=Lesson,
    status_code=status.HTTP_201_CREATED,
    responses={403: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
async def create_lesson(
    course_slug: Annotated[str, Path(alias="courseSlug")],
    module_slug: Annotated[str, Path(alias="moduleSlug")],
    payload: CreateLessonRequest,
    principal: Annotated[Principal, Depends(require_author)],
    service: Annotated[LessonService, Depends(get_lesson_service)],
) -> Lesson:
    return await service.create_lesson(
        course_slug=course_slug,
        module_slug=module_slug,
        principal=principal,
        payload=payload,
    )


@router.get(
    "/{courseSlug}/modules/{moduleSlug}/lessons",
    response_model=list[Lesson],
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": NoLeakNotFoundError},
    },
)
async def list_lessons(
    course_slug: Annotated[str, Path(alias="courseSlug")],
    module_slug: Annotated[str, Path(alias="moduleSlug")],
    principal: Annotated[Principal | None, Depends(get_optional_principal)],
    service: Annotated[LessonService, Depends(get_lesson_service)],
) -> list[Lesson]:
    return await service.list_lessons(course_slug=course_slug, module_slug=module_slug, principal=principal)


@router.get(
    "/{courseSlug}/modules/{moduleSlug}/lessons/{lessonId}",
    response_model=Lesson,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": NoLeakNotFoundError},
    },
)
async def get_lesson(
    course_slug: Annotated[str, Path(alias="courseSlug")],
    module_slug: Annotated[str, Path(alias="moduleSlug")],
    lesson_id: Annotated[str, Path(alias="lessonId")],
    principal: Annotated[Principal | None, Depends(get_optional_principal)],
    service: Annotated[LessonService, Depends(get_lesson_service)],
) -> Lesson:
    return await service.get_lesson(
        course_slug=course_slug,
        module_slug=module_slug,
        lesson_id=lesson_id,
        principal=principal,
    )


@router.put(
    "/{courseSlug}/modules/{moduleSlug}/lessons/{lessonId}",
    response_model=Lesson,
    responses={403: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
async def update_lesson(
    course_slug: Annotated[str, Path(alias="courseSlug")],
    module_slug: Annotated[str, Path(alias="moduleSlug")],
    lesson_id: Annotated[str, Path(alias="lessonId")],
    payload: UpdateLessonRequest,
    principal: Annotated[Principal, Depends(require_author)],
    service: Annotated[LessonService, Depends(get_lesson_service)],
) -> Lesson:
    return await service.update_lesson(
        course_slug=course_slug,
        module_slug=module_slug,
        lesson_id=lesson_id,
        principal=principal,
        payload=payload,
    )


@router.delete(
    "/{courseSlug}/modules/{moduleSlug}/lessons/{lessonId}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
async def delete_lesson(
    course_slug: Annotated[str, Path(alias="courseSlug")],
    module_slug: Annotated[str, Path(alias="moduleSlug")],
    lesson_id: Annotated[str, Path(alias="lessonId")],
    principal: Annotated[Principal, Depends(require_author)],
    service: Annotated[LessonService, Depends(get_lesson_service)],
) -> Response:
    await service.delete_lesson(
        course_slug=course_slug,
        module_slug=module_slug,
        lesson_id=lesson_id,
        principal=principal,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
