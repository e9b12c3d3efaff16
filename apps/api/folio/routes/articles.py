"""Article routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response, status

from folio.routes.dependencies import get_article_service, get_optional_principal, require_author
from folio.schemas.article import (
    ArticleModule,
    CreateArticleModuleRequest,
    CreateSubArticleRequest,
    SubArticle,
    UpdateArticleModuleRequest,
    UpdateSubArticleRequest,
)
from folio.schemas.auth import Principal
from folio.schemas.error import ErrorResponse, NoLeakNotFoundError
from folio.services.articles import ArticleService

router = APIRouter(prefix="/articles", tags=["Articles"])


@router.post(
    "",
    response_model=ArticleModule,
    status_code=status.HTTP_201_CREATED,
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def create_module(
    payload: CreateArticleModuleRequest,
    principal: Annotated[Principal, Depends(require_author)],
    service: Annotated[ArticleService, Depends(get_article_service)],
) -> ArticleModule:
    return await service.create_module(principal=principal, payload=payload)


@router.get("", response_model=list[ArticleModule])
async def list_modules(
    principal: Annotated[Principal | None, Depends(get_optional_principal)],
    service: Annotated[ArticleService, Depends(get_article_service)],
) -> list[ArticleModule]:
    return await service.list_modules(principal=principal)


@router.get(
    "/{moduleSlug}",
    response_model=ArticleModule,
    responses={404: {"model": NoLeakNotFoundError}},
)
async def get_module(
    module_slug: Annotated[str, Path(alias="moduleSlug")],
    principal: Annotated[Principal | None, Depends(get_optional_principal)],
    service: Annotated[ArticleService, Depends(get_article_service)],
) -> ArticleModule:
    return await service.get_module(slug=module_slug, principal=principal)


@router.put(
    "/{moduleSlug}",
    response_model=ArticleModule,
    responses={403: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
async def update_module(
    module_slug: Annotated[str, Path(alias="moduleSlug")],
    payload: UpdateArticleModuleRequest,
    principal: Annotated[Principal, Depends(require_author)],
    service: Annotated[ArticleService, Depends(get_article_service)],
) -> ArticleModule:
    return await service.update_module(slug=module_slug, principal=principal, payload=payload)


@router.post(
    "/{moduleSlug}/sub-articles",
    response_model=SubArticle,
    status_code=status.HTTP_201_CREATED,
    responses={403: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
async def create_sub_article(
    module_slug: Annotated[str, Path(alias="moduleSlug")],
    payload: CreateSubArticleRequest,
    principal: Annotated[Principal, Depends(require_author)],
    service: Annotated[ArticleService, Depends(get_article_service)],
) -> SubArticle:
    return await service.create_sub_article(module_slug=module_slug, principal=principal, payload=payload)


@router.get(
    "/{moduleSlug}/sub-articles/{subArticleSlug}",
    response_model=SubArticle,
    responses={404: {"model": NoLeakNotFoundError}},
)
async def get_sub_article(
    module_slug: Annotated[str, Path(alias="moduleSlug")],
    sub_article_slug: Annotated[str, Path(alias="subArticleSlug")],
    principal: Annotated[Principal | None, Depends(get_optional_principal)],
    service: Annotated[ArticleService, Depends(get_article_service)],
) -> SubArticle:
    return await service.get_sub_article(module_slug=module_slug, slug=sub_article_slug, principal=principal)


@router.delete(
    "/{moduleSlug}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
async def delete_module(
    module_slug: Annotated[str, Path(alias="moduleSlug")],
    principal: Annotated[Principal, Depends(require_author)],
    service: Annotated[ArticleService, Depends(get_article_service)],
) -> Response:
    await service.delete_module(slug=module_slug, principal=principal)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put(
    "/{moduleSlug}/sub-articles/{subArticleSlug}",
    response_model=SubArticle,
    responses={403: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
async def update_sub_article(
    module_slug: Annotated[str, Path(alias="moduleSlug")],
    sub_article_slug: Annotated[str, Path(alias="subArticleSlug")],
    payload: UpdateSubArticleRequest,
    principal: Annotated[Principal, Depends(require_author)],
    service: Annotated[ArticleService, Depends(get_article_service)],
) -> SubArticle:
    return await service.update_sub_article(
        module_slug=module_slug,
        slug=sub_article_slug,
        principal=principal,
        payload=payload,
    )


@router.delete(
    "/{moduleSlug}/sub-articles/{subArticleSlug}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={403: {"model": ErrorResponse}, 404: {"model": NoLeakNotFoundError}},
)
async def delete_sub_article(
    module_slug: Annotated[str, Path(alias="moduleSlug")],
    sub_article_slug: Annotated[str, Path(alias="subArticleSlug")],
    principal: Annotated[Principal, Depends(require_author)],
    service: Annotated[ArticleService, Depends(get_article_service)],
) -> Response:
    await service.delete_sub_article(module_slug=module_slug, slug=sub_article_slug, principal=principal)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
