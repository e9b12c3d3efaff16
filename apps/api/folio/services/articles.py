"""Article module and sub-article service layer."""

from __future__ import annotations

import logging

from folio.core.logging_safety import safe_log_identifier
from folio.domain.permissions import ensure_owner
from folio.domain.visibility import ensure_full_access, resolve_access
from folio.errors import NotFoundError
from folio.repositories.base import Row, eq, in_
from folio.schemas.article import (
    ArticleModule,
    CreateArticleModuleRequest,
    CreateSubArticleRequest,
    SubArticle,
    UpdateArticleModuleRequest,
    UpdateSubArticleRequest,
)
from folio.schemas.auth import Principal
from folio.schemas.content import AccessDecision
from folio.schemas.tag import Tag
from folio.services.content import ContentService, content_meta
from folio.services.slugs import SlugNamespace
from folio.services.tags import TaggedContent

logger = logging.getLogger(__name__)

TABLE_ARTICLE_MODULES = "article_modules"
TABLE_SUB_ARTICLES = "sub_articles"


class ArticleService(ContentService):
    async def create_module(self, *, principal: Principal, payload: CreateArticleModuleRequest) -> ArticleModule:
        row = await self._slugs.create_with_slug(
            payload.title,
            SlugNamespace.global_(TABLE_ARTICLE_MODULES),
            lambda slug: {
                "member_id": principal.identity_id,
                "title": payload.title,
                "description": payload.description,
                "published": payload.published,
                "verified": False,
                "updated_at": None,
            },
        )
        tags = await self._tag_new_row(
            TABLE_ARTICLE_MODULES,
            TaggedContent.ARTICLE_MODULE,
            row["id"],
            payload.tag_names,
        )
        logger.info(
            "article_module.created module_id=%s slug=%s",
            safe_log_identifier(row["id"], prefix="amd"),
            row["slug"],
        )
        return self._to_module(row, tags)

    async def list_modules(self, *, principal: Principal | None) -> list[ArticleModule]:
        rows = await self._select(TABLE_ARTICLE_MODULES, order_by="-created_at")
        modules: list[ArticleModule] = []
        for row in rows:
            if resolve_access(principal, content_meta(row)).decision is AccessDecision.NOT_FOUND:
                continue
            tags = await self._current_tags(TaggedContent.ARTICLE_MODULE, row["id"])
            modules.append(self._to_module(row, tags))
        return modules

    async def get_module(self, *, slug: str, principal: Principal | None) -> ArticleModule:
        row = await self._readable_module(slug, principal)
        tags = await self._current_tags(TaggedContent.ARTICLE_MODULE, row["id"])
        return self._to_module(row, tags)

    async def update_module(
        self,
        *,
        slug: str,
        principal: Principal,
        payload: UpdateArticleModuleRequest,
    ) -> ArticleModule:
        row = await self._require_one(TABLE_ARTICLE_MODULES, [eq("slug", slug)])
        ensure_owner(principal, row["member_id"], action="update this article module")

        changes = payload.model_dump(exclude_unset=True)
        patch = {
            key: changes[key]
            for key in ("title", "description", "published")
            if key in changes and (changes[key] is not None or key == "description")
        }
        if patch:
            row = await self._update(TABLE_ARTICLE_MODULES, [eq("id", row["id"])], patch)

        if "tag_names" in payload.model_fields_set:
            tags = await self._replace_tags(TaggedContent.ARTICLE_MODULE, row["id"], payload.tag_names)
        else:
            tags = await self._current_tags(TaggedContent.ARTICLE_MODULE, row["id"])
        return self._to_module(row, tags)

    async def create_sub_article(
        self,
        *,
        module_slug: str,
        principal: Principal,
        payload: CreateSubArticleRequest,
    ) -> SubArticle:
        module = await self._owned_module(module_slug, principal, action="add articles to this module")

        row = await self._slugs.create_with_slug(
            payload.title,
            SlugNamespace.scoped(TABLE_SUB_ARTICLES, "module_id", module["id"]),
            lambda slug: {
                "member_id": principal.identity_id,
                "title": payload.title,
                "content": payload.content,
                "updated_at": None,
            },
        )
        tags = await self._tag_new_row(TABLE_SUB_ARTICLES, TaggedContent.SUB_ARTICLE, row["id"], payload.tag_names)
        return self._to_sub_article(row, tags)

    async def get_sub_article(
        self,
        *,
        module_slug: str,
        slug: str,
        principal: Principal | None,
    ) -> SubArticle:
        module = await self._readable_module(module_slug, principal)
        row = await self._require_one(TABLE_SUB_ARTICLES, [eq("module_id", module["id"]), eq("slug", slug)])
        tags = await self._current_tags(TaggedContent.SUB_ARTICLE, row["id"])
        return self._to_sub_article(row, tags)

    async def update_sub_article(
        self,
        *,
        module_slug: str,
        slug: str,
        principal: Principal,
        payload: UpdateSubArticleRequest,
    ) -> SubArticle:
        module = await self._owned_module(module_slug, principal, action="update articles in this module")
        row = await self._require_one(TABLE_SUB_ARTICLES, [eq("module_id", module["id"]), eq("slug", slug)])

        # Slugs stay fixed when the title changes.
        changes = payload.model_dump(exclude_unset=True)
        patch = {key: changes[key] for key in ("title", "content") if changes.get(key) is not None}
        if patch:
            row = await self._update(TABLE_SUB_ARTICLES, [eq("id", row["id"])], patch)

        if "tag_names" in payload.model_fields_set:
            tags = await self._replace_tags(TaggedContent.SUB_ARTICLE, row["id"], payload.tag_names)
        else:
            tags = await self._current_tags(TaggedContent.SUB_ARTICLE, row["id"])
        return self._to_sub_article(row, tags)

    async def delete_sub_article(self, *, module_slug: str, slug: str, principal: Principal) -> None:
        module = await self._owned_module(module_slug, principal, action="delete articles from this module")
        row = await self._require_one(TABLE_SUB_ARTICLES, [eq("module_id", module["id"]), eq("slug", slug)])

        await self._delete(TaggedContent.SUB_ARTICLE.junction_table, [eq("sub_article_id", row["id"])])
        await self._delete(TABLE_SUB_ARTICLES, [eq("id", row["id"])])

    async def delete_module(self, *, slug: str, principal: Principal) -> None:
        """Delete an article module together with its sub-articles and every tag link."""
        row = await self._require_one(TABLE_ARTICLE_MODULES, [eq("slug", slug)])
        ensure_owner(principal, row["member_id"], action="delete this article module")

        sub_article_ids = [
            sub_article["id"]
            for sub_article in await self._select(TABLE_SUB_ARTICLES, [eq("module_id", row["id"])])
        ]
        if sub_article_ids:
            await self._delete(TaggedContent.SUB_ARTICLE.junction_table, [in_("sub_article_id", sub_article_ids)])
            await self._delete(TABLE_SUB_ARTICLES, [eq("module_id", row["id"])])
        await self._delete(TaggedContent.ARTICLE_MODULE.junction_table, [eq("article_module_id", row["id"])])
        await self._delete(TABLE_ARTICLE_MODULES, [eq("id", row["id"])])
        logger.info(
            "article_module.deleted module_id=%s sub_articles=%s",
            safe_log_identifier(row["id"], prefix="amd"),
            len(sub_article_ids),
        )

    async def _readable_module(self, slug: str, principal: Principal | None) -> Row:
        row = await self._require_one(TABLE_ARTICLE_MODULES, [eq("slug", slug)])
        ensure_full_access(resolve_access(principal, content_meta(row)))
        return row

    async def _owned_module(self, slug: str, principal: Principal, *, action: str) -> Row:
        row = await self._require_one(TABLE_ARTICLE_MODULES, [eq("slug", slug)])
        if resolve_access(principal, content_meta(row)).decision is AccessDecision.NOT_FOUND:
            raise NotFoundError()
        ensure_owner(principal, row["member_id"], action=action)
        return row

    @staticmethod
    def _to_module(row: Row, tags: list[Tag]) -> ArticleModule:
        return ArticleModule(
            id=row["id"],
            slug=row["slug"],
            title=row["title"],
            member_id=row["member_id"],
            published=bool(row.get("published")),
            created_at=row["created_at"],
            description=row.get("description"),
            tags=tags,
        )

    @staticmethod
    def _to_sub_article(row: Row, tags: list[Tag]) -> SubArticle:
        return SubArticle(
            id=row["id"],
            module_id=row["module_id"],
            slug=row["slug"],
            title=row["title"],
            content=row.get("content") or "",
            member_id=row["member_id"],
            created_at=row["created_at"],
            tags=tags,
        )
