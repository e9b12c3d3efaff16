"""Portfolio project service layer."""

from __future__ import annotations

from folio.domain.permissions import ensure_owner
from folio.domain.visibility import ensure_full_access, resolve_access
from folio.repositories.base import Row, eq
from folio.schemas.auth import Principal
from folio.schemas.portfolio import (
    CreatePortfolioProjectRequest,
    PortfolioProject,
    UpdatePortfolioProjectRequest,
)
from folio.schemas.tag import Tag
from folio.services.content import ContentService, content_meta
from folio.services.slugs import SlugNamespace
from folio.services.tags import TaggedContent

TABLE_PORTFOLIO_PROJECTS = "portfolio_projects"


class PortfolioService(ContentService):
    async def create_project(
        self,
        *,
        principal: Principal,
        payload: CreatePortfolioProjectRequest,
    ) -> PortfolioProject:
        row = await self._slugs.create_with_slug(
            payload.title,
            SlugNamespace.global_(TABLE_PORTFOLIO_PROJECTS),
            lambda slug: {
                "member_id": principal.identity_id,
                "title": payload.title,
                "description": payload.description,
                "repo_url": payload.repo_url,
                "updated_at": None,
            },
        )
        tags = await self._tag_new_row(TABLE_PORTFOLIO_PROJECTS, TaggedContent.PROJECT, row["id"], payload.tag_names)
        return self._to_project(row, tags)

    async def list_projects(self, *, member_id: str | None = None) -> list[PortfolioProject]:
        filters = [eq("member_id", member_id)] if member_id else []
        rows = await self._select(TABLE_PORTFOLIO_PROJECTS, filters, order_by="-created_at")
        return [
            self._to_project(row, await self._current_tags(TaggedContent.PROJECT, row["id"]))
            for row in rows
        ]

    async def get_project(self, *, slug: str, principal: Principal | None) -> PortfolioProject:
        row = await self._require_one(TABLE_PORTFOLIO_PROJECTS, [eq("slug", slug)])
        ensure_full_access(resolve_access(principal, content_meta(row)))
        tags = await self._current_tags(TaggedContent.PROJECT, row["id"])
        return self._to_project(row, tags)

    async def update_project(
        self,
        *,
        slug: str,
        principal: Principal,
        payload: UpdatePortfolioProjectRequest,
    ) -> PortfolioProject:
        row = await self._require_one(TABLE_PORTFOLIO_PROJECTS, [eq("slug", slug)])
        ensure_owner(principal, row["member_id"], action="update this project")

        changes = payload.model_dump(exclude_unset=True)
        patch = {
            key: changes[key]
            for key in ("title", "description", "repo_url")
            if key in changes and (changes[key] is not None or key != "title")
        }
        if patch:
            row = await self._update(TABLE_PORTFOLIO_PROJECTS, [eq("id", row["id"])], patch)

        if "tag_names" in payload.model_fields_set:
            tags = await self._replace_tags(TaggedContent.PROJECT, row["id"], payload.tag_names)
        else:
            tags = await self._current_tags(TaggedContent.PROJECT, row["id"])
        return self._to_project(row, tags)

    async def delete_project(self, *, slug: str, principal: Principal) -> None:
        row = await self._require_one(TABLE_PORTFOLIO_PROJECTS, [eq("slug", slug)])
        ensure_owner(principal, row["member_id"], action="delete this project")

        await self._delete(TaggedContent.PROJECT.junction_table, [eq("project_id", row["id"])])
        await self._delete(TABLE_PORTFOLIO_PROJECTS, [eq("id", row["id"])])

    @staticmethod
    def _to_project(row: Row, tags: list[Tag]) -> PortfolioProject:
        return PortfolioProject(
            id=row["id"],
            slug=row["slug"],
            title=row["title"],
            member_id=row["member_id"],
            created_at=row["created_at"],
            updated_at=row.get("updated_at"),
            description=row.get("description"),
            repo_url=row.get("repo_url"),
            tags=tags,
        )
