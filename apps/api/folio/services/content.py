"""Shared plumbing for content services."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime
import logging

from folio.core.logging_safety import safe_log_identifier
from folio.errors import ApiError, ConflictError, DatabaseError, NotFoundError
from folio.repositories.base import Filter, RelationalStore, Row, StoreError, UniqueViolationError, eq
from folio.schemas.content import ContentMeta
from folio.schemas.tag import Tag
from folio.services.slugs import SlugAllocator
from folio.services.tags import TagService, TagTarget, TaggedContent

logger = logging.getLogger(__name__)


def content_meta(row: Row) -> ContentMeta:
    """Project a content row onto the fields access decisions depend on."""
    return ContentMeta(
        owner_id=row["member_id"],
        published=bool(row.get("published", True)),
        is_paid=bool(row.get("is_paid", False)),
    )


def utcnow() -> datetime:
    return datetime.now(UTC)


class ContentService:
    """Store access with ``StoreError`` translated to the API error taxonomy."""

    def __init__(self, store: RelationalStore, slugs: SlugAllocator, tags: TagService) -> None:
        self._store = store
        self._slugs = slugs
        self._tags = tags

    async def _select(
        self,
        table: str,
        filters: Sequence[Filter] = (),
        *,
        order_by: str | None = None,
    ) -> list[Row]:
        try:
            return await self._store.select(table, filters, order_by=order_by)
        except StoreError as exc:
            raise DatabaseError(f"Failed to fetch rows from {table}") from exc

    async def _select_one(self, table: str, filters: Sequence[Filter]) -> Row | None:
        try:
            return await self._store.select_one(table, filters)
        except StoreError as exc:
            raise DatabaseError(f"Failed to fetch row from {table}") from exc

    async def _require_one(self, table: str, filters: Sequence[Filter]) -> Row:
        row = await self._select_one(table, filters)
        if row is None:
            raise NotFoundError()
        return row

    async def _update(self, table: str, filters: Sequence[Filter], patch: Row) -> Row:
        try:
            rows = await self._store.update(table, filters, {**patch, "updated_at": utcnow()})
        except UniqueViolationError as exc:
            raise ConflictError(f"Update conflicts with an existing row in {table}") from exc
        except StoreError as exc:
            raise DatabaseError(f"Failed to update row in {table}") from exc
        if not rows:
            raise NotFoundError()
        return rows[0]

    async def _delete(self, table: str, filters: Sequence[Filter]) -> int:
        try:
            return await self._store.delete(table, filters)
        except StoreError as exc:
            raise DatabaseError(f"Failed to delete rows from {table}") from exc

    async def _replace_tags(
        self,
        content: TaggedContent,
        content_id: str,
        names: Sequence[str] | None,
    ) -> list[Tag]:
        tag_ids = await self._tags.reconcile(names, TagTarget(content, content_id))
        return await self._tags.get_tags_by_ids(tag_ids)

    async def _current_tags(self, content: TaggedContent, content_id: str) -> list[Tag]:
        return await self._tags.get_tags_for(TagTarget(content, content_id))

    async def _tag_new_row(
        self,
        table: str,
        content: TaggedContent,
        row_id: str,
        names: Sequence[str] | None,
    ) -> list[Tag]:
        """Tag a row inserted by the current request, removing it again if tagging fails."""
        try:
            return await self._replace_tags(content, row_id, names)
        except ApiError:
            try:
                await self._store.delete(content.junction_table, [eq(content.content_column, row_id)])
                await self._store.delete(table, [eq("id", row_id)])
            except StoreError as exc:
                logger.error(
                    "content.rollback_failed table=%s row_id=%s error=%s",
                    table,
                    safe_log_identifier(row_id, prefix="row"),
                    exc,
                )
            else:
                logger.warning(
                    "content.rolled_back table=%s row_id=%s",
                    table,
                    safe_log_identifier(row_id, prefix="row"),
                )
            raise
