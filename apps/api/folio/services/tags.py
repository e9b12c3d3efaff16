"""Tag entities and their content associations."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
import logging

from folio.core.logging_safety import safe_log_count, safe_log_identifier
from folio.errors import ConflictError, DatabaseError, ValidationError
from folio.repositories.base import RelationalStore, Row, StoreError, UniqueViolationError, eq, ieq, in_, neq
from folio.schemas.tag import Tag, TagDeletion

logger = logging.getLogger(__name__)

TABLE_TAGS = "tags"


class TaggedContent(str, Enum):
    """Content types that carry tags, valued by their junction table."""

    ARTICLE_MODULE = "article_module_tags"
    SUB_ARTICLE = "sub_article_tags"
    PROJECT = "project_tags"
    COURSE = "course_tags"

    @property
    def junction_table(self) -> str:
        return self.value

    @property
    def content_column(self) -> str:
        return _CONTENT_COLUMNS[self]


_CONTENT_COLUMNS: dict[TaggedContent, str] = {
    TaggedContent.ARTICLE_MODULE: "article_module_id",
    TaggedContent.SUB_ARTICLE: "sub_article_id",
    TaggedContent.PROJECT: "project_id",
    TaggedContent.COURSE: "course_id",
}


@dataclass(frozen=True, slots=True)
class TagTarget:
    """One content row whose tag associations are being read or replaced."""

    content: TaggedContent
    content_id: str


def normalize_tag_names(names: Iterable[str] | None) -> list[str]:
    """Trim, drop blanks and de-duplicate case-insensitively, keeping first spelling."""
    seen: set[str] = set()
    normalized: list[str] = []
    for name in names or ():
        trimmed = name.strip()
        if not trimmed:
            continue
        key = trimmed.casefold()
        if key in seen:
            continue
        seen.add(key)
        normalized.append(trimmed)
    return normalized


class TagService:
    def __init__(self, store: RelationalStore, *, conflict_retries: int = 1) -> None:
        self._store = store
        self._conflict_retries = conflict_retries

    async def reconcile(self, names: Sequence[str] | None, target: TagTarget) -> list[str]:
        """Replace every tag association of ``target`` with tags named ``names``.

        Associations are cleared before anything is added, so an interrupted
        call leaves the content untagged rather than with stale duplicates.
        """
        table = target.content.junction_table
        column = target.content.content_column
        try:
            await self._store.delete(table, [eq(column, target.content_id)])
        except StoreError as exc:
            raise DatabaseError(f"Failed to clear old tags in {table}") from exc

        unique_names = normalize_tag_names(names)
        if not unique_names:
            return []

        tag_ids: list[str] = []
        for name in unique_names:
            tag = await self._upsert(name)
            if tag.id not in tag_ids:
                tag_ids.append(tag.id)

        associations = [{column: target.content_id, "tag_id": tag_id} for tag_id in tag_ids]
        try:
            await self._store.insert(table, associations)
        except StoreError as exc:
            raise DatabaseError(f"Failed to insert new tags in {table}") from exc

        logger.info(
            "tags.reconciled table=%s content_id=%s requested=%s associated=%s",
            table,
            safe_log_identifier(target.content_id, prefix="cid"),
            safe_log_count(names),
            len(tag_ids),
        )
        return tag_ids

    async def create_tag(self, name: str) -> Tag:
        """Create a tag, or return the existing one with the same name in any case."""
        trimmed = name.strip()
        if not trimmed:
            raise ValidationError("Tag name cannot be empty")
        return await self._upsert(trimmed)

    async def list_tags(self) -> list[Tag]:
        try:
            rows = await self._store.select(TABLE_TAGS, columns=("id", "name"), order_by="name")
        except StoreError as exc:
            raise DatabaseError("Failed to fetch tags") from exc
        return [_to_tag(row) for row in rows]

    async def get_tag(self, tag_id: str) -> Tag | None:
        row = await self._find_one([eq("id", tag_id)])
        return _to_tag(row) if row is not None else None

    async def get_tags_by_ids(self, tag_ids: Sequence[str]) -> list[Tag]:
        if not tag_ids:
            return []
        try:
            rows = await self._store.select(TABLE_TAGS, [in_("id", tag_ids)], columns=("id", "name"))
        except StoreError as exc:
            raise DatabaseError("Failed to fetch tags by ids") from exc
        by_id = {row["id"]: _to_tag(row) for row in rows}
        return [by_id[tag_id] for tag_id in tag_ids if tag_id in by_id]

    async def get_tags_for(self, target: TagTarget) -> list[Tag]:
        table = target.content.junction_table
        try:
            relations = await self._store.select(
                table,
                [eq(target.content.content_column, target.content_id)],
                columns=("tag_id",),
            )
        except StoreError as exc:
            raise DatabaseError(f"Failed to fetch tag associations from {table}") from exc
        return await self.get_tags_by_ids([relation["tag_id"] for relation in relations])

    async def update_tag(self, tag_id: str, name: str) -> Tag | None:
        trimmed = name.strip()
        if not trimmed:
            raise ValidationError("Tag name cannot be empty")

        if await self._find_one([eq("id", tag_id)]) is None:
            return None

        conflicting = await self._find_one([ieq("name", trimmed), neq("id", tag_id)])
        if conflicting is not None:
            raise ConflictError(
                f'Another tag with the name "{trimmed}" already exists.',
                details={"tag_id": conflicting["id"]},
            )

        try:
            updated = await self._store.update(TABLE_TAGS, [eq("id", tag_id)], {"name": trimmed})
        except UniqueViolationError as exc:
            raise ConflictError(f'Another tag with the name "{trimmed}" already exists.') from exc
        except StoreError as exc:
            raise DatabaseError("Failed to update tag") from exc
        return _to_tag(updated[0]) if updated else None

    async def delete_tag(self, tag_id: str) -> TagDeletion:
        """Delete a tag after removing it from every junction table.

        The store has no cascading foreign keys, so the association cleanup
        here is the only thing keeping junction rows from dangling. Every
        table is attempted even when one fails; if any cleanup failed the tag
        row is kept so the delete can be retried.
        """
        junction_tables = [content.junction_table for content in TaggedContent]
        results = await asyncio.gather(
            *(self._store.delete(table, [eq("tag_id", tag_id)]) for table in junction_tables),
            return_exceptions=True,
        )

        failed_cleanups: list[str] = []
        for table, result in zip(junction_tables, results):
            if isinstance(result, StoreError):
                failed_cleanups.append(table)
                logger.error(
                    "tags.cleanup_failed tag_id=%s table=%s error=%s",
                    safe_log_identifier(tag_id, prefix="tid"),
                    table,
                    result,
                )
            elif isinstance(result, BaseException):
                raise result

        if failed_cleanups:
            raise DatabaseError(
                "Failed to remove tag associations",
                details={"failed_cleanups": failed_cleanups},
            )

        try:
            count = await self._store.delete(TABLE_TAGS, [eq("id", tag_id)])
        except StoreError as exc:
            logger.error(
                "tags.delete_failed tag_id=%s error=%s",
                safe_log_identifier(tag_id, prefix="tid"),
                exc,
            )
            raise DatabaseError("Failed to delete tag") from exc

        if count == 0:
            logger.warning("tags.delete_missing tag_id=%s", safe_log_identifier(tag_id, prefix="tid"))
        return TagDeletion(count=count)

    async def _upsert(self, name: str) -> Tag:
        for _ in range(self._conflict_retries + 1):
            existing = await self._find_one([ieq("name", name)])
            if existing is not None:
                return _to_tag(existing)

            try:
                inserted = await self._store.insert(TABLE_TAGS, {"name": name})
            except UniqueViolationError:
                # Another request created the same name between lookup and insert.
                logger.info("tags.upsert_conflict name=%s", safe_log_identifier(name.casefold(), prefix="tag"))
                continue
            except StoreError as exc:
                raise DatabaseError("Failed to create tag") from exc
            return _to_tag(inserted[0])

        raise ConflictError(f'Tag "{name}" could not be created or resolved.')

    async def _find_one(self, filters) -> Row | None:
        try:
            return await self._store.select_one(TABLE_TAGS, filters, columns=("id", "name"))
        except StoreError as exc:
            raise DatabaseError("Failed to look up tag") from exc


def _to_tag(row: Row) -> Tag:
    return Tag(id=row["id"], name=row["name"])
