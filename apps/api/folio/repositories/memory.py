"""In-memory relational store used by the API scaffold and tests."""

from __future__ import annotations

import asyncio
import copy
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal
from uuid import uuid4

from folio.repositories.base import Filter, RelationalStore, Row, StoreError, UniqueViolationError

StoreOperation = Literal["select", "insert", "update", "delete"]


@dataclass(frozen=True, slots=True)
class UniqueIndex:
    name: str
    columns: tuple[str, ...]
    case_insensitive: bool = False

    def key(self, row: Row) -> tuple[Any, ...] | None:
        values = []
        for column in self.columns:
            value = row.get(column)
            if value is None:
                return None
            if self.case_insensitive and isinstance(value, str):
                value = value.casefold()
            values.append(value)
        return tuple(values)


_JUNCTION_TABLES: dict[str, str] = {
    "article_module_tags": "article_module_id",
    "sub_article_tags": "sub_article_id",
    "project_tags": "project_id",
    "course_tags": "course_id",
}

DEFAULT_UNIQUE_INDEXES: dict[str, tuple[UniqueIndex, ...]] = {
    "tags": (UniqueIndex("tags_name_lower_key", ("name",), case_insensitive=True),),
    "courses": (UniqueIndex("courses_slug_key", ("slug",)),),
    "course_modules": (UniqueIndex("course_modules_course_id_slug_key", ("course_id", "slug")),),
    "article_modules": (UniqueIndex("article_modules_slug_key", ("slug",)),),
    "sub_articles": (UniqueIndex("sub_articles_module_id_slug_key", ("module_id", "slug")),),
    "portfolio_projects": (UniqueIndex("portfolio_projects_slug_key", ("slug",)),),
    "likes": (UniqueIndex("likes_user_content_key", ("user_id", "content_type", "content_id")),),
    **{
        table: (UniqueIndex(f"{table}_pkey", (content_column, "tag_id")),)
        for table, content_column in _JUNCTION_TABLES.items()
    },
}


@dataclass(slots=True)
class InMemoryStore(RelationalStore):
    """Simple, deterministic persistence layer for scaffolding and tests.

    Rows are plain dicts keyed by table name. Unique indexes are enforced on
    insert and update; there are no foreign keys and therefore no cascades.
    """

    tables: dict[str, list[Row]] = field(default_factory=dict)
    unique_indexes: dict[str, tuple[UniqueIndex, ...]] = field(
        default_factory=lambda: dict(DEFAULT_UNIQUE_INDEXES)
    )
    write_counts: dict[str, int] = field(default_factory=dict)
    failpoints: dict[tuple[str, StoreOperation], str] = field(default_factory=dict)

    def fail_next(self, table: str, operation: StoreOperation, message: str = "Injected store failure") -> None:
        """Make the next ``operation`` against ``table`` raise ``StoreError``."""
        self.failpoints[(table, operation)] = message

    def rows(self, table: str) -> list[Row]:
        """Synchronous view of a table for fixtures and assertions."""
        return self.tables.setdefault(table, [])

    def seed(self, table: str, *rows: Row) -> list[Row]:
        stored = [self._with_defaults(row) for row in rows]
        self.rows(table).extend(stored)
        return stored

    async def select(
        self,
        table: str,
        filters: Sequence[Filter] = (),
        *,
        columns: Sequence[str] | None = None,
        order_by: str | None = None,
        limit: int | None = None,
    ) -> list[Row]:
        await self._enter(table, "select")
        matched = [row for row in self.rows(table) if all(f.matches(row) for f in filters)]
        if order_by:
            descending = order_by.startswith("-")
            column = order_by.lstrip("-")
            matched.sort(key=lambda row: _sort_key(row.get(column)), reverse=descending)
        if limit is not None:
            matched = matched[:limit]
        if columns is None:
            return [copy.deepcopy(row) for row in matched]
        return [{column: copy.deepcopy(row.get(column)) for column in columns} for row in matched]

    async def insert(self, table: str, rows: Row | Sequence[Row]) -> list[Row]:
        await self._enter(table, "insert")
        batch = [rows] if isinstance(rows, dict) else list(rows)
        prepared = [self._with_defaults(row) for row in batch]

        existing = self.rows(table)
        pending: list[Row] = []
        for row in prepared:
            self._check_unique(table, row, against=[*existing, *pending])
            pending.append(row)

        existing.extend(pending)
        self.write_counts[table] = self.write_counts.get(table, 0) + 1
        return [copy.deepcopy(row) for row in pending]

    async def update(self, table: str, filters: Sequence[Filter], patch: Row) -> list[Row]:
        await self._enter(table, "update")
        existing = self.rows(table)
        targets = [row for row in existing if all(f.matches(row) for f in filters)]
        if not targets:
            return []

        candidates = [{**row, **patch} for row in targets]
        untouched = [row for row in existing if not any(row is target for target in targets)]
        checked: list[Row] = []
        for candidate in candidates:
            self._check_unique(table, candidate, against=[*untouched, *checked])
            checked.append(candidate)

        for target, candidate in zip(targets, candidates):
            target.update(candidate)
        self.write_counts[table] = self.write_counts.get(table, 0) + 1
        return [copy.deepcopy(row) for row in targets]

    async def delete(self, table: str, filters: Sequence[Filter]) -> int:
        await self._enter(table, "delete")
        existing = self.rows(table)
        kept = [row for row in existing if not all(f.matches(row) for f in filters)]
        removed = len(existing) - len(kept)
        if removed:
            self.tables[table] = kept
            self.write_counts[table] = self.write_counts.get(table, 0) + 1
        return removed

    async def _enter(self, table: str, operation: StoreOperation) -> None:
        # Every store call is a suspension point, as with a networked backend.
        await asyncio.sleep(0)
        message = self.failpoints.pop((table, operation), None)
        if message is not None:
            raise StoreError(message, table=table)

    def _check_unique(self, table: str, row: Row, *, against: Sequence[Row]) -> None:
        for index in self.unique_indexes.get(table, ()):
            key = index.key(row)
            if key is None:
                continue
            if any(index.key(other) == key for other in against):
                raise UniqueViolationError(
                    f"duplicate key value violates unique constraint {index.name!r}",
                    table=table,
                    index=index.name,
                )

    @staticmethod
    def _with_defaults(row: Row) -> Row:
        prepared = copy.deepcopy(dict(row))
        prepared.setdefault("id", str(uuid4()))
        prepared.setdefault("created_at", datetime.now(UTC))
        return prepared


def _sort_key(value: Any) -> tuple[int, Any]:
    if value is None:
        return (1, "")
    if isinstance(value, str):
        return (0, value.casefold())
    return (0, value)


__all__ = ["DEFAULT_UNIQUE_INDEXES", "InMemoryStore", "StoreOperation", "UniqueIndex"]
