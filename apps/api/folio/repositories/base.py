"""Relational store interface consumed by the services."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal

Row = dict[str, Any]
FilterOp = Literal["eq", "neq", "ieq", "in"]


class StoreError(Exception):
    """Raised when the store cannot complete an operation."""

    def __init__(self, message: str, *, table: str | None = None) -> None:
        self.table = table
        super().__init__(message)


class UniqueViolationError(StoreError):
    """Raised when a write would break a unique index."""

    def __init__(self, message: str, *, table: str, index: str) -> None:
        self.index = index
        super().__init__(message, table=table)


@dataclass(frozen=True, slots=True)
class Filter:
    column: str
    op: FilterOp
    value: Any

    def matches(self, row: Mapping[str, Any]) -> bool:
        current = row.get(self.column)
        if self.op == "eq":
            return current == self.value
        if self.op == "neq":
            return current != self.value
        if self.op == "ieq":
            return isinstance(current, str) and current.casefold() == str(self.value).casefold()
        return current in self.value


def eq(column: str, value: Any) -> Filter:
    return Filter(column, "eq", value)


def neq(column: str, value: Any) -> Filter:
    return Filter(column, "neq", value)


def ieq(column: str, value: str) -> Filter:
    """Case-insensitive text equality (``ILIKE`` without wildcards)."""
    return Filter(column, "ieq", value)


def in_(column: str, values: Iterable[Any]) -> Filter:
    return Filter(column, "in", frozenset(values))


class RelationalStore(ABC):
    """Table-scoped async CRUD against named tables with filter predicates."""

    @abstractmethod
    async def select(
        self,
        table: str,
        filters: Sequence[Filter] = (),
        *,
        columns: Sequence[str] | None = None,
        order_by: str | None = None,
        limit: int | None = None,
    ) -> list[Row]:
        """Return copies of matching rows, optionally projected to ``columns``."""

    @abstractmethod
    async def insert(self, table: str, rows: Row | Sequence[Row]) -> list[Row]:
        """Insert one or more rows and return them as stored."""

    @abstractmethod
    async def update(self, table: str, filters: Sequence[Filter], patch: Row) -> list[Row]:
        """Apply ``patch`` to matching rows and return them as stored."""

    @abstractmethod
    async def delete(self, table: str, filters: Sequence[Filter]) -> int:
        """Delete matching rows and return the number removed."""

    async def select_one(
        self,
        table: str,
        filters: Sequence[Filter] = (),
        *,
        columns: Sequence[str] | None = None,
    ) -> Row | None:
        rows = await self.select(table, filters, columns=columns, limit=1)
        return rows[0] if rows else None

    async def count(self, table: str, filters: Sequence[Filter] = ()) -> int:
        return len(await self.select(table, filters, columns=("id",)))


__all__ = [
    "Filter",
    "RelationalStore",
    "Row",
    "StoreError",
    "UniqueViolationError",
    "eq",
    "ieq",
    "in_",
    "neq",
]
