"""Slug normalization and namespace-unique allocation."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import logging
import re
from typing import Any

from folio.core.logging_safety import safe_log_identifier
from folio.errors import ConflictError, DatabaseError, ValidationError
from folio.repositories.base import Filter, RelationalStore, Row, StoreError, UniqueViolationError, eq

logger = logging.getLogger(__name__)

DEFAULT_SLUG_FALLBACK = "n-a"

_WHITESPACE_RUN = re.compile(r"\s+")
_OUTSIDE_ALPHABET = re.compile(r"[^a-z0-9-]+")
_HYPHEN_RUN = re.compile(r"-{2,}")


def slugify(candidate: str, *, fallback: str = DEFAULT_SLUG_FALLBACK) -> str:
    """Normalize free text into a lowercase hyphenated slug."""
    if not isinstance(candidate, str):
        raise ValidationError(
            "Slug candidate must be text",
            details={"received_type": type(candidate).__name__},
        )

    slug = candidate.strip().lower()
    slug = _WHITESPACE_RUN.sub("-", slug)
    slug = _OUTSIDE_ALPHABET.sub("", slug)
    slug = _HYPHEN_RUN.sub("-", slug)
    slug = slug.strip("-")
    return slug or fallback


@dataclass(frozen=True, slots=True)
class SlugNamespace:
    """A table, optionally narrowed to the rows of one parent."""

    table: str
    parent_column: str | None = None
    parent_id: str | None = None

    @classmethod
    def global_(cls, table: str) -> SlugNamespace:
        return cls(table=table)

    @classmethod
    def scoped(cls, table: str, parent_column: str, parent_id: str) -> SlugNamespace:
        return cls(table=table, parent_column=parent_column, parent_id=parent_id)

    def filters(self, slug: str) -> list[Filter]:
        filters = [eq("slug", slug)]
        if self.parent_column is not None:
            filters.append(eq(self.parent_column, self.parent_id))
        return filters

    def row_scope(self) -> dict[str, Any]:
        if self.parent_column is None:
            return {}
        return {self.parent_column: self.parent_id}


class SlugAllocator:
    """Allocates slugs that are unused within a namespace.

    The probe loop is not atomic with the caller's insert. ``create_with_slug``
    therefore treats a unique-index violation as a lost race and probes again,
    a bounded number of times.
    """

    def __init__(
        self,
        store: RelationalStore,
        *,
        fallback: str = DEFAULT_SLUG_FALLBACK,
        conflict_retries: int = 3,
    ) -> None:
        self._store = store
        self._fallback = fallback
        self._conflict_retries = conflict_retries

    async def allocate(self, candidate: str, namespace: SlugNamespace) -> str:
        base = slugify(candidate, fallback=self._fallback)
        slug = base
        suffix = 1
        while await self._is_taken(slug, namespace):
            slug = f"{base}-{suffix}"
            suffix += 1
        return slug

    async def create_with_slug(
        self,
        candidate: str,
        namespace: SlugNamespace,
        build_row: Callable[[str], Row],
    ) -> Row:
        """Allocate a slug and insert ``build_row(slug)`` into the namespace table."""
        attempts = self._conflict_retries + 1
        for attempt in range(1, attempts + 1):
            slug = await self.allocate(candidate, namespace)
            row = {**build_row(slug), **namespace.row_scope(), "slug": slug}
            try:
                inserted = await self._store.insert(namespace.table, row)
            except UniqueViolationError:
                logger.warning(
                    "slug.conflict table=%s slug=%s attempt=%s max_attempts=%s",
                    namespace.table,
                    safe_log_identifier(slug, prefix="slug"),
                    attempt,
                    attempts,
                )
                continue
            except StoreError as exc:
                raise DatabaseError(f"Failed to create row in {namespace.table}") from exc
            return inserted[0]

        raise ConflictError(
            "Could not allocate a unique slug",
            details={"table": namespace.table, "candidate": slugify(candidate, fallback=self._fallback)},
        )

    async def _is_taken(self, slug: str, namespace: SlugNamespace) -> bool:
        try:
            existing = await self._store.select_one(namespace.table, namespace.filters(slug), columns=("id",))
        except StoreError as exc:
            raise DatabaseError(f"Failed to check slug availability in {namespace.table}") from exc
        return existing is not None
