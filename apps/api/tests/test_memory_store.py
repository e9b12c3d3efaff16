"""In-memory store behaviour the services rely on."""

from __future__ import annotations

import unittest

from folio.repositories.base import StoreError, UniqueViolationError, eq, ieq, in_, neq
from folio.repositories.memory import InMemoryStore


class InMemoryStoreTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.store = InMemoryStore()

    async def test_filters(self) -> None:
        self.store.seed("tags", {"id": "1", "name": "Go"}, {"id": "2", "name": "Rust"}, {"id": "3", "name": "Zig"})

        self.assertEqual([r["id"] for r in await self.store.select("tags", [ieq("name", "go")])], ["1"])
        self.assertEqual([r["id"] for r in await self.store.select("tags", [neq("id", "1")], order_by="id")], ["2", "3"])
        self.assertEqual(
            [r["id"] for r in await self.store.select("tags", [in_("id", ["3", "1"])], order_by="-id")],
            ["3", "1"],
        )
        self.assertEqual(await self.store.count("tags", [eq("name", "Go")]), 1)

    async def test_projection_returns_only_requested_columns(self) -> None:
        self.store.seed("members", {"id": "m1", "permission": "admin", "email": "a@example.com"})
        row = await self.store.select_one("members", [eq("id", "m1")], columns=("id", "permission"))
        self.assertEqual(row, {"id": "m1", "permission": "admin"})

    async def test_returned_rows_are_copies(self) -> None:
        self.store.seed("tags", {"id": "1", "name": "Go"})
        row = await self.store.select_one("tags", [eq("id", "1")])
        assert row is not None
        row["name"] = "mutated"
        self.assertEqual(self.store.rows("tags")[0]["name"], "Go")

    async def test_case_insensitive_unique_index(self) -> None:
        await self.store.insert("tags", {"name": "Go"})
        with self.assertRaises(UniqueViolationError) as context:
            await self.store.insert("tags", {"name": "GO"})
        self.assertEqual(context.exception.index, "tags_name_lower_key")
        self.assertEqual(len(self.store.rows("tags")), 1)

    async def test_batch_insert_is_all_or_nothing(self) -> None:
        with self.assertRaises(UniqueViolationError):
            await self.store.insert("course_tags", [{"course_id": "c", "tag_id": "t"}, {"course_id": "c", "tag_id": "t"}])
        self.assertEqual(self.store.rows("course_tags"), [])

    async def test_scoped_unique_index_allows_same_slug_in_other_parent(self) -> None:
        await self.store.insert("course_modules", {"course_id": "a", "slug": "intro"})
        await self.store.insert("course_modules", {"course_id": "b", "slug": "intro"})
        with self.assertRaises(UniqueViolationError):
            await self.store.insert("course_modules", {"course_id": "a", "slug": "intro"})

    async def test_update_checks_unique_indexes(self) -> None:
        await self.store.insert("courses", [{"id": "1", "slug": "a"}, {"id": "2", "slug": "b"}])
        with self.assertRaises(UniqueViolationError):
            await self.store.update("courses", [eq("id", "2")], {"slug": "a"})
        self.assertEqual(await self.store.update("courses", [eq("id", "missing")], {"slug": "c"}), [])

    async def test_delete_has_no_cascade(self) -> None:
        self.store.seed("tags", {"id": "t", "name": "Go"})
        self.store.seed("course_tags", {"course_id": "c", "tag_id": "t"})

        self.assertEqual(await self.store.delete("tags", [eq("id", "t")]), 1)
        self.assertEqual(len(self.store.rows("course_tags")), 1)

    async def test_failpoint_fires_once(self) -> None:
        self.store.fail_next("tags", "select", "connection reset")
        with self.assertRaises(StoreError) as context:
            await self.store.select("tags")
        self.assertEqual(str(context.exception), "connection reset")
        self.assertEqual(context.exception.table, "tags")
        self.assertEqual(await self.store.select("tags"), [])
