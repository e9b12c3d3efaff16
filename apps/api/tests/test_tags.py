"""Tag reconciliation and deletion tests."""

from __future__ import annotations

import unittest

from folio.errors import ConflictError, DatabaseError, ValidationError
from folio.repositories.memory import InMemoryStore
from folio.services.tags import TaggedContent, TagService, TagTarget, normalize_tag_names


class _ConcurrentTagStore(InMemoryStore):
    """Another writer inserts the same tag name right before our insert."""

    def __init__(self, spelling: str) -> None:
        super().__init__()
        self.spelling = spelling
        self.raced = False

    async def insert(self, table, rows):
        if table == "tags" and not self.raced:
            self.raced = True
            self.seed("tags", {"id": "tag-theirs", "name": self.spelling})
        return await super().insert(table, rows)


def _tag_names(store: InMemoryStore) -> list[str]:
    return sorted(row["name"] for row in store.rows("tags"))


class NormalizeTagNamesTests(unittest.TestCase):
    def test_trims_drops_blanks_and_keeps_first_spelling(self) -> None:
        self.assertEqual(normalize_tag_names(["Go", "go", " Go ", "", "  ", "Rust"]), ["Go", "Rust"])

    def test_none_is_empty(self) -> None:
        self.assertEqual(normalize_tag_names(None), [])


class TagReconcileTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.store = InMemoryStore()
        self.tags = TagService(self.store)
        self.course = TagTarget(TaggedContent.COURSE, "course-1")

    async def test_case_variants_collapse_to_one_tag_and_association(self) -> None:
        tag_ids = await self.tags.reconcile(["Go", "go", " Go "], self.course)

        self.assertEqual(len(tag_ids), 1)
        self.assertEqual(_tag_names(self.store), ["Go"])
        self.assertEqual(
            [(row["course_id"], row["tag_id"]) for row in self.store.rows("course_tags")],
            [("course-1", tag_ids[0])],
        )

    async def test_existing_tag_is_reused_regardless_of_case(self) -> None:
        self.store.seed("tags", {"id": "tag-go", "name": "Go"})

        tag_ids = await self.tags.reconcile(["GO"], self.course)

        self.assertEqual(tag_ids, ["tag-go"])
        self.assertEqual(_tag_names(self.store), ["Go"])

    async def test_reconcile_replaces_the_full_set(self) -> None:
        await self.tags.reconcile(["a", "b"], self.course)
        await self.tags.reconcile(["b", "c"], self.course)

        current = await self.tags.get_tags_for(self.course)
        self.assertEqual(sorted(tag.name for tag in current), ["b", "c"])
        self.assertEqual(len(self.store.rows("course_tags")), 2)
        # Tags are never garbage collected when unassociated.
        self.assertEqual(_tag_names(self.store), ["a", "b", "c"])

    async def test_empty_names_clear_associations(self) -> None:
        await self.tags.reconcile(["a"], self.course)

        self.assertEqual(await self.tags.reconcile([], self.course), [])
        self.assertEqual(self.store.rows("course_tags"), [])

    async def test_other_content_is_untouched(self) -> None:
        other = TagTarget(TaggedContent.COURSE, "course-2")
        await self.tags.reconcile(["shared"], other)

        await self.tags.reconcile(["mine"], self.course)
        await self.tags.reconcile([], self.course)

        self.assertEqual([tag.name for tag in await self.tags.get_tags_for(other)], ["shared"])

    async def test_failure_clearing_associations_aborts_before_writes(self) -> None:
        self.store.fail_next("course_tags", "delete")

        with self.assertRaises(DatabaseError):
            await self.tags.reconcile(["a"], self.course)
        self.assertEqual(self.store.rows("tags"), [])
        self.assertNotIn("course_tags", self.store.write_counts)

    async def test_failure_inserting_associations_is_database_error(self) -> None:
        self.store.fail_next("course_tags", "insert")

        with self.assertRaises(DatabaseError):
            await self.tags.reconcile(["a"], self.course)
        self.assertEqual(self.store.rows("course_tags"), [])

    async def test_concurrent_upsert_resolves_to_existing_tag(self) -> None:
        store = _ConcurrentTagStore("RUST")
        tags = TagService(store)

        with self.assertLogs("folio.services.tags", level="INFO"):
            tag_ids = await tags.reconcile(["rust"], self.course)

        self.assertEqual(tag_ids, ["tag-theirs"])
        self.assertEqual(_tag_names(store), ["RUST"])


class TagCrudTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.store = InMemoryStore()
        self.tags = TagService(self.store)

    async def test_create_returns_existing_tag(self) -> None:
        first = await self.tags.create_tag("Python")
        second = await self.tags.create_tag("  python ")

        self.assertEqual(first, second)
        self.assertEqual(_tag_names(self.store), ["Python"])

    async def test_create_rejects_blank_name(self) -> None:
        with self.assertRaises(ValidationError):
            await self.tags.create_tag("   ")

    async def test_list_is_sorted_by_name(self) -> None:
        for name in ("beta", "Alpha", "gamma"):
            await self.tags.create_tag(name)
        self.assertEqual([tag.name for tag in await self.tags.list_tags()], ["Alpha", "beta", "gamma"])

    async def test_get_tags_by_ids_preserves_requested_order(self) -> None:
        self.store.seed("tags", {"id": "t1", "name": "one"}, {"id": "t2", "name": "two"})
        tags = await self.tags.get_tags_by_ids(["t2", "missing", "t1"])
        self.assertEqual([tag.id for tag in tags], ["t2", "t1"])

    async def test_update_renames_tag(self) -> None:
        tag = await self.tags.create_tag("pyhton")
        updated = await self.tags.update_tag(tag.id, "python")
        self.assertEqual(updated, tag.model_copy(update={"name": "python"}))

    async def test_update_to_same_name_in_other_case_is_allowed(self) -> None:
        tag = await self.tags.create_tag("python")
        updated = await self.tags.update_tag(tag.id, "Python")
        self.assertIsNotNone(updated)

    async def test_update_conflict_with_other_tag(self) -> None:
        await self.tags.create_tag("Go")
        rust = await self.tags.create_tag("Rust")

        with self.assertRaises(ConflictError) as context:
            await self.tags.update_tag(rust.id, "go")
        self.assertEqual(context.exception.status_code, 409)

    async def test_update_missing_tag_returns_none(self) -> None:
        self.assertIsNone(await self.tags.update_tag("missing", "name"))

    async def test_update_missing_tag_to_taken_name_returns_none(self) -> None:
        await self.tags.create_tag("Go")
        self.assertIsNone(await self.tags.update_tag("missing", "go"))


class TagDeleteTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.store = InMemoryStore()
        self.tags = TagService(self.store)

    async def _tag_everything(self, name: str) -> str:
        [tag_id] = await self.tags.reconcile([name], TagTarget(TaggedContent.COURSE, "course-1"))
        await self.tags.reconcile([name], TagTarget(TaggedContent.PROJECT, "project-1"))
        await self.tags.reconcile([name], TagTarget(TaggedContent.ARTICLE_MODULE, "module-1"))
        return tag_id

    async def test_delete_removes_tag_and_every_association(self) -> None:
        tag_id = await self._tag_everything("python")
        keep = await self.tags.reconcile(["keep"], TagTarget(TaggedContent.COURSE, "course-1"))
        await self.tags.reconcile(["python", "keep"], TagTarget(TaggedContent.COURSE, "course-2"))

        deletion = await self.tags.delete_tag(tag_id)

        self.assertEqual(deletion.count, 1)
        self.assertIsNone(await self.tags.get_tag(tag_id))
        for content in TaggedContent:
            with self.subTest(table=content.junction_table):
                rows = self.store.rows(content.junction_table)
                self.assertFalse(any(row["tag_id"] == tag_id for row in rows))
        self.assertEqual(
            [row["tag_id"] for row in self.store.rows("course_tags")],
            [keep[0], keep[0]],
        )

    async def test_cleanup_failure_keeps_tag_and_reports_database_error(self) -> None:
        tag_id = await self._tag_everything("python")
        self.store.fail_next("project_tags", "delete")

        with self.assertLogs("folio.services.tags", level="ERROR") as logs:
            with self.assertRaises(DatabaseError) as context:
                await self.tags.delete_tag(tag_id)

        self.assertEqual(context.exception.payload.details, {"failed_cleanups": ["project_tags"]})
        self.assertIn("tags.cleanup_failed", logs.output[0])
        self.assertIn("table=project_tags", logs.output[0])
        # The other tables were still cleaned up.
        self.assertEqual(self.store.rows("course_tags"), [])
        self.assertEqual(self.store.rows("article_module_tags"), [])
        # The remaining association still points at an existing tag.
        [remaining] = self.store.rows("project_tags")
        self.assertEqual(remaining["tag_id"], tag_id)
        self.assertIsNotNone(await self.tags.get_tag(tag_id))

    async def test_failed_delete_can_be_retried(self) -> None:
        tag_id = await self._tag_everything("python")
        self.store.fail_next("project_tags", "delete")
        with self.assertLogs("folio.services.tags", level="ERROR"):
            with self.assertRaises(DatabaseError):
                await self.tags.delete_tag(tag_id)

        deletion = await self.tags.delete_tag(tag_id)

        self.assertEqual(deletion.count, 1)
        self.assertEqual(self.store.rows("project_tags"), [])
        self.assertIsNone(await self.tags.get_tag(tag_id))

    async def test_failure_deleting_tag_row_is_fatal(self) -> None:
        tag_id = await self._tag_everything("python")
        self.store.fail_next("tags", "delete")

        with self.assertLogs("folio.services.tags", level="ERROR"):
            with self.assertRaises(DatabaseError):
                await self.tags.delete_tag(tag_id)
        self.assertIsNotNone(await self.tags.get_tag(tag_id))

    async def test_deleting_missing_tag_reports_zero(self) -> None:
        with self.assertLogs("folio.services.tags", level="WARNING"):
            deletion = await self.tags.delete_tag("missing")
        self.assertEqual(deletion.count, 0)
