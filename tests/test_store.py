import unittest

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, OperationalError

from core.constants import MULTIPLE_ROWS_CODE, NOT_FOUND_CODE
from core.exceptions import AppError, NotFoundError, StoreError, ValidationError
from store_fixtures import StoreTestCase


class RecordStoreTests(StoreTestCase):
    async def test_select_one_missing_row_is_not_found(self):
        with self.assertRaises(NotFoundError) as ctx:
            await self.store.select_one("projects", {"id": "missing"})

        self.assertEqual(ctx.exception.code, NOT_FOUND_CODE)
        self.assertNotIsInstance(ctx.exception, StoreError)

    async def test_select_one_with_several_matches(self):
        await self.add_project(title="A")
        await self.add_project(title="B")

        with self.assertRaises(StoreError) as ctx:
            await self.store.select_one("projects", {"category": "building"})
        self.assertEqual(ctx.exception.code, MULTIPLE_ROWS_CODE)

    async def test_unknown_table_and_column(self):
        with self.assertRaises(StoreError):
            await self.store.select("sermons")
        with self.assertRaises(StoreError):
            await self.store.select("projects", {"colour": "blue"})

    async def test_select_filters_order_and_limit(self):
        await self.add_project(title="Roof", category="building")
        await self.add_project(title="Choir robes", category="music")
        await self.add_project(title="Organ", category="music")

        music = await self.store.select("projects", {"category": "music"}, order_by="title")
        self.assertEqual([p.title for p in music], ["Choir robes", "Organ"])

        both = await self.store.select("projects", {"title": ["Roof", "Organ"]}, order_by="title", descending=True)
        self.assertEqual([p.title for p in both], ["Roof", "Organ"])

        first = await self.store.select("projects", order_by="title", limit=1)
        self.assertEqual(len(first), 1)
        self.assertEqual(await self.store.count("projects"), 3)

    async def test_insert_applies_defaults(self):
        project = await self.add_project()

        self.assertEqual(len(project.id), 36)
        self.assertEqual(project.current_amount, 0)
        self.assertEqual(project.contributors, 0)
        self.assertIsNotNone(project.created_at)

    async def test_foreign_key_violation_is_validation_error(self):
        with self.assertRaises(ValidationError) as ctx:
            await self.store.insert("contributions", {
                "project_id": "missing",
                "amount": 10,
                "payment_method": "paypal",
            })

        self.assertEqual(ctx.exception.code, "FOREIGN_KEY_VIOLATION")
        self.assertIsInstance(ctx.exception.__cause__, IntegrityError)
        self.assertNotIn("INSERT", ctx.exception.message)
        self.assertNotIn("missing", ctx.exception.message)

    async def test_not_null_violation_is_validation_error(self):
        project = await self.add_project()

        with self.assertRaises(ValidationError) as ctx:
            await self.store.update("projects", project.id, {"title": None})

        self.assertEqual(ctx.exception.code, "CONSTRAINT_VIOLATION")
        self.assertNotIn("UPDATE", ctx.exception.message)

    async def test_update_with_stale_expectation_does_not_write(self):
        project = await self.add_project(status="draft")

        with self.assertRaises(NotFoundError):
            await self.store.update("projects", project.id, {"status": "completed"}, expected={"status": "active"})

        fresh = await self.store.select_one("projects", {"id": project.id})
        self.assertEqual(fresh.status, "draft")

        updated = await self.store.update("projects", project.id, {"status": "active"}, expected={"status": "draft"})
        self.assertEqual(updated.status, "active")

    async def test_update_missing_row(self):
        with self.assertRaises(NotFoundError):
            await self.store.update("projects", "missing", {"title": "x"})

    async def test_increment_adds_to_current_value(self):
        project = await self.add_project()

        await self.store.increment("projects", project.id, {"current_amount": 20, "contributors": 1})
        updated = await self.store.increment("projects", project.id, {"current_amount": 5.5, "contributors": 1})

        self.assertEqual(updated.current_amount, 25.5)
        self.assertEqual(updated.contributors, 2)

    async def test_insert_many_ignoring_conflicts_is_repeatable(self):
        await self.add_user("ama")
        await self.add_user("kofi")
        notification = await self.store.insert("notifications", {
            "title": "Harvest", "message": "Harvest service on Sunday", "type": "event",
        })
        rows = [
            {"notification_id": notification.id, "user_id": "ama"},
            {"notification_id": notification.id, "user_id": "kofi"},
        ]
        conflict_keys = ("notification_id", "user_id")

        self.assertEqual(await self.store.insert_many("notification_recipients", rows, conflict_keys), 2)
        self.assertEqual(await self.store.insert_many("notification_recipients", rows, conflict_keys), 0)
        self.assertEqual(await self.store.count("notification_recipients"), 2)
        self.assertEqual(await self.store.insert_many("notification_recipients", []), 0)

    async def test_delete(self):
        project = await self.add_project()

        self.assertTrue(await self.store.delete("projects", project.id))
        self.assertFalse(await self.store.delete("projects", project.id))

        with self.assertRaises(StoreError):
            await self.store.delete_where("projects", {})

    async def test_delete_cascade_removes_children_and_parent(self):
        project = await self.add_project()
        other = await self.add_project(title="Other")
        for target in (project, project, other):
            await self.store.insert("contributions", {
                "project_id": target.id, "amount": 10, "payment_method": "paypal",
            })

        removed = await self.store.delete_cascade("projects", project.id, {"contributions": "project_id"})

        self.assertEqual(removed, 2)
        self.assertEqual(await self.store.count("projects"), 1)
        self.assertEqual(await self.store.count("contributions", {"project_id": other.id}), 1)

        with self.assertRaises(NotFoundError):
            await self.store.delete_cascade("projects", project.id, {"contributions": "project_id"})

    async def test_delete_cascade_rolls_back_on_failure(self):
        project = await self.add_project()
        await self.store.insert("contributions", {
            "project_id": project.id, "amount": 10, "payment_method": "paypal",
        })
        await self.store.insert("content_submissions", {
            "project_id": project.id, "title": "Testimony", "content": "Grateful", "content_type": "testimonial",
        })
        async with self.engine.begin() as conn:
            await conn.execute(text(
                "CREATE TRIGGER keep_submissions BEFORE DELETE ON content_submissions "
                "BEGIN SELECT RAISE(ABORT, 'submissions are locked'); END"
            ))

        with self.assertRaises(AppError):
            await self.store.delete_cascade(
                "projects", project.id, {"contributions": "project_id", "content_submissions": "project_id"}
            )

        self.assertEqual(await self.store.count("projects"), 1)
        self.assertEqual(await self.store.count("contributions"), 1)
        self.assertEqual(await self.store.count("content_submissions"), 1)


class ReadRetryTests(StoreTestCase):
    async def test_transient_failure_is_retried(self):
        calls = []

        async def flaky():
            calls.append(1)
            if len(calls) == 1:
                raise OperationalError("SELECT 1", {}, ConnectionError("connection reset"))
            return "ok"

        self.assertEqual(await self.store._read("projects", flaky), "ok")
        self.assertEqual(len(calls), 2)

    async def test_retries_are_bounded(self):
        calls = []

        async def down():
            calls.append(1)
            raise OperationalError("SELECT 1", {}, ConnectionError("connection refused"))

        with self.assertRaises(StoreError) as ctx:
            await self.store._read("projects", down)

        self.assertTrue(ctx.exception.transient)
        self.assertEqual(len(calls), self.store.read_retries + 1)

    async def test_not_found_is_never_retried(self):
        calls = []

        async def empty():
            calls.append(1)
            raise NotFoundError("projects", {"id": "x"})

        with self.assertRaises(NotFoundError):
            await self.store._read("projects", empty)
        self.assertEqual(len(calls), 1)


if __name__ == "__main__":
    unittest.main()
