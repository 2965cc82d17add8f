import tempfile
import unittest
from pathlib import Path

import pydantic
from sqlalchemy import text
from sqlalchemy.pool import NullPool

from core.database import build_engine, build_session_factory
from core.exceptions import AppError, NotFoundError, StoreError, ValidationError
from core.store import RecordStore
from schemas.project import ProjectCreate, ProjectUpdate
from services.contribution_service import ContributionService
from services.project_service import ProjectService
from store_fixtures import StoreTestCase


class ProjectServiceTests(StoreTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.service = ProjectService(self.store)

    async def test_create_and_update_project(self):
        project = await self.service.create_project(ProjectCreate(
            title="Youth Camp",
            description="Send forty young people to camp",
            deadline="August 2025",
            target_amount=2500,
            category="youth",
        ))

        self.assertEqual(project.status, "draft")
        self.assertEqual(project.current_amount, 0)

        updated = await self.service.update_project(project.id, ProjectUpdate(status="active", featured=True))
        self.assertEqual(updated.status, "active")
        self.assertTrue(updated.featured)
        self.assertEqual(updated.title, "Youth Camp")

    def test_update_payload_refuses_funding_totals(self):
        with self.assertRaises(pydantic.ValidationError):
            ProjectUpdate(current_amount=100)
        with self.assertRaises(pydantic.ValidationError):
            ProjectUpdate(contributors=4)
        with self.assertRaises(pydantic.ValidationError):
            ProjectUpdate(target_amount=0)

    def test_update_payload_refuses_null_for_required_fields(self):
        for field in ("title", "description", "target_amount", "featured", "status"):
            with self.assertRaises(pydantic.ValidationError, msg=field):
                ProjectUpdate(**{field: None})

        cleared = ProjectUpdate(image=None)
        self.assertEqual(cleared.model_dump(exclude_unset=True), {"image": None})
        self.assertEqual(ProjectUpdate().model_dump(exclude_unset=True), {})

    async def test_missing_project(self):
        with self.assertRaises(NotFoundError):
            await self.service.get_project_by_id("missing")

    async def test_featured_project_is_none_when_nothing_is_featured(self):
        await self.add_project(featured=False)
        await self.add_project(featured=True, status="draft")

        self.assertIsNone(await self.service.get_featured_project())

    async def test_featured_project(self):
        await self.add_project(title="Plain")
        featured = await self.add_project(title="Roof", featured=True)

        project = await self.service.get_featured_project()

        self.assertEqual(project.id, featured.id)

    async def test_projects_by_category_only_lists_active(self):
        await self.add_project(title="Organ", category="music")
        await self.add_project(title="Hymnals", category="music", status="completed")
        await self.add_project(title="Roof", category="building")

        projects = await self.service.get_projects_by_category("music")

        self.assertEqual([p.title for p in projects], ["Organ"])

    async def test_restrict_policy_refuses_delete_with_contributions(self):
        project = await self.add_project()
        await self.store.insert("contributions", {
            "project_id": project.id, "amount": 10, "payment_method": "paypal",
        })

        with self.assertRaises(ValidationError):
            await self.service.delete_project(project.id, policy="restrict")

        self.assertEqual((await self.service.get_project_by_id(project.id)).id, project.id)

    async def test_failed_cascade_keeps_project_and_totals_consistent(self):
        project = await self.add_project()
        await ContributionService(self.store).record_contribution(project.id, 40, "paypal")
        await self.store.insert("content_submissions", {
            "project_id": project.id, "title": "Testimony", "content": "Grateful", "content_type": "testimonial",
        })
        async with self.engine.begin() as conn:
            await conn.execute(text(
                "CREATE TRIGGER keep_submissions BEFORE DELETE ON content_submissions "
                "BEGIN SELECT RAISE(ABORT, 'submissions are locked'); END"
            ))

        with self.assertRaises(AppError):
            await self.service.delete_project(project.id, policy="cascade")

        survivor = await self.service.get_project_by_id(project.id)
        self.assertEqual((survivor.current_amount, survivor.contributors), (40, 1))
        self.assertEqual(await self.store.count("contributions", {"project_id": project.id}), 1)

    async def test_cascade_policy_removes_dependents(self):
        project = await self.add_project()
        await self.store.insert("contributions", {
            "project_id": project.id, "amount": 10, "payment_method": "paypal",
        })
        submission = await self.store.insert("content_submissions", {
            "project_id": project.id, "title": "Testimony", "content": "Grateful", "content_type": "testimonial",
        })
        await self.store.insert("content_submission_files", {
            "submission_id": submission.id, "file_name": "photo.jpg", "file_url": "/storage/photo.jpg",
        })

        self.assertTrue(await self.service.delete_project(project.id, policy="cascade"))

        self.assertEqual(await self.store.count("contributions"), 0)
        self.assertEqual(await self.store.count("content_submissions"), 0)
        self.assertEqual(await self.store.count("content_submission_files"), 0)
        with self.assertRaises(NotFoundError):
            await self.service.get_project_by_id(project.id)

    async def test_delete_project_without_dependents(self):
        project = await self.add_project()

        self.assertTrue(await self.service.delete_project(project.id))
        with self.assertRaises(NotFoundError):
            await self.service.delete_project(project.id)


class UnreachableStoreTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        # Parent directory does not exist, so every connection attempt fails
        url = f"sqlite+aiosqlite:///{Path(self.tmp.name) / 'missing' / 'test.db'}"
        self.engine = build_engine(url, poolclass=NullPool)
        store = RecordStore(build_session_factory(self.engine), read_retries=1, retry_backoff=0)
        self.service = ProjectService(store)

    async def asyncTearDown(self):
        await self.engine.dispose()
        self.tmp.cleanup()

    async def test_featured_project_surfaces_store_failure(self):
        with self.assertRaises(StoreError) as ctx:
            await self.service.get_featured_project()
        self.assertNotIsInstance(ctx.exception, NotFoundError)

    async def test_lookup_surfaces_store_failure(self):
        with self.assertRaises(StoreError):
            await self.service.get_project_by_id("any")


if __name__ == "__main__":
    unittest.main()
