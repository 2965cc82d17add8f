import asyncio
import unittest

from core.exceptions import IllegalTransitionError, NotFoundError, ValidationError
from core.storage import FileStorage
from schemas.content_submission import SubmissionCreate, SubmissionUpdate
from services.content_submission_service import ContentSubmissionService
from store_fixtures import StoreTestCase


class ContentSubmissionServiceTests(StoreTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.storage = FileStorage(root=f"{self.tmp.name}/uploads", public_url="/storage/")
        self.service = ContentSubmissionService(self.store, self.storage)
        self.project = await self.add_project(title="Clinic Outreach")
        await self.add_user("ama")
        self.submission = await self.service.create_submission(SubmissionCreate(
            project_id=self.project.id,
            user_id="ama",
            title="A week at the clinic",
            content="We treated over two hundred patients.",
            content_type="article",
        ))

    async def test_new_submission_is_pending(self):
        self.assertEqual(self.submission.status, "pending")
        self.assertIsNone(self.submission.rejection_reason)

    async def test_approve(self):
        approved = await self.service.approve_submission(self.submission.id)
        self.assertEqual(approved.status, "approved")

    async def test_reject_requires_reason(self):
        for reason in ("", "   "):
            with self.assertRaises(ValidationError):
                await self.service.reject_submission(self.submission.id, reason)

        current = await self.service.get_submission_by_id(self.submission.id)
        self.assertEqual(current.status, "pending")

        rejected = await self.service.reject_submission(self.submission.id, "Photos are blurry")
        self.assertEqual(rejected.status, "rejected")
        self.assertEqual(rejected.rejection_reason, "Photos are blurry")

    async def test_reviewed_submission_cannot_change_status(self):
        await self.service.approve_submission(self.submission.id)

        with self.assertRaises(IllegalTransitionError) as ctx:
            await self.service.reject_submission(self.submission.id, "Changed our mind")
        self.assertEqual(ctx.exception.current, "approved")
        self.assertEqual(ctx.exception.requested, "rejected")

        with self.assertRaises(IllegalTransitionError):
            await self.service.update_submission(self.submission.id, SubmissionUpdate(status="pending"))

    async def test_concurrent_reviews_only_one_wins(self):
        results = await asyncio.gather(
            self.service.approve_submission(self.submission.id),
            self.service.reject_submission(self.submission.id, "Off topic"),
            return_exceptions=True,
        )

        errors = [r for r in results if isinstance(r, Exception)]
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], IllegalTransitionError)

        final = await self.service.get_submission_by_id(self.submission.id)
        self.assertIn(final.status, ("approved", "rejected"))

    async def test_edit_content_without_status_change(self):
        updated = await self.service.update_submission(
            self.submission.id, SubmissionUpdate(title="Clinic week")
        )

        self.assertEqual(updated.title, "Clinic week")
        self.assertEqual(updated.status, "pending")

    async def test_attach_file(self):
        content = b"x" * 2048

        record = await self.service.attach_file(self.submission.id, "clinic.jpg", content, "image/jpeg")

        self.assertEqual(record.file_size, "2 KB")
        self.assertEqual(
            record.file_url, f"/storage/content-submissions/{self.submission.id}/clinic.jpg"
        )

        detail = await self.service.get_submission_by_id(self.submission.id)
        self.assertEqual([f.file_name for f in detail.files], ["clinic.jpg"])
        self.assertEqual(detail.project_title, "Clinic Outreach")

        with self.assertRaises(ValidationError):
            await self.service.attach_file(self.submission.id, "clinic.jpg", content, "image/jpeg")

    async def test_attach_file_to_missing_submission(self):
        with self.assertRaises(NotFoundError):
            await self.service.attach_file("missing", "a.txt", b"hi", "text/plain")

    async def test_listing_by_user_and_project(self):
        by_user = await self.service.get_submissions_by_user("ama")
        by_project = await self.service.get_submissions_by_project(self.project.id)

        self.assertEqual([s.id for s in by_user], [self.submission.id])
        self.assertEqual(by_user[0].project_title, "Clinic Outreach")
        self.assertEqual([s.id for s in by_project], [self.submission.id])
        self.assertEqual(by_project[0].files, [])

    async def test_delete_removes_files(self):
        await self.service.attach_file(self.submission.id, "notes.txt", b"notes", "text/plain")

        self.assertTrue(await self.service.delete_submission(self.submission.id))
        self.assertEqual(await self.store.count("content_submission_files"), 0)


if __name__ == "__main__":
    unittest.main()
