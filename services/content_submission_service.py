# app/services/content_submission_service.py
from typing import List, Optional
import logging

from core.constants import SUBMISSIONS_BUCKET, SUBMISSION_TRANSITIONS
from core.exceptions import IllegalTransitionError, NotFoundError, StoreError, ValidationError
from core.storage import FileStorage
from core.store import RecordStore
from models.content_submission import ContentSubmission, ContentSubmissionFile, SubmissionStatus
from schemas.content_submission import SubmissionCreate, SubmissionFileCreate, SubmissionUpdate

logger = logging.getLogger(__name__)


def _human_size(size: int) -> str:
    if size >= 1024 * 1024:
        return f"{size / (1024 * 1024):.1f} MB"
    return f"{round(size / 1024)} KB"


class ContentSubmissionService:
    table = "content_submissions"
    files_table = "content_submission_files"

    def __init__(self, store: RecordStore, storage: Optional[FileStorage] = None):
        self.store = store
        self.storage = storage

    async def create_submission(self, submission_data: SubmissionCreate) -> ContentSubmission:
        """New submissions always start in review (pending)."""
        try:
            submission = await self.store.insert(self.table, submission_data.model_dump())
        except StoreError as e:
            logger.error(f"Error creating content submission: {e}")
            raise

        logger.info(f"Submission {submission.id} received for project {submission.project_id}")
        return submission

    async def update_submission(self, submission_id: str, update_data: SubmissionUpdate) -> ContentSubmission:
        """Edit a submission, enforcing the review workflow.

        pending -> approved and pending -> rejected are the only status moves;
        a rejected submission must carry a non-empty rejection reason.
        """
        patch = update_data.model_dump(exclude_unset=True)
        expected = None

        if "status" in patch or "rejection_reason" in patch:
            current = await self.get_submission_by_id(submission_id, with_details=False)
            new_status = patch.get("status") or current.status

            if new_status != current.status:
                if new_status not in SUBMISSION_TRANSITIONS.get(current.status, []):
                    raise IllegalTransitionError(current.status, new_status)
                expected = {"status": current.status}
            else:
                patch.pop("status", None)

            reason = patch.get("rejection_reason", current.rejection_reason)
            if new_status == SubmissionStatus.REJECTED.value and not (reason and reason.strip()):
                raise ValidationError("A rejection reason is required to reject a submission")
            if new_status == SubmissionStatus.APPROVED.value:
                patch["rejection_reason"] = None

        try:
            return await self.store.update(self.table, submission_id, patch, expected=expected)
        except NotFoundError:
            if expected is None:
                raise
            # Lost the race: someone reviewed it between our read and write
            latest = await self.get_submission_by_id(submission_id, with_details=False)
            raise IllegalTransitionError(latest.status, patch["status"])
        except StoreError as e:
            logger.error(f"Error updating submission with id {submission_id}: {e}")
            raise

    async def approve_submission(self, submission_id: str) -> ContentSubmission:
        return await self.update_submission(
            submission_id, SubmissionUpdate(status=SubmissionStatus.APPROVED)
        )

    async def reject_submission(self, submission_id: str, rejection_reason: str) -> ContentSubmission:
        return await self.update_submission(
            submission_id,
            SubmissionUpdate(status=SubmissionStatus.REJECTED, rejection_reason=rejection_reason),
        )

    async def get_submissions_by_project(self, project_id: str) -> List[ContentSubmission]:
        try:
            return await self.store.select(
                self.table,
                {"project_id": project_id},
                order_by="submission_date",
                descending=True,
                include=("files",),
            )
        except StoreError as e:
            logger.error(f"Error fetching submissions for project {project_id}: {e}")
            raise

    async def get_submissions_by_user(self, user_id: str) -> List[ContentSubmission]:
        try:
            return await self.store.select(
                self.table,
                {"user_id": user_id},
                order_by="submission_date",
                descending=True,
                include=("files", "project"),
            )
        except StoreError as e:
            logger.error(f"Error fetching submissions for user {user_id}: {e}")
            raise

    async def get_submission_by_id(self, submission_id: str, with_details: bool = True) -> ContentSubmission:
        include = ("files", "project") if with_details else ()
        try:
            return await self.store.select_one(self.table, {"id": submission_id}, include=include)
        except StoreError as e:
            logger.error(f"Error fetching submission with id {submission_id}: {e}")
            raise

    async def add_submission_file(self, file_data: SubmissionFileCreate) -> ContentSubmissionFile:
        try:
            return await self.store.insert(self.files_table, file_data.model_dump())
        except StoreError as e:
            logger.error(f"Error adding submission file: {e}")
            raise

    async def upload_file(self, content: bytes, path: str) -> str:
        """Upload to the submissions bucket and return the file's public URL."""
        await self.storage.upload(SUBMISSIONS_BUCKET, path, content)
        return self.storage.get_public_url(SUBMISSIONS_BUCKET, path)

    async def attach_file(
        self,
        submission_id: str,
        filename: str,
        content: bytes,
        content_type: Optional[str] = None,
    ) -> ContentSubmissionFile:
        """Upload a file and record it against the submission."""
        await self.get_submission_by_id(submission_id, with_details=False)

        file_url = await self.upload_file(content, f"{submission_id}/{filename}")
        return await self.add_submission_file(SubmissionFileCreate(
            submission_id=submission_id,
            file_name=filename,
            file_size=_human_size(len(content)),
            file_type=content_type,
            file_url=file_url,
        ))

    async def delete_submission(self, submission_id: str) -> bool:
        try:
            return await self.store.delete(self.table, submission_id)
        except StoreError as e:
            logger.error(f"Error deleting submission with id {submission_id}: {e}")
            raise
