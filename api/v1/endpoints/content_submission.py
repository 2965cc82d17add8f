# app/api/v1/endpoints/content_submission.py
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from typing import List, Optional

from core.config import settings
from core.database import get_store
from core.dependencies import get_current_user_optional
from core.permissions import get_current_user, require_admin
from core.storage import FileStorage, get_storage
from core.store import RecordStore
from models.user import User
from schemas.content_submission import (
    SubmissionCreate, SubmissionDetail, SubmissionFileRead, SubmissionRead,
    SubmissionReject, SubmissionUpdate
)
from services.content_submission_service import ContentSubmissionService

router = APIRouter()


# --------------------------
# Submitting content
# --------------------------

@router.post("/", response_model=SubmissionRead, status_code=status.HTTP_201_CREATED)
async def create_submission(
        submission_data: SubmissionCreate,
        current_user: Optional[User] = Depends(get_current_user_optional),
        store: RecordStore = Depends(get_store)
):
    submission_data.user_id = current_user.id if current_user else None
    return await ContentSubmissionService(store).create_submission(submission_data)


@router.post("/{submission_id}/files", response_model=SubmissionFileRead, status_code=status.HTTP_201_CREATED)
async def upload_submission_file(
        submission_id: str,
        file: UploadFile = File(...),
        current_user: Optional[User] = Depends(get_current_user_optional),
        store: RecordStore = Depends(get_store),
        storage: FileStorage = Depends(get_storage)
):
    """Attach an image or document to a submission"""
    service = ContentSubmissionService(store, storage)
    submission = await service.get_submission_by_id(submission_id, with_details=False)
    if submission.user_id and (not current_user or current_user.id != submission.user_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your submission")

    if file.content_type not in settings.ALLOWED_FILE_TYPES:
        raise HTTPException(status_code=400, detail=f"Unsupported file type: {file.content_type}")

    content = await file.read()
    return await service.attach_file(submission_id, file.filename, content, file.content_type)


@router.get("/mine", response_model=List[SubmissionDetail])
async def list_my_submissions(
        current_user: User = Depends(get_current_user),
        store: RecordStore = Depends(get_store)
):
    return await ContentSubmissionService(store).get_submissions_by_user(current_user.id)


@router.get("/{submission_id}", response_model=SubmissionDetail)
async def get_submission(
        submission_id: str,
        current_user: User = Depends(get_current_user),
        store: RecordStore = Depends(get_store)
):
    submission = await ContentSubmissionService(store).get_submission_by_id(submission_id)
    if not current_user.is_admin and submission.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your submission")
    return submission


# --------------------------
# Review (admin)
# --------------------------

@router.put("/{submission_id}", response_model=SubmissionRead)
async def update_submission(
        submission_id: str,
        submission_data: SubmissionUpdate,
        current_user: User = Depends(require_admin),
        store: RecordStore = Depends(get_store)
):
    return await ContentSubmissionService(store).update_submission(submission_id, submission_data)


@router.post("/{submission_id}/approve", response_model=SubmissionRead)
async def approve_submission(
        submission_id: str,
        current_user: User = Depends(require_admin),
        store: RecordStore = Depends(get_store)
):
    return await ContentSubmissionService(store).approve_submission(submission_id)


@router.post("/{submission_id}/reject", response_model=SubmissionRead)
async def reject_submission(
        submission_id: str,
        reject_data: SubmissionReject,
        current_user: User = Depends(require_admin),
        store: RecordStore = Depends(get_store)
):
    return await ContentSubmissionService(store).reject_submission(
        submission_id, reject_data.rejection_reason
    )


@router.delete("/{submission_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_submission(
        submission_id: str,
        current_user: User = Depends(require_admin),
        store: RecordStore = Depends(get_store)
):
    deleted = await ContentSubmissionService(store).delete_submission(submission_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Submission not found")
    return None
