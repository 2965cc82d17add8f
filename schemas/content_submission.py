# app/schemas/content_submission.py
from pydantic import EmailStr, Field
from typing import List, Optional
from datetime import datetime

from models.content_submission import ContentType, SubmissionStatus
from schemas.base import Payload, ReadModel
from utils.schema_tools import make_partial


class SubmissionCreate(Payload):
    """Magazine content sent in by a member or guest."""
    project_id: str
    user_id: Optional[str] = None
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    content_type: ContentType
    submitted_by_name: Optional[str] = Field(None, max_length=200)
    submitted_by_email: Optional[EmailStr] = None


# Review fields are only settable through an update
SubmissionUpdate = make_partial(
    SubmissionCreate,
    "SubmissionUpdate",
    exclude=("project_id", "user_id"),
    extra_fields={
        "status": (Optional[SubmissionStatus], None),
        "rejection_reason": (Optional[str], None),
    },
)


class SubmissionReject(Payload):
    rejection_reason: str = Field(..., min_length=1)


class SubmissionFileCreate(Payload):
    submission_id: str
    file_name: str = Field(..., min_length=1, max_length=255)
    file_size: Optional[str] = Field(None, max_length=50)
    file_type: Optional[str] = Field(None, max_length=100)
    file_url: str = Field(..., min_length=1, max_length=500)


class SubmissionFileRead(ReadModel):
    id: str
    submission_id: str
    file_name: str
    file_size: Optional[str] = None
    file_type: Optional[str] = None
    file_url: str
    created_at: Optional[datetime] = None


class SubmissionRead(ReadModel):
    id: str
    project_id: str
    user_id: Optional[str] = None
    title: str
    content: str
    content_type: ContentType
    status: SubmissionStatus
    rejection_reason: Optional[str] = None
    submitted_by_name: Optional[str] = None
    submitted_by_email: Optional[str] = None
    submission_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SubmissionDetail(SubmissionRead):
    files: List[SubmissionFileRead] = []
    project_title: Optional[str] = None
