# app/models/content_submission.py
import enum
from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Enum, func
from sqlalchemy.orm import relationship
from models.base import Base, new_id


class ContentType(str, enum.Enum):
    ARTICLE = "article"
    PHOTO = "photo"
    TESTIMONIAL = "testimonial"


class SubmissionStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ContentSubmission(Base):
    __tablename__ = "content_submissions"

    id = Column(String(36), primary_key=True, default=new_id)

    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)

    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    content_type = Column(
        Enum(*[t.value for t in ContentType], name="content_type"),
        nullable=False,
    )

    # Review
    status = Column(
        Enum(*[s.value for s in SubmissionStatus], name="submission_status"),
        nullable=False,
        default=SubmissionStatus.PENDING.value,
    )
    rejection_reason = Column(Text, nullable=True)

    # Credit line when the author is not a member
    submitted_by_name = Column(String(200), nullable=True)
    submitted_by_email = Column(String(255), nullable=True)

    submission_date = Column(DateTime(timezone=True), server_default=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    project = relationship("Project", back_populates="submissions")
    files = relationship(
        "ContentSubmissionFile",
        back_populates="submission",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def project_title(self):
        # Only populated when the project was eager-loaded with the row
        project = self.__dict__.get("project")
        return project.title if project is not None else None


class ContentSubmissionFile(Base):
    __tablename__ = "content_submission_files"

    id = Column(String(36), primary_key=True, default=new_id)
    submission_id = Column(
        String(36),
        ForeignKey("content_submissions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    file_name = Column(String(255), nullable=False)
    file_size = Column(String(50), nullable=True)  # human readable, e.g. "245 KB"
    file_type = Column(String(100), nullable=True)
    file_url = Column(String(500), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    submission = relationship("ContentSubmission", back_populates="files")
