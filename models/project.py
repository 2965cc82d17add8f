# app/models/project.py
import enum
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Float, Enum, func
from sqlalchemy.orm import relationship
from models.base import Base, new_id


class ProjectStatus(str, enum.Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    COMPLETED = "completed"


class Project(Base):
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=new_id)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    deadline = Column(String(100), nullable=False)  # free text, e.g. "December 2024"
    category = Column(String(100), nullable=False, index=True)
    image = Column(String(500), nullable=True)

    # Funding: both totals only move through contribution recording
    target_amount = Column(Float, nullable=False)
    current_amount = Column(Float, nullable=False, default=0.0, server_default="0")
    contributors = Column(Integer, nullable=False, default=0, server_default="0")

    featured = Column(Boolean, nullable=False, default=False)
    status = Column(
        Enum(*[s.value for s in ProjectStatus], name="project_status"),
        nullable=False,
        default=ProjectStatus.DRAFT.value,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    contributions = relationship("Contribution", back_populates="project")
    submissions = relationship("ContentSubmission", back_populates="project")
