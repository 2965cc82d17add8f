# app/schemas/project.py
from pydantic import Field
from typing import Optional
from datetime import datetime

from models.project import ProjectStatus
from schemas.base import Payload, ReadModel
from utils.schema_tools import make_partial


class ProjectCreate(Payload):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    deadline: str = Field(..., min_length=1, max_length=100)
    target_amount: float = Field(..., gt=0)
    category: str = Field(..., min_length=1, max_length=100)
    image: Optional[str] = Field(None, max_length=500)
    featured: bool = False
    status: ProjectStatus = ProjectStatus.DRAFT


# current_amount / contributors are not accepted here: only contributions move them
ProjectUpdate = make_partial(ProjectCreate, "ProjectUpdate")


class ProjectRead(ReadModel):
    id: str
    title: str
    description: str
    deadline: str
    current_amount: float
    target_amount: float
    contributors: int
    category: str
    image: Optional[str] = None
    featured: bool
    status: ProjectStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

