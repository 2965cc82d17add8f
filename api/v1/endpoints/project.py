# app/api/v1/endpoints/project.py
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List, Optional

from core.database import get_store
from core.permissions import require_admin
from core.store import RecordStore
from models.user import User
from schemas.content_submission import SubmissionDetail
from schemas.contribution import ContributionRead
from schemas.project import ProjectCreate, ProjectRead, ProjectUpdate
from services.content_submission_service import ContentSubmissionService
from services.contribution_service import ContributionService
from services.project_service import ProjectService

router = APIRouter()


# --------------------------
# Public listing
# --------------------------

@router.get("/", response_model=List[ProjectRead])
async def list_projects(store: RecordStore = Depends(get_store)):
    """All projects, newest first"""
    return await ProjectService(store).get_projects()


@router.get("/featured", response_model=Optional[ProjectRead])
async def get_featured_project(store: RecordStore = Depends(get_store)):
    """The featured active project, or null"""
    return await ProjectService(store).get_featured_project()


@router.get("/category/{category}", response_model=List[ProjectRead])
async def list_projects_by_category(category: str, store: RecordStore = Depends(get_store)):
    return await ProjectService(store).get_projects_by_category(category)


@router.get("/{project_id}", response_model=ProjectRead)
async def get_project(project_id: str, store: RecordStore = Depends(get_store)):
    return await ProjectService(store).get_project_by_id(project_id)


@router.get("/{project_id}/contributions", response_model=List[ContributionRead])
async def list_project_contributions(project_id: str, store: RecordStore = Depends(get_store)):
    return await ContributionService(store).get_contributions_by_project(project_id)


@router.get("/{project_id}/submissions", response_model=List[SubmissionDetail])
async def list_project_submissions(project_id: str, store: RecordStore = Depends(get_store)):
    return await ContentSubmissionService(store).get_submissions_by_project(project_id)


# --------------------------
# Administration
# --------------------------

@router.post("/", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
async def create_project(
        project_data: ProjectCreate,
        current_user: User = Depends(require_admin),
        store: RecordStore = Depends(get_store)
):
    return await ProjectService(store).create_project(project_data)


@router.put("/{project_id}", response_model=ProjectRead)
async def update_project(
        project_id: str,
        project_data: ProjectUpdate,
        current_user: User = Depends(require_admin),
        store: RecordStore = Depends(get_store)
):
    return await ProjectService(store).update_project(project_id, project_data)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
        project_id: str,
        current_user: User = Depends(require_admin),
        store: RecordStore = Depends(get_store)
):
    """Delete a project, honouring PROJECT_DELETE_POLICY"""
    deleted = await ProjectService(store).delete_project(project_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Project not found")
    return None


@router.post("/{project_id}/reconcile", response_model=ProjectRead)
async def reconcile_project(
        project_id: str,
        current_user: User = Depends(require_admin),
        store: RecordStore = Depends(get_store)
):
    """Recompute funding totals from the project's contributions"""
    return await ContributionService(store).reconcile_project(project_id)
