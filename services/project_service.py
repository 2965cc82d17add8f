# app/services/project_service.py
from typing import List, Optional
import logging

from core.config import settings
from core.exceptions import StoreError, ValidationError
from core.store import RecordStore
from models.project import Project, ProjectStatus
from schemas.project import ProjectCreate, ProjectUpdate

logger = logging.getLogger(__name__)


class ProjectService:
    table = "projects"

    def __init__(self, store: RecordStore):
        self.store = store

    async def get_projects(self) -> List[Project]:
        """All projects, newest first."""
        try:
            return await self.store.select(self.table, order_by="created_at", descending=True)
        except StoreError as e:
            logger.error(f"Error fetching projects: {e}")
            raise

    async def get_project_by_id(self, project_id: str) -> Project:
        try:
            return await self.store.select_one(self.table, {"id": project_id})
        except StoreError as e:
            logger.error(f"Error fetching project with id {project_id}: {e}")
            raise

    async def create_project(self, project_data: ProjectCreate) -> Project:
        try:
            project = await self.store.insert(self.table, project_data.model_dump())
        except StoreError as e:
            logger.error(f"Error creating project: {e}")
            raise

        logger.info(f"Project {project.id} created: {project.title}")
        return project

    async def update_project(self, project_id: str, update_data: ProjectUpdate) -> Project:
        """Edit the descriptive fields; funding totals are not editable here."""
        patch = update_data.model_dump(exclude_unset=True)
        try:
            return await self.store.update(self.table, project_id, patch)
        except StoreError as e:
            logger.error(f"Error updating project with id {project_id}: {e}")
            raise

    async def delete_project(self, project_id: str, policy: Optional[str] = None) -> bool:
        """Delete a project according to the configured dependent-row policy.

        ``restrict`` refuses while contributions or submissions still point at
        the project; ``cascade`` removes them and the project in one transaction.
        """
        policy = policy or settings.PROJECT_DELETE_POLICY
        await self.get_project_by_id(project_id)

        try:
            contributions = await self.store.count("contributions", {"project_id": project_id})
            submissions = await self.store.count("content_submissions", {"project_id": project_id})

            if contributions or submissions:
                if policy == "restrict":
                    raise ValidationError(
                        f"Project {project_id} has {contributions} contributions and "
                        f"{submissions} submissions; delete policy is restrict"
                    )
                if policy != "cascade":
                    raise ValidationError(f"Unknown project delete policy: {policy}")

                removed = await self.store.delete_cascade(
                    self.table,
                    project_id,
                    {"contributions": "project_id", "content_submissions": "project_id"},
                )
                logger.info(f"Cascade delete of project {project_id} removed {removed} dependent rows")
                return True

            deleted = await self.store.delete(self.table, project_id)
        except StoreError as e:
            logger.error(f"Error deleting project with id {project_id}: {e}")
            raise

        return deleted

    async def get_featured_project(self) -> Optional[Project]:
        """The active featured project, or None when nothing is featured.

        An empty result is not an error; store failures still raise.
        """
        try:
            rows = await self.store.select(
                self.table,
                {"featured": True, "status": ProjectStatus.ACTIVE.value},
                order_by="updated_at",
                descending=True,
                limit=1,
            )
        except StoreError as e:
            logger.error(f"Error fetching featured project: {e}")
            raise

        return rows[0] if rows else None

    async def get_projects_by_category(self, category: str) -> List[Project]:
        try:
            return await self.store.select(
                self.table,
                {"category": category, "status": ProjectStatus.ACTIVE.value},
                order_by="created_at",
                descending=True,
            )
        except StoreError as e:
            logger.error(f"Error fetching projects with category {category}: {e}")
            raise
