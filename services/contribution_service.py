# app/services/contribution_service.py
from sqlalchemy import func, select
from typing import List, Optional
import logging

from core.exceptions import AppError, ConsistencyError, StoreError, ValidationError
from core.store import RecordStore
from models.contribution import Contribution, PaymentStatus
from models.project import Project
from schemas.contribution import ContributionCreate, ContributorInfo

logger = logging.getLogger(__name__)


class ContributionService:
    table = "contributions"

    def __init__(self, store: RecordStore):
        self.store = store

    async def record_contribution(
        self,
        project_id: str,
        amount: float,
        payment_method: str,
        contributor_info: Optional[ContributorInfo] = None,
        transaction_reference: Optional[str] = None,
        payment_status: str = PaymentStatus.COMPLETED.value,
    ) -> Contribution:
        """Store a contribution and add it to the project's totals.

        The totals are bumped with one server-side increment, so concurrent
        contributions to the same project are all counted. If the increment
        fails after the contribution row is committed, ConsistencyError is
        raised and ``reconcile_project`` can repair the totals.
        """
        if amount is None or amount <= 0:
            raise ValidationError("Contribution amount must be greater than 0")
        if not payment_method:
            raise ValidationError("Payment method is required")

        values = contributor_info.model_dump() if contributor_info else {}
        values.update({
            "project_id": project_id,
            "amount": amount,
            "payment_method": payment_method,
            "payment_status": payment_status,
            "transaction_reference": transaction_reference,
        })

        try:
            contribution = await self.store.insert(self.table, values)
        except StoreError as e:
            logger.error(f"Error creating contribution for project {project_id}: {e}")
            raise

        try:
            await self.store.increment(
                "projects",
                project_id,
                {"current_amount": amount, "contributors": 1},
            )
        except AppError as e:
            logger.error(
                f"Contribution {contribution.id} recorded but project {project_id} "
                f"totals were not updated: {e}"
            )
            raise ConsistencyError(contribution.id, project_id, amount, e) from e

        logger.info(f"Contribution {contribution.id} of {amount} recorded for project {project_id}")
        return contribution

    async def create_contribution(self, contribution_data: ContributionCreate) -> Contribution:
        info = ContributorInfo(
            user_id=contribution_data.user_id,
            contributor_name=contribution_data.contributor_name,
            contributor_email=contribution_data.contributor_email,
            contributor_phone=contribution_data.contributor_phone,
        )
        return await self.record_contribution(
            contribution_data.project_id,
            contribution_data.amount,
            contribution_data.payment_method,
            info,
            transaction_reference=contribution_data.transaction_reference,
            payment_status=contribution_data.payment_status,
        )

    async def get_contributions_by_project(self, project_id: str) -> List[Contribution]:
        try:
            return await self.store.select(
                self.table, {"project_id": project_id}, order_by="created_at", descending=True
            )
        except StoreError as e:
            logger.error(f"Error fetching contributions for project {project_id}: {e}")
            raise

    async def get_contributions_by_user(self, user_id: str) -> List[Contribution]:
        try:
            return await self.store.select(
                self.table,
                {"user_id": user_id},
                order_by="created_at",
                descending=True,
                include=("project",),
            )
        except StoreError as e:
            logger.error(f"Error fetching contributions for user {user_id}: {e}")
            raise

    async def update_payment_status(self, contribution_id: str, payment_status: str) -> Contribution:
        """Payment status is the only field that may change after creation."""
        try:
            return await self.store.update(self.table, contribution_id, {"payment_status": payment_status})
        except StoreError as e:
            logger.error(f"Error updating payment status of contribution {contribution_id}: {e}")
            raise

    async def reconcile_project(self, project_id: str) -> Project:
        """Recompute a project's totals from its contribution rows."""
        contribution = self.store.model_for(self.table)
        total = (
            select(func.coalesce(func.sum(contribution.amount), 0.0))
            .where(contribution.project_id == project_id)
            .scalar_subquery()
        )
        count = (
            select(func.count(contribution.id))
            .where(contribution.project_id == project_id)
            .scalar_subquery()
        )

        try:
            project = await self.store.update(
                "projects", project_id, {"current_amount": total, "contributors": count}
            )
        except StoreError as e:
            logger.error(f"Error reconciling project {project_id}: {e}")
            raise

        logger.info(
            f"Project {project_id} reconciled: current_amount={project.current_amount}, "
            f"contributors={project.contributors}"
        )
        return project
