# app/api/v1/endpoints/contribution.py
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List, Optional

from core.database import get_store
from core.dependencies import get_current_user_optional
from core.permissions import get_current_user, require_admin
from core.store import RecordStore
from models.user import User
from schemas.contribution import (
    ContributionCreate, ContributionRead, ContributionWithProject, PaymentStatusUpdate
)
from services.contribution_service import ContributionService

router = APIRouter()


@router.post("/", response_model=ContributionRead, status_code=status.HTTP_201_CREATED)
async def create_contribution(
        contribution_data: ContributionCreate,
        current_user: Optional[User] = Depends(get_current_user_optional),
        store: RecordStore = Depends(get_store)
):
    """Record a contribution; guests give with contact details instead of an account"""
    if current_user:
        contribution_data.user_id = current_user.id
    elif contribution_data.user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Sign in to record a contribution against a member account",
        )

    return await ContributionService(store).create_contribution(contribution_data)


@router.get("/mine", response_model=List[ContributionWithProject])
async def list_my_contributions(
        current_user: User = Depends(get_current_user),
        store: RecordStore = Depends(get_store)
):
    return await ContributionService(store).get_contributions_by_user(current_user.id)


@router.patch("/{contribution_id}/payment-status", response_model=ContributionRead)
async def update_payment_status(
        contribution_id: str,
        status_data: PaymentStatusUpdate,
        current_user: User = Depends(require_admin),
        store: RecordStore = Depends(get_store)
):
    return await ContributionService(store).update_payment_status(
        contribution_id, status_data.payment_status
    )
