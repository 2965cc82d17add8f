# app/schemas/contribution.py
from pydantic import EmailStr, Field
from typing import Optional
from datetime import datetime

from models.contribution import PaymentStatus
from schemas.base import Payload, ReadModel
from schemas.project import ProjectRead


class ContributorInfo(Payload):
    """Who gave: a linked member, or contact details for a guest."""
    user_id: Optional[str] = None
    contributor_name: Optional[str] = Field(None, max_length=200)
    contributor_email: Optional[EmailStr] = None
    contributor_phone: Optional[str] = Field(None, max_length=30)


class ContributionCreate(ContributorInfo):
    project_id: str
    amount: float = Field(..., gt=0)
    payment_method: str = Field(..., min_length=1, max_length=50)  # mobile-money, paypal, bank-transfer
    payment_status: PaymentStatus = PaymentStatus.COMPLETED
    transaction_reference: Optional[str] = Field(None, max_length=100)


class PaymentStatusUpdate(Payload):
    payment_status: PaymentStatus


class ContributionRead(ReadModel):
    id: str
    project_id: str
    user_id: Optional[str] = None
    amount: float
    payment_method: str
    payment_status: PaymentStatus
    transaction_reference: Optional[str] = None
    contributor_name: Optional[str] = None
    contributor_email: Optional[str] = None
    contributor_phone: Optional[str] = None
    created_at: Optional[datetime] = None


class ContributionWithProject(ContributionRead):
    project: Optional[ProjectRead] = None
