# app/schemas/user.py
from pydantic import EmailStr, Field
from typing import Optional
from datetime import datetime

from models.user import UserRole, UserStatus
from schemas.base import Payload, ReadModel
from utils.schema_tools import make_partial


class UserProfileCreate(Payload):
    """Profile fields a member fills in after signing up."""
    name: Optional[str] = Field(None, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)
    avatar_url: Optional[str] = Field(None, max_length=500)


class UserCreate(UserProfileCreate):
    id: str = Field(..., min_length=1, max_length=36)
    role: UserRole = UserRole.MEMBER
    status: UserStatus = UserStatus.ACTIVE


UserUpdate = make_partial(UserCreate, "UserUpdate", exclude=("id",))


class UserRead(ReadModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    role: UserRole
    status: UserStatus
    join_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
