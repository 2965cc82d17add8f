# app/core/permissions.py
from fastapi import Depends, HTTPException, status
from typing import Optional
import logging

from core.database import get_store
from core.security import oauth2_scheme, require_identity
from core.store import RecordStore
from models.user import User, UserRole
from services.user_service import UserService

logger = logging.getLogger(__name__)


async def get_current_identity(token: Optional[str] = Depends(oauth2_scheme)) -> str:
    """Identity id from a valid token, whether or not a profile exists yet."""
    return require_identity(token)


async def get_current_user(
        identity_id: str = Depends(get_current_identity),
        store: RecordStore = Depends(get_store),
) -> User:

    user = await UserService(store).get_current_user(identity_id)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User profile not found",
        )

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")

    return user


def require_roles(*roles_allowed: UserRole):
    allowed = {role.value for role in roles_allowed}

    async def wrapper(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            logger.warning(f"User {user.id} with role {user.role} denied; needs one of {sorted(allowed)}")
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")
        return user
    return wrapper


require_admin = require_roles(UserRole.ADMIN)
