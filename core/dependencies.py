from fastapi import Depends
from typing import Optional, Annotated
from jose import JWTError
import logging

from core.database import get_store
from core.security import decode_token, oauth2_scheme
from core.store import RecordStore
from models.user import User
from services.user_service import UserService

logger = logging.getLogger(__name__)


async def get_current_user_optional(
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
    store: RecordStore = Depends(get_store)
) -> Optional[User]:
    """The signed-in member, or None for guests and unusable tokens."""

    if not token:
        return None

    try:
        user_id = decode_token(token)
    except JWTError as e:
        logger.warning(f"Ignoring invalid token: {e}")
        return None

    user = await UserService(store).get_current_user(user_id)

    if user and user.is_active:
        return user

    return None
