# app/services/user_service.py
from pathlib import Path
from typing import List, Optional
import logging
import secrets

from core.constants import AVATARS_BUCKET
from core.exceptions import NotFoundError, StoreError
from core.storage import FileStorage
from core.store import RecordStore
from models.user import User, UserStatus
from schemas.user import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


class UserService:
    table = "users"

    def __init__(self, store: RecordStore, storage: Optional[FileStorage] = None):
        self.store = store
        self.storage = storage

    async def get_current_user(self, identity_id: Optional[str]) -> Optional[User]:
        """Profile for a signed-in identity; None when not signed in or no profile yet."""
        if not identity_id:
            return None

        try:
            return await self.store.select_one(self.table, {"id": identity_id})
        except NotFoundError:
            return None
        except StoreError as e:
            logger.error(f"Error fetching current user: {e}")
            raise

    async def get_user_by_id(self, user_id: str) -> User:
        try:
            return await self.store.select_one(self.table, {"id": user_id})
        except StoreError as e:
            logger.error(f"Error fetching user with id {user_id}: {e}")
            raise

    async def update_user(self, user_id: str, update_data: UserUpdate) -> User:
        try:
            return await self.store.update(self.table, user_id, update_data.model_dump(exclude_unset=True))
        except StoreError as e:
            logger.error(f"Error updating user with id {user_id}: {e}")
            raise

    async def create_user_profile(self, user_data: UserCreate) -> User:
        try:
            user = await self.store.insert(self.table, user_data.model_dump())
        except StoreError as e:
            logger.error(f"Error creating user profile: {e}")
            raise

        logger.info(f"Profile created for user {user.id}")
        return user

    async def get_all_users(self) -> List[User]:
        try:
            return await self.store.select(self.table, order_by="name")
        except StoreError as e:
            logger.error(f"Error fetching all users: {e}")
            raise

    async def get_users_by_role(self, role: str) -> List[User]:
        try:
            return await self.store.select(self.table, {"role": role}, order_by="name")
        except StoreError as e:
            logger.error(f"Error fetching users with role {role}: {e}")
            raise

    async def get_active_users(self) -> List[User]:
        try:
            return await self.store.select(self.table, {"status": UserStatus.ACTIVE.value})
        except StoreError as e:
            logger.error(f"Error fetching active users: {e}")
            raise

    async def upload_avatar(self, content: bytes, filename: str, user_id: str) -> str:
        """Store a new avatar image and point the profile at its public URL."""
        file_ext = Path(filename).suffix.lstrip(".") or "png"
        file_path = f"avatars/{user_id}-{secrets.token_hex(6)}.{file_ext}"

        await self.storage.upload(AVATARS_BUCKET, file_path, content)
        public_url = self.storage.get_public_url(AVATARS_BUCKET, file_path)

        await self.update_user(user_id, UserUpdate(avatar_url=public_url))
        return public_url
