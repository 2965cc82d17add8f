# app/api/v1/endpoints/user.py
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from typing import List, Optional

from core.config import settings
from core.database import get_store
from core.permissions import get_current_identity, get_current_user, require_admin
from core.storage import FileStorage, get_storage
from core.store import RecordStore
from models.user import User, UserRole
from schemas.user import UserCreate, UserProfileCreate, UserRead, UserUpdate
from services.user_service import UserService

router = APIRouter()


@router.get("/me", response_model=UserRead)
async def get_me(current_user: User = Depends(get_current_user)):
    return current_user


@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_my_profile(
        profile_data: UserProfileCreate,
        identity_id: str = Depends(get_current_identity),
        store: RecordStore = Depends(get_store)
):
    """Create the profile for a freshly signed-up identity"""
    service = UserService(store)
    if await service.get_current_user(identity_id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Profile already exists")

    return await service.create_user_profile(UserCreate(id=identity_id, **profile_data.model_dump()))


@router.post("/me/avatar", response_model=UserRead)
async def upload_my_avatar(
        file: UploadFile = File(...),
        current_user: User = Depends(get_current_user),
        store: RecordStore = Depends(get_store),
        storage: FileStorage = Depends(get_storage)
):
    if file.content_type not in settings.ALLOWED_FILE_TYPES or not file.content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail=f"Unsupported avatar type: {file.content_type}")

    service = UserService(store, storage)
    await service.upload_avatar(await file.read(), file.filename, current_user.id)
    return await service.get_user_by_id(current_user.id)


@router.get("/", response_model=List[UserRead])
async def list_users(
        role: Optional[UserRole] = Query(None),
        current_user: User = Depends(require_admin),
        store: RecordStore = Depends(get_store)
):
    service = UserService(store)
    if role:
        return await service.get_users_by_role(role.value)
    return await service.get_all_users()


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
        user_id: str,
        current_user: User = Depends(require_admin),
        store: RecordStore = Depends(get_store)
):
    return await UserService(store).get_user_by_id(user_id)


@router.put("/{user_id}", response_model=UserRead)
async def update_user(
        user_id: str,
        user_data: UserUpdate,
        current_user: User = Depends(get_current_user),
        store: RecordStore = Depends(get_store)
):
    """Members edit their own contact details; admins manage roles and status"""
    if not current_user.is_admin:
        if current_user.id != user_id:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized")
        if user_data.role is not None or user_data.status is not None:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only admins can change role or status")

    return await UserService(store).update_user(user_id, user_data)
