# app/api/v1/endpoints/notification.py
from fastapi import APIRouter, Depends, HTTPException, status
from typing import List

from core.database import get_store
from core.permissions import get_current_user, require_admin
from core.store import RecordStore
from models.user import User
from schemas.notification import (
    DispatchResult, NotificationCreate, NotificationRead, NotificationRecipientRead,
    NotificationUpdate, UserNotificationRead
)
from services.notification_service import NotificationService

router = APIRouter()


# --------------------------
# Member inbox
# --------------------------

@router.get("/mine", response_model=List[UserNotificationRead])
async def list_my_notifications(
        current_user: User = Depends(get_current_user),
        store: RecordStore = Depends(get_store)
):
    return await NotificationService(store).get_user_notifications(current_user.id)


@router.post("/recipients/{recipient_id}/read", response_model=NotificationRecipientRead)
async def mark_notification_as_read(
        recipient_id: str,
        current_user: User = Depends(get_current_user),
        store: RecordStore = Depends(get_store)
):
    service = NotificationService(store)
    recipient = await service.get_recipient(recipient_id)
    if recipient.user_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your notification")
    return await service.mark_notification_as_read(recipient_id)


# --------------------------
# Administration
# --------------------------

@router.get("/", response_model=List[NotificationRead])
async def list_notifications(
        current_user: User = Depends(require_admin),
        store: RecordStore = Depends(get_store)
):
    return await NotificationService(store).get_notifications()


@router.post("/", response_model=NotificationRead, status_code=status.HTTP_201_CREATED)
async def create_notification(
        notification_data: NotificationCreate,
        current_user: User = Depends(require_admin),
        store: RecordStore = Depends(get_store)
):
    return await NotificationService(store).create_notification(notification_data)


@router.get("/{notification_id}", response_model=NotificationRead)
async def get_notification(
        notification_id: str,
        current_user: User = Depends(require_admin),
        store: RecordStore = Depends(get_store)
):
    return await NotificationService(store).get_notification_by_id(notification_id)


@router.put("/{notification_id}", response_model=NotificationRead)
async def update_notification(
        notification_id: str,
        notification_data: NotificationUpdate,
        current_user: User = Depends(require_admin),
        store: RecordStore = Depends(get_store)
):
    return await NotificationService(store).update_notification(notification_id, notification_data)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
        notification_id: str,
        current_user: User = Depends(require_admin),
        store: RecordStore = Depends(get_store)
):
    deleted = await NotificationService(store).delete_notification(notification_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Notification not found")
    return None


@router.post("/{notification_id}/send", response_model=DispatchResult)
async def send_notification_to_all(
        notification_id: str,
        current_user: User = Depends(require_admin),
        store: RecordStore = Depends(get_store)
):
    """Deliver to every active member; safe to repeat"""
    notification, created = await NotificationService(store).send_to_all_users(notification_id)
    return DispatchResult(
        notification=NotificationRead.model_validate(notification),
        recipients_created=created,
    )
