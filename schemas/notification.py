# app/schemas/notification.py
from pydantic import Field
from typing import Optional
from datetime import datetime

from models.notification import NotificationAudience, NotificationStatus, NotificationType
from schemas.base import Payload, ReadModel
from utils.schema_tools import make_partial


class NotificationCreate(Payload):
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    type: NotificationType
    status: NotificationStatus = NotificationStatus.DRAFT
    audience: NotificationAudience = NotificationAudience.ALL
    scheduled_date: Optional[datetime] = None


NotificationUpdate = make_partial(
    NotificationCreate,
    "NotificationUpdate",
    extra_fields={"sent_date": (Optional[datetime], None)},
)


class NotificationRecipientCreate(Payload):
    notification_id: str
    user_id: str


class NotificationRead(ReadModel):
    id: str
    title: str
    message: str
    type: NotificationType
    status: NotificationStatus
    audience: NotificationAudience
    scheduled_date: Optional[datetime] = None
    sent_date: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class NotificationRecipientRead(ReadModel):
    id: str
    notification_id: str
    user_id: str
    read: bool
    read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class UserNotificationRead(NotificationRecipientRead):
    notification: Optional[NotificationRead] = None


class DispatchResult(ReadModel):
    notification: NotificationRead
    recipients_created: int
