# services/notification_service.py
from datetime import datetime, timezone
from typing import List, Tuple
import logging

from core.exceptions import StoreError
from core.store import RecordStore
from models.notification import Notification, NotificationRecipient, NotificationStatus
from schemas.notification import NotificationCreate, NotificationRecipientCreate, NotificationUpdate
from services.user_service import UserService

logger = logging.getLogger(__name__)


class NotificationService:
    table = "notifications"
    recipients_table = "notification_recipients"

    def __init__(self, store: RecordStore):
        self.store = store

    async def create_notification(self, notification_data: NotificationCreate) -> Notification:
        try:
            return await self.store.insert(self.table, notification_data.model_dump())
        except StoreError as e:
            logger.error(f"Error creating notification: {e}")
            raise

    async def update_notification(self, notification_id: str, update_data: NotificationUpdate) -> Notification:
        try:
            return await self.store.update(
                self.table, notification_id, update_data.model_dump(exclude_unset=True)
            )
        except StoreError as e:
            logger.error(f"Error updating notification with id {notification_id}: {e}")
            raise

    async def get_notifications(self) -> List[Notification]:
        try:
            return await self.store.select(self.table, order_by="created_at", descending=True)
        except StoreError as e:
            logger.error(f"Error fetching notifications: {e}")
            raise

    async def get_notification_by_id(self, notification_id: str) -> Notification:
        try:
            return await self.store.select_one(self.table, {"id": notification_id})
        except StoreError as e:
            logger.error(f"Error fetching notification with id {notification_id}: {e}")
            raise

    async def delete_notification(self, notification_id: str) -> bool:
        try:
            return await self.store.delete(self.table, notification_id)
        except StoreError as e:
            logger.error(f"Error deleting notification with id {notification_id}: {e}")
            raise

    async def add_notification_recipient(self, recipient_data: NotificationRecipientCreate) -> NotificationRecipient:
        try:
            return await self.store.insert(self.recipients_table, recipient_data.model_dump())
        except StoreError as e:
            logger.error(f"Error adding notification recipient: {e}")
            raise

    async def get_recipient(self, recipient_id: str) -> NotificationRecipient:
        try:
            return await self.store.select_one(self.recipients_table, {"id": recipient_id})
        except StoreError as e:
            logger.error(f"Error fetching notification recipient {recipient_id}: {e}")
            raise

    async def get_user_notifications(self, user_id: str) -> List[NotificationRecipient]:
        """A member's inbox: delivery records with their notification, newest first."""
        try:
            return await self.store.select(
                self.recipients_table,
                {"user_id": user_id},
                order_by="created_at",
                descending=True,
                include=("notification",),
            )
        except StoreError as e:
            logger.error(f"Error fetching notifications for user {user_id}: {e}")
            raise

    async def mark_notification_as_read(self, recipient_id: str) -> NotificationRecipient:
        try:
            return await self.store.update(
                self.recipients_table,
                recipient_id,
                {"read": True, "read_at": datetime.now(timezone.utc)},
            )
        except StoreError as e:
            logger.error(f"Error marking notification {recipient_id} as read: {e}")
            raise

    async def send_to_all_users(self, notification_id: str) -> Tuple[Notification, int]:
        """Fan a notification out to every active member, then mark it sent.

        Recipient rows are keyed on (notification_id, user_id) and inserted with
        insert-or-ignore, so a retry after a partial failure, or a second send,
        never duplicates deliveries. The notification is only marked sent once
        the fan-out has gone through.
        """
        await self.get_notification_by_id(notification_id)

        try:
            users = await UserService(self.store).get_active_users()
            recipients = [
                {"notification_id": notification_id, "user_id": user.id, "read": False}
                for user in users
            ]
            created = await self.store.insert_many(
                self.recipients_table,
                recipients,
                ignore_conflicts_on=("notification_id", "user_id"),
            )
        except StoreError as e:
            logger.error(f"Error sending notification {notification_id} to all users: {e}")
            raise

        notification = await self.update_notification(
            notification_id,
            NotificationUpdate(status=NotificationStatus.SENT, sent_date=datetime.now(timezone.utc)),
        )

        logger.info(
            f"Notification {notification_id} sent: {created} new recipients "
            f"({len(recipients) - created} already had it)"
        )
        return notification, created
