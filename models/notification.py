# models/notification.py
import enum
from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, Enum, UniqueConstraint, func
from sqlalchemy.orm import relationship
from models.base import Base, new_id


class NotificationType(str, enum.Enum):
    PROJECT = "project"  # new project
    MILESTONE = "milestone"  # funding milestone reached
    THANK_YOU = "thank_you"
    CONTENT = "content"  # magazine content published
    REMINDER = "reminder"
    EVENT = "event"


class NotificationStatus(str, enum.Enum):
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    SENT = "sent"


class NotificationAudience(str, enum.Enum):
    ALL = "all"
    CONTRIBUTORS = "contributors"
    SPECIFIC_MEMBERS = "specific_members"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=new_id)

    title = Column(String(200), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(
        Enum(*[t.value for t in NotificationType], name="notification_type"),
        nullable=False,
    )
    status = Column(
        Enum(*[s.value for s in NotificationStatus], name="notification_status"),
        nullable=False,
        default=NotificationStatus.DRAFT.value,
    )
    audience = Column(
        Enum(*[a.value for a in NotificationAudience], name="notification_audience"),
        nullable=False,
        default=NotificationAudience.ALL.value,
    )

    scheduled_date = Column(DateTime(timezone=True), nullable=True)
    sent_date = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    recipients = relationship(
        "NotificationRecipient",
        back_populates="notification",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class NotificationRecipient(Base):
    """Delivery record created for each member a notification is sent to."""
    __tablename__ = "notification_recipients"
    __table_args__ = (
        UniqueConstraint("notification_id", "user_id", name="uq_notification_recipient"),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    notification_id = Column(
        String(36),
        ForeignKey("notifications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    read = Column(Boolean, nullable=False, default=False)
    read_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    notification = relationship("Notification", back_populates="recipients")
    user = relationship("User")
