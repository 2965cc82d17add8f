# app/models/contribution.py
import enum
from sqlalchemy import Column, String, DateTime, Float, ForeignKey, Enum, func
from sqlalchemy.orm import relationship
from models.base import Base, new_id


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class Contribution(Base):
    __tablename__ = "contributions"

    id = Column(String(36), primary_key=True, default=new_id)

    # Foreign Keys
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)  # null for anonymous

    # Payment
    amount = Column(Float, nullable=False)
    payment_method = Column(String(50), nullable=False)  # mobile-money, paypal, bank-transfer
    payment_status = Column(
        Enum(*[s.value for s in PaymentStatus], name="payment_status"),
        nullable=False,
        default=PaymentStatus.COMPLETED.value,
    )
    transaction_reference = Column(String(100), nullable=True)

    # Contact details when no member is linked
    contributor_name = Column(String(200), nullable=True)
    contributor_email = Column(String(255), nullable=True)
    contributor_phone = Column(String(30), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    project = relationship("Project", back_populates="contributions")
    user = relationship("User")
