# app/models/user.py
import enum
from sqlalchemy import Column, String, DateTime, Enum, func
from models.base import Base


class UserRole(str, enum.Enum):
    MEMBER = "member"
    ADMIN = "admin"


class UserStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PENDING = "pending"


class User(Base):
    """Member profile, attached 1:1 to an identity-provider account by id."""
    __tablename__ = "users"

    # Same value as the identity provider's subject claim
    id = Column(String(36), primary_key=True)

    name = Column(String(200), nullable=True)
    email = Column(String(255), nullable=True, index=True)
    phone = Column(String(30), nullable=True)
    avatar_url = Column(String(500), nullable=True)

    role = Column(
        Enum(*[r.value for r in UserRole], name="user_role"),
        nullable=False,
        default=UserRole.MEMBER.value,
    )
    status = Column(
        Enum(*[s.value for s in UserStatus], name="user_status"),
        nullable=False,
        default=UserStatus.ACTIVE.value,
        index=True,
    )

    join_date = Column(DateTime(timezone=True), server_default=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE.value
