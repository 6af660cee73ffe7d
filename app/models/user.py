from enum import Enum as PythonEnum

from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from sqlalchemy.types import Enum as SQLAlchemyEnum

from app.core.database import Base


class UserRole(str, PythonEnum):
    MEMBER = "MEMBER"
    ADMIN = "ADMIN"


class User(Base):
    """
    Platform account.

    Members consume content within their plan quotas; admins manage content
    and plans and are never metered.
    """
    __tablename__ = "users"

    # Primary key
    id = Column(Integer, primary_key=True, index=True)

    name = Column(String(255), nullable=False)

    # User email address (login identifier)
    email = Column(String(255), unique=True, index=True, nullable=False)

    # Argon2 hash; the plain password is never stored
    password_hash = Column(String(255), nullable=False)

    role = Column(SQLAlchemyEnum(UserRole), nullable=False, default=UserRole.MEMBER)

    avatar = Column(String(500), nullable=True)

    # Account status
    is_active = Column(Boolean, nullable=False, default=True)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    # Relationships: One user can have multiple subscriptions (historical)
    subscriptions = relationship(
        "Subscription",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="select"
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
