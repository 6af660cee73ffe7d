from sqlalchemy import Column, Integer, DateTime, ForeignKey, Boolean, Index, text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.core.database import Base


class Subscription(Base):
    """
    Enrollment of a user in a plan.

    Rows are never deleted: cancelling or switching plans only flips
    is_active and stamps ends_at, so the table doubles as history.
    """
    __tablename__ = "subscriptions"
    __table_args__ = (
        # At most one active subscription per user, enforced by the database
        Index(
            "uq_subscriptions_user_active",
            "user_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active"),
        ),
    )

    # Primary key
    id = Column(Integer, primary_key=True, index=True)

    # Foreign key: relationship to User
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Foreign key: relationship to Plan
    plan_id = Column(
        Integer,
        ForeignKey("plans.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    # Subscription period
    starts_at = Column(DateTime(timezone=True), nullable=False)
    ends_at = Column(DateTime(timezone=True), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True, index=True)

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

    # Relationships
    user = relationship(
        "User",
        back_populates="subscriptions",
        lazy="select"
    )
    plan = relationship(
        "Plan",
        back_populates="subscriptions",
        lazy="joined"
    )

    def __repr__(self):
        return f"<Subscription(id={self.id}, user_id={self.user_id}, plan_id={self.plan_id}, is_active={self.is_active})>"
