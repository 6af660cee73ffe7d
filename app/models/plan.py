from enum import Enum as PythonEnum

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from sqlalchemy.types import Enum as SQLAlchemyEnum

from app.core.database import Base

# Limit sentinel: the plan grants unlimited daily access
UNLIMITED = -1


class PlanKind(str, PythonEnum):
    FREE = "FREE"
    PLUS_READER = "PLUS_READER"
    PRO_READER = "PRO_READER"


class ContentKind(str, PythonEnum):
    ARTICLE = "ARTICLE"
    VIDEO = "VIDEO"


class Plan(Base):
    """
    Subscription plan with daily quotas.

    Limits: -1 means unlimited, 0 means no access, N > 0 is an exact cap on
    distinct items per calendar day.
    """
    __tablename__ = "plans"
    __table_args__ = (
        CheckConstraint("daily_article_limit >= -1", name="ck_plans_article_limit"),
        CheckConstraint("daily_video_limit >= -1", name="ck_plans_video_limit"),
    )

    # Primary key
    id = Column(Integer, primary_key=True, index=True)

    # Display name and URL slug derived from it
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, index=True)

    # Plan description for UI display
    description = Column(Text, nullable=True)

    kind = Column(SQLAlchemyEnum(PlanKind), nullable=False)

    # Daily quotas
    daily_article_limit = Column(Integer, nullable=False, default=0)
    daily_video_limit = Column(Integer, nullable=False, default=0)

    # Inactive plans accept no new subscriptions; current subscribers keep theirs
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

    # Relationships
    subscriptions = relationship(
        "Subscription",
        back_populates="plan",
        lazy="select"
    )

    def daily_limit_for(self, kind: ContentKind) -> int:
        if kind == ContentKind.ARTICLE:
            return self.daily_article_limit
        return self.daily_video_limit

    def __repr__(self):
        return f"<Plan(id={self.id}, name='{self.name}', kind='{self.kind}')>"
