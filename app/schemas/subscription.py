from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from app.schemas.plan import PlanResponse


class SubscriptionCreate(BaseModel):
    """Schema for subscribing to a plan"""
    plan_id: int = Field(..., ge=1)


class SubscriptionResponse(BaseModel):
    """Schema for subscription response"""
    id: int
    user_id: int
    plan_id: int
    starts_at: datetime
    ends_at: Optional[datetime] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SubscriptionWithPlan(SubscriptionResponse):
    """Schema including plan details"""
    plan: PlanResponse

    class Config:
        from_attributes = True


class CurrentSubscriptionResponse(SubscriptionWithPlan):
    """
    Active subscription with today's usage.

    Counts are distinct items first opened today (server timezone).
    """
    articles_read_today: int
    videos_watched_today: int
