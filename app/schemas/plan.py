from pydantic import BaseModel, Field, StrictInt, field_validator
from typing import Optional
from datetime import datetime

from app.models.plan import PlanKind


class PlanBase(BaseModel):
    """
    Base schema for plan.

    Limits: -1 = unlimited, 0 = no access, N > 0 = distinct items per day.
    The -1 sentinel is kept as an integer in every payload.
    """
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    kind: PlanKind
    daily_article_limit: StrictInt = Field(..., ge=-1)
    daily_video_limit: StrictInt = Field(..., ge=-1)
    is_active: bool = True

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value


class PlanCreate(PlanBase):
    """Schema for creating a new plan"""
    pass


class PlanUpdate(BaseModel):
    """Schema for updating a plan (all fields optional)"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    kind: Optional[PlanKind] = None
    daily_article_limit: Optional[StrictInt] = Field(None, ge=-1)
    daily_video_limit: Optional[StrictInt] = Field(None, ge=-1)
    is_active: Optional[bool] = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("name", "kind", "daily_article_limit", "daily_video_limit", "is_active")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class PlanResponse(PlanBase):
    """Schema for plan response"""
    id: int
    slug: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
