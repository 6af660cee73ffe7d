from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional
from datetime import datetime
from urllib.parse import urlparse

from app.schemas.article import make_excerpt


def check_http_url(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("must be a valid http(s) URL")
    return value


class VideoBase(BaseModel):
    """Base schema for video"""
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    video_url: str = Field(..., max_length=500)
    thumbnail_url: Optional[str] = Field(None, max_length=500)
    is_published: bool = False

    @field_validator("video_url", "thumbnail_url")
    @classmethod
    def valid_url(cls, value):
        return check_http_url(value)


class VideoCreate(VideoBase):
    """Schema for creating a new video"""
    pass


class VideoUpdate(BaseModel):
    """Schema for updating a video (all fields optional)"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    video_url: Optional[str] = Field(None, max_length=500)
    thumbnail_url: Optional[str] = Field(None, max_length=500)
    is_published: Optional[bool] = None

    @field_validator("title", "video_url", "is_published")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value

    @field_validator("video_url", "thumbnail_url")
    @classmethod
    def valid_url(cls, value):
        return check_http_url(value)


class VideoResponse(VideoBase):
    id: int
    user_id: int
    slug: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class VideoSummary(BaseModel):
    """Listing entry: description reduced to an excerpt, no video URL"""
    id: int
    title: str
    slug: str
    excerpt: str = ""
    thumbnail_url: Optional[str] = None
    is_published: bool
    created_at: datetime

    class Config:
        from_attributes = True

    @model_validator(mode="before")
    @classmethod
    def fill_excerpt(cls, data):
        if hasattr(data, "video_url"):
            return {
                "id": data.id,
                "title": data.title,
                "slug": data.slug,
                "excerpt": make_excerpt(data.description),
                "thumbnail_url": data.thumbnail_url,
                "is_published": data.is_published,
                "created_at": data.created_at,
            }
        return data
