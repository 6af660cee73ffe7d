from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional
from datetime import datetime

# Characters of content shown in listings
EXCERPT_LENGTH = 200


def make_excerpt(text: Optional[str], length: int = EXCERPT_LENGTH) -> str:
    """Trim text to at most ``length`` characters, ending with '...' when cut."""
    if not text:
        return ""
    if len(text) <= length:
        return text
    return text[:length].rstrip() + "..."


class ArticleBase(BaseModel):
    """Base schema for article"""
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    featured_image: Optional[str] = Field(None, max_length=500)
    is_published: bool = False


class ArticleCreate(ArticleBase):
    """Schema for creating a new article"""
    pass


class ArticleUpdate(BaseModel):
    """Schema for updating an article (all fields optional)"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)
    featured_image: Optional[str] = Field(None, max_length=500)
    is_published: Optional[bool] = None

    @field_validator("title", "content", "is_published")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class ArticleResponse(ArticleBase):
    """Full article, returned once access is granted"""
    id: int
    user_id: int
    slug: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ArticleSummary(BaseModel):
    """Listing entry: the body is reduced to an excerpt"""
    id: int
    title: str
    slug: str
    excerpt: str = ""
    featured_image: Optional[str] = None
    is_published: bool
    created_at: datetime

    class Config:
        from_attributes = True

    @model_validator(mode="before")
    @classmethod
    def fill_excerpt(cls, data):
        if hasattr(data, "content"):
            return {
                "id": data.id,
                "title": data.title,
                "slug": data.slug,
                "excerpt": make_excerpt(data.content),
                "featured_image": data.featured_image,
                "is_published": data.is_published,
                "created_at": data.created_at,
            }
        return data
