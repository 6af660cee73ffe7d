from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.core.database import Base


class Article(Base):
    """
    Written content published by an administrator.

    Unpublished articles are only visible to admins.
    """
    __tablename__ = "articles"
    # Ids are never reused, so view records of deleted items never match new ones
    __table_args__ = {"sqlite_autoincrement": True}

    # Primary key
    id = Column(Integer, primary_key=True, index=True)

    # Foreign key: the admin who created the article
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, index=True)
    content = Column(Text, nullable=False)
    featured_image = Column(String(500), nullable=True)

    is_published = Column(Boolean, nullable=False, default=False, index=True)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )

    # Relationships
    views = relationship(
        "ArticleView",
        back_populates="article",
        passive_deletes=True,
        lazy="select"
    )

    def __repr__(self):
        return f"<Article(id={self.id}, slug='{self.slug}', is_published={self.is_published})>"
