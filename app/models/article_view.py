from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.core.database import Base


class ArticleView(Base):
    """
    Marker that a user has read an article.

    One row per (user, article) pair: re-reading never creates a second row,
    so daily usage counts distinct articles first opened that day.
    """
    __tablename__ = "article_views"
    __table_args__ = (
        UniqueConstraint("user_id", "article_id", name="uq_article_views_user_article"),
        Index("ix_article_views_user_created", "user_id", "created_at"),
    )

    # Primary key
    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False
    )
    # Cleared when the article is deleted; the row still counts towards that day
    article_id = Column(
        Integer,
        ForeignKey("articles.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    # Moment of first access (set from the application clock)
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    # Relationships
    article = relationship("Article", back_populates="views", lazy="select")

    def __repr__(self):
        return f"<ArticleView(user_id={self.user_id}, article_id={self.article_id})>"
