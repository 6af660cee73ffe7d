from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.core.database import Base


class Video(Base):
    """
    Video content published by an administrator.

    The video itself is hosted elsewhere; only its URL is stored.
    """
    __tablename__ = "videos"
    # Ids are never reused, so view records of deleted items never match new ones
    __table_args__ = {"sqlite_autoincrement": True}

    # Primary key
    id = Column(Integer, primary_key=True, index=True)

    # Foreign key: the admin who created the video
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    title = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    video_url = Column(String(500), nullable=False)
    thumbnail_url = Column(String(500), nullable=True)

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
        "VideoView",
        back_populates="video",
        passive_deletes=True,
        lazy="select"
    )

    def __repr__(self):
        return f"<Video(id={self.id}, slug='{self.slug}', is_published={self.is_published})>"
