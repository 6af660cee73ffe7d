from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.core.database import Base


class VideoView(Base):
    """
    Marker that a user has watched a video. One row per (user, video) pair.
    """
    __tablename__ = "video_views"
    __table_args__ = (
        UniqueConstraint("user_id", "video_id", name="uq_video_views_user_video"),
        Index("ix_video_views_user_created", "user_id", "created_at"),
    )

    # Primary key
    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False
    )
    # Cleared when the video is deleted; the row still counts towards that day
    video_id = Column(
        Integer,
        ForeignKey("videos.id", ondelete="SET NULL"),
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
    video = relationship("Video", back_populates="views", lazy="select")

    def __repr__(self):
        return f"<VideoView(user_id={self.user_id}, video_id={self.video_id})>"
