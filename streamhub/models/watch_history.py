from sqlalchemy import Column, Integer, String, Float, DateTime, Boolean, Enum as SQLEnum, Index, UniqueConstraint
from sqlalchemy.sql import func
from enum import Enum
from ..database import Base

USER_ID_MAX_LENGTH = 64
TEXT_MAX_LENGTH = 500
PROGRESS_MAX = 2**31 - 1  # Integer column upper bound


class VideoQuality(str, Enum):
    """Playback quality options"""
    Q360P = "360p"
    Q480P = "480p"
    Q720P = "720p"
    Q1080P = "1080p"


class WatchHistory(Base):
    """Watch History - one row per (user, movie), resume playback tracking"""
    __tablename__ = "watch_history"
    __table_args__ = (
        UniqueConstraint("user_id", "movie_id", name="uq_watch_history_user_movie"),
        Index("ix_watch_history_user_last_played", "user_id", "last_played_at"),
        Index("ix_watch_history_user_completed", "user_id", "completed"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(USER_ID_MAX_LENGTH), nullable=False, index=True)
    movie_id = Column(Integer, nullable=False)

    # Display metadata
    title = Column(String(TEXT_MAX_LENGTH), nullable=True)
    poster_path = Column(String(TEXT_MAX_LENGTH), nullable=True)

    # Playback position (seconds)
    current_time_seconds = Column(Float, nullable=False, default=0.0)
    duration_seconds = Column(Float, nullable=False)

    # Derived from position/duration on every write
    progress = Column(Integer, nullable=False, default=0)
    completed = Column(Boolean, nullable=False, default=False)

    quality = Column(
        SQLEnum(VideoQuality, name="video_quality_type", values_callable=lambda e: [q.value for q in e]),
        nullable=False,
        default=VideoQuality.Q720P,
    )

    watched_at = Column(DateTime(timezone=True), server_default=func.now())
    last_played_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<WatchHistory(user_id={self.user_id}, movie_id={self.movie_id}, progress={self.progress})>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "movieId": self.movie_id,
            "title": self.title,
            "posterPath": self.poster_path,
            "currentTime": self.current_time_seconds,
            "duration": self.duration_seconds,
            "progress": self.progress,
            "completed": self.completed,
            "quality": self.quality.value if self.quality else None,
            "watchedAt": self.watched_at.isoformat() if self.watched_at else None,
            "lastPlayedAt": self.last_played_at.isoformat() if self.last_played_at else None,
        }
