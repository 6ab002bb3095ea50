from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

from ..models.watch_history import TEXT_MAX_LENGTH


class WatchProgressUpdate(BaseModel):
    # progress/completed are derived server-side and rejected if sent
    model_config = ConfigDict(extra="forbid")

    current_time: float
    duration: float
    title: Optional[str] = Field(default=None, max_length=TEXT_MAX_LENGTH)
    poster_path: Optional[str] = Field(default=None, max_length=TEXT_MAX_LENGTH)
    quality: Optional[str] = None


class WatchRecordResponse(BaseModel):
    id: int
    userId: str
    movieId: int
    title: Optional[str] = None
    posterPath: Optional[str] = None
    currentTime: float
    duration: float
    progress: int
    completed: bool
    quality: str
    watchedAt: Optional[str] = None
    lastPlayedAt: Optional[str] = None
