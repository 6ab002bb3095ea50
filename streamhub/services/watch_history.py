"""
StreamHub Watch-Progress Tracker
Per-user, per-movie playback position with derived completion and continue-watching selection
"""

import logging
import math
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from ..errors import AppError, ErrorKind
from ..models import WatchHistory, VideoQuality
from ..models.watch_history import USER_ID_MAX_LENGTH, TEXT_MAX_LENGTH, PROGRESS_MAX

logger = logging.getLogger(__name__)

COMPLETION_THRESHOLD = 90  # progress strictly above this = completed
CONTINUE_WATCHING_LIMIT = 10
HOME_CONTINUE_WATCHING_LIMIT = 3
HISTORY_LIMIT = 10

_INSERT_BY_DIALECT = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def compute_progress(current_time: float, duration: float) -> int:
    """
    Percentage watched, rounded half-up.
    Not clamped: a position past the duration yields more than 100.
    """
    return math.floor(current_time / duration * 100 + 0.5)


def is_completed(progress: int) -> bool:
    return progress > COMPLETION_THRESHOLD


def validate_user_id(user_id: Optional[str]):
    if not user_id or not str(user_id).strip():
        raise AppError(ErrorKind.INVALID_INPUT, "User ID is required")
    if len(user_id) > USER_ID_MAX_LENGTH:
        raise AppError(ErrorKind.INVALID_INPUT, f"User ID must be at most {USER_ID_MAX_LENGTH} characters")


def _validate_ids(user_id: Optional[str], movie_id: Optional[int]):
    validate_user_id(user_id)
    if movie_id is None or isinstance(movie_id, bool) or not isinstance(movie_id, int) or movie_id <= 0:
        raise AppError(ErrorKind.INVALID_INPUT, "Movie ID must be a positive integer")


def _validate_limit(limit: int):
    if limit < 1:
        raise AppError(ErrorKind.INVALID_INPUT, "Limit must be at least 1")


def _validate_position(current_time: float, duration: float):
    if duration is None or not math.isfinite(duration) or duration <= 0:
        raise AppError(ErrorKind.INVALID_INPUT, "Duration must be greater than 0")
    if current_time is None or not math.isfinite(current_time) or current_time < 0:
        raise AppError(ErrorKind.INVALID_INPUT, "Current time must be 0 or greater")

    # The ratio can still overflow for finite inputs
    ratio = current_time / duration * 100
    if not math.isfinite(ratio) or ratio >= PROGRESS_MAX:
        raise AppError(ErrorKind.INVALID_INPUT, "Current time is out of range for the given duration")


def _validate_metadata(title: Optional[str], poster_path: Optional[str]):
    for name, value in (("Title", title), ("Poster path", poster_path)):
        if value is not None and len(value) > TEXT_MAX_LENGTH:
            raise AppError(ErrorKind.INVALID_INPUT, f"{name} must be at most {TEXT_MAX_LENGTH} characters")


def _parse_quality(quality) -> Optional[VideoQuality]:
    if quality is None:
        return None
    try:
        return VideoQuality(quality)
    except ValueError:
        allowed = ", ".join(q.value for q in VideoQuality)
        raise AppError(ErrorKind.INVALID_INPUT, f"Quality must be one of: {allowed}")


def record_progress(
    db: Session,
    user_id: str,
    movie_id: int,
    current_time: float,
    duration: float,
    title: Optional[str] = None,
    poster_path: Optional[str] = None,
    quality: Optional[str] = None,
) -> WatchHistory:
    """
    Upsert the watch record for (user_id, movie_id).

    progress and completed are always recomputed from current_time/duration.
    title, poster_path and quality are only overwritten when given.
    """
    _validate_ids(user_id, movie_id)
    _validate_position(current_time, duration)
    _validate_metadata(title, poster_path)
    video_quality = _parse_quality(quality)

    progress = compute_progress(current_time, duration)
    completed = is_completed(progress)
    now = datetime.now(timezone.utc)

    dialect = db.get_bind().dialect.name
    insert = _INSERT_BY_DIALECT.get(dialect)
    if insert is None:
        raise RuntimeError(f"Atomic upsert is not supported for dialect '{dialect}'")

    values = {
        "user_id": user_id,
        "movie_id": movie_id,
        "current_time_seconds": current_time,
        "duration_seconds": duration,
        "progress": progress,
        "completed": completed,
        "last_played_at": now,
        "updated_at": now,
    }
    updates = dict(values)
    del updates["user_id"], updates["movie_id"]

    optional = {"title": title, "poster_path": poster_path, "quality": video_quality}
    for column, value in optional.items():
        if value is not None:
            updates[column] = value
    values.update({column: value for column, value in optional.items() if value is not None})
    values.setdefault("quality", VideoQuality.Q720P)

    stmt = insert(WatchHistory).values(**values).on_conflict_do_update(
        index_elements=["user_id", "movie_id"],
        set_=updates,
    )

    try:
        db.execute(stmt)
        db.commit()
    except Exception:
        db.rollback()
        raise

    record = (
        db.query(WatchHistory)
        .populate_existing()
        .filter(WatchHistory.user_id == user_id, WatchHistory.movie_id == movie_id)
        .one()
    )

    logger.info(f"▶️ Progress user={user_id} movie={movie_id}: {progress}% (completed={completed})")
    return record


def get_watch_record(db: Session, user_id: str, movie_id: int) -> WatchHistory:
    """Fetch the record for (user_id, movie_id) or raise NotFound"""
    _validate_ids(user_id, movie_id)

    record = db.query(WatchHistory).filter(
        WatchHistory.user_id == user_id,
        WatchHistory.movie_id == movie_id
    ).first()

    if not record:
        raise AppError(ErrorKind.NOT_FOUND, "No watch history found for this movie")
    return record


def select_continue_watching(db: Session, user_id: str, limit: int = CONTINUE_WATCHING_LIMIT) -> List[WatchHistory]:
    """
    Titles with genuine partial progress (0 < progress < 90, not completed),
    most recently played first.
    """
    validate_user_id(user_id)
    _validate_limit(limit)

    return db.query(WatchHistory).filter(
        WatchHistory.user_id == user_id,
        WatchHistory.completed.is_(False),
        WatchHistory.progress > 0,
        WatchHistory.progress < COMPLETION_THRESHOLD,
    ).order_by(desc(WatchHistory.last_played_at), desc(WatchHistory.id)).limit(limit).all()


def select_user_history(db: Session, user_id: str, limit: int = HISTORY_LIMIT) -> List[WatchHistory]:
    """Every record of the user, most recently played first"""
    validate_user_id(user_id)
    _validate_limit(limit)

    return db.query(WatchHistory).filter(
        WatchHistory.user_id == user_id
    ).order_by(desc(WatchHistory.last_played_at), desc(WatchHistory.id)).limit(limit).all()
