from typing import List
from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session
import logging

from ...database import get_db
from ...models.watch_history import USER_ID_MAX_LENGTH
from ...schemas.watch_history import WatchProgressUpdate, WatchRecordResponse
from ...services import watch_history as tracker

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/{user_id}/continue-watching", response_model=List[WatchRecordResponse])
def get_continue_watching(
    user_id: str = Path(..., max_length=USER_ID_MAX_LENGTH),
    limit: int = Query(default=tracker.CONTINUE_WATCHING_LIMIT, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """
    Get continue watching list for user
    Returns started, unfinished titles (0% < progress < 90%), most recent first
    """
    records = tracker.select_continue_watching(db, user_id, limit=limit)
    return [record.to_dict() for record in records]


@router.get("/{user_id}/movies/{movie_id}", response_model=WatchRecordResponse)
def get_movie_progress(
    movie_id: int,
    user_id: str = Path(..., max_length=USER_ID_MAX_LENGTH),
    db: Session = Depends(get_db),
):
    """Get watch progress for a specific movie"""
    return tracker.get_watch_record(db, user_id, movie_id).to_dict()


@router.post("/{user_id}/movies/{movie_id}", response_model=WatchRecordResponse)
def update_movie_progress(
    movie_id: int,
    progress_data: WatchProgressUpdate,
    user_id: str = Path(..., max_length=USER_ID_MAX_LENGTH),
    db: Session = Depends(get_db),
):
    """
    Update or create watch progress for a movie
    Marks as completed once progress goes above 90%
    """
    record = tracker.record_progress(
        db,
        user_id,
        movie_id,
        current_time=progress_data.current_time,
        duration=progress_data.duration,
        title=progress_data.title,
        poster_path=progress_data.poster_path,
        quality=progress_data.quality,
    )
    return record.to_dict()


@router.get("/{user_id}", response_model=List[WatchRecordResponse])
def get_user_history(
    user_id: str = Path(..., max_length=USER_ID_MAX_LENGTH),
    limit: int = Query(default=tracker.HISTORY_LIMIT, ge=1, le=100),
    db: Session = Depends(get_db),
):
    """Full watch history, most recently played first"""
    records = tracker.select_user_history(db, user_id, limit=limit)
    return [record.to_dict() for record in records]
