import logging
from typing import List

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..errors import AppError, ErrorKind
from ..models import SearchHistory
from ..models.search_history import QUERY_MAX_LENGTH
from .watch_history import validate_user_id

logger = logging.getLogger(__name__)

RECENT_SEARCHES_LIMIT = 10


def validate_query(query: str) -> str:
    query = (query or "").strip()
    if not query:
        raise AppError(ErrorKind.INVALID_INPUT, "Search query is required")
    if len(query) > QUERY_MAX_LENGTH:
        raise AppError(ErrorKind.INVALID_INPUT, f"Search query must be at most {QUERY_MAX_LENGTH} characters")
    return query


def record_search(db: Session, user_id: str, query: str) -> SearchHistory:
    validate_user_id(user_id)
    entry = SearchHistory(user_id=user_id, query=validate_query(query))
    try:
        db.add(entry)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return entry


def recent_searches(db: Session, user_id: str, limit: int = RECENT_SEARCHES_LIMIT) -> List[str]:
    """Distinct queries, newest first"""
    validate_user_id(user_id)

    latest = func.max(SearchHistory.id).label("latest")
    rows = db.query(SearchHistory.query, latest).filter(
        SearchHistory.user_id == user_id
    ).group_by(SearchHistory.query).order_by(latest.desc()).limit(limit).all()

    return [row[0] for row in rows]


def clear_search_history(db: Session, user_id: str) -> int:
    validate_user_id(user_id)

    try:
        deleted = db.query(SearchHistory).filter(SearchHistory.user_id == user_id).delete()
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(f"🧹 Cleared {deleted} searches for user {user_id}")
    return deleted
