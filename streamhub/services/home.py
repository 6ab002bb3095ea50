import asyncio
import logging
from typing import Any, Dict

from sqlalchemy.orm import Session

from .catalog import TMDBCatalog, ANIMATION_GENRE_ID, DRAMA_GENRE_ID
from .watch_history import select_continue_watching, HOME_CONTINUE_WATCHING_LIMIT

logger = logging.getLogger(__name__)


async def get_home_screen(db: Session, catalog: TMDBCatalog, user_id: str) -> Dict[str, Any]:
    """Continue-watching rail plus the catalog rails, fetched concurrently"""
    # Session calls block, so they run off the event loop
    continue_watching = await asyncio.to_thread(
        select_continue_watching, db, user_id, limit=HOME_CONTINUE_WATCHING_LIMIT
    )

    (
        trending_movies,
        trending_tv,
        for_you,
        anime_movies,
        drama_movies,
        popular_series,
    ) = await asyncio.gather(
        catalog.trending_movies("day"),
        catalog.trending_tv("day"),
        catalog.popular_movies(),
        catalog.discover_movies(ANIMATION_GENRE_ID),
        catalog.discover_movies(DRAMA_GENRE_ID),
        catalog.popular_tv(),
    )

    logger.info(f"🏠 Home screen for user {user_id}: {len(continue_watching)} in progress")

    return {
        "success": True,
        "continueWatching": [record.to_dict() for record in continue_watching],
        "trending": trending_movies + trending_tv,
        "forYou": for_you,
        "animeMovies": anime_movies,
        "dramaMovies": drama_movies,
        "popularSeries": popular_series,
    }
