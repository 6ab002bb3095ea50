import asyncio
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
import logging

from ...database import get_db
from ...models.search_history import QUERY_MAX_LENGTH
from ...models.watch_history import USER_ID_MAX_LENGTH
from ...schemas.catalog import MediaItem
from ...services.catalog import TMDBCatalog
from ...services import search_history
from ..deps import get_catalog, rate_limit

router = APIRouter(dependencies=[Depends(rate_limit)])
logger = logging.getLogger(__name__)


@router.get("/trending", response_model=List[MediaItem])
async def get_trending_movies(
    window: str = Query(default="day"),
    catalog: TMDBCatalog = Depends(get_catalog),
):
    return await catalog.trending_movies(window)


@router.get("/search")
async def search_movies(
    query: Optional[str] = Query(default=None, max_length=QUERY_MAX_LENGTH),
    user_id: Optional[str] = Query(default=None, max_length=USER_ID_MAX_LENGTH),
    page: int = Query(default=1, ge=1, le=500),
    db: Session = Depends(get_db),
    catalog: TMDBCatalog = Depends(get_catalog),
):
    """Search movies by title, remembering the query for the user"""
    query = search_history.validate_query(query)

    results = await catalog.search_movies(query, page=page)
    if user_id:
        await asyncio.to_thread(search_history.record_search, db, user_id, query)

    return {"success": True, **results}


@router.get("/recent-searches")
def get_recent_searches(
    user_id: Optional[str] = Query(default=None, max_length=USER_ID_MAX_LENGTH),
    limit: int = Query(default=search_history.RECENT_SEARCHES_LIMIT, ge=1, le=50),
    db: Session = Depends(get_db),
):
    return {"success": True, "searches": search_history.recent_searches(db, user_id, limit=limit)}


@router.delete("/clear-search-history")
def clear_search_history(
    user_id: Optional[str] = Query(default=None, max_length=USER_ID_MAX_LENGTH),
    db: Session = Depends(get_db),
):
    deleted = search_history.clear_search_history(db, user_id)
    return {"success": True, "deleted": deleted}


@router.get("/genres")
async def get_movies_by_genre(
    genre_id: Optional[int] = Query(default=None),
    catalog: TMDBCatalog = Depends(get_catalog),
):
    """Genre list, or the most popular movies of one genre when genre_id is given"""
    if genre_id is None:
        return {"success": True, "genres": await catalog.genres()}
    return {"success": True, "genreId": genre_id, "results": await catalog.discover_movies(genre_id)}


@router.get("/{movie_id}")
async def get_movie_details(
    movie_id: int,
    catalog: TMDBCatalog = Depends(get_catalog),
):
    return {"success": True, "movie": await catalog.movie_details(movie_id)}


@router.get("/{movie_id}/recommendations", response_model=List[MediaItem])
async def get_movie_recommendations(
    movie_id: int,
    catalog: TMDBCatalog = Depends(get_catalog),
):
    return await catalog.movie_recommendations(movie_id)
