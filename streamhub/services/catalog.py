"""
TMDB catalog client for StreamHub.
- Async httpx client shared across requests.
- Raw TMDB responses cached in Redis; a cache outage only costs a round trip.
- List results normalised by transform_media() before leaving this module.
"""
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import httpx

from ..config import settings
from ..errors import AppError, ErrorKind
from ..redis_client import RedisClient, redis_client

logger = logging.getLogger(__name__)

TRENDING_WINDOWS = ("day", "week")
ANIMATION_GENRE_ID = 16
DRAMA_GENRE_ID = 18


def image_url(path: Optional[str], size: str) -> Optional[str]:
    if not path:
        return None
    return f"{settings.TMDB_IMAGE_BASE_URL}/{size}{path}"


def transform_media(item: Dict[str, Any], media_type: str) -> Dict[str, Any]:
    """Reshape a TMDB movie/tv list item into the API's media shape"""
    return {
        "id": item.get("id"),
        "title": item.get("title") if media_type == "movie" else item.get("name"),
        "poster_path": image_url(item.get("poster_path"), "w500"),
        "backdrop_path": image_url(item.get("backdrop_path"), "original"),
        "genre_ids": item.get("genre_ids") or [],
        "overview": item.get("overview"),
        "release_date": item.get("release_date") or item.get("first_air_date"),
        "type": media_type,
        "vote_average": item.get("vote_average"),
    }


class TMDBCatalog:
    """Read-only access to TMDB titles, genres and search"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        cache: Optional[RedisClient] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.TMDB_API_KEY
        self.base_url = (base_url or settings.TMDB_BASE_URL).rstrip("/")
        self.cache = cache
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=settings.TMDB_TIMEOUT_SECONDS)
        return self._client

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def cache_key(path: str, params: Dict[str, Any]) -> str:
        return f"tmdb:{path}:{urlencode(sorted(params.items()))}"

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None, use_cache: bool = True) -> Dict[str, Any]:
        if not self.api_key:
            raise AppError(ErrorKind.CATALOG_UNAVAILABLE, "Movie catalog is not configured")

        params = params or {}
        key = self.cache_key(path, params)

        if use_cache and self.cache:
            cached = await self.cache.get(key)
            if cached is not None:
                return cached

        try:
            response = await self.client.get(
                f"{self.base_url}{path}",
                params={"api_key": self.api_key, **params},
            )
            response.raise_for_status()
            data = response.json()

        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise AppError(ErrorKind.NOT_FOUND, "Movie details not found")
            logger.error(f"❌ TMDB {path} returned {e.response.status_code}")
            raise AppError(ErrorKind.CATALOG_UNAVAILABLE, "Movie catalog request failed")

        except httpx.HTTPError as e:
            logger.error(f"❌ TMDB {path} request error: {e}")
            raise AppError(ErrorKind.CATALOG_UNAVAILABLE, "Movie catalog request failed")

        if use_cache and self.cache:
            await self.cache.set(key, data, expire=settings.CATALOG_CACHE_EXPIRATION)
        return data

    async def _results(self, path: str, media_type: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        data = await self._get(path, params)
        return [transform_media(item, media_type) for item in data.get("results", [])]

    # ==================== Lists ====================

    async def trending_movies(self, window: str = "day") -> List[Dict[str, Any]]:
        return await self._results(f"/trending/movie/{_check_window(window)}", "movie")

    async def trending_tv(self, window: str = "day") -> List[Dict[str, Any]]:
        return await self._results(f"/trending/tv/{_check_window(window)}", "tv")

    async def popular_movies(self) -> List[Dict[str, Any]]:
        return await self._results("/discover/movie", "movie", {"sort_by": "popularity.desc"})

    async def discover_movies(self, genre_id: int) -> List[Dict[str, Any]]:
        return await self._results(
            "/discover/movie", "movie",
            {"with_genres": genre_id, "sort_by": "popularity.desc"},
        )

    async def popular_tv(self) -> List[Dict[str, Any]]:
        return await self._results("/tv/popular", "tv")

    async def movie_recommendations(self, movie_id: int) -> List[Dict[str, Any]]:
        return await self._results(f"/movie/{movie_id}/recommendations", "movie")

    async def search_movies(self, query: str, page: int = 1) -> Dict[str, Any]:
        # Searches are too varied to be worth caching
        data = await self._get("/search/movie", {"query": query, "page": page}, use_cache=False)
        return {
            "page": data.get("page", page),
            "total_pages": data.get("total_pages", 0),
            "total_results": data.get("total_results", 0),
            "results": [transform_media(item, "movie") for item in data.get("results", [])],
        }

    # ==================== Single items ====================

    async def movie_details(self, movie_id: int) -> Dict[str, Any]:
        """Raw TMDB movie details"""
        return await self._get(f"/movie/{movie_id}")

    async def genres(self) -> List[Dict[str, Any]]:
        data = await self._get("/genre/movie/list")
        return data.get("genres", [])


def _check_window(window: str) -> str:
    if window not in TRENDING_WINDOWS:
        raise AppError(ErrorKind.INVALID_INPUT, f"Trending window must be one of: {', '.join(TRENDING_WINDOWS)}")
    return window


catalog = TMDBCatalog(cache=redis_client)
