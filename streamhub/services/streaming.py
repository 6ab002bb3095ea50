"""
Streaming details: quality table and playback metadata.
No video is produced or served here; URLs point at the HLS origin.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..config import settings
from ..errors import AppError, ErrorKind
from ..models import VideoQuality
from .catalog import TMDBCatalog, image_url
from .watch_history import get_watch_record

logger = logging.getLogger(__name__)

QUALITY_PROFILES = {
    VideoQuality.Q360P: {"resolution": "640x360", "bitrate_kbps": 800},
    VideoQuality.Q480P: {"resolution": "854x480", "bitrate_kbps": 1400},
    VideoQuality.Q720P: {"resolution": "1280x720", "bitrate_kbps": 2800},
    VideoQuality.Q1080P: {"resolution": "1920x1080", "bitrate_kbps": 5000},
}


def get_supported_qualities(movie_id: int) -> List[Dict[str, Any]]:
    """Every movie is packaged in all four renditions"""
    return [
        {
            "quality": quality.value,
            "url": stream_url(movie_id, quality),
            **profile,
        }
        for quality, profile in QUALITY_PROFILES.items()
    ]


def stream_url(movie_id: int, quality: VideoQuality) -> str:
    return f"{settings.STREAM_BASE_URL.rstrip('/')}/{movie_id}/{quality.value}/index.m3u8"


def parse_quality(quality: Optional[str]) -> VideoQuality:
    try:
        return VideoQuality(quality or settings.DEFAULT_VIDEO_QUALITY)
    except ValueError:
        raise AppError(ErrorKind.INVALID_INPUT, f"Unsupported video quality: {quality}")


async def get_streaming_details(
    db: Session,
    catalog: TMDBCatalog,
    movie_id: Optional[int],
    user_id: Optional[str],
    quality: Optional[str] = None,
) -> Dict[str, Any]:
    """Resolve playback metadata and the resume point for a started movie"""
    if not movie_id or not user_id:
        raise AppError(ErrorKind.INVALID_INPUT, "Movie ID and User ID are required")

    video_quality = parse_quality(quality)
    movie = await catalog.movie_details(movie_id)
    record = await asyncio.to_thread(get_watch_record, db, user_id, movie_id)

    runtime_minutes = movie.get("runtime") or 0
    logger.info(f"🎬 Stream user={user_id} movie={movie_id} quality={video_quality.value} resume={record.current_time_seconds}s")

    return {
        "movieId": movie_id,
        "title": movie.get("title"),
        "overview": movie.get("overview"),
        "posterPath": image_url(movie.get("poster_path"), "w500"),
        "backdropPath": image_url(movie.get("backdrop_path"), "original"),
        "runtimeSeconds": runtime_minutes * 60 or record.duration_seconds,
        "quality": video_quality.value,
        **QUALITY_PROFILES[video_quality],
        "streamUrl": stream_url(movie_id, video_quality),
        "resumeFrom": record.current_time_seconds,
        "progress": record.progress,
        "completed": record.completed,
        "availableQualities": [q.value for q in QUALITY_PROFILES],
    }
