from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...errors import AppError, ErrorKind
from ...models.watch_history import USER_ID_MAX_LENGTH
from ...services import streaming as streaming_service
from ...services.catalog import TMDBCatalog
from ..deps import get_catalog

router = APIRouter()


@router.get("/stream")
async def get_streaming_details(
    movie_id: Optional[int] = Query(default=None),
    user_id: Optional[str] = Query(default=None, max_length=USER_ID_MAX_LENGTH),
    quality: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
    catalog: TMDBCatalog = Depends(get_catalog),
):
    """Get stream URL, quality metadata and resume point"""
    details = await streaming_service.get_streaming_details(db, catalog, movie_id, user_id, quality)
    return {"success": True, "streamingDetails": details}


@router.get("/qualities/{movie_id}")
def get_video_qualities(movie_id: str):
    """Get supported video qualities"""
    try:
        movie_id_number = int(movie_id)
    except ValueError:
        raise AppError(ErrorKind.INVALID_INPUT, "Invalid Movie ID format")

    return {
        "success": True,
        "qualities": streaming_service.get_supported_qualities(movie_id_number),
    }
