from fastapi import APIRouter, Depends, Path, Response
from sqlalchemy.orm import Session

from ...config import settings
from ...database import get_db
from ...models.watch_history import USER_ID_MAX_LENGTH
from ...services.catalog import TMDBCatalog
from ...services.home import get_home_screen
from ..deps import get_catalog

router = APIRouter()


@router.get("/{user_id}")
async def get_home_screen_data(
    response: Response,
    user_id: str = Path(..., max_length=USER_ID_MAX_LENGTH),
    db: Session = Depends(get_db),
    catalog: TMDBCatalog = Depends(get_catalog),
):
    """Home screen rails: continue watching, trending, genres, popular series"""
    data = await get_home_screen(db, catalog, user_id)
    response.headers["Cache-Control"] = f"public, max-age={settings.HOME_CACHE_MAX_AGE}"
    return data
