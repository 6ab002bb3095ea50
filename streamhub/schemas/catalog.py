from pydantic import BaseModel
from typing import List, Optional


class MediaItem(BaseModel):
    id: int
    title: Optional[str] = None
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    genre_ids: List[int] = []
    overview: Optional[str] = None
    release_date: Optional[str] = None
    type: str
    vote_average: Optional[float] = None

