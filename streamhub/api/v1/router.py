from fastapi import APIRouter
from . import home, movies, streaming, subscriptions, watch_history

api_router = APIRouter()

api_router.include_router(home.router, prefix="/home", tags=["home"])
api_router.include_router(movies.router, prefix="/movies", tags=["movies"])
api_router.include_router(streaming.router, prefix="/streaming", tags=["streaming"])
api_router.include_router(watch_history.router, prefix="/watch-history", tags=["watch-history"])
api_router.include_router(subscriptions.router, prefix="/subscriptions", tags=["subscriptions"])

__all__ = ["api_router"]
