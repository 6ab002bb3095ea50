import os

# Settings are read at import time, so the environment is prepared first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = "redis://localhost:6379/15"
os.environ["ALLOWED_ORIGINS"] = "http://localhost:3000"
os.environ["TMDB_API_KEY"] = "test-tmdb-key"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["MOCK_PAYMENT_DELAY_SECONDS"] = "0"
os.environ["AUTO_CREATE_TABLES"] = "false"

import asyncio
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from streamhub import models  # noqa: F401
from streamhub.api.deps import get_catalog, get_payment_gateway
from streamhub.database import Base, SessionLocal, engine
from streamhub.errors import AppError, ErrorKind
from streamhub.main import app
from streamhub.services.payment_gateway import MockPaymentGateway


def pytest_configure(config):
    config.addinivalue_line("markers", "payment: payment and subscription tests")
    config.addinivalue_line("markers", "catalog: tests touching the catalog client")


def media(item_id, media_type="movie", title=None):
    return {
        "id": item_id,
        "title": title or f"{media_type} {item_id}",
        "poster_path": f"https://image.tmdb.org/t/p/w500/{item_id}.jpg",
        "backdrop_path": None,
        "genre_ids": [18],
        "overview": "Overview",
        "release_date": "2024-01-01",
        "type": media_type,
        "vote_average": 7.5,
    }


class FakeCatalog:
    """In-memory stand-in for TMDBCatalog"""

    def __init__(self):
        self.details = {
            42: {
                "id": 42,
                "title": "The Answer",
                "overview": "A movie about everything",
                "poster_path": "/answer.jpg",
                "backdrop_path": None,
                "runtime": 15,
            },
        }
        self.searches = []

    async def trending_movies(self, window="day"):
        if window not in ("day", "week"):
            raise AppError(ErrorKind.INVALID_INPUT, "Trending window must be one of: day, week")
        return [media(1), media(2)]

    async def trending_tv(self, window="day"):
        return [media(101, "tv")]

    async def popular_movies(self):
        return [media(3)]

    async def discover_movies(self, genre_id):
        return [media(1000 + genre_id)]

    async def popular_tv(self):
        return [media(201, "tv"), media(202, "tv")]

    async def movie_recommendations(self, movie_id):
        return [media(movie_id + 1)]

    async def search_movies(self, query, page=1):
        self.searches.append((query, page))
        return {"page": page, "total_pages": 1, "total_results": 1, "results": [media(7, title=query)]}

    async def movie_details(self, movie_id):
        if movie_id not in self.details:
            raise AppError(ErrorKind.NOT_FOUND, "Movie details not found")
        return self.details[movie_id]

    async def genres(self):
        return [{"id": 16, "name": "Animation"}, {"id": 18, "name": "Drama"}]


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_catalog():
    return FakeCatalog()


@pytest.fixture
def gateway():
    return MockPaymentGateway(delay_seconds=0)


@pytest.fixture
def client(db_session, fake_catalog, gateway):
    app.dependency_overrides[get_catalog] = lambda: fake_catalog
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def valid_card():
    return {
        "cardNumber": "4242424242424242",
        "cardholderName": "Jane Doe",
        "expiryMonth": 12,
        "expiryYear": datetime.now().year + 3,
        "cvv": "123",
    }


class LoopUsage:
    """Records, per call of a watched sync function, whether it ran on the event loop thread"""

    def __init__(self, monkeypatch):
        self.monkeypatch = monkeypatch
        self.calls = []

    def watch(self, target, name):
        real = getattr(target, name)

        def wrapper(*args, **kwargs):
            try:
                asyncio.get_running_loop()
                self.calls.append(True)
            except RuntimeError:
                self.calls.append(False)
            return real(*args, **kwargs)

        self.monkeypatch.setattr(target, name, wrapper)


@pytest.fixture
def loop_usage(monkeypatch):
    return LoopUsage(monkeypatch)
