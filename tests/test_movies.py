from unittest.mock import AsyncMock, patch

import pytest

from streamhub.config import settings
from streamhub.services import search_history


def test_trending(client):
    response = client.get("/api/v1/movies/trending")
    assert response.status_code == 200
    assert [m["id"] for m in response.json()] == [1, 2]


def test_trending_bad_window(client):
    assert client.get("/api/v1/movies/trending", params={"window": "year"}).status_code == 400


def test_search_records_history(client, fake_catalog):
    response = client.get("/api/v1/movies/search", params={"query": " alien ", "user_id": "s1"})

    assert response.status_code == 200
    assert response.json()["results"][0]["title"] == "alien"
    assert fake_catalog.searches == [("alien", 1)]

    client.get("/api/v1/movies/search", params={"query": "heat", "user_id": "s1"})
    client.get("/api/v1/movies/search", params={"query": "alien", "user_id": "s1"})

    recent = client.get("/api/v1/movies/recent-searches", params={"user_id": "s1"}).json()["searches"]
    assert recent == ["alien", "heat"]


def test_search_requires_query(client):
    response = client.get("/api/v1/movies/search", params={"query": "  "})
    assert response.status_code == 400
    assert response.json()["kind"] == "InvalidInput"


def test_clear_search_history(client):
    client.get("/api/v1/movies/search", params={"query": "alien", "user_id": "s2"})

    cleared = client.delete("/api/v1/movies/clear-search-history", params={"user_id": "s2"})
    assert cleared.json()["deleted"] == 1
    assert client.get("/api/v1/movies/recent-searches", params={"user_id": "s2"}).json()["searches"] == []


def test_recent_searches_require_user(client):
    assert client.get("/api/v1/movies/recent-searches").status_code == 400


def test_genres(client):
    assert client.get("/api/v1/movies/genres").json()["genres"][0]["name"] == "Animation"
    assert client.get("/api/v1/movies/genres", params={"genre_id": 18}).json()["results"][0]["id"] == 1018


def test_movie_details_and_recommendations(client):
    assert client.get("/api/v1/movies/42").json()["movie"]["title"] == "The Answer"
    assert client.get("/api/v1/movies/404").status_code == 404
    assert client.get("/api/v1/movies/42/recommendations").json()[0]["id"] == 43


def test_rate_limit(client, monkeypatch):
    monkeypatch.setattr(settings, "RATE_LIMIT_ENABLED", True)
    monkeypatch.setattr(settings, "RATE_LIMIT_REQUESTS", 2)

    counter = AsyncMock(side_effect=[1, 2, 3])
    with patch("streamhub.api.deps.redis_client.increment_window", counter):
        statuses = [client.get("/api/v1/movies/trending").status_code for _ in range(3)]

    assert statuses == [200, 200, 429]
    assert counter.call_args.args[1] == settings.RATE_LIMIT_WINDOW_SECONDS


@pytest.mark.parametrize("path", ["/", "/health"])
def test_root_endpoints(client, path):
    assert client.get(path).status_code == 200


def test_search_rejects_over_long_input_before_catalog(client, fake_catalog):
    long_query = client.get("/api/v1/movies/search", params={"query": "q" * 256})
    long_user = client.get("/api/v1/movies/search", params={"query": "alien", "user_id": "u" * 65})

    assert long_query.status_code == 400
    assert long_user.status_code == 400
    assert long_user.json()["kind"] == "InvalidInput"
    assert fake_catalog.searches == []


def test_search_history_written_off_the_event_loop(client, loop_usage):
    loop_usage.watch(search_history, "record_search")

    client.get("/api/v1/movies/search", params={"query": "alien", "user_id": "s3"})

    assert loop_usage.calls == [False]
