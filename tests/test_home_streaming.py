from datetime import datetime, timedelta

from streamhub.models import WatchHistory
from streamhub.services import home, streaming
from streamhub.services import watch_history as tracker


def test_home_screen_rails(client, db_session):
    base = datetime(2026, 3, 1)
    for offset, movie_id in enumerate([1, 2, 3, 4]):
        tracker.record_progress(db_session, "home-user", movie_id, current_time=100, duration=1000)
        db_session.query(WatchHistory).filter(WatchHistory.movie_id == movie_id).update(
            {WatchHistory.last_played_at: base + timedelta(minutes=offset)}, synchronize_session=False
        )
    db_session.commit()

    response = client.get("/api/v1/home/home-user")

    assert response.status_code == 200
    assert response.headers["cache-control"] == "public, max-age=300"
    body = response.json()
    assert body["success"] is True
    assert [r["movieId"] for r in body["continueWatching"]] == [4, 3, 2]
    assert [m["type"] for m in body["trending"]] == ["movie", "movie", "tv"]
    assert body["forYou"][0]["id"] == 3
    assert body["animeMovies"][0]["id"] == 1016
    assert body["dramaMovies"][0]["id"] == 1018
    assert len(body["popularSeries"]) == 2


def test_home_screen_without_history(client):
    body = client.get("/api/v1/home/newcomer").json()
    assert body["continueWatching"] == []


def test_streaming_details_resume_point(client, db_session):
    tracker.record_progress(db_session, "u1", 42, current_time=300, duration=900)

    response = client.get("/api/v1/streaming/stream", params={"movie_id": 42, "user_id": "u1", "quality": "1080p"})

    assert response.status_code == 200
    details = response.json()["streamingDetails"]
    assert details["title"] == "The Answer"
    assert details["quality"] == "1080p"
    assert details["resolution"] == "1920x1080"
    assert details["resumeFrom"] == 300
    assert details["progress"] == 33
    assert details["runtimeSeconds"] == 900
    assert details["streamUrl"].endswith("/42/1080p/index.m3u8")
    assert details["availableQualities"] == ["360p", "480p", "720p", "1080p"]


def test_streaming_defaults_to_720p(client, db_session):
    tracker.record_progress(db_session, "u1", 42, current_time=10, duration=900)

    details = client.get("/api/v1/streaming/stream", params={"movie_id": 42, "user_id": "u1"}).json()["streamingDetails"]
    assert details["quality"] == "720p"


def test_streaming_requires_ids(client):
    response = client.get("/api/v1/streaming/stream", params={"movie_id": 42})
    assert response.status_code == 400
    assert response.json()["message"] == "Movie ID and User ID are required"


def test_streaming_rejects_unknown_quality(client, db_session):
    tracker.record_progress(db_session, "u1", 42, current_time=10, duration=900)

    response = client.get("/api/v1/streaming/stream", params={"movie_id": 42, "user_id": "u1", "quality": "4k"})
    assert response.status_code == 400


def test_streaming_never_started_is_not_found(client):
    response = client.get("/api/v1/streaming/stream", params={"movie_id": 42, "user_id": "stranger"})
    assert response.status_code == 404
    assert response.json()["kind"] == "NotFound"


def test_streaming_unknown_movie(client):
    response = client.get("/api/v1/streaming/stream", params={"movie_id": 77, "user_id": "u1"})
    assert response.status_code == 404
    assert response.json()["message"] == "Movie details not found"


def test_video_qualities(client):
    response = client.get("/api/v1/streaming/qualities/42")

    assert response.status_code == 200
    qualities = response.json()["qualities"]
    assert [q["quality"] for q in qualities] == ["360p", "480p", "720p", "1080p"]
    assert all(q["url"].startswith("http") for q in qualities)


def test_video_qualities_invalid_id(client):
    response = client.get("/api/v1/streaming/qualities/abc")
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid Movie ID format"


def test_over_long_user_id_is_invalid_input(client):
    assert client.get("/api/v1/home/" + "h" * 65).status_code == 400

    response = client.get("/api/v1/streaming/stream", params={"movie_id": 42, "user_id": "h" * 65})
    assert response.status_code == 400
    assert response.json()["kind"] == "InvalidInput"


def test_history_reads_run_off_the_event_loop(client, db_session, loop_usage):
    tracker.record_progress(db_session, "u1", 42, current_time=10, duration=900)
    loop_usage.watch(home, "select_continue_watching")
    loop_usage.watch(streaming, "get_watch_record")

    assert client.get("/api/v1/home/u1").status_code == 200
    assert client.get("/api/v1/streaming/stream", params={"movie_id": 42, "user_id": "u1"}).status_code == 200

    assert loop_usage.calls == [False, False]
