from streamhub.config import Settings, settings
from streamhub.database import build_engine_options
from streamhub.errors import AppError, ErrorKind


def test_settings_loaded_from_environment():
    assert settings.DATABASE_URL == "sqlite://"
    assert settings.is_sqlite
    assert settings.is_tmdb_enabled
    assert settings.RATE_LIMIT_ENABLED is False


def test_allowed_origins_list():
    config = Settings(ALLOWED_ORIGINS="https://a.example, https://b.example,")
    assert config.allowed_origins_list == ["https://a.example", "https://b.example"]


def test_engine_options_per_backend():
    assert "poolclass" in build_engine_options("sqlite://")
    postgres = build_engine_options("postgresql://user:pw@db/streamhub")
    assert postgres["pool_pre_ping"] is True
    assert postgres["pool_size"] == 10


def test_error_status_codes():
    assert AppError(ErrorKind.INVALID_INPUT, "x").status_code == 400
    assert AppError(ErrorKind.ALREADY_PAID, "x").status_code == 400
    assert AppError(ErrorKind.CARD_EXPIRED, "x").status_code == 400
    assert AppError(ErrorKind.NOT_FOUND, "x").status_code == 404
    assert AppError(ErrorKind.PAYMENT_ERROR, "x").status_code == 500
    assert AppError(ErrorKind.UNKNOWN, "x").to_dict() == {"success": False, "kind": "Unknown", "message": "x"}
