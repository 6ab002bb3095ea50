from pydantic_settings import BaseSettings
from typing import List, Optional

class Settings(BaseSettings):
    # 🎯 Application
    APP_NAME: str = "StreamHub API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False  # ⚠️ Must be False in production

    # 🌐 Server
    HOST: str = '0.0.0.0'
    PORT: int = 8000

    # 🗄️ Database
    DATABASE_URL: str  # ⚠️ No default, must come from env
    DB_ECHO: bool = False
    AUTO_CREATE_TABLES: bool = True

    # 🔴 Redis
    REDIS_URL: str  # ⚠️ No default, must come from env
    REDIS_CACHE_EXPIRATION: int = 3600
    REDIS_RECONNECT_BACKOFF_SECONDS: float = 10.0

    # 🔒 CORS
    ALLOWED_ORIGINS: str  # ⚠️ Comma separated production domains

    # 🎬 Catalog (TMDB)
    TMDB_API_KEY: Optional[str] = None
    TMDB_BASE_URL: str = "https://api.themoviedb.org/3"
    TMDB_IMAGE_BASE_URL: str = "https://image.tmdb.org/t/p"
    TMDB_TIMEOUT_SECONDS: float = 10.0
    CATALOG_CACHE_EXPIRATION: int = 1800
    HOME_CACHE_MAX_AGE: int = 300

    # 📺 Streaming
    STREAM_BASE_URL: str = "https://stream.streamhub.local/hls"
    DEFAULT_VIDEO_QUALITY: str = "720p"

    # 💳 Payment Configuration
    PAYMENT_GATEWAY: str = "mock"
    PAYMENT_GATEWAY_TIMEOUT_SECONDS: float = 15.0
    MOCK_PAYMENT_DELAY_SECONDS: float = 0.5
    PAYMENT_CURRENCY: str = "IDR"

    # 🚦 Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_REQUESTS: int = 100
    RATE_LIMIT_WINDOW_SECONDS: int = 900  # 15 minutes

    # 📊 Logging
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = 'ignore'

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into list"""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(',') if origin.strip()]

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    @property
    def is_tmdb_enabled(self) -> bool:
        """Check if the TMDB catalog is configured"""
        return bool(self.TMDB_API_KEY)

settings = Settings()
