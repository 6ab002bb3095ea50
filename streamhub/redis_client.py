# streamhub/redis_client.py
import redis.asyncio as redis
from .config import settings
import json
import logging
import time
from typing import Any, Optional

logger = logging.getLogger(__name__)


class RedisClient:
    """
    Async Redis client with connection pooling and automatic reconnection.
    Failures are logged and reported as misses, never raised to callers.
    """

    def __init__(self, url: Optional[str] = None, reconnect_backoff: Optional[float] = None):
        self.url = url or settings.REDIS_URL
        self.redis: Optional[redis.Redis] = None
        self.pool: Optional[redis.ConnectionPool] = None
        self.reconnect_backoff = (
            settings.REDIS_RECONNECT_BACKOFF_SECONDS if reconnect_backoff is None else reconnect_backoff
        )
        self._retry_after = 0.0

    async def connect(self):
        """Initialize Redis connection with connection pooling"""
        try:
            if self.redis:
                logger.warning("⚠️ Redis already connected")
                return

            self.pool = redis.ConnectionPool.from_url(
                self.url,
                decode_responses=True,
                max_connections=50,
                socket_keepalive=True,
                socket_connect_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30,
            )

            self.redis = redis.Redis(connection_pool=self.pool)

            # Test connection
            await self.redis.ping()

            logger.info("✅ Redis connected with connection pooling")

        except Exception as e:
            logger.error(f"❌ Redis connection failed: {e}")
            self.redis = None
            self.pool = None
            raise

    async def disconnect(self):
        """Close Redis connection and pool"""
        try:
            if self.redis:
                await self.redis.aclose()
                logger.info("✅ Redis connection closed")

            if self.pool:
                await self.pool.disconnect()
                logger.info("✅ Redis pool disconnected")

            self.redis = None
            self.pool = None

        except Exception as e:
            logger.error(f"❌ Redis disconnect error: {e}")

    async def _ensure_connected(self):
        """Ensure Redis is connected (auto-reconnect, at most once per backoff window)"""
        if self.redis:
            return

        if time.monotonic() < self._retry_after:
            raise ConnectionError("Redis unavailable, waiting before reconnecting")

        try:
            await self.connect()
        except Exception:
            self._retry_after = time.monotonic() + self.reconnect_backoff
            raise
        self._retry_after = 0.0

    async def ping(self) -> bool:
        """Check if Redis is alive"""
        try:
            await self._ensure_connected()
            return await self.redis.ping()
        except Exception as e:
            logger.error(f"❌ Redis ping failed: {e}")
            return False

    async def get(self, key: str) -> Optional[Any]:
        """Get value from Redis with JSON deserialization"""
        try:
            await self._ensure_connected()

            value = await self.redis.get(key)
            if value:
                try:
                    return json.loads(value)
                except json.JSONDecodeError:
                    return value
            return None

        except Exception as e:
            logger.error(f"❌ Redis GET error for key '{key}': {e}")
            return None

    async def set(
        self,
        key: str,
        value: Any,
        expire: Optional[int] = None
    ) -> bool:
        """
        Set value in Redis with JSON serialization

        Args:
            key: Redis key
            value: Value to store (will be JSON serialized if not string)
            expire: Expiration time in seconds (default: REDIS_CACHE_EXPIRATION)

        Returns:
            True if successful, False otherwise
        """
        try:
            await self._ensure_connected()

            if expire is None:
                expire = settings.REDIS_CACHE_EXPIRATION

            serialized_value = json.dumps(value) if not isinstance(value, str) else value
            result = await self.redis.setex(key, expire, serialized_value)

            return bool(result)

        except Exception as e:
            logger.error(f"❌ Redis SET error for key '{key}': {e}")
            return False

    async def increment_window(self, key: str, window_seconds: int) -> int:
        """
        Increment a fixed-window counter, starting its expiry on first hit.
        Returns 0 when Redis is unavailable.
        """
        try:
            await self._ensure_connected()
            count = await self.redis.incr(key)
            if count == 1:
                await self.redis.expire(key, window_seconds)
            return count

        except Exception as e:
            logger.error(f"❌ Redis INCR error for key '{key}': {e}")
            return 0


# Global Redis client instance
redis_client = RedisClient()
