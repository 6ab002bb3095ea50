import asyncio
from unittest.mock import AsyncMock

from streamhub.redis_client import RedisClient


def test_failed_connect_backs_off_before_retrying():
    client = RedisClient(url="redis://localhost:6379/15", reconnect_backoff=60)
    client.connect = AsyncMock(side_effect=ConnectionError("refused"))

    async def hammer():
        return [
            await client.get("tmdb:key"),
            await client.set("tmdb:key", {"a": 1}),
            await client.increment_window("ratelimit:1.2.3.4", 900),
            await client.ping(),
        ]

    assert asyncio.run(hammer()) == [None, False, 0, False]
    assert client.connect.await_count == 1


def test_reconnects_once_backoff_has_passed():
    client = RedisClient(url="redis://localhost:6379/15", reconnect_backoff=0)
    client.connect = AsyncMock(side_effect=ConnectionError("refused"))

    async def twice():
        await client.get("k")
        await client.get("k")

    asyncio.run(twice())
    assert client.connect.await_count == 2
