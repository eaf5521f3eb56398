"""
Redis cache backend.

Shared cache used in production. Keys and values are plain strings
(``decode_responses=True``); pattern deletion walks the keyspace with
SCAN instead of KEYS so large caches do not block the server.
"""

from typing import Optional

import redis.asyncio as redis
import structlog

logger = structlog.get_logger(__name__)

# Keys deleted per DEL round-trip when clearing a pattern
_DELETE_BATCH_SIZE = 500


class RedisCacheBackend:
    """ICacheBackend over ``redis.asyncio``.

    Redis exceptions are propagated unchanged; the cache service maps
    them to cache read/write errors.

    Example:
        >>> backend = RedisCacheBackend.from_url("redis://localhost:6379/0")
        >>> await backend.set_raw("recipe:r1", "{...}", 3600)
    """

    def __init__(self, client: "redis.Redis") -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str, password: Optional[str] = None) -> "RedisCacheBackend":
        client = redis.from_url(url, password=password, decode_responses=True)
        return cls(client)

    async def get_raw(self, key: str) -> Optional[str]:
        value = await self._client.get(key)
        logger.debug("Cache lookup", key=key, hit=value is not None)
        return value

    async def set_raw(self, key: str, value: str, ttl_seconds: int) -> None:
        await self._client.setex(key, ttl_seconds, value)
        logger.debug("Cached value", key=key, ttl=ttl_seconds)

    async def delete(self, key: str) -> None:
        await self._client.delete(key)

    async def delete_pattern(self, pattern: str) -> int:
        removed = 0
        batch = []
        async for key in self._client.scan_iter(match=pattern, count=_DELETE_BATCH_SIZE):
            batch.append(key)
            if len(batch) >= _DELETE_BATCH_SIZE:
                removed += await self._client.delete(*batch)
                batch = []
        if batch:
            removed += await self._client.delete(*batch)

        logger.debug("Cleared cache pattern", pattern=pattern, removed=removed)
        return removed

    async def ping(self) -> bool:
        return bool(await self._client.ping())

    async def close(self) -> None:
        await self._client.aclose()
        logger.info("Redis connection closed")
