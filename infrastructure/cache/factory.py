"""Cache factory.

Environment-based backend selection:
- CACHE_BACKEND=redis: shared Redis cache (REDIS_URL, REDIS_PASSWORD)
- CACHE_BACKEND=inmemory: process-local cache (default, tests/dev)
"""

import os

from domain.shared.ports.cache_backend import ICacheBackend
from infrastructure.cache.cache_service import CacheService
from infrastructure.cache.in_memory_backend import InMemoryCacheBackend
from infrastructure.config import get_recipe_cache_ttl, get_redis_password, get_redis_url


def create_cache_backend() -> ICacheBackend:
    """Create cache backend based on CACHE_BACKEND env var.

    Raises:
        ValueError: Unknown backend name
    """
    mode = os.getenv("CACHE_BACKEND", "inmemory").lower()

    if mode == "redis":
        from infrastructure.cache.redis_backend import RedisCacheBackend

        return RedisCacheBackend.from_url(get_redis_url(), password=get_redis_password())

    if mode == "inmemory":
        return InMemoryCacheBackend()

    raise ValueError(f"Unknown CACHE_BACKEND: {mode!r} (expected 'inmemory' or 'redis')")


def create_cache_service() -> CacheService:
    return CacheService(create_cache_backend(), default_ttl=get_recipe_cache_ttl())
