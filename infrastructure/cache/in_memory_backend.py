"""
In-memory cache backend.

Simple in-memory key/value store for testing and development.
Production should use Redis (see redis_backend).
"""

import fnmatch
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class InMemoryCacheBackend:
    """In-memory implementation of ICacheBackend.

    Stores raw strings with expiration times; expired entries are dropped
    lazily on access. NOT shared between processes (use Redis instead).
    """

    def __init__(self) -> None:
        # Storage: key -> (value, expiration_time)
        self._cache: Dict[str, Tuple[str, datetime]] = {}
        logger.debug("InMemoryCacheBackend initialized")

    def _is_expired(self, expiration: datetime) -> bool:
        return datetime.now(timezone.utc) >= expiration

    async def get_raw(self, key: str) -> Optional[str]:
        entry = self._cache.get(key)
        if entry is None:
            logger.debug(f"Cache miss for key: {key}")
            return None

        value, expiration = entry
        if self._is_expired(expiration):
            logger.debug(f"Cache entry expired for key: {key}")
            del self._cache[key]
            return None

        logger.debug(f"Cache hit for key: {key}")
        return value

    async def set_raw(self, key: str, value: str, ttl_seconds: int) -> None:
        expiration = datetime.now(timezone.utc) + timedelta(seconds=ttl_seconds)
        self._cache[key] = (value, expiration)
        logger.debug(f"Cached key {key} with TTL {ttl_seconds}s")

    async def delete(self, key: str) -> None:
        if self._cache.pop(key, None) is not None:
            logger.debug(f"Deleted cache entry for key: {key}")

    async def delete_pattern(self, pattern: str) -> int:
        """Delete every live key matching a glob pattern.

        Returns:
            Number of keys removed
        """
        self.cleanup_expired()
        matching = [key for key in self._cache if fnmatch.fnmatchcase(key, pattern)]
        for key in matching:
            del self._cache[key]
        logger.debug(f"Deleted {len(matching)} cache entries matching {pattern}")
        return len(matching)

    def keys(self) -> list:
        """Live keys (for testing)."""
        self.cleanup_expired()
        return list(self._cache)

    def clear(self) -> None:
        """Clear all cache entries (for testing)."""
        self._cache.clear()
        logger.debug("Cache cleared")

    def cleanup_expired(self) -> int:
        """Remove all expired entries from cache.

        Returns:
            Number of expired entries removed
        """
        expired_keys = [
            key for key, (_, expiration) in self._cache.items() if self._is_expired(expiration)
        ]

        for key in expired_keys:
            del self._cache[key]

        if expired_keys:
            logger.debug(f"Cleaned up {len(expired_keys)} expired cache entries")

        return len(expired_keys)
