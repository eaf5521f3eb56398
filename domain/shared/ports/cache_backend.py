"""Cache backend port (interface).

Raw string key/value store with TTL and glob-pattern deletion. The
typed cache layer (serialisation, recipe validation, error mapping)
lives in infrastructure.cache.cache_service on top of this port.
"""

from typing import Optional, Protocol


class ICacheBackend(Protocol):
    """Port for key/value cache stores (Redis, in-memory).

    Implementations raise their native exceptions; the cache service
    maps them to CacheReadError / CacheWriteError.
    """

    async def get_raw(self, key: str) -> Optional[str]:
        """Stored string for key, None on miss or expiry."""
        ...

    async def set_raw(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store value under key, expiring after ttl_seconds."""
        ...

    async def delete(self, key: str) -> None:
        """Remove key (missing keys are ignored)."""
        ...

    async def delete_pattern(self, pattern: str) -> int:
        """Remove every key matching a glob pattern.

        Returns:
            Number of keys removed (0 is not an error)
        """
        ...
