"""Cache infrastructure: typed cache service and key/value backends."""

from infrastructure.cache.cache_service import CacheService
from infrastructure.cache.in_memory_backend import InMemoryCacheBackend

__all__ = ["CacheService", "InMemoryCacheBackend"]
