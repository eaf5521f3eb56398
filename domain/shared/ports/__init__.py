"""Shared domain ports (interfaces for infrastructure adapters)."""

from domain.shared.ports.cache import ICacheService
from domain.shared.ports.cache_backend import ICacheBackend

__all__ = ["ICacheBackend", "ICacheService"]
