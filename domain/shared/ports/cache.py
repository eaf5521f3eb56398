"""Cache service port (interface).

Typed cache used by the application layer. Implemented by
infrastructure.cache.cache_service.CacheService over an ICacheBackend.
"""

from typing import Any, Optional, Protocol

from domain.recipe.core.entities.recipe import Recipe


class ICacheService(Protocol):
    """
    Port for the recipe cache.

    Error contract:
    - A miss returns None
    - Backend or decoding failures on reads raise CacheReadError
      (InvalidCachedRecipeError for a structurally broken recipe)
    - Failures on set/delete/clear raise CacheWriteError
    """

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Serialise value as JSON and store it (default TTL when ttl is None)."""
        ...

    async def get(self, key: str, model: Any = None) -> Any:
        """Stored value, parsed into ``model`` when given; None on miss."""
        ...

    async def delete(self, key: str) -> None:
        ...

    async def clear(self, pattern: str) -> int:
        """Delete all keys matching a glob pattern; returns how many were removed."""
        ...

    async def get_recipe(self, recipe_id: str) -> Optional[Recipe]:
        ...

    async def set_recipe(self, recipe_id: str, recipe: Recipe) -> None:
        ...

    async def delete_recipe(self, recipe_id: str) -> None:
        ...
