"""
Typed cache over a key/value backend.

Values are stored as JSON. Pydantic models are dumped with their camelCase
aliases, so cached recipes have the same shape as the REST payloads and
the search documents.
"""

import json
from typing import Any, Dict, Optional

import structlog
from pydantic import TypeAdapter
from pydantic_core import to_jsonable_python
from pydantic import ValidationError as PydanticValidationError

from domain.recipe.core.entities.recipe import Recipe
from domain.recipe.core.value_objects.cache_keys import recipe_key
from domain.shared.errors import (
    CacheReadError,
    CacheWriteError,
    InvalidCachedRecipeError,
    ValidationError,
)
from domain.shared.ports.cache_backend import ICacheBackend
from infrastructure.config import DEFAULT_RECIPE_CACHE_TTL_S

logger = structlog.get_logger(__name__)


def recipe_structure_problem(data: Any) -> Optional[str]:
    """
    Describe why ``data`` is not a structurally valid cached recipe.

    Returns:
        None when the shape is valid, otherwise a short reason
    """
    if not isinstance(data, dict):
        return "recipe is not an object"
    if not isinstance(data.get("id"), str) or not data["id"]:
        return "missing id"
    if not isinstance(data.get("name"), str) or not data["name"].strip():
        return "missing name"
    if not isinstance(data.get("ingredients"), list):
        return "ingredients is not a list"
    if not isinstance(data.get("instructions"), list):
        return "instructions is not a list"
    return None


class CacheService:
    """Cache layer with TTL, pattern clearing and typed recipe accessors.

    Implements ICacheService. Miss and failure are kept apart: a miss is
    ``None``, a failure is a CacheReadError / CacheWriteError.

    Example:
        >>> cache = CacheService(InMemoryCacheBackend(), default_ttl=3600)
        >>> await cache.set_recipe(recipe.id, recipe)
        >>> (await cache.get_recipe(recipe.id)).name
        'Omelette'
    """

    def __init__(
        self,
        backend: ICacheBackend,
        default_ttl: int = DEFAULT_RECIPE_CACHE_TTL_S,
    ) -> None:
        self._backend = backend
        self.default_ttl = default_ttl

    @property
    def backend(self) -> ICacheBackend:
        return self._backend

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        ttl_seconds = self.default_ttl if ttl is None else ttl
        try:
            raw = json.dumps(to_jsonable_python(value, by_alias=True))
        except (TypeError, ValueError) as e:
            logger.error("Cache serialisation failed", key=key, error=str(e))
            raise CacheWriteError(
                f"Cannot serialise value for cache key {key}",
                context={"key": key},
            ) from e

        try:
            await self._backend.set_raw(key, raw, ttl_seconds)
        except Exception as e:
            logger.error("Cache write failed", key=key, error=str(e))
            raise CacheWriteError(
                f"Cache write failed for key {key}",
                context={"key": key},
            ) from e

    async def _get_json(self, key: str) -> Any:
        try:
            raw = await self._backend.get_raw(key)
        except Exception as e:
            logger.error("Cache read failed", key=key, error=str(e))
            raise CacheReadError(
                f"Cache read failed for key {key}",
                context={"key": key},
            ) from e

        if raw is None:
            return None

        try:
            return json.loads(raw)
        except ValueError as e:
            logger.error("Cached value is not valid JSON", key=key)
            raise CacheReadError(
                f"Cached value for key {key} is not valid JSON",
                context={"key": key},
            ) from e

    async def get(self, key: str, model: Any = None) -> Any:
        """
        Read a cached value.

        Args:
            key: Cache key
            model: Optional type to parse into, e.g. ``Recipe``,
                ``List[Recipe]`` or ``ResultPage[Recipe]``

        Returns:
            The value, or None on miss
        """
        data = await self._get_json(key)
        if data is None or model is None:
            return data

        try:
            return TypeAdapter(model).validate_python(data)
        except PydanticValidationError as e:
            logger.error("Cached value has unexpected shape", key=key, errors=e.error_count())
            raise CacheReadError(
                f"Cached value for key {key} does not match the expected type",
                context={"key": key},
            ) from e

    async def delete(self, key: str) -> None:
        try:
            await self._backend.delete(key)
        except Exception as e:
            logger.error("Cache delete failed", key=key, error=str(e))
            raise CacheWriteError(
                f"Cache delete failed for key {key}",
                context={"key": key},
            ) from e

    async def clear(self, pattern: str) -> int:
        try:
            removed = await self._backend.delete_pattern(pattern)
        except Exception as e:
            logger.error("Cache clear failed", pattern=pattern, error=str(e))
            raise CacheWriteError(
                f"Cache clear failed for pattern {pattern}",
                context={"pattern": pattern},
            ) from e
        logger.info("Cache cleared", pattern=pattern, removed=removed)
        return removed

    # ═══════════════════════════════════════════════════════════
    # RECIPE ACCESSORS
    # ═══════════════════════════════════════════════════════════

    async def get_recipe(self, recipe_id: str) -> Optional[Recipe]:
        key = recipe_key(recipe_id)
        data = await self._get_json(key)
        if data is None:
            return None

        problem = recipe_structure_problem(data)
        if problem is None:
            try:
                return Recipe.model_validate(data)
            except PydanticValidationError as e:
                problem = f"{e.error_count()} field error(s)"

        logger.warning("Invalid recipe structure in cache", key=key, problem=problem)
        raise InvalidCachedRecipeError(
            f"Cached recipe {recipe_id} is invalid: {problem}",
            context={"key": key, "recipe_id": recipe_id},
        )

    async def set_recipe(self, recipe_id: str, recipe: Recipe) -> None:
        data: Dict[str, Any] = recipe.to_wire()
        problem = recipe_structure_problem(data)
        if problem is None and data["id"] != recipe_id:
            problem = f"id {data['id']!r} does not match key id"
        if problem is not None:
            raise ValidationError(
                f"Refusing to cache invalid recipe {recipe_id}: {problem}",
                context={"recipe_id": recipe_id},
            )
        await self.set(recipe_key(recipe_id), data)

    async def delete_recipe(self, recipe_id: str) -> None:
        await self.delete(recipe_key(recipe_id))
