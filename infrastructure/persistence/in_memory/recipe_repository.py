"""In-memory recipe repository implementation.

Provides an in-memory implementation of IRecipeRepository for testing.
Uses a dictionary for storage with no external dependencies.
"""

from copy import deepcopy
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError

from domain.recipe.core.entities.recipe import Recipe, RecipeRating
from domain.recipe.core.services.matching import rank_recipes_by_ingredients
from domain.shared.errors import ConflictError, ValidationError


class InMemoryRecipeRepository:
    """
    In-memory implementation of IRecipeRepository.

    Thread safety: NOT thread-safe (use locks if needed in production)
    Persistence: Data lost on process restart (in-memory only)

    Example:
        >>> repository = InMemoryRecipeRepository()
        >>> await repository.create(recipe)
        >>> retrieved = await repository.find_by_id(recipe.id)
    """

    def __init__(self) -> None:
        self._storage: Dict[str, Recipe] = {}

    async def create(self, recipe: Recipe) -> Recipe:
        if recipe.id in self._storage:
            raise ConflictError(
                f"Recipe {recipe.id} already exists",
                context={"recipe_id": recipe.id},
            )
        # Store deep copy to prevent external modifications
        self._storage[recipe.id] = deepcopy(recipe)
        return deepcopy(recipe)

    async def find_by_id(self, recipe_id: str) -> Optional[Recipe]:
        recipe = self._storage.get(recipe_id)
        return deepcopy(recipe) if recipe is not None else None

    async def find_by_id_and_update(
        self,
        recipe_id: str,
        changes: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> Optional[Recipe]:
        current = self._storage.get(recipe_id)
        if current is None:
            return None

        if expected_version is not None and current.version != expected_version:
            raise ConflictError(
                f"Recipe {recipe_id} is at version {current.version}, expected {expected_version}",
                context={
                    "recipe_id": recipe_id,
                    "expected_version": expected_version,
                    "actual_version": current.version,
                },
            )

        data = current.model_dump()
        data.update(changes)
        data["version"] = current.version + 1
        data["updated_at"] = datetime.now(timezone.utc)
        try:
            updated = Recipe.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Update would leave recipe {recipe_id} invalid",
                context={"recipe_id": recipe_id},
            ) from e

        self._storage[recipe_id] = updated
        return deepcopy(updated)

    async def find_by_id_and_delete(self, recipe_id: str) -> Optional[Recipe]:
        return self._storage.pop(recipe_id, None)

    async def find_by_ingredients(self, ingredient_ids: Sequence[str]) -> List[Recipe]:
        ranked = rank_recipes_by_ingredients(self._storage.values(), ingredient_ids)
        return [deepcopy(recipe) for recipe in ranked]

    async def add_rating(self, recipe_id: str, rating: RecipeRating) -> Optional[Recipe]:
        recipe = self._storage.get(recipe_id)
        if recipe is None:
            return None
        recipe.add_rating(rating)
        recipe.version += 1
        return deepcopy(recipe)

    def clear(self) -> None:
        """Remove all recipes (for testing)."""
        self._storage.clear()

    def count(self) -> int:
        return len(self._storage)
