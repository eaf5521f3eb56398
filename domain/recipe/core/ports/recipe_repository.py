"""Recipe repository port (interface).

Defines contract for recipe persistence operations.
Follows the Dependency Inversion Principle: domain defines the port,
infrastructure provides the implementation.
"""

from typing import Any, Dict, List, Optional, Protocol, Sequence

from domain.recipe.core.entities.recipe import Recipe, RecipeRating


class IRecipeRepository(Protocol):
    """
    Interface for recipe persistence operations.

    Implementations:
    - In-memory repository (for testing/development)
    - MongoDB repository (for production)

    Error contract:
    - Absent ids are reported with ``None``, never with an exception
    - Optimistic concurrency failures raise ConflictError
    - Any other store failure raises RepositoryError

    Example usage (application layer):
        >>> class RecipeService:
        ...     def __init__(self, repository: IRecipeRepository):
        ...         self._repository = repository
        ...
        ...     async def create_recipe(self, draft: RecipeDraft) -> Recipe:
        ...         return await self._repository.create(Recipe.from_draft(draft))
    """

    async def create(self, recipe: Recipe) -> Recipe:
        """
        Persist a new recipe.

        Args:
            recipe: Fully built recipe (id already assigned)

        Returns:
            The stored recipe
        """
        ...

    async def find_by_id(self, recipe_id: str) -> Optional[Recipe]:
        """
        Retrieve a recipe by id.

        Returns:
            Recipe if found, None otherwise
        """
        ...

    async def find_by_id_and_update(
        self,
        recipe_id: str,
        changes: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> Optional[Recipe]:
        """
        Apply field changes to a stored recipe.

        Args:
            recipe_id: Recipe identifier
            changes: Python field name -> new value (see RecipePatch.changes)
            expected_version: When given, the update only applies if the
                stored version matches

        Returns:
            The merged recipe (version bumped, updated_at refreshed),
            None if the recipe does not exist

        Raises:
            ConflictError: expected_version given and different from stored
        """
        ...

    async def find_by_id_and_delete(self, recipe_id: str) -> Optional[Recipe]:
        """
        Delete a recipe.

        Returns:
            The deleted recipe, None if it did not exist
        """
        ...

    async def find_by_ingredients(self, ingredient_ids: Sequence[str]) -> List[Recipe]:
        """
        Find recipes requiring at least one of the given ingredients.

        Args:
            ingredient_ids: Catalog ingredient ids (unknown ids match nothing)

        Returns:
            Recipes ordered by matched fraction of their ingredient list
            (descending), then by name

        Example:
            >>> recipes = await repository.find_by_ingredients(["egg", "milk"])
        """
        ...

    async def add_rating(self, recipe_id: str, rating: RecipeRating) -> Optional[Recipe]:
        """
        Append a rating and recompute the average in one atomic step.

        Returns:
            The updated recipe, None if it does not exist
        """
        ...
