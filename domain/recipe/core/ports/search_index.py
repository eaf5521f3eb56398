"""Search index port (interface).

Full-text recipe search, fuzzy ingredient lookup and similarity, plus
the document maintenance used by the indexing worker.
"""

from typing import List, Optional, Protocol, Sequence

from domain.recipe.core.entities.ingredient import Ingredient
from domain.recipe.core.entities.recipe import Recipe
from domain.recipe.core.value_objects.search import ResultPage, SearchFilters


class ISearchIndex(Protocol):
    """
    Interface for the recipe search index.

    Every method raises SearchError when the index is unavailable or
    rejects the query. An empty page always means "no matches".
    """

    async def search_recipes(
        self,
        query: str,
        ingredient_names: Sequence[str],
        tags: Sequence[str],
        filters: SearchFilters,
    ) -> ResultPage[Recipe]:
        """
        Relevance-ranked recipe search.

        Args:
            query: Free text (may be empty: filters only)
            ingredient_names: Boost recipes containing these ingredients
                (not a hard filter)
            tags: Hard tag filter, merged with ``filters.tags``
            filters: Difficulty/cuisine/time filters and pagination

        Returns:
            One page, sorted by score then average rating; ``page_size``
            is the clamped size actually used
        """
        ...

    async def search_ingredients(
        self,
        query: str,
        categories: Optional[Sequence[str]] = None,
    ) -> ResultPage[Ingredient]:
        """Fuzzy ingredient lookup by name and recognition tags."""
        ...

    async def find_similar_recipes(self, recipe_id: str, limit: int = 5) -> List[Recipe]:
        """
        Recipes similar to the given one, never including it.

        Returns:
            At most ``limit`` recipes, ``[]`` when limit <= 0
        """
        ...

    async def index_recipe(self, recipe: Recipe) -> None:
        """Insert or replace the recipe document."""
        ...

    async def remove_recipe(self, recipe_id: str) -> None:
        """Remove the recipe document (absent documents are ignored)."""
        ...
