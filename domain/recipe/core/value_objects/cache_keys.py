"""
Cache key conventions.

Shared with every component reading or writing the recipe cache, so the
formats below must not change:

- ``recipe:<id>``
- ``ingredients:<sorted ids joined by ",">``
- ``search:<query>:<compact JSON filters>``
"""

from typing import Iterable

from domain.recipe.core.value_objects.search import SearchFilters

RECIPE_PREFIX = "recipe"
INGREDIENTS_PREFIX = "ingredients"
SEARCH_PREFIX = "search"

# Pattern clearing every cached ingredient match result
INGREDIENT_MATCHES_PATTERN = f"{INGREDIENTS_PREFIX}:*"


def recipe_key(recipe_id: str) -> str:
    return f"{RECIPE_PREFIX}:{recipe_id}"


def ingredients_key(ingredient_ids: Iterable[str]) -> str:
    """
    Order-independent key for an ingredient match.

    Example:
        >>> ingredients_key(["milk", "egg"]) == ingredients_key(["egg", "milk"])
        True
    """
    return f"{INGREDIENTS_PREFIX}:{','.join(sorted(ingredient_ids))}"


def search_key(query: str, filters: SearchFilters) -> str:
    return f"{SEARCH_PREFIX}:{query}:{filters.cache_fragment()}"
