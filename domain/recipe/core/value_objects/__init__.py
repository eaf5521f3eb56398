"""Recipe value objects."""

from .cache_keys import (
    INGREDIENT_MATCHES_PATTERN,
    ingredients_key,
    recipe_key,
    search_key,
)
from .search import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, ResultPage, SearchFilters

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "INGREDIENT_MATCHES_PATTERN",
    "MAX_PAGE_SIZE",
    "ResultPage",
    "SearchFilters",
    "ingredients_key",
    "recipe_key",
    "search_key",
]
