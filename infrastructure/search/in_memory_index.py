"""In-memory search index implementation.

Provides an in-memory implementation of ISearchIndex for testing and
development. Scoring is a simple term count that mirrors the field
weights of the Elasticsearch query (name 3, description 2, ingredient
names 1, ingredient boost 2); it is not meant to reproduce Lucene
relevance.
"""

import re
from copy import deepcopy
from typing import Dict, Iterable, List, Optional, Sequence, Set

from domain.recipe.core.entities.ingredient import Ingredient
from domain.recipe.core.entities.recipe import Recipe
from domain.recipe.core.value_objects.search import ResultPage, SearchFilters
from infrastructure.search.query_builder import INGREDIENT_BOOST, INGREDIENT_SEARCH_SIZE

_TOKEN = re.compile(r"\w+")


def _tokens(*texts: Optional[str]) -> Set[str]:
    found: Set[str] = set()
    for text in texts:
        if text:
            found.update(t.lower() for t in _TOKEN.findall(text))
    return found


def _ingredient_names(recipe: Recipe) -> List[str]:
    return [item.name or item.ingredient_id for item in recipe.ingredients]


class InMemorySearchIndex:
    """
    In-memory implementation of ISearchIndex.

    Thread safety: NOT thread-safe
    Persistence: Data lost on process restart (in-memory only)

    Example:
        >>> index = InMemorySearchIndex()
        >>> await index.index_recipe(recipe)
        >>> page = await index.search_recipes("omelette", [], [], SearchFilters())
    """

    def __init__(self) -> None:
        self._recipes: Dict[str, Recipe] = {}
        self._ingredients: Dict[str, Ingredient] = {}

    # Catalog setup (testing helper)
    def add_ingredient(self, ingredient: Ingredient) -> None:
        self._ingredients[ingredient.id] = ingredient

    def __contains__(self, recipe_id: object) -> bool:
        return recipe_id in self._recipes

    def _passes_filters(self, recipe: Recipe, tags: Sequence[str], filters: SearchFilters) -> bool:
        required_tags = set(tags) | set(filters.tags)
        if required_tags and not required_tags & set(recipe.tags):
            return False
        if filters.difficulty and recipe.difficulty not in filters.difficulty:
            return False
        if filters.cuisine and recipe.cuisine not in filters.cuisine:
            return False
        if filters.max_prep_time is not None and recipe.prep_time > filters.max_prep_time:
            return False
        if filters.max_cook_time is not None and recipe.cook_time > filters.max_cook_time:
            return False
        return True

    def _score(self, recipe: Recipe, terms: Set[str], boost_names: Iterable[str]) -> float:
        score = 0.0
        if terms:
            score += 3 * len(terms & _tokens(recipe.name))
            score += 2 * len(terms & _tokens(recipe.description))
            score += len(terms & _tokens(*_ingredient_names(recipe)))
        recipe_ingredient_tokens = _tokens(*_ingredient_names(recipe))
        for name in boost_names:
            if _tokens(name) & recipe_ingredient_tokens:
                score += INGREDIENT_BOOST
        return score

    async def search_recipes(
        self,
        query: str,
        ingredient_names: Sequence[str],
        tags: Sequence[str],
        filters: SearchFilters,
    ) -> ResultPage[Recipe]:
        terms = _tokens(query)
        boost_names = list(ingredient_names) + list(filters.ingredients)

        scored = []
        for recipe in self._recipes.values():
            if not self._passes_filters(recipe, tags, filters):
                continue
            score = self._score(recipe, terms, boost_names)
            if terms and score == 0:
                continue
            scored.append((score, recipe))

        scored.sort(key=lambda pair: (-pair[0], -pair[1].average_rating, pair[1].name))

        size = filters.effective_page_size()
        start = (filters.page - 1) * size
        items = [deepcopy(recipe) for _, recipe in scored[start : start + size]]
        return ResultPage[Recipe](items=items, total=len(scored), page=filters.page, page_size=size)

    async def search_ingredients(
        self,
        query: str,
        categories: Optional[Sequence[str]] = None,
    ) -> ResultPage[Ingredient]:
        terms = _tokens(query)
        matches = []
        for ingredient in self._ingredients.values():
            if categories and ingredient.category not in categories:
                continue
            score = 3 * len(terms & _tokens(ingredient.name))
            score += len(terms & _tokens(*ingredient.recognition_tags))
            if score:
                matches.append((score, ingredient))

        matches.sort(key=lambda pair: (-pair[0], pair[1].name))
        items = [ingredient for _, ingredient in matches[:INGREDIENT_SEARCH_SIZE]]
        return ResultPage[Ingredient](
            items=items, total=len(matches), page=1, page_size=INGREDIENT_SEARCH_SIZE
        )

    async def find_similar_recipes(self, recipe_id: str, limit: int = 5) -> List[Recipe]:
        if limit <= 0:
            return []
        source = self._recipes.get(recipe_id)
        if source is None:
            return []

        def features(recipe: Recipe) -> Set[str]:
            return _tokens(recipe.name, recipe.cuisine, *_ingredient_names(recipe), *recipe.tags)

        source_features = features(source)
        scored = []
        for other in self._recipes.values():
            if other.id == recipe_id:
                continue
            overlap = len(source_features & features(other))
            if overlap:
                scored.append((overlap, other))

        scored.sort(key=lambda pair: (-pair[0], pair[1].name))
        return [deepcopy(recipe) for _, recipe in scored[:limit]]

    async def index_recipe(self, recipe: Recipe) -> None:
        self._recipes[recipe.id] = deepcopy(recipe)

    async def remove_recipe(self, recipe_id: str) -> None:
        self._recipes.pop(recipe_id, None)
