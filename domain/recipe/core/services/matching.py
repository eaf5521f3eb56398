"""Ingredient matching rules shared by every repository implementation."""

from typing import Iterable, List, Sequence

from domain.recipe.core.entities.recipe import Recipe


def ingredient_match_fraction(recipe: Recipe, available: Iterable[str]) -> float:
    """
    Fraction of the recipe's required ingredients that are available.

    A recipe needing egg and milk scores 0.5 when only egg is available.
    """
    required = {item.ingredient_id for item in recipe.ingredients}
    if not required:
        return 0.0
    return len(required & set(available)) / len(required)


def rank_recipes_by_ingredients(
    recipes: Iterable[Recipe],
    ingredient_ids: Sequence[str],
) -> List[Recipe]:
    """
    Keep recipes requiring at least one of the ids, best coverage first.

    Ties are broken by name so results (and cached match lists) are stable.
    """
    available = set(ingredient_ids)
    scored = []
    for recipe in recipes:
        fraction = ingredient_match_fraction(recipe, available)
        if fraction > 0:
            scored.append((fraction, recipe))
    scored.sort(key=lambda pair: (-pair[0], pair[1].name, pair[1].id))
    return [recipe for _, recipe in scored]
