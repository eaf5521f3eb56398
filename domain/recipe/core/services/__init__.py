"""Domain services for recipes."""

from .matching import ingredient_match_fraction, rank_recipes_by_ingredients

__all__ = ["ingredient_match_fraction", "rank_recipes_by_ingredients"]
