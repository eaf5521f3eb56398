"""Core entities for recipe domain."""

from .recipe import (
    CookingStep,
    Difficulty,
    NutritionalInfo,
    Recipe,
    RecipeDraft,
    RecipeIngredient,
    RecipePatch,
    RecipeRating,
    compute_average_rating,
)
from .ingredient import Ingredient

__all__ = [
    "CookingStep",
    "Difficulty",
    "Ingredient",
    "NutritionalInfo",
    "Recipe",
    "RecipeDraft",
    "RecipeIngredient",
    "RecipePatch",
    "RecipeRating",
    "compute_average_rating",
]
