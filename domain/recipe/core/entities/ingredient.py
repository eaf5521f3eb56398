"""Catalog ingredient as returned by ingredient search."""

from __future__ import annotations

from typing import List, Optional

from pydantic import Field

from .recipe import WireModel


class Ingredient(WireModel):
    """
    Catalog ingredient.

    Distinct from RecipeIngredient, which only references a catalog entry
    by id inside a recipe. ``recognition_tags`` are the labels the image
    classifier emits for this ingredient.
    """

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    category: Optional[str] = None
    recognition_tags: List[str] = Field(default_factory=list)
