"""Unit test configuration.

Unit tests use in-memory adapters or mocks; nothing here imports app.py.
"""

from __future__ import annotations

import pytest

from domain.recipe.core.entities.recipe import Recipe, RecipeRating


@pytest.fixture
def omelette(recipe_payload) -> Recipe:
    return Recipe.model_validate({"id": "r-omelette", **recipe_payload()})


@pytest.fixture
def pancakes(recipe_payload) -> Recipe:
    return Recipe.model_validate(
        {
            "id": "r-pancakes",
            **recipe_payload(
                name="Pancakes",
                description="Fluffy breakfast pancakes",
                ingredients=[
                    {"id": "egg", "qty": 1, "unit": "pcs", "name": "egg"},
                    {"id": "milk", "qty": 250, "unit": "ml", "name": "milk"},
                    {"id": "flour", "qty": 200, "unit": "g", "name": "flour"},
                ],
                tags=["breakfast", "sweet"],
                difficulty="medium",
                cuisine="american",
                prepTime=10,
                cookTime=15,
            ),
        }
    )


@pytest.fixture
def rating_five() -> RecipeRating:
    return RecipeRating(user_id="user-1", rating=5)
