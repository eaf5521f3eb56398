"""Unit tests for ingredient matching and ranking."""

import pytest

from domain.recipe.core.entities.recipe import Recipe
from domain.recipe.core.services.matching import (
    ingredient_match_fraction,
    rank_recipes_by_ingredients,
)


@pytest.fixture
def french_toast(recipe_payload) -> Recipe:
    return Recipe.model_validate(
        {
            "id": "r-toast",
            **recipe_payload(
                name="French Toast",
                ingredients=[
                    {"id": "egg", "qty": 2, "unit": "pcs"},
                    {"id": "bread", "qty": 2, "unit": "slices"},
                ],
            ),
        }
    )


class TestMatchFraction:
    """Test coverage computation."""

    def test_full_coverage(self, omelette) -> None:
        assert ingredient_match_fraction(omelette, ["egg", "salt"]) == 1.0

    def test_partial_coverage(self, pancakes) -> None:
        assert ingredient_match_fraction(pancakes, ["egg"]) == pytest.approx(1 / 3)

    def test_no_coverage(self, omelette) -> None:
        assert ingredient_match_fraction(omelette, ["rice"]) == 0.0


class TestRanking:
    """Test match ranking."""

    def test_best_coverage_first(self, omelette, pancakes, french_toast) -> None:
        ranked = rank_recipes_by_ingredients([pancakes, french_toast, omelette], ["egg"])
        assert [r.id for r in ranked] == ["r-omelette", "r-toast", "r-pancakes"]

    def test_recipes_without_match_are_dropped(self, omelette, pancakes) -> None:
        ranked = rank_recipes_by_ingredients([omelette, pancakes], ["flour"])
        assert [r.id for r in ranked] == ["r-pancakes"]

    def test_ties_broken_by_name(self, french_toast, recipe_payload) -> None:
        bruschetta = Recipe.model_validate(
            {
                "id": "r-bruschetta",
                **recipe_payload(
                    name="Bruschetta",
                    ingredients=[
                        {"id": "bread", "qty": 1, "unit": "slices"},
                        {"id": "tomato", "qty": 1, "unit": "pcs"},
                    ],
                ),
            }
        )
        ranked = rank_recipes_by_ingredients([french_toast, bruschetta], ["bread"])
        assert [r.name for r in ranked] == ["Bruschetta", "French Toast"]

    def test_empty_input(self, omelette) -> None:
        assert rank_recipes_by_ingredients([omelette], []) == []
