"""Unit tests for Elasticsearch query construction."""

from domain.recipe.core.value_objects.search import SearchFilters
from infrastructure.search.query_builder import (
    INGREDIENT_BOOST,
    RECIPE_INDEX_MAPPINGS,
    build_ingredient_search,
    build_recipe_document,
    build_recipe_filters,
    build_recipe_search,
    build_similar_recipes,
)


class TestRecipeFilters:
    """Test hard filter clauses."""

    def test_no_filters(self) -> None:
        assert build_recipe_filters(SearchFilters()) == []

    def test_all_filters(self) -> None:
        filters = SearchFilters(
            difficulty=["easy", "medium"],
            cuisine=["italian"],
            tags=["vegan"],
            max_prep_time=15,
            max_cook_time=30,
        )
        clauses = build_recipe_filters(filters, tags=["quick", "vegan"])

        assert {"terms": {"tags": ["quick", "vegan"]}} in clauses
        assert {"terms": {"difficulty": ["easy", "medium"]}} in clauses
        assert {"terms": {"cuisine": ["italian"]}} in clauses
        assert {"range": {"prepTime": {"lte": 15}}} in clauses
        assert {"range": {"cookTime": {"lte": 30}}} in clauses

    def test_zero_time_limit_is_applied(self) -> None:
        clauses = build_recipe_filters(SearchFilters(max_prep_time=0))
        assert clauses == [{"range": {"prepTime": {"lte": 0}}}]


class TestRecipeSearch:
    """Test the full recipe search request."""

    def test_text_query(self) -> None:
        kwargs = build_recipe_search("pasta", [], [], SearchFilters())
        text = kwargs["query"]["bool"]["must"][0]["bool"]
        multi_match = text["should"][0]["multi_match"]

        assert multi_match["query"] == "pasta"
        assert multi_match["fuzziness"] == "AUTO"
        assert multi_match["fields"] == ["name^3", "description^2"]
        assert text["minimum_should_match"] == 1
        assert "should" not in kwargs["query"]["bool"]

    def test_text_query_reaches_nested_ingredient_names(self) -> None:
        kwargs = build_recipe_search("basil", [], [], SearchFilters())
        nested = kwargs["query"]["bool"]["must"][0]["bool"]["should"][1]["nested"]

        assert nested["path"] == "ingredients"
        assert nested["query"]["match"]["ingredients.name"]["query"] == "basil"

    def test_blank_query_matches_all(self) -> None:
        kwargs = build_recipe_search("  ", [], [], SearchFilters())
        assert kwargs["query"]["bool"]["must"] == []

    def test_ingredient_boosts_are_optional(self) -> None:
        kwargs = build_recipe_search("", ["tomato"], [], SearchFilters(ingredients=["basil"]))
        bool_query = kwargs["query"]["bool"]

        names = [c["nested"]["query"]["match"]["ingredients.name"] for c in bool_query["should"]]
        assert names == ["tomato", "basil"]
        assert bool_query["should"][0]["nested"]["boost"] == INGREDIENT_BOOST
        assert bool_query["minimum_should_match"] == 0

    def test_pagination(self) -> None:
        kwargs = build_recipe_search("pasta", [], [], SearchFilters(page=3, page_size=10))

        assert kwargs["from_"] == 20
        assert kwargs["size"] == 10
        assert kwargs["track_total_hits"] is True

    def test_page_size_clamped(self) -> None:
        kwargs = build_recipe_search("pasta", [], [], SearchFilters(page=2, page_size=500))
        assert (kwargs["from_"], kwargs["size"]) == (100, 100)

    def test_sorted_by_score_then_rating(self) -> None:
        kwargs = build_recipe_search("pasta", [], [], SearchFilters())
        assert kwargs["sort"] == [
            {"_score": {"order": "desc"}},
            {"averageRating": {"order": "desc"}},
        ]


class TestOtherQueries:
    """Test ingredient and similarity queries."""

    def test_ingredient_search_with_categories(self) -> None:
        kwargs = build_ingredient_search("tom", ["vegetable"])

        assert kwargs["query"]["bool"]["filter"] == [{"terms": {"category": ["vegetable"]}}]
        assert kwargs["size"] == 20

    def test_ingredient_search_without_categories(self) -> None:
        assert build_ingredient_search("tom")["query"]["bool"]["filter"] == []

    def test_similar_recipes_excludes_source(self) -> None:
        kwargs = build_similar_recipes("recipes", "r1", 5)
        bool_query = kwargs["query"]["bool"]

        assert bool_query["must"][0]["more_like_this"]["like"] == [{"_index": "recipes", "_id": "r1"}]
        assert bool_query["must_not"] == [{"ids": {"values": ["r1"]}}]
        assert kwargs["size"] == 6

    def test_similar_recipes_use_root_ingredient_names(self) -> None:
        fields = build_similar_recipes("recipes", "r1", 5)["query"]["bool"]["must"][0][
            "more_like_this"
        ]["fields"]

        assert "ingredientNames" in fields
        assert not any(f.startswith("ingredients.") for f in fields)


class TestRecipeDocument:
    """Test the indexed recipe document."""

    def test_ingredient_names_flattened_to_root(self, pancakes) -> None:
        document = build_recipe_document(pancakes)

        assert document["ingredientNames"] == ["egg", "milk", "flour"]
        assert document["ingredients"][0]["ingredientId"] == "egg"

    def test_unnamed_ingredients_are_skipped(self, omelette) -> None:
        assert build_recipe_document(omelette)["ingredientNames"] == []

    def test_mapping_declares_root_names_as_text(self) -> None:
        properties = RECIPE_INDEX_MAPPINGS["properties"]

        assert properties["ingredientNames"] == {"type": "text"}
        assert properties["ingredients"]["type"] == "nested"
