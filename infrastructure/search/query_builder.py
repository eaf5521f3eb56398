"""
Elasticsearch query construction.

Pure functions returning keyword arguments for ``AsyncElasticsearch.search``;
kept apart from the adapter so the query shapes can be tested without a
client.
"""

from typing import Any, Dict, List, Optional, Sequence

from domain.recipe.core.entities.recipe import Recipe
from domain.recipe.core.value_objects.search import SearchFilters

# Root-level copy of the nested ingredient names; more_like_this cannot
# reach into nested documents
INGREDIENT_NAMES_FIELD = "ingredientNames"

RECIPE_TEXT_FIELDS = ["name^3", "description^2"]
INGREDIENT_TEXT_FIELDS = ["name^3", "recognitionTags"]
SIMILARITY_FIELDS = ["name", INGREDIENT_NAMES_FIELD, "tags", "cuisine"]

INGREDIENT_BOOST = 2.0
INGREDIENT_SEARCH_SIZE = 20


def _ingredient_boost_clause(name: str) -> Dict[str, Any]:
    return {
        "nested": {
            "path": "ingredients",
            "query": {"match": {"ingredients.name": name}},
            "score_mode": "max",
            "boost": INGREDIENT_BOOST,
        }
    }


def _full_text_clause(query: str) -> Dict[str, Any]:
    """Match on the root text fields or on any nested ingredient name."""
    return {
        "bool": {
            "should": [
                {
                    "multi_match": {
                        "query": query,
                        "fields": RECIPE_TEXT_FIELDS,
                        "type": "best_fields",
                        "fuzziness": "AUTO",
                    }
                },
                {
                    "nested": {
                        "path": "ingredients",
                        "query": {
                            "match": {
                                "ingredients.name": {"query": query, "fuzziness": "AUTO"}
                            }
                        },
                        "score_mode": "max",
                    }
                },
            ],
            "minimum_should_match": 1,
        }
    }


def build_recipe_document(recipe: Recipe) -> Dict[str, Any]:
    """Index document: the wire format plus the flattened ingredient names."""
    document = recipe.to_wire()
    document[INGREDIENT_NAMES_FIELD] = [i.name for i in recipe.ingredients if i.name]
    return document


def _merge_unique(*groups: Sequence[str]) -> List[str]:
    merged: List[str] = []
    for group in groups:
        for value in group:
            if value not in merged:
                merged.append(value)
    return merged


def build_recipe_filters(filters: SearchFilters, tags: Sequence[str] = ()) -> List[Dict[str, Any]]:
    """Hard filters (non-scoring) for a recipe search."""
    clauses: List[Dict[str, Any]] = []

    all_tags = _merge_unique(tags, filters.tags)
    if all_tags:
        clauses.append({"terms": {"tags": all_tags}})
    if filters.difficulty:
        clauses.append({"terms": {"difficulty": [d.value for d in filters.difficulty]}})
    if filters.cuisine:
        clauses.append({"terms": {"cuisine": list(filters.cuisine)}})
    if filters.max_prep_time is not None:
        clauses.append({"range": {"prepTime": {"lte": filters.max_prep_time}}})
    if filters.max_cook_time is not None:
        clauses.append({"range": {"cookTime": {"lte": filters.max_cook_time}}})

    return clauses


def build_recipe_search(
    query: str,
    ingredient_names: Sequence[str],
    tags: Sequence[str],
    filters: SearchFilters,
) -> Dict[str, Any]:
    """
    Full-text recipe search with ingredient boosting and hard filters.

    Each supplied ingredient name adds an optional nested clause, so
    recipes containing more of them rank higher while recipes containing
    none still match.

    Example:
        >>> kwargs = build_recipe_search("pasta", [], [], SearchFilters(page=2, page_size=500))
        >>> kwargs["from_"], kwargs["size"]
        (100, 100)
    """
    must: List[Dict[str, Any]] = []
    if query.strip():
        must.append(_full_text_clause(query))

    ingredients = _merge_unique(ingredient_names, filters.ingredients)
    should = [_ingredient_boost_clause(name) for name in ingredients]

    bool_query: Dict[str, Any] = {
        "must": must,
        "filter": build_recipe_filters(filters, tags),
    }
    if should:
        bool_query["should"] = should
        bool_query["minimum_should_match"] = 0

    size = filters.effective_page_size()
    return {
        "query": {"bool": bool_query},
        "from_": (filters.page - 1) * size,
        "size": size,
        "sort": [{"_score": {"order": "desc"}}, {"averageRating": {"order": "desc"}}],
        "track_total_hits": True,
    }


def build_ingredient_search(query: str, categories: Optional[Sequence[str]] = None) -> Dict[str, Any]:
    filter_clauses: List[Dict[str, Any]] = []
    if categories:
        filter_clauses.append({"terms": {"category": list(categories)}})

    return {
        "query": {
            "bool": {
                "must": [
                    {
                        "multi_match": {
                            "query": query,
                            "fields": INGREDIENT_TEXT_FIELDS,
                            "fuzziness": "AUTO",
                        }
                    }
                ],
                "filter": filter_clauses,
            }
        },
        "size": INGREDIENT_SEARCH_SIZE,
        "track_total_hits": True,
    }


def build_similar_recipes(recipe_index: str, recipe_id: str, limit: int) -> Dict[str, Any]:
    """More-like-this over the source document, which is excluded by id."""
    return {
        "query": {
            "bool": {
                "must": [
                    {
                        "more_like_this": {
                            "fields": SIMILARITY_FIELDS,
                            "like": [{"_index": recipe_index, "_id": recipe_id}],
                            "min_term_freq": 1,
                            "max_query_terms": 12,
                            "min_doc_freq": 1,
                        }
                    }
                ],
                "must_not": [{"ids": {"values": [recipe_id]}}],
            }
        },
        # one spare hit in case the source slips through
        "size": limit + 1,
    }


RECIPE_INDEX_MAPPINGS: Dict[str, Any] = {
    "properties": {
        "id": {"type": "keyword"},
        "name": {"type": "text"},
        "description": {"type": "text"},
        "authorId": {"type": "keyword"},
        INGREDIENT_NAMES_FIELD: {"type": "text"},
        "ingredients": {
            "type": "nested",
            "properties": {
                "ingredientId": {"type": "keyword"},
                "name": {"type": "text"},
                "unit": {"type": "keyword"},
                "quantity": {"type": "float"},
            },
        },
        "tags": {"type": "keyword"},
        "difficulty": {"type": "keyword"},
        "cuisine": {"type": "keyword"},
        "prepTime": {"type": "integer"},
        "cookTime": {"type": "integer"},
        "averageRating": {"type": "float"},
        "createdAt": {"type": "date"},
        "updatedAt": {"type": "date"},
    }
}

INGREDIENT_INDEX_MAPPINGS: Dict[str, Any] = {
    "properties": {
        "id": {"type": "keyword"},
        "name": {"type": "text"},
        "category": {"type": "keyword"},
        "recognitionTags": {"type": "text"},
    }
}
