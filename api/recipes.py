"""REST endpoints for recipes and ingredients (``/api/v1``)."""

import time
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query, Request, Response

from api.schemas import MatchRequest, RatingRequest, envelope
from application.recipe.recipe_service import RecipeService
from domain.shared.errors import ValidationError

router = APIRouter(prefix="/api/v1", tags=["recipes"])


def get_recipe_service(request: Request) -> RecipeService:
    return request.app.state.container.recipe_service


@router.post("/recipes", status_code=201)
async def create_recipe(
    payload: Dict[str, Any] = Body(...),
    service: RecipeService = Depends(get_recipe_service),
) -> Dict[str, Any]:
    started = time.perf_counter()
    recipe = await service.create_recipe(payload)
    return envelope(recipe, started)


@router.post("/recipes/match")
async def match_recipes(
    payload: MatchRequest,
    service: RecipeService = Depends(get_recipe_service),
) -> Dict[str, Any]:
    started = time.perf_counter()
    recipes = await service.find_recipes_by_ingredients(payload.ingredient_ids)
    return envelope(recipes, started)


@router.get("/recipes/search")
async def search_recipes(
    query: str = "",
    difficulty: List[str] = Query(default=[]),
    cuisine: List[str] = Query(default=[]),
    tags: List[str] = Query(default=[]),
    ingredients: List[str] = Query(default=[]),
    max_prep_time: Optional[int] = Query(default=None, alias="maxPrepTime"),
    max_cook_time: Optional[int] = Query(default=None, alias="maxCookTime"),
    page: int = 1,
    page_size: int = Query(default=20, alias="pageSize"),
    service: RecipeService = Depends(get_recipe_service),
) -> Dict[str, Any]:
    started = time.perf_counter()
    filters = {
        "difficulty": difficulty,
        "cuisine": cuisine,
        "tags": tags,
        "ingredients": ingredients,
        "maxPrepTime": max_prep_time,
        "maxCookTime": max_cook_time,
        "page": page,
        "pageSize": page_size,
    }
    result = await service.search_recipes(query, filters)
    return envelope(result, started)


@router.get("/recipes/{recipe_id}")
async def get_recipe(
    recipe_id: str,
    service: RecipeService = Depends(get_recipe_service),
) -> Dict[str, Any]:
    started = time.perf_counter()
    recipe = await service.get_recipe_by_id(recipe_id)
    return envelope(recipe, started)


@router.put("/recipes/{recipe_id}")
async def update_recipe(
    recipe_id: str,
    payload: Dict[str, Any] = Body(...),
    service: RecipeService = Depends(get_recipe_service),
) -> Dict[str, Any]:
    started = time.perf_counter()
    changes = dict(payload)
    expected_version = changes.pop("expectedVersion", None)
    if expected_version is not None and (
        isinstance(expected_version, bool) or not isinstance(expected_version, int)
    ):
        raise ValidationError(
            "expectedVersion must be an integer",
            context={"operation": "update_recipe", "recipe_id": recipe_id},
        )
    recipe = await service.update_recipe(recipe_id, changes, expected_version=expected_version)
    return envelope(recipe, started)


@router.delete("/recipes/{recipe_id}", status_code=204)
async def delete_recipe(
    recipe_id: str,
    service: RecipeService = Depends(get_recipe_service),
) -> Response:
    await service.delete_recipe(recipe_id)
    return Response(status_code=204)


@router.get("/recipes/{recipe_id}/similar")
async def similar_recipes(
    recipe_id: str,
    limit: int = 5,
    service: RecipeService = Depends(get_recipe_service),
) -> Dict[str, Any]:
    started = time.perf_counter()
    recipes = await service.find_similar_recipes(recipe_id, limit)
    return envelope(recipes, started)


@router.post("/recipes/{recipe_id}/ratings")
async def rate_recipe(
    recipe_id: str,
    payload: RatingRequest,
    service: RecipeService = Depends(get_recipe_service),
) -> Dict[str, Any]:
    started = time.perf_counter()
    recipe = await service.rate_recipe(
        recipe_id, payload.user_id, payload.rating, payload.comment
    )
    return envelope(recipe, started)


@router.get("/ingredients/search")
async def search_ingredients(
    query: str,
    category: List[str] = Query(default=[]),
    service: RecipeService = Depends(get_recipe_service),
) -> Dict[str, Any]:
    started = time.perf_counter()
    result = await service.search_ingredients(query, category)
    return envelope(result, started)
