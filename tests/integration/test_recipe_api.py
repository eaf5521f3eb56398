"""API tests for the recipe REST surface.

Exercises the FastAPI app end to end over in-memory adapters:
- Success envelope and status codes
- Domain error mapping (400/404/409/502/503)
- Search query parameters
"""

from typing import Any, Dict
from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient

from domain.recipe.core.entities.ingredient import Ingredient
from domain.shared.errors import QueueError, SearchError

pytestmark = pytest.mark.integration

OMELETTE: Dict[str, Any] = {
    "name": "Omelette",
    "description": "Quick french omelette",
    "ingredients": [{"id": "egg", "qty": 2, "unit": "pcs", "name": "egg"}],
    "prepTime": 5,
    "cookTime": 5,
    "cuisine": "french",
    "tags": ["quick"],
}

PANCAKES: Dict[str, Any] = {
    "name": "Pancakes",
    "ingredients": [
        {"id": "egg", "qty": 1, "unit": "pcs", "name": "egg"},
        {"id": "milk", "qty": 250, "unit": "ml", "name": "milk"},
    ],
    "prepTime": 10,
    "cookTime": 15,
    "difficulty": "medium",
    "cuisine": "american",
}


async def _create(client: AsyncClient, payload: Dict[str, Any]) -> Dict[str, Any]:
    response = await client.post("/api/v1/recipes", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]


# ============================================
# CRUD
# ============================================


@pytest.mark.asyncio
async def test_create_returns_envelope(client: AsyncClient) -> None:
    response = await client.post("/api/v1/recipes", json=OMELETTE)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["metadata"]["responseTime"] >= 0
    data = body["data"]
    assert data["name"] == "Omelette"
    assert data["version"] == 1
    assert data["averageRating"] == 0.0
    assert data["ingredients"][0]["ingredientId"] == "egg"


@pytest.mark.asyncio
async def test_create_invalid_recipe(client: AsyncClient) -> None:
    response = await client.post("/api/v1/recipes", json={**OMELETTE, "prepTime": -5})

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert body["error"]["details"]["errors"][0]["field"] == "prepTime"


@pytest.mark.asyncio
async def test_get_recipe(client: AsyncClient) -> None:
    created = await _create(client, OMELETTE)

    response = await client.get(f"/api/v1/recipes/{created['id']}")

    assert response.status_code == 200
    assert response.json()["data"] == created


@pytest.mark.asyncio
async def test_get_missing_recipe_returns_null(client: AsyncClient) -> None:
    response = await client.get("/api/v1/recipes/missing")

    assert response.status_code == 200
    assert response.json()["data"] is None


@pytest.mark.asyncio
async def test_update_recipe(client: AsyncClient) -> None:
    created = await _create(client, OMELETTE)

    response = await client.put(
        f"/api/v1/recipes/{created['id']}",
        json={"name": "Cheese Omelette", "expectedVersion": 1},
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "Cheese Omelette"
    assert data["version"] == 2


@pytest.mark.asyncio
async def test_update_stale_version_conflicts(client: AsyncClient) -> None:
    created = await _create(client, OMELETTE)
    url = f"/api/v1/recipes/{created['id']}"
    await client.put(url, json={"servings": 2, "expectedVersion": 1})

    response = await client.put(url, json={"servings": 3, "expectedVersion": 1})

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "RECIPE_VERSION_CONFLICT"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [{}, {"id": "other"}, {"averageRating": 5}, {"name": "x", "expectedVersion": "1"}],
)
async def test_update_rejected_bodies(client: AsyncClient, body: Dict[str, Any]) -> None:
    created = await _create(client, OMELETTE)

    response = await client.put(f"/api/v1/recipes/{created['id']}", json=body)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_update_missing_recipe(client: AsyncClient) -> None:
    response = await client.put("/api/v1/recipes/missing", json={"name": "x"})

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "RECIPE_NOT_FOUND"


@pytest.mark.asyncio
async def test_delete_recipe(client: AsyncClient) -> None:
    created = await _create(client, OMELETTE)
    url = f"/api/v1/recipes/{created['id']}"

    response = await client.delete(url)
    assert response.status_code == 204

    assert (await client.get(url)).json()["data"] is None
    assert (await client.delete(url)).status_code == 404


@pytest.mark.asyncio
async def test_rate_recipe(client: AsyncClient) -> None:
    created = await _create(client, OMELETTE)
    url = f"/api/v1/recipes/{created['id']}/ratings"

    await client.post(url, json={"userId": "u1", "rating": 4})
    response = await client.post(url, json={"userId": "u2", "rating": 5, "comment": "great"})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["averageRating"] == 4.5
    assert len(data["ratings"]) == 2


@pytest.mark.asyncio
async def test_rate_out_of_range(client: AsyncClient) -> None:
    created = await _create(client, OMELETTE)

    response = await client.post(
        f"/api/v1/recipes/{created['id']}/ratings", json={"userId": "u1", "rating": 9}
    )

    assert response.status_code == 400


# ============================================
# Matching & search
# ============================================


@pytest.mark.asyncio
async def test_match_recipes(client: AsyncClient) -> None:
    await _create(client, OMELETTE)
    await _create(client, PANCAKES)

    response = await client.post("/api/v1/recipes/match", json={"ingredientIds": ["milk"]})

    assert response.status_code == 200
    assert [r["name"] for r in response.json()["data"]] == ["Pancakes"]


@pytest.mark.asyncio
async def test_match_empty_list(client: AsyncClient) -> None:
    response = await client.post("/api/v1/recipes/match", json={"ingredientIds": []})
    assert response.json()["data"] == []


@pytest.mark.asyncio
async def test_match_malformed_body(client: AsyncClient) -> None:
    response = await client.post("/api/v1/recipes/match", json={"ingredientIds": "egg"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_search_with_filters(client: AsyncClient) -> None:
    await _create(client, OMELETTE)
    await _create(client, PANCAKES)

    response = await client.get(
        "/api/v1/recipes/search",
        params={"difficulty": ["medium", "hard"], "maxCookTime": 30, "pageSize": 500},
    )

    assert response.status_code == 200
    page = response.json()["data"]
    assert [r["name"] for r in page["items"]] == ["Pancakes"]
    assert page["total"] == 1
    assert page["page"] == 1
    assert page["pageSize"] == 100


@pytest.mark.asyncio
async def test_search_text(client: AsyncClient) -> None:
    await _create(client, OMELETTE)

    page = (await client.get("/api/v1/recipes/search", params={"query": "omelette"})).json()["data"]

    assert [r["name"] for r in page["items"]] == ["Omelette"]


@pytest.mark.asyncio
async def test_search_invalid_page(client: AsyncClient) -> None:
    response = await client.get("/api/v1/recipes/search", params={"page": 0})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_similar_recipes_exclude_source(client: AsyncClient) -> None:
    omelette = await _create(client, OMELETTE)
    await _create(client, PANCAKES)

    response = await client.get(f"/api/v1/recipes/{omelette['id']}/similar", params={"limit": 3})

    assert [r["name"] for r in response.json()["data"]] == ["Pancakes"]


@pytest.mark.asyncio
async def test_ingredient_search(client: AsyncClient, container) -> None:
    container.search_index.add_ingredient(Ingredient(id="egg", name="Egg", category="dairy"))

    response = await client.get("/api/v1/ingredients/search", params={"query": "egg"})

    assert response.status_code == 200
    assert response.json()["data"]["items"][0]["id"] == "egg"


# ============================================
# Collaborator failures
# ============================================


@pytest.mark.asyncio
async def test_queue_failure_maps_to_502(client_with) -> None:
    publisher = AsyncMock()
    publisher.publish.side_effect = QueueError("broker down")
    client = await client_with(publisher=publisher)

    response = await client.post("/api/v1/recipes", json=OMELETTE)

    assert response.status_code == 502
    error = response.json()["error"]
    assert error["code"] == "QUEUE_PUBLISH_ERROR"
    assert error["details"]["step"] == "queue"


@pytest.mark.asyncio
async def test_search_failure_maps_to_503(client_with) -> None:
    search_index = AsyncMock()
    search_index.search_recipes.side_effect = SearchError("es down")
    client = await client_with(search_index=search_index)

    response = await client.get("/api/v1/recipes/search", params={"query": "x"})

    assert response.status_code == 503
    assert response.json()["error"]["code"] == "SEARCH_UNAVAILABLE"


# ============================================
# Operational endpoints
# ============================================


@pytest.mark.asyncio
async def test_health_and_version(client: AsyncClient) -> None:
    assert (await client.get("/health")).json() == {"status": "ok"}
    assert "version" in (await client.get("/version")).json()


@pytest.mark.asyncio
async def test_metrics_count_requests(client: AsyncClient) -> None:
    await _create(client, OMELETTE)

    snapshot = (await client.get("/metrics")).json()

    counters = {
        (c["name"], c["tags"]["operation"], c["tags"]["status"]): c["value"]
        for c in snapshot["counters"]
        if c["name"] == "recipe_service_requests_total"
    }
    assert counters[("recipe_service_requests_total", "create_recipe", "success")] == 1
