"""
Elasticsearch search index adapter.

Implements ISearchIndex over ``AsyncElasticsearch`` (8.x). Recipe and
ingredient documents use the camelCase wire format of the domain models.
"""

from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

import structlog
from elasticsearch import ApiError, AsyncElasticsearch, NotFoundError, TransportError
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from domain.recipe.core.entities.ingredient import Ingredient
from domain.recipe.core.entities.recipe import Recipe
from domain.recipe.core.value_objects.search import ResultPage, SearchFilters
from domain.shared.errors import SearchError
from infrastructure.search.query_builder import (
    INGREDIENT_INDEX_MAPPINGS,
    INGREDIENT_SEARCH_SIZE,
    RECIPE_INDEX_MAPPINGS,
    build_ingredient_search,
    build_recipe_document,
    build_recipe_search,
    build_similar_recipes,
)

logger = structlog.get_logger(__name__)

TModel = TypeVar("TModel", bound=BaseModel)

RECIPE_INDEX = "recipes"
INGREDIENT_INDEX = "ingredients"


def _total_hits(response: Any) -> int:
    total = response["hits"]["total"]
    if isinstance(total, dict):
        return int(total["value"])
    return int(total)


class ElasticsearchSearchIndex:
    """ISearchIndex backed by Elasticsearch.

    Transport and API failures become SearchError; an empty page is only
    ever returned for a successful query with no hits.

    Example:
        >>> index = ElasticsearchSearchIndex(AsyncElasticsearch("http://localhost:9200"))
        >>> page = await index.search_recipes("pasta", [], [], SearchFilters())
    """

    def __init__(
        self,
        client: AsyncElasticsearch,
        recipe_index: str = RECIPE_INDEX,
        ingredient_index: str = INGREDIENT_INDEX,
    ) -> None:
        self._client = client
        self.recipe_index = recipe_index
        self.ingredient_index = ingredient_index

    async def _search(self, index: str, operation: str, **kwargs: Any) -> Any:
        try:
            return await self._client.search(index=index, **kwargs)
        except (ApiError, TransportError) as e:
            logger.error("Search request failed", operation=operation, index=index, error=str(e))
            raise SearchError(
                f"Search index unavailable during {operation}",
                context={"operation": operation, "index": index},
            ) from e

    def _parse_hits(self, response: Any, model: Type[TModel], operation: str) -> List[TModel]:
        items: List[TModel] = []
        for hit in response["hits"]["hits"]:
            source = dict(hit.get("_source") or {})
            source["id"] = hit["_id"]
            try:
                items.append(model.model_validate(source))
            except PydanticValidationError as e:
                logger.error("Malformed search document", operation=operation, doc_id=hit["_id"])
                raise SearchError(
                    f"Malformed document {hit['_id']} in search results",
                    context={"operation": operation, "doc_id": hit["_id"]},
                ) from e
        return items

    async def search_recipes(
        self,
        query: str,
        ingredient_names: Sequence[str],
        tags: Sequence[str],
        filters: SearchFilters,
    ) -> ResultPage[Recipe]:
        search_kwargs = build_recipe_search(query, ingredient_names, tags, filters)
        response = await self._search(self.recipe_index, "search_recipes", **search_kwargs)

        page = ResultPage[Recipe](
            items=self._parse_hits(response, Recipe, "search_recipes"),
            total=_total_hits(response),
            page=filters.page,
            page_size=search_kwargs["size"],
        )
        logger.info(
            "Recipe search completed",
            query=query,
            result_count=len(page.items),
            total=page.total,
        )
        return page

    async def search_ingredients(
        self,
        query: str,
        categories: Optional[Sequence[str]] = None,
    ) -> ResultPage[Ingredient]:
        response = await self._search(
            self.ingredient_index,
            "search_ingredients",
            **build_ingredient_search(query, categories),
        )
        page = ResultPage[Ingredient](
            items=self._parse_hits(response, Ingredient, "search_ingredients"),
            total=_total_hits(response),
            page=1,
            page_size=INGREDIENT_SEARCH_SIZE,
        )
        logger.info("Ingredient search completed", query=query, result_count=len(page.items))
        return page

    async def find_similar_recipes(self, recipe_id: str, limit: int = 5) -> List[Recipe]:
        if limit <= 0:
            return []

        response = await self._search(
            self.recipe_index,
            "find_similar_recipes",
            **build_similar_recipes(self.recipe_index, recipe_id, limit),
        )
        recipes = [
            recipe
            for recipe in self._parse_hits(response, Recipe, "find_similar_recipes")
            if recipe.id != recipe_id
        ][:limit]
        logger.info("Similar recipes found", recipe_id=recipe_id, result_count=len(recipes))
        return recipes

    async def index_recipe(self, recipe: Recipe) -> None:
        try:
            await self._client.index(
                index=self.recipe_index,
                id=recipe.id,
                document=build_recipe_document(recipe),
            )
        except (ApiError, TransportError) as e:
            logger.error("Indexing failed", recipe_id=recipe.id, error=str(e))
            raise SearchError(
                f"Failed to index recipe {recipe.id}",
                context={"operation": "index_recipe", "recipe_id": recipe.id},
            ) from e
        logger.info("Recipe indexed", recipe_id=recipe.id)

    async def remove_recipe(self, recipe_id: str) -> None:
        try:
            await self._client.delete(index=self.recipe_index, id=recipe_id)
        except NotFoundError:
            logger.debug("Recipe not in index", recipe_id=recipe_id)
            return
        except (ApiError, TransportError) as e:
            logger.error("Index removal failed", recipe_id=recipe_id, error=str(e))
            raise SearchError(
                f"Failed to remove recipe {recipe_id} from index",
                context={"operation": "remove_recipe", "recipe_id": recipe_id},
            ) from e
        logger.info("Recipe removed from index", recipe_id=recipe_id)

    async def ensure_indices(self) -> None:
        """Create the recipe and ingredient indices when missing."""
        mappings: Dict[str, Dict[str, Any]] = {
            self.recipe_index: RECIPE_INDEX_MAPPINGS,
            self.ingredient_index: INGREDIENT_INDEX_MAPPINGS,
        }
        for index, index_mappings in mappings.items():
            if await self._client.indices.exists(index=index):
                continue
            await self._client.indices.create(index=index, mappings=index_mappings)
            logger.info("Created search index", index=index)

    async def close(self) -> None:
        await self._client.close()
