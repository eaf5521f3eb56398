"""Recipe matching & retrieval service.

The only entry point clients call. Reads are cache-aside over the
repository and the search index; mutations go repository -> queue ->
cache, so a cache hit never exposes data that was not persisted.

Cache failure policy:
- Read paths treat CacheReadError as a miss (logged). A structurally
  invalid cached recipe is evicted and replaced by the refetched value.
- Mutations propagate CacheWriteError: the stored data changed but the
  cache may now be stale.
- Populating the cache after a read is best effort (logged).
- Index publishes must succeed and raise QueueError otherwise. When an
  update, rating or delete fails to publish, the recipe key is evicted
  before the error propagates, so the cache never outlives the store.
- Analytics publishes run in background tasks; failures are logged.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Dict, List, Optional, Sequence, Set, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_snake

from domain.recipe.core.entities.ingredient import Ingredient
from domain.recipe.core.entities.recipe import (
    IMMUTABLE_FIELDS,
    Recipe,
    RecipeDraft,
    RecipePatch,
    RecipeRating,
)
from domain.recipe.core.events.messages import (
    IndexCreate,
    IndexDelete,
    IndexUpdate,
    MatchAnalytics,
    RecipeMessage,
    SearchAnalytics,
)
from domain.recipe.core.ports.message_publisher import IMessagePublisher
from domain.recipe.core.ports.recipe_repository import IRecipeRepository
from domain.recipe.core.ports.search_index import ISearchIndex
from domain.recipe.core.value_objects.cache_keys import (
    INGREDIENT_MATCHES_PATTERN,
    ingredients_key,
    search_key,
)
from domain.recipe.core.value_objects.search import ResultPage, SearchFilters
from domain.shared.errors import (
    CacheReadError,
    CacheWriteError,
    InvalidCachedRecipeError,
    NotFoundError,
    QueueError,
    RecipeServiceError,
    RepositoryError,
    SearchError,
    ValidationError,
)
from domain.shared.ports.cache import ICacheService
from metrics.recipe_service import time_operation

logger = logging.getLogger(__name__)

TModel = TypeVar("TModel", bound=BaseModel)
T = TypeVar("T")


@dataclass(frozen=True)
class RecipeServiceSettings:
    """TTLs (seconds) for aggregate cache entries and the latency budget."""

    match_cache_ttl: int = 3600
    search_cache_ttl: int = 1800
    response_budget_ms: float = 200.0


def _validation_details(error: PydanticValidationError) -> List[Dict[str, str]]:
    return [
        {"field": ".".join(str(part) for part in err["loc"]), "message": err["msg"]}
        for err in error.errors()
    ]


class RecipeService:
    """
    Recipe matching & retrieval.

    Stateless apart from its collaborators: one instance is shared across
    concurrent requests.

    Example:
        >>> service = RecipeService(repository, cache, search_index, publisher)
        >>> recipe = await service.create_recipe({
        ...     "name": "Omelette",
        ...     "ingredients": [{"id": "egg", "qty": 2, "unit": "pcs"}],
        ...     "prepTime": 5,
        ...     "cookTime": 5,
        ... })
        >>> (await service.get_recipe_by_id(recipe.id)).average_rating
        0.0
    """

    def __init__(
        self,
        repository: IRecipeRepository,
        cache: ICacheService,
        search_index: ISearchIndex,
        publisher: IMessagePublisher,
        settings: Optional[RecipeServiceSettings] = None,
    ):
        self._repository = repository
        self._cache = cache
        self._search_index = search_index
        self._publisher = publisher
        self._settings = settings or RecipeServiceSettings()
        self._background_tasks: Set["asyncio.Task[None]"] = set()

    async def drain_background_tasks(self) -> None:
        """Wait for pending analytics publishes (shutdown and tests)."""
        while self._background_tasks:
            await asyncio.gather(*list(self._background_tasks))

    # ═══════════════════════════════════════════════════════════
    # MUTATIONS
    # ═══════════════════════════════════════════════════════════

    async def create_recipe(self, data: Union[Dict[str, Any], RecipeDraft]) -> Recipe:
        """
        Validate, persist, queue for indexing, then cache a new recipe.

        Raises:
            ValidationError: Invalid recipe content (nothing is persisted)
            RepositoryError: Persistence failed (no queue or cache side effects)
            QueueError: Persisted but the index notification failed
            CacheWriteError: Persisted and queued but caching failed
        """
        operation = "create_recipe"
        with time_operation(operation, budget_ms=self._settings.response_budget_ms):
            draft = self._validate(RecipeDraft, data, operation)
            recipe = Recipe.from_draft(draft)

            stored = await self._repository_call(
                self._repository.create(recipe), operation, recipe.id
            )
            await self._publish_index(IndexCreate.create(stored), operation)
            await self._write_recipe_cache(stored, operation)

            logger.info(
                "Recipe created",
                extra={"recipe_id": stored.id, "ingredient_count": len(stored.ingredients)},
            )
            return stored

    async def update_recipe(
        self,
        recipe_id: str,
        partial: Union[Dict[str, Any], RecipePatch],
        expected_version: Optional[int] = None,
    ) -> Recipe:
        """
        Apply a partial update and overwrite the cached recipe.

        Raises:
            ValidationError: Unknown, immutable or invalid fields, or empty patch
            NotFoundError: No recipe with this id
            ConflictError: expected_version given and the stored version differs
            QueueError / CacheWriteError: Updated but propagation failed
        """
        operation = "update_recipe"
        with time_operation(operation, budget_ms=self._settings.response_budget_ms):
            if isinstance(partial, dict):
                immutable = sorted(k for k in partial if to_snake(k) in IMMUTABLE_FIELDS)
                if immutable:
                    raise ValidationError(
                        f"Fields cannot be updated: {', '.join(immutable)}",
                        context={"operation": operation, "recipe_id": recipe_id},
                    )
            patch = self._validate(RecipePatch, partial, operation, recipe_id)
            changes = patch.changes()
            if not changes:
                raise ValidationError(
                    "Update contains no fields",
                    context={"operation": operation, "recipe_id": recipe_id},
                )

            logger.info(
                "Updating recipe",
                extra={"recipe_id": recipe_id, "update_fields": sorted(changes)},
            )
            updated = await self._repository_call(
                self._repository.find_by_id_and_update(recipe_id, changes, expected_version),
                operation,
                recipe_id,
            )
            if updated is None:
                raise self._not_found(recipe_id, operation)

            await self._publish_index_or_evict(IndexUpdate.create(updated), recipe_id, operation)
            await self._write_recipe_cache(updated, operation)
            return updated

    async def delete_recipe(self, recipe_id: str) -> None:
        """
        Delete a recipe, queue its removal from the index and evict it.

        Raises:
            NotFoundError: No recipe with this id
            QueueError / CacheWriteError: Deleted but propagation failed
        """
        operation = "delete_recipe"
        with time_operation(operation, budget_ms=self._settings.response_budget_ms):
            deleted = await self._repository_call(
                self._repository.find_by_id_and_delete(recipe_id), operation, recipe_id
            )
            if deleted is None:
                raise self._not_found(recipe_id, operation)

            await self._publish_index_or_evict(IndexDelete.create(recipe_id), recipe_id, operation)
            try:
                await self._cache.delete_recipe(recipe_id)
                await self._cache.clear(INGREDIENT_MATCHES_PATTERN)
            except RecipeServiceError as e:
                raise e.with_context(operation=operation, step="cache", recipe_id=recipe_id)

            logger.info("Recipe deleted", extra={"recipe_id": recipe_id})

    async def rate_recipe(
        self,
        recipe_id: str,
        user_id: str,
        rating: int,
        comment: Optional[str] = None,
    ) -> Recipe:
        """Append a user rating; the average is recomputed by the repository."""
        operation = "rate_recipe"
        with time_operation(operation, budget_ms=self._settings.response_budget_ms):
            new_rating = self._validate(
                RecipeRating,
                {"user_id": user_id, "rating": rating, "comment": comment},
                operation,
                recipe_id,
            )
            updated = await self._repository_call(
                self._repository.add_rating(recipe_id, new_rating), operation, recipe_id
            )
            if updated is None:
                raise self._not_found(recipe_id, operation)

            await self._publish_index_or_evict(IndexUpdate.create(updated), recipe_id, operation)
            await self._write_recipe_cache(updated, operation)

            logger.info(
                "Recipe rated",
                extra={"recipe_id": recipe_id, "average_rating": updated.average_rating},
            )
            return updated

    # ═══════════════════════════════════════════════════════════
    # READS
    # ═══════════════════════════════════════════════════════════

    async def get_recipe_by_id(self, recipe_id: str) -> Optional[Recipe]:
        """Cache-aside lookup; None when the recipe exists nowhere."""
        operation = "get_recipe_by_id"
        with time_operation(operation, budget_ms=self._settings.response_budget_ms):
            cached = await self._read_cached_recipe(recipe_id, operation)
            if cached is not None:
                logger.debug("Recipe served from cache", extra={"recipe_id": recipe_id})
                return cached

            recipe = await self._repository_call(
                self._repository.find_by_id(recipe_id), operation, recipe_id
            )
            if recipe is None:
                return None

            try:
                await self._cache.set_recipe(recipe.id, recipe)
            except CacheWriteError as e:
                self._log_cache_error(e, operation, recipe_id)
            return recipe

    async def find_recipes_by_ingredients(self, ingredient_ids: Sequence[str]) -> List[Recipe]:
        """
        Recipes using at least one of the ingredients, best coverage first.

        An empty list returns [] without touching cache or repository;
        unknown ids simply contribute no matches.
        """
        operation = "find_recipes_by_ingredients"
        with time_operation(operation, budget_ms=self._settings.response_budget_ms):
            ids = list(dict.fromkeys(i.strip() for i in ingredient_ids if i and i.strip()))
            if not ids:
                return []

            key = ingredients_key(ids)
            cached = await self._read_cache(key, List[Recipe], operation)
            if cached is not None:
                return cached

            recipes = await self._repository_call(
                self._repository.find_by_ingredients(ids), operation
            )
            await self._populate_cache(key, recipes, self._settings.match_cache_ttl, operation)
            self._publish_analytics(MatchAnalytics.create(ids, len(recipes)), operation)

            logger.info(
                "Recipe matches found",
                extra={"ingredient_count": len(ids), "match_count": len(recipes)},
            )
            return recipes

    async def search_recipes(
        self,
        query: str = "",
        filters: Union[SearchFilters, Dict[str, Any], None] = None,
    ) -> ResultPage[Recipe]:
        """Full-text + filtered search, cached per (query, filters)."""
        operation = "search_recipes"
        with time_operation(operation, budget_ms=self._settings.response_budget_ms):
            search_filters = self._validate(SearchFilters, filters or {}, operation)
            query = query or ""

            key = search_key(query, search_filters)
            cached = await self._read_cache(key, ResultPage[Recipe], operation)
            if cached is not None:
                return cached

            page = await self._search_call(
                self._search_index.search_recipes(query, [], [], search_filters), operation
            )
            await self._populate_cache(key, page, self._settings.search_cache_ttl, operation)
            self._publish_analytics(
                SearchAnalytics.create(query, search_filters.to_wire(), page.total), operation
            )

            logger.info(
                "Recipe search completed",
                extra={"query": query, "result_count": len(page.items), "total": page.total},
            )
            return page

    async def find_similar_recipes(self, recipe_id: str, limit: int = 5) -> List[Recipe]:
        operation = "find_similar_recipes"
        with time_operation(operation, budget_ms=self._settings.response_budget_ms):
            return await self._search_call(
                self._search_index.find_similar_recipes(recipe_id, limit),
                operation,
                recipe_id,
            )

    async def search_ingredients(
        self,
        query: str,
        categories: Optional[Sequence[str]] = None,
    ) -> ResultPage[Ingredient]:
        operation = "search_ingredients"
        with time_operation(operation, budget_ms=self._settings.response_budget_ms):
            return await self._search_call(
                self._search_index.search_ingredients(query, list(categories or [])),
                operation,
            )

    # ═══════════════════════════════════════════════════════════
    # HELPERS
    # ═══════════════════════════════════════════════════════════

    @staticmethod
    def _validate(
        model: Type[TModel],
        data: Any,
        operation: str,
        recipe_id: Optional[str] = None,
    ) -> TModel:
        if isinstance(data, model):
            return data
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(
                f"Invalid {model.__name__}: {e.error_count()} error(s)",
                context={
                    "operation": operation,
                    "recipe_id": recipe_id,
                    "errors": _validation_details(e),
                },
            ) from e

    @staticmethod
    def _not_found(recipe_id: str, operation: str) -> NotFoundError:
        return NotFoundError(
            f"Recipe {recipe_id} not found",
            context={"operation": operation, "recipe_id": recipe_id},
        )

    async def _repository_call(
        self,
        call: Awaitable[T],
        operation: str,
        recipe_id: Optional[str] = None,
    ) -> T:
        try:
            return await call
        except RecipeServiceError as e:
            raise e.with_context(operation=operation, step="repository", recipe_id=recipe_id)
        except Exception as e:
            logger.error(
                "Repository failure",
                extra={"operation": operation, "recipe_id": recipe_id, "error": str(e)},
                exc_info=True,
            )
            raise RepositoryError(
                f"Repository failure during {operation}",
                context={"operation": operation, "step": "repository", "recipe_id": recipe_id},
            ) from e

    async def _search_call(
        self,
        call: Awaitable[T],
        operation: str,
        recipe_id: Optional[str] = None,
    ) -> T:
        try:
            return await call
        except RecipeServiceError as e:
            raise e.with_context(operation=operation, step="search", recipe_id=recipe_id)
        except Exception as e:
            raise SearchError(
                f"Search failure during {operation}",
                context={"operation": operation, "step": "search", "recipe_id": recipe_id},
            ) from e

    async def _publish_index(self, message: RecipeMessage, operation: str) -> None:
        recipe_id = getattr(message, "recipe_id", None)
        try:
            await self._publisher.publish(message)
        except RecipeServiceError as e:
            raise e.with_context(operation=operation, step="queue", recipe_id=recipe_id)
        except Exception as e:
            raise QueueError(
                f"Failed to publish {type(message).__name__}",
                context={"operation": operation, "step": "queue", "recipe_id": recipe_id},
            ) from e

    async def _publish_index_or_evict(
        self,
        message: RecipeMessage,
        recipe_id: str,
        operation: str,
    ) -> None:
        """Index publish for a recipe that may already be cached."""
        try:
            await self._publish_index(message, operation)
        except QueueError:
            try:
                await self._cache.delete_recipe(recipe_id)
            except CacheWriteError as e:
                self._log_cache_error(e, operation, recipe_id)
            raise

    def _publish_analytics(self, message: RecipeMessage, operation: str) -> None:
        task = asyncio.create_task(self._send_analytics(message, operation))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _send_analytics(self, message: RecipeMessage, operation: str) -> None:
        try:
            await self._publisher.publish(message)
        except Exception as e:
            logger.warning(
                "Analytics publish failed",
                extra={"operation": operation, "topic": message.topic, "error": str(e)},
            )

    async def _write_recipe_cache(self, recipe: Recipe, operation: str) -> None:
        """Mutation path: cache the new state and drop stale match results."""
        try:
            await self._cache.set_recipe(recipe.id, recipe)
            await self._cache.clear(INGREDIENT_MATCHES_PATTERN)
        except RecipeServiceError as e:
            raise e.with_context(operation=operation, step="cache", recipe_id=recipe.id)

    async def _read_cached_recipe(self, recipe_id: str, operation: str) -> Optional[Recipe]:
        try:
            return await self._cache.get_recipe(recipe_id)
        except InvalidCachedRecipeError as e:
            self._log_cache_error(e, operation, recipe_id)
            try:
                await self._cache.delete_recipe(recipe_id)
            except CacheWriteError as delete_error:
                self._log_cache_error(delete_error, operation, recipe_id)
            return None
        except CacheReadError as e:
            self._log_cache_error(e, operation, recipe_id)
            return None

    async def _read_cache(self, key: str, model: Any, operation: str) -> Any:
        try:
            return await self._cache.get(key, model)
        except CacheReadError as e:
            self._log_cache_error(e, operation)
            return None

    async def _populate_cache(self, key: str, value: Any, ttl: int, operation: str) -> None:
        try:
            await self._cache.set(key, value, ttl)
        except CacheWriteError as e:
            self._log_cache_error(e, operation)

    @staticmethod
    def _log_cache_error(
        error: RecipeServiceError,
        operation: str,
        recipe_id: Optional[str] = None,
    ) -> None:
        logger.warning(
            "Cache error ignored",
            extra={
                "operation": operation,
                "recipe_id": recipe_id,
                "code": error.code,
                "error": error.message,
            },
        )
