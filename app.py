from __future__ import annotations

# Standard library
import logging as _logging
import os
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Optional

# Third-party
from dotenv import load_dotenv
from fastapi import FastAPI

# Local application imports
from api.errors import register_exception_handlers
from api.recipes import router as recipes_router
from application.recipe.indexing_worker import RecipeIndexingWorker
from application.recipe.recipe_service import RecipeService, RecipeServiceSettings
from domain.recipe.core.ports.message_publisher import IMessagePublisher
from domain.recipe.core.ports.recipe_repository import IRecipeRepository
from domain.recipe.core.ports.search_index import ISearchIndex
from infrastructure.cache.cache_service import CacheService
from infrastructure.cache.factory import create_cache_service
from infrastructure.config import (
    get_match_cache_ttl,
    get_response_budget_ms,
    get_search_cache_ttl,
)
from infrastructure.messaging.factory import create_message_publisher
from infrastructure.persistence.factory import create_recipe_repository
from infrastructure.search.factory import create_search_index
from metrics.core import registry

load_dotenv()

# --- Basic logging configuration (minimal) ---
_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
_logging.basicConfig(
    level=getattr(_logging, _LOG_LEVEL, _logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)

# Version from env (Docker build ARG -> ENV APP_VERSION)
APP_VERSION = os.getenv("APP_VERSION", "0.0.0-dev")


@dataclass
class ServiceContainer:
    """Wired adapters and services shared by every request."""

    repository: IRecipeRepository
    cache: CacheService
    search_index: ISearchIndex
    publisher: IMessagePublisher
    recipe_service: RecipeService
    indexing_worker: RecipeIndexingWorker
    run_indexing_worker: bool = True

    async def startup(self) -> None:
        """Open broker connections, ensure indexes and start the worker."""
        for component in (self.publisher, self.repository, self.search_index):
            for hook in ("connect", "ensure_indexes", "ensure_indices"):
                method = getattr(component, hook, None)
                if method is not None:
                    await method()
        if self.run_indexing_worker:
            await self.indexing_worker.start(self.publisher)

    async def shutdown(self) -> None:
        await self.recipe_service.drain_background_tasks()
        components: tuple[Any, ...] = (
            self.publisher,
            self.search_index,
            self.repository,
            self.cache.backend,
        )
        for component in components:
            close = getattr(component, "close", None)
            if close is not None:
                await close()


def build_container(
    repository: Optional[IRecipeRepository] = None,
    cache: Optional[CacheService] = None,
    search_index: Optional[ISearchIndex] = None,
    publisher: Optional[IMessagePublisher] = None,
) -> ServiceContainer:
    """Wire the service graph; adapters not passed in come from env factories."""
    repository = repository or create_recipe_repository()
    cache = cache or create_cache_service()
    search_index = search_index or create_search_index()
    publisher = publisher or create_message_publisher()

    settings = RecipeServiceSettings(
        match_cache_ttl=get_match_cache_ttl(),
        search_cache_ttl=get_search_cache_ttl(),
        response_budget_ms=get_response_budget_ms(),
    )
    return ServiceContainer(
        repository=repository,
        cache=cache,
        search_index=search_index,
        publisher=publisher,
        recipe_service=RecipeService(repository, cache, search_index, publisher, settings),
        indexing_worker=RecipeIndexingWorker(search_index),
        run_indexing_worker=os.getenv("RUN_INDEXING_WORKER", "true").lower() == "true",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> Any:  # pragma: no cover
    """Start adapters before serving and release them on shutdown."""
    logger = _logging.getLogger("startup")
    container: ServiceContainer = app.state.container

    logger.info(
        "lifespan.startup",
        extra={
            "repository": type(container.repository).__name__,
            "cache": type(container.cache.backend).__name__,
            "search": type(container.search_index).__name__,
            "queue": type(container.publisher).__name__,
        },
    )
    await container.startup()
    logger.info("lifespan.ready", extra={"status": "serving"})
    try:
        yield
    finally:
        logger.info("lifespan.shutdown", extra={"status": "cleanup"})
        await container.shutdown()


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    application = FastAPI(
        title="PantryChef Recipe Service",
        version=APP_VERSION,
        lifespan=lifespan,
    )
    application.state.container = container or build_container()
    register_exception_handlers(application)
    application.include_router(recipes_router)

    @application.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @application.get("/version")
    async def version() -> dict[str, str]:
        return {"version": APP_VERSION}

    @application.get("/metrics")
    async def metrics() -> Any:
        return registry.snapshot()

    return application


app = create_app()
