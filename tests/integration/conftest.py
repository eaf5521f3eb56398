"""Fixtures for API tests.

The app is built around an explicit container of in-memory adapters.
``ASGITransport`` does not run the lifespan, so the fixtures start the
container themselves.
"""

from typing import Any, AsyncIterator, Callable, Optional, cast

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app import ServiceContainer, build_container, create_app
from infrastructure.cache.cache_service import CacheService
from infrastructure.cache.in_memory_backend import InMemoryCacheBackend
from infrastructure.messaging.in_memory_publisher import InMemoryMessagePublisher
from infrastructure.persistence.in_memory.recipe_repository import InMemoryRecipeRepository
from infrastructure.search.in_memory_index import InMemorySearchIndex

ClientFactory = Callable[..., Any]


def _container(**overrides: Any) -> ServiceContainer:
    adapters = {
        "repository": InMemoryRecipeRepository(),
        "cache": CacheService(InMemoryCacheBackend()),
        "search_index": InMemorySearchIndex(),
        "publisher": InMemoryMessagePublisher(),
    }
    adapters.update(overrides)
    return build_container(**adapters)


@pytest_asyncio.fixture
async def container() -> ServiceContainer:
    wired = _container()
    await wired.startup()
    return wired


@pytest_asyncio.fixture
async def client(container: ServiceContainer) -> AsyncIterator[AsyncClient]:
    """Async HTTP client over the in-memory wired app."""
    transport = ASGITransport(app=cast(Any, create_app(container)))
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest_asyncio.fixture
async def client_with() -> AsyncIterator[ClientFactory]:
    """Factory for a client whose container overrides some adapters."""
    clients = []

    async def _make(**overrides: Any) -> AsyncClient:
        wired = _container(**overrides)
        await wired.startup()
        ac = AsyncClient(
            transport=ASGITransport(app=cast(Any, create_app(wired))),
            base_url="http://testserver",
        )
        clients.append(ac)
        return ac

    yield _make

    for ac in clients:
        await ac.aclose()
