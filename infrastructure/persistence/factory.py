"""Repository Factory for Persistence Layer.

Environment-based repository selection:
- .env (runtime): REPOSITORY_BACKEND=mongodb (production persistence)
- .env.test (pytest): REPOSITORY_BACKEND=inmemory (fast, isolated tests)
- Default: inmemory (safe fallback if env vars not set)

Usage:
    from infrastructure.persistence.factory import create_recipe_repository

    repo = create_recipe_repository()  # inmemory or mongodb based on env
"""

import os

from domain.recipe.core.ports.recipe_repository import IRecipeRepository
from infrastructure.config import get_mongodb_uri
from infrastructure.persistence.in_memory.recipe_repository import InMemoryRecipeRepository


def create_recipe_repository() -> IRecipeRepository:
    """Create recipe repository based on REPOSITORY_BACKEND env var.

    Environment variable: REPOSITORY_BACKEND
    Values:
        - "inmemory": In-memory repository (default, fast, transient)
        - "mongodb": MongoDB repository (persistent, requires MONGODB_URI)

    Raises:
        ValueError: If mongodb selected but MONGODB_URI not set, or the
            backend name is unknown
    """
    mode = os.getenv("REPOSITORY_BACKEND", "inmemory").lower()

    if mode == "mongodb":
        if not get_mongodb_uri():
            raise ValueError(
                "REPOSITORY_BACKEND=mongodb but MONGODB_URI not set. "
                "Set MONGODB_URI in .env or use REPOSITORY_BACKEND=inmemory"
            )
        from infrastructure.persistence.mongodb.recipe_repository import MongoRecipeRepository

        return MongoRecipeRepository()

    if mode == "inmemory":
        return InMemoryRecipeRepository()

    raise ValueError(
        f"Unknown REPOSITORY_BACKEND: {mode!r} (expected 'inmemory' or 'mongodb')"
    )
