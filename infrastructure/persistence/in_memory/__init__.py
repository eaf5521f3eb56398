"""In-memory repository implementations for testing."""

from infrastructure.persistence.in_memory.recipe_repository import InMemoryRecipeRepository

__all__ = ["InMemoryRecipeRepository"]
