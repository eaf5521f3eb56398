"""Recipe application services."""

from application.recipe.indexing_worker import RecipeIndexingWorker
from application.recipe.recipe_service import RecipeService, RecipeServiceSettings

__all__ = ["RecipeIndexingWorker", "RecipeService", "RecipeServiceSettings"]
