"""Ports for the recipe domain."""

from .message_publisher import IMessagePublisher, MessageHandler
from .recipe_repository import IRecipeRepository
from .search_index import ISearchIndex

__all__ = [
    "IMessagePublisher",
    "IRecipeRepository",
    "ISearchIndex",
    "MessageHandler",
]
