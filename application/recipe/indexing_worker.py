"""Recipe indexing worker.

Consumer side of the ``recipe.index`` topic: applies create/update/delete
messages to the search index so it follows the repository.
"""

import logging
from typing import Any, Dict

from domain.recipe.core.events.messages import (
    INDEX_TOPIC,
    IndexCreate,
    IndexDelete,
    RecipeMessage,
    decode_message,
)
from domain.recipe.core.ports.message_publisher import IMessagePublisher
from domain.recipe.core.ports.search_index import ISearchIndex

logger = logging.getLogger(__name__)


class RecipeIndexingWorker:
    """
    Keeps the search index in sync with recipe mutations.

    Example:
        >>> worker = RecipeIndexingWorker(search_index)
        >>> await worker.start(publisher)  # consume recipe.index
    """

    def __init__(self, search_index: ISearchIndex):
        self._search_index = search_index

    async def start(self, publisher: IMessagePublisher) -> None:
        """Register this worker as consumer of the index topic."""
        await publisher.consume(INDEX_TOPIC, self.handle_payload)
        logger.info("Indexing worker subscribed", extra={"topic": INDEX_TOPIC})

    async def handle_payload(self, payload: Dict[str, Any]) -> None:
        """
        Decode a raw ``recipe.index`` payload and apply it.

        Raises:
            ValueError: Payload is not a valid index message
        """
        await self.handle(decode_message(INDEX_TOPIC, payload))

    async def handle(self, message: RecipeMessage) -> None:
        """
        Apply one index message.

        Raises:
            ValueError: Message is not an index message
            SearchError: Index unavailable (the broker rejects the message)
        """
        # IndexUpdate subclasses IndexCreate: both replace the document
        if isinstance(message, IndexCreate):
            await self._search_index.index_recipe(message.recipe)
            logger.info(
                "Recipe indexed",
                extra={"recipe_id": message.recipe_id, "action": message.action},
            )
        elif isinstance(message, IndexDelete):
            await self._search_index.remove_recipe(message.recipe_id)
            logger.info("Recipe removed from index", extra={"recipe_id": message.recipe_id})
        else:
            raise ValueError(f"Not an index message: {type(message).__name__}")
