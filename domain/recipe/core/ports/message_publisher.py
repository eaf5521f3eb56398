"""Message publisher port (interface).

Defines contract for publishing recipe messages to the queue and for
consuming them on the worker side.
"""

from typing import Any, Awaitable, Callable, Dict, Protocol

from domain.recipe.core.events.messages import RecipeMessage

# Consumer handler: async function receiving the raw JSON payload
MessageHandler = Callable[[Dict[str, Any]], Awaitable[None]]


class IMessagePublisher(Protocol):
    """
    Interface for the asynchronous indexing notifier.

    Implementations:
    - In-memory publisher (testing/development, dispatches in-process)
    - RabbitMQ publisher (production)

    Example usage (application layer):
        >>> await publisher.publish(IndexCreate.create(recipe))
    """

    async def publish(self, message: RecipeMessage) -> None:
        """
        Publish a message on its topic.

        Args:
            message: Typed message; the topic is ``message.topic``

        Raises:
            QueueError: The broker did not accept the message
        """
        ...

    async def consume(self, topic: str, handler: MessageHandler) -> None:
        """
        Register a handler for messages on a topic.

        Note:
            - A handler failure must not stop delivery to other handlers
            - Broker-backed implementations reject a failed message
              without requeueing it
        """
        ...
