"""In-memory message publisher implementation.

Provides an in-memory implementation of IMessagePublisher for testing and
single-process development. Published messages are recorded and handed to
the handlers consuming their topic, in subscription order.
"""

import logging
from typing import Dict, List

from domain.recipe.core.events.messages import RecipeMessage
from domain.recipe.core.ports.message_publisher import MessageHandler

logger = logging.getLogger(__name__)


class InMemoryMessagePublisher:
    """
    In-memory implementation of IMessagePublisher.

    Thread safety: NOT thread-safe
    Persistence: Messages and handlers lost on process restart
    Error handling: Failed handlers log errors but don't prevent other handlers

    Example:
        >>> publisher = InMemoryMessagePublisher()
        >>> await publisher.consume("recipe.index", worker.handle_payload)
        >>> await publisher.publish(IndexCreate.create(recipe))
        >>> len(publisher.published)
        1
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[MessageHandler]] = {}
        self.published: List[RecipeMessage] = []

    async def consume(self, topic: str, handler: MessageHandler) -> None:
        """
        Subscribe a handler to a topic.

        Note:
            - Same handler can be subscribed multiple times (will be called multiple times)
            - Handlers are called in subscription order
        """
        self._handlers.setdefault(topic, []).append(handler)
        logger.debug(
            "Handler subscribed",
            extra={"topic": topic, "handler": getattr(handler, "__name__", repr(handler))},
        )

    async def publish(self, message: RecipeMessage) -> None:
        self.published.append(message)
        handlers = self._handlers.get(message.topic, [])

        logger.info(
            "Publishing message",
            extra={
                "topic": message.topic,
                "message_type": type(message).__name__,
                "event_id": str(message.event_id),
                "handler_count": len(handlers),
            },
        )

        payload = message.to_payload()
        for handler in handlers:
            try:
                await handler(payload)
            except Exception as e:
                # Log error but don't prevent other handlers from running
                logger.error(
                    "Message handler failed",
                    extra={
                        "topic": message.topic,
                        "event_id": str(message.event_id),
                        "handler": getattr(handler, "__name__", repr(handler)),
                        "error": str(e),
                    },
                    exc_info=True,
                )

    def unsubscribe(self, topic: str, handler: MessageHandler) -> bool:
        """
        Remove the first subscription of handler on topic.

        Returns:
            True if handler was found and removed, False otherwise
        """
        handlers = self._handlers.get(topic)
        if not handlers or handler not in handlers:
            return False
        handlers.remove(handler)
        return True

    def messages_for(self, topic: str) -> List[RecipeMessage]:
        """Published messages on one topic, oldest first (for testing)."""
        return [m for m in self.published if m.topic == topic]

    def get_handler_count(self, topic: str) -> int:
        return len(self._handlers.get(topic, []))

    def clear(self) -> None:
        """Forget handlers and recorded messages (for testing)."""
        self._handlers.clear()
        self.published.clear()
        logger.debug("All message handlers cleared")
