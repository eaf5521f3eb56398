"""Message publisher factory.

Environment-based adapter selection:
- QUEUE_BACKEND=rabbitmq: RABBITMQ_URL (call ``connect()`` before use)
- QUEUE_BACKEND=inmemory: in-process dispatch (default, tests/dev)
"""

import os

from domain.recipe.core.ports.message_publisher import IMessagePublisher
from infrastructure.config import get_rabbitmq_url
from infrastructure.messaging.in_memory_publisher import InMemoryMessagePublisher


def create_message_publisher() -> IMessagePublisher:
    """Create publisher based on QUEUE_BACKEND env var.

    Raises:
        ValueError: Unknown backend name
    """
    mode = os.getenv("QUEUE_BACKEND", "inmemory").lower()

    if mode == "rabbitmq":
        from infrastructure.messaging.rabbitmq_publisher import RabbitMQMessagePublisher

        return RabbitMQMessagePublisher(get_rabbitmq_url())

    if mode == "inmemory":
        return InMemoryMessagePublisher()

    raise ValueError(f"Unknown QUEUE_BACKEND: {mode!r} (expected 'inmemory' or 'rabbitmq')")
