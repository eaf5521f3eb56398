"""Queue adapters for recipe messages."""

from infrastructure.messaging.in_memory_publisher import InMemoryMessagePublisher

__all__ = ["InMemoryMessagePublisher"]
