"""Recipe domain events and queue messages."""

from .base import DomainEvent
from .messages import (
    INDEX_TOPIC,
    MATCHING_TOPIC,
    SEARCH_TOPIC,
    TOPICS,
    IndexCreate,
    IndexDelete,
    IndexUpdate,
    MatchAnalytics,
    RecipeMessage,
    SearchAnalytics,
    decode_message,
)

__all__ = [
    "DomainEvent",
    "INDEX_TOPIC",
    "MATCHING_TOPIC",
    "SEARCH_TOPIC",
    "TOPICS",
    "IndexCreate",
    "IndexDelete",
    "IndexUpdate",
    "MatchAnalytics",
    "RecipeMessage",
    "SearchAnalytics",
    "decode_message",
]
