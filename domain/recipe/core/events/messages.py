"""
Queue messages published by the recipe service.

One message type per topic/action, so consumers dispatch on the type
instead of branching on loosely typed dict fields:

- ``recipe.index``: IndexCreate, IndexUpdate, IndexDelete
- ``recipe.matching``: MatchAnalytics
- ``recipe.search``: SearchAnalytics

``to_payload()`` produces the JSON body sent to the broker and
``decode_message()`` rebuilds the typed message from it.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, ClassVar, Dict, Optional, Tuple, Union

from domain.recipe.core.entities.recipe import Recipe
from domain.recipe.core.events.base import DomainEvent

INDEX_TOPIC = "recipe.index"
MATCHING_TOPIC = "recipe.matching"
SEARCH_TOPIC = "recipe.search"

TOPICS = (INDEX_TOPIC, MATCHING_TOPIC, SEARCH_TOPIC)


@dataclass(frozen=True)
class IndexCreate(DomainEvent):
    """A recipe was persisted and must be added to the search index."""

    topic: ClassVar[str] = INDEX_TOPIC
    action: ClassVar[str] = "CREATE"

    recipe: Recipe

    @property
    def recipe_id(self) -> str:
        return self.recipe.id

    @classmethod
    def create(cls, recipe: Recipe) -> "IndexCreate":
        return cls(
            event_id=cls._generate_event_id(),
            occurred_at=cls._now(),
            recipe=recipe,
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "action": self.action,
            "recipeId": self.recipe.id,
            "recipe": self.recipe.to_wire(),
        }


@dataclass(frozen=True)
class IndexUpdate(IndexCreate):
    """A recipe changed and its index document must be replaced."""

    action: ClassVar[str] = "UPDATE"


@dataclass(frozen=True)
class IndexDelete(DomainEvent):
    """A recipe was deleted and must be removed from the search index."""

    topic: ClassVar[str] = INDEX_TOPIC
    action: ClassVar[str] = "DELETE"

    recipe_id: str

    @classmethod
    def create(cls, recipe_id: str) -> "IndexDelete":
        return cls(
            event_id=cls._generate_event_id(),
            occurred_at=cls._now(),
            recipe_id=recipe_id,
        )

    def to_payload(self) -> Dict[str, Any]:
        return {"action": self.action, "recipeId": self.recipe_id}


@dataclass(frozen=True)
class MatchAnalytics(DomainEvent):
    """An ingredient match was computed (cache miss)."""

    topic: ClassVar[str] = MATCHING_TOPIC

    ingredient_ids: Tuple[str, ...]
    result_count: int

    @classmethod
    def create(cls, ingredient_ids, result_count: int) -> "MatchAnalytics":
        return cls(
            event_id=cls._generate_event_id(),
            occurred_at=cls._now(),
            ingredient_ids=tuple(ingredient_ids),
            result_count=result_count,
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "ingredientIds": list(self.ingredient_ids),
            "resultCount": self.result_count,
            "timestamp": self.occurred_at.isoformat(),
        }


@dataclass(frozen=True)
class SearchAnalytics(DomainEvent):
    """A recipe search was executed against the index (cache miss)."""

    topic: ClassVar[str] = SEARCH_TOPIC

    query: str
    filters: Dict[str, Any]
    result_count: int

    @classmethod
    def create(cls, query: str, filters: Dict[str, Any], result_count: int) -> "SearchAnalytics":
        return cls(
            event_id=cls._generate_event_id(),
            occurred_at=cls._now(),
            query=query,
            filters=dict(filters),
            result_count=result_count,
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "query": self.query,
            "filters": self.filters,
            "resultCount": self.result_count,
            "timestamp": self.occurred_at.isoformat(),
        }


RecipeMessage = Union[IndexCreate, IndexUpdate, IndexDelete, MatchAnalytics, SearchAnalytics]

_INDEX_ACTIONS = {
    IndexCreate.action: IndexCreate,
    IndexUpdate.action: IndexUpdate,
}


def _timestamp(payload: Dict[str, Any]) -> datetime:
    raw: Optional[str] = payload.get("timestamp")
    if raw:
        return datetime.fromisoformat(raw)
    return DomainEvent._now()


def decode_message(topic: str, payload: Dict[str, Any]) -> RecipeMessage:
    """
    Rebuild a typed message from a topic and its JSON payload.

    Raises:
        ValueError: Unknown topic or index action, or a payload missing
            required fields

    Example:
        >>> msg = decode_message("recipe.index", {"action": "DELETE", "recipeId": "r1"})
        >>> type(msg).__name__, msg.recipe_id
        ('IndexDelete', 'r1')
    """
    try:
        if topic == INDEX_TOPIC:
            action = payload.get("action")
            if action == IndexDelete.action:
                return IndexDelete.create(payload["recipeId"])
            message_cls = _INDEX_ACTIONS.get(action)
            if message_cls is None:
                raise ValueError(f"Unknown index action: {action!r}")
            return message_cls.create(Recipe.model_validate(payload["recipe"]))

        if topic == MATCHING_TOPIC:
            return MatchAnalytics(
                event_id=DomainEvent._generate_event_id(),
                occurred_at=_timestamp(payload),
                ingredient_ids=tuple(payload["ingredientIds"]),
                result_count=int(payload.get("resultCount", 0)),
            )

        if topic == SEARCH_TOPIC:
            return SearchAnalytics(
                event_id=DomainEvent._generate_event_id(),
                occurred_at=_timestamp(payload),
                query=payload.get("query", ""),
                filters=dict(payload.get("filters") or {}),
                result_count=int(payload.get("resultCount", 0)),
            )
    except KeyError as e:
        raise ValueError(f"Message on {topic!r} is missing field {e.args[0]!r}") from e

    raise ValueError(f"Unknown topic: {topic!r}")
