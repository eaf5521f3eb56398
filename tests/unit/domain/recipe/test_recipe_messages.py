"""Unit tests for queue messages and their payload decoding."""

import pytest

from domain.recipe.core.events import (
    INDEX_TOPIC,
    MATCHING_TOPIC,
    SEARCH_TOPIC,
    IndexCreate,
    IndexDelete,
    IndexUpdate,
    MatchAnalytics,
    SearchAnalytics,
    decode_message,
)


class TestIndexMessages:
    """Test index propagation messages."""

    def test_create_payload(self, omelette) -> None:
        message = IndexCreate.create(omelette)
        payload = message.to_payload()

        assert message.topic == INDEX_TOPIC
        assert payload["action"] == "CREATE"
        assert payload["recipeId"] == "r-omelette"
        assert payload["recipe"]["name"] == "Omelette"
        assert payload["recipe"]["prepTime"] == 5

    def test_update_is_an_index_create(self, omelette) -> None:
        message = IndexUpdate.create(omelette)

        assert isinstance(message, IndexCreate)
        assert message.to_payload()["action"] == "UPDATE"
        assert message.recipe_id == "r-omelette"

    def test_delete_payload(self) -> None:
        message = IndexDelete.create("r1")
        assert message.to_payload() == {"action": "DELETE", "recipeId": "r1"}

    def test_messages_are_immutable(self) -> None:
        message = IndexDelete.create("r1")
        with pytest.raises(AttributeError):
            message.recipe_id = "r2"  # type: ignore[misc]

    def test_each_message_has_unique_id(self, omelette) -> None:
        assert IndexCreate.create(omelette).event_id != IndexCreate.create(omelette).event_id


class TestAnalyticsMessages:
    """Test analytics messages."""

    def test_match_payload(self) -> None:
        message = MatchAnalytics.create(["egg", "milk"], 3)
        payload = message.to_payload()

        assert message.topic == MATCHING_TOPIC
        assert payload["ingredientIds"] == ["egg", "milk"]
        assert payload["resultCount"] == 3
        assert "timestamp" in payload

    def test_search_payload(self) -> None:
        message = SearchAnalytics.create("pasta", {"page": 1}, 0)
        payload = message.to_payload()

        assert message.topic == SEARCH_TOPIC
        assert payload["query"] == "pasta"
        assert payload["filters"] == {"page": 1}
        assert payload["resultCount"] == 0


class TestDecodeMessage:
    """Test rebuilding typed messages from payloads."""

    @pytest.mark.parametrize("message_cls", [IndexCreate, IndexUpdate])
    def test_decode_index_upsert(self, omelette, message_cls) -> None:
        payload = message_cls.create(omelette).to_payload()
        decoded = decode_message(INDEX_TOPIC, payload)

        assert type(decoded) is message_cls
        assert decoded.recipe == omelette

    def test_decode_delete(self) -> None:
        decoded = decode_message(INDEX_TOPIC, {"action": "DELETE", "recipeId": "r1"})

        assert isinstance(decoded, IndexDelete)
        assert decoded.recipe_id == "r1"

    def test_decode_match_analytics_keeps_timestamp(self) -> None:
        original = MatchAnalytics.create(["egg"], 1)
        decoded = decode_message(MATCHING_TOPIC, original.to_payload())

        assert isinstance(decoded, MatchAnalytics)
        assert decoded.ingredient_ids == ("egg",)
        assert decoded.occurred_at == original.occurred_at

    def test_unknown_topic(self) -> None:
        with pytest.raises(ValueError, match="Unknown topic"):
            decode_message("recipe.unknown", {})

    @pytest.mark.parametrize("action", ["upsert", "delete"])
    def test_unknown_action(self, action: str) -> None:
        with pytest.raises(ValueError, match="Unknown index action"):
            decode_message(INDEX_TOPIC, {"action": action, "recipeId": "r1"})

    def test_missing_field(self) -> None:
        with pytest.raises(ValueError, match="recipeId"):
            decode_message(INDEX_TOPIC, {"action": "DELETE"})
