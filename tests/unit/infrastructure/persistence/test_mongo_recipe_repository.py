"""Unit tests for MongoRecipeRepository with a mocked Motor client."""

from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest

from domain.recipe.core.entities.recipe import RecipeIngredient
from domain.shared.errors import ConflictError
from infrastructure.persistence.mongodb.recipe_repository import (
    RECIPE_INDEXES,
    MongoRecipeRepository,
)


@pytest.fixture
def collection() -> MagicMock:
    mock = MagicMock()
    mock.find_one = AsyncMock(return_value=None)
    mock.insert_one = AsyncMock()
    mock.find_one_and_update = AsyncMock(return_value=None)
    mock.find_one_and_delete = AsyncMock(return_value=None)
    mock.create_index = AsyncMock()
    return mock


@pytest.fixture
def repository(collection: MagicMock, monkeypatch) -> MongoRecipeRepository:
    monkeypatch.setenv("MONGODB_DATABASE", "test_db")
    client = MagicMock()
    client.__getitem__.return_value.__getitem__.return_value = collection
    repo = MongoRecipeRepository(client=client)
    client.__getitem__.assert_called_with("test_db")
    return repo


def _doc(repository: MongoRecipeRepository, recipe) -> Dict[str, Any]:
    return repository.to_document(recipe)


class TestDocumentMapping:
    """Test domain <-> document mapping."""

    def test_to_document_uses_underscore_id(self, repository, omelette) -> None:
        doc = repository.to_document(omelette)

        assert doc["_id"] == "r-omelette"
        assert "id" not in doc
        assert doc["prepTime"] == 5
        assert isinstance(doc["createdAt"], str)

    def test_round_trip(self, repository, pancakes) -> None:
        assert repository.from_document(repository.to_document(pancakes)) == pancakes

    def test_changes_to_document(self) -> None:
        item = RecipeIngredient(ingredient_id="tofu", quantity=100, unit="g")
        doc = MongoRecipeRepository.changes_to_document(
            {"prep_time": 3, "ingredients": [item], "cuisine": None}
        )

        assert doc["prepTime"] == 3
        assert doc["cuisine"] is None
        assert doc["ingredients"][0]["ingredientId"] == "tofu"


class TestQueries:
    """Test repository operations against the mocked collection."""

    @pytest.mark.asyncio
    async def test_create_inserts_document(self, repository, collection, omelette) -> None:
        await repository.create(omelette)

        inserted = collection.insert_one.await_args.args[0]
        assert inserted["_id"] == omelette.id

    @pytest.mark.asyncio
    async def test_find_by_id(self, repository, collection, omelette) -> None:
        collection.find_one.return_value = _doc(repository, omelette)

        assert await repository.find_by_id(omelette.id) == omelette
        collection.find_one.assert_awaited_once_with({"_id": omelette.id})

    @pytest.mark.asyncio
    async def test_find_by_id_missing(self, repository) -> None:
        assert await repository.find_by_id("missing") is None

    @pytest.mark.asyncio
    async def test_update_sets_fields_and_increments_version(
        self, repository, collection, omelette
    ) -> None:
        updated_doc = _doc(repository, omelette)
        updated_doc.update({"name": "Frittata", "version": 2})
        collection.find_one_and_update.return_value = updated_doc

        result = await repository.find_by_id_and_update(omelette.id, {"name": "Frittata"})

        filter_dict, update = collection.find_one_and_update.await_args.args
        assert filter_dict == {"_id": omelette.id}
        assert update["$set"]["name"] == "Frittata"
        assert "updatedAt" in update["$set"]
        assert update["$inc"] == {"version": 1}
        assert result.version == 2

    @pytest.mark.asyncio
    async def test_update_with_expected_version_filters_on_version(
        self, repository, collection, omelette
    ) -> None:
        collection.find_one_and_update.return_value = _doc(repository, omelette)

        await repository.find_by_id_and_update(omelette.id, {"servings": 2}, expected_version=1)

        filter_dict = collection.find_one_and_update.await_args.args[0]
        assert filter_dict == {"_id": omelette.id, "version": 1}

    @pytest.mark.asyncio
    async def test_stale_version_conflicts(self, repository, collection, omelette) -> None:
        current = _doc(repository, omelette)
        current["version"] = 4
        collection.find_one.return_value = current

        with pytest.raises(ConflictError) as exc_info:
            await repository.find_by_id_and_update(omelette.id, {"servings": 2}, expected_version=1)

        assert exc_info.value.context["actual_version"] == 4

    @pytest.mark.asyncio
    async def test_update_missing_returns_none(self, repository) -> None:
        assert await repository.find_by_id_and_update("missing", {"name": "x"}, 1) is None

    @pytest.mark.asyncio
    async def test_delete(self, repository, collection, omelette) -> None:
        collection.find_one_and_delete.return_value = _doc(repository, omelette)

        removed = await repository.find_by_id_and_delete(omelette.id)

        assert removed.id == omelette.id
        collection.find_one_and_delete.assert_awaited_once_with({"_id": omelette.id})

    @pytest.mark.asyncio
    async def test_find_by_ingredients_ranks_results(
        self, repository, collection, omelette, pancakes
    ) -> None:
        cursor = MagicMock()
        cursor.to_list = AsyncMock(
            return_value=[_doc(repository, pancakes), _doc(repository, omelette)]
        )
        collection.find.return_value = cursor

        matches = await repository.find_by_ingredients(["egg"])

        collection.find.assert_called_once_with({"ingredients.ingredientId": {"$in": ["egg"]}})
        assert [r.id for r in matches] == ["r-omelette", "r-pancakes"]

    @pytest.mark.asyncio
    async def test_find_by_ingredients_empty(self, repository, collection) -> None:
        assert await repository.find_by_ingredients([]) == []
        collection.find.assert_not_called()

    @pytest.mark.asyncio
    async def test_add_rating_uses_pipeline(
        self, repository, collection, omelette, rating_five
    ) -> None:
        rated = _doc(repository, omelette)
        rated["ratings"] = [rating_five.to_wire()]
        rated["version"] = 2
        collection.find_one_and_update.return_value = rated

        result = await repository.add_rating(omelette.id, rating_five)

        filter_dict, pipeline = collection.find_one_and_update.await_args.args
        assert filter_dict == {"_id": omelette.id}
        assert isinstance(pipeline, list)
        assert pipeline[1]["$set"]["version"] == {"$add": ["$version", 1]}
        assert result.average_rating == 5.0

    @pytest.mark.asyncio
    async def test_driver_errors_propagate(self, repository, collection) -> None:
        collection.find_one.side_effect = RuntimeError("network")
        with pytest.raises(RuntimeError):
            await repository.find_by_id("r1")

    @pytest.mark.asyncio
    async def test_ensure_indexes(self, repository, collection) -> None:
        await repository.ensure_indexes()
        assert collection.create_index.await_count == len(RECIPE_INDEXES)
