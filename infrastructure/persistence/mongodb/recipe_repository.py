"""MongoDB recipe repository.

Documents use the camelCase wire format with ``_id`` holding the recipe
id; timestamps are stored as ISO 8601 strings.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from pydantic.alias_generators import to_camel
from pydantic_core import to_jsonable_python

from domain.recipe.core.entities.recipe import Recipe, RecipeRating
from domain.recipe.core.services.matching import rank_recipes_by_ingredients
from domain.shared.errors import ConflictError
from infrastructure.persistence.mongodb.base import MongoBaseRepository

logger = logging.getLogger(__name__)

# (fields, index name)
RECIPE_INDEXES = [
    ([("ingredients.ingredientId", 1)], "idx_ingredient_id"),
    ([("cuisine", 1), ("averageRating", -1)], "idx_cuisine_rating"),
    ([("tags", 1), ("averageRating", -1)], "idx_tags_rating"),
    ([("authorId", 1), ("createdAt", -1)], "idx_author_created_at"),
]


class MongoRecipeRepository(MongoBaseRepository[Recipe]):
    """
    MongoDB implementation of IRecipeRepository.

    Version checks and rating appends run inside a single
    ``find_one_and_update`` so concurrent writers cannot interleave.
    """

    @property
    def collection_name(self) -> str:
        return "recipes"

    def to_document(self, entity: Recipe) -> Dict[str, Any]:
        data = entity.to_wire()
        data["_id"] = data.pop("id")
        return data

    def from_document(self, doc: Dict[str, Any]) -> Recipe:
        data = dict(doc)
        data["id"] = data.pop("_id")
        return Recipe.model_validate(data)

    @staticmethod
    def changes_to_document(changes: Dict[str, Any]) -> Dict[str, Any]:
        """Python field name -> value becomes camelCase key -> JSON value."""
        return {
            to_camel(name): to_jsonable_python(value, by_alias=True)
            for name, value in changes.items()
        }

    async def ensure_indexes(self) -> None:
        for keys, name in RECIPE_INDEXES:
            await self.collection.create_index(keys, name=name)
            logger.info(f"Ensured index: {self.collection_name}.{name}")

    async def create(self, recipe: Recipe) -> Recipe:
        await self._insert_one(self.to_document(recipe))
        return recipe

    async def find_by_id(self, recipe_id: str) -> Optional[Recipe]:
        doc = await self._find_one({"_id": recipe_id})
        return self.from_document(doc) if doc else None

    async def find_by_id_and_update(
        self,
        recipe_id: str,
        changes: Dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> Optional[Recipe]:
        filter_dict: Dict[str, Any] = {"_id": recipe_id}
        if expected_version is not None:
            filter_dict["version"] = expected_version

        update = {
            "$set": {**self.changes_to_document(changes), "updatedAt": self.now_iso()},
            "$inc": {"version": 1},
        }
        doc = await self._find_one_and_update(filter_dict, update)
        if doc is not None:
            return self.from_document(doc)

        if expected_version is not None:
            current = await self._find_one({"_id": recipe_id})
            if current is not None:
                raise ConflictError(
                    f"Recipe {recipe_id} is at version {current.get('version')}, "
                    f"expected {expected_version}",
                    context={
                        "recipe_id": recipe_id,
                        "expected_version": expected_version,
                        "actual_version": current.get("version"),
                    },
                )
        return None

    async def find_by_id_and_delete(self, recipe_id: str) -> Optional[Recipe]:
        doc = await self._find_one_and_delete({"_id": recipe_id})
        return self.from_document(doc) if doc else None

    async def find_by_ingredients(self, ingredient_ids: Sequence[str]) -> List[Recipe]:
        if not ingredient_ids:
            return []
        docs = await self._find_many(
            {"ingredients.ingredientId": {"$in": list(ingredient_ids)}}
        )
        return rank_recipes_by_ingredients(
            (self.from_document(doc) for doc in docs),
            ingredient_ids,
        )

    async def add_rating(self, recipe_id: str, rating: RecipeRating) -> Optional[Recipe]:
        # Pipeline update: append and recompute the average in one atomic step
        pipeline = [
            {
                "$set": {
                    "ratings": {
                        "$concatArrays": [{"$ifNull": ["$ratings", []]}, [rating.to_wire()]]
                    }
                }
            },
            {
                "$set": {
                    "averageRating": {"$avg": "$ratings.rating"},
                    "updatedAt": self.now_iso(),
                    "version": {"$add": ["$version", 1]},
                }
            },
        ]
        doc = await self._find_one_and_update({"_id": recipe_id}, pipeline)
        return self.from_document(doc) if doc else None
