"""Recipe aggregate root and its value parts.

Pydantic models with camelCase wire aliases: the same JSON shape is used
for the REST API, the cache, the search index documents and the queue
payloads, so every component sharing those stores reads the same fields.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

# Limits enforced on incoming recipe data
MAX_NAME_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 1000
MAX_INGREDIENTS = 50
MAX_INSTRUCTIONS = 30
MAX_TAGS = 10
MAX_PREP_TIME = 720  # minutes
MAX_COOK_TIME = 1440  # minutes
MAX_SERVINGS = 100


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_recipe_id() -> str:
    """Generate a new recipe identifier."""
    return uuid4().hex


class WireModel(BaseModel):
    """Base config: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_wire(self) -> Dict[str, Any]:
        """JSON-compatible dict with camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")


class Difficulty(str, Enum):
    """Recipe difficulty level."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class RecipeIngredient(WireModel):
    """
    Ingredient requirement inside a recipe.

    References a catalog ingredient by id; ``name`` is an optional
    denormalised display name used by full-text search.

    Example:
        >>> item = RecipeIngredient.model_validate({"id": "egg", "qty": 2, "unit": "PCS "})
        >>> item.ingredient_id, item.quantity, item.unit
        ('egg', 2.0, 'pcs')
    """

    ingredient_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("ingredientId", "ingredient_id", "id"),
        serialization_alias="ingredientId",
    )
    name: Optional[str] = None
    quantity: float = Field(
        ...,
        gt=0,
        validation_alias=AliasChoices("quantity", "qty"),
        serialization_alias="quantity",
    )
    unit: str = Field(..., min_length=1)
    notes: Optional[str] = None
    is_substitutable: bool = False

    @field_validator("unit")
    @classmethod
    def normalize_unit(cls, v: str) -> str:
        """Units are stored lower case and trimmed."""
        unit = v.strip().lower()
        if not unit:
            raise ValueError("unit cannot be empty")
        return unit


class CookingStep(WireModel):
    """Single instruction step."""

    step_number: int = Field(..., ge=1)
    instruction: str = Field(..., min_length=1)
    duration: Optional[int] = Field(default=None, ge=0, description="Minutes")
    image_url: Optional[str] = None


class NutritionalInfo(WireModel):
    """Nutritional summary per serving."""

    serving_size: str
    calories: float = Field(..., ge=0)
    protein: float = Field(..., ge=0, description="Grams")
    carbohydrates: float = Field(..., ge=0, description="Grams")
    fat: float = Field(..., ge=0, description="Grams")


class RecipeRating(WireModel):
    """User rating on a 1-5 scale."""

    user_id: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)


def compute_average_rating(ratings: Sequence[RecipeRating]) -> float:
    """
    Arithmetic mean of the rating values, 0.0 when there are none.

    Example:
        >>> compute_average_rating([])
        0.0
    """
    if not ratings:
        return 0.0
    return sum(r.rating for r in ratings) / len(ratings)


def _dedupe_tags(tags: List[str]) -> List[str]:
    seen: List[str] = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


def _clean_name(v: str) -> str:
    if not v.strip():
        raise ValueError("Recipe name cannot be empty or whitespace")
    return v.strip()


def _normalize_difficulty(v: Any) -> Any:
    if isinstance(v, str):
        return v.strip().lower()
    return v


class RecipeDraft(WireModel):
    """
    Client-supplied recipe content, validated before anything is persisted.

    Server-owned fields (id, version, averageRating, timestamps) are not
    part of the draft and are ignored if sent.
    """

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    description: str = Field(default="", max_length=MAX_DESCRIPTION_LENGTH)
    author_id: Optional[str] = None
    ingredients: List[RecipeIngredient] = Field(
        ..., min_length=1, max_length=MAX_INGREDIENTS
    )
    instructions: List[CookingStep] = Field(
        default_factory=list, max_length=MAX_INSTRUCTIONS
    )
    prep_time: int = Field(..., ge=0, le=MAX_PREP_TIME)
    cook_time: int = Field(..., ge=0, le=MAX_COOK_TIME)
    servings: int = Field(default=1, ge=1, le=MAX_SERVINGS)
    difficulty: Difficulty = Difficulty.EASY
    cuisine: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    image_url: Optional[str] = None
    nutritional_info: Optional[NutritionalInfo] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        return _clean_name(v)

    @field_validator("difficulty", mode="before")
    @classmethod
    def lower_difficulty(cls, v: Any) -> Any:
        return _normalize_difficulty(v)

    @field_validator("tags")
    @classmethod
    def unique_tags(cls, v: List[str]) -> List[str]:
        tags = _dedupe_tags(v)
        if len(tags) > MAX_TAGS:
            raise ValueError(f"At most {MAX_TAGS} tags are allowed")
        return tags


class Recipe(RecipeDraft):
    """
    Aggregate Root: a persisted recipe.

    Invariants:
    - At least one ingredient requirement
    - Prep and cook times are non-negative
    - average_rating equals the mean of ratings (0 when empty); it is
      recomputed on every construction, so a stale value sent by a client
      or left in a store never survives

    Identity: ``id`` (hex UUID string)
    Concurrency: ``version`` starts at 1 and is bumped by every repository update

    Example:
        >>> recipe = Recipe.model_validate({
        ...     "id": "r1",
        ...     "name": "Omelette",
        ...     "ingredients": [{"id": "egg", "qty": 2, "unit": "pcs"}],
        ...     "prepTime": 5,
        ...     "cookTime": 5,
        ... })
        >>> recipe.average_rating
        0.0
    """

    id: str = Field(..., min_length=1)
    ratings: List[RecipeRating] = Field(default_factory=list)
    average_rating: float = 0.0
    version: int = Field(default=1, ge=1)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def derive_average_rating(self) -> "Recipe":
        self.average_rating = compute_average_rating(self.ratings)
        return self

    @classmethod
    def from_draft(cls, draft: RecipeDraft, recipe_id: Optional[str] = None) -> "Recipe":
        """Build a new recipe (version 1, fresh timestamps) from validated content."""
        now = _utcnow()
        return cls(
            **draft.model_dump(),
            id=recipe_id or new_recipe_id(),
            created_at=now,
            updated_at=now,
        )

    def add_rating(self, rating: RecipeRating) -> None:
        """Append a rating and recompute the average."""
        self.ratings.append(rating)
        self.average_rating = compute_average_rating(self.ratings)
        self.updated_at = _utcnow()


# Fields that a patch is never allowed to set directly
IMMUTABLE_FIELDS = frozenset({"id", "version", "average_rating", "created_at", "updated_at"})

_NON_NULLABLE_PATCH_FIELDS = (
    "name",
    "description",
    "ingredients",
    "instructions",
    "prep_time",
    "cook_time",
    "servings",
    "difficulty",
    "tags",
    "ratings",
)


class RecipePatch(WireModel):
    """
    Partial update of a recipe.

    Only the fields explicitly sent are applied. Unknown fields and
    server-owned fields are rejected.
    """

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1, max_length=MAX_NAME_LENGTH)
    description: Optional[str] = Field(default=None, max_length=MAX_DESCRIPTION_LENGTH)
    author_id: Optional[str] = None
    ingredients: Optional[List[RecipeIngredient]] = Field(
        default=None, min_length=1, max_length=MAX_INGREDIENTS
    )
    instructions: Optional[List[CookingStep]] = Field(default=None, max_length=MAX_INSTRUCTIONS)
    prep_time: Optional[int] = Field(default=None, ge=0, le=MAX_PREP_TIME)
    cook_time: Optional[int] = Field(default=None, ge=0, le=MAX_COOK_TIME)
    servings: Optional[int] = Field(default=None, ge=1, le=MAX_SERVINGS)
    difficulty: Optional[Difficulty] = None
    cuisine: Optional[str] = None
    tags: Optional[List[str]] = None
    image_url: Optional[str] = None
    nutritional_info: Optional[NutritionalInfo] = None
    ratings: Optional[List[RecipeRating]] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        return _clean_name(v) if v is not None else v

    @field_validator("difficulty", mode="before")
    @classmethod
    def lower_difficulty(cls, v: Any) -> Any:
        return _normalize_difficulty(v)

    @field_validator("tags")
    @classmethod
    def unique_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        tags = _dedupe_tags(v)
        if len(tags) > MAX_TAGS:
            raise ValueError(f"At most {MAX_TAGS} tags are allowed")
        return tags

    @model_validator(mode="after")
    def reject_explicit_nulls(self) -> "RecipePatch":
        for field_name in _NON_NULLABLE_PATCH_FIELDS:
            if field_name in self.model_fields_set and getattr(self, field_name) is None:
                raise ValueError(f"{to_camel(field_name)} cannot be null")
        return self

    def changes(self) -> Dict[str, Any]:
        """
        Field name -> python value for the fields that were sent.

        Sub-models stay models; when ratings change the derived average
        is included so stores without recomputation stay consistent.
        """
        changes = {name: getattr(self, name) for name in self.model_fields_set}
        if "ratings" in changes:
            changes["average_rating"] = compute_average_rating(changes["ratings"])
        return changes
