"""
Search value objects.

Filters accepted by recipe search and the paginated result page returned
by every search operation.
"""

from __future__ import annotations

import json
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from domain.recipe.core.entities.recipe import Difficulty, WireModel

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

TItem = TypeVar("TItem")


class SearchFilters(WireModel):
    """
    Recipe search filters.

    ``tags``, ``difficulty``, ``cuisine`` and the time limits are hard
    filters; ``ingredients`` only boosts recipes containing them.
    ``page_size`` is accepted as sent and clamped by the search adapter.

    Example:
        >>> SearchFilters(page_size=10).cache_fragment()
        '{"difficulty":[],"cuisine":[],"tags":[],"ingredients":[],"maxPrepTime":null,"maxCookTime":null,"page":1,"pageSize":10}'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    difficulty: List[Difficulty] = Field(default_factory=list)
    cuisine: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    ingredients: List[str] = Field(default_factory=list)
    max_prep_time: Optional[int] = Field(default=None, ge=0)
    max_cook_time: Optional[int] = Field(default=None, ge=0)
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)

    @field_validator("difficulty", mode="before")
    @classmethod
    def lower_difficulty(cls, v: object) -> object:
        if isinstance(v, list):
            return [d.strip().lower() if isinstance(d, str) else d for d in v]
        return v

    def effective_page_size(self) -> int:
        """Page size actually requested from the index."""
        return min(self.page_size, MAX_PAGE_SIZE)

    def cache_fragment(self) -> str:
        """Compact JSON (camelCase keys, declaration order) used in search cache keys."""
        return json.dumps(self.to_wire(), separators=(",", ":"))


class ResultPage(BaseModel, Generic[TItem]):
    """
    One page of search results.

    Invariants:
    - page >= 1
    - len(items) <= page_size
    - total is the exact number of matches, not an estimate
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    items: List[TItem] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)

    @model_validator(mode="after")
    def items_fit_page(self) -> "ResultPage":
        if len(self.items) > self.page_size:
            raise ValueError("items exceed page size")
        return self

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
