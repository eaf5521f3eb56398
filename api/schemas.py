"""REST request bodies and the response envelope.

Every successful response is ``{success: true, data, metadata}``; errors
are ``{success: false, error: {code, message, details}}`` (api.errors).
"""

import time
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pydantic_core import to_jsonable_python


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MatchRequest(_CamelModel):
    """Body of ``POST /api/v1/recipes/match``."""

    ingredient_ids: List[str] = Field(default_factory=list)


class RatingRequest(_CamelModel):
    """Body of ``POST /api/v1/recipes/{id}/ratings``."""

    user_id: str
    rating: int
    comment: Optional[str] = None


def envelope(data: Any, started_at: float) -> Dict[str, Any]:
    """Wrap data (models dumped with camelCase aliases) in the success envelope."""
    return {
        "success": True,
        "data": to_jsonable_python(data, by_alias=True),
        "metadata": {"responseTime": round((time.perf_counter() - started_at) * 1000.0, 2)},
    }


def error_body(error: Dict[str, Any]) -> Dict[str, Any]:
    return {"success": False, "error": error}
