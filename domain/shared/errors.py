"""
Domain exceptions.

Typed exceptions for explicit error handling across the recipe service.
Every error carries a stable machine-readable ``code`` and a ``context``
dict (recipe id, operation, step) that callers enrich while the error
propagates.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


# ═══════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════


class RecipeServiceError(Exception):
    """
    Base exception for all recipe service errors.

    Allows catching every domain error with a single except clause.

    Example:
        >>> err = RecipeServiceError("boom", context={"recipe_id": "r1"})
        >>> err.code
        'INTERNAL_ERROR'
    """

    code = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.context: Dict[str, Any] = dict(context or {})

    def with_context(self, **context: Any) -> "RecipeServiceError":
        """Add context keys without overwriting the ones already set."""
        for key, value in context.items():
            if value is not None:
                self.context.setdefault(key, value)
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Stable error payload used by the REST layer."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.context,
        }


# ═══════════════════════════════════════════════════════════
# INPUT / LOOKUP ERRORS
# ═══════════════════════════════════════════════════════════


class ValidationError(RecipeServiceError):
    """
    Malformed input.

    Raised when:
    - Required recipe fields are missing (name, ingredients)
    - Times are negative or quantities are not positive
    - A patch touches unknown or immutable fields

    Not retryable.
    """

    code = "VALIDATION_ERROR"


class NotFoundError(RecipeServiceError):
    """Operation targets a recipe id that does not exist."""

    code = "RECIPE_NOT_FOUND"


class ConflictError(RecipeServiceError):
    """
    Optimistic concurrency check failed.

    Raised when an update is conditioned on an expected version and the
    stored recipe has moved on.
    """

    code = "RECIPE_VERSION_CONFLICT"


# ═══════════════════════════════════════════════════════════
# COLLABORATOR ERRORS
# ═══════════════════════════════════════════════════════════


class CacheReadError(RecipeServiceError):
    """Cache backend or deserialization failure on read (a miss is not an error)."""

    code = "CACHE_READ_ERROR"


class InvalidCachedRecipeError(CacheReadError):
    """A cached recipe failed structural validation."""

    code = "CACHE_RECIPE_INVALID"


class CacheWriteError(RecipeServiceError):
    """Cache backend or serialization failure on write/delete/clear."""

    code = "CACHE_WRITE_ERROR"


class SearchError(RecipeServiceError):
    """
    Search index unavailable or query rejected.

    Never converted into an empty result: "no matches" and "search broken"
    must stay distinguishable.
    """

    code = "SEARCH_UNAVAILABLE"


class QueueError(RecipeServiceError):
    """
    Message publication failed.

    When raised after a successful repository mutation the primary change
    has happened, but index and cache freshness can no longer be
    guaranteed, so the caller must retry or reconcile.
    """

    code = "QUEUE_PUBLISH_ERROR"


class RepositoryError(RecipeServiceError):
    """Unexpected document store failure."""

    code = "REPOSITORY_ERROR"
