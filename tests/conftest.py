"""Shared test fixtures.

Recipe payloads in wire format plus metric isolation. Adapters are the
in-memory ones unless a test builds its own doubles.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Generator

import pytest

from metrics.core import registry

PayloadFactory = Callable[..., Dict[str, Any]]


def _recipe_payload(**overrides: Any) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "name": "Omelette",
        "ingredients": [{"id": "egg", "qty": 2, "unit": "pcs"}],
        "prepTime": 5,
        "cookTime": 5,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def recipe_payload() -> PayloadFactory:
    """Factory for a minimal valid recipe in the short ingredient form."""
    return _recipe_payload


@pytest.fixture
def omelette_payload() -> Dict[str, Any]:
    return _recipe_payload()


@pytest.fixture(autouse=True)
def _reset_metrics() -> Generator[None, None, None]:
    """Reset metrics before and after each test for isolation."""
    registry.reset()
    yield
    registry.reset()
