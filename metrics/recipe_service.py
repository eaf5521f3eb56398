"""Instrumentation helpers for the recipe service.

Metrics (all tagged with ``operation``):
* Counter recipe_service_requests_total{operation,status,code?}
* Histogram recipe_service_latency_ms{operation}
* Counter recipe_service_slow_total{operation}

The latency budget is an observability threshold: exceeding it logs a
warning and bumps the slow counter, it never aborts the operation.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from .core import RegistrySnapshot, registry

logger = logging.getLogger(__name__)

REQUESTS_TOTAL = "recipe_service_requests_total"
LATENCY_MS = "recipe_service_latency_ms"
SLOW_TOTAL = "recipe_service_slow_total"


def record_request(operation: str, status: str, *, code: Optional[str] = None) -> None:
    tags = {"operation": operation, "status": status}
    if code:
        tags["code"] = code
    registry.counter(REQUESTS_TOTAL, **tags).inc()


def record_latency_ms(operation: str, ms: float) -> None:
    registry.histogram(LATENCY_MS, operation=operation).observe(ms)


def record_slow(operation: str) -> None:
    registry.counter(SLOW_TOTAL, operation=operation).inc()


@dataclass
class OperationTiming:
    operation: str
    budget_ms: float
    elapsed_ms: float = 0.0

    @property
    def slow(self) -> bool:
        return self.elapsed_ms > self.budget_ms


@contextmanager
def time_operation(operation: str, *, budget_ms: float) -> Iterator[OperationTiming]:
    """
    Time a service operation and record its outcome.

    Example:
        >>> with time_operation("get_recipe_by_id", budget_ms=200) as timing:
        ...     recipe = await repository.find_by_id(recipe_id)
        >>> timing.elapsed_ms  # doctest: +SKIP
        1.7
    """
    timing = OperationTiming(operation=operation, budget_ms=budget_ms)
    start = time.perf_counter()
    try:
        yield timing
        record_request(operation, "success")
    except Exception as e:
        record_request(operation, "error", code=getattr(e, "code", type(e).__name__))
        raise
    finally:
        timing.elapsed_ms = (time.perf_counter() - start) * 1000.0
        record_latency_ms(operation, timing.elapsed_ms)
        if timing.slow:
            record_slow(operation)
            logger.warning(
                "Operation exceeded latency budget",
                extra={
                    "operation": operation,
                    "elapsed_ms": round(timing.elapsed_ms, 2),
                    "budget_ms": budget_ms,
                },
            )


def snapshot() -> RegistrySnapshot:  # pragma: no cover - passthrough
    return registry.snapshot()


def reset_all() -> None:
    """Reset every metric (test utility)."""
    registry.reset()
