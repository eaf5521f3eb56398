"""In-process metrics for the recipe service.

Counters and latency histograms keyed by metric name plus tags, safe to
touch from any thread. ``GET /metrics`` serves ``registry.snapshot()``.
"""

from __future__ import annotations

import time
from collections import deque
from threading import Lock
from typing import Any, Callable, Deque, Dict, List, Tuple, TypedDict, TypeVar

MetricKey = Tuple[str, Tuple[Tuple[str, str], ...]]

# Samples kept per histogram; older ones fall off
HISTOGRAM_WINDOW = 2000

TMetric = TypeVar("TMetric")


class Counter:
    def __init__(self, name: str, tags: Dict[str, str]):
        self.name = name
        self.tags = tags
        self._value = 0
        self._lock = Lock()

    def inc(self, amount: int = 1) -> None:
        with self._lock:
            self._value += amount

    def value(self) -> int:
        return self._value


class Histogram:
    """Sliding window of observations with summary statistics."""

    def __init__(self, name: str, tags: Dict[str, str], window: int = HISTOGRAM_WINDOW):
        self.name = name
        self.tags = tags
        self._samples: Deque[float] = deque(maxlen=window)
        self._lock = Lock()

    def observe(self, value: float) -> None:
        with self._lock:
            self._samples.append(value)

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            ordered = sorted(self._samples)
        if not ordered:
            return {"count": 0, "avg": 0.0, "p95": 0.0, "min": 0.0, "max": 0.0}
        n = len(ordered)
        return {
            "count": n,
            "avg": sum(ordered) / n,
            "p95": ordered[int(0.95 * (n - 1))],
            "min": ordered[0],
            "max": ordered[-1],
        }


class CounterSnap(TypedDict):
    name: str
    tags: Dict[str, str]
    value: int


class HistogramSnap(TypedDict):
    name: str
    tags: Dict[str, str]
    count: int
    avg: float
    p95: float
    min: float
    max: float


class RegistrySnapshot(TypedDict):
    counters: List[CounterSnap]
    histograms: List[HistogramSnap]
    generatedAt: float


def _key(name: str, tags: Dict[str, str]) -> MetricKey:
    return name, tuple(sorted(tags.items()))


class MetricsRegistry:
    def __init__(self) -> None:
        self._counters: Dict[MetricKey, Counter] = {}
        self._histograms: Dict[MetricKey, Histogram] = {}
        self._lock = Lock()

    def _get_or_create(
        self,
        store: Dict[MetricKey, TMetric],
        factory: Callable[[str, Dict[str, str]], TMetric],
        name: str,
        tags: Dict[str, str],
    ) -> TMetric:
        key = _key(name, tags)
        with self._lock:
            if key not in store:
                store[key] = factory(name, tags)
            return store[key]

    def counter(self, name: str, **tags: str) -> Counter:
        return self._get_or_create(self._counters, Counter, name, tags)

    def histogram(self, name: str, **tags: str) -> Histogram:
        return self._get_or_create(self._histograms, Histogram, name, tags)

    def counter_value(self, name: str, **tags: str) -> int:
        """Current value, 0 when the counter was never touched."""
        ctr = self._counters.get(_key(name, tags))
        return ctr.value() if ctr is not None else 0

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._histograms.clear()

    def snapshot(self) -> RegistrySnapshot:
        with self._lock:
            counters = list(self._counters.values())
            histograms = list(self._histograms.values())
        return {
            "counters": [
                {"name": c.name, "tags": c.tags, "value": c.value()} for c in counters
            ],
            "histograms": [
                {"name": h.name, "tags": h.tags, **h.snapshot()}  # type: ignore[typeddict-item]
                for h in histograms
            ],
            "generatedAt": time.time(),
        }


registry = MetricsRegistry()
