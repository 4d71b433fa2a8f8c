"""In-process counters and timings for the liquidation risk engine."""

from __future__ import annotations

import threading
import time
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Mapping, MutableMapping, Tuple

MetricKey = Tuple[str, Tuple[Tuple[str, str], ...]]


def _render_key(key: MetricKey) -> str:
    name, labels = key
    if not labels:
        return name
    rendered = ",".join(f'{label}="{value}"' for label, value in labels)
    return f"{name}{{{rendered}}}"


@dataclass
class HistogramSummary:
    """Running count, sum and max of observed values."""

    count: int = 0
    sum: float = 0.0
    max: float = 0.0

    def add(self, value: float) -> None:
        self.max = value if self.count == 0 else max(self.max, value)
        self.count += 1
        self.sum += value


@dataclass
class MetricRegistry:
    """Prometheus-style counters and histograms keyed by name and labels.

    Histograms keep summaries only, so memory stays constant for the life of
    a long-running service.
    """

    counters: MutableMapping[MetricKey, float] = field(default_factory=lambda: defaultdict(float))
    histograms: MutableMapping[MetricKey, HistogramSummary] = field(
        default_factory=lambda: defaultdict(HistogramSummary)
    )
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def inc(self, name: str, *, labels: Mapping[str, str] | None = None, amount: float = 1.0) -> None:
        with self._lock:
            self.counters[self._key(name, labels)] += amount

    def observe(self, name: str, value: float, *, labels: Mapping[str, str] | None = None) -> None:
        with self._lock:
            self.histograms[self._key(name, labels)].add(value)

    def counter(self, name: str, *, labels: Mapping[str, str] | None = None) -> float:
        return self.counters.get(self._key(name, labels), 0.0)

    def histogram(self, name: str, *, labels: Mapping[str, str] | None = None) -> HistogramSummary:
        return self.histograms.get(self._key(name, labels)) or HistogramSummary()

    def to_payload(self) -> Dict[str, Any]:
        """Flatten counters and histogram summaries into a JSON-friendly dict."""

        with self._lock:
            counters = {_render_key(key): value for key, value in self.counters.items()}
            histograms = {_render_key(key): asdict(summary) for key, summary in self.histograms.items()}
        return {"counters": counters, "histograms": histograms}

    @staticmethod
    def _key(name: str, labels: Mapping[str, str] | None) -> MetricKey:
        return name, tuple(sorted((labels or {}).items()))


class Timer:
    """Records the wall time of a block into ``registry`` under ``name``."""

    def __init__(self, registry: MetricRegistry, name: str, *, labels: Mapping[str, str] | None = None) -> None:
        self._registry = registry
        self._name = name
        self._labels = labels
        self._start: float | None = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._start is not None:
            self._registry.observe(self._name, time.perf_counter() - self._start, labels=self._labels)
