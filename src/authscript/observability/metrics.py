"""
Metrics — In-process compilation statistics.

Outcomes and transforms are counted per top-level compilation; the
dependency depth histogram and the cycle counter see every descent,
including nested ones.
"""

from dataclasses import dataclass, field
from threading import Lock
from typing import Any


class Counter:
    """Monotonically increasing integer count."""

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.description = description
        self._value = 0
        self._lock = Lock()

    def inc(self) -> None:
        with self._lock:
            self._value += 1

    @property
    def value(self) -> int:
        return self._value

    def reset(self) -> None:
        with self._lock:
            self._value = 0


class LabeledCounter:
    """
    Counts keyed by a label, e.g. outcome or transform name.
    """

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.description = description
        self._values: dict[str, int] = {}
        self._lock = Lock()

    def inc(self, label: str) -> None:
        with self._lock:
            self._values[label] = self._values.get(label, 0) + 1

    def value(self, label: str) -> int:
        return self._values.get(label, 0)

    @property
    def total(self) -> int:
        return sum(self._values.values())

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return dict(sorted(self._values.items()))

    def reset(self) -> None:
        with self._lock:
            self._values.clear()


class Histogram:
    """Count, sum, and maximum of observed values."""

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.description = description
        self._count = 0
        self._sum = 0.0
        self._max = 0.0
        self._lock = Lock()

    def observe(self, value: float) -> None:
        with self._lock:
            self._max = value if self._count == 0 else max(self._max, value)
            self._count += 1
            self._sum += value

    @property
    def count(self) -> int:
        return self._count

    @property
    def max(self) -> float:
        return self._max

    def snapshot(self) -> dict[str, float]:
        with self._lock:
            mean = self._sum / self._count if self._count else 0.0
            return {"count": self._count, "mean": mean, "max": self._max}

    def reset(self) -> None:
        with self._lock:
            self._count = 0
            self._sum = 0.0
            self._max = 0.0


@dataclass
class MetricsRegistry:
    """
    Registry for all compiler metrics.
    """
    # Label: "success", or the failing stage ("parse", "resolve", "reduce")
    compilations: LabeledCounter = field(
        default_factory=lambda: LabeledCounter("compilations", "Top-level compilations by outcome")
    )
    # Label: transform name ("p2sh-locking", "p2sh-unlocking")
    transforms: LabeledCounter = field(
        default_factory=lambda: LabeledCounter("transforms", "P2SH transforms applied")
    )
    circular_dependencies: Counter = field(
        default_factory=lambda: Counter("circular_dependencies", "Circular dependencies detected")
    )
    compilation_seconds: Histogram = field(
        default_factory=lambda: Histogram("compilation_seconds", "Top-level compilation duration")
    )
    dependency_depth: Histogram = field(
        default_factory=lambda: Histogram("dependency_depth", "Ancestry depth of each script compiled")
    )

    def record_compilation(
        self,
        outcome: str,
        seconds: float,
        transform: str | None = None,
    ) -> None:
        """Record one finished top-level compilation."""
        self.compilations.inc(outcome)
        self.compilation_seconds.observe(seconds)
        if transform is not None:
            self.transforms.inc(transform)

    def snapshot(self) -> dict[str, Any]:
        return {
            "compilations": self.compilations.snapshot(),
            "transforms": self.transforms.snapshot(),
            "circular_dependencies": self.circular_dependencies.value,
            "compilation_seconds": self.compilation_seconds.snapshot(),
            "dependency_depth": self.dependency_depth.snapshot(),
        }

    def reset(self) -> None:
        """Reset all metrics (for testing)."""
        self.compilations.reset()
        self.transforms.reset()
        self.circular_dependencies.reset()
        self.compilation_seconds.reset()
        self.dependency_depth.reset()


_metrics = MetricsRegistry()


def get_metrics() -> MetricsRegistry:
    return _metrics


def reset_metrics() -> None:
    """Reset all metrics (for testing)."""
    _metrics.reset()
