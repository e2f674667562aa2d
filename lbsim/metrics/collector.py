"""Per-run latency and regret accounting.

MetricsCollector receives one ``(backend_index, latency)`` outcome per
request and answers summary queries over everything recorded so far.
Percentiles use the nearest-rank definition (no interpolation): the p-th
percentile of n samples is the ``ceil(p/100 * n)``-th smallest value.
"""

from __future__ import annotations

import math
import statistics
from collections import deque
from dataclasses import dataclass
from typing import Any

import pandas as pd


@dataclass(frozen=True)
class MetricsSummary:
    """Pre-computed statistics of one simulation run."""
    algorithm_name: str
    count: int
    mean: float
    std: float
    min: float
    max: float
    p50: float
    p95: float
    p99: float
    cumulative_regret: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "algorithm": self.algorithm_name,
            "count": self.count,
            "mean": round(self.mean, 6),
            "std": round(self.std, 6),
            "min": round(self.min, 6),
            "max": round(self.max, 6),
            "p50": round(self.p50, 6),
            "p95": round(self.p95, 6),
            "p99": round(self.p99, 6),
            "cumulative_regret": round(self.cumulative_regret, 6),
        }

    def __str__(self) -> str:
        return "\n".join([
            f"{self.algorithm_name}",
            f"  Requests: {self.count}",
            f"  Mean: {self.mean:.2f}ms  Std: {self.std:.2f}ms",
            f"  Min: {self.min:.2f}ms  Max: {self.max:.2f}ms",
            f"  P50: {self.p50:.2f}ms  P95: {self.p95:.2f}ms  P99: {self.p99:.2f}ms",
            f"  Cumulative regret: {self.cumulative_regret:.2f}ms",
        ])


class MetricsCollector:
    """Collects the outcomes of a single simulation run.

    Args:
        algorithm_name: Label of the policy that produced the run.
        optimal_latency: Best-case latency used as the regret baseline.
        window_size: Number of most recent latencies in the rolling average.

    Raises:
        ValueError: If ``window_size`` is not positive.
    """

    def __init__(self, algorithm_name: str, optimal_latency: float, window_size: int = 100):
        if window_size <= 0:
            raise ValueError(f"window_size must be positive, got {window_size}")

        self._algorithm_name = algorithm_name
        self._optimal_latency = float(optimal_latency)
        self._window_size = window_size

        self._latencies: list[float] = []
        self._selections: list[int] = []
        self._cumulative_regret = 0.0
        self._window: deque[float] = deque(maxlen=window_size)

    @property
    def algorithm_name(self) -> str:
        return self._algorithm_name

    @property
    def optimal_latency(self) -> float:
        return self._optimal_latency

    @property
    def window_size(self) -> int:
        return self._window_size

    @property
    def total_requests(self) -> int:
        return len(self._latencies)

    @property
    def cumulative_regret(self) -> float:
        """Total latency paid above the optimal baseline."""
        return self._cumulative_regret

    @property
    def latencies(self) -> list[float]:
        """Observed latencies in arrival order (copy)."""
        return list(self._latencies)

    @property
    def selections(self) -> list[int]:
        """Chosen backend indices in arrival order (copy)."""
        return list(self._selections)

    def record(self, index: int, latency: float) -> None:
        """Record a completed request served by backend ``index``."""
        self._latencies.append(latency)
        self._selections.append(index)
        self._cumulative_regret += max(0.0, latency - self._optimal_latency)
        self._window.append(latency)

    # === Aggregations ===

    def mean_latency(self) -> float:
        """Arithmetic mean. Returns 0.0 if empty."""
        if not self._latencies:
            return 0.0
        return sum(self._latencies) / len(self._latencies)

    def rolling_average(self) -> float:
        """Mean of the last ``window_size`` latencies. Returns 0.0 if empty."""
        if not self._window:
            return 0.0
        return sum(self._window) / len(self._window)

    def percentile(self, p: float) -> float:
        """Nearest-rank percentile.

        Args:
            p: Percentile in [0, 100]. E.g., 99 for p99.

        Returns:
            A recorded latency, or 0.0 if empty.
        """
        if not self._latencies:
            return 0.0
        ordered = sorted(self._latencies)
        n = len(ordered)
        index = math.ceil(p / 100.0 * n) - 1
        index = max(0, min(index, n - 1))
        return ordered[index]

    def min_latency(self) -> float:
        if not self._latencies:
            return 0.0
        return min(self._latencies)

    def max_latency(self) -> float:
        if not self._latencies:
            return 0.0
        return max(self._latencies)

    def std_dev(self) -> float:
        """Population standard deviation. Returns 0.0 if empty."""
        if not self._latencies:
            return 0.0
        return statistics.pstdev(self._latencies)

    def selection_counts(self, backend_count: int) -> list[int]:
        """Requests routed to each of ``backend_count`` backends."""
        counts = [0] * backend_count
        for index in self._selections:
            if 0 <= index < backend_count:
                counts[index] += 1
        return counts

    def latency_trend(self, buckets: int) -> list[float]:
        """Mean latency of consecutive equal-size slices of the run.

        Slices hold ``max(1, total // buckets)`` requests; trailing requests
        that do not fill a slice are left out and slices past the end of
        the run report 0.0.
        """
        if buckets <= 0:
            raise ValueError(f"buckets must be positive, got {buckets}")
        total = len(self._latencies)
        if total == 0:
            return []

        size = max(1, total // buckets)
        trend = []
        for b in range(buckets):
            start = b * size
            end = min(start + size, total)
            chunk = self._latencies[start:end]
            trend.append(sum(chunk) / len(chunk) if chunk else 0.0)
        return trend

    def summary(self) -> MetricsSummary:
        return MetricsSummary(
            algorithm_name=self._algorithm_name,
            count=self.total_requests,
            mean=self.mean_latency(),
            std=self.std_dev(),
            min=self.min_latency(),
            max=self.max_latency(),
            p50=self.percentile(50),
            p95=self.percentile(95),
            p99=self.percentile(99),
            cumulative_regret=self._cumulative_regret,
        )

    def to_dataframe(self) -> pd.DataFrame:
        """Per-request table with columns request, backend, latency, regret."""
        return pd.DataFrame({
            "request": range(len(self._latencies)),
            "backend": self._selections,
            "latency": self._latencies,
            "regret": [max(0.0, v - self._optimal_latency) for v in self._latencies],
        })
