"""Run metrics: latency distribution, regret and selection histogram."""

from lbsim.metrics.collector import MetricsCollector, MetricsSummary

__all__ = [
    "MetricsCollector",
    "MetricsSummary",
]
