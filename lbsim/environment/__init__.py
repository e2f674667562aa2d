"""Synthetic latency environment for load balancer experiments."""

from lbsim.environment.backend import (
    LATENCY_FLOOR_MS,
    Backend,
    BackendStats,
)

__all__ = [
    "LATENCY_FLOOR_MS",
    "Backend",
    "BackendStats",
]
