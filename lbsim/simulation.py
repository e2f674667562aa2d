"""Simulation engine comparing selection policies on a shared environment.

Every call to ``run`` rebuilds the cluster from the same backend table and
resets the policy, so each policy faces an identical, reproducible
environment. One request is one tick:

    shock (if due) -> policy.select -> backend.observe
                   -> policy.observe -> metrics.record

Shocks fire every ``shock_interval`` requests (never on request 0). They
alternate starting with a degradation, each multiplying or dividing one
randomly chosen backend's base latency by ``shock_factor``.
"""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from lbsim.config import DEFAULT_CLUSTER, BackendSpec, SimulationConfig
from lbsim.environment.backend import Backend
from lbsim.metrics.collector import MetricsCollector
from lbsim.policies.strategies import SelectionPolicy

logger = logging.getLogger(__name__)

PROGRESS_STEPS = 10


class ShockKind(Enum):
    DEGRADATION = "degradation"
    RECOVERY = "recovery"


@dataclass(frozen=True)
class ShockEvent:
    """A shock injected before request ``request_index`` was served."""
    request_index: int
    backend_index: int
    kind: ShockKind
    factor: float


class Simulation:
    """Drives a fixed number of requests through one policy per run.

    Args:
        server_count: Number of backends, taken from the head of ``cluster``.
        total_requests: Requests simulated per run.
        enable_shocks: Inject degradation/recovery shocks.
        shock_interval: Requests between shocks.
        shock_factor: Multiplicative factor of each shock, > 0.
        optimal_latency: Regret baseline in milliseconds.
        window_size: Rolling-average window of each run's collector.
        shock_seed: Seed of the shock-target generator, re-applied at the
            start of every run. ``None`` seeds from the OS instead, so shock
            targets differ from run to run.
        cluster: Backend table the cluster is rebuilt from.

    Raises:
        ValueError: On an invalid configuration.
    """

    def __init__(
        self,
        server_count: int,
        total_requests: int,
        enable_shocks: bool = True,
        shock_interval: int = 400,
        *,
        shock_factor: float = 1.5,
        optimal_latency: float = 20.0,
        window_size: int = 100,
        shock_seed: int | None = 7,
        cluster: Iterable[BackendSpec] = DEFAULT_CLUSTER,
    ):
        cluster = tuple(cluster)
        if server_count <= 0:
            raise ValueError(f"server_count must be positive, got {server_count}")
        if not cluster:
            raise ValueError("cluster table must not be empty")
        if total_requests < 0:
            raise ValueError(f"total_requests must be non-negative, got {total_requests}")
        if enable_shocks and shock_interval <= 0:
            raise ValueError(f"shock_interval must be positive, got {shock_interval}")
        if shock_factor <= 0:
            raise ValueError(f"shock_factor must be positive, got {shock_factor}")
        if window_size <= 0:
            raise ValueError(f"window_size must be positive, got {window_size}")

        self._specs = cluster[:min(server_count, len(cluster))]
        self._total_requests = total_requests
        self._enable_shocks = enable_shocks
        self._shock_interval = shock_interval
        self._shock_factor = float(shock_factor)
        self._optimal_latency = float(optimal_latency)
        self._window_size = window_size
        self._shock_seed = shock_seed

        self._backends = self._build_cluster()
        self._shock_events: list[ShockEvent] = []

    @classmethod
    def from_config(cls, config: SimulationConfig) -> Simulation:
        return cls(
            server_count=config.server_count,
            total_requests=config.total_requests,
            enable_shocks=config.enable_shocks,
            shock_interval=config.shock_interval,
            shock_factor=config.shock_factor,
            optimal_latency=config.optimal_latency,
            window_size=config.window_size,
            shock_seed=config.shock_seed,
            cluster=config.cluster,
        )

    def _build_cluster(self) -> list[Backend]:
        return [Backend.from_spec(i, spec) for i, spec in enumerate(self._specs)]

    @property
    def backends(self) -> list[Backend]:
        """Backends of the most recent run (or the initial cluster)."""
        return self._backends

    @property
    def server_count(self) -> int:
        return len(self._backends)

    @property
    def total_requests(self) -> int:
        return self._total_requests

    @property
    def optimal_latency(self) -> float:
        return self._optimal_latency

    @property
    def shock_events(self) -> list[ShockEvent]:
        """Shocks injected during the most recent run."""
        return list(self._shock_events)

    def run(self, policy: SelectionPolicy) -> MetricsCollector:
        """Simulate ``total_requests`` requests routed by ``policy``.

        Returns:
            The populated collector for this run.
        """
        policy.reset()
        self._backends = self._build_cluster()
        self._shock_events = []
        shock_rng = random.Random(self._shock_seed)

        metrics = MetricsCollector(policy.name, self._optimal_latency, self._window_size)

        logger.info(
            "Running simulation: %s (%d requests, %d servers)",
            policy.name, self._total_requests, len(self._backends),
        )
        started = time.perf_counter()
        progress_every = max(1, self._total_requests // PROGRESS_STEPS)

        for request_index in range(self._total_requests):
            if self._shock_due(request_index):
                self._inject_shock(request_index, shock_rng)

            selected = policy.select(self._backends)
            latency = self._backends[selected].observe()
            policy.observe(selected, latency)
            metrics.record(selected, latency)

            if (request_index + 1) % progress_every == 0:
                logger.info(
                    "  [%3d%%] rolling avg latency: %.2fms",
                    100 * (request_index + 1) // self._total_requests,
                    metrics.rolling_average(),
                )

        logger.info(
            "Run complete: %s in %.3fs (mean %.2fms, regret %.1fms)",
            policy.name,
            time.perf_counter() - started,
            metrics.mean_latency(),
            metrics.cumulative_regret,
        )
        return metrics

    def compare(self, policies: Iterable[SelectionPolicy]) -> list[MetricsCollector]:
        """Run each policy in turn against a freshly built cluster."""
        return [self.run(policy) for policy in policies]

    def _shock_due(self, request_index: int) -> bool:
        return (
            self._enable_shocks
            and request_index > 0
            and request_index % self._shock_interval == 0
        )

    def _inject_shock(self, request_index: int, rng: random.Random) -> None:
        target = self._backends[rng.randrange(len(self._backends))]
        # Shock number k = request_index // interval starts at 1; odd k degrades.
        if (request_index // self._shock_interval) % 2 == 1:
            kind = ShockKind.DEGRADATION
            target.degrade(self._shock_factor)
        else:
            kind = ShockKind.RECOVERY
            target.recover(self._shock_factor)

        self._shock_events.append(
            ShockEvent(request_index, target.index, kind, self._shock_factor)
        )
        logger.info(
            "[Event @ req %d] %s: %s base latency now %.1fms",
            request_index, kind.value.upper(), target.name, target.base_latency,
        )
