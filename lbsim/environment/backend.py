"""Synthetic backend with non-stationary latency.

Each observed latency is

    latency = max(LATENCY_FLOOR_MS, base + amplitude * sin(rate * tick) + noise)

where ``noise`` is Gaussian with standard deviation ``noise_scale``. The base
latency only changes through shocks (``degrade`` / ``recover``), which model
incidents such as GC pauses or a scale-out.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass

from lbsim.config import BackendSpec

logger = logging.getLogger(__name__)

LATENCY_FLOOR_MS = 1.0
NOISE_SEED_MULTIPLIER = 42


@dataclass(frozen=True)
class BackendStats:
    """Snapshot of a backend's own request accounting."""
    index: int
    base_latency: float
    tick: int
    total_requests: int
    total_latency: float
    average_latency: float


class Backend:
    """One cluster slot producing time-varying latencies.

    Backends are addressed by their dense 0-based ``index``. Noise comes from
    a private generator seeded with ``index * 42`` so two backends built from
    the same table always emit the same sequence.

    Args:
        index: Position in the cluster.
        base_latency: Starting mean latency in milliseconds, must be > 0.
        noise_scale: Gaussian noise standard deviation.
        drift_rate: Angular speed of the sinusoidal drift per tick.
        drift_amplitude: Peak drift in milliseconds.
    """

    def __init__(
        self,
        index: int,
        base_latency: float,
        noise_scale: float = 0.0,
        drift_rate: float = 0.0,
        drift_amplitude: float = 0.0,
    ):
        if index < 0:
            raise ValueError(f"index must be non-negative, got {index}")
        if base_latency <= 0:
            raise ValueError(f"base_latency must be positive, got {base_latency}")

        self._index = index
        self._base_latency = float(base_latency)
        self._noise_scale = float(noise_scale)
        self._drift_rate = float(drift_rate)
        self._drift_amplitude = float(drift_amplitude)
        self._rng = random.Random(index * NOISE_SEED_MULTIPLIER)

        self._tick = 0
        self._total_requests = 0
        self._total_latency = 0.0

    @classmethod
    def from_spec(cls, index: int, spec: BackendSpec) -> Backend:
        return cls(
            index=index,
            base_latency=spec.base_latency,
            noise_scale=spec.noise_scale,
            drift_rate=spec.drift_rate,
            drift_amplitude=spec.drift_amplitude,
        )

    @property
    def index(self) -> int:
        return self._index

    @property
    def name(self) -> str:
        return f"Server-{self._index}"

    @property
    def base_latency(self) -> float:
        return self._base_latency

    @property
    def noise_scale(self) -> float:
        return self._noise_scale

    @property
    def drift_rate(self) -> float:
        return self._drift_rate

    @property
    def drift_amplitude(self) -> float:
        return self._drift_amplitude

    @property
    def tick(self) -> int:
        return self._tick

    @property
    def total_requests(self) -> int:
        return self._total_requests

    @property
    def total_latency(self) -> float:
        return self._total_latency

    @property
    def average_latency(self) -> float:
        """Mean of this backend's own observations, 0.0 before any request."""
        if self._total_requests == 0:
            return 0.0
        return self._total_latency / self._total_requests

    def _drift(self, tick: int) -> float:
        return self._drift_amplitude * math.sin(self._drift_rate * tick)

    def observe(self) -> float:
        """Serve one request and return its latency in milliseconds."""
        self._tick += 1

        noise = self._rng.gauss(0.0, 1.0) * self._noise_scale
        latency = max(LATENCY_FLOOR_MS, self._base_latency + self._drift(self._tick) + noise)

        self._total_requests += 1
        self._total_latency += latency
        return latency

    def peek_base_latency(self) -> float:
        """Expected latency of the next request, without noise or side effects."""
        return max(LATENCY_FLOOR_MS, self._base_latency + self._drift(self._tick + 1))

    def degrade(self, factor: float) -> None:
        """Multiply the base latency by ``factor``."""
        if factor <= 0:
            raise ValueError(f"shock factor must be positive, got {factor}")
        self._base_latency *= factor
        logger.debug("%s degraded x%.2f -> base %.2fms", self.name, factor, self._base_latency)

    def recover(self, factor: float) -> None:
        """Divide the base latency by ``factor``."""
        if factor <= 0:
            raise ValueError(f"shock factor must be positive, got {factor}")
        self._base_latency /= factor
        logger.debug("%s recovered /%.2f -> base %.2fms", self.name, factor, self._base_latency)

    def stats(self) -> BackendStats:
        return BackendStats(
            index=self._index,
            base_latency=self._base_latency,
            tick=self._tick,
            total_requests=self._total_requests,
            total_latency=self._total_latency,
            average_latency=self.average_latency,
        )

    def __repr__(self) -> str:
        return (
            f"Backend(index={self._index}, base_latency={self._base_latency:.1f}ms, "
            f"avg_latency={self.average_latency:.1f}ms, requests={self._total_requests})"
        )
