"""Experiment configuration.

Frozen dataclasses holding the knobs of one comparison experiment: the
cluster table every run is rebuilt from, the softmax hyperparameters and the
simulation settings. Values are validated on construction so a bad setup is
rejected before any request is simulated.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class BackendSpec:
    """Static parameters of one synthetic backend.

    Attributes:
        base_latency: Starting mean latency in milliseconds.
        noise_scale: Standard deviation of the Gaussian noise term.
        drift_rate: Angular speed of the sinusoidal drift, per tick.
        drift_amplitude: Peak drift in milliseconds.
    """

    base_latency: float
    noise_scale: float
    drift_rate: float
    drift_amplitude: float

    def __post_init__(self) -> None:
        if self.base_latency <= 0:
            raise ValueError(f"base_latency must be positive, got {self.base_latency}")


DEFAULT_CLUSTER: tuple[BackendSpec, ...] = (
    BackendSpec(20.0, 5.0, 0.05, 10.0),   # fast, stable
    BackendSpec(50.0, 10.0, 0.08, 20.0),  # medium, moderate drift
    BackendSpec(80.0, 15.0, 0.12, 30.0),  # slow, high variance
    BackendSpec(35.0, 8.0, 0.07, 15.0),   # medium-fast
    BackendSpec(100.0, 20.0, 0.15, 40.0), # slow, very noisy
)


@dataclass(frozen=True)
class SoftmaxConfig:
    """Hyperparameters of the adaptive softmax policy.

    Attributes:
        initial_temperature: Starting temperature, must be > 0.
        min_temperature: Cooling floor, 0 <= floor < initial.
        decay_rate: Linear temperature decrease per step, >= 0.
        learning_rate: EMA weight of the newest reward, in (0, 1].
    """

    initial_temperature: float = 2.0
    min_temperature: float = 0.1
    decay_rate: float = 0.001
    learning_rate: float = 0.15

    def __post_init__(self) -> None:
        validate_softmax_parameters(
            self.initial_temperature,
            self.min_temperature,
            self.decay_rate,
            self.learning_rate,
        )


def validate_softmax_parameters(
    initial_temperature: float,
    min_temperature: float,
    decay_rate: float,
    learning_rate: float,
) -> None:
    """Raise ValueError if the softmax hyperparameters are unusable."""
    if initial_temperature <= 0:
        raise ValueError(f"initial_temperature must be positive, got {initial_temperature}")
    if min_temperature < 0:
        raise ValueError(f"min_temperature must be non-negative, got {min_temperature}")
    if min_temperature >= initial_temperature:
        raise ValueError(
            f"min_temperature ({min_temperature}) must be below "
            f"initial_temperature ({initial_temperature})"
        )
    if decay_rate < 0:
        raise ValueError(f"decay_rate must be non-negative, got {decay_rate}")
    if not 0 < learning_rate <= 1:
        raise ValueError(f"learning_rate must be in (0, 1], got {learning_rate}")


@dataclass(frozen=True)
class SimulationConfig:
    """Settings of the simulation engine.

    Attributes:
        server_count: Number of backends taken from the head of ``cluster``.
        total_requests: Requests simulated per run.
        enable_shocks: Whether degradation/recovery shocks are injected.
        shock_interval: Requests between shocks.
        shock_factor: Multiplicative factor applied by each shock.
        optimal_latency: Regret baseline in milliseconds.
        window_size: Rolling-average window of the metrics collector.
        shock_seed: Seed of the shock-target generator. ``None`` draws a
            fresh seed from the OS for every run, so shock schedules differ
            between runs.
        cluster: Backend table every run is rebuilt from.
    """

    server_count: int = 5
    total_requests: int = 2000
    enable_shocks: bool = True
    shock_interval: int = 400
    shock_factor: float = 1.5
    optimal_latency: float = 20.0
    window_size: int = 100
    shock_seed: int | None = 7
    cluster: tuple[BackendSpec, ...] = field(default=DEFAULT_CLUSTER)
