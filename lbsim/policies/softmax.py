"""Adaptive softmax (Boltzmann) selection policy.

Each backend keeps an estimated reward ``Q_i``. Selection samples from

    P(i) = exp(Q_i / τ) / Σ_j exp(Q_j / τ)

where the temperature τ trades exploration (large τ, near uniform) against
exploitation (small τ, near argmax). τ cools linearly with every selection:

    τ_t = max(τ_min, τ_0 - decay * t)

Rewards are negative normalized latencies, ``-latency / 100``, folded into
``Q_i`` with an exponential moving average so that old observations fade
geometrically. Backend latencies drift and jump after shocks, so a plain
running mean would keep trusting stale data.

The exponentials are computed on ``Q_i / τ - max_j(Q_j / τ)``. The largest
term is then exactly 1 and no term can overflow, however small τ is.
"""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Sequence

from lbsim.config import SoftmaxConfig, validate_softmax_parameters
from lbsim.environment.backend import Backend

logger = logging.getLogger(__name__)

REWARD_SCALE = 100.0
DEFAULT_SOFTMAX_SEED = 12345

# Used when a zero floor lets the cooling schedule reach zero.
_MIN_POSITIVE_TEMPERATURE = 1e-9


def latency_to_reward(latency: float) -> float:
    """Map a latency in milliseconds onto the O(1) reward scale."""
    return -latency / REWARD_SCALE


def softmax_probabilities(values: Sequence[float], temperature: float) -> list[float]:
    """Shifted softmax of ``values`` at ``temperature``.

    Args:
        values: Estimated rewards, one per backend.
        temperature: Strictly positive temperature.

    Returns:
        Probabilities in the order of ``values``; non-negative, summing to 1.

    Raises:
        ValueError: If ``values`` is empty or ``temperature`` is not positive.
    """
    if not values:
        raise ValueError("values must not be empty")
    if temperature <= 0:
        raise ValueError(f"temperature must be positive, got {temperature}")

    scaled = [v / temperature for v in values]
    peak = max(scaled)
    weights = [math.exp(s - peak) for s in scaled]
    total = sum(weights)
    return [w / total for w in weights]


def sample_index(probabilities: Sequence[float], u: float) -> int:
    """Inverse-CDF draw: first index whose cumulative probability reaches ``u``.

    Falls back to the last index when rounding leaves the cumulative sum
    just under ``u``.
    """
    cumulative = 0.0
    for i, p in enumerate(probabilities):
        cumulative += p
        if u <= cumulative:
            return i
    return len(probabilities) - 1


class Softmax:
    """Softmax selection with EMA reward estimates and linear cooling.

    Args:
        backend_count: Number of backends the policy tracks.
        initial_temperature: Starting temperature τ_0, > 0.
        min_temperature: Cooling floor τ_min, 0 <= τ_min < τ_0.
        decay_rate: Temperature decrease per selection, >= 0.
        learning_rate: EMA weight α of the newest reward, in (0, 1].
        seed: Seed of the sampling generator; ``reset()`` re-seeds it.

    Raises:
        ValueError: If any parameter is outside its valid range.

    Example:
        policy = Softmax(backend_count=5)
        index = policy.select(backends)
        policy.observe(index, backends[index].observe())
    """

    def __init__(
        self,
        backend_count: int,
        initial_temperature: float = 2.0,
        min_temperature: float = 0.1,
        decay_rate: float = 0.001,
        learning_rate: float = 0.15,
        seed: int | None = DEFAULT_SOFTMAX_SEED,
    ):
        if backend_count <= 0:
            raise ValueError(f"backend_count must be positive, got {backend_count}")
        validate_softmax_parameters(initial_temperature, min_temperature, decay_rate, learning_rate)

        self._backend_count = backend_count
        self._initial_temperature = float(initial_temperature)
        self._min_temperature = float(min_temperature)
        self._decay_rate = float(decay_rate)
        self._learning_rate = float(learning_rate)
        self._seed = seed

        self._initialize_state()

    @classmethod
    def from_config(cls, backend_count: int, config: SoftmaxConfig, seed: int | None = DEFAULT_SOFTMAX_SEED) -> Softmax:
        return cls(
            backend_count=backend_count,
            initial_temperature=config.initial_temperature,
            min_temperature=config.min_temperature,
            decay_rate=config.decay_rate,
            learning_rate=config.learning_rate,
            seed=seed,
        )

    def _initialize_state(self) -> None:
        # Equal zero rewards make the first selections uniform.
        self._rewards = [0.0] * self._backend_count
        self._selection_counts = [0] * self._backend_count
        self._step_count = 0
        self._temperature = self._initial_temperature
        self._rng = random.Random(self._seed)

    def _temperature_at(self, step: int) -> float:
        cooled = max(self._min_temperature, self._initial_temperature - self._decay_rate * step)
        return cooled if cooled > 0 else _MIN_POSITIVE_TEMPERATURE

    @property
    def name(self) -> str:
        return "Softmax (EMA, τ-decay)"

    @property
    def backend_count(self) -> int:
        return self._backend_count

    @property
    def initial_temperature(self) -> float:
        return self._initial_temperature

    @property
    def min_temperature(self) -> float:
        return self._min_temperature

    @property
    def decay_rate(self) -> float:
        return self._decay_rate

    @property
    def learning_rate(self) -> float:
        return self._learning_rate

    @property
    def temperature(self) -> float:
        return self._temperature

    @property
    def step_count(self) -> int:
        return self._step_count

    @property
    def estimated_rewards(self) -> list[float]:
        return list(self._rewards)

    @property
    def selection_counts(self) -> list[int]:
        return list(self._selection_counts)

    def probabilities(self, count: int | None = None) -> list[float]:
        """Current selection distribution over the first ``count`` backends."""
        n = self._backend_count if count is None else count
        if not 0 < n <= self._backend_count:
            raise ValueError(f"count must be in [1, {self._backend_count}], got {n}")
        return softmax_probabilities(self._rewards[:n], self._temperature)

    def select(self, backends: Sequence[Backend]) -> int:
        n = len(backends)
        if n == 0:
            raise ValueError("cannot select from an empty backend set")
        if n > self._backend_count:
            raise ValueError(
                f"policy tracks {self._backend_count} backends, got {n}"
            )

        probabilities = softmax_probabilities(self._rewards[:n], self._temperature)
        selected = sample_index(probabilities, self._rng.random())

        self._selection_counts[selected] += 1
        self._step_count += 1
        self._temperature = self._temperature_at(self._step_count)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "[Softmax] step=%d tau=%.4f selected=%d probs=[%s]",
                self._step_count,
                self._temperature,
                selected,
                ", ".join(f"{p:.3f}" for p in probabilities),
            )
        return selected

    def observe(self, index: int, latency: float) -> None:
        """Fold the reward of ``latency`` into backend ``index``'s estimate."""
        if not 0 <= index < self._backend_count:
            raise ValueError(
                f"index must be in [0, {self._backend_count}), got {index}"
            )
        reward = latency_to_reward(latency)
        alpha = self._learning_rate
        self._rewards[index] = (1.0 - alpha) * self._rewards[index] + alpha * reward

    def reset(self) -> None:
        self._initialize_state()
