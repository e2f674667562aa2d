"""Selection policy protocol and the non-adaptive baselines.

A policy picks the index of the backend that receives the next request.
Learning policies consume the observed latency through ``observe``; the
baselines here ignore it.

Policies:
- RoundRobin: Cycles through backends in index order
- Random: Uniform random choice from a privately seeded generator
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from lbsim.environment.backend import Backend

DEFAULT_RANDOM_SEED = 99999


@runtime_checkable
class SelectionPolicy(Protocol):
    """Protocol for server-selection policies.

    Implementations must return a valid index into ``backends`` and must
    not mutate any backend.
    """

    @property
    def name(self) -> str:
        """Human-readable label used in reports."""
        ...

    def select(self, backends: Sequence[Backend]) -> int:
        """Choose the backend index for the next request.

        Args:
            backends: Current cluster, addressed by index.

        Returns:
            Index in ``range(len(backends))``.

        Raises:
            ValueError: If ``backends`` is empty.
        """
        ...

    def observe(self, index: int, latency: float) -> None:
        """Feed back the latency observed on backend ``index``."""
        ...

    def reset(self) -> None:
        """Restore the just-constructed state."""
        ...


def _require_backends(backends: Sequence[Backend]) -> int:
    count = len(backends)
    if count == 0:
        raise ValueError("cannot select from an empty backend set")
    return count


class RoundRobin:
    """Cycles through backends sequentially, blind to their performance."""

    def __init__(self) -> None:
        self._counter = 0

    @property
    def name(self) -> str:
        return "Round-Robin"

    @property
    def counter(self) -> int:
        return self._counter

    def select(self, backends: Sequence[Backend]) -> int:
        count = _require_backends(backends)
        selected = self._counter % count
        self._counter = (selected + 1) % count
        return selected

    def observe(self, index: int, latency: float) -> None:
        pass

    def reset(self) -> None:
        self._counter = 0


class Random:
    """Uniform random selection.

    Args:
        seed: Seed of the policy's own generator. ``reset()`` re-seeds it,
            so a reused instance replays the same choices.
    """

    def __init__(self, seed: int | None = DEFAULT_RANDOM_SEED):
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def name(self) -> str:
        return "Random"

    def select(self, backends: Sequence[Backend]) -> int:
        count = _require_backends(backends)
        return self._rng.randrange(count)

    def observe(self, index: int, latency: float) -> None:
        pass

    def reset(self) -> None:
        self._rng = random.Random(self._seed)
