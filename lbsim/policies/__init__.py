"""Server-selection policies.

Example:
    from lbsim.policies import RoundRobin, Random, Softmax

    policies = [RoundRobin(), Random(), Softmax(backend_count=5)]
"""

from lbsim.policies.softmax import (
    REWARD_SCALE,
    Softmax,
    latency_to_reward,
    sample_index,
    softmax_probabilities,
)
from lbsim.policies.strategies import (
    Random,
    RoundRobin,
    SelectionPolicy,
)

__all__ = [
    "REWARD_SCALE",
    "Random",
    "RoundRobin",
    "SelectionPolicy",
    "Softmax",
    "latency_to_reward",
    "sample_index",
    "softmax_probabilities",
]
