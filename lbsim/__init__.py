"""lbsim: client-side load balancer policy simulator.

Compares server-selection policies (round-robin, uniform random, adaptive
softmax) over a cluster of synthetic backends whose latency drifts and
suffers degradation/recovery shocks.

Example:
    from lbsim import Simulation, RoundRobin, Softmax

    sim = Simulation(server_count=5, total_requests=2000)
    rr, sm = sim.compare([RoundRobin(), Softmax(backend_count=5)])
    print(rr.summary())
    print(sm.summary())
"""

import logging

from lbsim.config import (
    DEFAULT_CLUSTER,
    BackendSpec,
    SimulationConfig,
    SoftmaxConfig,
)
from lbsim.environment import LATENCY_FLOOR_MS, Backend, BackendStats
from lbsim.logging_config import (
    configure_from_env,
    disable_logging,
    enable_console_logging,
    enable_file_logging,
    enable_json_logging,
    set_level,
)
from lbsim.metrics import MetricsCollector, MetricsSummary
from lbsim.policies import (
    Random,
    RoundRobin,
    SelectionPolicy,
    Softmax,
    softmax_probabilities,
)
from lbsim.simulation import ShockEvent, ShockKind, Simulation

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "DEFAULT_CLUSTER",
    "LATENCY_FLOOR_MS",
    "Backend",
    "BackendSpec",
    "BackendStats",
    "MetricsCollector",
    "MetricsSummary",
    "Random",
    "RoundRobin",
    "SelectionPolicy",
    "ShockEvent",
    "ShockKind",
    "SimulationConfig",
    "Simulation",
    "Softmax",
    "SoftmaxConfig",
    "configure_from_env",
    "disable_logging",
    "enable_console_logging",
    "enable_file_logging",
    "enable_json_logging",
    "set_level",
    "softmax_probabilities",
]
