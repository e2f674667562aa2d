"""Command-line comparison of Round-Robin, Random and Softmax.

Run:
    python -m lbsim
    python -m lbsim --requests 5000 --no-shocks --output output/lbsim
"""

from __future__ import annotations

import argparse
from pathlib import Path

from lbsim.analysis.plots import plot_latency_trend, plot_selection_distribution, results_frame
from lbsim.analysis.report import (
    format_comparison_table,
    format_improvement,
    format_latency_bar_chart,
    format_latency_trend,
    format_selection_distribution,
    format_softmax_state,
    format_summary,
)
from lbsim.config import SimulationConfig, SoftmaxConfig
from lbsim.logging_config import configure_from_env, enable_console_logging
from lbsim.policies import Random, RoundRobin, Softmax
from lbsim.simulation import Simulation


def build_parser() -> argparse.ArgumentParser:
    sim_defaults = SimulationConfig()
    sm_defaults = SoftmaxConfig()

    parser = argparse.ArgumentParser(
        description="Compare load balancer policies over non-stationary backends"
    )
    parser.add_argument("--servers", type=int, default=sim_defaults.server_count, help="Number of backends")
    parser.add_argument("--requests", type=int, default=sim_defaults.total_requests, help="Requests per run")
    parser.add_argument("--no-shocks", action="store_true", help="Disable degradation/recovery shocks")
    parser.add_argument("--shock-interval", type=int, default=sim_defaults.shock_interval, help="Requests between shocks")
    parser.add_argument("--shock-factor", type=float, default=sim_defaults.shock_factor, help="Multiplicative shock factor")
    parser.add_argument(
        "--shock-seed", type=int, default=sim_defaults.shock_seed,
        help="Shock target seed (use -1 to seed from the OS every run)",
    )
    parser.add_argument("--temperature", type=float, default=sm_defaults.initial_temperature, help="Initial softmax temperature")
    parser.add_argument("--min-temperature", type=float, default=sm_defaults.min_temperature, help="Temperature floor")
    parser.add_argument("--decay", type=float, default=sm_defaults.decay_rate, help="Temperature decay per step")
    parser.add_argument("--learning-rate", type=float, default=sm_defaults.learning_rate, help="EMA learning rate")
    parser.add_argument("--output", type=str, default=None, help="Directory for plots and CSV (skipped if unset)")
    parser.add_argument("--verbose", action="store_true", help="Log simulation progress to stderr")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    if args.verbose:
        enable_console_logging(level="INFO")
    else:
        configure_from_env()

    sim_config = SimulationConfig(
        server_count=args.servers,
        total_requests=args.requests,
        enable_shocks=not args.no_shocks,
        shock_interval=args.shock_interval,
        shock_factor=args.shock_factor,
        shock_seed=None if args.shock_seed == -1 else args.shock_seed,
    )
    sm_config = SoftmaxConfig(
        initial_temperature=args.temperature,
        min_temperature=args.min_temperature,
        decay_rate=args.decay,
        learning_rate=args.learning_rate,
    )

    simulation = Simulation.from_config(sim_config)

    print("  Configuration:")
    print(f"    Servers             : {simulation.server_count}")
    print(f"    Total Requests      : {sim_config.total_requests}")
    print(
        f"    Degradation Events  : {'ON' if sim_config.enable_shocks else 'OFF'}"
        f" (every {sim_config.shock_interval} requests)"
    )
    print(f"    Softmax τ₀          : {sm_config.initial_temperature:.2f}")
    print(f"    Softmax τ_min       : {sm_config.min_temperature:.2f}")
    print(f"    Softmax decay rate  : {sm_config.decay_rate:.4f}")
    print(f"    EMA learning rate α : {sm_config.learning_rate:.2f}")

    softmax = Softmax.from_config(simulation.server_count, sm_config)
    round_robin, random_policy = RoundRobin(), Random()

    results = simulation.compare([round_robin, random_policy, softmax])
    # The softmax run is last, so these are the shocks it faced.
    shocks = simulation.shock_events
    server_count = simulation.server_count

    print()
    for metrics in results:
        print(format_summary(metrics, server_count))
    print()
    print(format_comparison_table(results))
    print()
    print(format_latency_bar_chart(results))
    for metrics in results:
        print()
        print(format_selection_distribution(metrics, server_count))
    print()
    print(format_softmax_state(softmax, server_count))
    print()
    print(format_latency_trend(results, buckets=50))
    print()
    print(format_improvement(results[-1], results[:-1]))

    if args.output:
        output = Path(args.output)
        output.mkdir(parents=True, exist_ok=True)
        results_frame(results).to_csv(output / "requests.csv", index=False)
        plot_latency_trend(results, output / "latency_trend.png", shocks=shocks)
        plot_selection_distribution(results, server_count, output / "selection_distribution.png")
        print(f"\n  Wrote results to {output}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
