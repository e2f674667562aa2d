"""Plain-text rendering of simulation results.

Every function takes finished collectors (and, for the softmax state, the
policy itself), reads them through their public accessors and returns a
string ready to print.
"""

from __future__ import annotations

from collections.abc import Sequence

from lbsim.metrics.collector import MetricsCollector
from lbsim.policies.softmax import Softmax

CHART_WIDTH = 50
BAR_CHAR = "█"
SPARK_CHARS = " ▁▂▃▄▅▆▇█"


def _truncate(text: str, width: int) -> str:
    if len(text) <= width:
        return text
    return text[: width - 1] + "…"


def _rule(width: int, char: str = "─") -> str:
    return "  " + char * width


def format_summary(metrics: MetricsCollector, server_count: int) -> str:
    """Detailed report of one run, including its selection distribution."""
    summary = metrics.summary()
    lines = [
        "=" * 60,
        f"  ALGORITHM: {metrics.algorithm_name}",
        "=" * 60,
        f"  Total Requests   : {summary.count}",
        f"  Mean Latency     : {summary.mean:.2f} ms",
        f"  Min Latency      : {summary.min:.2f} ms",
        f"  Max Latency      : {summary.max:.2f} ms",
        f"  Std Dev          : {summary.std:.2f} ms",
        f"  P50 (Median)     : {summary.p50:.2f} ms",
        f"  P95              : {summary.p95:.2f} ms",
        f"  P99              : {summary.p99:.2f} ms",
        f"  Cumulative Regret: {summary.cumulative_regret:.2f} ms",
        "",
        "  Server Selection Distribution:",
    ]
    total = summary.count
    for i, count in enumerate(metrics.selection_counts(server_count)):
        pct = 100.0 * count / total if total else 0.0
        lines.append(f"    Server-{i}: {count:5d} requests ({pct:5.1f}%)")
    lines.append("=" * 60)
    return "\n".join(lines)


def format_comparison_table(results: Sequence[MetricsCollector]) -> str:
    """Side-by-side mean/percentile/regret table with the winners named."""
    header = (
        f"  {'Algorithm':<22} {'Mean':>9} {'P50':>9} {'P95':>9} {'P99':>9} {'Cum.Regret':>14}"
    )
    lines = [
        "  LOAD BALANCER ALGORITHM COMPARISON",
        _rule(len(header) - 2, "═"),
        header,
        _rule(len(header) - 2),
    ]
    for m in results:
        lines.append(
            f"  {_truncate(m.algorithm_name, 22):<22}"
            f" {m.mean_latency():7.1f}ms"
            f" {m.percentile(50):7.1f}ms"
            f" {m.percentile(95):7.1f}ms"
            f" {m.percentile(99):7.1f}ms"
            f" {m.cumulative_regret:12.1f}ms"
        )
    lines.append(_rule(len(header) - 2, "═"))

    if results:
        best_mean = min(results, key=lambda m: m.mean_latency())
        best_regret = min(results, key=lambda m: m.cumulative_regret)
        lines.append(
            f"  Best Mean Latency: {best_mean.algorithm_name} ({best_mean.mean_latency():.2f} ms)"
        )
        lines.append(
            f"  Lowest Cumulative Regret: {best_regret.algorithm_name} "
            f"({best_regret.cumulative_regret:.2f} ms)"
        )
    return "\n".join(lines)


def format_latency_bar_chart(results: Sequence[MetricsCollector]) -> str:
    """Horizontal bars of mean latency, scaled to the slowest run."""
    lines = ["  Mean Latency Comparison (lower is better):", _rule(CHART_WIDTH + 30)]
    peak = max((m.mean_latency() for m in results), default=0.0) or 1.0
    for m in results:
        mean = m.mean_latency()
        bar = BAR_CHAR * int(CHART_WIDTH * mean / peak)
        lines.append(f"  {_truncate(m.algorithm_name, 20):<20} │{bar} {mean:.1f}ms")
    lines.append(_rule(CHART_WIDTH + 30))
    return "\n".join(lines)


def format_selection_distribution(metrics: MetricsCollector, server_count: int) -> str:
    """Bar chart of how many requests each backend received."""
    counts = metrics.selection_counts(server_count)
    total = metrics.total_requests
    peak = max(counts, default=0)

    lines = [
        f"  Server Selection Distribution for [{metrics.algorithm_name}]:",
        _rule(CHART_WIDTH + 25),
    ]
    for i, count in enumerate(counts):
        pct = 100.0 * count / total if total else 0.0
        bar = BAR_CHAR * (CHART_WIDTH * count // peak if peak else 0)
        lines.append(f"  Server-{i:<2d} │ {bar} {pct:5.1f}% ({count})")
    lines.append(_rule(CHART_WIDTH + 25))
    return "\n".join(lines)


def format_softmax_state(policy: Softmax, server_count: int) -> str:
    """Current temperature, reward estimates and probabilities of a softmax policy."""
    probabilities = policy.probabilities(server_count)
    rewards = policy.estimated_rewards

    lines = [
        "  Current Softmax State:",
        f"  Temperature (τ): {policy.temperature:.4f}",
        _rule(60),
        f"  {'Server':<10} {'Q-Value':<15} {'Probability':<15} {'Visual':<20}",
        _rule(60),
    ]
    for i in range(server_count):
        bar = BAR_CHAR * int(40 * probabilities[i])
        lines.append(
            f"  Server-{i:<3d}  Q={rewards[i]:8.4f}     P={probabilities[i]:6.3f}    │{bar}"
        )
    lines.append(_rule(60))
    return "\n".join(lines)


def format_latency_trend(results: Sequence[MetricsCollector], buckets: int = 50) -> str:
    """Sparkline of bucketed mean latency over time, per run."""
    lines = ["  Latency Trend (time →, normalized to each algorithm's max):"]
    for m in results:
        trend = m.latency_trend(buckets)
        if not trend:
            continue
        peak = max(trend)
        levels = [
            0 if peak == 0 else max(0, min(8, int(8 * value / peak)))
            for value in trend
        ]
        spark = "".join(SPARK_CHARS[level] for level in levels)
        lines.append(
            f"  {_truncate(m.algorithm_name, 20):<20} │{spark}│ avg={m.mean_latency():.1f}ms"
        )
    return "\n".join(lines)


def improvement_percent(candidate: MetricsCollector, baseline: MetricsCollector) -> float:
    """Relative mean-latency reduction of ``candidate`` versus ``baseline``."""
    base = baseline.mean_latency()
    if base == 0:
        return 0.0
    return (base - candidate.mean_latency()) / base * 100.0


def format_improvement(candidate: MetricsCollector, baselines: Sequence[MetricsCollector]) -> str:
    """Mean latency and regret savings of one run over each baseline."""
    lines = [f"  PERFORMANCE IMPROVEMENT ({candidate.algorithm_name} vs Baselines)"]
    for baseline in baselines:
        lines.append(
            f"  vs {_truncate(baseline.algorithm_name, 20):<20}: "
            f"{improvement_percent(candidate, baseline):+.1f}% mean latency improvement"
        )
    lines.append("")
    lines.append("  Cumulative Regret Reduction:")
    for baseline in baselines:
        saved = baseline.cumulative_regret - candidate.cumulative_regret
        lines.append(
            f"    vs {_truncate(baseline.algorithm_name, 20):<20}: {saved:.1f} ms less total wait time"
        )
    return "\n".join(lines)
