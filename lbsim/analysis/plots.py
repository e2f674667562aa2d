"""Matplotlib figures for policy comparisons.

Figures are rendered with the non-interactive Agg backend and written as
PNG files, so they work on headless machines and in CI.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pandas as pd

from lbsim.metrics.collector import MetricsCollector
from lbsim.simulation import ShockEvent, ShockKind


def _pyplot():
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    return plt


def results_frame(results: Sequence[MetricsCollector]) -> pd.DataFrame:
    """Concatenate per-request data of several runs, tagged by algorithm."""
    frames = []
    for m in results:
        df = m.to_dataframe()
        df.insert(0, "algorithm", m.algorithm_name)
        frames.append(df)
    if not frames:
        return pd.DataFrame(columns=["algorithm", "request", "backend", "latency", "regret"])
    return pd.concat(frames, ignore_index=True)


def plot_latency_trend(
    results: Sequence[MetricsCollector],
    path: str | Path,
    shocks: Sequence[ShockEvent] = (),
) -> Path:
    """Rolling mean latency per run, with shock markers.

    Args:
        results: Finished collectors to overlay.
        path: Output PNG file.
        shocks: Shock events to mark as vertical lines.

    Returns:
        The written path.
    """
    plt = _pyplot()
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=(12, 5))
    for m in results:
        series = pd.Series(m.latencies)
        ax.plot(series.rolling(m.window_size, min_periods=1).mean(), label=m.algorithm_name)

    for shock in shocks:
        color = "red" if shock.kind is ShockKind.DEGRADATION else "green"
        ax.axvline(shock.request_index, color=color, linestyle="--", alpha=0.5)

    if results:
        ax.axhline(results[0].optimal_latency, color="gray", linestyle=":", label="optimal")
    ax.set_xlabel("Request")
    ax.set_ylabel("Rolling mean latency (ms)")
    ax.set_title("Latency over time")
    ax.legend()
    ax.grid(True, alpha=0.3)

    fig.tight_layout()
    fig.savefig(path, dpi=120)
    plt.close(fig)
    return path


def plot_selection_distribution(
    results: Sequence[MetricsCollector],
    server_count: int,
    path: str | Path,
) -> Path:
    """Grouped bars of requests per backend for each run."""
    plt = _pyplot()
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=(10, 5))
    width = 0.8 / max(1, len(results))
    for offset, m in enumerate(results):
        counts = m.selection_counts(server_count)
        positions = [i + offset * width for i in range(server_count)]
        ax.bar(positions, counts, width=width, label=m.algorithm_name)

    ax.set_xticks([i + 0.4 - width / 2 for i in range(server_count)])
    ax.set_xticklabels([f"Server-{i}" for i in range(server_count)])
    ax.set_ylabel("Requests")
    ax.set_title("Server selection distribution")
    ax.legend()
    ax.grid(True, axis="y", alpha=0.3)

    fig.tight_layout()
    fig.savefig(path, dpi=120)
    plt.close(fig)
    return path
