"""Reporting over finished simulation runs: text tables and plots."""

from lbsim.analysis.plots import (
    plot_latency_trend,
    plot_selection_distribution,
    results_frame,
)
from lbsim.analysis.report import (
    format_comparison_table,
    format_improvement,
    format_latency_bar_chart,
    format_latency_trend,
    format_selection_distribution,
    format_softmax_state,
    format_summary,
    improvement_percent,
)

__all__ = [
    "format_comparison_table",
    "format_improvement",
    "format_latency_bar_chart",
    "format_latency_trend",
    "format_selection_distribution",
    "format_softmax_state",
    "format_summary",
    "improvement_percent",
    "plot_latency_trend",
    "plot_selection_distribution",
    "results_frame",
]
