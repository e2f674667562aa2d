"""Tests for the plain-text reports."""

import pytest

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
from lbsim.metrics.collector import MetricsCollector
from lbsim.policies.softmax import Softmax


def make_metrics(name: str, latencies: list[float], selections: list[int] | None = None) -> MetricsCollector:
    metrics = MetricsCollector(name, optimal_latency=20.0, window_size=10)
    selections = selections or [i % 2 for i in range(len(latencies))]
    for index, latency in zip(selections, latencies):
        metrics.record(index, latency)
    return metrics


@pytest.fixture
def results() -> list[MetricsCollector]:
    return [
        make_metrics("Round-Robin", [40.0, 60.0, 50.0, 70.0]),
        make_metrics("Softmax (EMA, τ-decay)", [20.0, 25.0, 22.0, 21.0], selections=[0, 0, 0, 1]),
    ]


class TestSummary:
    def test_contains_statistics_and_distribution(self, results):
        text = format_summary(results[1], server_count=2)

        assert "ALGORITHM: Softmax (EMA, τ-decay)" in text
        assert "Total Requests   : 4" in text
        assert "Server-0:     3 requests ( 75.0%)" in text
        assert "Server-1:     1 requests ( 25.0%)" in text

    def test_empty_run(self):
        text = format_summary(MetricsCollector("Empty", 20.0), server_count=2)
        assert "Server-0:     0 requests (  0.0%)" in text


class TestComparison:
    def test_names_winners(self, results):
        text = format_comparison_table(results)

        assert "Round-Robin" in text
        assert "Best Mean Latency: Softmax (EMA, τ-decay) (22.00 ms)" in text
        assert "Lowest Cumulative Regret: Softmax (EMA, τ-decay)" in text

    def test_bar_chart_scales_to_slowest(self, results):
        lines = format_latency_bar_chart(results).splitlines()

        rr_line = next(line for line in lines if line.strip().startswith("Round-Robin"))
        assert rr_line.count("█") == 50


class TestDistribution:
    def test_bars_and_percentages(self, results):
        text = format_selection_distribution(results[1], server_count=2)

        assert "[Softmax (EMA, τ-decay)]" in text
        assert " 75.0% (3)" in text
        assert " 25.0% (1)" in text


class TestSoftmaxState:
    def test_shows_temperature_and_probabilities(self):
        policy = Softmax(backend_count=3, initial_temperature=2.0)

        text = format_softmax_state(policy, server_count=3)

        assert "Temperature (τ): 2.0000" in text
        assert text.count("P= 0.333") == 3


class TestTrend:
    def test_one_sparkline_per_run(self, results):
        lines = format_latency_trend(results, buckets=4).splitlines()

        assert len(lines) == 3
        assert "avg=55.0ms" in lines[1]
        assert lines[1].count("█") >= 1

    def test_skips_empty_runs(self):
        text = format_latency_trend([MetricsCollector("Empty", 20.0)], buckets=4)
        assert "Empty" not in text


class TestImprovement:
    def test_improvement_percent(self, results):
        rr, sm = results
        assert improvement_percent(sm, rr) == pytest.approx((55.0 - 22.0) / 55.0 * 100)

    def test_zero_baseline(self):
        assert improvement_percent(make_metrics("a", [1.0]), MetricsCollector("b", 20.0)) == 0.0

    def test_format(self, results):
        rr, sm = results
        text = format_improvement(sm, [rr])

        assert "+60.0% mean latency improvement" in text
        assert "less total wait time" in text
