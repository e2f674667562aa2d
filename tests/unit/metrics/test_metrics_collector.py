"""Tests for MetricsCollector."""

import math
import statistics

import pytest

from lbsim.metrics.collector import MetricsCollector


def collector_with(latencies, optimal=20.0, window=100, selections=None) -> MetricsCollector:
    metrics = MetricsCollector("test", optimal_latency=optimal, window_size=window)
    selections = selections or [0] * len(latencies)
    for index, latency in zip(selections, latencies):
        metrics.record(index, latency)
    return metrics


class TestEmptyCollector:
    """Every accessor returns 0 before anything is recorded."""

    def test_empty_accessors(self):
        metrics = MetricsCollector("empty", optimal_latency=20.0, window_size=10)

        assert metrics.total_requests == 0
        assert metrics.mean_latency() == 0.0
        assert metrics.percentile(50) == 0.0
        assert metrics.min_latency() == 0.0
        assert metrics.max_latency() == 0.0
        assert metrics.std_dev() == 0.0
        assert metrics.rolling_average() == 0.0
        assert metrics.cumulative_regret == 0.0
        assert metrics.latencies == []
        assert metrics.selections == []
        assert metrics.latency_trend(5) == []

    def test_rejects_non_positive_window(self):
        with pytest.raises(ValueError, match="must be positive"):
            MetricsCollector("bad", optimal_latency=20.0, window_size=0)


class TestRecord:
    """Tests for record()."""

    def test_sequences_stay_parallel(self):
        metrics = collector_with([30.0, 10.0, 55.0], selections=[2, 0, 1])

        assert metrics.latencies == [30.0, 10.0, 55.0]
        assert metrics.selections == [2, 0, 1]
        assert len(metrics.latencies) == len(metrics.selections) == metrics.total_requests

    def test_regret_ignores_better_than_optimal(self):
        metrics = collector_with([10.0, 20.0, 25.0, 50.0], optimal=20.0)

        assert metrics.cumulative_regret == pytest.approx(0.0 + 0.0 + 5.0 + 30.0)

    def test_regret_matches_independent_recomputation(self):
        latencies = [1.0 + (i * 37 % 113) for i in range(500)]
        metrics = collector_with(latencies, optimal=20.0)

        expected = sum(max(0.0, v - 20.0) for v in metrics.latencies)

        assert metrics.cumulative_regret == pytest.approx(expected)

    def test_accessors_return_copies(self):
        metrics = collector_with([1.0, 2.0])

        metrics.latencies.append(99.0)
        metrics.selections.append(7)

        assert metrics.total_requests == 2


class TestAggregations:
    """Tests for summary statistics."""

    def test_mean_min_max(self):
        metrics = collector_with([4.0, 8.0, 6.0, 2.0])

        assert metrics.mean_latency() == pytest.approx(5.0)
        assert metrics.min_latency() == 2.0
        assert metrics.max_latency() == 8.0

    def test_std_dev_is_population(self):
        values = [2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]
        metrics = collector_with(values)

        assert metrics.std_dev() == pytest.approx(2.0)
        assert metrics.std_dev() == pytest.approx(statistics.pstdev(values))

    def test_single_sample_std_dev_is_zero(self):
        assert collector_with([12.0]).std_dev() == 0.0

    def test_percentile_nearest_rank(self):
        """p-th percentile is the ceil(p/100 * n)-th smallest value."""
        metrics = collector_with([float(v) for v in range(20, 0, -1)])

        assert metrics.percentile(50) == 10.0
        assert metrics.percentile(95) == 19.0
        assert metrics.percentile(99) == 20.0
        assert metrics.percentile(100) == 20.0

    def test_percentile_clamps_low_ranks(self):
        metrics = collector_with([5.0, 1.0, 3.0])

        assert metrics.percentile(0) == 1.0
        assert metrics.percentile(1) == 1.0

    def test_percentile_does_not_interpolate(self):
        metrics = collector_with([10.0, 20.0])

        assert metrics.percentile(50) == 10.0
        assert metrics.percentile(51) == 20.0

    def test_percentile_matches_definition(self):
        latencies = [float((i * 7919) % 1000) for i in range(1, 301)]
        metrics = collector_with(latencies)
        ordered = sorted(latencies)

        for p in [1, 10, 25, 50, 75, 90, 95, 99]:
            rank = math.ceil(p / 100 * len(ordered))
            assert metrics.percentile(p) == ordered[rank - 1]

    def test_percentile_leaves_recorded_order(self):
        metrics = collector_with([3.0, 1.0, 2.0])
        metrics.percentile(50)
        assert metrics.latencies == [3.0, 1.0, 2.0]


class TestRollingWindow:
    """Tests for the bounded rolling average."""

    def test_partial_window(self):
        metrics = collector_with([10.0, 20.0], window=5)
        assert metrics.rolling_average() == pytest.approx(15.0)

    def test_evicts_oldest(self):
        metrics = collector_with([100.0, 1.0, 2.0, 3.0], window=3)

        assert metrics.rolling_average() == pytest.approx(2.0)
        assert metrics.mean_latency() == pytest.approx(26.5)


class TestSelectionCounts:
    def test_histogram(self):
        metrics = collector_with([1.0] * 6, selections=[0, 2, 2, 1, 2, 0])
        assert metrics.selection_counts(3) == [2, 1, 3]

    def test_ignores_out_of_range_indices(self):
        metrics = collector_with([1.0] * 3, selections=[0, 4, 1])
        assert metrics.selection_counts(2) == [1, 1]


class TestLatencyTrend:
    def test_bucket_means(self):
        metrics = collector_with([1.0, 3.0, 5.0, 7.0, 9.0, 11.0])
        assert metrics.latency_trend(3) == pytest.approx([2.0, 6.0, 10.0])

    def test_more_buckets_than_samples(self):
        metrics = collector_with([4.0, 8.0])
        assert metrics.latency_trend(4) == pytest.approx([4.0, 8.0, 0.0, 0.0])

    def test_rejects_non_positive_buckets(self):
        with pytest.raises(ValueError):
            collector_with([1.0]).latency_trend(0)


class TestSummaryAndFrame:
    def test_summary_fields(self):
        metrics = collector_with([10.0, 30.0, 50.0], optimal=20.0)

        summary = metrics.summary()

        assert summary.algorithm_name == "test"
        assert summary.count == 3
        assert summary.mean == pytest.approx(30.0)
        assert summary.p50 == 30.0
        assert summary.cumulative_regret == pytest.approx(40.0)
        assert summary.to_dict()["count"] == 3
        assert "Cumulative regret: 40.00ms" in str(summary)

    def test_to_dataframe(self):
        metrics = collector_with([10.0, 30.0], optimal=20.0, selections=[1, 0])

        df = metrics.to_dataframe()

        assert list(df.columns) == ["request", "backend", "latency", "regret"]
        assert df["backend"].tolist() == [1, 0]
        assert df["regret"].tolist() == [0.0, 10.0]
        assert df["regret"].sum() == pytest.approx(metrics.cumulative_regret)
