"""Tests for experiment configuration dataclasses."""

import dataclasses

import pytest

from lbsim.config import DEFAULT_CLUSTER, BackendSpec, SimulationConfig, SoftmaxConfig


class TestSoftmaxConfig:
    def test_defaults(self):
        config = SoftmaxConfig()

        assert config.initial_temperature == 2.0
        assert config.min_temperature == 0.1
        assert config.decay_rate == 0.001
        assert config.learning_rate == 0.15

    def test_is_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            SoftmaxConfig().learning_rate = 0.5

    def test_rejects_floor_at_or_above_initial(self):
        with pytest.raises(ValueError, match="below"):
            SoftmaxConfig(initial_temperature=1.0, min_temperature=2.0)

    def test_rejects_learning_rate_out_of_range(self):
        with pytest.raises(ValueError, match="learning_rate"):
            SoftmaxConfig(learning_rate=-0.1)


class TestClusterTable:
    def test_default_cluster(self):
        assert [spec.base_latency for spec in DEFAULT_CLUSTER] == [20.0, 50.0, 80.0, 35.0, 100.0]

    def test_rejects_non_positive_base_latency(self):
        with pytest.raises(ValueError, match="base_latency"):
            BackendSpec(0.0, 1.0, 0.1, 1.0)


class TestSimulationConfig:
    def test_defaults(self):
        config = SimulationConfig()

        assert config.server_count == 5
        assert config.total_requests == 2000
        assert config.enable_shocks is True
        assert config.shock_interval == 400
        assert config.shock_factor == 1.5
        assert config.optimal_latency == 20.0
        assert config.window_size == 100
        assert config.shock_seed == 7
        assert config.cluster == DEFAULT_CLUSTER
