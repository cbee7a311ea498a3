"""
Tests for simulation configuration
Run with: pytest tests/test_sim_config.py -v
"""

import dataclasses

import pytest

from nfl_edge.core.sim_config import DEFAULT_ITERATIONS, SimulationConfig


class TestDefaults:

    def test_nfl_defaults(self):
        cfg = SimulationConfig.nfl()
        assert cfg.iterations == DEFAULT_ITERATIONS == 10_000
        assert cfg.regression_factor == 0.80
        assert cfg.home_field_advantage == 1.03
        assert cfg.chaos_probability == 0.15
        assert (cfg.min_possessions, cfg.max_possessions) == (8, 15)
        cfg.validate()

    def test_frozen(self):
        cfg = SimulationConfig.nfl()
        with pytest.raises(dataclasses.FrozenInstanceError):
            cfg.iterations = 5

    def test_neutral_site(self):
        cfg = SimulationConfig.nfl().neutral_site()
        assert cfg.home_field_advantage == 1.0
        assert cfg.home_field_jitter == 0.0
        assert cfg.chaos_probability == 0.15


class TestValidation:

    @pytest.mark.parametrize("changes", [
        {"iterations": 0},
        {"regression_factor": 1.5},
        {"advantage_floor": 0.8},
        {"min_possessions": 20},
        {"chaos_probability": -0.1},
        {"game_day_variance": 2.0},
        {"home_field_advantage": 0.0},
    ])
    def test_invalid_settings_raise(self, changes):
        with pytest.raises(ValueError):
            dataclasses.replace(SimulationConfig.nfl(), **changes).validate()


class TestFromEnv:

    def test_overrides_applied(self, monkeypatch):
        monkeypatch.setenv("SIM_ITERATIONS", "2500")
        monkeypatch.setenv("SIM_CHAOS_PROBABILITY", "0.2")
        cfg = SimulationConfig.from_env()
        assert cfg.iterations == 2500
        assert cfg.chaos_probability == 0.2

    def test_unparseable_value_ignored(self, monkeypatch):
        monkeypatch.setenv("SIM_HOME_FIELD_ADVANTAGE", "lots")
        assert SimulationConfig.from_env().home_field_advantage == 1.03

    def test_blank_value_ignored(self, monkeypatch):
        monkeypatch.setenv("SIM_ITERATIONS", "  ")
        assert SimulationConfig.from_env().iterations == DEFAULT_ITERATIONS

    def test_invalid_override_raises(self, monkeypatch):
        monkeypatch.setenv("SIM_REGRESSION_FACTOR", "3")
        with pytest.raises(ValueError, match="regression_factor"):
            SimulationConfig.from_env()

    def test_base_config_respected(self, monkeypatch):
        monkeypatch.delenv("SIM_ITERATIONS", raising=False)
        base = SimulationConfig.nfl().neutral_site()
        assert SimulationConfig.from_env(base).home_field_advantage == 1.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
