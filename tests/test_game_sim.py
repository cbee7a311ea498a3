"""
Tests for the full-game simulator
Run with: pytest tests/test_game_sim.py -v
"""

from dataclasses import replace

import numpy as np
import pytest

from nfl_edge.core.sim_config import SimulationConfig
from nfl_edge.core.sim_interface import MatchupStrengths
from nfl_edge.services.game_sim import GameSimulator, round_half_up


class TestGameBasics:

    def test_scores_are_non_negative_ints(self, home_team, away_team):
        sim = GameSimulator()
        rng = np.random.default_rng(42)
        for _ in range(200):
            home, away = sim.simulate_game(home_team, away_team, rng)
            assert isinstance(home, int) and isinstance(away, int)
            assert home >= 0 and away >= 0

    def test_seeded_games_are_reproducible(self, home_team, away_team):
        sim = GameSimulator()
        a = [sim.simulate_game(home_team, away_team, np.random.default_rng(5)) for _ in range(3)]
        assert a[0] == a[1] == a[2]

    def test_scores_are_realistic(self, home_team, away_team):
        # League-average teams: each side should average roughly 18-28 points
        sim = GameSimulator()
        rng = np.random.default_rng(3)
        games = [sim.simulate_game(home_team, away_team, rng) for _ in range(2000)]
        home_avg = np.mean([g[0] for g in games])
        away_avg = np.mean([g[1] for g in games])
        assert 18 < home_avg < 28
        assert 18 < away_avg < 28

    def test_home_field_advantage_shows_up(self, home_team, away_team):
        sim = GameSimulator()
        rng = np.random.default_rng(8)
        margins = [h - a for h, a in (sim.simulate_game(home_team, away_team, rng) for _ in range(6000))]
        assert np.mean(margins) > 0


class TestPossessionCount:
    """round(home*0.55 + away*0.45) + jitter in [-2, 2], clamped to [8, 15]"""

    def test_middle_jitter_keeps_base(self, scripted, home_team, away_team):
        assert GameSimulator().possession_count(home_team, away_team, scripted([0.5])) == 11

    @pytest.mark.parametrize("draw, expected", [(0.0, 9), (0.999, 13)])
    def test_jitter_extremes(self, scripted, home_team, away_team, draw, expected):
        assert GameSimulator().possession_count(home_team, away_team, scripted([draw])) == expected

    def test_clamped_high(self, scripted, home_team, away_team):
        fast = replace(home_team, drives_per_game=30.0)
        assert GameSimulator().possession_count(fast, fast, scripted([0.999])) == 15

    def test_clamped_low(self, scripted, home_team):
        stalled = replace(home_team, drives_per_game=0.0)
        assert GameSimulator().possession_count(stalled, stalled, scripted([0.0])) == 8


class TestGameDayVariance:

    def test_varied_strengths_stay_in_bounds(self):
        sim = GameSimulator()
        rng = np.random.default_rng(0)
        base = MatchupStrengths(100.0, 0.0, 95.0, 2.0)
        for _ in range(500):
            form = sim.game_day_strengths(base, rng)
            for value in form:
                assert 10.0 <= value <= 90.0

    def test_swing_limited_to_fifteen_percent(self):
        sim = GameSimulator()
        rng = np.random.default_rng(1)
        base = MatchupStrengths(40.0, 40.0, 40.0, 40.0)
        for _ in range(500):
            for value in sim.game_day_strengths(base, rng):
                assert 34.0 - 1e-9 <= value <= 46.0 + 1e-9

    def test_variance_multiplier_widens_swing(self, scripted):
        sim = GameSimulator()
        base = MatchupStrengths(40.0, 40.0, 40.0, 40.0)
        form = sim.game_day_strengths(base, scripted([1.0, 1.0, 1.0, 1.0]), 1.5, 1.0)
        assert form.home_offense == pytest.approx(40.0 + 40.0 * 0.15 * 1.5)
        assert form.away_offense == pytest.approx(40.0 + 40.0 * 0.15)


class TestChaos:

    def test_chaos_only_game_scores_two_or_seven(self, home_team, away_team):
        # Scoring blend zeroed: possessions never score, so all points come
        # from the always-on chaos event.
        cfg = replace(
            SimulationConfig.nfl(),
            advantage_weight=0.0,
            efficiency_weight=0.0,
            chaos_probability=1.0,
        )
        sim = GameSimulator(cfg)
        rng = np.random.default_rng(21)
        totals = set()
        for _ in range(200):
            home, away = sim.simulate_game(home_team, away_team, rng)
            assert min(home, away) == 0
            totals.add(home + away)
        assert totals == {2, 7}

    def test_no_chaos_no_scoring_is_shutout(self, home_team, away_team):
        cfg = replace(
            SimulationConfig.nfl(),
            advantage_weight=0.0,
            efficiency_weight=0.0,
            chaos_probability=0.0,
        )
        rng = np.random.default_rng(4)
        assert GameSimulator(cfg).simulate_game(home_team, away_team, rng) == (0, 0)


class TestRounding:

    @pytest.mark.parametrize("value, expected", [(20.5, 21), (20.49, 20), (0.0, 0), (7.21, 7)])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
