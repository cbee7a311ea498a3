"""
Tests for offensive/defensive strength ratings and relative advantage.
Run with: pytest tests/test_strength.py -v
"""

from dataclasses import replace

import pytest

from nfl_edge.core.sim_config import SimulationConfig
from nfl_edge.core.sim_interface import TeamStatisticalProfile
from nfl_edge.core import strength
from nfl_edge.core.strength import (
    defensive_strength,
    matchup_strengths,
    offensive_strength,
    relative_advantage,
)


@pytest.fixture
def average():
    return TeamStatisticalProfile.league_average("Average")


@pytest.fixture
def zeros():
    return TeamStatisticalProfile.from_record({}, team="Empty")


class TestOffensiveStrength:
    """Weighted offensive rating on [0, 100]"""

    def test_league_average_value(self, average):
        # 0.4*23.537 + 0.3*16.145 + 0.2*68.92 + 0.1*(-6.3) - 58.4/30
        assert offensive_strength(average) == pytest.approx(25.466, abs=0.01)

    def test_all_zero_stats_rate_zero(self, zeros):
        assert offensive_strength(zeros) == 0.0

    def test_elite_offense_clamped_to_100(self, average):
        elite = replace(
            average,
            passing_yards=900.0,
            passing_tds=60.0,
            red_zone_efficiency=100.0,
            third_down_conversion_rate=100.0,
            yards_per_play=30.0,
        )
        assert offensive_strength(elite) == 100.0

    def test_turnovers_and_penalties_lower_rating(self, average):
        sloppy = replace(average, turnovers_lost=3.0, penalty_yards=120.0)
        assert offensive_strength(sloppy) < offensive_strength(average)

    def test_non_finite_input_does_not_propagate(self, average):
        broken = replace(average, passing_yards=float("inf"))
        value = offensive_strength(broken)
        assert 0.0 <= value <= 100.0

    def test_weights_come_from_config(self, average):
        no_passing = replace(SimulationConfig.nfl(), passing_weight=0.0)
        assert offensive_strength(average, no_passing) < offensive_strength(average)


class TestDefensiveStrength:
    """Defensive rating starts at 50 and is pulled down by what it allows"""

    def test_league_average_value(self, average):
        assert defensive_strength(average) == pytest.approx(23.963, abs=0.01)

    def test_all_zero_stats_rate_baseline(self, zeros):
        assert defensive_strength(zeros) == 50.0

    def test_porous_defense_clamped_to_zero(self, average):
        porous = replace(average, points_allowed_per_game=80.0, def_passing_yards_allowed=500.0)
        assert defensive_strength(porous) == 0.0

    def test_takeaways_raise_rating(self, average):
        ballhawk = replace(average, turnovers_forced=3.0, def_interceptions=2.0)
        assert defensive_strength(ballhawk) > defensive_strength(average)


class TestCoefficientTables:
    """Per-statistic coefficients are named tables over profile fields"""

    TABLES = [
        strength.PASSING_TERMS, strength.RUSHING_TERMS, strength.OVERALL_TERMS,
        strength.TURNOVER_TERMS, strength.PASS_DEFENSE_TERMS,
        strength.RUSH_DEFENSE_TERMS, strength.OVERALL_DEFENSE_TERMS,
    ]

    @pytest.mark.parametrize("terms", TABLES)
    def test_fields_exist_on_profile(self, average, terms):
        for name, _ in terms:
            assert isinstance(getattr(average, name), float)

    def test_yardage_scales(self):
        assert dict(strength.PASSING_TERMS)["passing_yards"] == pytest.approx(0.008)
        assert dict(strength.RUSHING_TERMS)["rushing_yards"] == pytest.approx(0.01)
        assert dict(strength.RUSH_DEFENSE_TERMS)["def_rushing_yards_allowed"] == pytest.approx(-1 / 60)

    def test_rating_follows_table(self, average, monkeypatch):
        base = offensive_strength(average)
        boosted = tuple((n, c * 2 if n == "passing_tds" else c) for n, c in strength.PASSING_TERMS)
        monkeypatch.setattr(strength, "PASSING_TERMS", boosted)
        assert offensive_strength(average) > base

class TestRelativeAdvantage:
    """off / (off + def), regressed 20% toward 0.5, clamped to [0.3, 0.7]"""

    def test_equal_strengths_are_even(self):
        assert relative_advantage(40.0, 40.0) == 0.5

    def test_both_zero_is_even(self):
        assert relative_advantage(0.0, 0.0) == 0.5

    def test_regression_toward_half(self):
        # raw = 0.6 -> 0.5 + 0.1 * 0.8 = 0.58
        assert relative_advantage(60.0, 40.0) == pytest.approx(0.58)

    @pytest.mark.parametrize("off, de", [(100.0, 0.0), (0.0, 100.0), (95.0, 5.0), (1.0, 99.0)])
    def test_bounded(self, off, de):
        adv = relative_advantage(off, de)
        assert 0.30 <= adv <= 0.70

    def test_extremes_hit_clamps(self):
        assert relative_advantage(100.0, 0.0) == pytest.approx(0.70)
        assert relative_advantage(0.0, 100.0) == pytest.approx(0.30)

    def test_monotonic_in_offense(self):
        values = [relative_advantage(off, 30.0) for off in (10.0, 20.0, 30.0, 40.0, 50.0)]
        assert values == sorted(values)

    def test_no_regression_keeps_raw(self):
        assert relative_advantage(60.0, 40.0, regression_factor=1.0) == pytest.approx(0.6)


class TestMatchupStrengths:

    def test_evaluates_all_four(self, average):
        strong = replace(average, team="Strong", points_per_game=30.0, passing_tds=2.5)
        s = matchup_strengths(strong, average)
        assert s.home_offense == pytest.approx(offensive_strength(strong))
        assert s.away_offense == pytest.approx(offensive_strength(average))
        assert s.home_defense == pytest.approx(defensive_strength(strong))
        assert s.away_defense == pytest.approx(defensive_strength(average))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
