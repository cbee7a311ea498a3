"""
Tests for weather adjustments
Run with: pytest tests/test_weather.py -v
"""

from dataclasses import replace

import pytest

from nfl_edge.core.sim_interface import MatchupStrengths, TeamStatisticalProfile
from nfl_edge.services.weather import (
    GameWeather,
    apply_weather_adjustments,
    rate_weather_impact,
    weather_adjusted_strengths,
)


@pytest.fixture
def team():
    return TeamStatisticalProfile.league_average("Green Bay Packers")


class TestImpactRating:

    def test_calm_day_is_none(self):
        assert GameWeather().impact_rating == "none"

    def test_dome_is_none_regardless(self):
        assert GameWeather(temperature=5, wind_speed=40, condition="Snow", is_dome=True).impact_rating == "none"

    @pytest.mark.parametrize("temp, wind, precip, condition, expected", [
        (65, 22, 0, "Clear", "medium"),
        (10, 25, 80, "Snow", "extreme"),
        (30, 15, 0, "Clear", "medium"),
        (45, 10, 0, "Clear", "low"),
        (35, 20, 70, "Rain", "high"),
        (100, 0, 0, "Clear", "low"),
    ])
    def test_buckets(self, temp, wind, precip, condition, expected):
        assert rate_weather_impact(temp, wind, precip, condition) == expected

    def test_explicit_rating_kept(self):
        assert GameWeather(impact_rating="high").impact_rating == "high"

    def test_unknown_rating_rejected(self):
        with pytest.raises(ValueError, match="impact_rating"):
            GameWeather(impact_rating="apocalyptic")


class TestAdjustments:

    def test_no_weather_unchanged(self, team):
        adj = apply_weather_adjustments(None, 40.0, 30.0, team)
        assert (adj.offensive_strength, adj.defensive_strength) == (40.0, 30.0)
        assert adj.explanation == "No weather impact"

    def test_dome_unchanged(self, team):
        dome = GameWeather(wind_speed=30, is_dome=True)
        adj = apply_weather_adjustments(dome, 40.0, 30.0, team)
        assert (adj.offensive_strength, adj.defensive_strength) == (40.0, 30.0)

    def test_high_wind(self, team):
        adj = apply_weather_adjustments(GameWeather(wind_speed=22), 40.0, 30.0, team)
        assert adj.passing_modifier == pytest.approx(0.65)
        assert adj.rushing_modifier == pytest.approx(1.10)
        assert adj.offensive_strength < 40.0
        assert adj.defensive_strength > 30.0
        assert "High winds (22mph)" in adj.explanation

    def test_snow_and_extreme_cold_stack(self, team):
        adj = apply_weather_adjustments(GameWeather(temperature=10, condition="Snow"), 40.0, 30.0, team)
        assert adj.passing_modifier == pytest.approx(0.6375)
        assert adj.rushing_modifier == pytest.approx(0.855)

    def test_defense_gains_thirty_percent_of_offense_loss(self, team):
        adj = apply_weather_adjustments(GameWeather(wind_speed=22), 40.0, 30.0, team)
        off_mod = adj.offensive_strength / 40.0
        assert adj.defensive_strength == pytest.approx(30.0 * (1 + (1 - off_mod) * 0.3))

    def test_run_heavy_team_loses_less(self, team):
        gale = GameWeather(wind_speed=22)
        ground = replace(team, passing_yards=150.0, rushing_yards=180.0)
        air = replace(team, passing_yards=300.0, rushing_yards=80.0)
        ground_adj = apply_weather_adjustments(gale, 40.0, 30.0, ground)
        air_adj = apply_weather_adjustments(gale, 40.0, 30.0, air)
        assert ground_adj.offensive_strength > air_adj.offensive_strength

    def test_no_yardage_uses_even_mix(self, team):
        empty = replace(team, passing_yards=0.0, rushing_yards=0.0)
        adj = apply_weather_adjustments(GameWeather(wind_speed=22), 40.0, 30.0, empty)
        assert adj.offensive_strength == pytest.approx(40.0 * (0.65 + 1.10) / 2)


class TestMatchupAdjustment:

    def test_dome_strengths_equal_input(self, team):
        base = MatchupStrengths(30.0, 25.0, 28.0, 22.0)
        assert weather_adjusted_strengths(GameWeather(is_dome=True), base, team, team) == base

    def test_both_offenses_suffer_in_blizzard(self, team):
        base = MatchupStrengths(30.0, 25.0, 28.0, 22.0)
        blizzard = GameWeather(temperature=15, wind_speed=26, condition="Snow")
        out = weather_adjusted_strengths(blizzard, base, team, team)
        assert out.home_offense < base.home_offense
        assert out.away_offense < base.away_offense
        assert out.home_defense > base.home_defense
        assert out.away_defense > base.away_defense

    def test_defense_bonus_follows_opposing_offense(self, team):
        gale = GameWeather(wind_speed=22)
        air_raid = replace(team, team="Home", passing_yards=320.0, rushing_yards=60.0)
        ground = replace(team, team="Away", passing_yards=120.0, rushing_yards=200.0)
        base = MatchupStrengths(home_offense=30.0, home_defense=25.0, away_offense=30.0, away_defense=25.0)
        out = weather_adjusted_strengths(gale, base, air_raid, ground)

        assert out.away_defense == pytest.approx(
            apply_weather_adjustments(gale, 30.0, 25.0, air_raid).defensive_strength
        )
        assert out.home_defense == pytest.approx(
            apply_weather_adjustments(gale, 30.0, 25.0, ground).defensive_strength
        )
        # the defense facing the pass-heavy offense gains more from the wind
        assert out.away_defense > out.home_defense


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
