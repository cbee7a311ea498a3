"""Shared fixtures for the simulation tests."""

import pytest

from nfl_edge.core.sim_interface import TeamStatisticalProfile


class ScriptedRandom:
    """Random source that replays a fixed sequence of draws."""

    def __init__(self, draws):
        self._draws = list(draws)
        self.consumed = 0

    def random(self) -> float:
        if self.consumed >= len(self._draws):
            raise AssertionError(f"ScriptedRandom exhausted after {self.consumed} draws")
        value = self._draws[self.consumed]
        self.consumed += 1
        return value


@pytest.fixture
def scripted():
    return ScriptedRandom


@pytest.fixture
def home_team():
    return TeamStatisticalProfile.league_average("Kansas City Chiefs")


@pytest.fixture
def away_team():
    return TeamStatisticalProfile.league_average("Buffalo Bills")
