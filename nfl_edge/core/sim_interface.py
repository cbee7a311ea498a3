"""Data-transfer types shared by every stage of the simulation pipeline.

This module defines the contracts between the strength evaluator, the
possession and game simulators and the Monte Carlo aggregator:

* :class:`RandomSource` — the only source of randomness.  Every stochastic
  function takes one explicitly; nothing reads global RNG state.  A
  ``numpy.random.Generator`` satisfies the protocol, and tests can inject a
  scripted sequence.
* :class:`TeamStatisticalProfile` — per-game season averages for one team.
  Frozen and slotted: adjustments (injuries) produce a new instance via
  :func:`dataclasses.replace`.
* :class:`MatchupStrengths` — the four 0-100 strength ratings for a game.
* :class:`SimulationResult` — the aggregated output of a Monte Carlo run.

Design choices
--------------
* Missing or malformed statistics are handled **once**, at construction
  (:meth:`TeamStatisticalProfile.from_record`).  Downstream code can assume
  every field is a finite float and never needs ``None`` guards.
* :class:`RandomSource` is a ``typing.Protocol`` rather than an ABC so
  ``numpy.random.Generator`` and ``random.Random`` fit without wrapping.

Run tests with::

    pytest tests/test_profiles.py tests/test_monte_carlo.py -v
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields
from typing import Any, Mapping, NamedTuple, Protocol

from scipy.stats import norm

from nfl_edge.core.odds_math import clamp, safe_div


# ---------------------------------------------------------------------------
# Randomness
# ---------------------------------------------------------------------------


class RandomSource(Protocol):
    """Anything exposing ``random() -> float`` uniform on ``[0, 1)``."""

    def random(self) -> float: ...


def draw_uniform(rng: RandomSource, low: float, high: float) -> float:
    """Draw from ``U[low, high)`` using only ``rng.random()``."""
    return low + (high - low) * float(rng.random())


# ---------------------------------------------------------------------------
# Team profile
# ---------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class TeamStatisticalProfile:
    """Per-game season statistics for one team.

    Every numeric field defaults to the 2024 NFL league average, so
    ``TeamStatisticalProfile(team="X")`` is a league-average team.  Rates
    are per game; percentages are on a 0-100 scale.  The engine never
    divides by ``games_played``.
    """

    # Identity
    team: str = ""
    games_played: float = 17.0

    # Basic offense / defense
    offensive_yards_per_game: float = 345.2
    points_per_game: float = 22.8
    points_allowed_per_game: float = 22.8
    defensive_yards_allowed: float = 345.2
    turnover_differential: float = 0.0

    # Efficiency rates (0-100)
    third_down_conversion_rate: float = 39.5
    red_zone_efficiency: float = 55.2

    # Passing offense
    pass_completions: float = 21.6
    pass_attempts: float = 32.7
    pass_completion_pct: float = 66.1
    passing_yards: float = 228.4
    passing_tds: float = 1.6
    interceptions_thrown: float = 0.7
    yards_per_pass_attempt: float = 7.0

    # Rushing offense
    rushing_attempts: float = 26.3
    rushing_yards: float = 114.5
    rushing_tds: float = 0.9
    yards_per_rush: float = 4.4

    # Overall offense
    total_plays: float = 61.2
    yards_per_play: float = 5.4
    first_downs: float = 19.6

    # Discipline
    penalties: float = 7.3
    penalty_yards: float = 58.4

    # Ball security
    turnovers_lost: float = 1.2
    fumbles_lost: float = 0.5

    # Passing defense
    def_pass_completions_allowed: float = 21.6
    def_pass_attempts: float = 32.7
    def_passing_yards_allowed: float = 228.4
    def_passing_tds_allowed: float = 1.6
    def_net_yards_per_pass: float = 7.0
    def_interceptions: float = 0.7

    # Rushing defense
    def_rushing_attempts_allowed: float = 26.3
    def_rushing_yards_allowed: float = 114.5
    def_rushing_tds_allowed: float = 0.9
    def_yards_per_rush_allowed: float = 4.4

    # Overall defense
    def_total_plays: float = 61.2
    def_yards_per_play_allowed: float = 5.4
    def_first_downs_allowed: float = 19.6

    # Takeaways
    turnovers_forced: float = 1.2
    fumbles_forced: float = 0.5

    # Drives
    drives_per_game: float = 11.0

    # ------------------------------------------------------------------ #
    #  Construction                                                        #
    # ------------------------------------------------------------------ #

    @classmethod
    def league_average(cls, team: str = "") -> TeamStatisticalProfile:
        """Return the league-average profile labelled *team*."""
        return cls(team=team)

    @classmethod
    def stat_fields(cls) -> tuple[str, ...]:
        """Names of every numeric field (everything but ``team``)."""
        return tuple(f.name for f in fields(cls) if f.name != "team")

    @classmethod
    def from_record(
        cls,
        record: Mapping[str, Any],
        *,
        team: str | None = None,
        use_league_defaults: bool = False,
    ) -> TeamStatisticalProfile:
        """Build a profile from a loosely-typed mapping.

        Keys may be snake_case field names, their camelCase equivalents, or
        the stats-table column names listed in :data:`FIELD_ALIASES`.
        Absent, ``None``, non-numeric and non-finite values become ``0.0``,
        or the league-average default when *use_league_defaults* is set.

        Derived rates (yards per attempt, completion %, yards per rush,
        yards per play) are computed from their inputs when the rate itself
        is missing.
        """
        values, _ = parse_record(record)
        return cls.from_values(
            values,
            team=team if team is not None else _team_name(record),
            use_league_defaults=use_league_defaults,
        )

    @classmethod
    def from_values(
        cls,
        values: Mapping[str, float],
        *,
        team: str,
        use_league_defaults: bool,
    ) -> TeamStatisticalProfile:
        resolved = dict(values)
        for name, (num, den, scale) in _DERIVED_RATES.items():
            if name in resolved:
                continue
            if num in resolved and den in resolved and resolved[den] > 0:
                resolved[name] = safe_div(resolved[num], resolved[den]) * scale

        defaults = _LEAGUE_DEFAULTS
        kwargs: dict[str, Any] = {"team": team}
        for name in cls.stat_fields():
            if name in resolved:
                kwargs[name] = resolved[name]
            else:
                kwargs[name] = defaults[name] if use_league_defaults else 0.0
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# Derived rate → (numerator, denominator, scale)
_DERIVED_RATES: dict[str, tuple[str, str, float]] = {
    "yards_per_pass_attempt": ("passing_yards", "pass_attempts", 1.0),
    "pass_completion_pct": ("pass_completions", "pass_attempts", 100.0),
    "yards_per_rush": ("rushing_yards", "rushing_attempts", 1.0),
    "yards_per_play": ("offensive_yards_per_game", "total_plays", 1.0),
    "def_yards_per_rush_allowed": (
        "def_rushing_yards_allowed", "def_rushing_attempts_allowed", 1.0,
    ),
    "def_net_yards_per_pass": ("def_passing_yards_allowed", "def_pass_attempts", 1.0),
    "def_yards_per_play_allowed": ("defensive_yards_allowed", "def_total_plays", 1.0),
}

#: Stats-table column names and other spellings seen in upstream feeds.
FIELD_ALIASES: dict[str, str] = {
    "passing_yards_per_game": "passing_yards",
    "rushing_yards_per_game": "rushing_yards",
    "yards_per_game": "offensive_yards_per_game",
    "yards_allowed_per_game": "defensive_yards_allowed",
    "yards_per_play_allowed": "def_yards_per_play_allowed",
    "third_down_pct": "third_down_conversion_rate",
    "third_down_percentage": "third_down_conversion_rate",
    "red_zone_pct": "red_zone_efficiency",
    "red_zone_scoring_pct": "red_zone_efficiency",
    "completion_pct": "pass_completion_pct",
    "points_allowed": "points_allowed_per_game",
    "interceptions": "interceptions_thrown",
    "takeaways": "turnovers_forced",
    "giveaways": "turnovers_lost",
    "def_net_yards_per_pass_attempt": "def_net_yards_per_pass",
    "def_yards_per_rush": "def_yards_per_rush_allowed",
}


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _build_key_index() -> dict[str, str]:
    index: dict[str, str] = {}
    for name in TeamStatisticalProfile.stat_fields():
        index[name] = name
        index[_camel(name)] = name
    for alias, target in FIELD_ALIASES.items():
        index.setdefault(alias, target)
        index.setdefault(_camel(alias), target)
    return index


_KEY_INDEX: dict[str, str] = _build_key_index()

_LEAGUE_DEFAULTS: dict[str, float] = {
    f.name: f.default
    for f in fields(TeamStatisticalProfile)
    if f.name != "team"
}


def coerce_number(value: Any) -> float | None:
    """Return *value* as a finite float, or ``None`` if it is not one.

    Accepts ints, floats and numeric strings (a trailing ``%`` is allowed).
    Booleans are rejected: a ``True`` in a stats column is a data error.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = value.strip().rstrip("%").replace(",", "")
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def parse_record(record: Mapping[str, Any]) -> tuple[dict[str, float], list[str]]:
    """Map a raw record onto field names.

    Returns:
        ``(values, rejected)`` — the clean numeric values keyed by field
        name, and the field names whose raw values were present but not
        usable numbers.
    """
    values: dict[str, float] = {}
    rejected: list[str] = []
    for key, raw in record.items():
        name = _KEY_INDEX.get(str(key))
        if name is None:
            continue
        number = coerce_number(raw)
        if number is None:
            if raw is not None:
                rejected.append(name)
            continue
        # A canonical key wins over an alias for the same field.
        if name in values and key != name:
            continue
        values[name] = number
    return values, rejected


def _team_name(record: Mapping[str, Any]) -> str:
    for key in ("team", "team_name", "teamName", "name"):
        val = record.get(key)
        if isinstance(val, str) and val:
            return val
    return ""


# ---------------------------------------------------------------------------
# Strengths
# ---------------------------------------------------------------------------


class MatchupStrengths(NamedTuple):
    """The four 0-100 strength ratings of a game."""

    home_offense: float
    home_defense: float
    away_offense: float
    away_defense: float


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


@dataclass(slots=True, frozen=True)
class SimulationResult:
    """Aggregated Monte Carlo output for one matchup.

    All probabilities are percentages in ``[0, 100]``.  The favourite /
    underdog cover pair and the over / under pair each sum to exactly 100;
    home + away + tie sums to 100.

    Attributes:
        predicted_home_score: Rounded mean home score.
        predicted_away_score: Rounded mean away score.
        home_win_probability: % of iterations the home team won outright.
        away_win_probability: % of iterations the away team won outright.
        tie_probability: % of iterations that ended level.
        favorite_cover_probability: % of iterations in which the favourite's
            margin strictly exceeded ``|spread|``.
        underdog_cover_probability: ``100 − favorite_cover_probability``
            (a push counts as an underdog cover).
        over_probability: % of iterations with total points strictly above
            the line.
        under_probability: ``100 − over_probability`` (a push counts as
            under).
        iterations: Iterations actually completed.

        --- Diagnostics ---
        mean_home_score: Unrounded mean home score.
        mean_away_score: Unrounded mean away score.
        favorite_is_home: Side the cover probabilities refer to.
        truncated: True when a time budget stopped the run early.
    """

    predicted_home_score: int
    predicted_away_score: int
    home_win_probability: float
    away_win_probability: float
    tie_probability: float
    favorite_cover_probability: float
    underdog_cover_probability: float
    over_probability: float
    under_probability: float
    iterations: int

    mean_home_score: float = 0.0
    mean_away_score: float = 0.0
    favorite_is_home: bool = True
    truncated: bool = False

    def validate(self, tol: float = 1e-6) -> None:
        """Check the probability invariants.

        Raises:
            ValueError: If any probability is outside ``[0, 100]``, if home
                + away exceeds 100, or if a complementary pair does not sum
                to 100.
        """
        for name in (
            "home_win_probability",
            "away_win_probability",
            "tie_probability",
            "favorite_cover_probability",
            "underdog_cover_probability",
            "over_probability",
            "under_probability",
        ):
            val = getattr(self, name)
            if not (-tol <= val <= 100.0 + tol):
                raise ValueError(f"SimulationResult.{name} must be in [0, 100], got {val!r}.")
        if self.home_win_probability + self.away_win_probability > 100.0 + tol:
            raise ValueError(
                "home_win_probability + away_win_probability exceeds 100 "
                f"({self.home_win_probability!r} + {self.away_win_probability!r})."
            )
        if abs(self.favorite_cover_probability + self.underdog_cover_probability - 100.0) > tol:
            raise ValueError("Cover probabilities must sum to 100.")
        if abs(self.over_probability + self.under_probability - 100.0) > tol:
            raise ValueError("Over/under probabilities must sum to 100.")
        if self.iterations <= 0:
            raise ValueError(f"iterations must be positive, got {self.iterations!r}.")

    def win_probability_ci(self, confidence: float = 0.95) -> tuple[float, float]:
        """Normal-approximation CI on ``home_win_probability``, in percent."""
        p = self.home_win_probability / 100.0
        z = float(norm.ppf(0.5 + confidence / 2.0))
        half = z * math.sqrt(max(p * (1.0 - p), 0.0) / self.iterations)
        return (
            clamp((p - half) * 100.0, 0.0, 100.0),
            clamp((p + half) * 100.0, 0.0, 100.0),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def __repr__(self) -> str:
        return (
            f"SimulationResult(score={self.predicted_home_score}-{self.predicted_away_score}, "
            f"home={self.home_win_probability:.1f}%, away={self.away_win_probability:.1f}%, "
            f"fav_cover={self.favorite_cover_probability:.1f}%, "
            f"over={self.over_probability:.1f}%, n={self.iterations}"
            f"{', truncated' if self.truncated else ''})"
        )
