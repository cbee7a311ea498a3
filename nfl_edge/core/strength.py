"""Team strength ratings and the relative-advantage model.

Each team gets two scalar ratings on ``[0, 100]``:

* **Offensive strength** — a weighted blend of passing production,
  rushing production, overall efficiency and ball security, minus a
  penalty-yardage drag.  Nothing anchors it at 50; a league-average
  offense lands around 25.
* **Defensive strength** — starts from a baseline of 50 and is pulled down
  by yardage, touchdowns and points allowed and pushed up by takeaways.
  A league-average defense lands around 24.

The two scales are deliberately comparable rather than centred, so the
ratio ``off / (off + def)`` in :func:`relative_advantage` is the quantity
that matters, not either number on its own.

All functions are pure.  Component weights come from
:class:`~nfl_edge.core.sim_config.SimulationConfig` so they can be
perturbed for sensitivity analysis; the per-statistic coefficients inside
each component live in the ``*_TERMS`` tables below.

Run tests with::

    pytest tests/test_strength.py -v
"""

from __future__ import annotations

from typing import Final

from nfl_edge.core.odds_math import clamp, finite_or_zero, safe_div
from nfl_edge.core.sim_config import SimulationConfig
from nfl_edge.core.sim_interface import MatchupStrengths, TeamStatisticalProfile

_DEFAULT_CONFIG = SimulationConfig.nfl()

# ---------------------------------------------------------------------------
# Sub-score coefficient tables: (profile field, coefficient per unit)
# ---------------------------------------------------------------------------

#: Passing production: yards count 0.8 per 100.
PASSING_TERMS: Final[tuple[tuple[str, float], ...]] = (
    ("passing_yards", 0.8 / 100.0),
    ("yards_per_pass_attempt", 2.0),
    ("pass_completion_pct", 1.0 / 10.0),
    ("passing_tds", 2.0),
    ("interceptions_thrown", -3.0),
)

#: Rushing production: yards count 0.5 per 50.
RUSHING_TERMS: Final[tuple[tuple[str, float], ...]] = (
    ("rushing_yards", 0.5 / 50.0),
    ("yards_per_rush", 3.0),
    ("rushing_tds", 2.0),
)

#: Overall efficiency.
OVERALL_TERMS: Final[tuple[tuple[str, float], ...]] = (
    ("yards_per_play", 4.0),
    ("first_downs", 1.0 / 5.0),
    ("third_down_conversion_rate", 0.4),
    ("red_zone_efficiency", 0.5),
)

#: Ball security.
TURNOVER_TERMS: Final[tuple[tuple[str, float], ...]] = (
    ("turnovers_lost", -4.0),
    ("fumbles_lost", -3.0),
    ("turnover_differential", 2.0),
)

#: Pass defense: yards allowed cost 0.4 per 50.
PASS_DEFENSE_TERMS: Final[tuple[tuple[str, float], ...]] = (
    ("def_passing_yards_allowed", -0.4 / 50.0),
    ("def_passing_tds_allowed", -3.0),
    ("def_interceptions", 2.0),
)

#: Run defense: yards allowed cost 0.5 per 30.
RUSH_DEFENSE_TERMS: Final[tuple[tuple[str, float], ...]] = (
    ("def_rushing_yards_allowed", -0.5 / 30.0),
    ("def_rushing_tds_allowed", -3.0),
    ("fumbles_forced", 2.0),
)

#: Overall defense.
OVERALL_DEFENSE_TERMS: Final[tuple[tuple[str, float], ...]] = (
    ("def_yards_per_play_allowed", -4.0),
    ("def_first_downs_allowed", -1.0 / 5.0),
    ("turnovers_forced", 2.0),
)


def _sub_score(profile: TeamStatisticalProfile, terms: tuple[tuple[str, float], ...]) -> float:
    return finite_or_zero(sum(getattr(profile, name) * coef for name, coef in terms))


def offensive_strength(
    profile: TeamStatisticalProfile,
    config: SimulationConfig = _DEFAULT_CONFIG,
) -> float:
    """Rate a team's offense on ``[0, 100]``."""
    penalty = -safe_div(profile.penalty_yards, config.penalty_yards_divisor)
    total = (
        _sub_score(profile, PASSING_TERMS) * config.passing_weight
        + _sub_score(profile, RUSHING_TERMS) * config.rushing_weight
        + _sub_score(profile, OVERALL_TERMS) * config.overall_weight
        + _sub_score(profile, TURNOVER_TERMS) * config.turnover_weight
        + finite_or_zero(penalty)
    )
    return clamp(finite_or_zero(total), 0.0, 100.0)


def defensive_strength(
    profile: TeamStatisticalProfile,
    config: SimulationConfig = _DEFAULT_CONFIG,
) -> float:
    """Rate a team's defense on ``[0, 100]``."""
    points = -profile.points_allowed_per_game * config.points_allowed_weight
    total = (
        config.defense_baseline
        + _sub_score(profile, PASS_DEFENSE_TERMS) * config.passing_weight
        + _sub_score(profile, RUSH_DEFENSE_TERMS) * config.rushing_weight
        + _sub_score(profile, OVERALL_DEFENSE_TERMS) * config.overall_weight
        + finite_or_zero(points)
    )
    return clamp(finite_or_zero(total), 0.0, 100.0)


def matchup_strengths(
    home: TeamStatisticalProfile,
    away: TeamStatisticalProfile,
    config: SimulationConfig = _DEFAULT_CONFIG,
) -> MatchupStrengths:
    """Evaluate all four ratings for a game."""
    return MatchupStrengths(
        home_offense=offensive_strength(home, config),
        home_defense=defensive_strength(home, config),
        away_offense=offensive_strength(away, config),
        away_defense=defensive_strength(away, config),
    )


def relative_advantage(
    offense_strength: float,
    defense_strength: float,
    *,
    regression_factor: float = _DEFAULT_CONFIG.regression_factor,
    floor: float = _DEFAULT_CONFIG.advantage_floor,
    ceiling: float = _DEFAULT_CONFIG.advantage_ceiling,
) -> float:
    """Offense's edge over a defense, regressed toward 0.5.

    ``raw = off / (off + def)`` (0.5 when both are zero), then
    ``raw × R + 0.5 × (1 − R)`` (computed as ``0.5 + (raw − 0.5) × R``),
    clamped to ``[floor, ceiling]``.

    Examples::

        >>> relative_advantage(40.0, 40.0)
        0.5
        >>> relative_advantage(100.0, 0.0)
        0.7
    """
    raw = safe_div(offense_strength, offense_strength + defense_strength, default=0.5)
    regressed = 0.5 + (raw - 0.5) * regression_factor
    return clamp(regressed, floor, ceiling)
