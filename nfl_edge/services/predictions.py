"""
Game-level orchestration: profiles in, picks out.

:func:`analyze_game` runs the full pipeline for one matchup:

    moneyline check → injury adjustment → strengths → weather
        → Monte Carlo → moneyline / spread / total picks → edges

Each pick carries an edge: the model probability minus the probability
implied by the market price, in percentage points.  Spread and total
prices default to the standard -110 when the book's juice is unknown.

A failure inside the simulation is logged and reported on the returned
:class:`GamePrediction` (``error`` set, probabilities empty) instead of
propagating, so a slate of games is never lost to one bad input.
"""

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from nfl_edge.core.odds_math import calculate_edge, determine_favorite, estimate_moneylines
from nfl_edge.core.sim_config import SimulationConfig
from nfl_edge.core.sim_interface import SimulationResult, TeamStatisticalProfile
from nfl_edge.core.strength import matchup_strengths
from nfl_edge.services.injuries import (
    InjuryImpactSummary,
    adjust_for_injuries,
    injury_summary_text,
    injury_variance_multiplier,
)
from nfl_edge.services.monte_carlo import MonteCarloSimulator
from nfl_edge.services.weather import GameWeather, weather_adjusted_strengths

logger = logging.getLogger(__name__)

HIGH_CONFIDENCE = 65.0
MEDIUM_CONFIDENCE = 55.0
CONFIDENCE_SCORES = {"High": 80, "Medium": 60, "Low": 40}
PICK_THRESHOLD = 50.0
STANDARD_JUICE = -110


def confidence_level(probability: float) -> str:
    """High ≥ 65%, Medium ≥ 55%, otherwise Low."""
    if probability >= HIGH_CONFIDENCE:
        return "High"
    if probability >= MEDIUM_CONFIDENCE:
        return "Medium"
    return "Low"


def confidence_score(level: str) -> int:
    return CONFIDENCE_SCORES.get(level, 50)


def _signed(value: float) -> str:
    return f"+{value:g}" if value > 0 else f"{value:g}"


def spread_pick(
    result: SimulationResult,
    home_team: str,
    away_team: str,
    home_spread: float,
) -> tuple:
    """Return ``(label, probability)`` for the side expected to cover.

    The favourite is picked when its cover probability exceeds 50%,
    otherwise the underdog.  Labels carry each side's own line, e.g.
    ``"Chiefs -3.5"`` / ``"Bills +3.5"``.
    """
    home_line = f"{home_team} {_signed(home_spread)}"
    away_line = f"{away_team} {_signed(-home_spread)}"

    if result.favorite_cover_probability > PICK_THRESHOLD:
        label = home_line if result.favorite_is_home else away_line
        return label, result.favorite_cover_probability
    label = away_line if result.favorite_is_home else home_line
    return label, result.underdog_cover_probability


@dataclass
class GamePrediction:
    home_team: str
    away_team: str
    home_spread: float
    total: float
    favorite_team: str = ""
    favorite_is_home: bool = True
    used_estimated_moneylines: bool = False
    moneyline_pick: Optional[str] = None
    moneyline_probability: Optional[float] = None
    spread_pick: Optional[str] = None
    spread_probability: Optional[float] = None
    total_pick: Optional[str] = None
    total_probability: Optional[float] = None
    confidence: Optional[str] = None
    confidence_score: Optional[int] = None
    moneyline_edge: Optional[float] = None
    spread_edge: Optional[float] = None
    ou_edge: Optional[float] = None
    result: Optional[SimulationResult] = None
    injury_notes: List[str] = field(default_factory=list)
    weather_note: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["result"] = self.result.to_dict() if self.result else None
        return data


def analyze_game(
    home: TeamStatisticalProfile,
    away: TeamStatisticalProfile,
    *,
    home_spread: float,
    total: float,
    home_moneyline: Optional[float] = None,
    away_moneyline: Optional[float] = None,
    spread_odds: Optional[float] = None,
    over_odds: Optional[float] = None,
    under_odds: Optional[float] = None,
    home_injuries: Optional[InjuryImpactSummary] = None,
    away_injuries: Optional[InjuryImpactSummary] = None,
    weather: Optional[GameWeather] = None,
    injury_variance: bool = False,
    iterations: Optional[int] = None,
    seed: Optional[int] = None,
    config: Optional[SimulationConfig] = None,
    n_workers: int = 1,
) -> GamePrediction:
    """Simulate one game and derive picks.

    Missing moneylines are estimated from the spread so the favourite can
    still be identified and its price used for the moneyline edge.
    *spread_odds*, *over_odds* and *under_odds* price the spread and total
    picks; each defaults to -110.  With *injury_variance* set, each team's
    game-day variance is scaled by its injury variance multiplier.
    """
    cfg = config or SimulationConfig.nfl()
    prediction = GamePrediction(
        home_team=home.team, away_team=away.team, home_spread=home_spread, total=total,
    )

    if home_moneyline is None or away_moneyline is None:
        home_moneyline, away_moneyline = estimate_moneylines(home_spread)
        prediction.used_estimated_moneylines = True
        logger.info(
            "%s @ %s: moneyline missing, estimated %+d / %+d from spread %s",
            away.team, home.team, home_moneyline, away_moneyline, home_spread,
        )
    favorite = determine_favorite(home_moneyline, away_moneyline)
    prediction.favorite_is_home = favorite.favorite_is_home
    prediction.favorite_team = home.team if favorite.favorite_is_home else away.team

    adj_home = adjust_for_injuries(home, home_injuries)
    adj_away = adjust_for_injuries(away, away_injuries)
    prediction.injury_notes = [
        injury_summary_text(home.team, home_injuries),
        injury_summary_text(away.team, away_injuries),
    ]
    multipliers = (1.0, 1.0)
    if injury_variance:
        multipliers = (
            injury_variance_multiplier(home_injuries),
            injury_variance_multiplier(away_injuries),
        )

    strengths = matchup_strengths(adj_home, adj_away, cfg)
    if weather is not None:
        strengths = weather_adjusted_strengths(weather, strengths, adj_home, adj_away)
        prediction.weather_note = (
            "Dome" if weather.is_dome
            else f"{weather.temperature:g}°F, wind {weather.wind_speed:g}mph ({weather.impact_rating} impact)"
        )

    try:
        result = MonteCarloSimulator(cfg).run(
            adj_home, adj_away, home_spread, total, favorite.favorite_is_home,
            iterations,
            seed=seed,
            strengths=strengths,
            variance_multipliers=multipliers,
            n_workers=n_workers,
        )
        result.validate()
    except Exception as exc:
        logger.error(
            "Simulation failed for %s @ %s: %s", away.team, home.team, exc, exc_info=True,
        )
        prediction.error = str(exc)
        return prediction

    prediction.result = result
    if result.home_win_probability > result.away_win_probability:
        prediction.moneyline_pick = home.team
        prediction.moneyline_probability = result.home_win_probability
    else:
        prediction.moneyline_pick = away.team
        prediction.moneyline_probability = result.away_win_probability

    prediction.spread_pick, prediction.spread_probability = spread_pick(
        result, home.team, away.team, home_spread
    )

    side = "Over" if result.over_probability > PICK_THRESHOLD else "Under"
    prediction.total_pick = f"{side} {total:g}"
    prediction.total_probability = max(result.over_probability, result.under_probability)

    prediction.confidence = confidence_level(prediction.moneyline_probability)
    prediction.confidence_score = confidence_score(prediction.confidence)

    moneyline_price = home_moneyline if prediction.moneyline_pick == home.team else away_moneyline
    total_price = over_odds if side == "Over" else under_odds
    try:
        prediction.moneyline_edge = calculate_edge(prediction.moneyline_probability, moneyline_price)
        prediction.spread_edge = calculate_edge(
            prediction.spread_probability,
            STANDARD_JUICE if spread_odds is None else spread_odds,
        )
        prediction.ou_edge = calculate_edge(
            prediction.total_probability,
            STANDARD_JUICE if total_price is None else total_price,
        )
    except ValueError as exc:
        logger.warning("%s @ %s: edges not computed: %s", away.team, home.team, exc)
    return prediction
