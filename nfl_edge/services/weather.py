"""
Weather adjustments to team strength.

Outdoor conditions hit the passing game hardest: wind, cold, snow and heavy
rain shrink passing efficiency while strong wind nudges teams toward the
run.  A team's overall offensive modifier is the passing and rushing
modifiers weighted by its own pass/rush yardage mix, so a run-first team
loses less in a gale than an air-raid team.  The defense on the same field
gains 30% of whatever the offense loses.

Domes and games rated ``"none"`` are left untouched.  Forecasts are supplied
by the caller.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from nfl_edge.core.odds_math import safe_div
from nfl_edge.core.sim_interface import MatchupStrengths, TeamStatisticalProfile

logger = logging.getLogger(__name__)

# Thresholds (°F, mph)
EXTREME_COLD_F = 20
FREEZING_F = 32
COLD_F = 40
EXTREME_HEAT_F = 95
WIND_EXTREME_MPH = 25
WIND_HIGH_MPH = 20
WIND_MODERATE_MPH = 15
WIND_LIGHT_MPH = 10
HEAVY_RAIN_PRECIP = 50  # precipitation chance, %

# Passing / rushing multipliers
PASS_HIGH_WIND, RUSH_HIGH_WIND = 0.65, 1.10
PASS_MODERATE_WIND, RUSH_MODERATE_WIND = 0.80, 1.05
PASS_LIGHT_WIND = 0.90
PASS_EXTREME_COLD, RUSH_EXTREME_COLD = 0.85, 0.95
PASS_FREEZING = 0.92
PASS_SNOW, RUSH_SNOW = 0.75, 0.90
PASS_HEAVY_RAIN, RUSH_HEAVY_RAIN = 0.85, 0.95
PASS_LIGHT_RAIN = 0.95

DEFENSIVE_WEATHER_BENEFIT = 0.3

IMPACT_RATINGS = ("none", "low", "medium", "high", "extreme")


@dataclass
class GameWeather:
    temperature: float = 65.0
    wind_speed: float = 0.0
    precipitation: float = 0.0
    condition: str = "Clear"
    is_dome: bool = False
    impact_rating: Optional[str] = None

    def __post_init__(self):
        if self.impact_rating is None:
            self.impact_rating = "none" if self.is_dome else rate_weather_impact(
                self.temperature, self.wind_speed, self.precipitation, self.condition
            )
        elif self.impact_rating not in IMPACT_RATINGS:
            raise ValueError(
                f"impact_rating must be one of {IMPACT_RATINGS}, got {self.impact_rating!r}."
            )


@dataclass(frozen=True)
class WeatherAdjustment:
    offensive_strength: float
    defensive_strength: float
    passing_modifier: float = 1.0
    rushing_modifier: float = 1.0
    explanation: str = "No weather impact"


def rate_weather_impact(
    temperature: float, wind_speed: float, precipitation: float, condition: str,
) -> str:
    """Bucket conditions into none / low / medium / high / extreme."""
    score = 0
    if temperature < EXTREME_COLD_F:
        score += 3
    elif temperature < FREEZING_F:
        score += 2
    elif temperature < COLD_F:
        score += 1
    elif temperature > EXTREME_HEAT_F:
        score += 1

    if wind_speed >= WIND_EXTREME_MPH:
        score += 4
    elif wind_speed >= WIND_HIGH_MPH:
        score += 3
    elif wind_speed >= WIND_MODERATE_MPH:
        score += 2
    elif wind_speed >= WIND_LIGHT_MPH:
        score += 1

    if condition == "Snow":
        score += 3
    elif condition == "Rain":
        score += 2 if precipitation > HEAVY_RAIN_PRECIP else 1

    if score >= 7:
        return "extreme"
    if score >= 5:
        return "high"
    if score >= 3:
        return "medium"
    if score >= 1:
        return "low"
    return "none"


def apply_weather_adjustments(
    weather: Optional[GameWeather],
    offensive_strength: float,
    defensive_strength: float,
    profile: TeamStatisticalProfile,
) -> WeatherAdjustment:
    """Scale an offense and the defense it faces for the game-day conditions.

    *profile* is the offense's own statistics (used for its pass/rush mix).
    """
    if weather is None or weather.is_dome or weather.impact_rating == "none":
        return WeatherAdjustment(offensive_strength, defensive_strength)

    passing = 1.0
    rushing = 1.0
    notes: List[str] = []

    wind = weather.wind_speed
    if wind >= WIND_HIGH_MPH:
        passing, rushing = PASS_HIGH_WIND, RUSH_HIGH_WIND
        notes.append(f"High winds ({wind:g}mph) severely limit passing")
    elif wind >= WIND_MODERATE_MPH:
        passing, rushing = PASS_MODERATE_WIND, RUSH_MODERATE_WIND
        notes.append(f"Moderate winds ({wind:g}mph) reduce passing efficiency")
    elif wind >= WIND_LIGHT_MPH:
        passing = PASS_LIGHT_WIND
        notes.append(f"Light winds ({wind:g}mph) slightly affect passing")

    temp = weather.temperature
    if temp < EXTREME_COLD_F:
        passing *= PASS_EXTREME_COLD
        rushing *= RUSH_EXTREME_COLD
        notes.append(f"Extreme cold ({temp:g}°F) affects ball handling")
    elif temp < FREEZING_F:
        passing *= PASS_FREEZING
        notes.append(f"Freezing temps ({temp:g}°F) reduce passing accuracy")

    if weather.condition == "Snow":
        passing *= PASS_SNOW
        rushing *= RUSH_SNOW
        notes.append("Snow conditions significantly impact both offense types")
    elif weather.condition == "Rain":
        if weather.precipitation > HEAVY_RAIN_PRECIP:
            passing *= PASS_HEAVY_RAIN
            rushing *= RUSH_HEAVY_RAIN
            notes.append("Heavy rain affects ball security")
        else:
            passing *= PASS_LIGHT_RAIN
            notes.append("Light rain may cause minor issues")

    total_yards = profile.passing_yards + profile.rushing_yards
    pass_ratio = safe_div(profile.passing_yards, total_yards, default=0.5)
    rush_ratio = 1.0 - pass_ratio

    off_mod = passing * pass_ratio + rushing * rush_ratio
    def_mod = 1.0 + (1.0 - off_mod) * DEFENSIVE_WEATHER_BENEFIT

    return WeatherAdjustment(
        offensive_strength=offensive_strength * off_mod,
        defensive_strength=defensive_strength * def_mod,
        passing_modifier=passing,
        rushing_modifier=rushing,
        explanation="; ".join(notes) if notes else "Favorable weather conditions",
    )


def weather_adjusted_strengths(
    weather: Optional[GameWeather],
    strengths: MatchupStrengths,
    home: TeamStatisticalProfile,
    away: TeamStatisticalProfile,
) -> MatchupStrengths:
    """Apply :func:`apply_weather_adjustments` to both sides of a matchup.

    Each offense is paired with the defense it faces, so a defense's
    weather bonus follows the pass/rush mix of the opposing offense.
    """
    home_adj = apply_weather_adjustments(weather, strengths.home_offense, strengths.away_defense, home)
    away_adj = apply_weather_adjustments(weather, strengths.away_offense, strengths.home_defense, away)
    if weather is not None and home_adj.explanation != "No weather impact":
        logger.info("Weather (%s): %s", weather.impact_rating, home_adj.explanation)
    return MatchupStrengths(
        home_offense=home_adj.offensive_strength,
        home_defense=away_adj.defensive_strength,
        away_offense=away_adj.offensive_strength,
        away_defense=home_adj.defensive_strength,
    )
