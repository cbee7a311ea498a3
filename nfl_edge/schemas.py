"""
Pydantic request/response schemas for the simulation engine.

The persistence and UI layers exchange JSON with the engine; these models
validate that JSON at the boundary so the core never sees a negative
iteration count or a 140% probability.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from nfl_edge.core.sim_interface import SimulationResult, TeamStatisticalProfile
from nfl_edge.services.injuries import PlayerInjury
from nfl_edge.services.weather import GameWeather


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

class PlayerInjuryPayload(BaseModel):
    """One injury-report row with depth-chart tiers."""

    name: str = Field(..., min_length=1, max_length=120)
    position: str = Field(..., min_length=1, max_length=5)
    player_tier: Literal["ELITE", "ABOVE_AVERAGE", "AVERAGE", "BELOW_AVERAGE", "POOR"] = "AVERAGE"
    backup_tier: Literal["ELITE", "ABOVE_AVERAGE", "AVERAGE", "BELOW_AVERAGE", "POOR"] = "BELOW_AVERAGE"
    practice_participation: str = ""
    game_status: str = ""
    is_green_dot_defender: bool = False

    @field_validator("position")
    @classmethod
    def upper_position(cls, v: str) -> str:
        return v.strip().upper()

    def to_injury(self) -> PlayerInjury:
        return PlayerInjury(**self.model_dump())


class WeatherPayload(BaseModel):
    temperature: float = Field(65.0, ge=-60, le=130, description="°F")
    wind_speed: float = Field(0.0, ge=0, le=120, description="mph")
    precipitation: float = Field(0.0, ge=0, le=100, description="chance, %")
    condition: str = "Clear"
    is_dome: bool = False

    def to_weather(self) -> GameWeather:
        return GameWeather(**self.model_dump())


class SimulationRequest(BaseModel):
    """
    Payload for one matchup simulation.

    ``home_stats`` / ``away_stats`` are raw stats rows; any key spelling
    accepted by ``TeamStatisticalProfile.from_record`` works, and gaps are
    filled from league averages.
    """

    home_team: str = Field(..., min_length=1, max_length=60)
    away_team: str = Field(..., min_length=1, max_length=60)
    home_stats: Dict[str, Any] = Field(default_factory=dict)
    away_stats: Dict[str, Any] = Field(default_factory=dict)

    home_spread: float = Field(0.0, ge=-50, le=50, description="Negative = home favoured")
    total: float = Field(..., gt=0, le=120)
    home_moneyline: Optional[float] = None
    away_moneyline: Optional[float] = None
    spread_odds: Optional[float] = Field(None, description="Price on the spread pick; -110 when omitted")
    over_odds: Optional[float] = None
    under_odds: Optional[float] = None

    home_injuries: List[PlayerInjuryPayload] = Field(default_factory=list)
    away_injuries: List[PlayerInjuryPayload] = Field(default_factory=list)
    weather: Optional[WeatherPayload] = None

    iterations: int = Field(10_000, gt=0, le=1_000_000)
    seed: Optional[int] = Field(None, ge=0)

    @field_validator("home_moneyline", "away_moneyline", "spread_odds", "over_odds", "under_odds")
    @classmethod
    def validate_american_odds(cls, v: Optional[float], info: ValidationInfo) -> Optional[float]:
        if v is None:
            return v
        if -100 < v < 100:
            raise ValueError(
                f"{info.field_name}={v} is not valid American odds. "
                "Must be >= +100 or <= -100."
            )
        return v

    model_config = {
        "json_schema_extra": {
            "example": {
                "home_team": "Kansas City Chiefs",
                "away_team": "Buffalo Bills",
                "home_stats": {"pointsPerGame": 27.1, "passing_yards_per_game": 251.0},
                "away_stats": {"points_per_game": 26.4},
                "home_spread": -2.5,
                "total": 47.5,
                "home_moneyline": -135,
                "away_moneyline": 115,
                "iterations": 10000,
            }
        }
    }


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------

class SimulationResultResponse(BaseModel):
    predicted_home_score: int
    predicted_away_score: int
    home_win_probability: float = Field(..., ge=0, le=100)
    away_win_probability: float = Field(..., ge=0, le=100)
    tie_probability: float = Field(..., ge=0, le=100)
    favorite_cover_probability: float = Field(..., ge=0, le=100)
    underdog_cover_probability: float = Field(..., ge=0, le=100)
    over_probability: float = Field(..., ge=0, le=100)
    under_probability: float = Field(..., ge=0, le=100)
    iterations: int = Field(..., gt=0)
    favorite_is_home: bool
    truncated: bool = False

    @classmethod
    def from_result(cls, result: SimulationResult) -> SimulationResultResponse:
        return cls.model_validate(result.to_dict())


class GamePredictionResponse(BaseModel):
    home_team: str
    away_team: str
    favorite_team: str
    moneyline_pick: Optional[str] = None
    moneyline_probability: Optional[float] = None
    spread_pick: Optional[str] = None
    spread_probability: Optional[float] = None
    total_pick: Optional[str] = None
    total_probability: Optional[float] = None
    confidence: Optional[Literal["High", "Medium", "Low"]] = None
    confidence_score: Optional[int] = None
    moneyline_edge: Optional[float] = None
    spread_edge: Optional[float] = None
    ou_edge: Optional[float] = None
    used_estimated_moneylines: bool = False
    injury_notes: List[str] = Field(default_factory=list)
    weather_note: Optional[str] = None
    result: Optional[SimulationResultResponse] = None
    error: Optional[str] = None


def profile_from_payload(team: str, stats: Dict[str, Any]) -> TeamStatisticalProfile:
    """League-average-filled profile from a request's raw stats dict."""
    return TeamStatisticalProfile.from_record(stats, team=team, use_league_defaults=True)
