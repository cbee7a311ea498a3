"""
Tests for request/response schemas
Run with: pytest tests/test_schemas.py -v
"""

import pytest
from pydantic import ValidationError

from nfl_edge.schemas import (
    GamePredictionResponse,
    PlayerInjuryPayload,
    SimulationRequest,
    SimulationResultResponse,
    WeatherPayload,
    profile_from_payload,
)
from nfl_edge.services.monte_carlo import MonteCarloSimulator
from nfl_edge.services.predictions import analyze_game


def _request(**overrides):
    payload = {
        "home_team": "Kansas City Chiefs",
        "away_team": "Buffalo Bills",
        "home_spread": -2.5,
        "total": 47.5,
    }
    payload.update(overrides)
    return SimulationRequest.model_validate(payload)


class TestSimulationRequest:

    def test_defaults(self):
        req = _request()
        assert req.iterations == 10_000
        assert req.seed is None
        assert req.home_injuries == []
        assert req.weather is None

    def test_schema_example_is_valid(self):
        example = SimulationRequest.model_config["json_schema_extra"]["example"]
        req = SimulationRequest.model_validate(example)
        assert req.home_moneyline == -135

    @pytest.mark.parametrize("field, value", [
        ("iterations", 0),
        ("iterations", 5_000_000),
        ("total", 0),
        ("home_spread", 75),
        ("seed", -1),
        ("home_moneyline", -50),
        ("away_moneyline", 99),
        ("spread_odds", -50),
        ("over_odds", 0),
        ("under_odds", 80),
    ])
    def test_rejects_bad_values(self, field, value):
        with pytest.raises(ValidationError):
            _request(**{field: value})

    def test_accepts_even_money(self):
        req = _request(home_moneyline=100, away_moneyline=-100)
        assert (req.home_moneyline, req.away_moneyline) == (100, -100)

    def test_bad_price_names_field(self):
        with pytest.raises(ValidationError, match="over_odds"):
            _request(over_odds=-50)

    def test_juice_defaults_to_none(self):
        req = _request()
        assert (req.spread_odds, req.over_odds, req.under_odds) == (None, None, None)


class TestPayloadConversion:

    def test_injury_position_uppercased(self):
        payload = PlayerInjuryPayload(name="Travis Kelce", position=" te ", game_status="Out")
        injury = payload.to_injury()
        assert injury.position == "TE"
        assert injury.game_status == "Out"

    def test_injury_rejects_unknown_tier(self):
        with pytest.raises(ValidationError):
            PlayerInjuryPayload(name="X", position="QB", player_tier="LEGENDARY")

    def test_weather_payload(self):
        weather = WeatherPayload(temperature=10, wind_speed=22, condition="Snow").to_weather()
        assert weather.impact_rating == "extreme"

    def test_weather_rejects_negative_wind(self):
        with pytest.raises(ValidationError):
            WeatherPayload(wind_speed=-5)

    def test_profile_from_payload_fills_defaults(self):
        profile = profile_from_payload("Buffalo Bills", {"pointsPerGame": 30.5})
        assert profile.team == "Buffalo Bills"
        assert profile.points_per_game == 30.5
        assert profile.red_zone_efficiency == 55.2


class TestResponses:

    def test_result_response(self, home_team, away_team):
        result = MonteCarloSimulator().run(home_team, away_team, -3.0, 44.5, True, iterations=300, seed=1)
        response = SimulationResultResponse.from_result(result)
        assert response.iterations == 300
        assert response.over_probability + response.under_probability == pytest.approx(100.0)

    def test_prediction_response_round_trip_from_dataclass(self, home_team, away_team):
        pred = analyze_game(home_team, away_team, home_spread=-3.0, total=44.5, iterations=300, seed=1)
        response = GamePredictionResponse.model_validate(pred.to_dict())
        assert response.favorite_team == pred.favorite_team
        assert response.result.iterations == 300

    def test_prediction_response_carries_edges(self, home_team, away_team):
        pred = analyze_game(home_team, away_team, home_spread=-3.0, total=44.5, iterations=300, seed=1)
        response = GamePredictionResponse.model_validate(pred.to_dict())
        assert response.spread_edge == pytest.approx(pred.spread_edge)
        assert response.ou_edge == pytest.approx(pred.ou_edge)
        assert response.moneyline_edge is not None

    def test_failed_prediction_response(self, home_team, away_team):
        pred = analyze_game(home_team, away_team, home_spread=-3.0, total=44.5, iterations=0)
        response = GamePredictionResponse.model_validate(pred.to_dict())
        assert response.error
        assert response.result is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
