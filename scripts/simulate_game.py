"""
simulate_game.py — Run the Monte Carlo engine on one matchup from a JSON file.

Input is a ``SimulationRequest`` document (see ``nfl_edge/schemas.py``):
team names, raw stats rows, lines, optional injury reports and weather.
The prediction is printed as JSON on stdout.

Environment
-----------
  SIM_ITERATIONS, SIM_HOME_FIELD_ADVANTAGE, SIM_HOME_FIELD_JITTER,
  SIM_GAME_DAY_VARIANCE, SIM_CHAOS_PROBABILITY, SIM_REGRESSION_FACTOR
  override the simulation constants (read from .env when present).

Usage
-----
  python scripts/simulate_game.py game.json
  python scripts/simulate_game.py game.json --iterations 50000 --seed 7
  python scripts/simulate_game.py game.json --neutral --workers 4
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

# Ensure the project root (one level up from scripts/) is on sys.path so that
# `from nfl_edge.xxx import ...` resolves when the script is run directly.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from nfl_edge.core.sim_config import SimulationConfig  # noqa: E402
from nfl_edge.schemas import (  # noqa: E402
    GamePredictionResponse,
    SimulationRequest,
    SimulationResultResponse,
)
from nfl_edge.services.injuries import analyze_team_injuries  # noqa: E402
from nfl_edge.services.predictions import analyze_game  # noqa: E402
from nfl_edge.services.profiles import build_profile  # noqa: E402

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def run(request: SimulationRequest, config: SimulationConfig, n_workers: int = 1) -> GamePredictionResponse:
    home = build_profile(request.home_team, request.home_stats)
    away = build_profile(request.away_team, request.away_stats)
    for build in (home, away):
        logger.info("%s stats: %s", build.profile.team, build.quality.value)

    home_injuries = (
        analyze_team_injuries([p.to_injury() for p in request.home_injuries])
        if request.home_injuries else None
    )
    away_injuries = (
        analyze_team_injuries([p.to_injury() for p in request.away_injuries])
        if request.away_injuries else None
    )

    prediction = analyze_game(
        home.profile,
        away.profile,
        home_spread=request.home_spread,
        total=request.total,
        home_moneyline=request.home_moneyline,
        away_moneyline=request.away_moneyline,
        spread_odds=request.spread_odds,
        over_odds=request.over_odds,
        under_odds=request.under_odds,
        home_injuries=home_injuries,
        away_injuries=away_injuries,
        weather=request.weather.to_weather() if request.weather else None,
        iterations=request.iterations,
        seed=request.seed,
        config=config,
        n_workers=n_workers,
    )

    data = prediction.to_dict()
    data["result"] = (
        SimulationResultResponse.from_result(prediction.result) if prediction.result else None
    )
    return GamePredictionResponse.model_validate(data)


def main() -> None:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Simulate one NFL matchup.")
    parser.add_argument("request", type=Path, help="Path to a SimulationRequest JSON file")
    parser.add_argument("--iterations", type=int, help="Override the request's iteration count")
    parser.add_argument("--seed", type=int, help="Override the request's RNG seed")
    parser.add_argument("--workers", type=int, default=1, help="Worker processes (default 1)")
    parser.add_argument("--neutral", action="store_true", help="Neutral site: no home-field boost")
    args = parser.parse_args()

    try:
        payload = json.loads(args.request.read_text())
        request = SimulationRequest.model_validate(payload)
    except (OSError, json.JSONDecodeError, ValidationError) as exc:
        logger.error("Could not load %s: %s", args.request, exc)
        sys.exit(2)

    overrides = {}
    if args.iterations is not None:
        overrides["iterations"] = args.iterations
    if args.seed is not None:
        overrides["seed"] = args.seed
    if overrides:
        request = request.model_copy(update=overrides)

    try:
        config = SimulationConfig.from_env()
    except ValueError as exc:
        logger.error("Invalid SIM_* configuration: %s", exc)
        sys.exit(2)
    if args.neutral:
        config = config.neutral_site()
    config = replace(config, iterations=request.iterations)

    response = run(request, config, n_workers=max(1, args.workers))
    print(response.model_dump_json(indent=2))
    if response.error:
        sys.exit(1)


if __name__ == "__main__":
    main()
