"""
Full-game simulator built on :class:`PossessionSimulator`.

One simulated game:

1. Possession count — ``round(home drives × 0.55 + away drives × 0.45)``
   plus an integer jitter in ``[-2, 2]``, clamped to ``[8, 15]``.  Both
   teams get the same number of possessions.
2. Game-day form — each of the four strength ratings swings by up to ±15%
   (scaled by an optional per-team variance multiplier) and is clamped to
   ``[10, 90]``.
3. Home field — one multiplier per game, ``1.03 × U[0.97, 1.03]``, applied
   to every home possession's points.
4. Possessions alternate home then away using the varied ratings.
5. Chaos — with probability 0.15 a defensive or special-teams score adds
   2 or 7 points to a random side.

Scores are rounded half-up to integers.
"""

import logging
import math
from typing import Optional, Tuple

from nfl_edge.core.odds_math import clamp
from nfl_edge.core.sim_config import SimulationConfig
from nfl_edge.core.sim_interface import (
    MatchupStrengths,
    RandomSource,
    TeamStatisticalProfile,
    draw_uniform,
)
from nfl_edge.core.strength import matchup_strengths
from nfl_edge.services.possession_sim import PossessionSimulator

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class GameSimulator:
    """Simulates one game between two profiles."""

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        possession_sim: Optional[PossessionSimulator] = None,
    ):
        self.config = config or SimulationConfig.nfl()
        self.possession_sim = possession_sim or PossessionSimulator(self.config)

    def possession_count(
        self,
        home: TeamStatisticalProfile,
        away: TeamStatisticalProfile,
        rng: RandomSource,
    ) -> int:
        cfg = self.config
        base = round_half_up(
            home.drives_per_game * cfg.home_drive_weight
            + away.drives_per_game * (1.0 - cfg.home_drive_weight)
        )
        span = 2 * cfg.possession_jitter + 1
        jitter = min(int(rng.random() * span), span - 1) - cfg.possession_jitter
        return int(clamp(base + jitter, cfg.min_possessions, cfg.max_possessions))

    def _vary(self, strength: float, multiplier: float, rng: RandomSource) -> float:
        cfg = self.config
        swing = strength * (2.0 * rng.random() - 1.0) * cfg.game_day_variance * multiplier
        return clamp(strength + swing, cfg.strength_floor, cfg.strength_ceiling)

    def game_day_strengths(
        self,
        base: MatchupStrengths,
        rng: RandomSource,
        home_variance_multiplier: float = 1.0,
        away_variance_multiplier: float = 1.0,
    ) -> MatchupStrengths:
        return MatchupStrengths(
            home_offense=self._vary(base.home_offense, home_variance_multiplier, rng),
            home_defense=self._vary(base.home_defense, home_variance_multiplier, rng),
            away_offense=self._vary(base.away_offense, away_variance_multiplier, rng),
            away_defense=self._vary(base.away_defense, away_variance_multiplier, rng),
        )

    def simulate_game(
        self,
        home: TeamStatisticalProfile,
        away: TeamStatisticalProfile,
        rng: RandomSource,
        *,
        strengths: Optional[MatchupStrengths] = None,
        home_variance_multiplier: float = 1.0,
        away_variance_multiplier: float = 1.0,
    ) -> Tuple[int, int]:
        """Return ``(home_score, away_score)`` for one simulated game.

        Pass pre-computed *strengths* when simulating many games of the
        same matchup; otherwise they are evaluated from the profiles.
        """
        cfg = self.config
        if strengths is None:
            strengths = matchup_strengths(home, away, cfg)

        possessions = self.possession_count(home, away, rng)
        form = self.game_day_strengths(
            strengths, rng, home_variance_multiplier, away_variance_multiplier
        )
        home_field = cfg.home_field_advantage * draw_uniform(
            rng, 1.0 - cfg.home_field_jitter, 1.0 + cfg.home_field_jitter
        )

        sim = self.possession_sim
        home_points = 0.0
        away_points = 0.0
        for _ in range(possessions):
            home_points += home_field * sim.simulate_possession(
                home, away, rng,
                offense_strength=form.home_offense,
                defense_strength=form.away_defense,
            )
            away_points += sim.simulate_possession(
                away, home, rng,
                offense_strength=form.away_offense,
                defense_strength=form.home_defense,
            )

        if rng.random() < cfg.chaos_probability:
            small, big = cfg.chaos_points
            points = small if rng.random() < 0.5 else big
            if rng.random() < 0.5:
                home_points += points
            else:
                away_points += points

        return round_half_up(home_points), round_half_up(away_points)
