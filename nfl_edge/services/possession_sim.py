"""
Single-drive outcome simulator.

Each possession resolves through three gates, in order:

    BALL → TURNOVER? → SCORING DRIVE? → TD or FG ATTEMPT?

1. **Turnover** — the offense's giveaway rate per play averaged with the
   defense's takeaway rate per play, jittered ±20%.
2. **Scoring drive** — a blend of the strength-based relative advantage
   (65%) and a yards-per-play efficiency ratio (35%, jittered ±10% and
   capped at 0.85).
3. **Touchdown vs field goal** — touchdown probability is mostly red-zone
   efficiency with a small seasonal-TD component, jittered ±15%.  The next
   35 percentage points of the roll are field-goal attempts; anything
   beyond stalls out.

Possible outcomes are 0, 3, 6 (missed extra point), 7 and 8 (two-point
conversion).  The simulator holds no per-call state: all randomness comes
from the injected :class:`~nfl_edge.core.sim_interface.RandomSource`.

Usage::

    sim = PossessionSimulator()
    rng = np.random.default_rng(42)
    points = sim.simulate_possession(offense_profile, defense_profile, rng)
"""

import logging
from typing import Optional

from nfl_edge.core.odds_math import safe_div
from nfl_edge.core.sim_config import SimulationConfig
from nfl_edge.core.sim_interface import RandomSource, TeamStatisticalProfile, draw_uniform
from nfl_edge.core.strength import defensive_strength, offensive_strength, relative_advantage

logger = logging.getLogger(__name__)

POSSESSION_OUTCOMES = frozenset({0, 3, 6, 7, 8})


class PossessionSimulator:
    """Resolves one offensive possession to a point value."""

    def __init__(self, config: Optional[SimulationConfig] = None):
        self.config = config or SimulationConfig.nfl()

    # ------------------------------------------------------------------
    # Deterministic components
    # ------------------------------------------------------------------

    @staticmethod
    def base_turnover_rate(offense: TeamStatisticalProfile, defense: TeamStatisticalProfile) -> float:
        """Average of giveaways per offensive play and takeaways per defensive play."""
        giveaway = safe_div(offense.turnovers_lost, offense.total_plays)
        takeaway = safe_div(defense.turnovers_forced, defense.def_total_plays)
        return (giveaway + takeaway) / 2.0

    @staticmethod
    def yardage_efficiency(offense: TeamStatisticalProfile, defense: TeamStatisticalProfile) -> float:
        """``ypp / (ypp + ypp allowed)``; 0 when both are zero."""
        return safe_div(
            offense.yards_per_play,
            offense.yards_per_play + defense.def_yards_per_play_allowed,
        )

    def base_touchdown_probability(self, offense: TeamStatisticalProfile) -> float:
        """Touchdown probability of a scoring drive, on a 0-100 scale."""
        cfg = self.config
        seasonal = (offense.passing_tds + offense.rushing_tds) * cfg.seasonal_td_scale
        return offense.red_zone_efficiency * cfg.red_zone_weight + seasonal * cfg.seasonal_td_weight

    def advantage(self, offense_strength: float, defense_strength: float) -> float:
        cfg = self.config
        return relative_advantage(
            offense_strength,
            defense_strength,
            regression_factor=cfg.regression_factor,
            floor=cfg.advantage_floor,
            ceiling=cfg.advantage_ceiling,
        )

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def simulate_possession(
        self,
        offense: TeamStatisticalProfile,
        defense: TeamStatisticalProfile,
        rng: RandomSource,
        *,
        offense_strength: Optional[float] = None,
        defense_strength: Optional[float] = None,
    ) -> int:
        """Return the points scored on one possession.

        *offense_strength* / *defense_strength* override the ratings computed
        from the profiles; the game simulator passes its game-day-varied
        values here.
        """
        cfg = self.config
        if offense_strength is None:
            offense_strength = offensive_strength(offense, cfg)
        if defense_strength is None:
            defense_strength = defensive_strength(defense, cfg)

        # Gate 1: turnover
        turnover_rate = self.base_turnover_rate(offense, defense) * draw_uniform(
            rng, *cfg.turnover_variance
        )
        if rng.random() < turnover_rate:
            return 0

        # Gate 2: does the drive produce points?
        efficiency = min(
            self.yardage_efficiency(offense, defense) * draw_uniform(rng, *cfg.efficiency_variance),
            cfg.efficiency_cap,
        )
        scoring_prob = (
            self.advantage(offense_strength, defense_strength) * cfg.advantage_weight
            + efficiency * cfg.efficiency_weight
        )
        if rng.random() > scoring_prob:
            return 0

        # Gate 3: touchdown, field goal attempt, or stall
        td_prob = self.base_touchdown_probability(offense) * draw_uniform(rng, *cfg.td_variance)
        roll = rng.random() * 100.0
        if roll < td_prob:
            return self._touchdown(rng)
        if roll < td_prob + cfg.field_goal_window:
            return self._field_goal(rng)
        return 0

    def _touchdown(self, rng: RandomSource) -> int:
        cfg = self.config
        r = rng.random()
        if r < cfg.two_point_rate:
            return 8
        if r < cfg.two_point_rate + cfg.extra_point_miss_rate:
            return 6
        return 7

    def _field_goal(self, rng: RandomSource) -> int:
        cfg = self.config
        r = rng.random()
        if r < cfg.field_goal_miss_rate + cfg.field_goal_block_rate:
            return 0
        return 3
