"""
Monte Carlo aggregation over simulated games.

Runs :class:`GameSimulator` N times for one matchup and reduces the score
pairs to market probabilities:

    home / away / tie       — outright result counts
    favourite cover         — favourite's margin strictly greater than |spread|
    over                    — total points strictly greater than the line

Underdog cover and under are complements, so a push on either line counts
against the favourite / over.  Strength ratings are evaluated once per run,
outside the loop.

Reproducibility
---------------
``seed=`` builds a ``numpy.random.default_rng(seed)``; the same seed and
inputs give an identical :class:`SimulationResult`.  With ``n_workers > 1``
the iterations are split into chunks, each driven by an independent child
stream from ``numpy.random.SeedSequence(seed).spawn``, and the per-chunk
tallies are merged in chunk order.  A seeded parallel run is therefore
reproducible too, but does not match the serial run for the same seed.

Usage::

    mc = MonteCarloSimulator()
    result = mc.run(home, away, spread=-3.5, total=44.5,
                    favorite_is_home=True, iterations=10_000, seed=42)
    print(result.home_win_probability, result.over_probability)

Run tests with::

    pytest tests/test_monte_carlo.py -v
"""

import logging
import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from nfl_edge.core.odds_math import safe_div
from nfl_edge.core.sim_config import SimulationConfig
from nfl_edge.core.sim_interface import (
    MatchupStrengths,
    RandomSource,
    SimulationResult,
    TeamStatisticalProfile,
)
from nfl_edge.core.strength import matchup_strengths
from nfl_edge.services.game_sim import GameSimulator, round_half_up

logger = logging.getLogger(__name__)


@dataclass
class ScoreTally:
    """Running counts for a batch of simulated games."""
    iterations: int = 0
    home_wins: int = 0
    away_wins: int = 0
    ties: int = 0
    favorite_covers: int = 0
    overs: int = 0
    home_points: int = 0
    away_points: int = 0
    truncated: bool = False

    def record(
        self,
        home_score: int,
        away_score: int,
        spread: float,
        total: float,
        favorite_is_home: bool,
    ) -> None:
        self.iterations += 1
        self.home_points += home_score
        self.away_points += away_score

        margin = home_score - away_score
        if margin > 0:
            self.home_wins += 1
        elif margin < 0:
            self.away_wins += 1
        else:
            self.ties += 1

        favorite_margin = margin if favorite_is_home else -margin
        if favorite_margin > abs(spread):
            self.favorite_covers += 1

        if home_score + away_score > total:
            self.overs += 1

    def merge(self, other: "ScoreTally") -> "ScoreTally":
        return ScoreTally(
            iterations=self.iterations + other.iterations,
            home_wins=self.home_wins + other.home_wins,
            away_wins=self.away_wins + other.away_wins,
            ties=self.ties + other.ties,
            favorite_covers=self.favorite_covers + other.favorite_covers,
            overs=self.overs + other.overs,
            home_points=self.home_points + other.home_points,
            away_points=self.away_points + other.away_points,
            truncated=self.truncated or other.truncated,
        )

    def to_result(self, favorite_is_home: bool) -> SimulationResult:
        n = self.iterations

        def pct(count: int) -> float:
            return safe_div(count, n) * 100.0

        fav_cover = pct(self.favorite_covers)
        over = pct(self.overs)
        mean_home = safe_div(self.home_points, n)
        mean_away = safe_div(self.away_points, n)
        return SimulationResult(
            predicted_home_score=round_half_up(mean_home),
            predicted_away_score=round_half_up(mean_away),
            home_win_probability=pct(self.home_wins),
            away_win_probability=pct(self.away_wins),
            tie_probability=pct(self.ties),
            favorite_cover_probability=fav_cover,
            underdog_cover_probability=100.0 - fav_cover,
            over_probability=over,
            under_probability=100.0 - over,
            iterations=n,
            mean_home_score=mean_home,
            mean_away_score=mean_away,
            favorite_is_home=favorite_is_home,
            truncated=self.truncated,
        )


def simulate_batch(
    home: TeamStatisticalProfile,
    away: TeamStatisticalProfile,
    spread: float,
    total: float,
    favorite_is_home: bool,
    iterations: int,
    rng: RandomSource,
    strengths: MatchupStrengths,
    config: SimulationConfig,
    variance_multipliers: Tuple[float, float] = (1.0, 1.0),
    time_budget_s: Optional[float] = None,
) -> ScoreTally:
    """Simulate up to *iterations* games and tally them.

    Module-level so it can be shipped to a worker process.  When
    *time_budget_s* is set the wall clock is checked every
    ``config.time_check_interval`` games and the batch stops early once the
    budget is spent.
    """
    game_sim = GameSimulator(config)
    tally = ScoreTally()
    deadline = time.monotonic() + time_budget_s if time_budget_s is not None else None
    check_every = max(1, config.time_check_interval)
    home_mult, away_mult = variance_multipliers

    for i in range(iterations):
        if deadline is not None and i > 0 and i % check_every == 0:
            if time.monotonic() >= deadline:
                tally.truncated = True
                break
        home_score, away_score = game_sim.simulate_game(
            home, away, rng,
            strengths=strengths,
            home_variance_multiplier=home_mult,
            away_variance_multiplier=away_mult,
        )
        tally.record(home_score, away_score, spread, total, favorite_is_home)
    return tally


def _batch_from_seed(args) -> ScoreTally:
    seed_seq, *rest = args
    rng = np.random.default_rng(seed_seq)
    home, away, spread, total, fav_home, n, strengths, config, mults, budget = rest
    return simulate_batch(home, away, spread, total, fav_home, n, rng, strengths, config, mults, budget)


def _split(iterations: int, n_chunks: int) -> List[int]:
    size, extra = divmod(iterations, n_chunks)
    return [size + (1 if i < extra else 0) for i in range(n_chunks) if size or i < extra]


class MonteCarloSimulator:
    """Aggregates many simulated games into a :class:`SimulationResult`."""

    def __init__(self, config: Optional[SimulationConfig] = None):
        self.config = config or SimulationConfig.nfl()

    def run(
        self,
        home: TeamStatisticalProfile,
        away: TeamStatisticalProfile,
        spread: float,
        total: float,
        favorite_is_home: bool,
        iterations: Optional[int] = None,
        *,
        seed: Optional[int] = None,
        rng: Optional[RandomSource] = None,
        strengths: Optional[MatchupStrengths] = None,
        variance_multipliers: Tuple[float, float] = (1.0, 1.0),
        time_budget_s: Optional[float] = None,
        n_workers: int = 1,
    ) -> SimulationResult:
        """Simulate the matchup and return aggregated probabilities.

        Args:
            home, away: Team profiles (already injury-adjusted if desired).
            spread: Point spread from the home perspective (negative = home
                favoured).  Only ``|spread|`` matters for the cover count.
            total: Over/under line.
            favorite_is_home: Which side the cover probabilities describe.
            iterations: Games to simulate; defaults to ``config.iterations``.
            seed: Seed for a fresh ``numpy.random.default_rng``.
            rng: Injected random source; takes precedence over *seed* and
                forces a serial run.
            strengths: Pre-computed (e.g. weather-adjusted) ratings.
            variance_multipliers: Per-team game-day variance scale
                ``(home, away)``; see
                :func:`~nfl_edge.services.injuries.injury_variance_multiplier`.
            time_budget_s: Optional wall-clock budget; the result reports
                the iterations actually completed and ``truncated=True``.
            n_workers: Worker processes; 1 runs in-process.

        Raises:
            ValueError: If *iterations* is not positive.
        """
        n = self.config.iterations if iterations is None else iterations
        if n <= 0:
            raise ValueError(f"iterations must be positive, got {n!r}.")

        if strengths is None:
            strengths = matchup_strengths(home, away, self.config)

        started = time.monotonic()
        if rng is not None or n_workers <= 1:
            source = rng if rng is not None else np.random.default_rng(seed)
            tally = simulate_batch(
                home, away, spread, total, favorite_is_home, n, source,
                strengths, self.config, variance_multipliers, time_budget_s,
            )
        else:
            tally = self._run_parallel(
                home, away, spread, total, favorite_is_home, n, seed,
                strengths, variance_multipliers, time_budget_s, n_workers,
            )

        if tally.iterations == 0:
            raise ValueError("Time budget expired before any game was simulated.")

        result = tally.to_result(favorite_is_home)
        elapsed = time.monotonic() - started
        if result.truncated:
            logger.warning(
                "%s @ %s: time budget %.2fs hit after %d/%d iterations",
                away.team, home.team, time_budget_s, result.iterations, n,
            )
        logger.info(
            "%s @ %s: %d-%d, home %.1f%%, fav cover %.1f%%, over %.1f%% (%d sims, %.2fs)",
            away.team, home.team,
            result.predicted_away_score, result.predicted_home_score,
            result.home_win_probability, result.favorite_cover_probability,
            result.over_probability, result.iterations, elapsed,
        )
        return result

    def _run_parallel(
        self,
        home: TeamStatisticalProfile,
        away: TeamStatisticalProfile,
        spread: float,
        total: float,
        favorite_is_home: bool,
        iterations: int,
        seed: Optional[int],
        strengths: MatchupStrengths,
        variance_multipliers: Tuple[float, float],
        time_budget_s: Optional[float],
        n_workers: int,
    ) -> ScoreTally:
        sizes = _split(iterations, n_workers)
        children = np.random.SeedSequence(seed).spawn(len(sizes))
        jobs = [
            (child, home, away, spread, total, favorite_is_home, size,
             strengths, self.config, variance_multipliers, time_budget_s)
            for child, size in zip(children, sizes)
        ]
        tally = ScoreTally()
        with ProcessPoolExecutor(max_workers=len(jobs)) as pool:
            # map() yields in submission order, so the merge is deterministic
            for part in pool.map(_batch_from_seed, jobs):
                tally = tally.merge(part)
        return tally
