"""Simulation configuration — every tunable constant in one place.

This module is the **registry** for the numbers that shape the Monte Carlo
engine.  Nowhere else in the codebase should strength weights, variance
bands, home-field multipliers or chaos probabilities be hard-coded.

Architecture
------------
:class:`SimulationConfig` is a frozen dataclass.  The named constructor
:meth:`SimulationConfig.nfl` returns the calibrated NFL defaults;
:meth:`SimulationConfig.neutral_site` strips home-field advantage;
:meth:`SimulationConfig.from_env` applies ``SIM_*`` environment overrides.
Components receive the config by injection and never read module globals,
so sensitivity analysis is a matter of perturbing one field::

    from dataclasses import replace
    from nfl_edge.core.sim_config import SimulationConfig

    cfg = SimulationConfig.nfl()
    high_chaos = replace(cfg, chaos_probability=0.25)

Calibration notes
-----------------
The blend weights (advantage 0.65 / efficiency 0.35, red zone 0.8 /
seasonal TDs 0.2) and the regression factor 0.80 were tuned by hand so
that two league-average teams score roughly 21-24 points each and a
league-average matchup produces a margin standard deviation of ~13.5,
close to the historical NFL figure.  They have not been fit by maximum
likelihood; treat them as priors.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Final

logger = logging.getLogger(__name__)

#: Default Monte Carlo iteration count.  Sampling error on a 50% probability
#: is ~0.5pp at this size.
DEFAULT_ITERATIONS: Final[int] = 10_000

#: Environment variable → field name for :meth:`SimulationConfig.from_env`.
_ENV_OVERRIDES: Final[dict[str, str]] = {
    "SIM_ITERATIONS": "iterations",
    "SIM_HOME_FIELD_ADVANTAGE": "home_field_advantage",
    "SIM_HOME_FIELD_JITTER": "home_field_jitter",
    "SIM_GAME_DAY_VARIANCE": "game_day_variance",
    "SIM_CHAOS_PROBABILITY": "chaos_probability",
    "SIM_REGRESSION_FACTOR": "regression_factor",
}


@dataclass(frozen=True)
class SimulationConfig:
    """Immutable bundle of simulation constants.

    Every field has the NFL default so a bare ``SimulationConfig()`` is
    usable.  Override via :func:`dataclasses.replace`.

    Attributes:
        iterations: Default number of simulated games per matchup.

        --- Strength evaluation ---
        passing_weight, rushing_weight, overall_weight, turnover_weight:
            Component weights of the offensive rating.  The defensive
            rating reuses the first three for its pass/rush/overall terms.
        penalty_yards_divisor: Penalty yards per rating point lost.
        defense_baseline: Starting value of the defensive rating.
        points_allowed_weight: Rating points lost per point allowed.

        --- Relative advantage ---
        regression_factor: Share of the raw advantage kept after
            regressing toward 0.5.
        advantage_floor, advantage_ceiling: Clamp on the regressed value.

        --- Possession ---
        turnover_variance: Uniform multiplier band on the turnover rate.
        efficiency_variance: Uniform multiplier band on yardage efficiency.
        efficiency_cap: Upper bound on the varied efficiency.
        advantage_weight, efficiency_weight: Scoring-probability blend.
        red_zone_weight, seasonal_td_weight: TD-probability blend.
        seasonal_td_scale: Multiplier applied to per-game offensive TDs.
        td_variance: Uniform multiplier band on the TD probability.
        field_goal_window: Percentage points above the TD probability
            that resolve to a field goal attempt.
        two_point_rate, extra_point_miss_rate: Conversion outcomes after
            a touchdown (8 and 6 points respectively).
        field_goal_miss_rate, field_goal_block_rate: FG attempt failures.

        --- Game ---
        home_drive_weight: Share of the possession count taken from the
            home team's drives per game.
        possession_jitter: Max absolute integer jitter on possessions.
        min_possessions, max_possessions: Clamp on the jittered count.
        game_day_variance: Max fractional swing of each strength per game.
        strength_floor, strength_ceiling: Clamp on varied strengths.
        home_field_advantage: Mean multiplier on home possession points.
        home_field_jitter: Half-width of the uniform band around it.
        chaos_probability: Chance of a special-teams / defensive score.
        chaos_points: Point values a chaos event can award.

        --- Runtime ---
        time_check_interval: Iterations between wall-clock checks when a
            time budget is set.
    """

    iterations: int = DEFAULT_ITERATIONS

    # Strength evaluation
    passing_weight: float = 0.4
    rushing_weight: float = 0.3
    overall_weight: float = 0.2
    turnover_weight: float = 0.1
    penalty_yards_divisor: float = 30.0
    defense_baseline: float = 50.0
    points_allowed_weight: float = 0.8

    # Relative advantage
    regression_factor: float = 0.80
    advantage_floor: float = 0.30
    advantage_ceiling: float = 0.70

    # Possession
    turnover_variance: tuple[float, float] = (0.80, 1.20)
    efficiency_variance: tuple[float, float] = (0.90, 1.10)
    efficiency_cap: float = 0.85
    advantage_weight: float = 0.65
    efficiency_weight: float = 0.35
    red_zone_weight: float = 0.8
    seasonal_td_weight: float = 0.2
    seasonal_td_scale: float = 1.2
    td_variance: tuple[float, float] = (0.85, 1.15)
    field_goal_window: float = 35.0
    two_point_rate: float = 0.02
    extra_point_miss_rate: float = 0.02
    field_goal_miss_rate: float = 0.08
    field_goal_block_rate: float = 0.02

    # Game
    home_drive_weight: float = 0.55
    possession_jitter: int = 2
    min_possessions: int = 8
    max_possessions: int = 15
    game_day_variance: float = 0.15
    strength_floor: float = 10.0
    strength_ceiling: float = 90.0
    home_field_advantage: float = 1.03
    home_field_jitter: float = 0.03
    chaos_probability: float = 0.15
    chaos_points: tuple[int, int] = (2, 7)

    # Runtime
    time_check_interval: int = 250

    # ------------------------------------------------------------------ #
    #  Named constructors                                                  #
    # ------------------------------------------------------------------ #

    @classmethod
    def nfl(cls) -> SimulationConfig:
        """Return the canonical NFL configuration (field defaults)."""
        return cls()

    @classmethod
    def from_env(cls, base: SimulationConfig | None = None) -> SimulationConfig:
        """Apply ``SIM_*`` environment overrides on top of *base*.

        Unparseable values are logged and ignored so a typo in ``.env``
        does not take the simulator down.

        Raises:
            ValueError: If the resulting configuration fails :meth:`validate`.
        """
        cfg = base if base is not None else cls.nfl()
        overrides: dict[str, float | int] = {}
        for env_name, field_name in _ENV_OVERRIDES.items():
            raw = os.getenv(env_name)
            if raw is None or raw.strip() == "":
                continue
            try:
                value = int(raw) if field_name == "iterations" else float(raw)
            except ValueError:
                logger.warning("Ignoring %s=%r: not a number", env_name, raw)
                continue
            overrides[field_name] = value

        if overrides:
            logger.info("SimulationConfig overrides from environment: %s", overrides)
            cfg = replace(cfg, **overrides)
        cfg.validate()
        return cfg

    # ------------------------------------------------------------------ #
    #  Derived configurations                                              #
    # ------------------------------------------------------------------ #

    def neutral_site(self) -> SimulationConfig:
        """Return a copy with home-field advantage removed."""
        return replace(self, home_field_advantage=1.0, home_field_jitter=0.0)

    def validate(self) -> None:
        """Raise ``ValueError`` on structurally invalid settings."""
        if self.iterations <= 0:
            raise ValueError(f"iterations must be positive, got {self.iterations!r}.")
        if not 0.0 <= self.regression_factor <= 1.0:
            raise ValueError(
                f"regression_factor must be in [0, 1], got {self.regression_factor!r}."
            )
        if self.advantage_floor > self.advantage_ceiling:
            raise ValueError("advantage_floor exceeds advantage_ceiling.")
        if self.min_possessions > self.max_possessions:
            raise ValueError("min_possessions exceeds max_possessions.")
        for name in ("chaos_probability", "game_day_variance"):
            val = getattr(self, name)
            if not 0.0 <= val <= 1.0:
                raise ValueError(f"{name} must be in [0, 1], got {val!r}.")
        if self.home_field_advantage <= 0.0:
            raise ValueError(
                f"home_field_advantage must be positive, got {self.home_field_advantage!r}."
            )
