"""
Team profile construction from raw stats records.

Upstream stats rows are patchy: columns go missing mid-season, scrapers
emit ``"N/A"`` and ``"--"``, and expansion of the stats table leaves older
rows with NULLs.  :func:`build_profile` turns whatever arrived into a fully
populated :class:`TeamStatisticalProfile` and reports how much of it was
real, so callers can log or downweight predictions built on defaults.

Drives per game is the one statistic with a bespoke fallback: when absent
it is estimated as ``total_plays / 5.5`` and kept only inside the plausible
``[6, 15]`` range, otherwise the league average of 11 is used.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional

from nfl_edge.core.odds_math import safe_div
from nfl_edge.core.sim_interface import TeamStatisticalProfile, parse_record

logger = logging.getLogger(__name__)

LEAGUE_AVERAGE_DRIVES = 11.0
PLAYS_PER_DRIVE = 5.5
DRIVES_PLAUSIBLE_RANGE = (6.0, 15.0)

# Fields the strength formulas lean on hardest; missing any of these
# downgrades the profile to PARTIAL.
CORE_FIELDS = (
    "points_per_game",
    "points_allowed_per_game",
    "passing_yards",
    "rushing_yards",
    "yards_per_play",
    "red_zone_efficiency",
    "third_down_conversion_rate",
    "turnovers_lost",
    "turnovers_forced",
    "def_passing_yards_allowed",
    "def_rushing_yards_allowed",
    "def_yards_per_play_allowed",
)


class StatsQuality(str, Enum):
    REAL = "real"
    PARTIAL = "partial"
    DEFAULT = "default"


@dataclass
class ProfileBuild:
    profile: TeamStatisticalProfile
    quality: StatsQuality
    missing_fields: List[str] = field(default_factory=list)
    rejected_fields: List[str] = field(default_factory=list)


def league_average_profile(team: str) -> TeamStatisticalProfile:
    """2024 NFL league averages for a team with no stats on file."""
    logger.info("Using league average stats for %s", team)
    return TeamStatisticalProfile.league_average(team)


def estimate_drives_per_game(total_plays: Optional[float]) -> float:
    """Drives per game from plays per game, with a league-average fallback."""
    if total_plays is None or total_plays <= 0:
        return LEAGUE_AVERAGE_DRIVES
    drives = safe_div(total_plays, PLAYS_PER_DRIVE, default=LEAGUE_AVERAGE_DRIVES)
    lo, hi = DRIVES_PLAUSIBLE_RANGE
    if lo <= drives <= hi:
        return drives
    logger.warning(
        "Calculated drives per game (%.2f) outside [%g, %g]; using league average",
        drives, lo, hi,
    )
    return LEAGUE_AVERAGE_DRIVES


def build_profile(
    team: str,
    record: Optional[Mapping[str, Any]],
    *,
    use_league_defaults: bool = True,
) -> ProfileBuild:
    """Build a profile for *team* from a raw stats *record*.

    Args:
        team: Team name stamped on the profile.
        record: Stats row (any key spelling accepted by
            :meth:`TeamStatisticalProfile.from_record`), or ``None`` when the
            team has no row at all.
        use_league_defaults: Fill gaps with league averages (default) or
            with zeros.
    """
    if not record:
        return ProfileBuild(
            profile=league_average_profile(team),
            quality=StatsQuality.DEFAULT,
            missing_fields=list(TeamStatisticalProfile.stat_fields()),
        )

    values, rejected = parse_record(record)
    supplied = bool(values)
    if "drives_per_game" not in values:
        values["drives_per_game"] = estimate_drives_per_game(values.get("total_plays"))

    missing = [name for name in TeamStatisticalProfile.stat_fields() if name not in values]
    profile = TeamStatisticalProfile.from_values(
        values, team=team, use_league_defaults=use_league_defaults
    )

    if not supplied:
        quality = StatsQuality.DEFAULT
    elif any(name in missing for name in CORE_FIELDS):
        quality = StatsQuality.PARTIAL
    else:
        quality = StatsQuality.REAL

    if rejected:
        logger.warning("%s: unusable values for %s", team, ", ".join(sorted(set(rejected))))
    if quality is not StatsQuality.REAL:
        logger.warning(
            "%s stats quality %s (%d fields filled with %s)",
            team, quality.value, len(missing),
            "league averages" if use_league_defaults else "zeros",
        )
    return ProfileBuild(profile=profile, quality=quality, missing_fields=missing, rejected_fields=rejected)
