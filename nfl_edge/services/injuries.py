"""
Injury impact estimation and statistical adjustment.

Two layers:

1. **Impact scoring** — each injured player is valued in points of spread
   from position, starter tier, backup quality and practice status.
   Multiple injuries in one position group compound through a cluster
   multiplier (an offensive line missing three starters is worse than three
   isolated absences).  The result is an :class:`InjuryImpactSummary`.

2. **Statistical adjustment** — :func:`adjust_for_injuries` turns a summary
   into a degraded :class:`TeamStatisticalProfile`.  Offensive injuries
   shrink production; defensive injuries inflate what the team allows.
   Position-specific multipliers decide how much of each impact point lands
   on general, passing and rushing stats.

Injury reports are supplied by the caller; this module does no fetching.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Tuple

from nfl_edge.core.sim_interface import TeamStatisticalProfile

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Position tables
# ---------------------------------------------------------------------------

OFFENSIVE_POSITIONS = ("QB", "RB", "WR", "TE", "T", "G", "C", "FB")
DEFENSIVE_POSITIONS = ("DE", "DT", "NT", "LB", "OLB", "ILB", "CB", "S", "FS", "SS")

# Fraction of team production lost per impact point: (general, pass, run)
OFFENSIVE_IMPACT_MULTIPLIERS: Dict[str, Tuple[float, float, float]] = {
    "QB": (0.08, 0.12, 0.03),
    "WR": (0.04, 0.06, 0.01),
    "TE": (0.04, 0.05, 0.02),
    "RB": (0.04, 0.02, 0.06),
    "T": (0.05, 0.06, 0.04),
    "G": (0.04, 0.03, 0.05),
    "C": (0.045, 0.04, 0.045),
}

# Fraction of defensive quality lost per impact point: (general, pass D, run D)
DEFENSIVE_IMPACT_MULTIPLIERS: Dict[str, Tuple[float, float, float]] = {
    "DE": (0.05, 0.06, 0.04),
    "DT": (0.04, 0.03, 0.05),
    "LB": (0.045, 0.03, 0.05),
    "CB": (0.045, 0.06, 0.02),
    "S": (0.04, 0.04, 0.03),
}

# Depth-chart variants scored with their base position's multipliers
_POSITION_ALIASES: Dict[str, str] = {
    "NT": "DT",
    "OLB": "LB",
    "ILB": "LB",
    "MLB": "LB",
    "FS": "S",
    "SS": "S",
    "LT": "T",
    "RT": "T",
    "OT": "T",
    "LG": "G",
    "RG": "G",
    "OG": "G",
    "EDGE": "DE",
}

OFFENSIVE_CAPS = (0.5, 0.6, 0.5)
DEFENSIVE_CAPS = (0.4, 0.5, 0.4)

# Spread points a healthy starter is worth, by (position, tier)
POSITION_VALUES: Dict[Tuple[str, str], float] = {
    ("QB", "ELITE"): 7.0,
    ("QB", "ABOVE_AVERAGE"): 4.5,
    ("QB", "AVERAGE"): 3.0,
    ("QB", "BELOW_AVERAGE"): 1.5,
    ("WR", "ELITE"): 2.0,
    ("WR", "ABOVE_AVERAGE"): 1.5,
    ("WR", "AVERAGE"): 0.75,
    ("TE", "ELITE"): 2.0,
    ("TE", "ABOVE_AVERAGE"): 1.0,
    ("TE", "AVERAGE"): 0.5,
    ("RB", "ELITE"): 1.5,
    ("RB", "ABOVE_AVERAGE"): 1.0,
    ("RB", "AVERAGE"): 0.5,
    ("T", "ELITE"): 1.5,
    ("T", "AVERAGE"): 1.0,
    ("C", "ELITE"): 1.0,
    ("C", "AVERAGE"): 0.5,
    ("G", "AVERAGE"): 0.5,
    ("DE", "ELITE"): 1.5,
    ("DE", "ABOVE_AVERAGE"): 1.0,
    ("DT", "ELITE"): 1.0,
    ("CB", "ELITE"): 1.0,
    ("CB", "AVERAGE"): 0.5,
    ("S", "ELITE"): 1.0,
    ("S", "AVERAGE"): 0.5,
    ("LB", "ELITE"): 1.0,
    ("LB", "ABOVE_AVERAGE"): 0.75,
    ("LB", "AVERAGE"): 0.5,
}
DEFAULT_POSITION_VALUE = 0.5
GREEN_DOT_BONUS = 0.5
SPECIALIST_VALUE = 0.25  # FB, K, P

TIER_VALUES: Dict[str, float] = {
    "ELITE": 10.0,
    "ABOVE_AVERAGE": 7.0,
    "AVERAGE": 5.0,
    "BELOW_AVERAGE": 3.0,
    "POOR": 1.0,
}

PRACTICE_STATUS_MULTIPLIERS: Dict[str, float] = {
    "OUT": 1.0,
    "DOUBTFUL": 0.85,
    "QUESTIONABLE_DNP": 0.65,
    "QUESTIONABLE_LIMITED": 0.40,
    "QUESTIONABLE_FULL": 0.15,
    "PROBABLE": 0.10,
    "HEALTHY": 0.0,
}

POSITION_GROUPS: Dict[str, Tuple[str, ...]] = {
    "OFFENSIVE_LINE": ("T", "G", "C"),
    "SECONDARY": ("CB", "S"),
    "WIDE_RECEIVERS": ("WR",),
    "LINEBACKERS": ("LB",),
    "DEFENSIVE_LINE": ("DE", "DT"),
}


def normalize_position(position: str) -> str:
    pos = (position or "").strip().upper()
    return _POSITION_ALIASES.get(pos, pos)


# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------

@dataclass
class PlayerInjury:
    """One line of an injury report, enriched with depth-chart tiers."""
    name: str
    position: str
    player_tier: str = "AVERAGE"
    backup_tier: str = "BELOW_AVERAGE"
    practice_participation: str = ""
    game_status: str = ""
    is_green_dot_defender: bool = False
    injury: str = ""


@dataclass(frozen=True)
class PlayerImpact:
    player_name: str
    position: str
    base_value: float
    backup_differential: float
    practice_status: str
    status_multiplier: float
    impact_points: float


@dataclass(frozen=True)
class InjuryImpactSummary:
    """Pre-computed injury picture for one team.

    ``cluster_multipliers`` only lists groups with two or more injuries
    (every value ≥ 1.0).  ``total_impact_points`` is never negative.
    """
    individual_impacts: Tuple[PlayerImpact, ...] = ()
    cluster_multipliers: Dict[str, float] = field(default_factory=dict)
    total_impact_points: float = 0.0

    @property
    def is_empty(self) -> bool:
        return self.total_impact_points <= 0.0

    def offensive_impacts(self) -> List[PlayerImpact]:
        return [i for i in self.individual_impacts if i.position in OFFENSIVE_POSITIONS]

    def defensive_impacts(self) -> List[PlayerImpact]:
        return [i for i in self.individual_impacts if i.position in DEFENSIVE_POSITIONS]


@dataclass(frozen=True)
class InjuryLineAdjustment:
    opening_line: float
    home_impact: float
    away_impact: float
    net_impact: float
    adjusted_line: float

    @property
    def line_movement(self) -> float:
        return self.adjusted_line - self.opening_line


# ---------------------------------------------------------------------------
# Impact scoring
# ---------------------------------------------------------------------------

def determine_practice_status(practice_participation: str, game_status: str) -> str:
    """Map the official report's participation/game-status pair to a status key.

    Unrecognised combinations fall back to ``QUESTIONABLE_LIMITED``.
    """
    participation = (practice_participation or "").strip().lower()
    status = (game_status or "").strip().lower()

    if status == "out":
        return "OUT"
    if status == "doubtful":
        return "DOUBTFUL"
    if status == "probable":
        return "PROBABLE"
    if status == "questionable":
        if participation.startswith("did not"):
            return "QUESTIONABLE_DNP"
        if participation.startswith("limited"):
            return "QUESTIONABLE_LIMITED"
        if participation.startswith("full"):
            return "QUESTIONABLE_FULL"
    if not status and participation.startswith("full"):
        return "HEALTHY"
    return "QUESTIONABLE_LIMITED"


def backup_differential(starter_tier: str, backup_tier: str) -> float:
    """Share of the starter's value lost when the backup plays.

    Unknown tiers read as AVERAGE (starter) and BELOW_AVERAGE (backup).
    Can go negative when the backup out-rates the starter; callers floor the
    resulting impact at zero.
    """
    starter = TIER_VALUES.get(starter_tier, TIER_VALUES["AVERAGE"])
    backup = TIER_VALUES.get(backup_tier, TIER_VALUES["BELOW_AVERAGE"])
    return 1.0 - backup / starter


def position_value(position: str, tier: str) -> float:
    pos = normalize_position(position)
    if pos in ("FB", "K", "P"):
        return SPECIALIST_VALUE
    return POSITION_VALUES.get((pos, tier), DEFAULT_POSITION_VALUE)


def calculate_player_impact(player: PlayerInjury) -> PlayerImpact:
    """Spread-point impact of one injured player."""
    base = position_value(player.position, player.player_tier)
    if player.is_green_dot_defender:
        base += GREEN_DOT_BONUS

    diff = backup_differential(player.player_tier, player.backup_tier)
    status = determine_practice_status(player.practice_participation, player.game_status)
    status_mult = PRACTICE_STATUS_MULTIPLIERS[status]

    return PlayerImpact(
        player_name=player.name,
        position=normalize_position(player.position),
        base_value=base,
        backup_differential=diff,
        practice_status=status,
        status_multiplier=status_mult,
        impact_points=max(0.0, base * diff * status_mult),
    )


def cluster_multiplier(injury_count: int) -> float:
    """Compounding factor for *injury_count* injuries in one position group."""
    if injury_count <= 1:
        return 1.0
    if injury_count == 2:
        return 1.3
    if injury_count == 3:
        return 1.6
    return 2.0


def analyze_team_injuries(players: Sequence[PlayerInjury]) -> InjuryImpactSummary:
    """Score a team's injury report.

    Total = sum of individual impacts + for each clustered group,
    ``group_impact × (multiplier − 1)``.
    """
    impacts = tuple(calculate_player_impact(p) for p in players)
    base_impact = sum(i.impact_points for i in impacts)

    clusters: Dict[str, float] = {}
    cluster_adjustment = 0.0
    for group, positions in POSITION_GROUPS.items():
        in_group = [i for i in impacts if i.position in positions]
        mult = cluster_multiplier(len(in_group))
        if mult > 1.0:
            clusters[group] = mult
            cluster_adjustment += sum(i.impact_points for i in in_group) * (mult - 1.0)

    return InjuryImpactSummary(
        individual_impacts=impacts,
        cluster_multipliers=clusters,
        total_impact_points=base_impact + cluster_adjustment,
    )


def adjusted_line(
    opening_line: float,
    home_summary: Optional[InjuryImpactSummary],
    away_summary: Optional[InjuryImpactSummary],
) -> InjuryLineAdjustment:
    """Move a home-perspective spread by the net injury impact.

    Away injuries help the home side (line moves toward home); home
    injuries hurt it.  ``adjusted = opening − (away − home)``.
    """
    home = home_summary.total_impact_points if home_summary else 0.0
    away = away_summary.total_impact_points if away_summary else 0.0
    net = away - home
    return InjuryLineAdjustment(
        opening_line=opening_line,
        home_impact=home,
        away_impact=away,
        net_impact=net,
        adjusted_line=opening_line - net,
    )


# ---------------------------------------------------------------------------
# Statistical adjustment
# ---------------------------------------------------------------------------

def _side_multipliers(
    impacts: Sequence[PlayerImpact],
    table: Dict[str, Tuple[float, float, float]],
    caps: Tuple[float, float, float],
) -> Tuple[float, float, float]:
    general = passing = rushing = 0.0
    for impact in impacts:
        mults = table.get(normalize_position(impact.position))
        if mults is None:
            continue
        general += impact.impact_points * mults[0]
        passing += impact.impact_points * mults[1]
        rushing += impact.impact_points * mults[2]
    return min(general, caps[0]), min(passing, caps[1]), min(rushing, caps[2])


def adjust_for_injuries(
    profile: TeamStatisticalProfile,
    summary: Optional[InjuryImpactSummary],
) -> TeamStatisticalProfile:
    """Return *profile* degraded by the injuries in *summary*.

    With no summary, or a summary worth zero points, the original object is
    returned unchanged.
    """
    if summary is None or summary.is_empty:
        return profile

    off_impacts = summary.offensive_impacts()
    def_impacts = summary.defensive_impacts()
    changes: Dict[str, float] = {}
    p = profile

    if off_impacts:
        g, pa, ru = _side_multipliers(off_impacts, OFFENSIVE_IMPACT_MULTIPLIERS, OFFENSIVE_CAPS)
        logger.debug(
            "%s offensive injury adjustment: general=%.1f%% pass=%.1f%% rush=%.1f%%",
            p.team, g * 100, pa * 100, ru * 100,
        )
        changes.update(
            points_per_game=p.points_per_game * (1 - g),
            offensive_yards_per_game=p.offensive_yards_per_game * (1 - g),
            yards_per_play=p.yards_per_play * (1 - g),
            passing_yards=p.passing_yards * (1 - pa),
            yards_per_pass_attempt=p.yards_per_pass_attempt * (1 - pa),
            pass_completion_pct=p.pass_completion_pct * (1 - pa * 0.5),
            rushing_yards=p.rushing_yards * (1 - ru),
            yards_per_rush=p.yards_per_rush * (1 - ru),
            third_down_conversion_rate=p.third_down_conversion_rate * (1 - g * 0.8),
            red_zone_efficiency=p.red_zone_efficiency * (1 - g * 0.7),
            drives_per_game=p.drives_per_game * (1 - g * 0.3),
        )

    if def_impacts:
        g, pd, rd = _side_multipliers(def_impacts, DEFENSIVE_IMPACT_MULTIPLIERS, DEFENSIVE_CAPS)
        logger.debug(
            "%s defensive injury adjustment: general=%.1f%% pass_d=%.1f%% run_d=%.1f%%",
            p.team, g * 100, pd * 100, rd * 100,
        )
        changes.update(
            points_allowed_per_game=p.points_allowed_per_game * (1 + g),
            defensive_yards_allowed=p.defensive_yards_allowed * (1 + g),
            def_yards_per_play_allowed=p.def_yards_per_play_allowed * (1 + g),
            def_passing_yards_allowed=p.def_passing_yards_allowed * (1 + pd),
            def_net_yards_per_pass=p.def_net_yards_per_pass * (1 + pd),
            def_rushing_yards_allowed=p.def_rushing_yards_allowed * (1 + rd),
            def_yards_per_rush_allowed=p.def_yards_per_rush_allowed * (1 + rd),
            def_interceptions=p.def_interceptions * (1 - g * 0.5),
        )

    logger.info(
        "Injury adjustment for %s: %.1f pts (%d offensive, %d defensive)",
        p.team, summary.total_impact_points, len(off_impacts), len(def_impacts),
    )
    return replace(profile, **changes)


def injury_variance_multiplier(summary: Optional[InjuryImpactSummary]) -> float:
    """Game-day variance scale for a banged-up team, in ``[1.0, 1.5]``."""
    if summary is None or summary.is_empty:
        return 1.0
    raw = 1.0 + summary.total_impact_points * 0.03 + len(summary.cluster_multipliers) * 0.1
    return min(1.5, raw)


def injury_summary_text(team: str, summary: Optional[InjuryImpactSummary]) -> str:
    """One-line human summary, e.g. for the prediction reasoning field."""
    if summary is None or summary.is_empty:
        return f"{team}: No significant injuries"

    parts: List[str] = []
    for label, impacts in (("OFF", summary.offensive_impacts()), ("DEF", summary.defensive_impacts())):
        if not impacts:
            continue
        total = sum(i.impact_points for i in impacts)
        notable = [f"{i.player_name} ({i.position})" for i in impacts if i.impact_points > 0.5]
        key = ", ".join(notable[:3])
        parts.append(f"{label}: {total:.1f}pts ({key})")

    if summary.cluster_multipliers:
        parts.append(f"{len(summary.cluster_multipliers)} clusters")

    return f"{team}: {' | '.join(parts)} | Total: {summary.total_impact_points:.1f}pts"
