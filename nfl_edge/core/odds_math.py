"""Numeric guards and odds mathematics — the single source of truth.

Every function here is **pure**: no I/O, no logging, no side effects.
Import from this module; never reimplement locally in services.

The pillars exposed are:

1. **Safe arithmetic** — :func:`safe_div` and :func:`clamp`.  Every ratio
   in the simulator goes through ``safe_div`` so a zero denominator or a
   non-finite intermediate collapses to a neutral value instead of
   propagating NaN into a probability.
2. **Odds conversion** — American → decimal → implied probability, and
   the model-vs-market edge built on it.
3. **Market helpers** — favourite detection from moneylines and the
   spread → moneyline estimate used when a book posts no moneyline.

Run tests with::

    pytest tests/test_odds_math.py -v
"""

from __future__ import annotations

import math
from typing import Final, NamedTuple

# ---------------------------------------------------------------------------
# Module-level constants
# ---------------------------------------------------------------------------

#: American-odds magnitude floor.  Values below this indicate a data error.
_MIN_ODDS_MAGNITUDE: Final[int] = 100

#: Price posted on both sides of a pick'em when no moneyline exists.
PICKEM_MONEYLINE: Final[int] = -110

#: Clamp on the estimated favourite moneyline.
_FAVORITE_ML_BOUNDS: Final[tuple[float, float]] = (-1000.0, -105.0)

#: Clamp on the estimated underdog moneyline.
_UNDERDOG_ML_BOUNDS: Final[tuple[float, float]] = (105.0, 1000.0)

#: Typical two-way hold, in percent, removed from the underdog's fair price.
_TYPICAL_VIG_PCT: Final[float] = 4.5


# ---------------------------------------------------------------------------
# Safe arithmetic
# ---------------------------------------------------------------------------


def safe_div(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning *default* on a zero denominator or non-finite result.

    Examples::

        >>> safe_div(10, 4)
        2.5
        >>> safe_div(1, 0)
        0.0
        >>> safe_div(float("nan"), 2, default=0.5)
        0.5
    """
    if denominator == 0:
        return default
    try:
        result = numerator / denominator
    except (TypeError, ZeroDivisionError):
        return default
    if not math.isfinite(result):
        return default
    return result


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp *value* to ``[lo, hi]``; NaN maps to *lo*."""
    if value != value:  # NaN
        return lo
    return max(lo, min(hi, value))


def finite_or_zero(value: float) -> float:
    """Return *value* if it is a finite float, else ``0.0``."""
    return value if math.isfinite(value) else 0.0


# ---------------------------------------------------------------------------
# Odds conversion
# ---------------------------------------------------------------------------


def american_to_decimal(american_odds: int) -> float:
    """Convert American odds to decimal odds.

    Raises:
        ValueError: If ``|american_odds| < 100``.
    """
    if abs(american_odds) < _MIN_ODDS_MAGNITUDE:
        raise ValueError(
            f"Invalid American odds: {american_odds}. "
            f"Must be ≤ -{_MIN_ODDS_MAGNITUDE} or ≥ +{_MIN_ODDS_MAGNITUDE}."
        )
    if american_odds > 0:
        return 1.0 + american_odds / 100.0
    return 1.0 + 100.0 / abs(american_odds)


def implied_prob(american_odds: int) -> float:
    """Return the raw (vig-inclusive) implied probability of American odds."""
    return 1.0 / american_to_decimal(american_odds)


def calculate_edge(model_probability: float, american_odds: float) -> float:
    """Model probability minus the market's implied probability.

    Both sides are percentages, so the edge is in percentage points:
    a 58% model probability against a -110 price (52.4% implied) is an
    edge of about +5.6.

    Raises:
        ValueError: If *american_odds* is not valid American odds.
    """
    return model_probability - implied_prob(american_odds) * 100.0


# ---------------------------------------------------------------------------
# Market helpers
# ---------------------------------------------------------------------------


class FavoriteInfo(NamedTuple):
    """Which side the market favours."""

    favorite_is_home: bool
    favorite_moneyline: float
    underdog_moneyline: float


def determine_favorite(home_moneyline: float, away_moneyline: float) -> FavoriteInfo:
    """Identify the favourite as the side with the lower (more negative) price.

    A dead-even market is assigned to the away side, matching how the
    upstream pick generator resolves ties.
    """
    if home_moneyline < away_moneyline:
        return FavoriteInfo(True, home_moneyline, away_moneyline)
    return FavoriteInfo(False, away_moneyline, home_moneyline)


class MoneylineEstimate(NamedTuple):
    favorite_moneyline: int
    underdog_moneyline: int


def _underdog_from_favorite(favorite_moneyline: float) -> float:
    fav_prob = abs(favorite_moneyline) / (abs(favorite_moneyline) + 100.0)
    dog_prob = (1.0 - fav_prob) * (1.0 - _TYPICAL_VIG_PCT / 100.0)
    dog_ml = safe_div(100.0, dog_prob, default=_UNDERDOG_ML_BOUNDS[1] + 100.0) - 100.0
    return clamp(dog_ml, *_UNDERDOG_ML_BOUNDS)


def spread_to_moneyline(spread: float) -> MoneylineEstimate:
    """Estimate favourite/underdog moneylines from a point spread.

    Piecewise-linear in ``|spread|``: -40 per point up to 3, -37.5 per point
    from 3 to 7, -50 per point from 7 to 10 and -55 per point beyond.
    Spreads under half a point are treated as a pick'em at -110 both ways.
    """
    points = abs(spread)
    if points < 0.5:
        return MoneylineEstimate(PICKEM_MONEYLINE, PICKEM_MONEYLINE)

    if points <= 3:
        fav = -100.0 - points * 40.0
    elif points <= 7:
        fav = -150.0 - (points - 3) * 37.5
    elif points <= 10:
        fav = -300.0 - (points - 7) * 50.0
    else:
        fav = -450.0 - (points - 10) * 55.0

    fav = clamp(fav, *_FAVORITE_ML_BOUNDS)
    dog = _underdog_from_favorite(fav)
    return MoneylineEstimate(round(fav), round(dog))


def estimate_moneylines(home_spread: float | None) -> tuple[int, int]:
    """Return ``(home_ml, away_ml)`` estimated from the home spread.

    A negative home spread makes the home side the favourite.
    """
    if home_spread is None:
        return PICKEM_MONEYLINE, PICKEM_MONEYLINE
    est = spread_to_moneyline(home_spread)
    if home_spread > 0:
        return est.underdog_moneyline, est.favorite_moneyline
    return est.favorite_moneyline, est.underdog_moneyline
