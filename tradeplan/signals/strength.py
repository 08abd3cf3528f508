"""Strength classification — pure math, no I/O.

Turns three timeframe readings into a strength score T and classifies T
into one of five bands using an explicitly selected ``BandProfile``.

Two banding tables exist::

    narrow:  T ≥ 3  Extreme Strong │ T ≥ 1 Strong │ T > -1 Neutral │ T ≥ -3 Weak │ else Extreme Weak
    wide:    T ≥ 8  Extreme Strong │ T ≥ 6 Strong │ T ≥ -5 Neutral │ T ≥ -8 Weak │ else Extreme Weak

Note the narrow table's Neutral floor is exclusive: T = -1 is Weak.
"""

import math
from dataclasses import dataclass

from tradeplan.errors import InputValidationError
from tradeplan.signals.models import StrengthLabel


@dataclass(frozen=True)
class BandProfile:
    """Lower bounds of each band, strongest first."""

    name: str
    extreme_strong: float
    strong: float
    neutral: float
    weak: float
    neutral_inclusive: bool = True


NARROW_BAND = BandProfile(
    name="narrow",
    extreme_strong=3.0,
    strong=1.0,
    neutral=-1.0,
    weak=-3.0,
    neutral_inclusive=False,
)

WIDE_BAND = BandProfile(
    name="wide",
    extreme_strong=8.0,
    strong=6.0,
    neutral=-5.0,
    weak=-8.0,
)

BAND_PROFILES: dict[str, BandProfile] = {
    NARROW_BAND.name: NARROW_BAND,
    WIDE_BAND.name: WIDE_BAND,
}


def calculate_strength_score(d1: float, h4: float, h1: float) -> float:
    """Return T, the sum of the daily, 4-hour, and 1-hour readings."""
    return d1 + h4 + h1


def classify(t: float, profile: BandProfile = NARROW_BAND) -> StrengthLabel:
    """Classify a strength score into a ``StrengthLabel``.

    Args:
        t: Strength score (sum of the three timeframe readings).
        profile: Banding table to apply.

    Raises:
        InputValidationError: If *t* is NaN or infinite.
    """
    if not math.isfinite(t):
        raise InputValidationError(f"strength score must be finite, got {t}")

    if t >= profile.extreme_strong:
        return StrengthLabel.EXTREME_STRONG
    if t >= profile.strong:
        return StrengthLabel.STRONG
    if t > profile.neutral or (profile.neutral_inclusive and t == profile.neutral):
        return StrengthLabel.NEUTRAL
    if t >= profile.weak:
        return StrengthLabel.WEAK
    return StrengthLabel.EXTREME_WEAK
