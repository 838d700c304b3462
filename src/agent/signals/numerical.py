"""Numerical helpers shared by the normalizer and signature generator.

All helpers are total: degenerate inputs (equal bounds, zero or negative
denominators) produce a neutral value instead of raising.
"""

import math
from collections.abc import Sequence

from agent.signals.models import SeriesStats

#: Typical absolute 24h percentage move used to squash percentage changes.
TYPICAL_RANGE = 20.0

#: Value returned by min-max normalization when min == max.
NEUTRAL_MIDPOINT = 0.5


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


def sign(value: float) -> int:
    """Return -1, 0, or 1 (math.copysign has no zero case)."""
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def normalize_in_range(value: float, low: float, high: float) -> float:
    """Min-max normalize value into [0, 1].

    Returns NEUTRAL_MIDPOINT when the range is degenerate (low == high).
    """
    if low == high:
        return NEUTRAL_MIDPOINT
    return clamp((value - low) / (high - low))


def normalize_percentage(percentage: float, typical_range: float = TYPICAL_RANGE) -> float:
    """Squash a percentage change into (-1, 1) preserving sign and order.

    Formula: tanh(percentage / typical_range)
    """
    return math.tanh(percentage / typical_range)


def safe_ratio(numerator: float, denominator: float) -> float:
    """Divide, treating a non-positive denominator as producing zero."""
    if denominator <= 0:
        return 0.0
    return numerator / denominator


def z_score(value: float, mean: float, std_dev: float) -> float:
    """Standard score, 0 when the population has no spread."""
    if std_dev <= 0:
        return 0.0
    return (value - mean) / std_dev


def compute_series_stats(values: Sequence[float]) -> SeriesStats:
    """Compute min/max/mean/population standard deviation over values.

    An empty sequence yields all-zero stats.
    """
    if not values:
        return SeriesStats(min=0.0, max=0.0, mean=0.0, std_dev=0.0)

    mean = sum(values) / len(values)
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return SeriesStats(
        min=min(values),
        max=max(values),
        mean=mean,
        std_dev=math.sqrt(variance),
    )
