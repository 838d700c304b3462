"""Signal data models for observation normalization and signature rendering.

Scores here are floats: the formulas rely on tanh/exp, which Decimal does
not provide.
"""

from dataclasses import dataclass
from enum import Enum


class MarketPhase(str, Enum):
    """Market structure phase.

    Declaration order is the tie-break priority used by phase detection.
    """

    ACCUMULATION = "accumulation"
    MARKUP = "markup"
    DISTRIBUTION = "distribution"
    MARKDOWN = "markdown"


class RiskLevel(str, Enum):
    """Composite risk classification."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


@dataclass(frozen=True)
class SeriesStats:
    """Cross-sectional statistics for one field over a batch of observations."""

    min: float
    max: float
    mean: float
    std_dev: float


@dataclass(frozen=True)
class MarketStats:
    """Cross-sectional statistics used for batch-relative normalization."""

    price: SeriesStats
    volume: SeriesStats
    liquidity: SeriesStats


@dataclass(frozen=True)
class NormalizedMetrics:
    """Bounded metrics derived from a single MarketObservation.

    Bounds:
        [0, 1]: price_strength, price_normalized, volume_normalized,
            liquidity_normalized, supply_distribution, market_maturity,
            market_dominance, price_range_usage_24h
        [-1, 1]: price_momentum, market_momentum, price_volume_trend,
            price_velocity_24h, sentiment
        unbounded, >= 0: volume_to_mcap_ratio, volume_to_liquidity_ratio,
            volume_intensity_24h, wallet_activity_ratio, social_engagement_ratio
        unbounded, signed: price_z (0 without batch stats)
    """

    price_strength: float
    price_normalized: float
    volume_normalized: float
    liquidity_normalized: float
    price_z: float
    price_momentum: float
    market_momentum: float
    price_volume_trend: float
    price_velocity_24h: float
    price_range_usage_24h: float
    supply_distribution: float
    market_maturity: float
    market_dominance: float
    sentiment: float
    volume_to_mcap_ratio: float
    volume_to_liquidity_ratio: float
    volume_intensity_24h: float
    wallet_activity_ratio: float
    social_engagement_ratio: float
    has_batch_stats: bool = False


@dataclass(frozen=True)
class SignalWeights:
    """Relative weights of the price, volume and sentiment signals (sum to 1)."""

    price: float
    volume: float
    sentiment: float


@dataclass(frozen=True)
class TrendAssessment:
    """Aggregate trend classification and strength."""

    type: str
    strength: float


@dataclass(frozen=True)
class RiskAssessment:
    """Composite risk classification and score in [0, 1]."""

    level: RiskLevel
    score: float
