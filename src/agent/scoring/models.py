"""Scoring data models: decision statistics, weights, and confidence results."""

from dataclasses import dataclass, field
from enum import Enum

from agent.config import ScoringSettings


@dataclass(frozen=True)
class DecisionStats:
    """BUY/SELL counts over a cohort of similar decisions.

    average_profit_percent is the mean absolute move over the profitable
    decisions only (0 when none are profitable).
    """

    buy_count: int = 0
    sell_count: int = 0
    profitable_buy_count: int = 0
    profitable_sell_count: int = 0
    average_profit_percent: float = 0.0

    @property
    def total(self) -> int:
        return self.buy_count + self.sell_count


@dataclass(frozen=True)
class ConfidenceWeights:
    """Relative weights of the confidence sub-scores.

    Intended to sum to ~1.0; not enforced.
    """

    decision_type_ratio: float = 0.30
    similarity: float = 0.35
    profitability: float = 0.25
    confidence: float = 0.10

    @classmethod
    def from_settings(cls, settings: ScoringSettings) -> "ConfidenceWeights":
        return cls(
            decision_type_ratio=settings.weight_decision_type,
            similarity=settings.weight_similarity,
            profitability=settings.weight_profitability,
            confidence=settings.weight_confidence,
        )


@dataclass(frozen=True)
class ConfidenceBreakdown:
    """Explainable sub-metrics behind a buying confidence score.

    decision_confidence_score (weighted mean of the historical decisions'
    own confidence) and modifier are reported for audit; only the first
    five fields feed the final score.
    """

    decision_type_score: float = 0.0
    similarity_score: float = 0.0
    profitability_score: float = 0.0
    volatility_adjustment: float = 0.0
    sample_size_confidence: float = 0.0
    decision_confidence_score: float = 0.0
    modifier: float = 0.0


@dataclass(frozen=True)
class BuyingConfidenceResult:
    """Bounded buying confidence in [0, 1] with its breakdown."""

    score: float = 0.0
    sample_size_confidence: float = 0.0
    breakdown: ConfidenceBreakdown = field(default_factory=ConfidenceBreakdown)

    @classmethod
    def zero(cls) -> "BuyingConfidenceResult":
        return cls()


class ForecastOutcome(str, Enum):
    """Next-day direction of a historical price window."""

    BULLISH = "bullish"
    BEARISH = "bearish"


@dataclass(frozen=True)
class WindowMatch:
    """A historical OHLCV window returned by similarity search, with its outcome.

    outcome is None for windows whose next day is not known yet.
    """

    id: str
    similarity: float
    next_day_change: float
    outcome: ForecastOutcome | None = None


@dataclass(frozen=True)
class WindowForecast:
    """Similarity-weighted next-day forecast from matched windows."""

    prediction: ForecastOutcome
    confidence: float
    distribution: dict[ForecastOutcome, float]
    expected_next_day_change: float
    match_count: int
