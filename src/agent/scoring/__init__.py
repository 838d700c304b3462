"""Outcome aggregation and buying confidence scoring.

Turns the trading decisions linked to similar historical observations
into profitability scores, cohort statistics, and a bounded confidence
score with an explainable breakdown.
"""

from agent.scoring.aggregator import (
    aggregate,
    calculate_decision_type_stats,
    calculate_profitability_score,
)
from agent.scoring.confidence import calculate_buying_confidence, sample_size_confidence
from agent.scoring.forecast import forecast_from_matches
from agent.scoring.models import (
    BuyingConfidenceResult,
    ConfidenceBreakdown,
    ConfidenceWeights,
    DecisionStats,
    ForecastOutcome,
    WindowForecast,
    WindowMatch,
)
from agent.scoring.weighting import normalize_embedding_similarity

__all__ = [
    "BuyingConfidenceResult",
    "ConfidenceBreakdown",
    "ConfidenceWeights",
    "DecisionStats",
    "ForecastOutcome",
    "WindowForecast",
    "WindowMatch",
    "aggregate",
    "calculate_buying_confidence",
    "calculate_decision_type_stats",
    "calculate_profitability_score",
    "forecast_from_matches",
    "normalize_embedding_similarity",
    "sample_size_confidence",
]
