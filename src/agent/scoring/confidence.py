"""Buying confidence scoring over a cohort of similar historical decisions.

Combines decision-type ratios, weighted similarity, weighted profitability,
a volatility adjustment and sample-size confidence into one bounded score:

    base     = decision_type * w.decision_type_ratio
             + similarity * w.similarity
             + profitability * w.profitability
    modifier = 0.85 + volatility_adjustment * 0.15 + sample_size_confidence * 0.2
    score    = clamp(base * modifier, 0, 1)

The modifier can reach 1.2, so the final clamp is required.
"""

from collections.abc import Sequence
from datetime import datetime, timezone

from agent.logging import get_logger
from agent.models import SimilarObservation
from agent.scoring.models import (
    BuyingConfidenceResult,
    ConfidenceBreakdown,
    ConfidenceWeights,
    DecisionStats,
)
from agent.scoring.weighting import decision_weight, volatility_score, weighted_score
from agent.signals.numerical import clamp

logger = get_logger(__name__)

BASE_WEIGHT = 0.85
VOLATILITY_WEIGHT = 0.15
SAMPLE_SIZE_WEIGHT = 0.2

MIN_SAMPLE_SIZE = 5
OPTIMAL_SAMPLE_SIZE = 15


def sample_size_confidence(
    sample_size: int,
    min_sample_size: int = MIN_SAMPLE_SIZE,
    optimal_sample_size: int = OPTIMAL_SAMPLE_SIZE,
) -> float:
    """Linear ramp from 0 at min_sample_size to 1 at optimal_sample_size."""
    if optimal_sample_size <= min_sample_size:
        return 1.0 if sample_size >= optimal_sample_size else 0.0
    return clamp((sample_size - min_sample_size) / (optimal_sample_size - min_sample_size))


def decision_type_score(stats: DecisionStats) -> float:
    """Score the cohort's BUY/SELL mix.

    BUY-only: profitable buy ratio. SELL-only: 1 - profitable sell ratio,
    since sells that paid off preceded declines. Mixed: profitable buy ratio
    weighted by buy share minus profitable sell ratio weighted by sell share;
    this can be negative and is bounded by the final clamp.
    """
    if stats.total == 0:
        return 0.0
    if stats.sell_count == 0:
        return stats.profitable_buy_count / stats.buy_count
    if stats.buy_count == 0:
        return 1 - stats.profitable_sell_count / stats.sell_count

    buy_ratio = stats.profitable_buy_count / stats.buy_count
    sell_ratio = stats.profitable_sell_count / stats.sell_count
    buy_share = stats.buy_count / stats.total
    sell_share = stats.sell_count / stats.total
    return buy_ratio * buy_share - sell_ratio * sell_share


def calculate_buying_confidence(
    decisions: Sequence[SimilarObservation],
    stats: DecisionStats,
    weights: ConfidenceWeights,
    now: datetime | None = None,
    min_sample_size: int = MIN_SAMPLE_SIZE,
    optimal_sample_size: int = OPTIMAL_SAMPLE_SIZE,
) -> BuyingConfidenceResult:
    """Compute the bounded buying confidence for a cohort of similar decisions.

    Args:
        decisions: Similar observations joined to their decisions, with
            profitability_score already annotated.
        stats: BUY/SELL statistics over the same cohort.
        weights: Sub-score weights.
        now: Reference time for recency decay (defaults to current UTC time).
        min_sample_size: Cohort size at which sample confidence starts rising.
        optimal_sample_size: Cohort size at which sample confidence reaches 1.

    Returns:
        BuyingConfidenceResult; the all-zero result when there are no
        decisions or the stats count no BUY or SELL decisions.
    """
    if not decisions or stats.total == 0:
        return BuyingConfidenceResult.zero()

    now = now or datetime.now(timezone.utc)
    decision_weights = [decision_weight(d, now) for d in decisions]

    type_score = decision_type_score(stats)
    similarity = weighted_score([d.similarity for d in decisions], decision_weights)
    profitability = weighted_score(
        [d.profitability_score for d in decisions], decision_weights
    )
    decision_confidence = weighted_score(
        [d.decision.confidence_score for d in decisions], decision_weights
    )
    volatility_adjustment = sum(
        volatility_score(d.market_condition, d.decision) for d in decisions
    ) / len(decisions)
    sample_confidence = sample_size_confidence(
        len(decisions), min_sample_size, optimal_sample_size
    )

    base = (
        type_score * weights.decision_type_ratio
        + similarity * weights.similarity
        + profitability * weights.profitability
    )
    modifier = (
        BASE_WEIGHT
        + volatility_adjustment * VOLATILITY_WEIGHT
        + sample_confidence * SAMPLE_SIZE_WEIGHT
    )
    score = clamp(base * modifier)

    logger.debug(
        "buying_confidence_computed",
        decisions=len(decisions),
        base=round(base, 4),
        modifier=round(modifier, 4),
        score=round(score, 4),
    )

    return BuyingConfidenceResult(
        score=score,
        sample_size_confidence=sample_confidence,
        breakdown=ConfidenceBreakdown(
            decision_type_score=type_score,
            similarity_score=similarity,
            profitability_score=profitability,
            volatility_adjustment=volatility_adjustment,
            sample_size_confidence=sample_confidence,
            decision_confidence_score=decision_confidence,
            modifier=modifier,
        ),
    )
