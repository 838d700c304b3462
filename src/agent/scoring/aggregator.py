"""Outcome aggregation over historically similar trading decisions.

Joins matched observations to their decisions' recorded outcomes:
per-decision profitability scores and BUY/SELL cohort statistics.
"""

import math
from collections.abc import Iterable, Sequence

from agent.models import DecisionStatus, DecisionType, SimilarObservation, TradingDecision
from agent.scoring.models import DecisionStats

#: Default 24h move (percent) a decision needs to count as profitable.
DEFAULT_PROFITABLE_THRESHOLD = 5.0


def performance_score(percent_change: float) -> float:
    """Asymmetric reward curve for a percentage move.

    Gains compress slowly: min(1, (p/10)^0.7).
    Losses saturate quickly toward 0: max(0, 1 + tanh(p/5)).
    """
    if percent_change > 0:
        return min(1.0, (percent_change / 10) ** 0.7)
    return max(0.0, 1 + math.tanh(percent_change / 5))


def calculate_profitability_score(decision: TradingDecision) -> float:
    """Score a decision's outcome in [0, 1].

    Only COMPLETED decisions score. A SELL without a recorded 24h change
    falls back to its return over the linked previous BUY; without that
    linkage it scores 0.
    """
    if decision.status != DecisionStatus.COMPLETED:
        return 0.0

    if decision.price_change_24h_pct is not None:
        return performance_score(decision.price_change_24h_pct)

    if decision.decision_type == DecisionType.SELL and decision.previous_buy_price_usd:
        buy_price = decision.previous_buy_price_usd
        return performance_score((decision.decision_price_usd - buy_price) / buy_price * 100)

    return 0.0


def is_profitable(decision: TradingDecision, profitable_threshold: float) -> bool:
    """BUY is profitable at pct >= threshold, SELL at pct <= -threshold."""
    pct = decision.price_change_24h_pct
    if pct is None:
        return False
    if decision.decision_type == DecisionType.BUY:
        return pct >= profitable_threshold
    return pct <= -profitable_threshold


def calculate_decision_type_stats(
    decisions: Iterable[TradingDecision],
    profitable_threshold: float = DEFAULT_PROFITABLE_THRESHOLD,
) -> DecisionStats:
    """Count BUY/SELL decisions and their profitable subsets."""
    buy_count = sell_count = 0
    profitable_buy_count = profitable_sell_count = 0
    profit_total = 0.0

    for decision in decisions:
        profitable = is_profitable(decision, profitable_threshold)
        if decision.decision_type == DecisionType.BUY:
            buy_count += 1
        else:
            sell_count += 1
        if not profitable:
            continue

        profit_total += abs(decision.price_change_24h_pct)
        if decision.decision_type == DecisionType.BUY:
            profitable_buy_count += 1
        else:
            profitable_sell_count += 1

    profitable_count = profitable_buy_count + profitable_sell_count
    return DecisionStats(
        buy_count=buy_count,
        sell_count=sell_count,
        profitable_buy_count=profitable_buy_count,
        profitable_sell_count=profitable_sell_count,
        average_profit_percent=profit_total / profitable_count if profitable_count else 0.0,
    )


def with_profitability(similar: Iterable[SimilarObservation]) -> list[SimilarObservation]:
    """Return copies annotated with each decision's profitability score."""
    return [
        SimilarObservation(
            market_condition=s.market_condition,
            decision=s.decision,
            similarity=s.similarity,
            profitability_score=calculate_profitability_score(s.decision),
        )
        for s in similar
    ]


def aggregate(
    similar: Sequence[SimilarObservation],
    profitable_threshold: float = DEFAULT_PROFITABLE_THRESHOLD,
) -> tuple[list[SimilarObservation], DecisionStats]:
    """Annotate profitability and compute cohort statistics in one pass.

    Returns:
        Tuple of (scored similar observations, decision stats).
    """
    scored = with_profitability(similar)
    stats = calculate_decision_type_stats((s.decision for s in scored), profitable_threshold)
    return scored, stats
