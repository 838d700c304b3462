"""Per-decision weighting for confidence aggregation.

Each similar decision is weighted by:

    weight = normalized_similarity * 0.5 + time_decay * 0.3 + volatility * 0.2

where time_decay = exp(-elapsed_ms / 30 days) and volatility blends the
market's price calmness with how close the decision price was to the
market price at the time.
"""

import math
from collections.abc import Sequence
from datetime import datetime

from agent.models import MarketObservation, SimilarObservation, TradingDecision
from agent.signals.numerical import clamp

#: Raw embedding similarity treated as "no correlation".
SIMILARITY_FLOOR = 0.4

#: Time constant of the recency decay.
DECAY_WINDOW_MS = 30 * 24 * 60 * 60 * 1000

#: Relative price deviation at which entry proximity falls to 1/e.
ENTRY_PROXIMITY_SCALE = 0.05

SIMILARITY_WEIGHT = 0.5
TIME_WEIGHT = 0.3
VOLATILITY_WEIGHT = 0.2


def normalize_embedding_similarity(similarity: float) -> float:
    """Rescale raw similarity from [0.4, 1.0] onto [0, 1], clamped.

    Embedding similarity rarely drops below ~0.4 even for unrelated text.
    """
    return clamp((similarity - SIMILARITY_FLOOR) / (1 - SIMILARITY_FLOOR))


def time_decay_weight(created_at: datetime, now: datetime) -> float:
    """exp(-elapsed / 30 days); decisions dated in the future weigh 1."""
    elapsed_ms = max(0.0, (now - created_at).total_seconds() * 1000)
    return math.exp(-elapsed_ms / DECAY_WINDOW_MS)


def price_calmness(observation: MarketObservation) -> float:
    """1 for a flat market, toward 0 as 24h and 1h moves grow.

    Blends 24h (70%) and 1h (30%) calmness; uses 24h alone when the 1h
    change is unknown.
    """
    calm_24h = 1 - math.tanh(abs(observation.price_change_percentage_24h or 0.0) / 20)
    if observation.price_change_percentage_1h is None:
        return calm_24h
    calm_1h = 1 - math.tanh(abs(observation.price_change_percentage_1h) / 5)
    return calm_24h * 0.7 + calm_1h * 0.3


def entry_proximity(decision_price: float, market_price: float) -> float:
    """exp(-relative_deviation / 0.05); 0 when the market price is unknown."""
    if market_price <= 0:
        return 0.0
    deviation = abs(decision_price - market_price) / market_price
    return math.exp(-deviation / ENTRY_PROXIMITY_SCALE)


def volatility_score(observation: MarketObservation, decision: TradingDecision) -> float:
    """Calmness (60%) blended with entry proximity (40%), in [0, 1]."""
    return (
        price_calmness(observation) * 0.6
        + entry_proximity(decision.decision_price_usd, observation.price_usd) * 0.4
    )


def decision_weight(similar: SimilarObservation, now: datetime) -> float:
    return (
        normalize_embedding_similarity(similar.similarity) * SIMILARITY_WEIGHT
        + time_decay_weight(similar.decision.created_at, now) * TIME_WEIGHT
        + volatility_score(similar.market_condition, similar.decision) * VOLATILITY_WEIGHT
    )


def weighted_score(values: Sequence[float], weights: Sequence[float]) -> float:
    """Weighted mean of values; 0 when there is nothing to weigh."""
    total = sum(weights)
    if not values or total <= 0:
        return 0.0
    return sum(v * w for v, w in zip(values, weights)) / total
