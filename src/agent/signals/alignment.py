"""Signal alignment, weighting, trend and risk analysis.

The alignment factor measures how much the price, volume and sentiment
signals agree in direction and magnitude:

    direction_i = sign(x_i) * min(1, |x_i| / scale_i)
    conflict    = sum(|direction_i - direction_price|) / 2
    alignment   = exp(-conflict)

1.0 means perfect agreement; the floor is exp(-2) when volume and
sentiment both point fully against price.
"""

import math

from agent.models import MarketObservation
from agent.signals.models import (
    NormalizedMetrics,
    RiskAssessment,
    RiskLevel,
    SignalWeights,
    TrendAssessment,
)
from agent.signals.numerical import clamp, safe_ratio, sign

#: Weight multiplier for a signal whose sign disagrees with price.
DISAGREEMENT_PENALTY = 0.7

#: Weight multiplier for confirming or near-extreme signals.
EMPHASIS_BOOST = 1.2

#: Distance (percent) from ATH/ATL under which a token counts as near the extreme.
EXTREME_PROXIMITY_PCT = 20.0


def _scaled_direction(value: float, scale: float) -> float:
    return sign(value) * min(1.0, abs(value) / scale)


def signal_directions(
    observation: MarketObservation,
    normalized: NormalizedMetrics,
) -> tuple[float, float, float]:
    """Return (price, volume, sentiment) directions, each in [-1, 1].

    Volume direction comes from the 24h volume change (50% = full magnitude)
    and falls back to the market cap change when no volume baseline exists.
    """
    price_dir = _scaled_direction(observation.price_change_percentage_24h or 0.0, 10.0)

    if observation.volume_change_24h_pct is not None:
        volume_dir = _scaled_direction(observation.volume_change_24h_pct, 50.0)
    else:
        volume_dir = _scaled_direction(
            observation.market_cap_change_percentage_24h or 0.0, 10.0
        )

    return price_dir, volume_dir, clamp(normalized.sentiment, -1.0, 1.0)


def calculate_alignment_factor(
    observation: MarketObservation,
    normalized: NormalizedMetrics,
) -> float:
    """Return exp(-conflict) across price, volume and sentiment directions."""
    directions = signal_directions(observation, normalized)
    price_dir = directions[0]
    conflict = sum(abs(d - price_dir) for d in directions) / 2
    return math.exp(-conflict)


def calculate_signal_weights(
    observation: MarketObservation,
    normalized: NormalizedMetrics,
) -> SignalWeights:
    """Weight the price, volume and sentiment signals by strength and agreement.

    Volume and sentiment weights are multiplied by 0.7 when their direction
    disagrees with price. Weights are normalized to sum to 1; with no signal
    at all they are split evenly.
    """
    price_change = observation.price_change_percentage_24h or 0.0
    price_dir, volume_dir, sentiment_dir = signal_directions(observation, normalized)
    vol_mcap = normalized.volume_to_mcap_ratio

    price_w = min(1.0, abs(price_change) / 10)
    volume_w = min(1.0, vol_mcap)
    sentiment_w = abs(sentiment_dir)

    # Volume confirming a large move
    if vol_mcap > 0.15 and abs(price_change) > 5:
        volume_w *= EMPHASIS_BOOST

    if sign(volume_dir) != sign(price_dir):
        volume_w *= DISAGREEMENT_PENALTY
    if sign(sentiment_dir) != sign(price_dir):
        sentiment_w *= DISAGREEMENT_PENALTY

    if abs(observation.ath_change_percentage) < EXTREME_PROXIMITY_PCT:
        sentiment_w *= EMPHASIS_BOOST
    elif abs(observation.atl_change_percentage) < EXTREME_PROXIMITY_PCT:
        volume_w *= EMPHASIS_BOOST

    total = price_w + volume_w + sentiment_w
    if total <= 0:
        return SignalWeights(price=1 / 3, volume=1 / 3, sentiment=1 / 3)

    return SignalWeights(
        price=price_w / total,
        volume=volume_w / total,
        sentiment=sentiment_w / total,
    )


def _context_multiplier(observation: MarketObservation) -> float:
    multiplier = 1.0

    if (
        abs(observation.ath_change_percentage) < EXTREME_PROXIMITY_PCT
        or abs(observation.atl_change_percentage) < EXTREME_PROXIMITY_PCT
    ):
        multiplier *= EMPHASIS_BOOST

    intraday_range = safe_ratio(observation.high_24h - observation.low_24h, observation.price_usd)
    if intraday_range > 0.1:
        multiplier *= 1.1

    return multiplier


def _trend_type(observation: MarketObservation, strength: float, alignment: float) -> str:
    price_change = observation.price_change_percentage_24h or 0.0
    mcap_change = observation.market_cap_change_percentage_24h or 0.0

    if strength > 0.7 and alignment > 0.8:
        return "strong_uptrend" if price_change > 0 else "strong_downtrend"
    if strength > 0.4 or (strength > 0.3 and alignment > 0.7):
        return "uptrend" if price_change > 0 else "downtrend"
    if sign(price_change) != sign(mcap_change):
        return "divergent"
    if abs(price_change) < 2 and strength < 0.3:
        return "sideways"
    return "weak_uptrend" if price_change > 0 else "weak_downtrend"


def analyze_trend(
    observation: MarketObservation,
    normalized: NormalizedMetrics,
    weights: SignalWeights,
    alignment: float,
) -> TrendAssessment:
    """Combine weighted component strengths into a trend type and strength."""
    price_strength = abs(observation.price_change_percentage_24h or 0.0) / 10 * weights.price
    volume_strength = min(1.0, normalized.volume_to_mcap_ratio * 5) * weights.volume
    sentiment_strength = abs(normalized.sentiment) * weights.sentiment

    base = price_strength + volume_strength + sentiment_strength
    strength = base * alignment * _context_multiplier(observation)

    return TrendAssessment(
        type=_trend_type(observation, strength, alignment),
        strength=strength,
    )


def volatility_risk_score(observation: MarketObservation) -> float:
    """Intraday range plus absolute 24h move, scaled so 20 points saturate."""
    range_pct = safe_ratio(observation.high_24h - observation.low_24h, observation.price_usd) * 100
    return min(1.0, (range_pct + abs(observation.price_change_percentage_24h or 0.0)) / 20)


def categorize_risk(score: float) -> RiskLevel:
    if score > 0.7:
        return RiskLevel.HIGH
    if score > 0.4:
        return RiskLevel.MODERATE
    return RiskLevel.LOW


def analyze_risk(
    observation: MarketObservation,
    normalized: NormalizedMetrics,
    alignment: float,
) -> RiskAssessment:
    """Composite risk: volatility 40%, liquidity 30%, market structure 20%, conflict 10%."""
    volatility_risk = volatility_risk_score(observation)
    liquidity_risk = 1 - min(1.0, normalized.volume_to_mcap_ratio * 5)
    market_risk = min(
        1.0,
        (abs(observation.ath_change_percentage) / 100 + (1 - normalized.supply_distribution))
        / 2,
    )

    score = (
        volatility_risk * 0.4
        + liquidity_risk * 0.3
        + market_risk * 0.2
        + (1 - alignment) * 0.1
    )
    score = clamp(score)
    return RiskAssessment(level=categorize_risk(score), score=score)
