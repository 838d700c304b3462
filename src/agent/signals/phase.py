"""Rule-based market phase detection.

Each phase accumulates integer points from independent rule triggers
(volume strength, price momentum, intraday position/velocity, social and
wallet engagement). The highest total wins; ties resolve to the phase
declared first in MarketPhase (accumulation, markup, distribution, markdown).
"""

from agent.models import MarketObservation
from agent.signals.models import MarketPhase, NormalizedMetrics

#: Volume/market-cap ratio above which volume counts as strong without batch stats.
STRONG_VOLUME_RATIO = 0.15


def score_market_phases(
    normalized: NormalizedMetrics,
    observation: MarketObservation,
) -> dict[MarketPhase, int]:
    """Return the point total for every phase, in priority order."""
    scores = {phase: 0 for phase in MarketPhase}
    price_change = observation.price_change_percentage_24h or 0.0

    # Volume strength
    if normalized.has_batch_stats:
        strong_volume = normalized.volume_normalized > 0.7
    else:
        strong_volume = normalized.volume_to_mcap_ratio > STRONG_VOLUME_RATIO
    if strong_volume:
        scores[MarketPhase.MARKUP] += 2
        scores[MarketPhase.DISTRIBUTION] += 1

    # Volume heavy relative to the size of the move
    if normalized.volume_intensity_24h > 2:
        if price_change > 0:
            scores[MarketPhase.MARKUP] += 2
        else:
            scores[MarketPhase.MARKDOWN] += 2

    # Price momentum
    if price_change > 5:
        scores[MarketPhase.MARKUP] += 2
        scores[MarketPhase.ACCUMULATION] += 1
    elif price_change < -2:
        scores[MarketPhase.DISTRIBUTION] += 2
        scores[MarketPhase.MARKDOWN] += 1

    # Position within the 24h range
    if normalized.price_range_usage_24h > 0.8:
        scores[MarketPhase.DISTRIBUTION] += 2
    elif normalized.price_range_usage_24h < 0.2:
        scores[MarketPhase.ACCUMULATION] += 2

    # Velocity across the 24h range
    if normalized.price_velocity_24h > 0.7:
        scores[MarketPhase.MARKUP] += 1
    elif normalized.price_velocity_24h < -0.7:
        scores[MarketPhase.MARKDOWN] += 1

    # Social and wallet engagement
    if normalized.social_engagement_ratio > 0.1:
        scores[MarketPhase.ACCUMULATION] += 1
        scores[MarketPhase.MARKUP] += 1
    if normalized.wallet_activity_ratio > 0.1:
        scores[MarketPhase.ACCUMULATION] += 1
        scores[MarketPhase.MARKUP] += 1

    return scores


def detect_market_phase(
    normalized: NormalizedMetrics,
    observation: MarketObservation,
) -> MarketPhase:
    """Return the winning phase; the first declared phase wins ties."""
    scores = score_market_phases(normalized, observation)

    best = MarketPhase.ACCUMULATION
    for phase in MarketPhase:
        if scores[phase] > scores[best]:
            best = phase
    return best
