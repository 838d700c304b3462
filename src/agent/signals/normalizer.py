"""Observation normalization into bounded metrics.

Converts a raw MarketObservation into NormalizedMetrics, optionally relative
to cross-sectional MarketStats computed over a batch of observations.

Missing optional inputs contribute 0. A zero here means "no data", so
audits must not read it as a measured zero.
"""

import math
from collections.abc import Sequence

from agent.models import MarketObservation
from agent.signals.models import MarketStats, NormalizedMetrics
from agent.signals.numerical import (
    clamp,
    compute_series_stats,
    normalize_in_range,
    normalize_percentage,
    safe_ratio,
    sign,
    z_score,
)


def compute_market_stats(observations: Sequence[MarketObservation]) -> MarketStats:
    """Compute price/volume/liquidity statistics over a batch of observations."""
    return MarketStats(
        price=compute_series_stats([o.price_usd for o in observations]),
        volume=compute_series_stats([o.total_volume for o in observations]),
        liquidity=compute_series_stats([o.liquidity_usd for o in observations]),
    )


def composite_sentiment(observation: MarketObservation) -> float:
    """Sentiment in [-1, 1].

    Uses the provider's sentiment score when present. Otherwise derives one
    from price momentum (40%), market cap momentum (30%), and ATH/ATL
    distances (15% each), bounded with tanh.
    """
    if observation.sentiment_score is not None:
        return clamp(observation.sentiment_score, -1.0, 1.0)

    price_strength = (observation.price_change_percentage_24h or 0.0) / 20
    mcap_strength = (observation.market_cap_change_percentage_24h or 0.0) / 20
    ath_distance = observation.ath_change_percentage / 100
    atl_distance = observation.atl_change_percentage / 100

    weighted = (
        price_strength * 0.4
        + mcap_strength * 0.3
        + ath_distance * 0.15
        + atl_distance * 0.15
    )
    return math.tanh(weighted)


def normalize(
    observation: MarketObservation,
    stats: MarketStats | None = None,
) -> NormalizedMetrics:
    """Derive bounded metrics from an observation.

    Absolute fields are min-max normalized against the supplied batch stats;
    without stats the price falls back to its own ATL..ATH range and
    volume/liquidity report 0. Percentage changes are squashed with
    tanh(change / 20). Ratios with a non-positive denominator are 0.

    Args:
        observation: The market snapshot to normalize.
        stats: Optional cross-sectional statistics for the batch.

    Returns:
        NormalizedMetrics with every bounded field clamped to its range.
    """
    price_change = observation.price_change_percentage_24h or 0.0
    mcap_change = observation.market_cap_change_percentage_24h or 0.0

    price_strength = normalize_in_range(observation.price_usd, observation.atl, observation.ath)

    if stats is not None:
        price_normalized = normalize_in_range(
            observation.price_usd, stats.price.min, stats.price.max
        )
        volume_normalized = normalize_in_range(
            observation.total_volume, stats.volume.min, stats.volume.max
        )
        liquidity_normalized = normalize_in_range(
            observation.liquidity_usd, stats.liquidity.min, stats.liquidity.max
        )
        price_z = z_score(observation.price_usd, stats.price.mean, stats.price.std_dev)
    else:
        price_normalized = price_strength
        volume_normalized = 0.0
        liquidity_normalized = 0.0
        price_z = 0.0

    range_24h = observation.high_24h - observation.low_24h
    rank = observation.market_cap_rank

    return NormalizedMetrics(
        price_strength=price_strength,
        price_normalized=price_normalized,
        volume_normalized=volume_normalized,
        liquidity_normalized=liquidity_normalized,
        price_z=price_z,
        price_momentum=normalize_percentage(price_change),
        market_momentum=normalize_percentage(mcap_change),
        price_volume_trend=normalize_percentage(price_change * sign(mcap_change)),
        price_velocity_24h=clamp(
            safe_ratio(observation.price_change_24h, range_24h), -1.0, 1.0
        ),
        price_range_usage_24h=normalize_in_range(
            observation.price_usd, observation.low_24h, observation.high_24h
        ),
        supply_distribution=clamp(observation.supply_ratio),
        market_maturity=clamp(
            (abs(observation.ath_change_percentage) + abs(observation.atl_change_percentage))
            / 200
        ),
        market_dominance=clamp(1 / max(1, rank)) if rank else 0.0,
        sentiment=composite_sentiment(observation),
        volume_to_mcap_ratio=safe_ratio(observation.total_volume, observation.market_cap),
        volume_to_liquidity_ratio=safe_ratio(
            observation.total_volume, observation.liquidity_usd
        ),
        volume_intensity_24h=safe_ratio(
            observation.total_volume, observation.market_cap * abs(price_change / 100)
        ),
        wallet_activity_ratio=safe_ratio(
            observation.active_addresses_24h, observation.holder_count
        ),
        social_engagement_ratio=safe_ratio(
            observation.social_volume_24h, observation.holder_count
        ),
        has_batch_stats=stats is not None,
    )
