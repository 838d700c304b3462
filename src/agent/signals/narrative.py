"""Human-language narrative rendering for market observations.

Sentences are grouped by theme. The first price, volume and sentiment
sentences always appear; the remaining sentences are appended only when
the matching signal is strong, and market dynamics are repeated when a
large move co-occurs with heavy volume. Repetition is intentional: the
narrative is embedded, so repeated phrases pull the vector toward them.
"""

from dataclasses import dataclass, field

from agent.models import MarketObservation
from agent.signals.alignment import EXTREME_PROXIMITY_PCT, volatility_risk_score
from agent.signals.models import NormalizedMetrics
from agent.signals.numerical import safe_ratio, sign
from agent.signals.phase import detect_market_phase

#: Absolute 24h price change (percent) that counts as a significant move.
SIGNIFICANT_MOVE_PCT = 5.0

#: Volume/market-cap ratio above which volume counts as high.
HIGH_VOLUME_RATIO = 0.15

#: Absolute sentiment at which sentiment counts as strong.
STRONG_SENTIMENT = 0.5


@dataclass
class MarketNarratives:
    """Narrative sentences grouped by theme."""

    price_action: list[str] = field(default_factory=list)
    volume_activity: list[str] = field(default_factory=list)
    sentiment: list[str] = field(default_factory=list)
    market_dynamics: list[str] = field(default_factory=list)
    trading_context: list[str] = field(default_factory=list)


def _range_pct(observation: MarketObservation) -> float:
    return safe_ratio(observation.high_24h - observation.low_24h, observation.low_24h) * 100


def price_narratives(
    observation: MarketObservation,
    normalized: NormalizedMetrics,
) -> list[str]:
    change = observation.price_change_percentage_24h or 0.0
    range_pct = _range_pct(observation)
    position = normalized.price_range_usage_24h * 100

    if change <= -SIGNIFICANT_MOVE_PCT:
        lead = f"24h decline of {abs(change):.1f}%"
    elif change >= SIGNIFICANT_MOVE_PCT:
        lead = f"24h advance of {change:.1f}%"
    elif change > 0:
        lead = f"Price drifting higher by {change:.1f}% over 24h"
    elif change < 0:
        lead = f"Price drifting lower by {abs(change):.1f}% over 24h"
    else:
        lead = "Price flat over 24h"

    narratives = [
        f"{lead} with {range_pct:.1f}% range, currently at {position:.1f}% of range"
    ]

    if normalized.volume_intensity_24h > 2:
        narratives.append(
            "High volume relative to price movement suggesting strong 24h "
            "accumulation/distribution"
        )
    if range_pct > 10:
        narratives.append(
            f"Wide 24h trading range of {range_pct:.1f}% indicating high volatility opportunity"
        )
    return narratives


def _volume_context(ratio: float) -> str:
    if ratio > 0.3:
        return "volume significantly above market cap expectations"
    if ratio > HIGH_VOLUME_RATIO:
        return "healthy volume relative to market cap"
    if ratio > 0.05:
        return "reasonable volume to market cap ratio"
    return "volume below typical market cap ratio"


def volume_narratives(normalized: NormalizedMetrics) -> list[str]:
    ratio = normalized.volume_to_mcap_ratio
    context = _volume_context(ratio)

    if ratio > 0.25:
        narratives = [
            f"Exceptional trading volume with {context}",
            "Trading activity showing significant intensity",
        ]
    elif ratio > HIGH_VOLUME_RATIO:
        narratives = [
            f"Strong trading activity with {context}",
            "Above average market participation",
        ]
    elif ratio > 0.05:
        narratives = [f"Moderate trading volume with {context}"]
    else:
        narratives = [
            f"Low trading activity with {context}",
            "Below average market participation",
        ]

    trend = normalized.price_volume_trend
    if abs(trend) > 0.7:
        direction = "supporting" if trend > 0 else "contradicting"
        narratives.append(f"Volume trend strongly {direction} price action")
    elif abs(trend) > 0.3:
        direction = "aligned with" if trend > 0 else "diverging from"
        narratives.append(f"Volume trend {direction} price movement")

    return narratives


def _engagement(ratio: float) -> str:
    if ratio > 0.3:
        return "very high market engagement"
    if ratio > HIGH_VOLUME_RATIO:
        return "strong market participation"
    if ratio > 0.05:
        return "moderate trading activity"
    return "limited market activity"


def sentiment_narratives(normalized: NormalizedMetrics) -> list[str]:
    score = normalized.sentiment
    engagement = _engagement(normalized.volume_to_mcap_ratio)

    if score <= -STRONG_SENTIMENT:
        return [
            f"Strongly bearish market conditions with {engagement}",
            "Price action indicates significant selling pressure",
        ]
    if score <= -0.2:
        return [f"Cautious market behavior with {engagement}"]
    if score < 0.2:
        return [f"Neutral market conditions with {engagement}"]
    if score < STRONG_SENTIMENT:
        return [f"Positive market momentum with {engagement}"]
    return [
        f"Strongly bullish market conditions with {engagement}",
        "Multiple indicators showing market confidence",
    ]


def _market_activity(normalized: NormalizedMetrics) -> str:
    level = normalized.volume_to_mcap_ratio * 0.7 + abs(normalized.market_momentum) * 0.3
    if level > 0.7:
        return "exceptional market activity"
    if level > 0.4:
        return "above-average trading activity"
    if level > 0.2:
        return "moderate market participation"
    return "subdued trading activity"


def market_dynamics_narratives(
    observation: MarketObservation,
    normalized: NormalizedMetrics,
) -> list[str]:
    change = observation.price_change_percentage_24h or 0.0
    mcap_change = observation.market_cap_change_percentage_24h or 0.0
    volume_strength = normalized.volume_to_mcap_ratio
    activity = _market_activity(normalized)

    if change <= -SIGNIFICANT_MOVE_PCT and volume_strength > HIGH_VOLUME_RATIO:
        return [
            f"Market under pressure with {abs(change):.1f}% drop on strong volume",
            f"Elevated selling pressure with {activity}",
        ]
    if change >= SIGNIFICANT_MOVE_PCT and volume_strength > HIGH_VOLUME_RATIO:
        return [
            f"Strong advance of {change:.1f}% with high trading activity",
            f"Buying momentum supported by {activity}",
        ]
    if change <= -2 and volume_strength < 0.05:
        return [f"Weak market showing {abs(change):.1f}% decline with low volume"]
    if abs(change) < 2 and volume_strength > HIGH_VOLUME_RATIO:
        if normalized.price_strength > 0.7:
            return ["Possible distribution with high volume at price resistance"]
        if normalized.price_strength < 0.3:
            return ["Potential accumulation with increased volume at support levels"]
        return []
    if sign(change) != sign(mcap_change):
        return [
            "Price action and market cap showing divergence",
            f"{activity.capitalize()} amid mixed market signals",
        ]
    return []


def volatility_risk_label(observation: MarketObservation) -> str:
    score = volatility_risk_score(observation)
    if score > 0.75:
        return "high"
    if score > 0.4:
        return "moderate"
    return "low"


def liquidity_risk_label(volume_to_mcap_ratio: float) -> str:
    if volume_to_mcap_ratio < 0.05:
        return "high"
    if volume_to_mcap_ratio < HIGH_VOLUME_RATIO:
        return "moderate"
    return "low"


def trading_context_narratives(
    observation: MarketObservation,
    normalized: NormalizedMetrics,
) -> list[str]:
    volatility = volatility_risk_label(observation)
    liquidity = liquidity_risk_label(normalized.volume_to_mcap_ratio)
    phase = detect_market_phase(normalized, observation)
    return [
        f"Trading conditions show {volatility} volatility risk and {liquidity} liquidity risk",
        f"Market structure indicates {phase.value} phase",
    ]


def generate_narratives(
    observation: MarketObservation,
    normalized: NormalizedMetrics,
) -> MarketNarratives:
    return MarketNarratives(
        price_action=price_narratives(observation, normalized),
        volume_activity=volume_narratives(normalized),
        sentiment=sentiment_narratives(normalized),
        market_dynamics=market_dynamics_narratives(observation, normalized),
        trading_context=trading_context_narratives(observation, normalized),
    )


def combine_narratives(
    narratives: MarketNarratives,
    observation: MarketObservation,
    normalized: NormalizedMetrics,
) -> str:
    """Select and join narrative sentences into one paragraph."""
    change = abs(observation.price_change_percentage_24h or 0.0)
    high_volume = normalized.volume_to_mcap_ratio > HIGH_VOLUME_RATIO

    selected = [
        narratives.price_action[0],
        narratives.volume_activity[0],
        narratives.sentiment[0],
    ]

    if change >= SIGNIFICANT_MOVE_PCT:
        selected.extend(narratives.price_action[1:])
    if high_volume:
        selected.extend(narratives.volume_activity[1:])
    if abs(normalized.sentiment) >= STRONG_SENTIMENT:
        selected.extend(narratives.sentiment[1:])

    near_extreme = (
        abs(observation.ath_change_percentage) < EXTREME_PROXIMITY_PCT
        or abs(observation.atl_change_percentage) < EXTREME_PROXIMITY_PCT
    )
    if near_extreme:
        selected.extend(narratives.market_dynamics)

    selected.extend(narratives.trading_context)

    # Emphasis for strong moves on heavy volume
    if change >= SIGNIFICANT_MOVE_PCT and high_volume:
        selected.extend(narratives.market_dynamics)

    return ". ".join(selected) + "."
