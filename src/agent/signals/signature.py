"""Observation signature rendering.

A signature is the narrative paragraph followed by a machine-parsable
block of signal tokens:

    <narrative> [SIGNALS] price=positive_1(7.2)[w=0.41][s=0.72][r=0.40][p=0.85][a=0.74]
        volume=high(18.3%)[w=...][s=...][i=...][a=...]
        sentiment=bullish(0.34)[w=...][s=...][a=...]
        state=uptrend[s=0.52][c=0.26][phase=markup][risk=moderate(0.48)]

The signature is the similarity-search key, so rendering must be a pure
function of its inputs. Numbers are formatted with fixed precision.
"""

from agent.models import MarketObservation
from agent.signals.alignment import (
    analyze_risk,
    analyze_trend,
    calculate_alignment_factor,
    calculate_signal_weights,
)
from agent.signals.models import NormalizedMetrics
from agent.signals.narrative import combine_narratives, generate_narratives
from agent.signals.numerical import clamp, safe_ratio
from agent.signals.phase import detect_market_phase

SIGNALS_MARKER = "[SIGNALS]"


def categorize_price_movement(change: float) -> str:
    magnitude = abs(int(change // 5))
    if change <= -5:
        return f"negative_{magnitude}"
    if change <= -2:
        return "weak_negative"
    if change < 2:
        return "neutral"
    if change < 5:
        return "weak_positive"
    return f"positive_{magnitude}"


def categorize_volume_activity(volume_to_mcap: float) -> str:
    if volume_to_mcap > 0.25:
        return "extreme"
    if volume_to_mcap > 0.15:
        return "high"
    if volume_to_mcap > 0.05:
        return "moderate"
    if volume_to_mcap > 0.02:
        return "low"
    return "minimal"


def categorize_sentiment(score: float) -> str:
    if score <= -0.5:
        return "strongly_bearish"
    if score <= -0.2:
        return "bearish"
    if score < 0.2:
        return "neutral"
    if score < 0.5:
        return "bullish"
    return "strongly_bullish"


def price_signal(
    observation: MarketObservation,
    normalized: NormalizedMetrics,
    weight: float,
    alignment: float,
) -> str:
    change = observation.price_change_percentage_24h or 0.0
    range_pct = safe_ratio(observation.high_24h - observation.low_24h, observation.low_24h) * 100

    strength = min(1.0, abs(change) / 10)
    range_strength = clamp(range_pct / 20)

    return (
        f"price={categorize_price_movement(change)}({change:.1f})"
        f"[w={weight:.2f}][s={strength:.2f}][r={range_strength:.2f}]"
        f"[p={normalized.price_range_usage_24h:.2f}][a={alignment:.2f}]"
    )


def volume_signal(
    observation: MarketObservation,
    normalized: NormalizedMetrics,
    weight: float,
    alignment: float,
) -> str:
    ratio = normalized.volume_to_mcap_ratio
    strength = min(1.0, ratio * 5)
    volatility = safe_ratio(observation.high_24h - observation.low_24h, observation.price_usd)
    impact = min(1.0, volatility * ratio * 10)

    return (
        f"volume={categorize_volume_activity(ratio)}({ratio * 100:.1f}%)"
        f"[w={weight:.2f}][s={strength:.2f}][i={impact:.2f}][a={alignment:.2f}]"
    )


def sentiment_signal(normalized: NormalizedMetrics, weight: float, alignment: float) -> str:
    score = normalized.sentiment
    return (
        f"sentiment={categorize_sentiment(score)}({score:.2f})"
        f"[w={weight:.2f}][s={abs(score):.2f}][a={alignment:.2f}]"
    )


def market_state_signal(
    observation: MarketObservation,
    normalized: NormalizedMetrics,
    alignment: float,
) -> str:
    weights = calculate_signal_weights(observation, normalized)
    trend = analyze_trend(observation, normalized, weights, alignment)
    phase = detect_market_phase(normalized, observation)
    risk = analyze_risk(observation, normalized, alignment)

    return (
        f"state={trend.type}[s={trend.strength:.2f}][c={1 - alignment:.2f}]"
        f"[phase={phase.value}][risk={risk.level.value}({risk.score:.2f})]"
    )


def describe_signals(observation: MarketObservation, normalized: NormalizedMetrics) -> str:
    """Render the space-separated signal token block."""
    alignment = calculate_alignment_factor(observation, normalized)
    weights = calculate_signal_weights(observation, normalized)

    return " ".join([
        price_signal(observation, normalized, weights.price, alignment),
        volume_signal(observation, normalized, weights.volume, alignment),
        sentiment_signal(normalized, weights.sentiment, alignment),
        market_state_signal(observation, normalized, alignment),
    ])


def describe(observation: MarketObservation, normalized: NormalizedMetrics) -> str:
    """Render the full observation signature used for similarity search.

    Args:
        observation: The raw market snapshot.
        normalized: Metrics produced by ``normalize(observation, stats)``.

    Returns:
        ``"<narrative> [SIGNALS] <tokens>"``; identical inputs always yield
        byte-identical output.
    """
    narrative = combine_narratives(
        generate_narratives(observation, normalized), observation, normalized
    )
    return f"{narrative} {SIGNALS_MARKER} {describe_signals(observation, normalized)}"
