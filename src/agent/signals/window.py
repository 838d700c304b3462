"""Signature rendering for a rolling window of daily OHLCV candles.

Used to index and match multi-day price windows. The output follows the
same ``<narrative> [SIGNALS] <tokens>`` layout as observation signatures.
"""

import math
from collections.abc import Sequence

from agent.models import OHLCVCandle
from agent.signals.numerical import safe_ratio

#: Number of daily candles a window signature covers.
WINDOW_DAYS = 10


def _trend_label(early: float, end: float) -> str:
    if end > early * 1.1:
        return "strong uptrend"
    if end > early * 1.03:
        return "moderate uptrend"
    if end < early * 0.9:
        return "strong downtrend"
    if end < early * 0.97:
        return "moderate downtrend"
    return "sideways trend"


def _volatility_label(range_pct: float) -> str:
    if range_pct > 20:
        return "high volatility"
    if range_pct > 10:
        return "moderate volatility"
    return "low volatility"


def _pattern_label(
    closes: Sequence[float],
    largest_drop_pct: float,
    recovery_pct: float,
) -> str:
    early, mid, end = closes[0], closes[len(closes) // 2], closes[-1]
    if largest_drop_pct > 10 and recovery_pct > 5:
        return "capitulation followed by recovery"
    if early > mid > end:
        return "early strength fading into weakness"
    if early < mid < end:
        return "early weakness followed by strength"
    return "no distinct pattern"


def describe_window(candles: Sequence[OHLCVCandle]) -> str:
    """Render the last WINDOW_DAYS candles as a signature.

    Returns an empty string when fewer than WINDOW_DAYS candles are given.
    """
    if len(candles) < WINDOW_DAYS:
        return ""
    window = list(candles[-WINDOW_DAYS:])
    days = len(window)

    closes = [c.close for c in window]
    volumes = [c.volume for c in window]

    net_change = safe_ratio(closes[-1] - closes[0], closes[0]) * 100
    up_days = sum(1 for c in window if c.close > c.open)
    down_days = sum(1 for c in window if c.close < c.open)
    flat_days = days - up_days - down_days

    max_high = max(c.high for c in window)
    min_low = min(c.low for c in window)
    range_pct = safe_ratio(max_high - min_low, min_low) * 100

    avg_volume = sum(volumes) / days
    vol_std = math.sqrt(sum((v - avg_volume) ** 2 for v in volumes) / days)
    latest_volume = volumes[-1]
    vol_z = (latest_volume - avg_volume) / vol_std if vol_std > 0 else 0.0

    gap_ups = sum(1 for prev, cur in zip(window, window[1:]) if cur.open > prev.close)
    gap_downs = sum(1 for prev, cur in zip(window, window[1:]) if cur.open < prev.close)

    total_body = 0.0
    large_bodies = 0
    reversals = 0
    opens_near_low = 0
    opens_near_high = 0
    for c in window:
        body = abs(c.close - c.open)
        span = c.high - c.low
        total_body += body
        if span <= 0:
            continue
        if body / span > 0.5:
            large_bodies += 1
        if body / span < 0.3:
            reversals += 1
        if (c.open - c.low) / span < 0.2:
            opens_near_low += 1
        if (c.high - c.open) / span < 0.2:
            opens_near_high += 1

    avg_close = sum(closes) / days
    avg_body_pct = safe_ratio(total_body / days, avg_close) * 100
    large_body_pct = large_bodies / days * 100

    if opens_near_high > opens_near_low:
        open_bias = "bullish"
    elif opens_near_low > opens_near_high:
        open_bias = "bearish"
    else:
        open_bias = "neutral"

    # Largest single-day close-to-close drop and the recovery after it
    largest_drop_idx = -1
    largest_drop_pct = 0.0
    for i in range(1, days):
        drop = safe_ratio(closes[i - 1] - closes[i], closes[i - 1]) * 100
        if drop > largest_drop_pct:
            largest_drop_pct = drop
            largest_drop_idx = i

    recovery_start = largest_drop_idx + 1
    if recovery_start < days:
        recovery_pct = safe_ratio(closes[-1] - closes[recovery_start], closes[recovery_start]) * 100
    else:
        recovery_pct = 0.0

    if all(v == 0 for v in volumes):
        volume_label = "no trading activity"
    elif latest_volume > avg_volume + vol_std * 1.5:
        volume_label = "volume surge on latest candle"
    elif latest_volume < avg_volume - vol_std * 1.5:
        volume_label = "volume drop-off"
    else:
        volume_label = "volume consistent"

    pattern = _pattern_label(closes, largest_drop_pct, recovery_pct)

    narrative = [
        f"Price changed {net_change:.2f}% over {days} days with {up_days} up days, "
        f"{down_days} down days, and {flat_days} flat days.",
        f"The market showed {_volatility_label(range_pct)} with a range of ~{range_pct:.1f}%.",
        f"Observed {volume_label}.",
        f"Gap ups: {gap_ups}, Gap downs: {gap_downs}.",
        f"Reversal-type candles: {reversals}.",
        f"Open bias: {open_bias} sentiment.",
        f"Pattern detected: {pattern}.",
        f"Overall trend classified as {_trend_label(closes[0], closes[-1])}.",
    ]

    signals = [
        f"price=({net_change:.2f}%)",
        f"range=({range_pct:.1f}%)",
        f"drop={largest_drop_pct:.2f}%",
        f"recovery={recovery_pct:.2f}%",
        f"vol_std={vol_std:.2f}",
        f"vol_last_z={vol_z:.2f}",
        f"gap_up={gap_ups}",
        f"gap_down={gap_downs}",
        f"reversals={reversals}",
        f"body_avg_pct={avg_body_pct:.2f}%",
        f"large_bodies={large_body_pct:.1f}%",
        f"open_bias={open_bias}",
    ]

    return f"{' '.join(narrative)} [SIGNALS] {' '.join(signals)}"
