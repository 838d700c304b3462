"""Tests for OHLCV window signatures."""

from agent.models import OHLCVCandle
from agent.signals.window import WINDOW_DAYS, describe_window

DAY_MS = 86_400_000


def rising_candles(count: int, step: float = 1.02) -> list[OHLCVCandle]:
    candles = []
    for i in range(count):
        close = 100.0 * step**i
        open_ = close / 1.01
        candles.append(
            OHLCVCandle(
                timestamp_ms=1_700_000_000_000 + i * DAY_MS,
                open=open_,
                high=close * 1.01,
                low=open_ * 0.99,
                close=close,
                volume=1_000.0 + 10.0 * i,
            )
        )
    return candles


def flat_candles(count: int, volume: float = 500.0) -> list[OHLCVCandle]:
    return [
        OHLCVCandle(
            timestamp_ms=1_700_000_000_000 + i * DAY_MS,
            open=10.0,
            high=10.5,
            low=9.5,
            close=10.0,
            volume=volume,
        )
        for i in range(count)
    ]


class TestDescribeWindow:
    def test_too_few_candles(self) -> None:
        assert describe_window(rising_candles(WINDOW_DAYS - 1)) == ""
        assert describe_window([]) == ""

    def test_deterministic(self) -> None:
        candles = rising_candles(WINDOW_DAYS)
        assert describe_window(candles) == describe_window(list(candles))

    def test_uses_last_window(self) -> None:
        candles = rising_candles(WINDOW_DAYS + 3)
        assert describe_window(candles) == describe_window(candles[-WINDOW_DAYS:])

    def test_rising_window(self) -> None:
        signature = describe_window(rising_candles(WINDOW_DAYS))

        assert "with 10 up days, 0 down days, and 0 flat days" in signature
        assert "Overall trend classified as strong uptrend." in signature
        assert "early weakness followed by strength" in signature
        assert " [SIGNALS] price=(" in signature

    def test_flat_window(self) -> None:
        signature = describe_window(flat_candles(WINDOW_DAYS))

        assert "sideways trend" in signature
        assert "Observed volume consistent." in signature
        assert "vol_std=0.00" in signature
        assert "vol_last_z=0.00" in signature
        assert "drop=0.00%" in signature

    def test_no_volume(self) -> None:
        assert "no trading activity" in describe_window(flat_candles(WINDOW_DAYS, volume=0.0))
