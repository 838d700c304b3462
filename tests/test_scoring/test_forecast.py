"""Tests for the next-day forecast from similar OHLCV windows."""

import pytest

from agent.scoring.forecast import forecast_from_matches
from agent.scoring.models import ForecastOutcome, WindowMatch


def match(id: str, similarity: float, change: float) -> WindowMatch:
    outcome = ForecastOutcome.BULLISH if change > 0 else ForecastOutcome.BEARISH
    return WindowMatch(id=id, similarity=similarity, next_day_change=change, outcome=outcome)


class TestForecastFromMatches:
    def test_no_matches(self) -> None:
        assert forecast_from_matches([]) is None

    def test_only_unknown_outcomes(self) -> None:
        pending = [WindowMatch(id="p", similarity=0.9, next_day_change=0.0)]
        assert forecast_from_matches(pending) is None

    def test_majority_by_similarity(self) -> None:
        forecast = forecast_from_matches([
            match("a", 0.9, 2.0),
            match("b", 0.8, 4.0),
            match("c", 0.85, -3.0),
        ])

        assert forecast is not None
        assert forecast.prediction == ForecastOutcome.BULLISH
        assert forecast.confidence == pytest.approx(round(1.7 / 2.55, 3))
        assert forecast.expected_next_day_change == pytest.approx(
            round((0.9 * 2.0 + 0.8 * 4.0) / 1.7, 3)
        )
        assert forecast.match_count == 3

    def test_distribution_sums_to_one(self) -> None:
        forecast = forecast_from_matches([
            match("a", 0.71, 1.0),
            match("b", 0.93, -1.0),
            match("c", 0.77, -2.5),
            match("d", 0.88, 0.4),
        ])
        assert forecast is not None
        assert sum(forecast.distribution.values()) == pytest.approx(1.0, abs=1e-3)
        assert forecast.prediction == ForecastOutcome.BEARISH

    def test_tie_is_bullish(self) -> None:
        forecast = forecast_from_matches([match("a", 0.8, 1.0), match("b", 0.8, -1.0)])
        assert forecast is not None
        assert forecast.prediction == ForecastOutcome.BULLISH
        assert forecast.confidence == 0.5
