"""Next-day forecast from similar historical OHLCV windows.

Matched windows are grouped by their recorded next-day outcome. Each
group's share of total similarity forms the forecast distribution; the
largest share is the prediction and its share is the confidence. The
expected change is the similarity-weighted mean next-day change within
the predicted group.
"""

from collections.abc import Sequence

from agent.scoring.models import ForecastOutcome, WindowForecast, WindowMatch


def forecast_from_matches(matches: Sequence[WindowMatch]) -> WindowForecast | None:
    """Build a forecast, or None when no match has a known outcome."""
    similarity_sums = {outcome: 0.0 for outcome in ForecastOutcome}
    weighted_changes = {outcome: 0.0 for outcome in ForecastOutcome}

    for match in matches:
        if match.outcome is None:
            continue
        similarity_sums[match.outcome] += match.similarity
        weighted_changes[match.outcome] += match.similarity * match.next_day_change

    total = sum(similarity_sums.values())
    if total <= 0:
        return None

    distribution = {
        outcome: round(similarity_sums[outcome] / total, 3) for outcome in ForecastOutcome
    }

    # Ties resolve to the first declared outcome
    prediction = ForecastOutcome.BULLISH
    for outcome in ForecastOutcome:
        if distribution[outcome] > distribution[prediction]:
            prediction = outcome

    group_total = similarity_sums[prediction]
    expected = weighted_changes[prediction] / group_total if group_total > 0 else 0.0

    return WindowForecast(
        prediction=prediction,
        confidence=distribution[prediction],
        distribution=distribution,
        expected_next_day_change=round(expected, 3),
        match_count=len(matches),
    )
