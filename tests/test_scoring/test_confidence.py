"""Tests for buying confidence scoring.

Tests verify:
- Empty cohorts and cohorts with no BUY/SELL counts give the all-zero result
- Decision-type score for buy-only, sell-only and mixed cohorts
- Sample-size ramp
- The final score is clamped to [0, 1] when the modifier exceeds 1
"""

import pytest

from agent.models import DecisionType
from agent.scoring.aggregator import aggregate
from agent.scoring.confidence import (
    calculate_buying_confidence,
    decision_type_score,
    sample_size_confidence,
)
from agent.scoring.models import BuyingConfidenceResult, ConfidenceWeights, DecisionStats
from helpers import NOW, make_observation, make_similar

CALM = make_observation(price_change_percentage_24h=0.0, price_change_percentage_1h=0.0)


def profitable_cohort(size: int) -> list:
    return [
        make_similar(
            similarity=1.0,
            observation=CALM,
            id=f"d{i}",
            price_change_24h_pct=12.0,
            created_at=NOW,
        )
        for i in range(size)
    ]


class TestZeroResult:
    def test_no_decisions(self) -> None:
        stats = DecisionStats(buy_count=3, profitable_buy_count=2)
        result = calculate_buying_confidence([], stats, ConfidenceWeights(), now=NOW)
        assert result == BuyingConfidenceResult.zero()

    def test_stats_without_counts(self) -> None:
        result = calculate_buying_confidence(
            profitable_cohort(4), DecisionStats(), ConfidenceWeights(), now=NOW
        )
        assert result == BuyingConfidenceResult.zero()
        assert result.score == 0.0
        assert result.breakdown.modifier == 0.0


class TestDecisionTypeScore:
    def test_buy_only_is_profitable_ratio(self) -> None:
        stats = DecisionStats(buy_count=10, profitable_buy_count=10)
        assert decision_type_score(stats) == 1.0
        assert decision_type_score(DecisionStats(buy_count=4, profitable_buy_count=1)) == 0.25

    def test_sell_only_inverts_profitable_ratio(self) -> None:
        stats = DecisionStats(sell_count=4, profitable_sell_count=1)
        assert decision_type_score(stats) == 0.75

    def test_mixed(self) -> None:
        stats = DecisionStats(
            buy_count=3, sell_count=1, profitable_buy_count=3, profitable_sell_count=1
        )
        assert decision_type_score(stats) == pytest.approx(1.0 * 0.75 - 1.0 * 0.25)

    def test_empty(self) -> None:
        assert decision_type_score(DecisionStats()) == 0.0


class TestSampleSizeConfidence:
    @pytest.mark.parametrize(
        ("size", "expected"),
        [(0, 0.0), (5, 0.0), (10, 0.5), (15, 1.0), (40, 1.0)],
    )
    def test_ramp(self, size: int, expected: float) -> None:
        assert sample_size_confidence(size) == pytest.approx(expected)

    def test_degenerate_bounds(self) -> None:
        assert sample_size_confidence(3, min_sample_size=5, optimal_sample_size=5) == 0.0
        assert sample_size_confidence(5, min_sample_size=5, optimal_sample_size=5) == 1.0


class TestCalculateBuyingConfidence:
    def test_score_clamped_when_modifier_exceeds_one(self) -> None:
        scored, stats = aggregate(profitable_cohort(15))
        result = calculate_buying_confidence(scored, stats, ConfidenceWeights(), now=NOW)

        assert result.breakdown.volatility_adjustment == pytest.approx(1.0)
        assert result.breakdown.sample_size_confidence == 1.0
        assert result.breakdown.modifier == pytest.approx(1.2)
        assert result.score == 1.0

    def test_score_bounded_for_hostile_cohort(self) -> None:
        similar = [
            make_similar(
                similarity=0.45,
                id=f"s{i}",
                decision_type=DecisionType.SELL,
                price_change_24h_pct=-20.0,
            )
            for i in range(3)
        ] + [make_similar(similarity=0.5, id="b", price_change_24h_pct=-30.0)]
        scored, stats = aggregate(similar)
        result = calculate_buying_confidence(scored, stats, ConfidenceWeights(), now=NOW)

        assert result.breakdown.decision_type_score < 0
        assert 0.0 <= result.score <= 1.0

    def test_breakdown_reports_sub_scores(self) -> None:
        scored, stats = aggregate(profitable_cohort(10))
        result = calculate_buying_confidence(scored, stats, ConfidenceWeights(), now=NOW)

        breakdown = result.breakdown
        assert breakdown.decision_type_score == 1.0
        assert breakdown.similarity_score == pytest.approx(1.0)
        assert breakdown.profitability_score == pytest.approx(1.0)
        assert breakdown.decision_confidence_score == pytest.approx(0.8)
        assert result.sample_size_confidence == pytest.approx(0.5)
        assert result.score == pytest.approx(0.9 * (0.85 + 0.15 + 0.1))

    def test_more_samples_raise_confidence(self) -> None:
        weights = ConfidenceWeights()
        small = calculate_buying_confidence(*aggregate(profitable_cohort(5)), weights, now=NOW)
        large = calculate_buying_confidence(*aggregate(profitable_cohort(12)), weights, now=NOW)
        assert large.score > small.score
