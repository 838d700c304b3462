"""Tests for observation signature rendering.

Tests verify:
- Rendering is a pure function: identical input gives byte-identical output
- Layout: narrative paragraph, [SIGNALS] marker, four signal tokens
- Category thresholds for price, volume and sentiment tokens
- Narrative sentence selection and emphasis repetition
"""

import pytest

from agent.signals.narrative import (
    combine_narratives,
    generate_narratives,
    liquidity_risk_label,
    price_narratives,
)
from agent.signals.normalizer import compute_market_stats, normalize
from agent.signals.signature import (
    SIGNALS_MARKER,
    categorize_price_movement,
    categorize_sentiment,
    categorize_volume_activity,
    describe,
)
from helpers import make_observation


class TestDescribe:
    def test_pure_function(self) -> None:
        obs = make_observation(sentiment_score=0.35)
        stats = compute_market_stats([obs, make_observation(id="other", price_usd=2.0)])

        first = describe(obs, normalize(obs, stats))
        second = describe(obs, normalize(obs, stats))
        assert first == second
        assert first.encode() == second.encode()

    def test_layout(self) -> None:
        obs = make_observation()
        signature = describe(obs, normalize(obs))

        narrative, tokens = signature.split(f" {SIGNALS_MARKER} ")
        assert narrative.endswith(".")
        parts = tokens.split(" ")
        assert [p.split("=")[0] for p in parts] == ["price", "volume", "sentiment", "state"]

    def test_token_values(self) -> None:
        obs = make_observation()
        signature = describe(obs, normalize(obs))

        assert "price=weak_positive(3.0)" in signature
        assert "volume=low(4.0%)" in signature
        assert "[phase=" in signature
        assert "[risk=" in signature

    def test_different_observations_differ(self) -> None:
        up = make_observation(price_change_percentage_24h=12.0)
        down = make_observation(price_change_percentage_24h=-12.0)
        assert describe(up, normalize(up)) != describe(down, normalize(down))


class TestCategories:
    @pytest.mark.parametrize(
        ("change", "expected"),
        [
            (12.0, "positive_2"),
            (5.0, "positive_1"),
            (3.0, "weak_positive"),
            (1.9, "neutral"),
            (-2.0, "weak_negative"),
            (-3.0, "weak_negative"),
            (-5.0, "negative_1"),
        ],
    )
    def test_price_movement(self, change: float, expected: str) -> None:
        assert categorize_price_movement(change) == expected

    @pytest.mark.parametrize(
        ("ratio", "expected"),
        [(0.3, "extreme"), (0.2, "high"), (0.1, "moderate"), (0.03, "low"), (0.01, "minimal")],
    )
    def test_volume_activity(self, ratio: float, expected: str) -> None:
        assert categorize_volume_activity(ratio) == expected

    @pytest.mark.parametrize(
        ("score", "expected"),
        [
            (-0.6, "strongly_bearish"),
            (-0.3, "bearish"),
            (0.0, "neutral"),
            (0.3, "bullish"),
            (0.5, "strongly_bullish"),
        ],
    )
    def test_sentiment(self, score: float, expected: str) -> None:
        assert categorize_sentiment(score) == expected


class TestNarratives:
    def test_first_price_sentence_always_present(self) -> None:
        flat = make_observation(price_change_percentage_24h=0.0)
        sentences = price_narratives(flat, normalize(flat))
        assert sentences[0].startswith("Price flat over 24h with")

        drop = make_observation(price_change_percentage_24h=-7.5)
        assert price_narratives(drop, normalize(drop))[0].startswith("24h decline of 7.5%")

    def test_minor_move_omits_secondary_price_sentences(self) -> None:
        obs = make_observation()
        normalized = normalize(obs)
        narratives = generate_narratives(obs, normalized)

        assert len(narratives.price_action) > 1
        text = combine_narratives(narratives, obs, normalized)
        assert narratives.price_action[0] in text
        assert "Wide 24h trading range" not in text

    def test_significant_move_includes_secondary_price_sentences(self) -> None:
        obs = make_observation(price_change_percentage_24h=6.0)
        text = describe(obs, normalize(obs))
        assert "Wide 24h trading range" in text

    def test_strong_move_on_heavy_volume_repeats_dynamics(self) -> None:
        obs = make_observation(
            price_change_percentage_24h=-8.0,
            total_volume=10_000_000.0,
            ath_change_percentage=-10.0,
        )
        normalized = normalize(obs)
        text = combine_narratives(generate_narratives(obs, normalized), obs, normalized)
        assert text.count("Market under pressure with 8.0% drop on strong volume") == 2

    def test_trading_context_always_included(self) -> None:
        obs = make_observation()
        text = describe(obs, normalize(obs))
        assert "Trading conditions show" in text
        assert "Market structure indicates" in text

    def test_liquidity_risk_label(self) -> None:
        assert liquidity_risk_label(0.01) == "high"
        assert liquidity_risk_label(0.1) == "moderate"
        assert liquidity_risk_label(0.2) == "low"
