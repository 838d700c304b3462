"""Builders for domain objects used across the test suite."""

from datetime import datetime, timedelta, timezone

from agent.models import (
    DecisionStatus,
    DecisionType,
    MarketObservation,
    SimilarObservation,
    TokenData,
    TokenMetadata,
    TradingDecision,
)

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_observation(**overrides) -> MarketObservation:
    """A mid-cap token snapshot well away from its ATH/ATL."""
    fields = {
        "id": "obs-1",
        "symbol": "TKN",
        "timestamp_ms": 1_740_830_400_000,
        "price_usd": 1.0,
        "high_24h": 1.05,
        "low_24h": 0.95,
        "total_volume": 2_000_000.0,
        "liquidity_usd": 200_000.0,
        "market_cap": 50_000_000.0,
        "market_cap_rank": 250,
        "ath": 4.0,
        "ath_change_percentage": -75.0,
        "atl": 0.1,
        "atl_change_percentage": 900.0,
        "circulating_supply": 50_000_000.0,
        "total_supply": 100_000_000.0,
        "price_change_24h": 0.03,
        "price_change_percentage_24h": 3.0,
        "price_change_percentage_1h": 0.5,
        "market_cap_change_percentage_24h": 2.5,
    }
    fields.update(overrides)
    return MarketObservation(**fields)


def make_decision(**overrides) -> TradingDecision:
    """A completed, profitable BUY made at the observation price."""
    fields = {
        "id": "dec-1",
        "observation_id": "obs-1",
        "token_address": "0xtoken",
        "decision_type": DecisionType.BUY,
        "decision_price_usd": 1.0,
        "confidence_score": 0.8,
        "status": DecisionStatus.COMPLETED,
        "price_change_24h_pct": 8.0,
        "created_at": NOW - timedelta(days=2),
        "updated_at": NOW - timedelta(days=1),
    }
    fields.update(overrides)
    return TradingDecision(**fields)


def make_similar(
    similarity: float = 0.9,
    profitability_score: float = 0.0,
    observation: MarketObservation | None = None,
    **decision_overrides,
) -> SimilarObservation:
    return SimilarObservation(
        market_condition=observation or make_observation(),
        decision=make_decision(**decision_overrides),
        similarity=similarity,
        profitability_score=profitability_score,
    )


def make_token(symbol: str = "TKN", **overrides) -> TokenData:
    market = make_observation(id=f"{symbol.lower()}-1", symbol=symbol, **overrides)
    return TokenData(
        market=market,
        metadata=TokenMetadata(id=symbol.lower(), symbol=symbol, name=f"{symbol} Token"),
    )
