"""Token quality scoring for discovery ranking.

Points out of 65 from market data and 15 from metadata:

    volume      normalize(volume, 0, 1e9)       * 15
    market cap  normalize(market_cap, 0, 1e10)  * 15
    stability   1 - mean(|24h|, |mcap 24h|, |ath|, |atl| in %/100)  * 10
    supply      circulating ratio, capped supply, sane total supply  * 10
    docs        website, socials, github, categories, contracts      * 15
"""

from dataclasses import dataclass

from agent.models import MarketObservation, TokenData, TokenMetadata


@dataclass(frozen=True)
class QualityScore:
    """Quality score components; total = market_score + metadata_score."""

    total: float
    market_score: float
    metadata_score: float
    volume_24h_score: float
    market_cap_score: float
    price_stability_score: float
    supply_score: float
    documentation_score: float


def normalize_score(value: float, low: float, high: float) -> float:
    if value <= low:
        return 0.0
    if value >= high:
        return 1.0
    return (value - low) / (high - low)


def price_stability_score(market: MarketObservation) -> float:
    """Lower recent and historical volatility scores higher."""
    moves = [
        abs(market.price_change_percentage_24h or 0.0) / 100,
        abs(market.market_cap_change_percentage_24h or 0.0) / 100,
        abs(market.ath_change_percentage) / 100,
        abs(market.atl_change_percentage) / 100,
    ]
    return max(0.0, 1 - sum(moves) / len(moves))


def supply_score(market: MarketObservation) -> float:
    score = market.supply_ratio * 0.5
    if market.max_supply is not None:
        score += 0.3
    score += normalize_score(market.total_supply, 1e6, 1e12) * 0.2
    return min(1.0, score)


def documentation_score(metadata: TokenMetadata) -> float:
    checks = [
        bool(metadata.website),
        bool(metadata.twitter or metadata.telegram),
        bool(metadata.github),
        bool(metadata.categories),
        bool(metadata.contract_addresses),
    ]
    return sum(checks) / len(checks)


def calculate_quality_score(token: TokenData) -> QualityScore:
    market = token.market
    volume = normalize_score(market.total_volume, 0, 1e9) * 15
    market_cap = normalize_score(market.market_cap, 0, 1e10) * 15
    stability = price_stability_score(market) * 10
    supply = supply_score(market) * 10
    docs = documentation_score(token.metadata) * 15

    market_score = volume + market_cap + stability + supply
    return QualityScore(
        total=market_score + docs,
        market_score=market_score,
        metadata_score=docs,
        volume_24h_score=volume,
        market_cap_score=market_cap,
        price_stability_score=stability,
        supply_score=supply,
        documentation_score=docs,
    )


def rank_by_quality(tokens: list[TokenData]) -> list[tuple[TokenData, QualityScore]]:
    """Score tokens and sort by total quality, descending (stable on ties)."""
    scored = [(token, calculate_quality_score(token)) for token in tokens]
    scored.sort(key=lambda pair: pair[1].total, reverse=True)
    return scored
