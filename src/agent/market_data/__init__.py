"""Market data acquisition and token discovery.

Provides the CoinGecko client, payload validation, baseline tradability
filters, and quality-based ranking of discovered tokens.
"""

from agent.market_data.coingecko import CoinGeckoClient, MarketDataClient
from agent.market_data.discovery import TokenDiscovery, filter_tradable
from agent.market_data.quality import QualityScore, calculate_quality_score, rank_by_quality
from agent.market_data.schemas import CoinGeckoMarket

__all__ = [
    "CoinGeckoClient",
    "CoinGeckoMarket",
    "MarketDataClient",
    "QualityScore",
    "TokenDiscovery",
    "calculate_quality_score",
    "filter_tradable",
    "rank_by_quality",
]
