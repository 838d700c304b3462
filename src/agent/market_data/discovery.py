"""Token discovery: fetch candidates, apply baseline filters, rank by quality."""

from agent.config import MarketDataSettings
from agent.logging import get_logger
from agent.market_data.coingecko import MarketDataClient
from agent.market_data.quality import rank_by_quality
from agent.models import TokenData

logger = get_logger(__name__)


def filter_tradable(
    tokens: list[TokenData],
    min_volume_usd: float,
    min_liquidity_usd: float,
) -> list[TokenData]:
    """Keep tokens meeting the minimum 24h volume and liquidity."""
    return [
        t for t in tokens
        if t.market.total_volume >= min_volume_usd
        and t.market.liquidity_usd >= min_liquidity_usd
    ]


class TokenDiscovery:
    """Finds tradable tokens ordered by quality.

    Args:
        client: Market data source.
        settings: Filter thresholds.
    """

    def __init__(self, client: MarketDataClient, settings: MarketDataSettings) -> None:
        self._client = client
        self._settings = settings

    async def discover(self, limit: int | None = None) -> list[TokenData]:
        """Fetch one page of markets, filter, rank, and truncate to limit."""
        candidates = await self._client.fetch_markets()
        tradable = filter_tradable(
            candidates,
            self._settings.min_volume_usd,
            self._settings.min_liquidity_usd,
        )
        ranked = [token for token, _ in rank_by_quality(tradable)]
        if limit is not None:
            ranked = ranked[:limit]

        logger.info(
            "tokens_discovered",
            candidates=len(candidates),
            tradable=len(tradable),
            selected=len(ranked),
        )
        return ranked
