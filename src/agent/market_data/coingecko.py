"""Market data client interface and the CoinGecko implementation.

Each fetch runs under a fixed wall-clock deadline. A timeout aborts the
request and raises MarketDataTimeout; there is no retry.
"""

import asyncio
import time
from abc import ABC, abstractmethod

import aiohttp
from pydantic import TypeAdapter, ValidationError

from agent.config import MarketDataSettings
from agent.exceptions import MarketDataError, MarketDataTimeout, PayloadParseError
from agent.http import HTTPClient
from agent.logging import get_logger
from agent.market_data.schemas import CoinGeckoMarket
from agent.models import TokenData

logger = get_logger(__name__)

_markets = TypeAdapter(list[CoinGeckoMarket])


class MarketDataClient(ABC):
    """Abstract source of current token market snapshots."""

    @abstractmethod
    async def fetch_markets(self, page: int = 1) -> list[TokenData]:
        """Fetch one page of tokens ordered by 24h volume, descending."""
        ...


class CoinGeckoClient(HTTPClient, MarketDataClient):
    """CoinGecko /coins/markets client."""

    def __init__(
        self,
        settings: MarketDataSettings,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        super().__init__(settings.request_timeout, session)
        self._settings = settings

    async def fetch_markets(self, page: int = 1) -> list[TokenData]:
        """Fetch and parse one page of markets.

        Raises:
            MarketDataTimeout: The request exceeded request_timeout.
            MarketDataError: Network failure or non-200 response.
            PayloadParseError: The response body did not validate.
        """
        params = {
            "vs_currency": self._settings.vs_currency,
            "order": "volume_desc",
            "per_page": str(self._settings.per_page),
            "page": str(page),
            "price_change_percentage": "1h,24h",
        }
        try:
            payload = await asyncio.wait_for(
                self._get("/coins/markets", params), timeout=self._settings.request_timeout
            )
        except asyncio.TimeoutError as e:
            logger.warning("market_data_timeout", timeout=self._settings.request_timeout)
            raise MarketDataTimeout(
                f"Market data request timed out after {self._settings.request_timeout}s"
            ) from e

        try:
            rows = _markets.validate_python(payload)
        except ValidationError as e:
            raise PayloadParseError(f"Invalid CoinGecko markets payload: {e}") from e

        timestamp_ms = int(time.time() * 1000)
        tokens = [
            row.to_token(timestamp_ms, self._settings.liquidity_volume_factor) for row in rows
        ]
        logger.info("markets_fetched", page=page, count=len(tokens))
        return tokens

    async def _get(self, path: str, params: dict[str, str]) -> object:
        url = f"{self._settings.base_url}{path}"
        try:
            async with self.session.get(url, params=params) as response:
                if response.status != 200:
                    error_text = await response.text()
                    raise MarketDataError(
                        f"CoinGecko error {response.status}: {error_text[:200]}"
                    )
                return await response.json()
        except aiohttp.ClientError as e:
            raise MarketDataError(f"CoinGecko request failed: {e}") from e
