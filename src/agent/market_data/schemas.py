"""Validated CoinGecko payloads and their conversion into domain models."""

from pydantic import BaseModel, ConfigDict, Field

from agent.models import MarketObservation, TokenData, TokenMetadata


class CoinGeckoMarket(BaseModel):
    """One row of CoinGecko /coins/markets.

    CoinGecko reports nulls freely; numeric nulls become 0 except the
    percentage changes, where null means "no baseline".
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    symbol: str
    name: str = ""
    current_price: float | None = Field(default=None, ge=0)
    market_cap: float | None = Field(default=None, ge=0)
    market_cap_rank: int | None = None
    total_volume: float | None = Field(default=None, ge=0)
    high_24h: float | None = None
    low_24h: float | None = None
    price_change_24h: float | None = None
    price_change_percentage_24h: float | None = None
    price_change_percentage_1h_in_currency: float | None = None
    market_cap_change_percentage_24h: float | None = None
    circulating_supply: float | None = None
    total_supply: float | None = None
    max_supply: float | None = None
    ath: float | None = None
    ath_change_percentage: float | None = None
    atl: float | None = None
    atl_change_percentage: float | None = None

    def to_observation(
        self,
        timestamp_ms: int,
        liquidity_volume_factor: float,
    ) -> MarketObservation:
        """Convert to a MarketObservation.

        CoinGecko has no liquidity figure; it is estimated as a fixed share
        of 24h volume.
        """
        volume = self.total_volume or 0.0
        return MarketObservation(
            id=f"{self.id}-{timestamp_ms}",
            symbol=self.symbol.upper(),
            timestamp_ms=timestamp_ms,
            price_usd=self.current_price or 0.0,
            high_24h=self.high_24h or 0.0,
            low_24h=self.low_24h or 0.0,
            total_volume=volume,
            liquidity_usd=volume * liquidity_volume_factor,
            market_cap=self.market_cap or 0.0,
            market_cap_rank=self.market_cap_rank,
            ath=self.ath or 0.0,
            ath_change_percentage=self.ath_change_percentage or 0.0,
            atl=self.atl or 0.0,
            atl_change_percentage=self.atl_change_percentage or 0.0,
            circulating_supply=self.circulating_supply or 0.0,
            total_supply=self.total_supply or 0.0,
            max_supply=self.max_supply,
            price_change_24h=self.price_change_24h or 0.0,
            price_change_percentage_24h=self.price_change_percentage_24h,
            price_change_percentage_1h=self.price_change_percentage_1h_in_currency,
            market_cap_change_percentage_24h=self.market_cap_change_percentage_24h,
        )

    def to_token(self, timestamp_ms: int, liquidity_volume_factor: float) -> TokenData:
        return TokenData(
            market=self.to_observation(timestamp_ms, liquidity_volume_factor),
            metadata=TokenMetadata(id=self.id, symbol=self.symbol.upper(), name=self.name),
        )
