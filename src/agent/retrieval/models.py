"""Validated payload types for the embeddings provider and the vector store.

Every external response is parsed into one of these models before use.
A pydantic ValidationError here is a parse failure, distinct from a
network failure.
"""

from dataclasses import asdict

from pydantic import BaseModel, ConfigDict, Field

from agent.models import MarketObservation


class EmbeddingData(BaseModel):
    """One embedding vector and its position in the request."""

    embedding: list[float]
    index: int = 0


class EmbeddingUsage(BaseModel):
    total_tokens: int = 0


class EmbeddingResponse(BaseModel):
    """Voyage /embeddings response body."""

    object: str = "list"
    data: list[EmbeddingData]
    model: str = ""
    usage: EmbeddingUsage = Field(default_factory=EmbeddingUsage)


class ObservationRecord(BaseModel):
    """A market observation as stored alongside its embedding.

    Unknown columns (embedding, content, created_at) are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    symbol: str = ""
    timestamp_ms: int = 0
    price_usd: float = Field(ge=0)
    high_24h: float = 0.0
    low_24h: float = 0.0
    total_volume: float = Field(default=0.0, ge=0)
    liquidity_usd: float = Field(default=0.0, ge=0)
    market_cap: float = Field(default=0.0, ge=0)
    market_cap_rank: int | None = None
    ath: float = 0.0
    ath_change_percentage: float = 0.0
    atl: float = 0.0
    atl_change_percentage: float = 0.0
    circulating_supply: float = 0.0
    total_supply: float = 0.0
    max_supply: float | None = None
    price_change_24h: float = 0.0
    price_change_percentage_24h: float | None = None
    price_change_percentage_1h: float | None = None
    market_cap_change_percentage_24h: float | None = None
    volume_change_24h_pct: float | None = None
    sentiment_score: float | None = None
    social_volume_24h: float = 0.0
    holder_count: int = 0
    active_addresses_24h: int = 0

    def to_observation(self) -> MarketObservation:
        return MarketObservation(**self.model_dump())

    @classmethod
    def from_observation(cls, observation: MarketObservation) -> "ObservationRecord":
        return cls(**asdict(observation))


class MatchRow(ObservationRecord):
    """One row returned by the similarity match function."""

    similarity: float

    def to_observation(self) -> MarketObservation:
        return MarketObservation(**self.model_dump(exclude={"similarity"}))
