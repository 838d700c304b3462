"""Shared domain models for the similarity confidence agent.

Market observations are immutable snapshots. Trading decisions are mutated
only by the decision store as their lifecycle advances.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class DecisionType(str, Enum):
    """Trading action direction."""

    BUY = "BUY"
    SELL = "SELL"


class DecisionStatus(str, Enum):
    """Lifecycle of a trading decision.

    PENDING_EXECUTION -> EXECUTION_FAILED
    PENDING_EXECUTION -> AWAITING_24H_RESULT -> AWAITING_7D_RESULT -> COMPLETED
    """

    PENDING_EXECUTION = "PENDING_EXECUTION"
    EXECUTION_FAILED = "EXECUTION_FAILED"
    AWAITING_24H_RESULT = "AWAITING_24H_RESULT"
    AWAITING_7D_RESULT = "AWAITING_7D_RESULT"
    COMPLETED = "COMPLETED"


#: Allowed forward transitions for DecisionStatus.
STATUS_TRANSITIONS: dict[DecisionStatus, frozenset[DecisionStatus]] = {
    DecisionStatus.PENDING_EXECUTION: frozenset(
        {DecisionStatus.EXECUTION_FAILED, DecisionStatus.AWAITING_24H_RESULT}
    ),
    DecisionStatus.EXECUTION_FAILED: frozenset(),
    DecisionStatus.AWAITING_24H_RESULT: frozenset({DecisionStatus.AWAITING_7D_RESULT}),
    DecisionStatus.AWAITING_7D_RESULT: frozenset({DecisionStatus.COMPLETED}),
    DecisionStatus.COMPLETED: frozenset(),
}


@dataclass(frozen=True)
class MarketObservation:
    """Snapshot of a token's market state at one point in time.

    Percentage-change fields are None when the provider had no prior-period
    baseline. Optional on-chain and social fields default to 0, which means
    "no data" rather than a measured zero.
    """

    id: str
    symbol: str
    timestamp_ms: int
    price_usd: float
    high_24h: float = 0.0
    low_24h: float = 0.0
    total_volume: float = 0.0
    liquidity_usd: float = 0.0
    market_cap: float = 0.0
    market_cap_rank: int | None = None
    ath: float = 0.0
    ath_change_percentage: float = 0.0
    atl: float = 0.0
    atl_change_percentage: float = 0.0
    circulating_supply: float = 0.0
    total_supply: float = 0.0
    max_supply: float | None = None
    price_change_24h: float = 0.0  # absolute USD change
    price_change_percentage_24h: float | None = None
    price_change_percentage_1h: float | None = None
    market_cap_change_percentage_24h: float | None = None
    volume_change_24h_pct: float | None = None
    sentiment_score: float | None = None  # -1 (very negative) .. +1
    social_volume_24h: float = 0.0
    holder_count: int = 0
    active_addresses_24h: int = 0

    def __post_init__(self) -> None:
        for name in ("price_usd", "total_volume", "liquidity_usd", "market_cap"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")

    @property
    def supply_ratio(self) -> float:
        """Circulating over total supply, 0 when total supply is unknown."""
        if self.total_supply <= 0:
            return 0.0
        return self.circulating_supply / self.total_supply


@dataclass
class TokenMetadata:
    """Descriptive token data used for discovery ranking."""

    id: str
    symbol: str
    name: str
    categories: list[str] = field(default_factory=list)
    contract_addresses: dict[str, str] = field(default_factory=dict)
    website: list[str] = field(default_factory=list)
    twitter: str | None = None
    telegram: str | None = None
    github: list[str] = field(default_factory=list)


@dataclass
class TokenData:
    """A discovered token: its current market observation plus metadata."""

    market: MarketObservation
    metadata: TokenMetadata

    @property
    def symbol(self) -> str:
        return self.metadata.symbol


@dataclass
class TradingDecision:
    """A historical BUY/SELL action tied to one market observation.

    For SELL decisions, previous_buy_id/previous_buy_price_usd reference the
    most recent prior BUY for the same token. The decision store maintains
    this linkage; the scorer only reads it.
    """

    id: str
    observation_id: str
    token_address: str
    decision_type: DecisionType
    decision_price_usd: float
    confidence_score: float
    status: DecisionStatus = DecisionStatus.PENDING_EXECUTION
    wallet_address: str = ""
    previous_buy_id: str | None = None
    previous_buy_price_usd: float | None = None
    execution_successful: bool = False
    execution_price_usd: float | None = None
    price_24h_after_usd: float | None = None
    price_change_24h_pct: float | None = None
    price_7d_after_usd: float | None = None
    price_change_7d_pct: float | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass(frozen=True)
class MatchedObservation:
    """A historical observation returned by the similarity retriever."""

    id: str
    similarity: float
    observation: MarketObservation


@dataclass(frozen=True)
class SimilarObservation:
    """A matched observation joined to its recorded trading decision."""

    market_condition: MarketObservation
    decision: TradingDecision
    similarity: float
    profitability_score: float = 0.0


@dataclass(frozen=True)
class OHLCVCandle:
    """One daily open/high/low/close/volume bar."""

    timestamp_ms: int
    open: float
    high: float
    low: float
    close: float
    volume: float
