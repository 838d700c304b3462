"""Configuration system using pydantic-settings with environment variable loading."""

from typing import Literal

from pydantic import BaseModel, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class EmbeddingSettings(BaseSettings):
    """Voyage embeddings provider settings."""

    model_config = SettingsConfigDict(env_prefix="VOYAGE_")

    api_key: SecretStr = SecretStr("")
    base_url: str = "https://api.voyageai.com/v1"
    model: str = "voyage-3"
    input_type: str = "document"
    max_batch_size: int = 128  # hard provider limit per request
    request_timeout: float = 30.0


class VectorStoreSettings(BaseSettings):
    """Supabase (pgvector) similarity store settings."""

    model_config = SettingsConfigDict(env_prefix="SUPABASE_")

    url: str = ""
    api_key: SecretStr = SecretStr("")
    match_function: str = "match_document_embeddings"
    embeddings_table: str = "document_embeddings"
    request_timeout: float = 30.0


class MarketDataSettings(BaseSettings):
    """Market data provider (CoinGecko) settings and discovery filters."""

    model_config = SettingsConfigDict(env_prefix="MARKET_")

    base_url: str = "https://api.coingecko.com/api/v3"
    vs_currency: str = "usd"
    per_page: int = 200
    request_timeout: float = 60.0  # wall-clock deadline, no retry
    min_volume_usd: float = 50_000.0
    min_liquidity_usd: float = 100_000.0
    liquidity_volume_factor: float = 0.1  # liquidity estimated as 10% of volume


class ScoringSettings(BaseSettings):
    """Similarity retrieval and buying confidence parameters.

    Weights are intended to sum to ~1.0 but this is not enforced.
    """

    model_config = SettingsConfigDict(env_prefix="SCORING_")

    # Retrieval
    similarity_threshold: float = 0.7
    match_count: int = 12

    # Outcome aggregation
    profitable_threshold: float = 5.0  # percent move over 24h

    # Confidence weights
    weight_decision_type: float = 0.30
    weight_similarity: float = 0.35
    weight_profitability: float = 0.25
    weight_confidence: float = 0.10

    # Sample size ramp
    min_sample_size: int = 5
    optimal_sample_size: int = 15

    # Result filtering
    min_confidence: float = 0.7


class BatchSettings(BaseSettings):
    """Adaptive batch sizing for per-token analysis."""

    model_config = SettingsConfigDict(env_prefix="BATCH_")

    initial_size: int = 5
    success_threshold: int = 5
    fail_threshold: int = -5
    min_size: int = 1
    failure_delay: float = 1.0  # seconds to wait before retrying a failed batch
    max_consecutive_failures: int = 25
    max_item_failures: int = 3  # failed batches before one token is dropped


class PoolSettings(BaseModel):
    """One known swap pool with the USD depth of each side."""

    address: str
    token_a: str
    token_b: str
    liquidity_a_usd: float = 0.0
    liquidity_b_usd: float = 0.0


class RoutingSettings(BaseSettings):
    """Entry route planning for selected buying targets.

    Planning is skipped when quote_token is empty. pools is a JSON list
    in the environment, e.g. ROUTING_POOLS='[{"address": "0x..", ...}]'.
    """

    model_config = SettingsConfigDict(env_prefix="ROUTING_")

    chain: str = "base"
    quote_token: str = ""  # token spent on entry, e.g. USDC
    intermediate_token: str = ""  # hop token when no direct pool qualifies, e.g. WETH
    min_pool_liquidity_usd: float = 10_000.0
    pools: list[PoolSettings] = []


class DecisionStoreSettings(BaseSettings):
    """Trading decision outcome store."""

    model_config = SettingsConfigDict(env_prefix="DECISIONS_")

    db_path: str = "data/decisions.db"


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"
    embedding: EmbeddingSettings = EmbeddingSettings()
    vector_store: VectorStoreSettings = VectorStoreSettings()
    market_data: MarketDataSettings = MarketDataSettings()
    scoring: ScoringSettings = ScoringSettings()
    batch: BatchSettings = BatchSettings()
    routing: RoutingSettings = RoutingSettings()
    decisions: DecisionStoreSettings = DecisionStoreSettings()
