"""Custom exceptions for the similarity confidence agent.

Integration, parsing, and lifecycle exceptions live here to avoid
circular imports between the client, store, and scoring modules.
"""


class AgentError(Exception):
    """Base exception for all agent errors."""


class UpstreamError(AgentError):
    """Raised when an external service call fails (network or HTTP status)."""


class EmbeddingAPIError(UpstreamError):
    """Raised when the embeddings provider rejects or fails a request."""

    def __init__(self, message: str, error_data: object | None = None) -> None:
        super().__init__(message)
        self.error_data = error_data


class VectorStoreError(UpstreamError):
    """Raised when the similarity store RPC or insert fails."""


class MarketDataError(UpstreamError):
    """Raised when the market data provider returns an error."""


class MarketDataTimeout(MarketDataError):
    """Raised when a market data request exceeds its wall-clock deadline."""


class PayloadParseError(AgentError):
    """Raised when a response arrived but failed validation."""


class EmbeddingValidationError(AgentError):
    """Raised for malformed or empty embedding input. Never retried."""


class InvalidStatusTransition(AgentError):
    """Raised when a trading decision is moved to an unreachable status."""


class RunInProgressError(AgentError):
    """Raised when an analysis run id already holds its run lock."""


class BatchRetryExhausted(AgentError):
    """Raised when batched analysis keeps failing past its failure guard."""
