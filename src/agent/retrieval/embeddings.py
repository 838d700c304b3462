"""Embeddings provider interface and the Voyage AI implementation.

Providers accept at most max_batch_size texts per call; callers with
larger inputs go through embed_in_chunks.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Sequence

import aiohttp
from pydantic import ValidationError

from agent.config import EmbeddingSettings
from agent.exceptions import EmbeddingAPIError, EmbeddingValidationError, PayloadParseError
from agent.http import HTTPClient
from agent.logging import get_logger
from agent.retrieval.models import EmbeddingData, EmbeddingResponse

logger = get_logger(__name__)

#: Provider limit on documents per request.
MAX_BATCH_SIZE = 128


class EmbeddingProvider(ABC):
    """Abstract text-to-vector service."""

    max_batch_size: int = MAX_BATCH_SIZE

    @abstractmethod
    async def embed(self, texts: Sequence[str]) -> list[EmbeddingData]:
        """Embed up to max_batch_size texts, returned in input order."""
        ...


def validate_texts(texts: Sequence[str], max_batch_size: int = MAX_BATCH_SIZE) -> None:
    """Reject empty batches, oversized batches, and blank or non-string texts.

    Raises:
        EmbeddingValidationError: On the first invalid input.
    """
    if isinstance(texts, str) or not isinstance(texts, Sequence):
        raise EmbeddingValidationError("Texts must be a sequence of strings")
    if not texts:
        raise EmbeddingValidationError("Texts cannot be empty")
    if len(texts) > max_batch_size:
        raise EmbeddingValidationError(
            f"Maximum number of documents exceeded (limit: {max_batch_size})"
        )
    for index, text in enumerate(texts):
        if not isinstance(text, str):
            raise EmbeddingValidationError(f"Invalid text at index {index}: must be a string")
        if not text.strip():
            raise EmbeddingValidationError(f"Empty text at index {index}")


class VoyageEmbeddingClient(HTTPClient, EmbeddingProvider):
    """Voyage AI /embeddings client."""

    def __init__(
        self,
        settings: EmbeddingSettings,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        super().__init__(settings.request_timeout, session)
        self._settings = settings
        self.max_batch_size = settings.max_batch_size

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._settings.api_key.get_secret_value()}",
            "Content-Type": "application/json",
        }

    async def embed(self, texts: Sequence[str]) -> list[EmbeddingData]:
        """Embed texts with one API call.

        Raises:
            EmbeddingValidationError: Input rejected before any request.
            EmbeddingAPIError: Network failure or non-200 response.
            PayloadParseError: Response body did not match the expected shape.
        """
        validate_texts(texts, self.max_batch_size)

        body = {
            "input": list(texts),
            "model": self._settings.model,
            "input_type": self._settings.input_type,
        }
        url = f"{self._settings.base_url}/embeddings"

        try:
            async with self.session.post(url, json=body, headers=self._headers()) as response:
                if response.status != 200:
                    error_text = await response.text()
                    raise EmbeddingAPIError(
                        f"Voyage API error: {response.status}",
                        error_data=error_text[:500],
                    )
                payload = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise EmbeddingAPIError(f"Network error while connecting to Voyage API: {e}") from e

        try:
            parsed = EmbeddingResponse.model_validate(payload)
        except ValidationError as e:
            raise PayloadParseError(f"Invalid response format from Voyage API: {e}") from e

        if len(parsed.data) != len(texts):
            raise PayloadParseError(
                f"Voyage API returned {len(parsed.data)} embeddings for {len(texts)} texts"
            )

        logger.debug(
            "embeddings_created",
            count=len(parsed.data),
            total_tokens=parsed.usage.total_tokens,
        )
        return sorted(parsed.data, key=lambda d: d.index)


async def embed_in_chunks(
    provider: EmbeddingProvider,
    texts: Sequence[str],
) -> list[list[float]]:
    """Embed any number of texts in provider-sized chunks, sequentially.

    Returns:
        One vector per input text, in input order.
    """
    size = provider.max_batch_size
    vectors: list[list[float]] = []
    for start in range(0, len(texts), size):
        chunk = texts[start:start + size]
        data = await provider.embed(chunk)
        vectors.extend(d.embedding for d in data)
        logger.debug("embedding_chunk_done", start=start, size=len(chunk))
    return vectors
