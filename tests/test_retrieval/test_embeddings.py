"""Tests for the embeddings provider.

All tests use a mocked aiohttp session to avoid real API calls.
"""

from collections.abc import Sequence
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from agent.config import EmbeddingSettings
from agent.exceptions import EmbeddingAPIError, EmbeddingValidationError, PayloadParseError
from agent.retrieval.embeddings import (
    EmbeddingProvider,
    VoyageEmbeddingClient,
    embed_in_chunks,
    validate_texts,
)
from agent.retrieval.models import EmbeddingData


def mock_response(status: int, json_data: object = None, text: str = "") -> MagicMock:
    """Async context manager mimicking ``session.post(...)``."""
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=json_data)
    response.text = AsyncMock(return_value=text)

    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=response)
    context.__aexit__ = AsyncMock(return_value=False)
    return context


@pytest.fixture
def settings() -> EmbeddingSettings:
    return EmbeddingSettings(api_key="test-key", model="voyage-3")  # type: ignore[arg-type]


@pytest.fixture
def session() -> MagicMock:
    return MagicMock()


@pytest.fixture
def client(settings: EmbeddingSettings, session: MagicMock) -> VoyageEmbeddingClient:
    return VoyageEmbeddingClient(settings, session=session)


class RecordingProvider(EmbeddingProvider):
    """Returns [position] vectors and records each call's batch."""

    def __init__(self, max_batch_size: int) -> None:
        self.max_batch_size = max_batch_size
        self.calls: list[list[str]] = []
        self._counter = 0

    async def embed(self, texts: Sequence[str]) -> list[EmbeddingData]:
        self.calls.append(list(texts))
        data = []
        for i, _ in enumerate(texts):
            data.append(EmbeddingData(embedding=[float(self._counter)], index=i))
            self._counter += 1
        return data


class TestValidateTexts:
    def test_empty(self) -> None:
        with pytest.raises(EmbeddingValidationError, match="cannot be empty"):
            validate_texts([])

    def test_too_many(self) -> None:
        with pytest.raises(EmbeddingValidationError, match="limit: 128"):
            validate_texts(["x"] * 129)

    def test_blank_text(self) -> None:
        with pytest.raises(EmbeddingValidationError, match="index 1"):
            validate_texts(["ok", "   "])

    def test_non_string(self) -> None:
        with pytest.raises(EmbeddingValidationError, match="must be a string"):
            validate_texts(["ok", 3])  # type: ignore[list-item]

    def test_bare_string_rejected(self) -> None:
        with pytest.raises(EmbeddingValidationError):
            validate_texts("not a list")


class TestVoyageEmbeddingClient:
    @pytest.mark.asyncio
    async def test_embed_sorts_by_index(
        self, client: VoyageEmbeddingClient, session: MagicMock
    ) -> None:
        session.post = MagicMock(return_value=mock_response(200, {
            "object": "list",
            "data": [
                {"embedding": [0.2, 0.2], "index": 1},
                {"embedding": [0.1, 0.1], "index": 0},
            ],
            "model": "voyage-3",
            "usage": {"total_tokens": 12},
        }))

        data = await client.embed(["first", "second"])

        assert [d.embedding for d in data] == [[0.1, 0.1], [0.2, 0.2]]
        args, kwargs = session.post.call_args
        assert args[0] == "https://api.voyageai.com/v1/embeddings"
        assert kwargs["json"] == {
            "input": ["first", "second"],
            "model": "voyage-3",
            "input_type": "document",
        }
        assert kwargs["headers"]["Authorization"] == "Bearer test-key"

    @pytest.mark.asyncio
    async def test_http_error(self, client: VoyageEmbeddingClient, session: MagicMock) -> None:
        session.post = MagicMock(return_value=mock_response(429, text="rate limited"))

        with pytest.raises(EmbeddingAPIError) as exc_info:
            await client.embed(["text"])
        assert exc_info.value.error_data == "rate limited"

    @pytest.mark.asyncio
    async def test_network_error(self, client: VoyageEmbeddingClient, session: MagicMock) -> None:
        session.post = MagicMock(side_effect=aiohttp.ClientConnectionError("refused"))

        with pytest.raises(EmbeddingAPIError, match="Network error"):
            await client.embed(["text"])

    @pytest.mark.asyncio
    async def test_malformed_payload(
        self, client: VoyageEmbeddingClient, session: MagicMock
    ) -> None:
        session.post = MagicMock(return_value=mock_response(200, {"data": "nope"}))

        with pytest.raises(PayloadParseError):
            await client.embed(["text"])

    @pytest.mark.asyncio
    async def test_count_mismatch(self, client: VoyageEmbeddingClient, session: MagicMock) -> None:
        session.post = MagicMock(
            return_value=mock_response(200, {"data": [{"embedding": [0.1], "index": 0}]})
        )

        with pytest.raises(PayloadParseError, match="1 embeddings for 2 texts"):
            await client.embed(["a", "b"])

    @pytest.mark.asyncio
    async def test_invalid_input_sends_nothing(
        self, client: VoyageEmbeddingClient, session: MagicMock
    ) -> None:
        with pytest.raises(EmbeddingValidationError):
            await client.embed([])
        session.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_borrowed_session_not_closed(
        self, client: VoyageEmbeddingClient, session: MagicMock
    ) -> None:
        session.close = AsyncMock()
        await client.close()
        session.close.assert_not_awaited()


class TestEmbedInChunks:
    @pytest.mark.asyncio
    async def test_chunks_preserve_order(self) -> None:
        provider = RecordingProvider(max_batch_size=2)
        texts = ["a", "b", "c", "d", "e"]

        vectors = await embed_in_chunks(provider, texts)

        assert provider.calls == [["a", "b"], ["c", "d"], ["e"]]
        assert vectors == [[0.0], [1.0], [2.0], [3.0], [4.0]]

    @pytest.mark.asyncio
    async def test_empty_input_makes_no_calls(self) -> None:
        provider = RecordingProvider(max_batch_size=2)
        assert await embed_in_chunks(provider, []) == []
        assert provider.calls == []
