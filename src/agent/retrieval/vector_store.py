"""Vector store interface and the Supabase (pgvector over PostgREST) implementation.

The store is a black-box nearest-neighbour service: it receives an
embedding and returns rows already thresholded and ordered by descending
similarity.
"""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Sequence

import aiohttp
from pydantic import TypeAdapter, ValidationError

from agent.config import VectorStoreSettings
from agent.exceptions import PayloadParseError, VectorStoreError
from agent.http import HTTPClient
from agent.logging import get_logger
from agent.models import MarketObservation
from agent.retrieval.models import MatchRow, ObservationRecord

logger = get_logger(__name__)

_match_rows = TypeAdapter(list[MatchRow])


class VectorStore(ABC):
    """Abstract similarity store for embedded observations."""

    @abstractmethod
    async def match_documents(
        self,
        embedding: Sequence[float],
        match_threshold: float,
        match_count: int,
    ) -> list[MatchRow]:
        """Return up to match_count rows with similarity >= match_threshold."""
        ...

    @abstractmethod
    async def save_documents(
        self,
        observations: Sequence[MarketObservation],
        contents: Sequence[str],
        embeddings: Sequence[Sequence[float]],
    ) -> int:
        """Persist observations with their signature text and vectors."""
        ...


class SupabaseVectorStore(HTTPClient, VectorStore):
    """Supabase REST client: RPC match function plus table insert."""

    def __init__(
        self,
        settings: VectorStoreSettings,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        super().__init__(settings.request_timeout, session)
        self._settings = settings

    def _headers(self) -> dict[str, str]:
        key = self._settings.api_key.get_secret_value()
        return {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
        }

    async def _post(self, path: str, body: object, prefer: str | None = None) -> object:
        headers = self._headers()
        if prefer:
            headers["Prefer"] = prefer
        url = f"{self._settings.url.rstrip('/')}/rest/v1/{path}"

        try:
            async with self.session.post(url, json=body, headers=headers) as response:
                if response.status not in (200, 201, 204):
                    error_text = await response.text()
                    raise VectorStoreError(
                        f"Supabase error {response.status} on {path}: {error_text[:200]}"
                    )
                if response.status == 204:
                    return None
                return await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise VectorStoreError(f"Supabase request failed on {path}: {e}") from e

    async def match_documents(
        self,
        embedding: Sequence[float],
        match_threshold: float,
        match_count: int,
    ) -> list[MatchRow]:
        payload = await self._post(
            f"rpc/{self._settings.match_function}",
            {
                "query_embedding": list(embedding),
                "match_threshold": match_threshold,
                "match_count": match_count,
            },
        )
        try:
            rows = _match_rows.validate_python(payload or [])
        except ValidationError as e:
            raise PayloadParseError(f"Invalid match rows from Supabase: {e}") from e

        return sorted(rows, key=lambda r: r.similarity, reverse=True)

    async def save_documents(
        self,
        observations: Sequence[MarketObservation],
        contents: Sequence[str],
        embeddings: Sequence[Sequence[float]],
    ) -> int:
        if not (len(observations) == len(contents) == len(embeddings)):
            raise ValueError("observations, contents and embeddings must have equal length")
        if not observations:
            return 0

        rows = [
            {
                **ObservationRecord.from_observation(obs).model_dump(),
                "content": content,
                "embedding": list(vector),
            }
            for obs, content, vector in zip(observations, contents, embeddings)
        ]
        await self._post(self._settings.embeddings_table, rows, prefer="return=minimal")
        logger.info("documents_saved", count=len(rows), table=self._settings.embeddings_table)
        return len(rows)
