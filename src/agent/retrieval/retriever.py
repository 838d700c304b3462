"""Similarity retrieval and ingestion of embedded market observations."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from agent.exceptions import EmbeddingValidationError
from agent.logging import get_logger
from agent.models import MarketObservation, MatchedObservation
from agent.retrieval.embeddings import EmbeddingProvider, embed_in_chunks
from agent.retrieval.vector_store import VectorStore
from agent.signals import compute_market_stats, describe, normalize

logger = get_logger(__name__)


class SimilarityRetriever(ABC):
    """Finds historical observations whose signatures resemble a query."""

    @abstractmethod
    async def find_nearest(
        self,
        query: str,
        match_threshold: float,
        match_count: int,
    ) -> list[MatchedObservation]:
        """Return matches in descending similarity, already thresholded."""
        ...


class EmbeddingSimilarityRetriever(SimilarityRetriever):
    """Embeds the query and asks the vector store for its nearest neighbours."""

    def __init__(self, embeddings: EmbeddingProvider, store: VectorStore) -> None:
        self._embeddings = embeddings
        self._store = store

    async def find_nearest(
        self,
        query: str,
        match_threshold: float,
        match_count: int,
    ) -> list[MatchedObservation]:
        if not isinstance(query, str) or not query.strip():
            raise EmbeddingValidationError("Query must be a non-empty string")

        data = await self._embeddings.embed([query])
        if not data:
            raise EmbeddingValidationError("No embeddings generated for query")

        rows = await self._store.match_documents(data[0].embedding, match_threshold, match_count)
        return [
            MatchedObservation(id=row.id, similarity=row.similarity, observation=row.to_observation())
            for row in rows
        ]


class ObservationIndexer:
    """Renders, embeds and stores observations so they can be matched later.

    Observations indexed together are normalized against their shared
    batch statistics.
    """

    def __init__(self, embeddings: EmbeddingProvider, store: VectorStore) -> None:
        self._embeddings = embeddings
        self._store = store

    def signatures(self, observations: Sequence[MarketObservation]) -> list[str]:
        stats = compute_market_stats(observations)
        return [describe(obs, normalize(obs, stats)) for obs in observations]

    async def index(self, observations: Sequence[MarketObservation]) -> int:
        """Embed and save observations; returns the number stored."""
        if not observations:
            return 0

        contents = self.signatures(observations)
        vectors = await embed_in_chunks(self._embeddings, contents)
        saved = await self._store.save_documents(observations, contents, vectors)

        logger.info("observations_indexed", count=saved)
        return saved
