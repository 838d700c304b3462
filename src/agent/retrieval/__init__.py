"""Similarity retrieval over embedded observation signatures.

Wraps the external embeddings provider and vector store behind small
interfaces, with validated payload parsing at each boundary.
"""

from agent.retrieval.embeddings import (
    EmbeddingProvider,
    VoyageEmbeddingClient,
    embed_in_chunks,
    validate_texts,
)
from agent.retrieval.models import EmbeddingData, MatchRow, ObservationRecord
from agent.retrieval.retriever import (
    EmbeddingSimilarityRetriever,
    ObservationIndexer,
    SimilarityRetriever,
)
from agent.retrieval.vector_store import SupabaseVectorStore, VectorStore

__all__ = [
    "EmbeddingData",
    "EmbeddingProvider",
    "EmbeddingSimilarityRetriever",
    "MatchRow",
    "ObservationIndexer",
    "ObservationRecord",
    "SimilarityRetriever",
    "SupabaseVectorStore",
    "VectorStore",
    "VoyageEmbeddingClient",
    "embed_in_chunks",
    "validate_texts",
]
