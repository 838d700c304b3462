"""Entry point for the similarity confidence agent.

Runs one buying-target search and prints the audit report.

Component wiring order (in _build_components):
1. DecisionDatabase / DecisionStore (recorded outcomes)
2. VoyageEmbeddingClient (text -> vector)
3. SupabaseVectorStore (nearest-neighbour search)
4. EmbeddingSimilarityRetriever
5. CoinGeckoClient + TokenDiscovery (candidate tokens)
6. TokenAnalyzer (per-token confidence)
7. RoutePlanner (entry swap routes, only when a quote token is set)
8. AgentService (run orchestration under run locks)
"""

import asyncio
import uuid
from typing import Any

from agent.analyzer import AgentService, TokenAnalyzer
from agent.config import AppSettings
from agent.data import DecisionDatabase, DecisionStore
from agent.logging import get_logger, setup_logging
from agent.market_data import CoinGeckoClient, TokenDiscovery
from agent.report import format_analysis_results
from agent.retrieval import EmbeddingSimilarityRetriever, SupabaseVectorStore, VoyageEmbeddingClient
from agent.routing import RoutePlanner


def _build_components(settings: AppSettings) -> dict[str, Any]:
    """Build the component graph from settings. Nothing is connected yet."""
    database = DecisionDatabase(settings.decisions.db_path)
    embeddings = VoyageEmbeddingClient(settings.embedding)
    vector_store = SupabaseVectorStore(settings.vector_store)
    market_data = CoinGeckoClient(settings.market_data)

    analyzer = TokenAnalyzer(
        retriever=EmbeddingSimilarityRetriever(embeddings, vector_store),
        outcomes=DecisionStore(database),
        scoring=settings.scoring,
        batch=settings.batch,
    )
    service = AgentService(
        discovery=TokenDiscovery(market_data, settings.market_data),
        analyzer=analyzer,
        route_planner=RoutePlanner.from_settings(settings.routing),
    )
    return {
        "database": database,
        "embeddings": embeddings,
        "vector_store": vector_store,
        "market_data": market_data,
        "service": service,
    }


async def run(limit: int | None = None) -> None:
    settings = AppSettings()

    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("agent.main")

    components = _build_components(settings)
    run_id = str(uuid.uuid4())

    logger.info("agent_starting", run_id=run_id, limit=limit)
    await components["database"].connect()
    try:
        results = await components["service"].seek_buying_targets(run_id, limit)
        print(format_analysis_results(results))
    finally:
        await components["market_data"].close()
        await components["vector_store"].close()
        await components["embeddings"].close()
        await components["database"].close()
        logger.info("agent_stopped", run_id=run_id)


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
