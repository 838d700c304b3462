"""Token analysis pipeline and the buying-target agent service.

Per token: normalize -> signature -> similarity search -> outcome join ->
cohort stats -> buying confidence. Across tokens: adaptive batches, then
filtering by minimum confidence and sorting by score. Selected tokens
get an entry swap route when a route planner is configured.

Error policy:
- Data problems with one token (bad payloads, invalid values) are logged
  and the token is dropped from the run.
- Upstream failures (embeddings, vector store) propagate so the whole
  batch fails and is re-queued by the batch controller. A token that keeps
  failing is dropped after max_item_failures attempts; the rest of the run
  still completes.
"""

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, replace
from datetime import datetime, timezone

from agent.batching import BatchController, run_batched
from agent.config import BatchSettings, ScoringSettings
from agent.data.store import OutcomeStore
from agent.exceptions import EmbeddingValidationError, PayloadParseError, RunInProgressError
from agent.logging import get_logger, run_context, token_context
from agent.market_data.discovery import TokenDiscovery
from agent.models import SimilarObservation, TokenData
from agent.retrieval.retriever import SimilarityRetriever
from agent.routing import Route, RoutePlanner
from agent.scoring import (
    BuyingConfidenceResult,
    ConfidenceWeights,
    DecisionStats,
    aggregate,
    calculate_buying_confidence,
)
from agent.signals import MarketStats, compute_market_stats, describe, normalize

logger = get_logger(__name__)


@dataclass(frozen=True)
class TokenAnalysisResult:
    """Outcome of analysing one token against its historical analogues."""

    token: TokenData
    confidence: BuyingConfidenceResult
    similar_decisions: list[SimilarObservation]
    decision_stats: DecisionStats
    signature: str
    route: Route | None = None

    @property
    def buying_confidence(self) -> float:
        return self.confidence.score


class RunLocks:
    """Tracks which analysis runs are in progress.

    One instance is shared by the callers that must not overlap; separate
    instances never interfere.
    """

    def __init__(self) -> None:
        self._held: set[str] = set()

    def acquire(self, run_id: str) -> bool:
        """Take the lock for run_id; False if it is already held."""
        if run_id in self._held:
            return False
        self._held.add(run_id)
        return True

    def release(self, run_id: str) -> None:
        self._held.discard(run_id)

    def is_locked(self, run_id: str) -> bool:
        return run_id in self._held

    @asynccontextmanager
    async def hold(self, run_id: str) -> AsyncIterator[None]:
        """Hold the lock for the duration of the block.

        Raises:
            RunInProgressError: If run_id is already locked.
        """
        if not self.acquire(run_id):
            raise RunInProgressError(f"Analysis run {run_id} is already in progress")
        try:
            yield
        finally:
            self.release(run_id)


class TokenAnalyzer:
    """Scores tokens by how profitable similar past decisions were.

    Args:
        retriever: Similarity search over embedded historical observations.
        outcomes: Lookup of the decision recorded for an observation.
        scoring: Retrieval thresholds, weights and result filtering.
        batch: Adaptive batch sizing parameters.
        clock: Returns the reference time for recency decay.
    """

    def __init__(
        self,
        retriever: SimilarityRetriever,
        outcomes: OutcomeStore,
        scoring: ScoringSettings,
        batch: BatchSettings,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._retriever = retriever
        self._outcomes = outcomes
        self._scoring = scoring
        self._batch = batch
        self._weights = ConfidenceWeights.from_settings(scoring)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def analyze_token(
        self,
        token: TokenData,
        stats: MarketStats | None = None,
    ) -> TokenAnalysisResult | None:
        """Analyse one token.

        Returns None when the token has no linked historical decisions or
        its data could not be processed.
        """
        with token_context(token.symbol):
            try:
                return await self._analyze(token, stats)
            except (PayloadParseError, EmbeddingValidationError, ValueError) as e:
                logger.warning("token_analysis_failed", error=str(e))
                return None

    async def _analyze(
        self,
        token: TokenData,
        stats: MarketStats | None,
    ) -> TokenAnalysisResult | None:
        signature = describe(token.market, normalize(token.market, stats))

        matches = await self._retriever.find_nearest(
            signature,
            self._scoring.similarity_threshold,
            self._scoring.match_count,
        )
        decisions = await asyncio.gather(
            *(self._outcomes.get_decision_by_observation_id(m.id) for m in matches)
        )
        similar = [
            SimilarObservation(
                market_condition=match.observation,
                decision=decision,
                similarity=match.similarity,
            )
            for match, decision in zip(matches, decisions)
            if decision is not None
        ]
        if not similar:
            logger.debug("no_linked_decisions", matches=len(matches))
            return None

        scored, decision_stats = aggregate(similar, self._scoring.profitable_threshold)
        confidence = calculate_buying_confidence(
            scored,
            decision_stats,
            self._weights,
            now=self._clock(),
            min_sample_size=self._scoring.min_sample_size,
            optimal_sample_size=self._scoring.optimal_sample_size,
        )
        logger.info(
            "token_analyzed",
            matches=len(matches),
            decisions=len(scored),
            confidence=round(confidence.score, 4),
        )
        return TokenAnalysisResult(
            token=token,
            confidence=confidence,
            similar_decisions=scored,
            decision_stats=decision_stats,
            signature=signature,
        )

    async def analyze_tokens(self, tokens: list[TokenData]) -> list[TokenAnalysisResult]:
        """Analyse tokens in adaptive batches.

        Observations are normalized against statistics over the whole token
        set. Returns results at or above min_confidence, highest first.
        """
        if not tokens:
            return []

        stats = compute_market_stats([t.market for t in tokens])
        controller: BatchController[TokenData] = BatchController.from_settings(self._batch)

        results = await run_batched(
            tokens,
            lambda token: self.analyze_token(token, stats),
            controller=controller,
            failure_delay=self._batch.failure_delay,
            max_consecutive_failures=self._batch.max_consecutive_failures,
            item_label=lambda token: token.symbol,
        )

        selected = [
            r for r in results
            if r is not None and r.buying_confidence >= self._scoring.min_confidence
        ]
        selected.sort(key=lambda r: r.buying_confidence, reverse=True)

        logger.info(
            "tokens_analyzed",
            tokens=len(tokens),
            analyzed=sum(1 for r in results if r is not None),
            selected=len(selected),
            final_batch_size=controller.batch_size,
        )
        return selected


class AgentService:
    """Discovers tokens and reports the ones worth buying.

    Args:
        discovery: Token discovery and quality ranking.
        analyzer: Per-token confidence analysis.
        locks: Run lock registry; a private one is created if omitted.
        route_planner: Plans the entry swap for each selected token; routes
            are left unset when omitted.
    """

    def __init__(
        self,
        discovery: TokenDiscovery,
        analyzer: TokenAnalyzer,
        locks: RunLocks | None = None,
        route_planner: RoutePlanner | None = None,
    ) -> None:
        self._discovery = discovery
        self._analyzer = analyzer
        self._locks = locks or RunLocks()
        self._route_planner = route_planner

    @property
    def locks(self) -> RunLocks:
        return self._locks

    async def seek_buying_targets(
        self,
        run_id: str,
        limit: int | None = None,
    ) -> list[TokenAnalysisResult]:
        """Run one discovery + analysis pass under the run_id lock.

        Raises:
            RunInProgressError: If a run with the same id is in progress.
        """
        async with self._locks.hold(run_id):
            with run_context(run_id):
                logger.info("buying_target_search_started", limit=limit)
                tokens = await self._discovery.discover(limit)
                results = await self._analyzer.analyze_tokens(tokens)
                if self._route_planner is not None:
                    results = [
                        replace(r, route=self._route_planner.plan(r.token)) for r in results
                    ]
                logger.info("buying_target_search_finished", targets=len(results))
                return results
