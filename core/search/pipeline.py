# Path: core/search/pipeline.py
# Purpose: Orchestrate the search workflow from query validation to the enriched response.
# Layer: core/search.
# Details: Fans strategies out on a thread pool, merges their hits, then scores and enriches survivors.

from __future__ import annotations

import threading
import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple

from config.settings import AppSettings, StrategySettings
from core.catalog.base import CatalogAccessor
from core.errors import AccessorUnavailableError, AllStrategiesFailedError, InvalidQueryError, SearchCancelledError
from core.logger import get_logger
from core.models.domain import (
    CandidateHit,
    ScoredResult,
    SearchQuery,
    SearchResponse,
    StrategyFailure,
    StrategyKind,
)

from .criteria import QueryAnalyzer
from .enrichment import ResultEnricher
from .jitter import JitterSource
from .merge import merge_hits
from .scoring import WeightedScorer
from .strategies import ColorSearch, SceneSearch, SearchStrategy, SemanticSearch, VisualSimilaritySearch

logger = get_logger("search.pipeline")

# How often a waiting request re-checks its cancellation event.
_CANCEL_POLL_SECONDS = 0.05

_SIGNAL_FIELDS = {
    StrategyKind.SEMANTIC: "text",
    StrategyKind.VISUAL: "image_id",
    StrategyKind.COLOR: "color_query",
    StrategyKind.SCENE: "scene_type",
}


def default_strategies(settings: Optional[StrategySettings] = None) -> Dict[StrategyKind, SearchStrategy]:
    """Build one runner per strategy kind, each with its own jitter stream derived from ``settings.seed``."""

    settings = settings or StrategySettings()
    semantic_jitter, visual_jitter, color_jitter = JitterSource.spawn(settings.seed, 3)
    return {
        StrategyKind.SEMANTIC: SemanticSearch(settings, semantic_jitter),
        StrategyKind.VISUAL: VisualSimilaritySearch(settings, visual_jitter),
        StrategyKind.COLOR: ColorSearch(settings, color_jitter),
        StrategyKind.SCENE: SceneSearch(settings),
    }


class SearchPipeline:
    """High-level service bridging API and CLI layers with the catalog, strategies, and scoring engine."""

    def __init__(
        self,
        catalog: CatalogAccessor,
        settings: Optional[AppSettings] = None,
        strategies: Optional[Dict[StrategyKind, SearchStrategy]] = None,
        analyzer: Optional[QueryAnalyzer] = None,
        scorer: Optional[WeightedScorer] = None,
        enricher: Optional[ResultEnricher] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.catalog = catalog
        self.settings = settings or AppSettings()
        self.strategies: Dict[StrategyKind, SearchStrategy] = strategies or default_strategies(self.settings.strategies)
        self.analyzer = analyzer or QueryAnalyzer()
        self.scorer = scorer or WeightedScorer(self.settings.scoring)
        self.enricher = enricher or ResultEnricher(self.settings.tiers)
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def search(self, query: SearchQuery, cancel_event: Optional[threading.Event] = None) -> SearchResponse:
        """
        Execute a query through every applicable strategy and return the ranked response.

        External calls:
        - core/search/strategies.py::SearchStrategy.run - produces candidate hits per strategy.
        - core/search/merge.py::merge_hits - deduplicates and truncates candidates to the limit.
        - core/search/scoring.py::WeightedScorer.score - computes the composite score per candidate.
        - core/search/enrichment.py::ResultEnricher - ranks, tiers, and summarizes the results.

        Raises InvalidQueryError before any strategy runs, AllStrategiesFailedError when no
        strategy could read the catalog, and SearchCancelledError once ``cancel_event`` is set.
        """

        started = time.perf_counter()
        kinds = self.validate(query)

        hit_lists, failures = self._run_strategies(query, kinds, cancel_event)
        if failures and len(failures) == len(kinds):
            raise AllStrategiesFailedError(failures)
        self._check_cancelled(cancel_event)

        eligible = [[hit for hit in hits if hit.confidence >= query.min_confidence] for hits in hit_lists]
        candidates = merge_hits(eligible, query.limit)

        criteria = self.analyzer.analyze(query)
        now = self.clock()
        scored: List[ScoredResult] = []
        for hit in candidates:
            self._check_cancelled(cancel_event)
            record = self.catalog.find_active_by_id(hit.image_id)
            if record is None:
                logger.debug("Dropping candidate %s: record vanished before scoring", hit.image_id)
                continue
            metadata = self.catalog.find_metadata_by_id(hit.image_id)
            scored.append(self.scorer.score(hit, record, metadata, criteria, now))

        results = self.enricher.rank(scored)
        scores = [result.total_score for result in results]
        highest = max(scores) if scores else 0.0
        average = sum(scores) / len(scores) if scores else 0.0

        response = SearchResponse(
            query=query,
            results=results,
            average_confidence=average,
            highest_confidence=highest,
            search_quality=self.enricher.search_quality(highest, average, len(results)),
            insights=self.enricher.insights(results),
            strategies_run=kinds,
            failed_strategies=failures,
            processing_time_ms=(time.perf_counter() - started) * 1000.0,
        )
        logger.info(
            "Search %r via %s returned %d results (%s) in %.1f ms",
            query.text or "",
            ",".join(kind.value for kind in kinds),
            response.total_results,
            response.search_quality.value,
            response.processing_time_ms,
        )
        return response

    def validate(self, query: SearchQuery) -> List[StrategyKind]:
        """Reject malformed queries and return the strategy kinds to run."""

        if query.limit <= 0 or query.limit > self.settings.max_limit:
            raise InvalidQueryError(
                f"limit must be between 1 and {self.settings.max_limit}", detail={"limit": query.limit}
            )
        if not 0.0 <= query.min_confidence <= 1.0:
            raise InvalidQueryError(
                "min_confidence must be between 0 and 1", detail={"min_confidence": query.min_confidence}
            )

        kinds = query.strategy_kinds()
        if not kinds:
            raise InvalidQueryError("At least one of text, image_id, color_query or scene_type is required")

        missing = [kind for kind in kinds if not query.has_signal(kind)]
        if missing:
            raise InvalidQueryError(
                "Selected search types are missing their query fields",
                detail={kind.value: _SIGNAL_FIELDS[kind] for kind in missing},
            )

        unknown = [kind for kind in kinds if kind not in self.strategies]
        if unknown:
            raise InvalidQueryError(
                "No strategy is configured for the selected search types",
                detail=[kind.value for kind in unknown],
            )
        return kinds

    def _run_strategies(
        self,
        query: SearchQuery,
        kinds: List[StrategyKind],
        cancel_event: Optional[threading.Event],
    ) -> Tuple[List[List[CandidateHit]], List[StrategyFailure]]:
        timeout = self.settings.strategies.strategy_timeout_seconds
        deadline = None if timeout is None else time.monotonic() + timeout

        executor = ThreadPoolExecutor(
            max_workers=min(self.settings.strategies.max_workers, len(kinds)),
            thread_name_prefix="search-strategy",
        )
        futures: Dict[Future, StrategyKind] = {
            executor.submit(self.strategies[kind].run, query, self.catalog): kind for kind in kinds
        }
        hits: Dict[StrategyKind, List[CandidateHit]] = {}
        failures: Dict[StrategyKind, StrategyFailure] = {}

        pending = set(futures)
        try:
            while pending:
                self._check_cancelled(cancel_event)

                wait_for = _CANCEL_POLL_SECONDS if cancel_event is not None else None
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        for future in pending:
                            kind = futures[future]
                            logger.warning("Strategy %s timed out after %.2fs", kind.value, timeout)
                            failures[kind] = StrategyFailure(kind, f"timed out after {timeout}s")
                        break
                    wait_for = remaining if wait_for is None else min(wait_for, remaining)

                done, pending = wait(pending, timeout=wait_for, return_when=FIRST_COMPLETED)
                for future in done:
                    kind = futures[future]
                    try:
                        hits[kind] = future.result()
                    except AccessorUnavailableError as exc:
                        logger.warning("Strategy %s failed: %s", kind.value, exc.message)
                        failures[kind] = StrategyFailure(kind, exc.message)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        # Keep declaration order so merge tie-breaks do not depend on thread scheduling.
        return (
            [hits[kind] for kind in kinds if kind in hits],
            [failures[kind] for kind in kinds if kind in failures],
        )

    @staticmethod
    def _check_cancelled(cancel_event: Optional[threading.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            logger.info("Search cancelled by caller; discarding partial results")
            raise SearchCancelledError()
