"""Search entry point: wires interpretation, retrieval, reranking and diversity.

Data flow:
  1. Interpret (preprocess + concurrent LLM calls, all with fallbacks)
  2. Retrieve once per query (expanded query, plus variants) → merge by id
  3. Score + rerank
  4. Diversify (optional) → truncate to limit
  5. Quality report and optional suggestions
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from package_search.core.config import Settings
from package_search.core.schemas import (
    Candidate,
    ExtractedParams,
    InterpretedQuery,
    ScoredCandidate,
    SearchResult,
)
from package_search.embeddings.gateway import EmbeddingGateway, cosine_similarity
from package_search.llm.base import TextCompleter
from package_search.query.interpreter import QueryInterpreter, coerce_hints
from package_search.query.suggestions import (
    analyze_search_quality,
    did_you_mean,
    related_searches,
)
from package_search.ranking.diversifier import diversify
from package_search.ranking.reranker import rerank

logger = logging.getLogger(__name__)


class CandidateProvider(ABC):
    """Base class for the retrieval step that supplies candidates."""

    @property
    @abstractmethod
    def provider_id(self) -> str:
        """Unique identifier for this provider (e.g. 'static')."""

    @abstractmethod
    async def retrieve(self, query: str, params: ExtractedParams) -> list[Candidate]:
        """Return candidates with a similarity score for ``query``."""


class StaticCandidateProvider(CandidateProvider):
    """Serves a fixed, already-retrieved candidate set for every query."""

    def __init__(self, candidates: Sequence[Candidate]) -> None:
        self._candidates = list(candidates)

    @property
    def provider_id(self) -> str:
        return "static"

    async def retrieve(self, query: str, params: ExtractedParams) -> list[Candidate]:
        return list(self._candidates)


class VectorCandidateProvider(CandidateProvider):
    """Brute-force cosine retrieval over pre-embedded candidates.

    Each query is embedded through the gateway; candidates scoring below
    ``threshold`` are dropped and at most ``limit`` are returned.
    """

    def __init__(
        self,
        gateway: EmbeddingGateway,
        catalog: Sequence[tuple[Candidate, Sequence[float]]],
        *,
        threshold: float = 0.3,
        limit: int = 50,
    ) -> None:
        self._gateway = gateway
        self._catalog = list(catalog)
        self._threshold = threshold
        self._limit = limit

    @property
    def provider_id(self) -> str:
        return "vector"

    async def retrieve(self, query: str, params: ExtractedParams) -> list[Candidate]:
        query_vector = await asyncio.to_thread(self._gateway.embed, query)
        matches: list[Candidate] = []
        for candidate, vector in self._catalog:
            similarity = cosine_similarity(query_vector, vector)
            if similarity >= self._threshold:
                matches.append(candidate.model_copy(update={"similarity": max(0.0, similarity)}))
        matches.sort(key=lambda c: (-c.similarity, c.id))
        return matches[: self._limit]


def merge_candidates(result_sets: Sequence[Sequence[Candidate]]) -> list[Candidate]:
    """Union of several retrievals by id, keeping each package's best similarity."""
    best: dict[str, Candidate] = {}
    for candidates in result_sets:
        for candidate in candidates:
            current = best.get(candidate.id)
            if current is None or candidate.similarity > current.similarity:
                best[candidate.id] = candidate
    return list(best.values())


async def retrieve_candidates(
    provider: CandidateProvider,
    interpreted: InterpretedQuery,
) -> list[Candidate]:
    """Run one retrieval per query concurrently and merge the results.

    Failed retrievals are skipped while at least one succeeds; when every
    retrieval fails the first error is raised.
    """
    queries = interpreted.retrieval_queries
    outcomes = await asyncio.gather(
        *(provider.retrieve(q, interpreted.params) for q in queries),
        return_exceptions=True,
    )

    result_sets: list[list[Candidate]] = []
    errors: list[BaseException] = []
    for q, outcome in zip(queries, outcomes):
        if isinstance(outcome, BaseException):
            logger.warning("Retrieval failed for '%s' on %s: %s", q, provider.provider_id, outcome)
            errors.append(outcome)
        else:
            result_sets.append(outcome)

    if not result_sets and errors:
        raise errors[0]

    merged = merge_candidates(result_sets)
    logger.debug("Retrieved %d unique candidates from %d queries", len(merged), len(queries))
    return merged


def rank_by_similarity(scored: list[ScoredCandidate]) -> list[ScoredCandidate]:
    """Plain vector-similarity order, used when reranking is switched off."""
    return sorted(scored, key=lambda s: (-s.scores.similarity, s.candidate.id))


async def search(
    query: str,
    provider: CandidateProvider,
    completer: TextCompleter,
    settings: Settings | None = None,
    hints: ExtractedParams | dict[str, Any] | None = None,
) -> SearchResult:
    """Run the full search pipeline for one query.

    Args:
        query: Free-text query.
        provider: Retrieval step returning candidates with similarity scores.
        completer: Text-completion provider for query interpretation.
        settings: Weights, bands and pipeline toggles. Defaults if None.
        hints: Explicit structured hints; non-null values override extraction.

    Returns:
        SearchResult with ranked ScoredCandidates and query metadata.
    """
    settings = settings or Settings()
    options = settings.search

    interpreter = QueryInterpreter(completer, settings.interpreter, settings.llm)
    interpreted = await interpreter.interpret(query, coerce_hints(hints))

    candidates = await retrieve_candidates(provider, interpreted)
    logger.info("Candidates for '%s': %d", query, len(candidates))

    ranked = rerank(candidates, query, interpreted.params, settings.weights, settings.bands)
    if not options.use_reranking:
        ranked = rank_by_similarity(ranked)

    if options.use_diversify and len(ranked) > options.limit:
        ranked = diversify(ranked, options.limit, settings.diversity)
    results = ranked[: options.limit]

    quality = analyze_search_quality(query, len(results), interpreted.params)

    related: list[str] = []
    alternatives: list[str] = []
    if options.include_suggestions:
        model, timeout = settings.llm.model, settings.llm.timeout_s
        related, alternatives = await asyncio.gather(
            asyncio.to_thread(
                related_searches, completer, query, model=model, timeout=timeout
            ),
            asyncio.to_thread(
                did_you_mean, completer, query, len(results), model=model, timeout=timeout
            ),
        )

    logger.info(
        "Search '%s': %d candidates, %d returned, quality %.2f",
        query, len(candidates), len(results), quality.score,
    )

    return SearchResult(
        query=interpreted,
        results=results,
        total_matches=len(candidates),
        quality=quality,
        related_searches=related,
        did_you_mean=alternatives,
    )
