"""Multi-signal reranking with human-readable explanations.

final_score = sum(weight * sub_score) over the non-null sub-scores.
Queries with more extracted hints can reach a higher maximum score than
queries with fewer; ordering within one result set is what matters.
"""

import logging

from package_search.core.config import RankingWeights, ScoringBands
from package_search.core.schemas import Candidate, ExtractedParams, ScoredCandidate, SubScores
from package_search.ranking.signals import score_signals

logger = logging.getLogger(__name__)

GENERIC_EXPLANATION = "Recommended based on your search"

# (sub-score field, sentence) in display order.
_EXPLANATIONS: tuple[tuple[str, str], ...] = (
    ("similarity", "Highly relevant to your search"),
    ("keyword", "Contains your search keywords"),
    ("budget", "Matches your budget"),
    ("capacity", "Perfect capacity for your guest count"),
    ("food_type", "Offers your preferred food type"),
    ("venue_type", "Matches your venue preference"),
)

_DEFAULT_WEIGHTS = RankingWeights()
_DEFAULT_BANDS = ScoringBands()


def combine(scores: SubScores, weights: RankingWeights = _DEFAULT_WEIGHTS) -> float:
    """Weighted sum of sub-scores; null signals are left out, not zeroed."""
    total = weights.similarity * scores.similarity + weights.keyword * scores.keyword
    if scores.budget is not None:
        total += weights.budget * scores.budget
    if scores.capacity is not None:
        total += weights.capacity * scores.capacity
    if scores.food_type is not None:
        total += weights.food_type * scores.food_type
    if scores.venue_type is not None:
        total += weights.venue_type * scores.venue_type
    return total


def explain(scores: SubScores, threshold: float = 0.7) -> list[str]:
    """One sentence per sub-score strictly above ``threshold``.

    Always returns at least one explanation.
    """
    explanations = []
    for field, sentence in _EXPLANATIONS:
        value = getattr(scores, field)
        if value is not None and value > threshold:
            explanations.append(sentence)
    return explanations or [GENERIC_EXPLANATION]


def score_candidate(
    candidate: Candidate,
    query: str,
    params: ExtractedParams,
    weights: RankingWeights = _DEFAULT_WEIGHTS,
    bands: ScoringBands = _DEFAULT_BANDS,
) -> ScoredCandidate:
    """Score, combine and explain a single candidate."""
    scores = score_signals(candidate, query, params, bands)
    return ScoredCandidate(
        candidate=candidate,
        scores=scores,
        final_score=combine(scores, weights),
        explanations=explain(scores, bands.explanation_threshold),
    )


def sort_key(scored: ScoredCandidate) -> tuple[float, float, str]:
    """Final score desc, then similarity desc, then id asc."""
    return (-scored.final_score, -scored.scores.similarity, scored.candidate.id)


def rerank(
    candidates: list[Candidate],
    query: str,
    params: ExtractedParams | None = None,
    weights: RankingWeights = _DEFAULT_WEIGHTS,
    bands: ScoringBands = _DEFAULT_BANDS,
) -> list[ScoredCandidate]:
    """Score a batch of candidates, returning ScoredCandidate list in rank order."""
    params = params or ExtractedParams.empty()
    scored = [score_candidate(c, query, params, weights, bands) for c in candidates]
    scored.sort(key=sort_key)
    logger.debug(
        "Reranked %d candidates; top: %s",
        len(scored),
        [(s.candidate.id, round(s.final_score, 4)) for s in scored[:3]],
    )
    return scored
