"""Per-candidate relevance signals.

Every function here is pure and deterministic. Sub-scores lie in [0, 1].
Conditional scores (budget, capacity, food type, venue type) are ``None``
when the query carries no matching hint, which keeps "irrelevant" apart
from "poor match".
"""

import json
import logging
from typing import Any

from package_search.core.config import ScoringBands
from package_search.core.schemas import Candidate, ExtractedParams, SubScores

logger = logging.getLogger(__name__)

_DEFAULT_BANDS = ScoringBands()


def keyword_score(query: str, text: str, bands: ScoringBands = _DEFAULT_BANDS) -> float:
    """Keyword overlap between the query and candidate text, with a phrase bonus."""
    query_words = query.lower().split()
    text_words = set(text.lower().split())

    matches = sum(
        1 for word in query_words
        if len(word) >= bands.keyword_min_length and word in text_words
    )
    score = matches / max(len(query_words), 1)

    query_lower = query.lower().strip()
    if query_lower and query_lower in text.lower():
        score += bands.phrase_bonus

    return max(0.0, min(1.0, score))


def budget_score(
    price_min: float,
    price_max: float,
    budget: float,
    bands: ScoringBands = _DEFAULT_BANDS,
) -> float:
    """Score how well a package price range fits the planner's budget.

    1.0 inside the range (inclusive), otherwise decays by relative distance
    between the budget and the range midpoint.
    """
    if budget <= 0:
        msg = f"budget must be positive, got {budget}"
        raise ValueError(msg)

    if price_min <= budget <= price_max:
        return 1.0

    midpoint = (price_min + price_max) / 2
    diff = abs(midpoint - budget) / budget
    for limit, score in bands.budget_bands:
        if diff <= limit:
            return score
    return bands.budget_floor


def capacity_score(
    capacity: int,
    guest_count: int,
    bands: ScoringBands = _DEFAULT_BANDS,
) -> float:
    """Score package capacity against the expected guest count.

    Slight oversizing beats undersizing: a venue that is too small breaks
    the event, one that is too large only costs more.
    """
    if guest_count <= 0:
        msg = f"guest_count must be positive, got {guest_count}"
        raise ValueError(msg)

    ratio = capacity / guest_count
    for low, high, score in bands.capacity_bands:
        if low <= ratio <= high:
            return score
    if ratio < 1.0:
        return bands.capacity_undersized
    return bands.capacity_oversized


def detail_match_score(
    details: dict[str, Any] | None,
    requested: str,
    bands: ScoringBands = _DEFAULT_BANDS,
) -> float:
    """Match a requested type (e.g. "seafood") against a category detail blob.

    Full substring hit scores 1.0. Otherwise each significant requested word
    found in the blob earns partial credit on top of a 0.5 base. No blob, or
    no hits at all, scores 0.0.
    """
    if not details:
        return 0.0

    requested_lower = requested.lower().strip()
    if not requested_lower:
        return 0.0

    blob = json.dumps(details, default=str).lower()
    if requested_lower in blob:
        return 1.0

    words = requested_lower.split()
    hits = sum(
        1 for word in words
        if len(word) >= bands.keyword_min_length and word in blob
    )
    if hits:
        return 0.5 + (hits / len(words)) * 0.5
    return 0.0


def food_type_score(
    candidate: Candidate, food_type: str, bands: ScoringBands = _DEFAULT_BANDS
) -> float:
    return detail_match_score(candidate.catering_details, food_type, bands)


def venue_type_score(
    candidate: Candidate, venue_type: str, bands: ScoringBands = _DEFAULT_BANDS
) -> float:
    return detail_match_score(candidate.venue_details, venue_type, bands)


def score_signals(
    candidate: Candidate,
    query: str,
    params: ExtractedParams,
    bands: ScoringBands = _DEFAULT_BANDS,
) -> SubScores:
    """Compute every sub-score for one candidate.

    Args:
        candidate: Package to score.
        query: Raw query string, used for keyword matching.
        params: Structured hints for the query.
        bands: Band thresholds.

    Returns:
        SubScores with ``None`` for every signal the query has no hint for.
    """
    budget = None
    if params.budget_max is not None:
        budget = budget_score(
            candidate.price_min, candidate.price_max, params.budget_max, bands
        )

    capacity = None
    if params.capacity_min is not None:
        capacity = capacity_score(candidate.capacity, params.capacity_min, bands)

    food = None
    if params.food_type is not None:
        food = food_type_score(candidate, params.food_type, bands)

    venue = None
    if params.venue_type is not None:
        venue = venue_type_score(candidate, params.venue_type, bands)

    scores = SubScores(
        similarity=candidate.similarity,
        keyword=keyword_score(query, candidate.keyword_text, bands),
        budget=budget,
        capacity=capacity,
        food_type=food,
        venue_type=venue,
    )
    logger.debug("Signals for %s: %s", candidate.id, scores.model_dump())
    return scores
