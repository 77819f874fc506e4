"""Search suggestions: quality feedback, autocomplete, did-you-mean, related."""

import logging

from package_search.core.schemas import ExtractedParams, SearchQuality
from package_search.llm import parse_json_response
from package_search.llm.base import TextCompleter

logger = logging.getLogger(__name__)

POPULAR_SEARCHES: tuple[str, ...] = (
    "outdoor wedding venue",
    "affordable birthday party",
    "corporate event catering",
    "elegant reception venue",
    "rustic barn wedding",
    "rooftop event space",
    "vegan catering options",
    "waterfront venue",
    "intimate wedding packages",
    "large corporate event",
)

VAGUE_TERMS: tuple[str, ...] = ("nice", "good", "great", "amazing", "best")

_SUGGESTION_SYSTEM_PROMPT = "You generate helpful search suggestions. Return only JSON arrays."
_RELATED_SYSTEM_PROMPT = "You generate related search queries. Return only JSON arrays."


def analyze_search_quality(
    query: str,
    result_count: int,
    params: ExtractedParams,
) -> SearchQuality:
    """Heuristic score for how well a query is likely to work, with advice."""
    issues: list[str] = []
    suggestions: list[str] = []
    score = 1.0

    if len(query) < 5:
        issues.append("Query is too short")
        suggestions.append("Try adding more descriptive words")
        score -= 0.3

    if any(term in query.lower() for term in VAGUE_TERMS):
        issues.append("Query contains vague terms")
        suggestions.append('Use specific terms like "elegant", "rustic", or "modern"')
        score -= 0.2

    if result_count == 0:
        issues.append("No results found")
        suggestions.append("Try broader terms or check spelling")
        score = 0.0
    elif result_count < 3:
        issues.append("Very few results")
        suggestions.append("Try removing some filters or using broader terms")
        score -= 0.4
    elif result_count > 50:
        issues.append("Too many results")
        suggestions.append("Add more specific details (budget, location, style)")
        score -= 0.1

    has_hints = (
        params.budget_max is not None
        or params.capacity_min is not None
        or params.location is not None
    )
    if not has_hints and len(query) > 10:
        suggestions.append('Try adding specific details like "for 100 people" or "under $5000"')

    return SearchQuality(
        score=max(0.0, min(1.0, score)), issues=issues, suggestions=suggestions
    )


def autocomplete(partial_query: str, limit: int = 5) -> list[str]:
    """Popular searches containing the partial query."""
    if len(partial_query) < 2:
        return []
    needle = partial_query.lower()
    return [s for s in POPULAR_SEARCHES if needle in s.lower()][:limit]


def _string_list(raw_text: str, keys: tuple[str, ...]) -> list[str]:
    data = parse_json_response(raw_text)
    if isinstance(data, dict):
        data = next((data[k] for k in keys if isinstance(data.get(k), list)), [])
    if not isinstance(data, list):
        return []
    return [s.strip() for s in data if isinstance(s, str) and s.strip()]


def did_you_mean(
    completer: TextCompleter,
    query: str,
    result_count: int,
    *,
    model: str | None = None,
    timeout: float | None = None,
) -> list[str]:
    """Up to three alternative queries when a search came back thin."""
    if result_count >= 3:
        return []

    prompt = (
        f'The user searched for "{query}" for event packages and got '
        f"{result_count} results.\n\n"
        "Suggest 3 alternative search queries that might work better. Consider:\n"
        "- Common typos and corrections\n"
        "- More specific or broader terms\n"
        "- Related event planning queries\n"
        "- Different phrasing of the same intent\n\n"
        "Return ONLY a JSON array of 3 strings. Each should be a complete search query."
    )
    try:
        raw = completer.complete(
            prompt,
            model=model,
            system=_SUGGESTION_SYSTEM_PROMPT,
            temperature=0.7,
            max_tokens=150,
            json_mode=True,
            timeout=timeout,
        )
        return _string_list(raw, ("suggestions", "alternatives"))[:3]
    except Exception:
        logger.warning("Did-you-mean suggestions failed for '%s'", query, exc_info=True)
        return []


def related_searches(
    completer: TextCompleter,
    query: str,
    *,
    model: str | None = None,
    timeout: float | None = None,
) -> list[str]:
    """Up to five related queries covering other aspects of the event."""
    prompt = (
        f'Generate 5 related search queries for someone searching "{query}" '
        "for event packages.\n\n"
        "Make each query:\n"
        "- Semantically related but different aspect\n"
        "- Useful for event planning\n"
        "- 3-7 words long\n\n"
        "Return ONLY a JSON array of 5 strings."
    )
    try:
        raw = completer.complete(
            prompt,
            model=model,
            system=_RELATED_SYSTEM_PROMPT,
            temperature=0.8,
            max_tokens=200,
            json_mode=True,
            timeout=timeout,
        )
        return _string_list(raw, ("queries", "searches"))[:5]
    except Exception:
        logger.warning("Related searches failed for '%s'", query, exc_info=True)
        return []
