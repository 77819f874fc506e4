"""LLM-backed query interpretation: parameter extraction, expansion, variants.

Each operation owns its prompt and response contract and never raises:
on any provider error, timeout or malformed response it logs a warning and
returns a documented fallback so search degrades to plain similarity
ranking instead of failing.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Any, TypeVar

from package_search.core.config import InterpreterConfig, LLMConfig
from package_search.core.schemas import ExtractedParams, InterpretedQuery
from package_search.llm import parse_json_response
from package_search.llm.base import TextCompleter
from package_search.query.preprocessing import preprocess_query

logger = logging.getLogger(__name__)

T = TypeVar("T")

_EXTRACTION_SYSTEM_PROMPT = (
    "You are a JSON extraction assistant. "
    "Return only valid JSON, no markdown, no explanations."
)

_EXPANSION_SYSTEM_PROMPT = (
    "You expand search queries with related terms. "
    "Return only keywords separated by spaces."
)

_VARIANTS_SYSTEM_PROMPT = (
    "You generate query variations. Return only a JSON array of strings."
)


def build_extraction_prompt(query: str) -> str:
    return (
        "Extract structured search parameters from this event planning query. "
        "Return ONLY valid JSON.\n\n"
        f'Query: "{query}"\n\n'
        "Extract these fields (use null if not mentioned):\n"
        "- budget_max: maximum budget in dollars (number or null)\n"
        "- capacity_min: minimum guest capacity (number or null)\n"
        "- location: city or area name (string or null)\n"
        "- food_type: cuisine type or food preference (string or null)\n"
        '- event_type: type of event like "wedding", "birthday", "corporate" '
        "(string or null)\n"
        '- venue_type: venue style like "outdoor", "indoor", "garden" '
        "(string or null)\n\n"
        "Return ONLY a JSON object with these exact keys. No explanations."
    )


def build_expansion_prompt(query: str) -> str:
    return (
        "Expand this event search query with 8-12 semantically related terms.\n\n"
        f'Query: "{query}"\n\n'
        "Return ONLY the expanded query as a single line of space-separated keywords.\n"
        "Include:\n"
        "- Synonyms\n"
        "- Related concepts\n"
        "- Common variations\n"
        "- Specific examples\n"
        "- Culinary terms (if food-related)\n"
        "- Venue styles (if venue-related)\n\n"
        "Example:\n"
        'Input: "seafood food"\n'
        "Output: seafood ocean marine fish shellfish lobster crab shrimp salmon "
        "cuisine dishes menu buffet coastal\n\n"
        "Return ONLY the expanded keywords, no explanations."
    )


def build_variants_prompt(query: str, count: int = 3) -> str:
    return (
        f"Generate {count} alternative phrasings of this search query for event "
        "packages.\n\n"
        f'Query: "{query}"\n\n'
        f"Return ONLY valid JSON array of {count} strings, no explanations.\n"
        "Make each variation:\n"
        "- Semantically equivalent but worded differently\n"
        "- 3-6 words long\n"
        "- Natural sounding\n"
        "- Focused on the core intent\n\n"
        "Example:\n"
        'Input: "seafood food"\n'
        'Output: ["seafood cuisine menu", "ocean dining options", '
        '"fish and shellfish catering"]\n\n'
        "Return ONLY the JSON array."
    )


def _parse_params(raw_text: str) -> ExtractedParams:
    """Parse an extraction response, keeping only the six known keys."""
    data = parse_json_response(raw_text)
    if not isinstance(data, dict):
        msg = f"Expected a JSON object of parameters, got {type(data).__name__}"
        raise ValueError(msg)
    known = {key: data.get(key) for key in ExtractedParams.model_fields}
    return ExtractedParams.model_validate(known)


def _parse_variants(raw_text: str, limit: int) -> list[str]:
    """Parse a variants response: a JSON array, or an object wrapping one."""
    data = parse_json_response(raw_text)
    if isinstance(data, dict):
        data = data.get("variations") or data.get("variants") or data.get("queries") or []
    if not isinstance(data, list):
        msg = f"Expected a JSON array of variants, got {type(data).__name__}"
        raise ValueError(msg)
    variants = [v.strip() for v in data if isinstance(v, str) and v.strip()]
    return variants[:limit]


class QueryInterpreter:
    """Turns a free-text query into params, an expanded query and variants.

    Usage::

        interpreter = QueryInterpreter(get_provider("openai"))
        params = interpreter.extract_parameters("garden wedding for 120")
        interpreted = await interpreter.interpret("garden wedding for 120")
    """

    def __init__(
        self,
        completer: TextCompleter,
        config: InterpreterConfig | None = None,
        llm: LLMConfig | None = None,
    ) -> None:
        self._completer = completer
        self._config = config or InterpreterConfig()
        self._llm = llm or LLMConfig()

    # -- sync operations ----------------------------------------------------

    def extract_parameters(self, query: str) -> ExtractedParams:
        """Extract the six structured hints; all-null on any failure."""
        try:
            raw = self._completer.complete(
                build_extraction_prompt(query),
                model=self._llm.model,
                system=_EXTRACTION_SYSTEM_PROMPT,
                temperature=self._config.extraction_temperature,
                max_tokens=self._config.extraction_max_tokens,
                json_mode=True,
                timeout=self._llm.timeout_s,
            )
            params = _parse_params(raw)
        except Exception:
            logger.warning("Parameter extraction failed - using empty params", exc_info=True)
            return ExtractedParams.empty()

        logger.debug("Extracted params for '%s': %s", query, params.model_dump())
        return params

    def expand_query(self, query: str) -> str:
        """Return ``query`` followed by related terms; ``query`` on failure."""
        try:
            raw = self._completer.complete(
                build_expansion_prompt(query),
                model=self._llm.model,
                system=_EXPANSION_SYSTEM_PROMPT,
                temperature=self._config.expansion_temperature,
                max_tokens=self._config.expansion_max_tokens,
                timeout=self._llm.timeout_s,
            )
        except Exception:
            logger.warning("Query expansion failed - using original query", exc_info=True)
            return query

        terms = " ".join((raw or "").split())
        if not terms:
            return query
        return f"{query} {terms}"

    def generate_variants(self, query: str) -> list[str]:
        """Return alternate phrasings; ``[query]`` on failure or empty output."""
        try:
            raw = self._completer.complete(
                build_variants_prompt(query, self._config.variant_count),
                model=self._llm.model,
                system=_VARIANTS_SYSTEM_PROMPT,
                temperature=self._config.variants_temperature,
                max_tokens=self._config.variants_max_tokens,
                json_mode=True,
                timeout=self._llm.timeout_s,
            )
            variants = _parse_variants(raw, self._config.variant_count)
        except Exception:
            logger.warning("Variant generation failed - using original query", exc_info=True)
            return [query]

        return variants or [query]

    # -- async operations ---------------------------------------------------

    async def _run(self, func: Callable[[str], T], query: str, fallback: T, label: str) -> T:
        """Run a sync operation in a worker thread under the configured timeout."""
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(func, query), timeout=self._llm.timeout_s
            )
        except TimeoutError:
            logger.warning("%s timed out after %.1fs - using fallback", label, self._llm.timeout_s)
            return fallback

    async def aextract_parameters(self, query: str) -> ExtractedParams:
        return await self._run(
            self.extract_parameters, query, ExtractedParams.empty(), "Parameter extraction"
        )

    async def aexpand_query(self, query: str) -> str:
        return await self._run(self.expand_query, query, query, "Query expansion")

    async def agenerate_variants(self, query: str) -> list[str]:
        return await self._run(self.generate_variants, query, [query], "Variant generation")

    async def interpret(
        self,
        query: str,
        hints: ExtractedParams | None = None,
        *,
        expand: bool | None = None,
        variants: bool | None = None,
    ) -> InterpretedQuery:
        """Run preprocessing, then extraction/expansion/variants concurrently.

        Precedence for each param: caller hints, then LLM extraction, then
        regex hints from local preprocessing.
        """
        use_expansion = self._config.use_expansion if expand is None else expand
        use_variants = self._config.use_variants if variants is None else variants

        if self._config.use_preprocessing:
            pre = preprocess_query(query)
            normalized, corrected = pre.normalized, pre.corrected
            expansion_input = pre.with_synonyms or query
            local_params = pre.to_params()
        else:
            normalized = corrected = expansion_input = query
            local_params = ExtractedParams.empty()

        async def _identity() -> str:
            return expansion_input

        async def _no_variants() -> list[str]:
            return []

        params, expanded, variant_list = await asyncio.gather(
            self.aextract_parameters(query),
            self.aexpand_query(expansion_input) if use_expansion else _identity(),
            self.agenerate_variants(query) if use_variants else _no_variants(),
        )

        merged = params.merged_with(local_params)
        if hints is not None:
            merged = hints.merged_with(merged)

        logger.info(
            "Interpreted '%s': hints=%s, variants=%d",
            query,
            {k: v for k, v in merged.model_dump().items() if v is not None},
            len(variant_list),
        )
        return InterpretedQuery(
            original=query,
            normalized=normalized,
            corrected=corrected,
            expanded=expanded,
            variants=variant_list,
            params=merged,
        )


def coerce_hints(hints: ExtractedParams | dict[str, Any] | None) -> ExtractedParams | None:
    """Accept hints as an ExtractedParams or a partial dict."""
    if hints is None or isinstance(hints, ExtractedParams):
        return hints
    return ExtractedParams.model_validate(hints)
