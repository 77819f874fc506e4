"""Local query preprocessing: normalisation, typo correction, synonyms, hints.

No network calls. Regex-extracted hints fill gaps left by LLM extraction.
"""

import re
from typing import NamedTuple

from package_search.core.schemas import ExtractedParams

# Event-planning vocabulary used for typo correction.
DOMAIN_VOCABULARY: tuple[str, ...] = (
    # food
    "seafood", "vegan", "vegetarian", "pescatarian", "kosher", "halal",
    "gluten-free", "dairy-free", "buffet", "plated", "catering", "cuisine",
    "menu", "dishes", "appetizers", "entrees", "desserts",
    # cuisines
    "italian", "mexican", "asian", "mediterranean", "american", "french",
    "japanese", "chinese", "indian", "thai", "greek", "spanish",
    # venues
    "outdoor", "indoor", "garden", "rooftop", "ballroom", "barn", "beach",
    "waterfront", "downtown", "countryside", "estate", "loft", "terrace",
    # events
    "wedding", "birthday", "anniversary", "corporate", "conference",
    "gala", "reception", "party", "celebration", "fundraiser", "graduation",
    # entertainment
    "dj", "band", "live music", "dancing", "karaoke", "photo booth",
    "entertainment", "acoustic", "jazz", "classical",
    # amenities
    "parking", "accessible", "air-conditioned", "wifi", "projector",
    "sound system", "lighting", "stage", "dance floor", "bar",
    # general
    "guests", "people", "capacity", "budget", "affordable", "luxury",
    "elegant", "rustic", "modern", "vintage", "romantic", "casual",
    "venue", "venues", "food", "music", "event", "events", "package", "packages",
)

# Common words that sit close to vocabulary terms ("with" -> "wifi").
STOPWORDS: frozenset[str] = frozenset({
    "with", "without", "under", "over", "near", "from", "into", "that", "this",
    "have", "want", "need", "looking", "about", "around", "less", "than", "more",
    "some", "best", "good", "great", "nice", "cheap", "big", "small", "inside",
    "outside", "expensive", "guest", "person", "persons", "attendees",
})

SYNONYMS: dict[str, tuple[str, ...]] = {
    "food": ("catering", "cuisine", "menu", "dining"),
    "music": ("entertainment", "band", "dj", "live music"),
    "venue": ("space", "location", "site", "place"),
    "cheap": ("affordable", "budget-friendly", "economical"),
    "expensive": ("luxury", "premium", "high-end", "upscale"),
    "big": ("large", "spacious", "grand"),
    "small": ("intimate", "cozy", "compact"),
    "nice": ("elegant", "beautiful", "stunning", "lovely"),
    "outside": ("outdoor", "al fresco", "open-air"),
    "inside": ("indoor", "enclosed"),
}

KNOWN_CITIES: tuple[str, ...] = (
    "Austin", "Dallas", "Houston", "San Antonio", "Fort Worth", "Arlington",
)

MAX_TYPO_DISTANCE = 2
MIN_GUEST_COUNT = 10
MAX_GUEST_COUNT = 10_000

_RANGE_RE = re.compile(r"\$?(\d[\d,]*)\s*(?:-|to)\s*\$?(\d[\d,]*)", re.IGNORECASE)
_MAX_PRICE_RE = re.compile(r"\b(?:under|less than|below|max|up to)\s+\$?(\d[\d,]*)", re.IGNORECASE)
_MIN_PRICE_RE = re.compile(r"\b(?:over|more than|above|min|at least)\s+\$?(\d[\d,]*)", re.IGNORECASE)
_GUEST_UNITS = r"(?:people|guests|attendees|persons|pax|ppl)\b"
_GUESTS_RE = re.compile(rf"\b(\d[\d,]*)\s*{_GUEST_UNITS}", re.IGNORECASE)
_GUEST_UNITS_AFTER_RE = re.compile(rf"\s*{_GUEST_UNITS}", re.IGNORECASE)
_FOR_NUMBER_RE = re.compile(r"\bfor\s+(\d[\d,]*)\b(?!\s*(?:dollars|usd|\$))", re.IGNORECASE)
_LOCATION_RE = re.compile(
    r"\b(?:in|near|at)\s+([A-Z][a-zA-Z]+(?:\s+[A-Z][a-zA-Z]+)*)"
)


class PriceRange(NamedTuple):
    min: int | None
    max: int | None


class PreprocessedQuery(NamedTuple):
    original: str
    normalized: str
    corrected: str
    with_synonyms: str
    price_range: PriceRange | None
    guest_count: int | None
    location: str | None

    def to_params(self) -> ExtractedParams:
        """Hints this pass could extract without an LLM."""
        return ExtractedParams(
            budget_max=self.price_range.max if self.price_range else None,
            capacity_min=self.guest_count,
            location=self.location,
        )


def normalize_query(query: str) -> str:
    """Lower-case, drop special characters except hyphens, collapse whitespace."""
    cleaned = re.sub(r"[^\w\s-]", " ", query.lower())
    return re.sub(r"\s+", " ", cleaned).strip()


def levenshtein(a: str, b: str) -> int:
    """Edit distance between two strings."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + (ca != cb),
            ))
        previous = current
    return previous[-1]


def correct_word(word: str) -> str:
    if len(word) <= 3 or word in DOMAIN_VOCABULARY or word in STOPWORDS:
        return word
    if any(ch.isdigit() for ch in word):
        return word
    best, best_distance = word, MAX_TYPO_DISTANCE + 1
    for candidate in DOMAIN_VOCABULARY:
        distance = levenshtein(word, candidate)
        if distance < best_distance:
            best, best_distance = candidate, distance
    return best


def correct_typos(query: str) -> str:
    """Replace words within edit distance 2 of a domain term with that term."""
    return " ".join(correct_word(w) for w in query.lower().split())


def add_synonyms(query: str) -> str:
    """Append the first two synonyms of each mapped word."""
    words = query.lower().split()
    expanded = list(words)
    for word in words:
        expanded.extend(SYNONYMS.get(word, ())[:2])
    return " ".join(expanded)


def remove_duplicates(query: str) -> str:
    return " ".join(dict.fromkeys(query.lower().split()))


def _to_int(raw: str) -> int:
    return int(raw.replace(",", ""))


def _price_match(pattern: re.Pattern[str], query: str) -> re.Match[str] | None:
    # "150-200 guests" or "up to 80 people" is a head count, not a price
    for match in pattern.finditer(query):
        if not _GUEST_UNITS_AFTER_RE.match(query, match.end()):
            return match
    return None


def extract_price_range(query: str) -> PriceRange | None:
    """Find "$500-1000", "under $2000" or "over 300" style price hints."""
    if match := _price_match(_RANGE_RE, query):
        return PriceRange(min=_to_int(match.group(1)), max=_to_int(match.group(2)))
    if match := _price_match(_MAX_PRICE_RE, query):
        return PriceRange(min=None, max=_to_int(match.group(1)))
    if match := _price_match(_MIN_PRICE_RE, query):
        return PriceRange(min=_to_int(match.group(1)), max=None)
    return None


def extract_guest_count(query: str) -> int | None:
    """Find "150 guests" or "for 80" style head counts within a plausible range."""
    for pattern in (_GUESTS_RE, _FOR_NUMBER_RE):
        for match in pattern.finditer(query):
            count = _to_int(match.group(1))
            if MIN_GUEST_COUNT <= count <= MAX_GUEST_COUNT:
                return count
    return None


def extract_location(query: str) -> str | None:
    """Find "in Austin" style locations, or a bare known city name."""
    if match := _LOCATION_RE.search(query):
        return match.group(1).strip()
    for city in KNOWN_CITIES:
        if re.search(rf"\b{re.escape(city)}\b", query, re.IGNORECASE):
            return city
    return None


def preprocess_query(query: str) -> PreprocessedQuery:
    """Run the full local preprocessing pass."""
    normalized = normalize_query(query)
    corrected = correct_typos(normalized)
    with_synonyms = remove_duplicates(add_synonyms(corrected))
    return PreprocessedQuery(
        original=query,
        normalized=normalized,
        corrected=corrected,
        with_synonyms=with_synonyms,
        price_range=extract_price_range(query),
        guest_count=extract_guest_count(query),
        location=extract_location(query),
    )
