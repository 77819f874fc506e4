"""Core data models for the package search engine."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

_PARAM_FIELDS = (
    "budget_max",
    "capacity_min",
    "location",
    "food_type",
    "event_type",
    "venue_type",
)


class ExtractedParams(BaseModel):
    """Structured hints parsed from a free-text query.

    ``None`` means "unknown" and switches the matching signal off; it is never
    read as a zero. Falsy values (0, "", False) normalise to ``None``.
    """

    model_config = ConfigDict(frozen=True)

    budget_max: float | None = None
    capacity_min: int | None = None
    location: str | None = None
    food_type: str | None = None
    event_type: str | None = None
    venue_type: str | None = None

    @field_validator("budget_max", "capacity_min", mode="before")
    @classmethod
    def falsy_number_is_unknown(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.replace("$", "").replace(",", "").strip()
        if v is None or v is False or v == "" or v == 0:
            return None
        return v

    @field_validator("budget_max", "capacity_min")
    @classmethod
    def non_positive_is_unknown(cls, v: float | int | None) -> float | int | None:
        if v is not None and v <= 0:
            return None
        return v

    @field_validator("location", "food_type", "event_type", "venue_type", mode="before")
    @classmethod
    def blank_text_is_unknown(cls, v: Any) -> Any:
        if v is None or v is False:
            return None
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return str(v)

    @classmethod
    def empty(cls) -> "ExtractedParams":
        """All-null params: the fallback when extraction fails."""
        return cls()

    def merged_with(self, other: "ExtractedParams") -> "ExtractedParams":
        """Return a copy whose null fields are filled from ``other``."""
        updates = {
            name: getattr(other, name)
            for name in _PARAM_FIELDS
            if getattr(self, name) is None and getattr(other, name) is not None
        }
        return self.model_copy(update=updates) if updates else self


class Candidate(BaseModel):
    """A package returned by the retrieval step.

    Frozen: scoring wraps it in a ScoredCandidate, it is never mutated.
    Unknown catalog columns are kept as extra fields.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    id: str
    name: str
    description: str = ""
    search_description: str | None = None
    price_min: float = 0.0
    price_max: float = 0.0
    capacity: int = 0
    similarity: float = 0.0
    venue_details: dict[str, Any] | None = None
    catering_details: dict[str, Any] | None = None
    entertainment_details: dict[str, Any] | None = None

    @field_validator("id", mode="before")
    @classmethod
    def id_as_string(cls, v: Any) -> str:
        return str(v)

    @field_validator("description", mode="before")
    @classmethod
    def description_not_none(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("similarity", mode="before")
    @classmethod
    def clamp_similarity(cls, v: Any) -> float:
        if v is None:
            return 0.0
        return max(0.0, min(1.0, float(v)))

    @field_validator(
        "venue_details", "catering_details", "entertainment_details", mode="before"
    )
    @classmethod
    def non_mapping_details_dropped(cls, v: Any) -> Any:
        # Legacy rows sometimes carry a list or a bare string here.
        return v if isinstance(v, dict) else None

    @property
    def keyword_text(self) -> str:
        """Text used for keyword matching."""
        if self.search_description:
            return self.search_description
        return f"{self.name} {self.description}"

    @property
    def venue_type(self) -> str | None:
        if not self.venue_details:
            return None
        value = self.venue_details.get("type")
        return str(value) if value else None


class SubScores(BaseModel):
    """Independently computed relevance components, each in [0, 1].

    A ``None`` conditional score means "no signal for this query".
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    similarity: float = Field(ge=0.0, le=1.0)
    keyword: float = Field(ge=0.0, le=1.0)
    budget: float | None = Field(default=None, ge=0.0, le=1.0)
    capacity: float | None = Field(default=None, ge=0.0, le=1.0)
    food_type: float | None = Field(default=None, ge=0.0, le=1.0, alias="foodType")
    venue_type: float | None = Field(default=None, ge=0.0, le=1.0, alias="venueType")


class ScoredCandidate(BaseModel):
    """Candidate paired with its sub-scores, final score and explanations."""

    model_config = ConfigDict(frozen=True)

    candidate: Candidate
    scores: SubScores
    final_score: float = Field(ge=0.0)
    explanations: list[str] = Field(min_length=1)

    @property
    def id(self) -> str:
        return self.candidate.id


class InterpretedQuery(BaseModel):
    """Everything the interpreter learned about one query."""

    original: str
    normalized: str = ""
    corrected: str = ""
    expanded: str = ""
    variants: list[str] = Field(default_factory=list)
    params: ExtractedParams = Field(default_factory=ExtractedParams)

    @property
    def retrieval_queries(self) -> list[str]:
        """Expanded query first, then each distinct variant."""
        queries = [self.expanded or self.original]
        for variant in self.variants:
            if variant not in queries:
                queries.append(variant)
        return queries


class SearchQuality(BaseModel):
    """Heuristic feedback about how well a query is likely to perform."""

    score: float = Field(ge=0.0, le=1.0)
    issues: list[str] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


class SearchResult(BaseModel):
    """Outcome of one end-to-end search."""

    query: InterpretedQuery
    results: list[ScoredCandidate]
    total_matches: int = Field(ge=0)
    quality: SearchQuality | None = None
    related_searches: list[str] = Field(default_factory=list)
    did_you_mean: list[str] = Field(default_factory=list)


class BackfillReport(BaseModel):
    """Summary of a batch embedding run."""

    total: int = 0
    succeeded: int = 0
    failed: int = 0
    batches: int = 0
    failed_batches: int = 0
    failed_ids: list[str] = Field(default_factory=list)

    @property
    def partial(self) -> bool:
        return self.failed > 0 and self.succeeded > 0
