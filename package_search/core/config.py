"""Configuration models and YAML loader for the package search engine."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class RankingWeights(BaseModel):
    """Fixed weights for combining sub-scores into a final score.

    Frozen so a weight set cannot drift mid-request. Null sub-scores are
    omitted from the sum, so the weights do not need to add up to 1.
    """

    model_config = ConfigDict(frozen=True)

    similarity: float = Field(default=0.40, ge=0.0)
    keyword: float = Field(default=0.20, ge=0.0)
    budget: float = Field(default=0.15, ge=0.0)
    capacity: float = Field(default=0.15, ge=0.0)
    food_type: float = Field(default=0.05, ge=0.0)
    venue_type: float = Field(default=0.05, ge=0.0)


class ScoringBands(BaseModel):
    """Band thresholds used by the signal scorer and explanation builder.

    Budget bands map a maximum relative distance from the package midpoint to
    a score. Capacity bands map an inclusive ``(low, high)`` range of
    capacity / guest-count ratios to a score; the first matching band wins,
    so a shared edge belongs to the earlier band. Ratios outside every band
    score ``capacity_undersized`` below 1.0 and ``capacity_oversized`` above.
    """

    model_config = ConfigDict(frozen=True)

    keyword_min_length: int = Field(default=4, ge=1)
    phrase_bonus: float = Field(default=0.5, ge=0.0, le=1.0)
    budget_bands: tuple[tuple[float, float], ...] = (
        (0.10, 0.9),
        (0.20, 0.7),
        (0.30, 0.5),
        (0.50, 0.3),
    )
    budget_floor: float = Field(default=0.1, ge=0.0, le=1.0)
    capacity_bands: tuple[tuple[float, float, float], ...] = (
        (1.0, 1.5, 1.0),
        (0.8, 1.0, 0.7),
        (1.5, 2.0, 0.8),
        (2.0, 3.0, 0.5),
    )
    capacity_undersized: float = Field(default=0.2, ge=0.0, le=1.0)
    capacity_oversized: float = Field(default=0.1, ge=0.0, le=1.0)
    explanation_threshold: float = Field(default=0.7, ge=0.0, le=1.0)

    @field_validator("budget_bands")
    @classmethod
    def bands_ascending(
        cls, v: tuple[tuple[float, float], ...]
    ) -> tuple[tuple[float, float], ...]:
        limits = [limit for limit, _ in v]
        if limits != sorted(limits):
            msg = "budget_bands must be ordered by ascending distance"
            raise ValueError(msg)
        if any(not 0.0 <= score <= 1.0 for _, score in v):
            msg = "budget band scores must lie in [0, 1]"
            raise ValueError(msg)
        return v

    @field_validator("capacity_bands")
    @classmethod
    def capacity_bands_valid(
        cls, v: tuple[tuple[float, float, float], ...]
    ) -> tuple[tuple[float, float, float], ...]:
        if any(low < 0.0 or low > high for low, high, _ in v):
            msg = "capacity bands need 0 <= low <= high"
            raise ValueError(msg)
        if any(not 0.0 <= score <= 1.0 for _, _, score in v):
            msg = "capacity band scores must lie in [0, 1]"
            raise ValueError(msg)
        return v


class DiversityConfig(BaseModel):
    """Settings for diversity-aware top-K selection."""

    model_config = ConfigDict(frozen=True)

    head_size: int = Field(default=3, ge=0)
    soft_cap_ratio: float = Field(default=0.8, ge=0.0, le=1.0)
    price_breakpoints: tuple[float, float, float] = (2000.0, 5000.0, 10000.0)

    @field_validator("price_breakpoints")
    @classmethod
    def breakpoints_ascending(
        cls, v: tuple[float, float, float]
    ) -> tuple[float, float, float]:
        if list(v) != sorted(v):
            msg = "price_breakpoints must be ascending"
            raise ValueError(msg)
        return v


class LLMConfig(BaseModel):
    """Which text-completion provider to use and how long to wait for it."""

    provider: str = "openai"
    model: str | None = None
    timeout_s: float = Field(default=10.0, gt=0.0)


class InterpreterConfig(BaseModel):
    """Prompt-call settings for the query interpreter."""

    extraction_temperature: float = Field(default=0.0, ge=0.0, le=2.0)
    extraction_max_tokens: int = Field(default=200, ge=1)
    expansion_temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    expansion_max_tokens: int = Field(default=150, ge=1)
    variants_temperature: float = Field(default=0.5, ge=0.0, le=2.0)
    variants_max_tokens: int = Field(default=150, ge=1)
    variant_count: int = Field(default=3, ge=1, le=10)
    use_preprocessing: bool = True
    use_expansion: bool = True
    use_variants: bool = False


class SearchConfig(BaseModel):
    """Per-request pipeline toggles."""

    limit: int = Field(default=50, ge=1, le=100)
    use_reranking: bool = True
    use_diversify: bool = False
    include_suggestions: bool = False


class EmbeddingConfig(BaseModel):
    """Embedding gateway and backfill settings."""

    model: str = "text-embedding-3-small"
    dimensions: int = Field(default=1536, ge=1)
    batch_size: int = Field(default=10, ge=1, le=2048)
    batch_delay_s: float = Field(default=0.2, ge=0.0)


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    weights: RankingWeights = Field(default_factory=RankingWeights)
    bands: ScoringBands = Field(default_factory=ScoringBands)
    diversity: DiversityConfig = Field(default_factory=DiversityConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    interpreter: InterpreterConfig = Field(default_factory=InterpreterConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    embeddings: EmbeddingConfig = Field(default_factory=EmbeddingConfig)

    @model_validator(mode="after")
    def weights_not_all_zero(self) -> "Settings":
        if not any(self.weights.model_dump().values()):
            msg = "at least one ranking weight must be positive"
            raise ValueError(msg)
        return self

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
