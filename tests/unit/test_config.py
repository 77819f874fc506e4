"""Tests for configuration models and YAML loading."""

from pathlib import Path
from textwrap import dedent

import pytest
from pydantic import ValidationError

from package_search.core.config import (
    DiversityConfig,
    EmbeddingConfig,
    InterpreterConfig,
    LLMConfig,
    RankingWeights,
    ScoringBands,
    SearchConfig,
    Settings,
)


class TestRankingWeights:
    def test_defaults(self) -> None:
        w = RankingWeights()
        assert w.similarity == 0.40
        assert w.keyword == 0.20
        assert w.budget == 0.15
        assert w.capacity == 0.15
        assert w.food_type == 0.05
        assert w.venue_type == 0.05

    def test_defaults_sum_to_one(self) -> None:
        assert sum(RankingWeights().model_dump().values()) == pytest.approx(1.0)

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RankingWeights(keyword=-0.1)

    def test_frozen(self) -> None:
        w = RankingWeights()
        with pytest.raises(ValidationError):
            w.similarity = 0.9  # type: ignore[misc]


class TestScoringBands:
    def test_defaults(self) -> None:
        b = ScoringBands()
        assert b.keyword_min_length == 4
        assert b.phrase_bonus == 0.5
        assert b.budget_bands[0] == (0.10, 0.9)
        assert b.budget_floor == 0.1
        assert b.explanation_threshold == 0.7

    def test_bands_must_ascend(self) -> None:
        with pytest.raises(ValidationError, match="ascending"):
            ScoringBands(budget_bands=((0.3, 0.5), (0.1, 0.9)))

    def test_band_scores_bounded(self) -> None:
        with pytest.raises(ValidationError, match=r"\[0, 1\]"):
            ScoringBands(budget_bands=((0.1, 1.5),))

    def test_capacity_defaults(self) -> None:
        b = ScoringBands()
        assert b.capacity_bands[0] == (1.0, 1.5, 1.0)
        assert b.capacity_undersized == 0.2
        assert b.capacity_oversized == 0.1

    def test_capacity_band_range_checked(self) -> None:
        with pytest.raises(ValidationError, match="low <= high"):
            ScoringBands(capacity_bands=((2.0, 1.0, 0.5),))

    def test_capacity_band_scores_bounded(self) -> None:
        with pytest.raises(ValidationError, match=r"\[0, 1\]"):
            ScoringBands(capacity_bands=((1.0, 2.0, 1.2),))


class TestDiversityConfig:
    def test_defaults(self) -> None:
        d = DiversityConfig()
        assert d.head_size == 3
        assert d.soft_cap_ratio == 0.8
        assert d.price_breakpoints == (2000.0, 5000.0, 10000.0)

    def test_breakpoints_must_ascend(self) -> None:
        with pytest.raises(ValidationError):
            DiversityConfig(price_breakpoints=(5000.0, 2000.0, 10000.0))

    def test_ratio_bounds(self) -> None:
        with pytest.raises(ValidationError):
            DiversityConfig(soft_cap_ratio=1.5)


class TestLLMConfig:
    def test_defaults(self) -> None:
        c = LLMConfig()
        assert c.provider == "openai"
        assert c.model is None
        assert c.timeout_s == 10.0

    def test_timeout_positive(self) -> None:
        with pytest.raises(ValidationError):
            LLMConfig(timeout_s=0)


class TestInterpreterConfig:
    def test_defaults(self) -> None:
        c = InterpreterConfig()
        assert c.extraction_temperature == 0.0
        assert c.expansion_temperature == 0.3
        assert c.variants_temperature == 0.5
        assert c.variant_count == 3
        assert c.use_expansion is True
        assert c.use_variants is False


class TestSearchConfig:
    def test_defaults(self) -> None:
        c = SearchConfig()
        assert c.limit == 50
        assert c.use_reranking is True
        assert c.use_diversify is False
        assert c.include_suggestions is False

    def test_limit_bounds(self) -> None:
        with pytest.raises(ValidationError):
            SearchConfig(limit=0)
        with pytest.raises(ValidationError):
            SearchConfig(limit=101)


class TestEmbeddingConfig:
    def test_defaults(self) -> None:
        c = EmbeddingConfig()
        assert c.model == "text-embedding-3-small"
        assert c.dimensions == 1536
        assert c.batch_size == 10
        assert c.batch_delay_s == 0.2


class TestSettings:
    def test_defaults(self) -> None:
        s = Settings()
        assert s.weights == RankingWeights()
        assert s.search.limit == 50

    def test_all_zero_weights_rejected(self) -> None:
        zero = RankingWeights(
            similarity=0, keyword=0, budget=0, capacity=0, food_type=0, venue_type=0
        )
        with pytest.raises(ValidationError, match="at least one ranking weight"):
            Settings(weights=zero)

    def test_from_yaml(self, tmp_path: Path) -> None:
        yaml_content = dedent("""\
            weights:
              similarity: 0.5
              keyword: 0.1
            bands:
              budget_bands:
                - [0.1, 0.8]
                - [0.4, 0.4]
              capacity_bands:
                - [1.0, 1.25, 1.0]
              capacity_undersized: 0.0
            llm:
              provider: anthropic
              timeout_s: 5
            search:
              limit: 20
              use_diversify: true
        """)
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml_content)

        s = Settings.from_yaml(config_file)
        assert s.weights.similarity == 0.5
        assert s.weights.keyword == 0.1
        assert s.weights.budget == 0.15
        assert s.bands.budget_bands == ((0.1, 0.8), (0.4, 0.4))
        assert s.bands.capacity_bands == ((1.0, 1.25, 1.0),)
        assert s.bands.capacity_undersized == 0.0
        assert s.llm.provider == "anthropic"
        assert s.llm.timeout_s == 5.0
        assert s.search.limit == 20
        assert s.search.use_diversify is True

    def test_from_yaml_empty_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("")
        assert Settings.from_yaml(config_file) == Settings()

    def test_from_yaml_not_found(self) -> None:
        with pytest.raises(FileNotFoundError):
            Settings.from_yaml("/nonexistent/settings.yaml")

    def test_shipped_settings_file_loads(self) -> None:
        path = Path(__file__).parent.parent.parent / "config" / "settings.yaml"
        s = Settings.from_yaml(path)
        assert s.weights == RankingWeights()
        assert s.bands == ScoringBands()
