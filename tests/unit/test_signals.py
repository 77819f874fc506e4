"""Tests for per-candidate relevance signals."""

import pytest

from package_search.core.config import ScoringBands
from package_search.core.schemas import Candidate, ExtractedParams
from package_search.ranking.signals import (
    budget_score,
    capacity_score,
    detail_match_score,
    food_type_score,
    keyword_score,
    score_signals,
    venue_type_score,
)


def _candidate(
    *,
    id: str = "pkg-1",
    name: str = "Harbor Hall",
    description: str = "Waterfront hall with seafood catering",
    price_min: float = 2000,
    price_max: float = 4000,
    capacity: int = 150,
    similarity: float = 0.6,
    catering_details: dict[str, object] | None = None,
    venue_details: dict[str, object] | None = None,
) -> Candidate:
    return Candidate(
        id=id,
        name=name,
        description=description,
        price_min=price_min,
        price_max=price_max,
        capacity=capacity,
        similarity=similarity,
        catering_details=catering_details,
        venue_details=venue_details,
    )


# ---------------------------------------------------------------------------
# Keyword
# ---------------------------------------------------------------------------
class TestKeywordScore:
    def test_no_overlap(self) -> None:
        assert keyword_score("rooftop party", "garden wedding venue") == 0.0

    def test_fraction_of_query_words(self) -> None:
        # "seafood" and "food" match, "with" is absent
        score = keyword_score("seafood food with", "seafood and food buffet")
        assert score == pytest.approx(2 / 3)

    def test_short_words_ignored(self) -> None:
        assert keyword_score("dj bar", "bar dj hire") == 0.0

    def test_phrase_bonus(self) -> None:
        # "dj bar" is a substring: 0 word hits plus the 0.5 bonus
        assert keyword_score("dj bar", "hire a dj bar combo") == pytest.approx(0.5)

    def test_full_match_capped_at_one(self) -> None:
        assert keyword_score("garden wedding", "Garden Wedding package") == 1.0

    def test_case_insensitive(self) -> None:
        assert keyword_score("SEAFOOD", "fresh seafood") == 1.0

    def test_empty_query(self) -> None:
        assert keyword_score("", "anything") == 0.0

    def test_custom_min_length(self) -> None:
        bands = ScoringBands(keyword_min_length=2, phrase_bonus=0.0)
        assert keyword_score("dj hire", "dj available") == 0.0
        assert keyword_score("dj hire", "dj available", bands) == pytest.approx(0.5)


# ---------------------------------------------------------------------------
# Budget
# ---------------------------------------------------------------------------
class TestBudgetScore:
    def test_inside_range(self) -> None:
        assert budget_score(2000, 4000, 3000) == 1.0

    def test_inclusive_bounds(self) -> None:
        assert budget_score(2000, 4000, 2000) == 1.0
        assert budget_score(2000, 4000, 4000) == 1.0

    @pytest.mark.parametrize(
        ("price", "budget", "expected"),
        [
            (2800, 3000, 0.9),   # 6.7% off
            (3500, 3000, 0.7),   # 16.7% off
            (3800, 3000, 0.5),   # 26.7% off
            (4400, 3000, 0.3),   # 46.7% off
            (6000, 3000, 0.1),   # 100% off
        ],
    )
    def test_bands(self, price: float, budget: float, expected: float) -> None:
        assert budget_score(price, price, budget) == expected

    def test_uses_midpoint(self) -> None:
        # midpoint 5000 is 66% away from 3000 even though price_min is close
        assert budget_score(3100, 6900, 3000) == 0.1

    def test_non_positive_budget_rejected(self) -> None:
        with pytest.raises(ValueError, match="budget must be positive"):
            budget_score(1000, 2000, 0)

    def test_custom_bands(self) -> None:
        bands = ScoringBands(budget_bands=((0.5, 0.6),), budget_floor=0.0)
        assert budget_score(4000, 4000, 3000, bands) == 0.6
        assert budget_score(9000, 9000, 3000, bands) == 0.0


# ---------------------------------------------------------------------------
# Capacity
# ---------------------------------------------------------------------------
class TestCapacityScore:
    @pytest.mark.parametrize(
        ("capacity", "expected"),
        [
            (100, 1.0),
            (150, 1.0),
            (90, 0.7),
            (80, 0.7),
            (200, 0.8),
            (300, 0.5),
            (50, 0.2),
            (400, 0.1),
        ],
    )
    def test_ratio_bands(self, capacity: int, expected: float) -> None:
        assert capacity_score(capacity, 100) == expected

    def test_undersized_worse_than_oversized(self) -> None:
        assert capacity_score(79, 100) < capacity_score(200, 100)

    def test_non_positive_guests_rejected(self) -> None:
        with pytest.raises(ValueError, match="guest_count must be positive"):
            capacity_score(100, 0)

    def test_custom_bands(self) -> None:
        bands = ScoringBands(
            capacity_bands=((1.0, 1.2, 0.9),),
            capacity_undersized=0.0,
            capacity_oversized=0.4,
        )
        assert capacity_score(110, 100, bands) == 0.9
        assert capacity_score(90, 100, bands) == 0.0
        assert capacity_score(150, 100, bands) == 0.4

    def test_shared_edge_goes_to_earlier_band(self) -> None:
        bands = ScoringBands(capacity_bands=((1.0, 2.0, 0.6), (2.0, 3.0, 0.3)))
        assert capacity_score(200, 100, bands) == 0.6

    def test_score_signals_uses_bands(self) -> None:
        bands = ScoringBands(capacity_bands=(), capacity_oversized=0.25)
        scores = score_signals(
            _candidate(capacity=150), "venue", ExtractedParams(capacity_min=100), bands
        )
        assert scores.capacity == 0.25


# ---------------------------------------------------------------------------
# Detail match (food type / venue type)
# ---------------------------------------------------------------------------
class TestDetailMatchScore:
    def test_no_details(self) -> None:
        assert detail_match_score(None, "seafood") == 0.0
        assert detail_match_score({}, "seafood") == 0.0

    def test_substring_match(self) -> None:
        details = {"cuisine_type": "Seafood", "menu_options": ["lobster"]}
        assert detail_match_score(details, "seafood") == 1.0

    def test_partial_word_match(self) -> None:
        details = {"menu_options": ["grilled fish", "seafood tower"]}
        # "fresh" misses, "seafood" hits: 0.5 + 0.5 * 1/2
        assert detail_match_score(details, "fresh seafood") == pytest.approx(0.75)

    def test_no_hits(self) -> None:
        assert detail_match_score({"cuisine_type": "steakhouse"}, "seafood") == 0.0

    def test_blank_request(self) -> None:
        assert detail_match_score({"cuisine_type": "thai"}, "  ") == 0.0

    def test_food_and_venue_use_their_own_blob(self) -> None:
        c = _candidate(
            catering_details={"cuisine_type": "Italian"},
            venue_details={"type": "garden"},
        )
        assert food_type_score(c, "italian") == 1.0
        assert food_type_score(c, "garden") == 0.0
        assert venue_type_score(c, "garden") == 1.0
        assert venue_type_score(c, "italian") == 0.0


# ---------------------------------------------------------------------------
# score_signals
# ---------------------------------------------------------------------------
class TestScoreSignals:
    def test_no_hints_leaves_conditional_scores_null(self) -> None:
        scores = score_signals(_candidate(), "waterfront hall", ExtractedParams.empty())
        assert scores.similarity == 0.6
        assert scores.keyword > 0.0
        assert scores.budget is None
        assert scores.capacity is None
        assert scores.food_type is None
        assert scores.venue_type is None

    def test_all_hints(self) -> None:
        c = _candidate(
            catering_details={"cuisine_type": "seafood"},
            venue_details={"type": "waterfront"},
        )
        params = ExtractedParams(
            budget_max=3000, capacity_min=120, food_type="seafood", venue_type="waterfront"
        )
        scores = score_signals(c, "seafood dinner", params)
        assert scores.budget == 1.0
        assert scores.capacity == 1.0
        assert scores.food_type == 1.0
        assert scores.venue_type == 1.0

    def test_event_type_and_location_do_not_score(self) -> None:
        params = ExtractedParams(event_type="wedding", location="Austin")
        scores = score_signals(_candidate(), "wedding", params)
        assert scores.budget is None
        assert scores.food_type is None

    def test_food_hint_without_catering_details_scores_zero(self) -> None:
        scores = score_signals(
            _candidate(), "seafood", ExtractedParams(food_type="seafood")
        )
        assert scores.food_type == 0.0
