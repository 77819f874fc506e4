"""Tests for diversity-aware top-K selection."""

import pytest

from package_search.core.config import DiversityConfig
from package_search.core.schemas import Candidate, ScoredCandidate, SubScores
from package_search.ranking.diversifier import diversify, price_tier


def _scored(
    id: str,
    *,
    price: float = 3000,
    venue_type: str | None = None,
    final_score: float = 0.5,
) -> ScoredCandidate:
    candidate = Candidate(
        id=id,
        name=f"Package {id}",
        price_min=price,
        price_max=price,
        venue_details={"type": venue_type} if venue_type else None,
        similarity=0.5,
    )
    return ScoredCandidate(
        candidate=candidate,
        scores=SubScores(similarity=0.5, keyword=0.0),
        final_score=final_score,
        explanations=["Recommended based on your search"],
    )


def _ranked(count: int, **kwargs: object) -> list[ScoredCandidate]:
    return [
        _scored(str(i), final_score=1.0 - i / 100, **kwargs)  # type: ignore[arg-type]
        for i in range(count)
    ]


class TestPriceTier:
    @pytest.mark.parametrize(
        ("low", "high", "tier"),
        [
            (500, 1500, "budget"),
            (1999, 1999, "budget"),
            (2000, 2000, "mid-range"),
            (3000, 6000, "mid-range"),
            (5000, 5000, "premium"),
            (8000, 11000, "premium"),
            (10000, 10000, "luxury"),
        ],
    )
    def test_tiers(self, low: float, high: float, tier: str) -> None:
        assert price_tier(low, high) == tier

    def test_custom_breakpoints(self) -> None:
        assert price_tier(150, 150, (100.0, 200.0, 300.0)) == "mid-range"


class TestDiversify:
    def test_non_positive_k_rejected(self) -> None:
        with pytest.raises(ValueError, match="top_k must be positive"):
            diversify(_ranked(5), 0)
        with pytest.raises(ValueError):
            diversify(_ranked(5), -1)

    def test_small_input_returned_unchanged(self) -> None:
        ranked = _ranked(4)
        result = diversify(ranked, 4)
        assert result == ranked
        assert result is not ranked

    def test_empty_input(self) -> None:
        assert diversify([], 5) == []

    @pytest.mark.parametrize(("count", "k"), [(10, 3), (10, 5), (25, 20), (7, 6)])
    def test_length_subset_and_unique(self, count: int, k: int) -> None:
        ranked = _ranked(count)
        result = diversify(ranked, k)
        ids = [s.id for s in result]
        assert len(result) == min(k, count)
        assert len(set(ids)) == len(ids)
        assert set(ids) <= {s.id for s in ranked}

    def test_head_always_kept(self) -> None:
        ranked = _ranked(10)
        result = diversify(ranked, 5)
        assert [s.id for s in result[:3]] == ["0", "1", "2"]

    def test_new_tier_promoted_over_repeat_bucket(self) -> None:
        ranked = _ranked(8) + [_scored("lux", price=20000, final_score=0.1)]
        result = diversify(ranked, 5)
        # 3 head + 1 repeat while under the 80% soft cap, then the new tier
        assert [s.id for s in result] == ["0", "1", "2", "3", "lux"]

    def test_new_venue_type_promoted(self) -> None:
        ranked = _ranked(8, venue_type="ballroom") + [
            _scored("barn", venue_type="barn", final_score=0.1)
        ]
        result = diversify(ranked, 5)
        assert "barn" in [s.id for s in result]

    def test_backfill_in_rank_order(self) -> None:
        result = diversify(_ranked(6), 5)
        assert [s.id for s in result] == ["0", "1", "2", "3", "4"]

    def test_duplicate_ids_dropped(self) -> None:
        ranked = _ranked(4) + _ranked(4)
        result = diversify(ranked, 6)
        ids = [s.id for s in result]
        assert len(ids) == len(set(ids)) == 4

    def test_custom_head_size(self) -> None:
        config = DiversityConfig(head_size=1, soft_cap_ratio=0.0)
        ranked = _ranked(5) + [_scored("lux", price=20000, final_score=0.1)]
        result = diversify(ranked, 3, config)
        # head of 1, the new tier, then backfill
        assert [s.id for s in result] == ["0", "lux", "1"]
