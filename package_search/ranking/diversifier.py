"""Diversity-aware top-K selection.

Keeps the head of the ranking intact, then prefers candidates that add a new
price tier or venue type so one bucket cannot fill the page.
"""

import logging

from package_search.core.config import DiversityConfig
from package_search.core.schemas import ScoredCandidate

logger = logging.getLogger(__name__)

UNKNOWN_VENUE_TYPE = "unknown"

_DEFAULT_DIVERSITY = DiversityConfig()


def price_tier(
    price_min: float,
    price_max: float,
    breakpoints: tuple[float, float, float] = _DEFAULT_DIVERSITY.price_breakpoints,
) -> str:
    """Bucket a price range by its average into budget/mid-range/premium/luxury."""
    average = (price_min + price_max) / 2
    budget_limit, mid_limit, premium_limit = breakpoints
    if average < budget_limit:
        return "budget"
    if average < mid_limit:
        return "mid-range"
    if average < premium_limit:
        return "premium"
    return "luxury"


def diversify(
    ranked: list[ScoredCandidate],
    top_k: int = 20,
    config: DiversityConfig = _DEFAULT_DIVERSITY,
) -> list[ScoredCandidate]:
    """Select up to ``top_k`` results from a rank-ordered list, spreading tiers.

    Args:
        ranked: Candidates in rank order (best first).
        top_k: Number of results wanted.
        config: Head size, soft cap ratio and price breakpoints.

    Returns:
        A subset of ``ranked`` without duplicates, at most ``top_k`` long,
        always containing the first ``head_size`` inputs.

    Raises:
        ValueError: If ``top_k`` is not positive.
    """
    if top_k <= 0:
        msg = f"top_k must be positive, got {top_k}"
        raise ValueError(msg)

    if len(ranked) <= top_k:
        return list(ranked)

    soft_cap = top_k * config.soft_cap_ratio
    selected: list[ScoredCandidate] = []
    selected_ids: set[str] = set()
    seen_venue_types: set[str] = set()
    seen_tiers: set[str] = set()

    def admit(item: ScoredCandidate, venue_type: str, tier: str) -> None:
        selected.append(item)
        selected_ids.add(item.candidate.id)
        seen_venue_types.add(venue_type)
        seen_tiers.add(tier)

    for item in ranked:
        if len(selected) >= top_k:
            break
        if item.candidate.id in selected_ids:
            continue

        venue_type = item.candidate.venue_type or UNKNOWN_VENUE_TYPE
        tier = price_tier(
            item.candidate.price_min, item.candidate.price_max, config.price_breakpoints
        )

        if len(selected) < config.head_size:
            admit(item, venue_type, tier)
        elif venue_type not in seen_venue_types or tier not in seen_tiers:
            admit(item, venue_type, tier)
        elif len(selected) < soft_cap:
            # Repeat bucket, but the page is still mostly empty.
            selected.append(item)
            selected_ids.add(item.candidate.id)

    diverse_count = len(selected)
    for item in ranked:
        if len(selected) >= top_k:
            break
        if item.candidate.id not in selected_ids:
            selected.append(item)
            selected_ids.add(item.candidate.id)

    logger.debug(
        "Diversified %d -> %d (%d by diversity pass, %d backfilled)",
        len(ranked), len(selected), diverse_count, len(selected) - diverse_count,
    )
    return selected
