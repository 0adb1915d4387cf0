"""
Ranking and filtering of detected opportunities.
"""

from collections.abc import Iterable

from dexarb.config.constants import DEFAULT_MIN_PROFIT_PERCENT
from dexarb.core.types import Confidence, Opportunity


def sort_by_profit(opportunities: Iterable[Opportunity]) -> list[Opportunity]:
    """
    Sort opportunities by net profit percentage, highest first.

    Returns a new list; the input is left untouched.
    """
    return sorted(opportunities, key=lambda opp: opp.estimated_profit_percent, reverse=True)


def filter_by_min_profit(
    opportunities: Iterable[Opportunity],
    min_profit_percent: float = DEFAULT_MIN_PROFIT_PERCENT,
) -> list[Opportunity]:
    """Keep opportunities with profit percentage at or above the threshold."""
    return [opp for opp in opportunities if opp.estimated_profit_percent >= min_profit_percent]


def filter_by_confidence(
    opportunities: Iterable[Opportunity],
    min_confidence: Confidence | str = Confidence.LOW,
) -> list[Opportunity]:
    """
    Keep opportunities rated at or above a confidence level.

    Args:
        opportunities: Opportunities to filter.
        min_confidence: Lowest accepted level ("low", "medium" or "high").

    Returns:
        Filtered list in input order.

    Raises:
        ValueError: If min_confidence is not a known level.
    """
    min_rank = Confidence(min_confidence).rank
    return [opp for opp in opportunities if opp.confidence.rank >= min_rank]


def best_opportunity(opportunities: Iterable[Opportunity]) -> Opportunity | None:
    """Get the single most profitable opportunity, if any."""
    return max(opportunities, key=lambda opp: opp.estimated_profit_percent, default=None)
