"""Strategy module for arbitrage detection and ranking."""

from dexarb.strategy.calculator import OpportunityCalculator, confidence_for
from dexarb.strategy.opportunity import (
    best_opportunity,
    filter_by_confidence,
    filter_by_min_profit,
    sort_by_profit,
)


__all__ = [
    "OpportunityCalculator",
    "best_opportunity",
    "confidence_for",
    "filter_by_confidence",
    "filter_by_min_profit",
    "sort_by_profit",
]
