"""
Mathematical utilities for price comparisons.
"""

import math
from typing import Final


# Epsilon for floating point comparisons
EPSILON: Final[float] = 1e-12


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """
    Safely divide two numbers, returning default on division by zero.

    Args:
        numerator: The dividend.
        denominator: The divisor.
        default: Value to return if denominator is zero.

    Returns:
        Result of division or default value.
    """
    if abs(denominator) < EPSILON:
        return default
    return numerator / denominator


def is_positive_finite(value: object) -> bool:
    """Check that a price is usable for ratio arithmetic. Non-numbers are not."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


def percent_change(base: float, other: float) -> float:
    """
    Percentage difference of `other` relative to `base`.

    Example:
        >>> percent_change(100.0, 102.0)
        2.0
    """
    return safe_divide(other - base, base) * 100.0


def format_profit(profit_pct: float) -> str:
    """
    Format profit percentage for display.

    Args:
        profit_pct: Profit as percentage.

    Returns:
        Signed string with four decimals.
    """
    sign = "+" if profit_pct >= 0 else ""
    return f"{sign}{profit_pct:.4f}%"


def format_usd(amount: float) -> str:
    """Format a quote-currency amount with adaptive precision."""
    if abs(amount) >= 1:
        return f"${amount:,.2f}"
    return f"${amount:.6f}"
