"""Utility functions for the arbitrage scanner."""

from dexarb.utils.math import (
    format_profit,
    format_usd,
    is_positive_finite,
    percent_change,
    safe_divide,
)
from dexarb.utils.time import (
    ElapsedTimer,
    format_duration_ms,
    format_timestamp_ms,
    get_timestamp_ms,
)


__all__ = [
    "ElapsedTimer",
    "format_duration_ms",
    "format_profit",
    "format_timestamp_ms",
    "format_usd",
    "get_timestamp_ms",
    "is_positive_finite",
    "percent_change",
    "safe_divide",
]
