"""
Time utilities.

Millisecond timestamps for wire records and monotonic timers
for measuring scan durations.
"""

import time
from datetime import UTC, datetime


def get_timestamp_ms() -> int:
    """
    Get current timestamp in milliseconds.

    Matches the JavaScript `Date.now()` convention the dashboard expects.

    Returns:
        Current Unix timestamp in milliseconds.
    """
    return time.time_ns() // 1_000_000


def format_timestamp_ms(timestamp_ms: int, include_date: bool = False) -> str:
    """
    Format millisecond timestamp for display.

    Args:
        timestamp_ms: Timestamp in milliseconds.
        include_date: Whether to include the date portion.

    Returns:
        Formatted UTC timestamp string with millisecond precision.

    Example:
        >>> format_timestamp_ms(1704067200123)
        '00:00:00.123'
        >>> format_timestamp_ms(1704067200123, include_date=True)
        '2024-01-01 00:00:00.123'
    """
    seconds, millis = divmod(timestamp_ms, 1000)
    dt = datetime.fromtimestamp(seconds, tz=UTC)

    if include_date:
        return f"{dt.strftime('%Y-%m-%d %H:%M:%S')}.{millis:03d}"
    return f"{dt.strftime('%H:%M:%S')}.{millis:03d}"


class ElapsedTimer:
    """
    Context manager measuring wall-clock duration with a monotonic clock.

    Example:
        >>> with ElapsedTimer() as timer:
        ...     do_something()
        >>> print(f"Took {timer.elapsed_ms}ms")
    """

    __slots__ = ("_start_ns", "elapsed_ms")

    def __init__(self) -> None:
        self._start_ns: int = 0
        self.elapsed_ms: int = 0

    def __enter__(self) -> "ElapsedTimer":
        self._start_ns = time.perf_counter_ns()
        return self

    def __exit__(self, *args: object) -> None:
        self.elapsed_ms = (time.perf_counter_ns() - self._start_ns) // 1_000_000


def format_duration_ms(duration_ms: int) -> str:
    """
    Format a duration in milliseconds for human-readable display.

    Examples:
        >>> format_duration_ms(500)
        '500ms'
        >>> format_duration_ms(1500)
        '1.50s'
    """
    if duration_ms < 1000:
        return f"{duration_ms}ms"
    return f"{duration_ms / 1000:.2f}s"
