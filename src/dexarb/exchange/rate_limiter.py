"""
Token bucket rate limiter for outbound API requests.

Public price APIs throttle aggressively; every host gets its own
bucket so a burst against one API does not delay the others.
"""

import asyncio
import time
from dataclasses import dataclass, field

from dexarb.config.constants import DEFAULT_REQUESTS_PER_SECOND


@dataclass
class TokenBucket:
    """
    Token bucket implementation for rate limiting.

    Tokens are added at a constant rate up to a maximum capacity.
    Each request consumes one token.
    """

    capacity: int
    refill_rate: float  # tokens per second
    tokens: float = field(init=False)
    last_refill: float = field(init=False)  # monotonic seconds
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        """Initialize with full bucket."""
        self.tokens = float(self.capacity)
        self.last_refill = time.monotonic()

    def _refill(self) -> None:
        """Add tokens based on elapsed time."""
        now = time.monotonic()
        self.tokens = min(
            float(self.capacity),
            self.tokens + (now - self.last_refill) * self.refill_rate,
        )
        self.last_refill = now

    async def acquire(self, tokens: int = 1) -> None:
        """
        Acquire tokens, waiting until they are available.

        Waiters are served in lock order, so a slow caller cannot
        be starved by later ones.
        """
        async with self._lock:
            self._refill()
            while self.tokens < tokens:
                await asyncio.sleep((tokens - self.tokens) / self.refill_rate)
                self._refill()
            self.tokens -= tokens


class RateLimiter:
    """
    Per-host rate limiter.

    Buckets are created lazily on first use with a burst capacity
    of twice the per-second rate.
    """

    def __init__(self, requests_per_second: int = DEFAULT_REQUESTS_PER_SECOND) -> None:
        """
        Initialize rate limiter.

        Args:
            requests_per_second: Sustained request rate allowed per host.
        """
        self._rate = requests_per_second
        self._buckets: dict[str, TokenBucket] = {}

    def _bucket(self, host: str) -> TokenBucket:
        bucket = self._buckets.get(host)
        if bucket is None:
            bucket = TokenBucket(capacity=self._rate * 2, refill_rate=float(self._rate))
            self._buckets[host] = bucket
        return bucket

    async def acquire(self, host: str) -> None:
        """Wait for permission to send one request to `host`."""
        await self._bucket(host).acquire()
