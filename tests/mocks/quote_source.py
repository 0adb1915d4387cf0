"""
Mock quote sources and catalogs for testing.

Simulates multi-venue quote acquisition with configurable quotes,
venue errors, failures and latency, without network calls.
"""

import asyncio
from collections.abc import Sequence

from dexarb.core.types import AssetInfo, Quote, QuoteBatch, VenueError
from dexarb.market.catalog import CatalogError
from dexarb.utils.time import get_timestamp_ms


def make_quote(
    venue: str,
    price: float,
    liquidity: float = 1_000_000.0,
    fee: float = 0.003,
) -> Quote:
    """Build a quote observed now."""
    return Quote(
        venue=venue,
        price=price,
        liquidity=liquidity,
        fee=fee,
        observed_at_ms=get_timestamp_ms(),
    )


class MockQuoteSource:
    """
    Mock QuoteSource keyed by asset symbol.

    Tracks calls and peak concurrency so tests can check that
    assets are fetched in parallel.
    """

    def __init__(
        self,
        quotes: dict[str, Sequence[Quote]] | None = None,
        errors: dict[str, Sequence[VenueError]] | None = None,
        failures: dict[str, BaseException] | None = None,
        delays: dict[str, float] | None = None,
        default_delay: float = 0.0,
    ) -> None:
        """
        Initialize mock source.

        Args:
            quotes: Quotes returned per symbol.
            errors: Venue errors returned per symbol.
            failures: Exception raised per symbol.
            delays: Simulated latency per symbol in seconds.
            default_delay: Latency for symbols without an entry.
        """
        self._quotes = quotes or {}
        self._errors = errors or {}
        self._failures = failures or {}
        self._delays = delays or {}
        self._default_delay = default_delay
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch_quotes(self, asset: AssetInfo) -> QuoteBatch:
        self.calls.append(asset.symbol)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            delay = self._delays.get(asset.symbol, self._default_delay)
            if delay:
                await asyncio.sleep(delay)

            failure = self._failures.get(asset.symbol)
            if failure is not None:
                raise failure

            return QuoteBatch(
                quotes=tuple(self._quotes.get(asset.symbol, ())),
                errors=tuple(self._errors.get(asset.symbol, ())),
            )
        finally:
            self.in_flight -= 1

    async def fetch_many(self, assets: Sequence[AssetInfo]) -> dict[str, QuoteBatch]:
        batches: dict[str, QuoteBatch] = {}
        for asset in assets:
            if not asset.mint:
                continue
            try:
                batches[asset.mint] = await self.fetch_quotes(asset)
            except Exception as e:
                error = VenueError(venue="All", error=str(e), timestamp_ms=get_timestamp_ms())
                batches[asset.mint] = QuoteBatch(errors=(error,))
        return batches


class StaticCatalog:
    """AssetProvider over a fixed list."""

    def __init__(self, assets: Sequence[AssetInfo]) -> None:
        self._assets = list(assets)

    def assets(self) -> Sequence[AssetInfo]:
        return list(self._assets)


class BrokenCatalog:
    """AssetProvider whose backing store cannot be read."""

    def __init__(self, message: str = "catalog unavailable") -> None:
        self._message = message

    def assets(self) -> Sequence[AssetInfo]:
        raise CatalogError(self._message)
