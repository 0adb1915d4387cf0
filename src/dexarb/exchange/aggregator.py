"""
Multi-venue quote aggregation.

Fetches an asset's quote from every venue concurrently. A venue that
fails contributes a VenueError instead of a quote; the fetch as a
whole only raises when something other than a venue breaks.
"""

import asyncio
import logging
from collections.abc import Iterable, Sequence

from dexarb.core.types import AssetInfo, Quote, QuoteBatch, VenueError
from dexarb.exchange.venues import PriceVenue, SyntheticVenue
from dexarb.utils.math import percent_change
from dexarb.utils.time import get_timestamp_ms


logger = logging.getLogger(__name__)


class VenueQuoteSource:
    """
    Quote source backed by a set of price venues.

    Implements the QuoteSource protocol consumed by the scanner.
    """

    def __init__(
        self,
        venues: Sequence[PriceVenue],
        synthetic: SyntheticVenue | None = None,
    ) -> None:
        """
        Initialize the quote source.

        Args:
            venues: Venues queried for every asset.
            synthetic: Optional demo venue derived from the first real quote.

        Raises:
            ValueError: If no venues are given.
        """
        if not venues:
            raise ValueError("At least one price venue is required")

        self._venues = tuple(venues)
        self._synthetic = synthetic

    @property
    def venue_names(self) -> list[str]:
        names = [v.name for v in self._venues]
        if self._synthetic:
            names.append(self._synthetic.name)
        return names

    async def fetch_quotes(self, asset: AssetInfo) -> QuoteBatch:
        """
        Fetch quotes for an asset from all venues.

        Args:
            asset: Asset to quote.

        Returns:
            Batch of quotes and per-venue errors.
        """
        results = await asyncio.gather(
            *(venue.fetch_quote(asset) for venue in self._venues),
            return_exceptions=True,
        )

        quotes: list[Quote] = []
        errors: list[VenueError] = []

        for venue, result in zip(self._venues, results, strict=True):
            if isinstance(result, Quote):
                quotes.append(result)
            elif isinstance(result, Exception):
                logger.debug(f"{venue.name} failed for {asset.symbol}: {result}")
                errors.append(
                    VenueError(venue=venue.name, error=str(result), timestamp_ms=get_timestamp_ms())
                )
            else:
                # CancelledError and other BaseExceptions are not venue failures
                raise result

        if self._synthetic and quotes:
            synthetic = self._synthetic.derive(quotes[0])
            logger.debug(
                f"Synthetic {synthetic.venue} quote for {asset.symbol}: "
                f"{synthetic.price:.6f} (reference {quotes[0].price:.6f})"
            )
            quotes.append(synthetic)

        return QuoteBatch(quotes=tuple(quotes), errors=tuple(errors))

    async def fetch_many(self, assets: Iterable[AssetInfo]) -> dict[str, QuoteBatch]:
        """
        Fetch quotes for several assets concurrently.

        Returns:
            Batches keyed by mint; assets without a mint are skipped.
        """
        tradable = [a for a in assets if a.mint]

        async def _one(asset: AssetInfo) -> QuoteBatch:
            try:
                return await self.fetch_quotes(asset)
            except Exception as e:
                logger.error(f"Failed to fetch prices for {asset.symbol}: {e}")
                return QuoteBatch(
                    errors=(VenueError(venue="All", error=str(e), timestamp_ms=get_timestamp_ms()),)
                )

        batches = await asyncio.gather(*(_one(a) for a in tradable))
        return {a.mint: batch for a, batch in zip(tradable, batches, strict=True) if a.mint}


# =============================================================================
# Price Summary Helpers
# =============================================================================


def best_price(quotes: Sequence[Quote]) -> Quote | None:
    """Get the highest-priced quote."""
    return max(quotes, key=lambda q: q.price, default=None)


def worst_price(quotes: Sequence[Quote]) -> Quote | None:
    """Get the lowest-priced quote."""
    return min(quotes, key=lambda q: q.price, default=None)


def average_price(quotes: Sequence[Quote]) -> float:
    if not quotes:
        return 0.0
    return sum(q.price for q in quotes) / len(quotes)


def price_spread(quotes: Sequence[Quote]) -> float:
    """Absolute spread between the highest and lowest quote."""
    if len(quotes) < 2:
        return 0.0
    best, worst = best_price(quotes), worst_price(quotes)
    if best is None or worst is None:
        return 0.0
    return best.price - worst.price


def price_spread_percent(quotes: Sequence[Quote]) -> float:
    """Spread as a percentage of the lowest quote."""
    if len(quotes) < 2:
        return 0.0
    best, worst = best_price(quotes), worst_price(quotes)
    if best is None or worst is None:
        return 0.0
    return percent_change(worst.price, best.price)
