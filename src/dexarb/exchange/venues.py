"""
Price venues.

Each venue turns one external price feed into Quote records.
Validation happens here, at the boundary: anything that does not
parse into a positive, finite price is reported as a venue failure.
"""

import asyncio
import logging
import random
import time
from collections.abc import Sequence
from typing import Protocol

from pydantic import ValidationError

from dexarb.config.constants import (
    AGGREGATOR_FEE_RATE,
    AGGREGATOR_LIQUIDITY,
    COINGECKO_API_URL,
    ENDPOINT_MARKET_CHART,
    ENDPOINT_SIMPLE_PRICE,
    JUPITER_PRICE_API_URL,
    QUOTE_CURRENCY,
    SYNTHETIC_FEE_RATE,
    SYNTHETIC_LIQUIDITY,
    SYNTHETIC_MAX_VARIATION,
    SYNTHETIC_MIN_VARIATION,
    VENUE_COINGECKO,
    VENUE_JUPITER,
    VENUE_SYNTHETIC,
)
from dexarb.core.types import AssetInfo, Quote
from dexarb.exchange.client import HttpClient, HttpClientError
from dexarb.exchange.models import (
    CoinGeckoPrice,
    JupiterPriceResponse,
    MarketChart,
)
from dexarb.utils.time import get_timestamp_ms


logger = logging.getLogger(__name__)


class VenueUnavailableError(Exception):
    """Raised when a venue cannot produce a quote for an asset."""

    def __init__(self, venue: str, message: str) -> None:
        super().__init__(f"{venue}: {message}")
        self.venue = venue


class PriceVenue(Protocol):
    """Protocol for single-venue quote fetchers."""

    @property
    def name(self) -> str:
        """Venue name carried by every quote it produces."""
        ...

    async def fetch_quote(self, asset: AssetInfo) -> Quote:
        """
        Fetch the current quote for an asset.

        Raises:
            VenueUnavailableError: If no usable price is available.
        """
        ...


class CoinGeckoVenue:
    """
    CoinGecko market price as a venue.

    CoinGecko's free tier is rate limited, so all tracked ids are
    requested together and the response is shared by every asset
    for `cache_ttl` seconds. Concurrent lookups wait on one request.
    """

    def __init__(
        self,
        http: HttpClient,
        coingecko_ids: Sequence[str] = (),
        base_url: str = COINGECKO_API_URL,
        cache_ttl: float = 5.0,
    ) -> None:
        """
        Initialize the venue.

        Args:
            http: Shared HTTP client.
            coingecko_ids: Ids to request in every batch.
            base_url: CoinGecko API base URL.
            cache_ttl: Seconds a batch response is reused.
        """
        self._http = http
        self._ids: list[str] = list(dict.fromkeys(coingecko_ids))
        self._base_url = base_url
        self._cache_ttl = cache_ttl
        self._cache: dict[str, CoinGeckoPrice] = {}
        self._cached_at = 0.0
        self._lock = asyncio.Lock()

    @property
    def name(self) -> str:
        return VENUE_COINGECKO

    async def fetch_quote(self, asset: AssetInfo) -> Quote:
        if asset.coingecko_id not in self._ids:
            self._ids.append(asset.coingecko_id)
            self._cached_at = 0.0

        prices = await self.simple_prices()
        entry = prices.get(asset.coingecko_id)
        if entry is None:
            raise VenueUnavailableError(self.name, f"No price data for {asset.coingecko_id}")

        return Quote(
            venue=self.name,
            price=entry.usd,
            liquidity=AGGREGATOR_LIQUIDITY,
            fee=AGGREGATOR_FEE_RATE,
            observed_at_ms=get_timestamp_ms(),
        )

    async def simple_prices(self) -> dict[str, CoinGeckoPrice]:
        """
        Get validated prices for all known ids.

        Malformed entries are dropped; request failures raise.

        Raises:
            VenueUnavailableError: If the API request fails.
        """
        async with self._lock:
            if self._cache and time.monotonic() - self._cached_at < self._cache_ttl:
                return self._cache

            try:
                raw = await self._http.get_json(
                    f"{self._base_url}{ENDPOINT_SIMPLE_PRICE}",
                    params={
                        "ids": ",".join(self._ids),
                        "vs_currencies": QUOTE_CURRENCY,
                        "include_24hr_change": "true",
                    },
                )
            except HttpClientError as e:
                raise VenueUnavailableError(self.name, str(e)) from e

            if not isinstance(raw, dict):
                raise VenueUnavailableError(self.name, "Unexpected response shape")

            prices: dict[str, CoinGeckoPrice] = {}
            for coin_id, entry in raw.items():
                try:
                    prices[coin_id] = CoinGeckoPrice.model_validate(entry)
                except ValidationError:
                    logger.debug(f"Dropping malformed CoinGecko entry for {coin_id}")

            self._cache = prices
            self._cached_at = time.monotonic()
            return prices

    async def market_chart(self, coin_id: str, days: int = 1) -> MarketChart:
        """
        Get historical prices for one coin.

        Raises:
            VenueUnavailableError: If the request fails or does not validate.
        """
        url = f"{self._base_url}{ENDPOINT_MARKET_CHART.format(coin_id=coin_id)}"
        try:
            raw = await self._http.get_json(
                url, params={"vs_currency": QUOTE_CURRENCY, "days": str(days)}
            )
            return MarketChart.model_validate(raw)
        except HttpClientError as e:
            raise VenueUnavailableError(self.name, str(e)) from e
        except ValidationError as e:
            raise VenueUnavailableError(self.name, f"Malformed market chart: {e}") from e


class JupiterVenue:
    """Jupiter price API; aggregates Raydium, Orca and other Solana DEXs."""

    def __init__(
        self,
        http: HttpClient,
        url: str = JUPITER_PRICE_API_URL,
        vs_token: str | None = None,
    ) -> None:
        """
        Initialize the venue.

        Args:
            http: Shared HTTP client.
            url: Price API endpoint.
            vs_token: Mint prices are quoted in; the API defaults to USDC.
        """
        self._http = http
        self._url = url
        self._vs_token = vs_token

    @property
    def name(self) -> str:
        return VENUE_JUPITER

    async def fetch_quote(self, asset: AssetInfo) -> Quote:
        if not asset.mint:
            raise VenueUnavailableError(self.name, f"{asset.symbol} has no mint")

        try:
            params = {"ids": asset.mint}
            if self._vs_token:
                params["vsToken"] = self._vs_token
            raw = await self._http.get_json(self._url, params=params)
            response = JupiterPriceResponse.model_validate(raw)
        except HttpClientError as e:
            raise VenueUnavailableError(self.name, str(e)) from e
        except ValidationError as e:
            raise VenueUnavailableError(self.name, f"Malformed response: {e}") from e

        entry = response.data.get(asset.mint)
        if entry is None:
            raise VenueUnavailableError(self.name, "Price not found")

        return Quote(
            venue=self.name,
            price=entry.price,
            liquidity=AGGREGATOR_LIQUIDITY,
            fee=AGGREGATOR_FEE_RATE,
            observed_at_ms=get_timestamp_ms(),
        )


class SyntheticVenue:
    """
    Randomized second venue derived from a real quote.

    Demo data only: shifts a real price by 0.1-0.5% in a random
    direction. It produces no real arbitrage signal and is off
    unless explicitly enabled.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    @property
    def name(self) -> str:
        return VENUE_SYNTHETIC

    def derive(self, reference: Quote) -> Quote:
        """Build a synthetic quote around a real one."""
        variation = self._rng.uniform(SYNTHETIC_MIN_VARIATION, SYNTHETIC_MAX_VARIATION)
        direction = 1 if self._rng.random() > 0.5 else -1

        return Quote(
            venue=self.name,
            price=reference.price * (1 + direction * variation),
            liquidity=SYNTHETIC_LIQUIDITY,
            fee=SYNTHETIC_FEE_RATE,
            observed_at_ms=get_timestamp_ms(),
        )
