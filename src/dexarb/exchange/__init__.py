"""Price feed integration: HTTP client, venues and quote aggregation."""

from dexarb.exchange.aggregator import (
    VenueQuoteSource,
    average_price,
    best_price,
    price_spread,
    price_spread_percent,
    worst_price,
)
from dexarb.exchange.client import HttpClient, HttpClientError, HttpStatusError
from dexarb.exchange.models import (
    CoinGeckoPrice,
    JupiterPriceResponse,
    MarketChart,
    PerformanceSampleData,
    RpcResponse,
)
from dexarb.exchange.rate_limiter import RateLimiter
from dexarb.exchange.venues import (
    CoinGeckoVenue,
    JupiterVenue,
    PriceVenue,
    SyntheticVenue,
    VenueUnavailableError,
)


__all__ = [
    "CoinGeckoPrice",
    "CoinGeckoVenue",
    "HttpClient",
    "HttpClientError",
    "HttpStatusError",
    "JupiterPriceResponse",
    "JupiterVenue",
    "MarketChart",
    "PerformanceSampleData",
    "PriceVenue",
    "RateLimiter",
    "RpcResponse",
    "SyntheticVenue",
    "VenueQuoteSource",
    "VenueUnavailableError",
    "average_price",
    "best_price",
    "price_spread",
    "price_spread_percent",
    "worst_price",
]
