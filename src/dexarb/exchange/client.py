"""
Shared async HTTP JSON client.

One instance is created at process start and injected into every
price venue and the RPC client:
- Single session with connection pooling
- Fast JSON parsing with orjson
- Integrated per-host rate limiting
- Total request timeout
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any
from urllib.parse import urlsplit

import aiohttp
import orjson

from dexarb.config.constants import DEFAULT_HTTP_TIMEOUT
from dexarb.exchange.rate_limiter import RateLimiter


class HttpClientError(Exception):
    """Base exception for HTTP client errors."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class HttpStatusError(HttpClientError):
    """Exception for non-2xx responses."""

    pass


class HttpClient:
    """
    Async JSON-over-HTTP client.

    The aiohttp session is created lazily and reused until `close`.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        rate_limiter: RateLimiter | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            timeout: Total timeout per request in seconds.
            rate_limiter: Optional rate limiter instance.
            headers: Extra default headers.
        """
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._rate_limiter = rate_limiter or RateLimiter()
        self._headers = {"Accept": "application/json", **(headers or {})}
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=50,
                limit_per_host=10,
                keepalive_timeout=30,
                enable_cleanup_closed=True,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                headers=self._headers,
                timeout=self._timeout,
                json_serialize=lambda x: orjson.dumps(x).decode(),
            )
        return self._session

    async def close(self) -> None:
        """Close the client session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    @asynccontextmanager
    async def _request_context(self) -> AsyncIterator[aiohttp.ClientSession]:
        """Context manager translating transport errors."""
        session = await self._get_session()
        try:
            yield session
        except aiohttp.ClientError as e:
            raise HttpClientError(f"Network error: {e}") from e
        except TimeoutError as e:
            raise HttpClientError("Request timed out") from e

    async def get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """
        Send a GET request and decode the JSON body.

        Raises:
            HttpStatusError: On 4xx/5xx responses.
            HttpClientError: On network, timeout or decoding errors.
        """
        await self._rate_limiter.acquire(urlsplit(url).netloc)

        async with self._request_context() as session:
            async with session.get(url, params=params) as response:
                return await self._handle_response(response)

    async def post_json(self, url: str, payload: Any) -> Any:
        """
        Send a JSON POST request and decode the JSON body.

        Raises:
            HttpStatusError: On 4xx/5xx responses.
            HttpClientError: On network, timeout or decoding errors.
        """
        await self._rate_limiter.acquire(urlsplit(url).netloc)

        async with self._request_context() as session:
            async with session.post(url, json=payload) as response:
                return await self._handle_response(response)

    async def _handle_response(self, response: aiohttp.ClientResponse) -> Any:
        """Parse and validate response."""
        body = await response.read()

        if response.status >= 400:
            snippet = body[:200].decode(errors="replace")
            raise HttpStatusError(
                f"HTTP {response.status} from {response.url.host}: {snippet}",
                status=response.status,
            )

        try:
            return orjson.loads(body)
        except orjson.JSONDecodeError as e:
            raise HttpClientError(f"Invalid JSON response: {e}") from e

    async def __aenter__(self) -> "HttpClient":
        """Async context manager entry."""
        await self._get_session()
        return self

    async def __aexit__(self, *args: object) -> None:
        """Async context manager exit."""
        await self.close()
