"""
Unit tests for HttpClient against a local aiohttp server.
"""

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from aiohttp import test_utils, web

from dexarb.exchange.client import HttpClient, HttpClientError, HttpStatusError


async def price_handler(request: web.Request) -> web.Response:
    return web.json_response({"ids": request.query.get("ids"), "price": 1.5})


async def rpc_handler(request: web.Request) -> web.Response:
    payload = await request.json()
    return web.json_response({"jsonrpc": "2.0", "id": payload["id"], "result": payload["method"]})


async def throttled_handler(request: web.Request) -> web.Response:
    return web.json_response({"error": "rate limited"}, status=429)


async def html_handler(request: web.Request) -> web.Response:
    return web.Response(text="<html>maintenance</html>", content_type="text/html")


@pytest_asyncio.fixture
async def server() -> AsyncIterator[test_utils.TestServer]:
    app = web.Application()
    app.router.add_get("/price", price_handler)
    app.router.add_post("/rpc", rpc_handler)
    app.router.add_get("/throttled", throttled_handler)
    app.router.add_get("/html", html_handler)
    async with test_utils.TestServer(app) as test_server:
        yield test_server


class TestHttpClient:
    """Tests for HttpClient."""

    @pytest.mark.asyncio
    async def test_get_json(self, server: test_utils.TestServer) -> None:
        async with HttpClient() as http:
            data = await http.get_json(str(server.make_url("/price")), params={"ids": "solana"})

        assert data == {"ids": "solana", "price": 1.5}

    @pytest.mark.asyncio
    async def test_post_json(self, server: test_utils.TestServer) -> None:
        async with HttpClient() as http:
            data = await http.post_json(
                str(server.make_url("/rpc")),
                {"jsonrpc": "2.0", "id": 4, "method": "getSlot", "params": []},
            )

        assert data == {"jsonrpc": "2.0", "id": 4, "result": "getSlot"}

    @pytest.mark.asyncio
    async def test_status_error(self, server: test_utils.TestServer) -> None:
        async with HttpClient() as http:
            with pytest.raises(HttpStatusError) as exc_info:
                await http.get_json(str(server.make_url("/throttled")))

        assert exc_info.value.status == 429
        assert "rate limited" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_invalid_json(self, server: test_utils.TestServer) -> None:
        async with HttpClient() as http:
            with pytest.raises(HttpClientError, match="Invalid JSON"):
                await http.get_json(str(server.make_url("/html")))

    @pytest.mark.asyncio
    async def test_connection_refused(self) -> None:
        http = HttpClient(timeout=2.0)
        try:
            with pytest.raises(HttpClientError, match="Network error"):
                await http.get_json("http://127.0.0.1:9/unreachable")
        finally:
            await http.close()

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self) -> None:
        http = HttpClient()

        await http.close()
        await http.close()
