"""
Fake HTTP client for testing venue and RPC code.

Responses are looked up by URL (GET) or JSON-RPC method (POST).
An Exception instance as response value is raised instead. An RPC
response may also be a callable taking the request params, for
methods answered per argument.
"""

from typing import Any


class FakeHttpClient:
    """In-memory stand-in for HttpClient."""

    def __init__(
        self,
        get_responses: dict[str, Any] | None = None,
        rpc_responses: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize fake client.

        Args:
            get_responses: Response body per URL.
            rpc_responses: Response envelope, or callable of params, per JSON-RPC method name.
        """
        self._get = get_responses or {}
        self._rpc = rpc_responses or {}
        self.get_calls: list[tuple[str, dict[str, Any] | None]] = []
        self.post_calls: list[tuple[str, Any]] = []
        self.closed = False

    async def get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        self.get_calls.append((url, params))
        response = self._get[url]
        if isinstance(response, Exception):
            raise response
        return response

    async def post_json(self, url: str, payload: Any) -> Any:
        self.post_calls.append((url, payload))
        response = self._rpc[payload["method"]]
        if callable(response):
            response = response(payload["params"])
        if isinstance(response, Exception):
            raise response
        return response

    async def close(self) -> None:
        self.closed = True
