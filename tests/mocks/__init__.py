"""Mock implementations for testing."""

from tests.mocks.fake_http import FakeHttpClient
from tests.mocks.quote_source import (
    BrokenCatalog,
    MockQuoteSource,
    StaticCatalog,
    make_quote,
)


__all__ = [
    "BrokenCatalog",
    "FakeHttpClient",
    "MockQuoteSource",
    "StaticCatalog",
    "make_quote",
]
