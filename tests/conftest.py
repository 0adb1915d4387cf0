"""
Pytest configuration and shared fixtures.

Provides reusable test fixtures for all test modules.
"""

import pytest

from dexarb.core.types import AssetInfo, Quote
from dexarb.market.catalog import DEFAULT_ASSETS, AssetCatalog
from dexarb.strategy.calculator import OpportunityCalculator
from dexarb.telemetry.metrics import MetricsCollector
from tests.mocks import make_quote


# =============================================================================
# Asset Fixtures
# =============================================================================


@pytest.fixture
def sol_asset() -> AssetInfo:
    """SOL asset info."""
    return AssetInfo(
        symbol="SOL",
        name="Solana",
        mint="So11111111111111111111111111111111111111112",
        coingecko_id="solana",
    )


@pytest.fixture
def bonk_asset() -> AssetInfo:
    """BONK asset info."""
    return AssetInfo(
        symbol="BONK",
        name="Bonk",
        mint="DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263",
        coingecko_id="bonk",
    )


@pytest.fixture
def catalog() -> AssetCatalog:
    """Catalog with the built-in assets."""
    return AssetCatalog(DEFAULT_ASSETS)


# =============================================================================
# Quote Fixtures
# =============================================================================


@pytest.fixture
def quotes_below_threshold() -> list[Quote]:
    """0.6% spread, eaten by fees and gas."""
    return [
        make_quote("A", 100.0, 1_000_000.0, 0.003),
        make_quote("B", 100.6, 800_000.0, 0.0025),
    ]


@pytest.fixture
def quotes_profitable() -> list[Quote]:
    """2% spread, profitable after fees and gas."""
    return [
        make_quote("A", 100.0, 1_000_000.0, 0.003),
        make_quote("B", 102.0, 800_000.0, 0.0025),
    ]


# =============================================================================
# Component Fixtures
# =============================================================================


@pytest.fixture
def calculator() -> OpportunityCalculator:
    """Opportunity calculator with default gas and liquidity settings."""
    return OpportunityCalculator(gas_cost=0.50)


@pytest.fixture
def metrics() -> MetricsCollector:
    """Fresh metrics collector."""
    return MetricsCollector()
