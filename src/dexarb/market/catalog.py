"""
Tracked asset catalog.

The catalog is loaded once at startup, either from the built-in list
or from a JSON file, and is read-only afterwards.
"""

import logging
from collections.abc import Sequence
from pathlib import Path

import orjson
from pydantic import BaseModel, Field, ValidationError

from dexarb.core.types import AssetInfo


logger = logging.getLogger(__name__)


DEFAULT_ASSETS: tuple[AssetInfo, ...] = (
    AssetInfo(
        symbol="SOL",
        name="Solana",
        mint="So11111111111111111111111111111111111111112",
        coingecko_id="solana",
    ),
    AssetInfo(
        symbol="BONK",
        name="Bonk",
        mint="DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263",
        coingecko_id="bonk",
    ),
    AssetInfo(
        symbol="JUP",
        name="Jupiter",
        mint="JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN",
        coingecko_id="jupiter-exchange-solana",
    ),
    AssetInfo(
        symbol="WIF",
        name="dogwifhat",
        mint="EKpQGSJtjMFqKZ9KQanSqYXRcF8fBopzLHYxdM65zcjm",
        coingecko_id="dogwifcoin",
    ),
    AssetInfo(
        symbol="USDC",
        name="USD Coin",
        mint="EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
        coingecko_id="usd-coin",
    ),
)


class CatalogError(Exception):
    """Raised when the asset catalog cannot be read."""


class CatalogEntry(BaseModel):
    """Asset entry as stored in a catalog file."""

    symbol: str = Field(min_length=1)
    name: str
    mint: str | None = None
    coingecko_id: str = Field(alias="coingeckoId")

    model_config = {"populate_by_name": True}

    def to_asset(self) -> AssetInfo:
        return AssetInfo(
            symbol=self.symbol,
            name=self.name,
            mint=self.mint or None,
            coingecko_id=self.coingecko_id,
        )


class AssetCatalog:
    """
    Ordered, read-only collection of tracked assets.
    """

    def __init__(self, assets: Sequence[AssetInfo] = DEFAULT_ASSETS) -> None:
        self._assets = tuple(assets)

    @classmethod
    def from_file(cls, path: Path) -> "AssetCatalog":
        """
        Load a catalog from a JSON array of asset entries.

        Args:
            path: Path to the catalog file.

        Returns:
            Loaded catalog.

        Raises:
            CatalogError: If the file is missing, not JSON or has invalid entries.
        """
        try:
            raw = orjson.loads(path.read_bytes())
        except OSError as e:
            raise CatalogError(f"Cannot read catalog {path}: {e}") from e
        except orjson.JSONDecodeError as e:
            raise CatalogError(f"Catalog {path} is not valid JSON: {e}") from e

        if not isinstance(raw, list):
            raise CatalogError(f"Catalog {path} must contain a JSON array")

        try:
            entries = [CatalogEntry.model_validate(item) for item in raw]
        except ValidationError as e:
            raise CatalogError(f"Catalog {path} has invalid entries: {e}") from e

        logger.info(f"Loaded {len(entries)} assets from {path}")
        return cls([entry.to_asset() for entry in entries])

    @classmethod
    def load(cls, path: Path | None = None) -> "AssetCatalog":
        """Load from `path` if given, else use the built-in asset list."""
        if path is None:
            return cls()
        return cls.from_file(path)

    def assets(self) -> Sequence[AssetInfo]:
        """Get all tracked assets in catalog order."""
        return self._assets

    @property
    def coingecko_ids(self) -> list[str]:
        """External price ids of all assets, in catalog order."""
        return [a.coingecko_id for a in self._assets]
