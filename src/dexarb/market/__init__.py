"""Market module holding the tracked asset catalog."""

from dexarb.market.catalog import DEFAULT_ASSETS, AssetCatalog, CatalogError


__all__ = [
    "AssetCatalog",
    "CatalogError",
    "DEFAULT_ASSETS",
]
