"""Core module containing type definitions and the scan orchestrator."""

from dexarb.core.types import (
    AssetInfo,
    AssetProvider,
    AssetScanResult,
    Confidence,
    NetworkStatus,
    Opportunity,
    PerformanceSample,
    Quote,
    QuoteBatch,
    QuoteSource,
    RepriceResult,
    ScanReport,
    ScanStatus,
    VenueError,
)


__all__ = [
    "AssetInfo",
    "AssetProvider",
    "AssetScanResult",
    "Confidence",
    "NetworkStatus",
    "Opportunity",
    "PerformanceSample",
    "Quote",
    "QuoteBatch",
    "QuoteSource",
    "RepriceResult",
    "ScanReport",
    "ScanStatus",
    "VenueError",
]
