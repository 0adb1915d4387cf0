"""
Type definitions for the arbitrage scanner.

This module contains the dataclasses, enums and Protocol definitions
used throughout the application. Market records are frozen value
objects created fresh per fetch and never mutated.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from dexarb.utils.math import is_positive_finite


# =============================================================================
# Enums
# =============================================================================


class Confidence(str, Enum):
    """Coarse rating of how actionable an opportunity is."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        """Ordering used by filters: low < medium < high."""
        return _CONFIDENCE_RANK[self]


_CONFIDENCE_RANK = {Confidence.LOW: 0, Confidence.MEDIUM: 1, Confidence.HIGH: 2}


class ScanStatus(str, Enum):
    """Outcome of scanning a single asset."""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class TransactionKind(str, Enum):
    """Rough classification of an on-chain transaction."""

    TRANSFER = "transfer"
    SWAP = "swap"
    OTHER = "other"


# =============================================================================
# Catalog Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class AssetInfo:
    """
    Tracked asset from the catalog.

    `mint` is the tradable on-chain identifier; `coingecko_id`
    is the external price id used by the aggregator.
    """

    symbol: str
    name: str
    mint: str | None
    coingecko_id: str

    @property
    def is_tradable(self) -> bool:
        """Check if the asset has a mint to quote against."""
        return bool(self.mint)


# =============================================================================
# Market Data Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class Quote:
    """
    Price observation for one asset at one venue.

    Price is in quote currency per unit of asset; liquidity is the
    approximate depth in quote currency; fee is fractional.
    """

    venue: str
    price: float
    liquidity: float
    fee: float
    observed_at_ms: int
    pool_reference: str | None = None

    @property
    def is_usable(self) -> bool:
        """A quote with a non-positive price is treated as absent."""
        return is_positive_finite(self.price)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "dex": self.venue,
            "price": self.price,
            "liquidity": self.liquidity,
            "fee": self.fee,
            "timestamp": self.observed_at_ms,
        }
        if self.pool_reference:
            data["poolAddress"] = self.pool_reference
        return data


@dataclass(slots=True, frozen=True)
class VenueError:
    """Failure of a single venue within a multi-venue fetch."""

    venue: str
    error: str
    timestamp_ms: int

    def to_dict(self) -> dict[str, Any]:
        return {"dex": self.venue, "error": self.error, "timestamp": self.timestamp_ms}


@dataclass(slots=True, frozen=True)
class QuoteBatch:
    """Quotes for one asset plus the venues that failed to answer."""

    quotes: tuple[Quote, ...] = ()
    errors: tuple[VenueError, ...] = ()

    @property
    def usable_quotes(self) -> tuple[Quote, ...]:
        return tuple(q for q in self.quotes if q.is_usable)


# =============================================================================
# Opportunity Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class Opportunity:
    """
    Detected cross-venue arbitrage signal for one asset.

    Buy side is the cheapest usable venue, sell side the most
    expensive. Profit figures are net of venue fees and gas for
    the notional trade size the opportunity was computed with.
    """

    asset_symbol: str
    asset_mint: str
    asset_name: str
    buy_venue: str
    buy_price: float
    buy_liquidity: float
    sell_venue: str
    sell_price: float
    sell_liquidity: float
    spread: float
    spread_percent: float
    estimated_profit: float
    estimated_profit_percent: float
    min_liquidity: float
    confidence: Confidence
    computed_at_ms: int

    def to_dict(self) -> dict[str, Any]:
        """Flat JSON wire shape."""
        return {
            "assetSymbol": self.asset_symbol,
            "assetMint": self.asset_mint,
            "assetName": self.asset_name,
            "buyVenue": self.buy_venue,
            "buyPrice": self.buy_price,
            "buyLiquidity": self.buy_liquidity,
            "sellVenue": self.sell_venue,
            "sellPrice": self.sell_price,
            "sellLiquidity": self.sell_liquidity,
            "spread": self.spread,
            "spreadPercent": self.spread_percent,
            "estimatedProfit": self.estimated_profit,
            "estimatedProfitPercent": self.estimated_profit_percent,
            "minLiquidity": self.min_liquidity,
            "confidence": self.confidence.value,
            "computedAt": self.computed_at_ms,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Opportunity":
        """Rebuild an opportunity from its wire shape."""
        return cls(
            asset_symbol=str(data["assetSymbol"]),
            asset_mint=str(data["assetMint"]),
            asset_name=str(data["assetName"]),
            buy_venue=str(data["buyVenue"]),
            buy_price=float(data["buyPrice"]),
            buy_liquidity=float(data["buyLiquidity"]),
            sell_venue=str(data["sellVenue"]),
            sell_price=float(data["sellPrice"]),
            sell_liquidity=float(data["sellLiquidity"]),
            spread=float(data["spread"]),
            spread_percent=float(data["spreadPercent"]),
            estimated_profit=float(data["estimatedProfit"]),
            estimated_profit_percent=float(data["estimatedProfitPercent"]),
            min_liquidity=float(data["minLiquidity"]),
            confidence=Confidence(data["confidence"]),
            computed_at_ms=int(data["computedAt"]),
        )


@dataclass(slots=True, frozen=True)
class RepriceResult:
    """Profit re-projected for a different notional size."""

    profit: float
    profit_percent: float

    def to_dict(self) -> dict[str, float]:
        return {"profit": self.profit, "profitPercent": self.profit_percent}


# =============================================================================
# Scan Types
# =============================================================================


@dataclass(slots=True)
class AssetScanResult:
    """Result of scanning one asset, success or failure with a reason."""

    asset: AssetInfo
    status: ScanStatus
    opportunity: Opportunity | None = None
    reason: str = ""
    venue_errors: tuple[VenueError, ...] = ()
    duration_ms: int = 0

    @property
    def is_success(self) -> bool:
        return self.status == ScanStatus.SUCCESS


@dataclass(slots=True)
class ScanReport:
    """Aggregate result of one pass over the asset catalog."""

    opportunities: list[Opportunity] = field(default_factory=list)
    total_assets: int = 0
    successful_scans: int = 0
    failed_scans: int = 0
    duration_ms: int = 0
    completed_at_ms: int = 0
    error: str | None = None

    @property
    def is_success(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, Any]:
        """JSON wire shape used by the dashboard API."""
        data: dict[str, Any] = {
            "success": self.is_success,
            "opportunities": [opp.to_dict() for opp in self.opportunities],
            "totalScanned": self.total_assets,
            "successfulScans": self.successful_scans,
            "failedScans": self.failed_scans,
            "scanDuration": self.duration_ms,
            "timestamp": self.completed_at_ms,
        }
        if self.error is not None:
            data["error"] = self.error
        return data

    @classmethod
    def failed(cls, error: str, timestamp_ms: int) -> "ScanReport":
        """Zeroed report returned when the scan itself could not run."""
        return cls(completed_at_ms=timestamp_ms, error=error)


# =============================================================================
# Network Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class NetworkStatus:
    """Chain position reported by the RPC node."""

    slot: int
    block_height: int
    timestamp_ms: int
    version: str | None = None


@dataclass(slots=True, frozen=True)
class PerformanceSample:
    """Single RPC performance sample."""

    tx_count: int
    slot_count: int
    sample_period_secs: int

    @property
    def tps(self) -> float:
        """Transactions per second over the sample period."""
        if self.sample_period_secs <= 0:
            return 0.0
        return self.tx_count / self.sample_period_secs

    def to_dict(self) -> dict[str, Any]:
        return {
            "numTransactions": self.tx_count,
            "numSlots": self.slot_count,
            "samplePeriodSecs": self.sample_period_secs,
            "tps": self.tps,
        }


@dataclass(slots=True, frozen=True)
class ChainTransaction:
    """
    Recent transaction touching a watched program.

    `amount` is in SOL and only set when a transfer with a positive
    lamport value was found.
    """

    signature: str
    slot: int
    timestamp_ms: int
    kind: TransactionKind
    success: bool
    amount: float | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "signature": self.signature,
            "slot": self.slot,
            "timestamp": self.timestamp_ms,
            "type": self.kind.value,
            "success": self.success,
        }
        if self.amount is not None:
            data["amount"] = self.amount
        return data


# =============================================================================
# Protocols (Interfaces)
# =============================================================================


class QuoteSource(Protocol):
    """Protocol for multi-venue quote providers."""

    async def fetch_quotes(self, asset: AssetInfo) -> QuoteBatch:
        """
        Fetch quotes for an asset from every venue.

        Venue failures are reported in the batch; raising is
        reserved for catastrophic failures.
        """
        ...


class AssetProvider(Protocol):
    """Protocol for the read-only asset catalog."""

    def assets(self) -> Sequence[AssetInfo]:
        """Get all tracked assets in catalog order."""
        ...
