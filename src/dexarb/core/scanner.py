"""
Scan orchestrator.

Runs the opportunity calculator over every tracked asset
concurrently and aggregates per-asset results into a ScanReport.
A single asset can fail for any reason without affecting the
others; only a failure to read the catalog aborts a scan.
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable

from dexarb.config.constants import (
    DEFAULT_ASSET_TIMEOUT,
    DEFAULT_MIN_PROFIT_PERCENT,
    DEFAULT_SCAN_INTERVAL,
    DEFAULT_TRADE_SIZE,
)
from dexarb.core.types import (
    AssetInfo,
    AssetProvider,
    AssetScanResult,
    Opportunity,
    QuoteBatch,
    QuoteSource,
    ScanReport,
    ScanStatus,
)
from dexarb.strategy.calculator import OpportunityCalculator
from dexarb.strategy.opportunity import sort_by_profit
from dexarb.telemetry.metrics import MetricsCollector
from dexarb.utils.time import ElapsedTimer, get_timestamp_ms


logger = logging.getLogger(__name__)


ReportCallback = Callable[[ScanReport], Awaitable[None] | None]


class ScanOrchestrator:
    """
    Concurrent scanner over the asset catalog.

    Example:
        orchestrator = ScanOrchestrator(catalog, quote_source, OpportunityCalculator())
        report = await orchestrator.scan(trade_size=1000, min_profit_percent=0.1)
    """

    def __init__(
        self,
        catalog: AssetProvider,
        quote_source: QuoteSource,
        calculator: OpportunityCalculator,
        *,
        asset_timeout: float = DEFAULT_ASSET_TIMEOUT,
        metrics: MetricsCollector | None = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            catalog: Source of tracked assets.
            quote_source: Multi-venue quote provider.
            calculator: Opportunity calculator.
            asset_timeout: Seconds allowed for one asset's quote fetch.
            metrics: Optional metrics collector.
        """
        self._catalog = catalog
        self._quote_source = quote_source
        self._calculator = calculator
        self._asset_timeout = asset_timeout
        self._metrics = metrics

    @property
    def calculator(self) -> OpportunityCalculator:
        return self._calculator

    @property
    def catalog(self) -> AssetProvider:
        return self._catalog

    async def scan(
        self,
        trade_size: float = DEFAULT_TRADE_SIZE,
        min_profit_percent: float = DEFAULT_MIN_PROFIT_PERCENT,
    ) -> ScanReport:
        """
        Scan every catalog asset once.

        Args:
            trade_size: Notional trade size in quote currency.
            min_profit_percent: Minimum net profit to report.

        Returns:
            Report with opportunities sorted by profit, most profitable first.

        Raises:
            ValueError: If trade_size is not positive.
            CatalogError: If the catalog cannot be read.
        """
        if trade_size <= 0:
            raise ValueError(f"Trade size must be positive, got {trade_size}")

        with ElapsedTimer() as timer:
            assets = list(self._catalog.assets())
            logger.info(f"Scanning {len(assets)} assets (size={trade_size}, min={min_profit_percent}%)")

            results = await asyncio.gather(
                *(self._scan_one(asset, trade_size, min_profit_percent) for asset in assets)
            )

        opportunities = [r.opportunity for r in results if r.opportunity is not None]
        successful = sum(1 for r in results if r.is_success)

        report = ScanReport(
            opportunities=sort_by_profit(opportunities),
            total_assets=len(assets),
            successful_scans=successful,
            failed_scans=len(results) - successful,
            duration_ms=timer.elapsed_ms,
            completed_at_ms=get_timestamp_ms(),
        )

        logger.info(
            f"Scan complete: {len(report.opportunities)} opportunities, "
            f"{report.successful_scans}/{report.total_assets} assets ok, "
            f"{report.duration_ms}ms"
        )

        if self._metrics:
            for result in results:
                self._metrics.record_asset(result)
            self._metrics.record_scan(report)

        return report

    async def _fetch(self, asset: AssetInfo) -> QuoteBatch:
        """Fetch quotes for one asset under the per-asset timeout."""
        batch = await asyncio.wait_for(
            self._quote_source.fetch_quotes(asset), timeout=self._asset_timeout
        )
        for error in batch.errors:
            logger.warning(f"{asset.symbol}: venue {error.venue} failed: {error.error}")
        return batch

    async def _scan_one(
        self,
        asset: AssetInfo,
        trade_size: float,
        min_profit_percent: float,
    ) -> AssetScanResult:
        """
        Scan one asset. Never raises.

        Returns:
            SUCCESS if the calculator ran, FAILED with a reason otherwise.
            Anything that reached the quote source carries its elapsed time.
        """
        if not asset.is_tradable:
            logger.warning(f"Skipping {asset.symbol}: missing mint")
            return AssetScanResult(asset=asset, status=ScanStatus.FAILED, reason="missing mint")

        with ElapsedTimer() as timer:
            result = await self._evaluate_asset(asset, trade_size, min_profit_percent)
        result.duration_ms = timer.elapsed_ms
        return result

    async def _evaluate_asset(
        self,
        asset: AssetInfo,
        trade_size: float,
        min_profit_percent: float,
    ) -> AssetScanResult:
        try:
            batch = await self._fetch(asset)
        except TimeoutError:
            reason = f"timed out after {self._asset_timeout}s"
            logger.warning(f"{asset.symbol} failed: {reason}")
            return AssetScanResult(asset=asset, status=ScanStatus.FAILED, reason=reason)
        except Exception as e:
            logger.error(f"{asset.symbol} failed: {type(e).__name__}: {e}")
            return AssetScanResult(asset=asset, status=ScanStatus.FAILED, reason=str(e))

        try:
            usable = batch.usable_quotes
            if len(usable) < 2:
                reason = f"insufficient quotes ({len(usable)} usable)"
                logger.warning(f"{asset.symbol} failed: {reason}")
                return AssetScanResult(
                    asset=asset,
                    status=ScanStatus.FAILED,
                    reason=reason,
                    venue_errors=batch.errors,
                )

            opportunity = self._calculator.evaluate(
                asset, usable, trade_size=trade_size, min_profit_percent=min_profit_percent
            )
        except Exception as e:
            logger.error(f"{asset.symbol} evaluation failed: {type(e).__name__}: {e}")
            return AssetScanResult(
                asset=asset,
                status=ScanStatus.FAILED,
                reason=str(e),
                venue_errors=batch.errors,
            )

        if opportunity:
            logger.debug(
                f"{asset.symbol}: buy {opportunity.buy_venue} @ {opportunity.buy_price:.6f}, "
                f"sell {opportunity.sell_venue} @ {opportunity.sell_price:.6f}, "
                f"net {opportunity.estimated_profit_percent:+.4f}%"
            )

        return AssetScanResult(
            asset=asset,
            status=ScanStatus.SUCCESS,
            opportunity=opportunity,
            venue_errors=batch.errors,
        )

    async def scan_asset(
        self,
        asset: AssetInfo,
        trade_size: float = DEFAULT_TRADE_SIZE,
        min_profit_percent: float = DEFAULT_MIN_PROFIT_PERCENT,
    ) -> Opportunity | None:
        """
        Evaluate a single asset on demand.

        Fetch failures are logged and yield None.

        Raises:
            ValueError: If trade_size is not positive.
        """
        if trade_size <= 0:
            raise ValueError(f"Trade size must be positive, got {trade_size}")

        if not asset.is_tradable:
            return None

        try:
            batch = await self._fetch(asset)
        except TimeoutError:
            logger.warning(f"{asset.symbol} lookup timed out after {self._asset_timeout}s")
            return None
        except Exception as e:
            logger.error(f"{asset.symbol} lookup failed: {type(e).__name__}: {e}")
            return None

        return self._calculator.evaluate(
            asset,
            batch.usable_quotes,
            trade_size=trade_size,
            min_profit_percent=min_profit_percent,
        )

    def find_asset(self, key: str) -> AssetInfo | None:
        """Resolve a catalog asset by mint or case-insensitive symbol."""
        for asset in self._catalog.assets():
            if asset.mint == key or asset.symbol.upper() == key.upper():
                return asset
        return None

    def start_continuous(
        self,
        callback: ReportCallback,
        interval: float = DEFAULT_SCAN_INTERVAL,
        trade_size: float = DEFAULT_TRADE_SIZE,
        min_profit_percent: float = DEFAULT_MIN_PROFIT_PERCENT,
    ) -> "ScanHandle":
        """
        Scan now and then on every interval tick.

        Must be called from a running event loop. Each tick starts a
        new scan whether or not the previous one has finished.

        Args:
            callback: Receives each report; may be sync or async.
            interval: Seconds between scan starts.
            trade_size: Notional trade size for every scan.
            min_profit_percent: Minimum net profit for every scan.

        Returns:
            Handle used to stop the timer.
        """
        if interval <= 0:
            raise ValueError(f"Scan interval must be positive, got {interval}")
        if trade_size <= 0:
            raise ValueError(f"Trade size must be positive, got {trade_size}")

        handle = ScanHandle(self, callback, interval, trade_size, min_profit_percent)
        handle._start()
        return handle


class ScanHandle:
    """
    Control handle for continuous scanning.

    `stop` cancels the interval timer only. Scans already started
    run to completion and still deliver their reports.
    """

    def __init__(
        self,
        orchestrator: ScanOrchestrator,
        callback: ReportCallback,
        interval: float,
        trade_size: float,
        min_profit_percent: float,
    ) -> None:
        self._orchestrator = orchestrator
        self._callback = callback
        self._interval = interval
        self._trade_size = trade_size
        self._min_profit_percent = min_profit_percent
        self._timer: asyncio.Task[None] | None = None
        self._in_flight: set[asyncio.Task[None]] = set()
        self._scans_started = 0
        self._stopped = False

    def _start(self) -> None:
        self._launch()
        self._timer = asyncio.create_task(self._tick())

    def _launch(self) -> None:
        task = asyncio.create_task(self._run_once())
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        self._scans_started += 1

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self._launch()

    async def _run_once(self) -> None:
        try:
            report = await self._orchestrator.scan(self._trade_size, self._min_profit_percent)
        except Exception as e:
            logger.error(f"Continuous scan failed: {type(e).__name__}: {e}")
            return

        try:
            result = self._callback(report)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Scan callback failed: {type(e).__name__}: {e}")

    def stop(self) -> None:
        """Cancel the interval timer. In-flight scans are not interrupted."""
        if self._timer and not self._timer.done():
            self._timer.cancel()
            self._stopped = True
            logger.info(f"Continuous scanning stopped after {self._scans_started} scans")

    @property
    def running(self) -> bool:
        """Whether the interval timer is still active."""
        return self._timer is not None and not self._stopped and not self._timer.done()

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    @property
    def scans_started(self) -> int:
        return self._scans_started

    async def wait_idle(self) -> None:
        """Wait until every started scan has finished and delivered."""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)
