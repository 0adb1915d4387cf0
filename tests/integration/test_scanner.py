"""
Integration tests for the scan orchestrator.

Tests the full scan path: catalog -> quote source -> calculator -> report,
plus continuous scanning through ScanHandle.
"""

import asyncio
import logging
import time

import pytest

from dexarb.core.scanner import ScanOrchestrator
from dexarb.core.types import AssetInfo, Confidence, Quote, ScanReport, VenueError
from dexarb.market.catalog import DEFAULT_ASSETS, CatalogError
from dexarb.strategy.calculator import OpportunityCalculator
from dexarb.telemetry.metrics import MetricsCollector
from tests.mocks import BrokenCatalog, MockQuoteSource, StaticCatalog, make_quote


def profitable(high: float = 102.0) -> list:
    return [
        make_quote("CoinGecko", 100.0, 1_000_000.0, 0.003),
        make_quote("Jupiter", high, 800_000.0, 0.0025),
    ]


def mixed_source(**kwargs: object) -> MockQuoteSource:
    """SOL and BONK profitable, JUP below threshold, WIF broken, USDC single quote."""
    return MockQuoteSource(
        quotes={
            "SOL": profitable(102.0),
            "BONK": profitable(101.5),
            "JUP": profitable(100.6),
            "USDC": [make_quote("CoinGecko", 1.0)],
        },
        failures={"WIF": RuntimeError("upstream exploded")},
        **kwargs,  # type: ignore[arg-type]
    )


@pytest.fixture
def catalog5() -> StaticCatalog:
    return StaticCatalog(DEFAULT_ASSETS)


@pytest.fixture
def all_profitable() -> MockQuoteSource:
    return MockQuoteSource(quotes={a.symbol: profitable() for a in DEFAULT_ASSETS})


class TestScan:
    """Tests for ScanOrchestrator.scan."""

    @pytest.mark.asyncio
    async def test_partial_failures(
        self, catalog5: StaticCatalog, calculator: OpportunityCalculator
    ) -> None:
        """Two failing assets do not hide the other three."""
        orchestrator = ScanOrchestrator(catalog5, mixed_source(), calculator)

        report = await orchestrator.scan(trade_size=1000, min_profit_percent=0.1)

        assert report.is_success
        assert report.total_assets == 5
        assert report.successful_scans == 3
        assert report.failed_scans == 2
        assert [o.asset_symbol for o in report.opportunities] == ["SOL", "BONK"]
        assert report.opportunities[0].estimated_profit == pytest.approx(13.95)
        assert report.opportunities[0].confidence is Confidence.HIGH
        assert report.completed_at_ms > 0

    @pytest.mark.asyncio
    async def test_unpriced_quote_fails_only_its_asset(
        self, catalog5: StaticCatalog, calculator: OpportunityCalculator
    ) -> None:
        """A quote without a numeric price fails WIF and leaves the rest of the scan intact."""
        quotes = {a.symbol: profitable() for a in DEFAULT_ASSETS}
        quotes["WIF"] = [
            Quote("CoinGecko", None, 1_000_000.0, 0.003, 1),  # type: ignore[arg-type]
            make_quote("Jupiter", 1.0),
        ]
        orchestrator = ScanOrchestrator(catalog5, MockQuoteSource(quotes=quotes), calculator)

        report = await orchestrator.scan(trade_size=1000, min_profit_percent=0.1)

        assert report.total_assets == 5
        assert report.failed_scans == 1
        assert report.successful_scans == 4
        assert "WIF" not in [o.asset_symbol for o in report.opportunities]

    @pytest.mark.asyncio
    async def test_evaluation_error_fails_only_its_asset(
        self, catalog5: StaticCatalog, all_profitable: MockQuoteSource
    ) -> None:
        class ExplodingCalculator(OpportunityCalculator):
            def evaluate(self, asset, quotes, trade_size, min_profit_percent):  # type: ignore[no-untyped-def]
                if asset.symbol == "JUP":
                    raise ArithmeticError("bad quote math")
                return super().evaluate(asset, quotes, trade_size, min_profit_percent)

        metrics = MetricsCollector()
        orchestrator = ScanOrchestrator(
            catalog5, all_profitable, ExplodingCalculator(), metrics=metrics
        )

        report = await orchestrator.scan(trade_size=1000, min_profit_percent=0.1)

        assert report.failed_scans == 1
        assert report.successful_scans == 4
        assert "JUP" not in [o.asset_symbol for o in report.opportunities]
        assert metrics.get_latency_stats("asset_scan").count == 4

    @pytest.mark.asyncio
    async def test_counters_always_sum(
        self, catalog5: StaticCatalog, calculator: OpportunityCalculator
    ) -> None:
        orchestrator = ScanOrchestrator(catalog5, mixed_source(), calculator)

        for threshold in (-5.0, 0.1, 50.0):
            report = await orchestrator.scan(1000, threshold)
            assert report.successful_scans + report.failed_scans == report.total_assets
            assert len(report.opportunities) <= report.successful_scans

    @pytest.mark.asyncio
    async def test_assets_scanned_concurrently(
        self, catalog5: StaticCatalog, calculator: OpportunityCalculator
    ) -> None:
        """Five 200ms fetches finish in roughly one fetch time."""
        source = MockQuoteSource(
            quotes={a.symbol: profitable() for a in DEFAULT_ASSETS},
            default_delay=0.2,
        )
        orchestrator = ScanOrchestrator(catalog5, source, calculator)

        start = time.perf_counter()
        report = await orchestrator.scan()
        elapsed = time.perf_counter() - start

        assert elapsed < 0.5
        assert source.max_in_flight == 5
        assert report.successful_scans == 5

    @pytest.mark.asyncio
    async def test_asset_timeout(
        self, catalog5: StaticCatalog, calculator: OpportunityCalculator
    ) -> None:
        source = MockQuoteSource(
            quotes={a.symbol: profitable() for a in DEFAULT_ASSETS},
            delays={"SOL": 5.0},
        )
        orchestrator = ScanOrchestrator(catalog5, source, calculator, asset_timeout=0.05)

        start = time.perf_counter()
        report = await orchestrator.scan()

        assert time.perf_counter() - start < 1.0
        assert report.failed_scans == 1
        assert "SOL" not in [o.asset_symbol for o in report.opportunities]

    @pytest.mark.asyncio
    async def test_asset_without_mint_fails(
        self, sol_asset: AssetInfo, calculator: OpportunityCalculator
    ) -> None:
        no_mint = AssetInfo(symbol="XYZ", name="Unlisted", mint=None, coingecko_id="xyz")
        source = MockQuoteSource(quotes={"SOL": profitable(), "XYZ": profitable()})
        orchestrator = ScanOrchestrator(StaticCatalog([sol_asset, no_mint]), source, calculator)

        report = await orchestrator.scan()

        assert report.failed_scans == 1
        assert source.calls == ["SOL"]

    @pytest.mark.asyncio
    async def test_venue_errors_do_not_abort_asset(
        self,
        sol_asset: AssetInfo,
        calculator: OpportunityCalculator,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        source = MockQuoteSource(
            quotes={"SOL": profitable()},
            errors={"SOL": [VenueError(venue="Orca", error="HTTP 503", timestamp_ms=1)]},
        )
        orchestrator = ScanOrchestrator(StaticCatalog([sol_asset]), source, calculator)

        with caplog.at_level(logging.WARNING, logger="dexarb"):
            report = await orchestrator.scan()

        assert report.successful_scans == 1
        assert len(report.opportunities) == 1
        assert "venue Orca failed" in caplog.text

    @pytest.mark.asyncio
    async def test_broken_catalog_propagates(self, calculator: OpportunityCalculator) -> None:
        orchestrator = ScanOrchestrator(BrokenCatalog(), MockQuoteSource(), calculator)

        with pytest.raises(CatalogError):
            await orchestrator.scan()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("size", [0, -100])
    async def test_rejects_non_positive_size(
        self, catalog5: StaticCatalog, all_profitable: MockQuoteSource, size: float
    ) -> None:
        orchestrator = ScanOrchestrator(catalog5, all_profitable, OpportunityCalculator())

        with pytest.raises(ValueError):
            await orchestrator.scan(trade_size=size)
        assert all_profitable.calls == []

    @pytest.mark.asyncio
    async def test_empty_catalog(self, calculator: OpportunityCalculator) -> None:
        orchestrator = ScanOrchestrator(StaticCatalog([]), MockQuoteSource(), calculator)

        report = await orchestrator.scan()

        assert report.total_assets == 0
        assert report.opportunities == []

    @pytest.mark.asyncio
    async def test_metrics_recorded(
        self, catalog5: StaticCatalog, calculator: OpportunityCalculator, metrics: MetricsCollector
    ) -> None:
        orchestrator = ScanOrchestrator(catalog5, mixed_source(), calculator, metrics=metrics)

        await orchestrator.scan()

        assert metrics.get_counter("scans") == 1
        assert metrics.get_counter("assets_failed") == 2
        assert metrics.get_latency_stats("asset_scan").count == 3
        assert metrics.scan_stats.best_profit_asset == "SOL"


class TestSingleAsset:
    """Tests for scan_asset and find_asset."""

    @pytest.mark.asyncio
    async def test_scan_asset(self, catalog5: StaticCatalog, calculator: OpportunityCalculator) -> None:
        orchestrator = ScanOrchestrator(catalog5, mixed_source(), calculator)
        sol = orchestrator.find_asset("SOL")
        wif = orchestrator.find_asset("WIF")
        assert sol is not None and wif is not None

        opportunity = await orchestrator.scan_asset(sol)

        assert opportunity is not None
        assert opportunity.sell_venue == "Jupiter"
        assert await orchestrator.scan_asset(wif) is None

    def test_find_asset(self, catalog5: StaticCatalog, calculator: OpportunityCalculator) -> None:
        orchestrator = ScanOrchestrator(catalog5, MockQuoteSource(), calculator)
        bonk = DEFAULT_ASSETS[1]

        assert orchestrator.find_asset("bonk") == bonk
        assert orchestrator.find_asset(bonk.mint or "") == bonk
        assert orchestrator.find_asset("NOPE") is None


class TestContinuousScan:
    """Tests for start_continuous and ScanHandle."""

    @pytest.mark.asyncio
    async def test_initial_scan_is_immediate(
        self, catalog5: StaticCatalog, all_profitable: MockQuoteSource, calculator: OpportunityCalculator
    ) -> None:
        orchestrator = ScanOrchestrator(catalog5, all_profitable, calculator)
        delivered = asyncio.Event()

        handle = orchestrator.start_continuous(lambda report: delivered.set(), interval=60)
        await asyncio.wait_for(delivered.wait(), timeout=1.0)
        handle.stop()
        await handle.wait_idle()

        assert handle.scans_started == 1
        assert not handle.running

    @pytest.mark.asyncio
    async def test_repeats_on_interval(
        self, catalog5: StaticCatalog, all_profitable: MockQuoteSource, calculator: OpportunityCalculator
    ) -> None:
        orchestrator = ScanOrchestrator(catalog5, all_profitable, calculator)
        reports: list[ScanReport] = []

        async def on_report(report: ScanReport) -> None:
            await asyncio.sleep(0)
            reports.append(report)

        handle = orchestrator.start_continuous(on_report, interval=0.02)
        for _ in range(100):
            if len(reports) >= 3:
                break
            await asyncio.sleep(0.02)
        handle.stop()
        await handle.wait_idle()

        assert len(reports) >= 3
        assert len(reports) == handle.scans_started
        assert all(r.successful_scans == 5 for r in reports)

    @pytest.mark.asyncio
    async def test_stop_keeps_in_flight_scan(
        self, catalog5: StaticCatalog, calculator: OpportunityCalculator
    ) -> None:
        """Stopping cancels the timer but the started scan still reports."""
        source = MockQuoteSource(
            quotes={a.symbol: profitable() for a in DEFAULT_ASSETS},
            default_delay=0.1,
        )
        orchestrator = ScanOrchestrator(catalog5, source, calculator)
        reports: list[ScanReport] = []

        handle = orchestrator.start_continuous(reports.append, interval=60)
        await asyncio.sleep(0.01)
        handle.stop()

        assert not handle.running
        assert handle.in_flight == 1

        await handle.wait_idle()

        assert len(reports) == 1
        assert handle.in_flight == 0

    @pytest.mark.asyncio
    async def test_callback_error_does_not_stop_loop(
        self, catalog5: StaticCatalog, all_profitable: MockQuoteSource, calculator: OpportunityCalculator
    ) -> None:
        orchestrator = ScanOrchestrator(catalog5, all_profitable, calculator)
        calls: list[int] = []

        def on_report(report: ScanReport) -> None:
            calls.append(report.total_assets)
            raise RuntimeError("display crashed")

        handle = orchestrator.start_continuous(on_report, interval=0.02)
        for _ in range(100):
            if len(calls) >= 2:
                break
            await asyncio.sleep(0.02)
        handle.stop()
        await handle.wait_idle()

        assert len(calls) >= 2

    @pytest.mark.asyncio
    async def test_failed_scan_keeps_timer(self, calculator: OpportunityCalculator) -> None:
        orchestrator = ScanOrchestrator(BrokenCatalog(), MockQuoteSource(), calculator)
        reports: list[ScanReport] = []

        handle = orchestrator.start_continuous(reports.append, interval=0.02)
        await asyncio.sleep(0.1)

        assert handle.running
        handle.stop()
        await handle.wait_idle()

        assert reports == []
        assert handle.scans_started >= 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("interval", "size"), [(0, 1000), (-1, 1000), (1, 0)])
    async def test_rejects_invalid_arguments(
        self, catalog5: StaticCatalog, calculator: OpportunityCalculator, interval: float, size: float
    ) -> None:
        orchestrator = ScanOrchestrator(catalog5, MockQuoteSource(), calculator)

        with pytest.raises(ValueError):
            orchestrator.start_continuous(lambda r: None, interval=interval, trade_size=size)
