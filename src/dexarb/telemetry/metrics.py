"""
Metrics collection for scan monitoring.

Tracks scan latencies, counters and opportunity statistics
in memory. Nothing is persisted across restarts.
"""

import time
from collections import deque
from dataclasses import dataclass
from typing import Any

from dexarb.config.constants import METRICS_WINDOW_SIZE
from dexarb.core.types import AssetScanResult, ScanReport


@dataclass
class LatencyStats:
    """Aggregated latency statistics in milliseconds."""

    min_ms: int = 0
    max_ms: int = 0
    avg_ms: float = 0.0
    p50_ms: int = 0
    p95_ms: int = 0
    p99_ms: int = 0
    count: int = 0


@dataclass
class ScanStats:
    """Running statistics over all completed scans."""

    best_profit_pct: float = 0.0
    best_profit_asset: str | None = None
    last_scan_at_ms: int = 0
    last_opportunity_count: int = 0


class MetricsCollector:
    """
    Collects and aggregates scanner metrics.

    Counters: scans, assets_succeeded, assets_failed,
    venue_errors, opportunities_found.
    Latency windows: asset_scan, scan.
    """

    def __init__(self, latency_window_size: int = METRICS_WINDOW_SIZE) -> None:
        """
        Initialize metrics collector.

        Args:
            latency_window_size: Number of samples kept per latency window.
        """
        self._window_size = latency_window_size
        self._latencies: dict[str, deque[int]] = {}
        self._counters: dict[str, int] = {}
        self._scan_stats = ScanStats()
        self._start_time = time.time()

    def record_latency(self, name: str, latency_ms: int) -> None:
        """
        Record a latency measurement.

        Args:
            name: Metric name (e.g., "asset_scan", "scan").
            latency_ms: Latency in milliseconds.
        """
        if name not in self._latencies:
            self._latencies[name] = deque(maxlen=self._window_size)
        self._latencies[name].append(latency_ms)

    def increment_counter(self, name: str, value: int = 1) -> None:
        self._counters[name] = self._counters.get(name, 0) + value

    def get_counter(self, name: str) -> int:
        return self._counters.get(name, 0)

    def record_asset(self, result: AssetScanResult) -> None:
        """Record the outcome of one asset scan. Only evaluated assets feed the latency window."""
        if result.is_success:
            self.record_latency("asset_scan", result.duration_ms)
        if result.venue_errors:
            self.increment_counter("venue_errors", len(result.venue_errors))

    def record_scan(self, report: ScanReport) -> None:
        """
        Record a completed scan.

        Args:
            report: Aggregate scan report.
        """
        self.increment_counter("scans")
        self.increment_counter("assets_succeeded", report.successful_scans)
        self.increment_counter("assets_failed", report.failed_scans)
        self.increment_counter("opportunities_found", len(report.opportunities))
        self.record_latency("scan", report.duration_ms)

        stats = self._scan_stats
        stats.last_scan_at_ms = report.completed_at_ms
        stats.last_opportunity_count = len(report.opportunities)

        for opp in report.opportunities:
            if opp.estimated_profit_percent > stats.best_profit_pct:
                stats.best_profit_pct = opp.estimated_profit_percent
                stats.best_profit_asset = opp.asset_symbol

    def get_latency_stats(self, name: str) -> LatencyStats:
        """
        Get latency statistics for a metric.

        Returns:
            LatencyStats with aggregated values, zeroed if no samples.
        """
        samples = self._latencies.get(name)
        if not samples:
            return LatencyStats()

        sorted_samples = sorted(samples)
        n = len(sorted_samples)

        return LatencyStats(
            min_ms=sorted_samples[0],
            max_ms=sorted_samples[-1],
            avg_ms=sum(sorted_samples) / n,
            p50_ms=sorted_samples[n // 2],
            p95_ms=sorted_samples[int(n * 0.95)],
            p99_ms=sorted_samples[int(n * 0.99)] if n > 1 else sorted_samples[-1],
            count=n,
        )

    def get_all_latency_stats(self) -> dict[str, LatencyStats]:
        return {name: self.get_latency_stats(name) for name in self._latencies}

    @property
    def scan_stats(self) -> ScanStats:
        return self._scan_stats

    @property
    def uptime_seconds(self) -> float:
        return time.time() - self._start_time

    def to_dict(self) -> dict[str, Any]:
        """
        Export all metrics as a dict.

        Returns:
            JSON-serializable snapshot.
        """
        stats = self._scan_stats
        return {
            "uptimeSeconds": self.uptime_seconds,
            "counters": dict(self._counters),
            "latencies": {
                name: {
                    "min": s.min_ms,
                    "max": s.max_ms,
                    "avg": s.avg_ms,
                    "p50": s.p50_ms,
                    "p99": s.p99_ms,
                    "count": s.count,
                }
                for name, s in self.get_all_latency_stats().items()
            },
            "scans": {
                "bestProfitPercent": stats.best_profit_pct,
                "bestProfitAsset": stats.best_profit_asset,
                "lastScanAt": stats.last_scan_at_ms,
                "lastOpportunityCount": stats.last_opportunity_count,
            },
        }
