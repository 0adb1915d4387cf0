#!/usr/bin/env python3
"""
Latency Benchmark Script.

Measures the in-process cost of opportunity evaluation and of a full
scan cycle over a simulated quote source. Network time is excluded.
"""

import asyncio
import random
import statistics
import sys
import time
from pathlib import Path

# Add src to path for direct execution
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dexarb.core.scanner import ScanOrchestrator
from dexarb.core.types import AssetInfo, Quote, QuoteBatch
from dexarb.market.catalog import AssetCatalog
from dexarb.strategy.calculator import OpportunityCalculator
from dexarb.utils.time import get_timestamp_ms


def _stats(latencies_us: list[float]) -> dict[str, float]:
    ordered = sorted(latencies_us)
    return {
        "min": ordered[0],
        "max": ordered[-1],
        "avg": statistics.mean(ordered),
        "p50": statistics.median(ordered),
        "p99": ordered[int(len(ordered) * 0.99)],
    }


class SimulatedQuoteSource:
    """Three venues around a random mid price, answered without I/O."""

    def __init__(self, seed: int = 7) -> None:
        self._rng = random.Random(seed)

    async def fetch_quotes(self, asset: AssetInfo) -> QuoteBatch:
        mid = self._rng.uniform(0.5, 200.0)
        now = get_timestamp_ms()
        return QuoteBatch(
            quotes=tuple(
                Quote(
                    venue=venue,
                    price=mid * (1 + self._rng.uniform(-0.01, 0.01)),
                    liquidity=1_000_000.0,
                    fee=0.003,
                    observed_at_ms=now,
                )
                for venue in ("CoinGecko", "Jupiter", "Market")
            )
        )


def benchmark_evaluate(iterations: int = 10000) -> dict[str, float]:
    """Benchmark a single calculator evaluation."""
    calculator = OpportunityCalculator()
    source = SimulatedQuoteSource()
    asset = AssetCatalog().assets()[0]
    batches = [asyncio.run(source.fetch_quotes(asset)) for _ in range(100)]

    latencies: list[float] = []
    for i in range(iterations):
        quotes = batches[i % len(batches)].quotes
        start = time.perf_counter_ns()
        calculator.evaluate(asset, quotes, trade_size=1000.0, min_profit_percent=-100.0)
        latencies.append((time.perf_counter_ns() - start) / 1000)

    return _stats(latencies)


async def _benchmark_scan(iterations: int) -> dict[str, float]:
    orchestrator = ScanOrchestrator(AssetCatalog(), SimulatedQuoteSource(), OpportunityCalculator())

    latencies: list[float] = []
    for _ in range(iterations):
        start = time.perf_counter_ns()
        await orchestrator.scan(trade_size=1000.0, min_profit_percent=0.0)
        latencies.append((time.perf_counter_ns() - start) / 1000)

    return _stats(latencies)


def benchmark_scan(iterations: int = 1000) -> dict[str, float]:
    """Benchmark a full scan cycle over the built-in catalog."""
    return asyncio.run(_benchmark_scan(iterations))


def format_stats(stats: dict[str, float]) -> str:
    """Format stats for display."""
    return ", ".join(f"{key}={stats[key]:.1f}us" for key in ("min", "avg", "p50", "p99", "max"))


def main() -> int:
    """Run all benchmarks."""
    print("=" * 70)
    print("  LATENCY BENCHMARK")
    print("=" * 70)
    print()

    print("Warming up...")
    benchmark_evaluate(100)
    benchmark_scan(10)
    print()

    print("1. Opportunity Evaluation (10,000 iterations)")
    print(f"   {format_stats(benchmark_evaluate(10000))}")
    print()

    print("2. Full Scan Cycle (1,000 iterations)")
    print(f"   {format_stats(benchmark_scan(1000))}")
    print()

    return 0


if __name__ == "__main__":
    sys.exit(main())
