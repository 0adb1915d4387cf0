"""Telemetry module for logging, metrics, and reporting."""

from dexarb.telemetry.logger import QueuedLogging, setup_logging
from dexarb.telemetry.metrics import LatencyStats, MetricsCollector, ScanStats
from dexarb.telemetry.reporter import CLIReporter, SimpleReporter


__all__ = [
    "CLIReporter",
    "LatencyStats",
    "MetricsCollector",
    "QueuedLogging",
    "ScanStats",
    "SimpleReporter",
    "setup_logging",
]
