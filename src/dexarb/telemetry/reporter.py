"""
Terminal reporters for scan results.

CLIReporter renders a boxed table of one scan's opportunities;
SimpleReporter produces single-line status updates for logs.
"""

import sys
from typing import TextIO

from dexarb import __version__
from dexarb.core.types import Opportunity, ScanReport
from dexarb.telemetry.metrics import MetricsCollector
from dexarb.utils.math import format_profit, format_usd
from dexarb.utils.time import format_duration_ms, format_timestamp_ms


class CLIReporter:
    """
    Boxed terminal table for a ScanReport.

    Displays a header with scan counters followed by one row
    per opportunity, most profitable first.
    """

    # Box drawing characters
    BOX_TL = "\u2554"  # ╔
    BOX_TR = "\u2557"  # ╗
    BOX_BL = "\u255a"  # ╚
    BOX_BR = "\u255d"  # ╝
    BOX_H = "\u2550"  # ═
    BOX_V = "\u2551"  # ║
    BOX_LT = "\u2560"  # ╠
    BOX_RT = "\u2563"  # ╣
    THIN_V = "\u2502"  # │

    def __init__(
        self,
        width: int = 96,
        output: TextIO | None = None,
        trade_size: float | None = None,
    ) -> None:
        """
        Initialize CLI reporter.

        Args:
            width: Table width in characters.
            output: Output stream (default: stdout).
            trade_size: Notional size shown in the header.
        """
        self._width = width
        self._output = output or sys.stdout
        self._trade_size = trade_size

    def _pad(self, text: str, width: int) -> str:
        return text.ljust(width)[:width]

    def _line(self, content: str) -> str:
        return f"{self.BOX_V}{self._pad(content, self._width - 2)}{self.BOX_V}"

    def _divider(self) -> str:
        return f"{self.BOX_LT}{self.BOX_H * (self._width - 2)}{self.BOX_RT}"

    def _row(self, opp: Opportunity) -> str:
        sep = self.THIN_V
        return (
            f"  {opp.asset_symbol:<6}{sep} "
            f"{opp.buy_venue:<9}{format_usd(opp.buy_price):>13} {sep} "
            f"{opp.sell_venue:<9}{format_usd(opp.sell_price):>13} {sep} "
            f"{opp.spread_percent:>6.3f}% {sep} "
            f"{format_usd(opp.estimated_profit):>10} {format_profit(opp.estimated_profit_percent):>10} {sep} "
            f"{opp.confidence.value:<6}"
        )

    def render(self, report: ScanReport) -> str:
        """
        Render a scan report.

        Returns:
            Formatted table string.
        """
        lines = [f"{self.BOX_TL}{self.BOX_H * (self._width - 2)}{self.BOX_TR}"]

        header = f"  DEX ARBITRAGE SCANNER v{__version__}"
        if self._trade_size is not None:
            header += f" | Trade size: {format_usd(self._trade_size)}"
        if report.completed_at_ms:
            header += f" | {format_timestamp_ms(report.completed_at_ms, include_date=True)} UTC"
        lines.append(self._line(header))
        lines.append(self._divider())

        status = (
            f"  Scanned: {report.total_assets}  |  OK: {report.successful_scans}  |  "
            f"Failed: {report.failed_scans}  |  Duration: {format_duration_ms(report.duration_ms)}"
        )
        lines.append(self._line(status))
        lines.append(self._divider())

        if report.error is not None:
            lines.append(self._line(f"  SCAN FAILED: {report.error}"))
        elif not report.opportunities:
            lines.append(self._line("  No opportunities above threshold"))
        else:
            sep = self.THIN_V
            columns = (
                f"  {'ASSET':<6}{sep} {'BUY':<22} {sep} {'SELL':<22} {sep} "
                f"{'SPREAD':>7} {sep} {'NET PROFIT':>21} {sep} CONF"
            )
            lines.append(self._line(columns))
            for opp in report.opportunities:
                lines.append(self._line(self._row(opp)))

        lines.append(f"{self.BOX_BL}{self.BOX_H * (self._width - 2)}{self.BOX_BR}")
        return "\n".join(lines)

    def display(self, report: ScanReport, clear: bool = False) -> None:
        """Write a rendered report to the output stream."""
        if clear:
            # Clear screen and move cursor to top
            self._output.write("\033[2J\033[H")
        self._output.write(self.render(report))
        self._output.write("\n")
        self._output.flush()


class SimpleReporter:
    """Single-line status updates for logging."""

    def __init__(self, metrics: MetricsCollector) -> None:
        self._metrics = metrics

    def _format_uptime(self, seconds: float) -> str:
        hours, remainder = divmod(int(seconds), 3600)
        minutes, secs = divmod(remainder, 60)
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"

    def status_line(self) -> str:
        """Get a single-line status update."""
        m = self._metrics
        scan = m.get_latency_stats("scan")
        best = m.scan_stats

        best_str = (
            f"{best.best_profit_asset} {format_profit(best.best_profit_pct)}"
            if best.best_profit_asset
            else "---"
        )
        avg_str = f"{scan.avg_ms:.0f}ms" if scan.count else "---"

        return (
            f"Up: {self._format_uptime(m.uptime_seconds)} | "
            f"Scans: {m.get_counter('scans')} | "
            f"Assets: {m.get_counter('assets_succeeded')}/{m.get_counter('assets_failed')} | "
            f"Opp: {m.get_counter('opportunities_found')} | "
            f"Best: {best_str} | "
            f"Avg scan: {avg_str}"
        )
