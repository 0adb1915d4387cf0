"""
Entry point for the DEX arbitrage scanner.

Usage:
    python -m dexarb scan [--trade-size 1000] [--min-profit 0.1] [--json]
    python -m dexarb watch [--interval 30]
    python -m dexarb serve [--host 0.0.0.0] [--port 8000]
    dexarb ...  # if installed via pip
"""

import argparse
import asyncio
import logging
import signal
import sys
from collections.abc import Coroutine
from typing import Any

import orjson


# Try to use uvloop for better performance
try:
    import uvloop

    UVLOOP_AVAILABLE = True
except ImportError:
    UVLOOP_AVAILABLE = False


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dexarb",
        description="Scan Solana token prices across venues for arbitrage opportunities.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="Run a single scan and print the report")
    scan.add_argument("--trade-size", type=float, default=None, help="Notional trade size")
    scan.add_argument("--min-profit", type=float, default=None, help="Minimum net profit %%")
    scan.add_argument("--json", action="store_true", help="Print the JSON wire shape")

    watch = sub.add_parser("watch", help="Scan continuously and redraw the report")
    watch.add_argument("--interval", type=float, default=None, help="Seconds between scans")
    watch.add_argument("--trade-size", type=float, default=None, help="Notional trade size")
    watch.add_argument("--min-profit", type=float, default=None, help="Minimum net profit %%")

    serve = sub.add_parser("serve", help="Run the dashboard HTTP API")
    serve.add_argument("--host", default=None, help="Bind address")
    serve.add_argument("--port", type=int, default=None, help="Bind port")

    return parser


def _run(coro: Coroutine[Any, Any, int], use_uvloop: bool) -> int:
    loop_factory = uvloop.new_event_loop if use_uvloop and UVLOOP_AVAILABLE else None
    with asyncio.Runner(loop_factory=loop_factory) as runner:
        return runner.run(coro)


async def run_scan(trade_size: float, min_profit: float, as_json: bool) -> int:
    """Run one scan and print it."""
    from dexarb.config.settings import get_settings
    from dexarb.dashboard.server import build_state
    from dexarb.telemetry.reporter import CLIReporter

    state = build_state(get_settings())
    try:
        report = await state.orchestrator.scan(trade_size=trade_size, min_profit_percent=min_profit)
    finally:
        if state.http:
            await state.http.close()

    if as_json:
        sys.stdout.write(orjson.dumps(report.to_dict(), option=orjson.OPT_INDENT_2).decode())
        sys.stdout.write("\n")
    else:
        CLIReporter(trade_size=trade_size).display(report)
    return 0


async def run_watch(interval: float, trade_size: float, min_profit: float) -> int:
    """Scan continuously until interrupted."""
    from dexarb.config.settings import get_settings
    from dexarb.core.types import ScanReport
    from dexarb.dashboard.server import build_state
    from dexarb.telemetry.reporter import CLIReporter, SimpleReporter

    logger = logging.getLogger("dexarb.watch")
    state = build_state(get_settings())
    reporter = CLIReporter(trade_size=trade_size)
    status = SimpleReporter(state.metrics)

    def on_report(report: ScanReport) -> None:
        reporter.display(report, clear=True)
        logger.info(status.status_line())

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Signal handlers are unavailable on Windows event loops
            pass

    handle = state.orchestrator.start_continuous(
        on_report, interval=interval, trade_size=trade_size, min_profit_percent=min_profit
    )
    try:
        await stop_event.wait()
    finally:
        handle.stop()
        await handle.wait_idle()
        if state.http:
            await state.http.close()

    print("\nStopped.")
    return 0


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success).
    """
    from dexarb.config.settings import get_settings
    from dexarb.market.catalog import CatalogError
    from dexarb.telemetry.logger import setup_logging

    args = _build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except Exception as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    if args.command == "serve":
        from dexarb.dashboard.server import main as serve

        serve(host=args.host, port=args.port)
        return 0

    queued_logging = setup_logging(
        settings.log_level, settings.log_file, secrets=[settings.rpc_api_key or ""]
    )
    trade_size = args.trade_size if args.trade_size is not None else settings.trade_size
    min_profit = args.min_profit if args.min_profit is not None else settings.min_profit_percent

    try:
        if args.command == "scan":
            coro = run_scan(trade_size, min_profit, args.json)
        else:
            interval = args.interval if args.interval is not None else settings.scan_interval_seconds
            coro = run_watch(interval, trade_size, min_profit)
        return _run(coro, settings.use_uvloop)

    except CatalogError as e:
        print(f"Catalog error: {e}", file=sys.stderr)
        return 1

    except ValueError as e:
        print(f"Invalid argument: {e}", file=sys.stderr)
        return 2

    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 0

    finally:
        queued_logging.stop()


if __name__ == "__main__":
    sys.exit(main())
