"""
FastAPI server for the DEX dashboard backend.

Exposes the scan orchestrator and price/network collaborators as a
JSON API. Every collaborator is built once in the lifespan hook and
shared by all requests.
"""

import logging
import math
import random
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from dexarb import __version__
from dexarb.config.settings import Settings, get_settings
from dexarb.core.scanner import ScanOrchestrator
from dexarb.core.types import Opportunity, ScanReport
from dexarb.exchange.aggregator import (
    VenueQuoteSource,
    average_price,
    best_price,
    price_spread_percent,
)
from dexarb.exchange.client import HttpClient
from dexarb.exchange.rate_limiter import RateLimiter
from dexarb.exchange.venues import (
    CoinGeckoVenue,
    JupiterVenue,
    SyntheticVenue,
    VenueUnavailableError,
)
from dexarb.market.catalog import AssetCatalog
from dexarb.network.solana import RpcError, SolanaRpcClient
from dexarb.strategy.calculator import OpportunityCalculator
from dexarb.telemetry.metrics import MetricsCollector
from dexarb.utils.math import is_positive_finite
from dexarb.utils.time import get_timestamp_ms


logger = logging.getLogger(__name__)


@dataclass
class AppState:
    """Collaborators shared by all request handlers."""

    settings: Settings
    orchestrator: ScanOrchestrator
    quote_source: VenueQuoteSource
    metrics: MetricsCollector
    history: CoinGeckoVenue | None = None
    rpc: SolanaRpcClient | None = None
    http: HttpClient | None = None
    venue_names: list[str] = field(default_factory=list)


class RepriceRequest(BaseModel):
    """Body of POST /api/reprice."""

    opportunity: dict[str, Any]
    trade_size: float = Field(alias="tradeSize", gt=0, allow_inf_nan=False)

    model_config = {"populate_by_name": True}


def build_state(settings: Settings) -> AppState:
    """
    Wire the production collaborators.

    One HttpClient is shared by every venue and the RPC client.

    Raises:
        CatalogError: If a configured catalog file cannot be read.
    """
    catalog = AssetCatalog.load(settings.catalog_file)
    http = HttpClient(
        timeout=settings.http_timeout_seconds,
        rate_limiter=RateLimiter(settings.requests_per_second),
    )

    coingecko = CoinGeckoVenue(http, catalog.coingecko_ids, base_url=settings.coingecko_api_url)
    jupiter = JupiterVenue(
        http, url=settings.jupiter_price_api_url, vs_token=settings.quote_mint
    )

    synthetic = None
    if settings.enable_synthetic_venue:
        logger.warning("Synthetic venue enabled: reported opportunities are demo data")
        synthetic = SyntheticVenue(random.Random())

    quote_source = VenueQuoteSource([coingecko, jupiter], synthetic=synthetic)
    metrics = MetricsCollector()
    orchestrator = ScanOrchestrator(
        catalog,
        quote_source,
        OpportunityCalculator(gas_cost=settings.gas_cost),
        asset_timeout=settings.asset_timeout_seconds,
        metrics=metrics,
    )

    return AppState(
        settings=settings,
        orchestrator=orchestrator,
        quote_source=quote_source,
        metrics=metrics,
        history=coingecko,
        rpc=SolanaRpcClient(http, settings.solana_rpc_url.get_secret_value()),
        http=http,
        venue_names=quote_source.venue_names,
    )


def create_app(settings: Settings | None = None, state: AppState | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Settings for production wiring; loaded from the
            environment at startup if omitted.
        state: Pre-built collaborators, used instead of production wiring.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app_state = state or build_state(settings or get_settings())
        app.state.dexarb = app_state
        logger.info(f"Dashboard API ready: venues={app_state.venue_names}")
        try:
            yield
        finally:
            if app_state.http:
                await app_state.http.close()

    app = FastAPI(title="DEX Arbitrage Scanner", version=__version__, lifespan=lifespan)
    app.get("/api/opportunities")(get_opportunities)
    app.get("/api/opportunities/{asset}")(get_asset_opportunity)
    app.post("/api/reprice")(reprice)
    app.get("/api/prices")(get_prices)
    app.get("/api/prices/history")(get_price_history)
    app.get("/api/network")(get_network)
    app.get("/api/transactions")(get_transactions)
    app.get("/api/status")(get_status)
    return app


def _state(request: Request) -> AppState:
    state: AppState = request.app.state.dexarb
    return state


def _parse_positive(raw: str | None, default: float) -> float:
    """Parse a query value, falling back to default when invalid or non-positive."""
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if is_positive_finite(value) else default


def _parse_threshold(raw: str | None, default: float) -> float:
    """Parse a profit threshold; negative values are allowed, zero and non-finite fall back."""
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if math.isfinite(value) and value != 0 else default


async def get_opportunities(
    request: Request,
    trade_size: str | None = Query(default=None, alias="tradeSize"),
    min_profit: str | None = Query(default=None, alias="minProfit"),
) -> JSONResponse:
    state = _state(request)
    size = _parse_positive(trade_size, state.settings.trade_size)
    threshold = _parse_threshold(min_profit, state.settings.min_profit_percent)

    try:
        report = await state.orchestrator.scan(trade_size=size, min_profit_percent=threshold)
    except Exception as e:
        logger.error(f"Opportunity scan failed: {type(e).__name__}: {e}")
        failed = ScanReport.failed(str(e), get_timestamp_ms())
        return JSONResponse(status_code=500, content=failed.to_dict())

    return JSONResponse(content=report.to_dict())


async def get_asset_opportunity(
    request: Request,
    asset: str,
    trade_size: str | None = Query(default=None, alias="tradeSize"),
    min_profit: str | None = Query(default=None, alias="minProfit"),
) -> dict[str, Any]:
    state = _state(request)
    info = state.orchestrator.find_asset(asset)
    if info is None:
        raise HTTPException(status_code=404, detail=f"Unknown asset: {asset}")

    opportunity = await state.orchestrator.scan_asset(
        info,
        trade_size=_parse_positive(trade_size, state.settings.trade_size),
        min_profit_percent=_parse_threshold(min_profit, state.settings.min_profit_percent),
    )
    return {
        "success": True,
        "asset": info.symbol,
        "opportunity": opportunity.to_dict() if opportunity else None,
        "timestamp": get_timestamp_ms(),
    }


async def reprice(request: Request, body: RepriceRequest) -> dict[str, Any]:
    state = _state(request)
    try:
        opportunity = Opportunity.from_dict(body.opportunity)
    except (KeyError, TypeError, ValueError) as e:
        raise HTTPException(status_code=422, detail=f"Invalid opportunity: {e}") from e

    result = state.orchestrator.calculator.reprice(opportunity, body.trade_size)
    return result.to_dict()


async def get_prices(request: Request) -> dict[str, Any]:
    state = _state(request)
    batches = await state.quote_source.fetch_many(state.orchestrator.catalog.assets())

    prices: dict[str, Any] = {}
    for mint, batch in batches.items():
        usable = batch.usable_quotes
        best = best_price(usable)
        prices[mint] = {
            "prices": [q.to_dict() for q in batch.quotes],
            "errors": [e.to_dict() for e in batch.errors],
            "bestPrice": best.price if best else None,
            "averagePrice": average_price(usable),
            "spreadPercent": price_spread_percent(usable),
        }

    return {"success": True, "prices": prices, "timestamp": get_timestamp_ms()}


async def get_price_history(
    request: Request,
    asset: str = Query(default="SOL"),
    days: int = Query(default=1, ge=1, le=365),
) -> JSONResponse:
    state = _state(request)
    info = state.orchestrator.find_asset(asset)
    if info is None:
        raise HTTPException(status_code=404, detail=f"Unknown asset: {asset}")
    if state.history is None:
        raise HTTPException(status_code=503, detail="Price history is not configured")

    try:
        chart = await state.history.market_chart(info.coingecko_id, days)
    except VenueUnavailableError as e:
        logger.warning(f"Price history for {info.symbol} failed: {e}")
        return JSONResponse(
            status_code=502,
            content={"error": "Failed to fetch price history", "message": str(e)},
        )

    return JSONResponse(
        content={"asset": info.symbol, "days": days, "points": chart.to_points()}
    )


async def get_network(request: Request) -> JSONResponse:
    state = _state(request)
    if state.rpc is None:
        raise HTTPException(status_code=503, detail="RPC client is not configured")

    try:
        status = await state.rpc.network_status()
        performance = await state.rpc.performance()
    except RpcError as e:
        logger.error(f"Network status failed: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to fetch network status", "message": str(e)},
        )

    return JSONResponse(
        content={
            "slot": status.slot,
            "blockHeight": status.block_height,
            "version": status.version,
            "timestamp": status.timestamp_ms,
            "performance": performance.to_dict() if performance else None,
        }
    )


async def get_transactions(request: Request) -> JSONResponse:
    state = _state(request)
    if state.rpc is None:
        raise HTTPException(status_code=503, detail="RPC client is not configured")

    try:
        transactions = await state.rpc.recent_transactions()
    except RpcError as e:
        logger.error(f"Transaction feed failed: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to fetch transactions", "message": str(e)},
        )

    return JSONResponse(
        content={
            "transactions": [tx.to_dict() for tx in transactions],
            "timestamp": get_timestamp_ms(),
        }
    )


async def get_status(request: Request) -> dict[str, Any]:
    state = _state(request)
    rpc_healthy = await state.rpc.health() if state.rpc is not None else None
    return {
        "success": True,
        "version": __version__,
        "assets": len(state.orchestrator.catalog.assets()),
        "venues": state.venue_names,
        "rpcHealthy": rpc_healthy,
        "metrics": state.metrics.to_dict(),
    }


app = create_app()


def main(host: str | None = None, port: int | None = None) -> None:
    import uvicorn

    from dexarb.telemetry.logger import setup_logging

    settings = get_settings()
    host = host or settings.host
    port = port or settings.port
    queued_logging = setup_logging(
        settings.log_level, settings.log_file, secrets=[settings.rpc_api_key or ""]
    )

    print(
        f"""
╔═══════════════════════════════════════════════════════════════╗
║              DEX ARBITRAGE SCANNER - API                      ║
╚═══════════════════════════════════════════════════════════════╝

API: http://{host}:{port}/api/opportunities
RPC: {settings.redacted_rpc_url}
Press Ctrl+C to stop.
    """
    )
    try:
        uvicorn.run(
            "dexarb.dashboard.server:app",
            host=host,
            port=port,
            reload=False,
            log_level="warning",
        )
    finally:
        queued_logging.stop()


if __name__ == "__main__":
    main()
