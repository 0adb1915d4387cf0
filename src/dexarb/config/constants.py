"""
Scanner constants and configuration values.

This module contains all hardcoded values used throughout the scanner.
Values are organized by category for easy maintenance and auditing.
"""

from typing import Final


# =============================================================================
# External API Endpoints
# =============================================================================

COINGECKO_API_URL: Final[str] = "https://api.coingecko.com/api/v3"
JUPITER_PRICE_API_URL: Final[str] = "https://api.jup.ag/price/v2"
SOLANA_RPC_URL: Final[str] = "https://api.mainnet-beta.solana.com"

# API Endpoints
ENDPOINT_SIMPLE_PRICE: Final[str] = "/simple/price"
ENDPOINT_MARKET_CHART: Final[str] = "/coins/{coin_id}/market_chart"

# Quote currency for every tracked asset (USDC)
USDC_MINT: Final[str] = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
QUOTE_CURRENCY: Final[str] = "usd"


# =============================================================================
# Solana Activity Feed
# =============================================================================

# Raydium AMM v4 program; its signatures stand in for recent DEX activity
RAYDIUM_AMM_PROGRAM_ID: Final[str] = "675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8"

LAMPORTS_PER_SOL: Final[int] = 1_000_000_000

TRANSACTION_SIGNATURE_LIMIT: Final[int] = 10
TRANSACTION_PARSE_LIMIT: Final[int] = 8

# At least this many instructions without a leading transfer reads as a swap
SWAP_MIN_INSTRUCTIONS: Final[int] = 4


# =============================================================================
# Venues
# =============================================================================

VENUE_COINGECKO: Final[str] = "CoinGecko"
VENUE_JUPITER: Final[str] = "Jupiter"
VENUE_SYNTHETIC: Final[str] = "Market"

# Aggregators publish no depth, so they are quoted with a placeholder
AGGREGATOR_LIQUIDITY: Final[float] = 1_000_000.0
AGGREGATOR_FEE_RATE: Final[float] = 0.003

# Synthetic venue (demo data only)
SYNTHETIC_LIQUIDITY: Final[float] = 800_000.0
SYNTHETIC_FEE_RATE: Final[float] = 0.0025
SYNTHETIC_MIN_VARIATION: Final[float] = 0.001  # 0.1%
SYNTHETIC_MAX_VARIATION: Final[float] = 0.005  # 0.5%


# =============================================================================
# Opportunity Calculation
# =============================================================================

# Notional trade size in quote currency
DEFAULT_TRADE_SIZE: Final[float] = 1000.0

# Minimum net profit to report (0.1%)
DEFAULT_MIN_PROFIT_PERCENT: Final[float] = 0.1

# Pool must hold at least this multiple of the trade size
LIQUIDITY_MULTIPLIER: Final[float] = 2.0

# Estimated cost of the buy and sell transactions together
DEFAULT_GAS_COST: Final[float] = 0.50

# Blended fee used when repricing for a different trade size (0.3%)
BLENDED_FEE_RATE: Final[float] = 0.003


# =============================================================================
# Confidence Scoring
# =============================================================================

HIGH_CONFIDENCE_SPREAD_PCT: Final[float] = 1.0
HIGH_CONFIDENCE_LIQUIDITY_RATIO: Final[float] = 10.0
MEDIUM_CONFIDENCE_SPREAD_PCT: Final[float] = 0.5
MEDIUM_CONFIDENCE_LIQUIDITY_RATIO: Final[float] = 5.0


# =============================================================================
# Scanning
# =============================================================================

DEFAULT_SCAN_INTERVAL: Final[float] = 30.0  # seconds
DEFAULT_ASSET_TIMEOUT: Final[float] = 10.0  # seconds
DEFAULT_HTTP_TIMEOUT: Final[float] = 8.0  # seconds


# =============================================================================
# Rate Limiting
# =============================================================================

# CoinGecko public tier allows roughly 30 calls/minute
DEFAULT_REQUESTS_PER_SECOND: Final[int] = 5


# =============================================================================
# Logging & Telemetry
# =============================================================================

LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Maximum log queue size
MAX_LOG_QUEUE_SIZE: Final[int] = 10_000

# Samples kept per latency metric
METRICS_WINDOW_SIZE: Final[int] = 500
