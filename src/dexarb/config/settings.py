"""
Application settings with environment variable support.

Uses Pydantic Settings for type-safe configuration with automatic
environment variable loading and validation.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dexarb.config.constants import (
    COINGECKO_API_URL,
    DEFAULT_ASSET_TIMEOUT,
    DEFAULT_GAS_COST,
    DEFAULT_HTTP_TIMEOUT,
    DEFAULT_MIN_PROFIT_PERCENT,
    DEFAULT_REQUESTS_PER_SECOND,
    DEFAULT_SCAN_INTERVAL,
    DEFAULT_TRADE_SIZE,
    JUPITER_PRICE_API_URL,
    SOLANA_RPC_URL,
    USDC_MINT,
)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    The RPC URL may embed an API key, so it is held as a SecretStr.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Data Sources
    # =========================================================================

    coingecko_api_url: str = Field(
        default=COINGECKO_API_URL,
        description="Base URL of the CoinGecko v3 API",
    )

    jupiter_price_api_url: str = Field(
        default=JUPITER_PRICE_API_URL,
        description="Jupiter price API endpoint",
    )

    solana_rpc_url: SecretStr = Field(
        default=SecretStr(SOLANA_RPC_URL),
        description="Solana JSON-RPC endpoint (may contain an API key)",
    )

    quote_mint: str = Field(
        default=USDC_MINT,
        description="Mint of the quote currency every asset is priced in",
    )

    catalog_file: Path | None = Field(
        default=None,
        description="Optional JSON file overriding the built-in asset catalog",
    )

    enable_synthetic_venue: bool = Field(
        default=False,
        description="Add a randomized demo venue next to each real quote",
    )

    # =========================================================================
    # Opportunity Calculation
    # =========================================================================

    trade_size: float = Field(
        default=DEFAULT_TRADE_SIZE,
        gt=0.0,
        description="Notional trade size in quote currency",
    )

    min_profit_percent: float = Field(
        default=DEFAULT_MIN_PROFIT_PERCENT,
        ge=-100.0,
        le=100.0,
        description="Minimum net profit percentage to report (e.g., 0.1 = 0.1%)",
    )

    gas_cost: float = Field(
        default=DEFAULT_GAS_COST,
        ge=0.0,
        description="Fixed cost of the buy and sell transactions",
    )

    # =========================================================================
    # Scanning
    # =========================================================================

    scan_interval_seconds: float = Field(
        default=DEFAULT_SCAN_INTERVAL,
        ge=1.0,
        le=3600.0,
        description="Interval between continuous scans",
    )

    asset_timeout_seconds: float = Field(
        default=DEFAULT_ASSET_TIMEOUT,
        gt=0.0,
        le=120.0,
        description="Upper bound on one asset's fetch and evaluation",
    )

    http_timeout_seconds: float = Field(
        default=DEFAULT_HTTP_TIMEOUT,
        gt=0.0,
        le=60.0,
        description="Total timeout of a single HTTP request",
    )

    requests_per_second: int = Field(
        default=DEFAULT_REQUESTS_PER_SECOND,
        ge=1,
        le=100,
        description="Outbound request rate towards public price APIs",
    )

    # =========================================================================
    # Operation Mode
    # =========================================================================

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional log file; receives DEBUG records regardless of log_level",
    )

    use_uvloop: bool = Field(
        default=True,
        description="Use uvloop for improved async performance",
    )

    host: str = Field(default="0.0.0.0", description="Dashboard bind address")
    port: int = Field(default=8000, ge=1, le=65535, description="Dashboard port")

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("coingecko_api_url", "jupiter_price_api_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs so endpoints can be appended."""
        return v.rstrip("/")

    @field_validator("min_profit_percent", mode="after")
    @classmethod
    def validate_profit_threshold(cls, v: float) -> float:
        """Warn if the threshold lets loss-making opportunities through."""
        if v < 0:
            import warnings

            warnings.warn(
                f"Profit threshold {v}% is negative, loss-making spreads will be reported",
                stacklevel=2,
            )
        return v

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def redacted_rpc_url(self) -> str:
        """RPC URL with any api-key query parameter removed."""
        url = self.solana_rpc_url.get_secret_value()
        return url.split("?api-key=", 1)[0]

    @property
    def rpc_api_key(self) -> str | None:
        """API key embedded in the RPC URL, if any."""
        _, _, key = self.solana_rpc_url.get_secret_value().partition("?api-key=")
        return key.split("&", 1)[0] or None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are loaded only once.
    Clear cache with `get_settings.cache_clear()` if needed.
    """
    return Settings()
