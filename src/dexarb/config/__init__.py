"""Configuration module for the arbitrage scanner."""

from dexarb.config.constants import (
    DEFAULT_GAS_COST,
    DEFAULT_MIN_PROFIT_PERCENT,
    DEFAULT_TRADE_SIZE,
    LIQUIDITY_MULTIPLIER,
    USDC_MINT,
)
from dexarb.config.settings import Settings, get_settings


__all__ = [
    "Settings",
    "get_settings",
    "DEFAULT_GAS_COST",
    "DEFAULT_MIN_PROFIT_PERCENT",
    "DEFAULT_TRADE_SIZE",
    "LIQUIDITY_MULTIPLIER",
    "USDC_MINT",
]
