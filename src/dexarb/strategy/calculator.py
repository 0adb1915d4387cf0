"""
Cross-venue arbitrage profit calculation.

Evaluates the quotes for one asset and decides whether buying at the
cheapest venue and selling at the most expensive one is profitable
after venue fees, gas and a liquidity gate.
"""

import logging
from collections.abc import Iterable

from dexarb.config.constants import (
    BLENDED_FEE_RATE,
    DEFAULT_GAS_COST,
    DEFAULT_MIN_PROFIT_PERCENT,
    DEFAULT_TRADE_SIZE,
    HIGH_CONFIDENCE_LIQUIDITY_RATIO,
    HIGH_CONFIDENCE_SPREAD_PCT,
    LIQUIDITY_MULTIPLIER,
    MEDIUM_CONFIDENCE_LIQUIDITY_RATIO,
    MEDIUM_CONFIDENCE_SPREAD_PCT,
)
from dexarb.core.types import AssetInfo, Confidence, Opportunity, Quote, RepriceResult
from dexarb.utils.time import get_timestamp_ms


logger = logging.getLogger(__name__)


def confidence_for(
    spread_percent: float,
    buy_liquidity: float,
    sell_liquidity: float,
    trade_size: float,
) -> Confidence:
    """
    Rate an opportunity from its spread and depth.

    Both conditions of a tier must hold; cutoffs are strict.

    Args:
        spread_percent: Price spread percentage.
        buy_liquidity: Liquidity on the buy venue.
        sell_liquidity: Liquidity on the sell venue.
        trade_size: Notional trade size.

    Returns:
        Confidence level.
    """
    liquidity_ratio = min(buy_liquidity, sell_liquidity) / trade_size

    if (
        spread_percent > HIGH_CONFIDENCE_SPREAD_PCT
        and liquidity_ratio > HIGH_CONFIDENCE_LIQUIDITY_RATIO
    ):
        return Confidence.HIGH

    if (
        spread_percent > MEDIUM_CONFIDENCE_SPREAD_PCT
        and liquidity_ratio > MEDIUM_CONFIDENCE_LIQUIDITY_RATIO
    ):
        return Confidence.MEDIUM

    return Confidence.LOW


class OpportunityCalculator:
    """
    Calculates cross-venue arbitrage opportunities.

    Pure and synchronous: no I/O, no shared state, safe to call
    from any number of concurrent scan tasks.
    """

    __slots__ = ("_gas_cost", "_liquidity_multiplier", "_blended_fee_rate")

    def __init__(
        self,
        gas_cost: float = DEFAULT_GAS_COST,
        liquidity_multiplier: float = LIQUIDITY_MULTIPLIER,
        blended_fee_rate: float = BLENDED_FEE_RATE,
    ) -> None:
        """
        Initialize calculator.

        Args:
            gas_cost: Fixed cost subtracted once per round trip.
            liquidity_multiplier: Required depth as a multiple of trade size.
            blended_fee_rate: Fee rate used by `reprice` for both legs.
        """
        self._gas_cost = gas_cost
        self._liquidity_multiplier = liquidity_multiplier
        self._blended_fee_rate = blended_fee_rate

    def evaluate(
        self,
        asset: AssetInfo,
        quotes: Iterable[Quote],
        trade_size: float = DEFAULT_TRADE_SIZE,
        min_profit_percent: float = DEFAULT_MIN_PROFIT_PERCENT,
        gas_cost: float | None = None,
    ) -> Opportunity | None:
        """
        Evaluate quotes for one asset.

        Args:
            asset: Asset the quotes belong to.
            quotes: Venue quotes; may be empty or contain unusable entries.
            trade_size: Notional trade size in quote currency.
            min_profit_percent: Opportunities below this are discarded.
            gas_cost: Override of the configured gas cost.

        Returns:
            Opportunity if profitable above threshold, None otherwise.

        Raises:
            ValueError: If trade_size is not positive.
        """
        if trade_size <= 0:
            raise ValueError(f"Trade size must be positive, got {trade_size}")

        usable = [q for q in quotes if q.is_usable]
        if len(usable) < 2:
            return None

        buy = min(usable, key=lambda q: q.price)
        sell = max(usable, key=lambda q: q.price)

        # One distinct price or one venue: nothing to arbitrage
        if buy is sell or buy.venue == sell.venue or sell.price <= buy.price:
            return None

        min_required_liquidity = trade_size * self._liquidity_multiplier
        if buy.liquidity < min_required_liquidity or sell.liquidity < min_required_liquidity:
            return None

        gas = self._gas_cost if gas_cost is None else gas_cost
        net_profit, profit_percent = self._round_trip(
            trade_size, buy.price, sell.price, buy.fee, sell.fee, gas
        )

        if profit_percent < min_profit_percent:
            return None

        spread = sell.price - buy.price
        spread_percent = (spread / buy.price) * 100.0

        return Opportunity(
            asset_symbol=asset.symbol,
            asset_mint=asset.mint or "",
            asset_name=asset.name,
            buy_venue=buy.venue,
            buy_price=buy.price,
            buy_liquidity=buy.liquidity,
            sell_venue=sell.venue,
            sell_price=sell.price,
            sell_liquidity=sell.liquidity,
            spread=spread,
            spread_percent=spread_percent,
            estimated_profit=net_profit,
            estimated_profit_percent=profit_percent,
            min_liquidity=min(buy.liquidity, sell.liquidity),
            confidence=confidence_for(
                spread_percent, buy.liquidity, sell.liquidity, trade_size
            ),
            computed_at_ms=get_timestamp_ms(),
        )

    def reprice(self, opportunity: Opportunity, trade_size: float) -> RepriceResult:
        """
        Re-project profit for a different trade size.

        Keeps the opportunity's buy and sell prices and applies the
        blended fee rate to both legs plus gas.

        Args:
            opportunity: Previously detected opportunity.
            trade_size: New notional trade size.

        Returns:
            Profit and profit percentage at the new size.

        Raises:
            ValueError: If trade_size is not positive.
        """
        if trade_size <= 0:
            raise ValueError(f"Trade size must be positive, got {trade_size}")

        profit, profit_percent = self._round_trip(
            trade_size,
            opportunity.buy_price,
            opportunity.sell_price,
            self._blended_fee_rate,
            self._blended_fee_rate,
            self._gas_cost,
        )
        return RepriceResult(profit=profit, profit_percent=profit_percent)

    @staticmethod
    def _round_trip(
        trade_size: float,
        buy_price: float,
        sell_price: float,
        buy_fee: float,
        sell_fee: float,
        gas_cost: float,
    ) -> tuple[float, float]:
        """
        Net profit of buying `trade_size` worth and selling it all.

        Returns:
            Tuple of (net_profit, profit_percent).
        """
        token_amount = trade_size / buy_price
        proceeds = token_amount * sell_price
        gross_profit = proceeds - trade_size

        total_fees = trade_size * buy_fee + proceeds * sell_fee + gas_cost
        net_profit = gross_profit - total_fees

        return net_profit, (net_profit / trade_size) * 100.0

    @property
    def gas_cost(self) -> float:
        """Get configured gas cost."""
        return self._gas_cost

    @property
    def liquidity_multiplier(self) -> float:
        """Get required liquidity multiple."""
        return self._liquidity_multiplier
