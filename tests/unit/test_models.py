"""
Unit tests for wire types, response models and settings.
"""

import pytest
from pydantic import SecretStr, ValidationError

from dexarb.config.settings import Settings
from dexarb.core.types import Confidence, Opportunity, PerformanceSample, Quote, ScanReport
from dexarb.exchange.models import (
    CoinGeckoPrice,
    JupiterPriceResponse,
    PerformanceSampleData,
    RpcResponse,
)


OPPORTUNITY_WIRE = {
    "assetSymbol": "SOL",
    "assetMint": "So11111111111111111111111111111111111111112",
    "assetName": "Solana",
    "buyVenue": "CoinGecko",
    "buyPrice": 100.0,
    "buyLiquidity": 1_000_000.0,
    "sellVenue": "Jupiter",
    "sellPrice": 102.0,
    "sellLiquidity": 800_000.0,
    "spread": 2.0,
    "spreadPercent": 2.0,
    "estimatedProfit": 13.95,
    "estimatedProfitPercent": 1.395,
    "minLiquidity": 800_000.0,
    "confidence": "high",
    "computedAt": 1704067200000,
}


class TestWireTypes:
    """Tests for JSON shapes of core types."""

    def test_opportunity_wire_shape(self) -> None:
        opp = Opportunity.from_dict(OPPORTUNITY_WIRE)

        assert opp.confidence is Confidence.HIGH
        assert opp.to_dict() == OPPORTUNITY_WIRE

    def test_opportunity_from_dict_missing_field(self) -> None:
        data = dict(OPPORTUNITY_WIRE)
        del data["sellPrice"]

        with pytest.raises(KeyError):
            Opportunity.from_dict(data)

    def test_failed_report_is_zeroed(self) -> None:
        data = ScanReport.failed("catalog unavailable", 1704067200000).to_dict()

        assert data == {
            "success": False,
            "opportunities": [],
            "totalScanned": 0,
            "successfulScans": 0,
            "failedScans": 0,
            "scanDuration": 0,
            "timestamp": 1704067200000,
            "error": "catalog unavailable",
        }

    def test_successful_report_has_no_error_key(self) -> None:
        assert "error" not in ScanReport(completed_at_ms=1).to_dict()

    def test_quote_pool_reference(self) -> None:
        quote = Quote("Orca", 1.0, 10.0, 0.003, 1, pool_reference="pool1")

        assert quote.to_dict()["poolAddress"] == "pool1"
        assert "poolAddress" not in Quote("Orca", 1.0, 10.0, 0.003, 1).to_dict()

    @pytest.mark.parametrize("price", [0.0, -1.0, float("nan"), float("inf")])
    def test_unusable_quote(self, price: float) -> None:
        assert not Quote("A", price, 1.0, 0.0, 1).is_usable

    def test_tps_with_zero_period(self) -> None:
        assert PerformanceSample(tx_count=100, slot_count=2, sample_period_secs=0).tps == 0.0


class TestResponseModels:
    """Tests for external payload validation."""

    def test_coingecko_rejects_zero(self) -> None:
        with pytest.raises(ValidationError):
            CoinGeckoPrice.model_validate({"usd": 0})

    def test_coingecko_ignores_extra(self) -> None:
        price = CoinGeckoPrice.model_validate({"usd": 1.5, "usd_market_cap": 10})

        assert price.usd == 1.5
        assert price.usd_24h_change is None

    def test_jupiter_string_price_coerced(self) -> None:
        response = JupiterPriceResponse.model_validate(
            {"data": {"mint": {"id": "mint", "price": "0.0000213"}}, "timeTaken": 0.001}
        )

        entry = response.data["mint"]
        assert entry is not None
        assert entry.price == pytest.approx(0.0000213)
        assert response.time_taken == 0.001

    def test_jupiter_null_entry(self) -> None:
        response = JupiterPriceResponse.model_validate({"data": {"mint": None}})

        assert response.data["mint"] is None

    def test_rpc_error_envelope(self) -> None:
        response = RpcResponse.model_validate(
            {"jsonrpc": "2.0", "id": 3, "error": {"code": -32601, "message": "Method not found"}}
        )

        assert response.result is None
        assert response.error is not None
        assert response.error.code == -32601

    def test_performance_sample_aliases(self) -> None:
        sample = PerformanceSampleData.model_validate(
            {"slot": 9, "numTransactions": 5, "numSlots": 2, "samplePeriodSecs": 60}
        )

        assert sample.num_transactions == 5
        assert sample.sample_period_secs == 60


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self) -> None:
        settings = Settings(_env_file=None)

        assert settings.trade_size == 1000.0
        assert settings.min_profit_percent == 0.1
        assert settings.enable_synthetic_venue is False

    def test_trailing_slash_stripped(self) -> None:
        settings = Settings(_env_file=None, coingecko_api_url="https://cg.test/api/v3/")

        assert settings.coingecko_api_url == "https://cg.test/api/v3"

    def test_redacted_rpc_url(self) -> None:
        settings = Settings(
            _env_file=None,
            solana_rpc_url=SecretStr("https://rpc.test/?api-key=secret"),
        )

        assert "secret" not in settings.redacted_rpc_url
        assert "secret" not in repr(settings)

    def test_rejects_non_positive_trade_size(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, trade_size=0)

    def test_negative_threshold_warns(self) -> None:
        with pytest.warns(UserWarning, match="negative"):
            Settings(_env_file=None, min_profit_percent=-0.5)
