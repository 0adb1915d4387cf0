"""
Pydantic models for external API responses.

These models validate loosely-typed JSON from price aggregators and
the Solana RPC before it is turned into Quote / NetworkStatus records.
"""

from typing import Any

from pydantic import BaseModel, Field


# =============================================================================
# CoinGecko
# =============================================================================


class CoinGeckoPrice(BaseModel):
    """Single asset entry of a /simple/price response."""

    usd: float = Field(gt=0, allow_inf_nan=False)
    usd_24h_change: float | None = None

    model_config = {"extra": "ignore"}


class MarketChart(BaseModel):
    """Response of /coins/{id}/market_chart."""

    prices: list[tuple[float, float]]

    model_config = {"extra": "ignore"}

    def to_points(self) -> list[dict[str, float]]:
        """Flatten to `{timestamp, price}` points."""
        return [{"timestamp": ts, "price": price} for ts, price in self.prices]


# =============================================================================
# Jupiter
# =============================================================================


class JupiterPriceEntry(BaseModel):
    """Price entry for one mint. v2 returns the price as a string."""

    id: str
    type: str | None = None
    price: float = Field(gt=0, allow_inf_nan=False)

    model_config = {"extra": "ignore"}


class JupiterPriceResponse(BaseModel):
    """Jupiter price API response. Unknown mints map to null."""

    data: dict[str, JupiterPriceEntry | None]
    time_taken: float | None = Field(default=None, alias="timeTaken")

    model_config = {"populate_by_name": True, "extra": "ignore"}


# =============================================================================
# Solana JSON-RPC
# =============================================================================


class RpcErrorData(BaseModel):
    """JSON-RPC error object."""

    code: int
    message: str


class RpcResponse(BaseModel):
    """JSON-RPC 2.0 response envelope."""

    jsonrpc: str = "2.0"
    id: int | str | None = None
    result: Any = None
    error: RpcErrorData | None = None


class PerformanceSampleData(BaseModel):
    """Entry of getRecentPerformanceSamples."""

    slot: int
    num_transactions: int = Field(alias="numTransactions", ge=0)
    num_slots: int = Field(alias="numSlots", ge=0)
    sample_period_secs: int = Field(alias="samplePeriodSecs", ge=0)

    model_config = {"populate_by_name": True, "extra": "ignore"}


class NodeVersion(BaseModel):
    """Result of getVersion."""

    solana_core: str = Field(alias="solana-core")
    feature_set: int | None = Field(default=None, alias="feature-set")

    model_config = {"populate_by_name": True, "extra": "ignore"}


class SignatureInfo(BaseModel):
    """Entry of getSignaturesForAddress."""

    signature: str
    slot: int
    block_time: int | None = Field(default=None, alias="blockTime")
    err: Any = None

    model_config = {"populate_by_name": True, "extra": "ignore"}


class ParsedInstruction(BaseModel):
    """
    Instruction of a jsonParsed transaction.

    `parsed` is a dict for programs the node can decode (system,
    spl-token), a plain string for memos and absent otherwise.
    """

    program: str | None = None
    program_id: str | None = Field(default=None, alias="programId")
    parsed: Any = None

    model_config = {"populate_by_name": True, "extra": "ignore"}

    @property
    def transfer_lamports(self) -> int | None:
        """Lamports moved if this is a parsed transfer, else None."""
        if not isinstance(self.parsed, dict) or self.parsed.get("type") != "transfer":
            return None
        info = self.parsed.get("info")
        lamports = info.get("lamports") if isinstance(info, dict) else None
        return lamports if isinstance(lamports, int) else 0


class ParsedMessage(BaseModel):
    instructions: list[ParsedInstruction] = Field(default_factory=list)

    model_config = {"extra": "ignore"}


class ParsedTransactionBody(BaseModel):
    message: ParsedMessage

    model_config = {"extra": "ignore"}


class TransactionMeta(BaseModel):
    """Execution metadata; `err` is null for a successful transaction."""

    err: Any = None

    model_config = {"extra": "ignore"}


class ParsedTransaction(BaseModel):
    """Result of getTransaction with jsonParsed encoding."""

    slot: int
    block_time: int | None = Field(default=None, alias="blockTime")
    meta: TransactionMeta | None = None
    transaction: ParsedTransactionBody

    model_config = {"populate_by_name": True, "extra": "ignore"}
