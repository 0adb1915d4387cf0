"""
Solana JSON-RPC status client.

Only the read-only calls the dashboard needs: chain position, recent
throughput and a feed of recent DEX transactions. No transactions are
ever built or sent.
"""

import asyncio
import itertools
import logging
from typing import Any

from pydantic import ValidationError

from dexarb.config.constants import (
    LAMPORTS_PER_SOL,
    RAYDIUM_AMM_PROGRAM_ID,
    SOLANA_RPC_URL,
    SWAP_MIN_INSTRUCTIONS,
    TRANSACTION_PARSE_LIMIT,
    TRANSACTION_SIGNATURE_LIMIT,
)
from dexarb.core.types import ChainTransaction, NetworkStatus, PerformanceSample, TransactionKind
from dexarb.exchange.client import HttpClient, HttpClientError
from dexarb.exchange.models import (
    NodeVersion,
    ParsedTransaction,
    PerformanceSampleData,
    RpcResponse,
    SignatureInfo,
)
from dexarb.utils.time import get_timestamp_ms


logger = logging.getLogger(__name__)


class RpcError(Exception):
    """Raised when an RPC call fails or returns an error object."""

    def __init__(self, method: str, message: str, code: int | None = None) -> None:
        super().__init__(f"{method}: {message}")
        self.method = method
        self.code = code


class SolanaRpcClient:
    """
    Minimal Solana RPC client over the shared HTTP client.

    Example:
        rpc = SolanaRpcClient(http, settings.solana_rpc_url.get_secret_value())
        status = await rpc.network_status()
    """

    def __init__(self, http: HttpClient, url: str = SOLANA_RPC_URL) -> None:
        self._http = http
        self._url = url
        self._ids = itertools.count(1)

    async def _call(self, method: str, params: list[Any] | None = None) -> Any:
        """
        Send one JSON-RPC request and return its result.

        Raises:
            RpcError: On transport failure, malformed envelope or RPC error.
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params or [],
        }

        try:
            raw = await self._http.post_json(self._url, payload)
            response = RpcResponse.model_validate(raw)
        except HttpClientError as e:
            raise RpcError(method, str(e)) from e
        except ValidationError as e:
            raise RpcError(method, f"Malformed response: {e}") from e

        if response.error is not None:
            raise RpcError(method, response.error.message, code=response.error.code)

        return response.result

    async def get_slot(self) -> int:
        result = await self._call("getSlot")
        if not isinstance(result, int):
            raise RpcError("getSlot", f"Unexpected result: {result!r}")
        return result

    async def get_block_height(self) -> int:
        result = await self._call("getBlockHeight")
        if not isinstance(result, int):
            raise RpcError("getBlockHeight", f"Unexpected result: {result!r}")
        return result

    async def get_version(self) -> str:
        result = await self._call("getVersion")
        try:
            return NodeVersion.model_validate(result).solana_core
        except ValidationError as e:
            raise RpcError("getVersion", f"Unexpected result: {result!r}") from e

    async def network_status(self) -> NetworkStatus:
        """Get current slot, block height and node version."""
        slot = await self.get_slot()
        block_height = await self.get_block_height()
        version = await self.get_version()
        return NetworkStatus(
            slot=slot,
            block_height=block_height,
            timestamp_ms=get_timestamp_ms(),
            version=version,
        )

    async def performance(self) -> PerformanceSample | None:
        """
        Get the most recent performance sample.

        Returns:
            Latest sample, or None if the node returned none.
        """
        result = await self._call("getRecentPerformanceSamples", [1])
        if not result:
            return None

        try:
            sample = PerformanceSampleData.model_validate(result[0])
        except (ValidationError, TypeError, KeyError) as e:
            raise RpcError("getRecentPerformanceSamples", f"Malformed sample: {e}") from e

        return PerformanceSample(
            tx_count=sample.num_transactions,
            slot_count=sample.num_slots,
            sample_period_secs=sample.sample_period_secs,
        )

    async def health(self) -> bool:
        """Check whether the node answers a getSlot call."""
        try:
            await self.get_slot()
            return True
        except RpcError as e:
            logger.warning(f"RPC health check failed: {e}")
            return False

    async def recent_transactions(
        self,
        address: str = RAYDIUM_AMM_PROGRAM_ID,
        limit: int = TRANSACTION_SIGNATURE_LIMIT,
        parse_limit: int = TRANSACTION_PARSE_LIMIT,
    ) -> list[ChainTransaction]:
        """
        Get recent transactions that touched `address`.

        Signatures are listed first, then the newest `parse_limit` of
        them are fetched concurrently. Transactions that cannot be
        fetched or parsed are skipped.

        Raises:
            RpcError: If the signature listing itself fails.
        """
        result = await self._call("getSignaturesForAddress", [address, {"limit": limit}])
        try:
            signatures = [SignatureInfo.model_validate(item) for item in result or []]
        except (ValidationError, TypeError) as e:
            raise RpcError("getSignaturesForAddress", f"Malformed response: {e}") from e

        parsed = await asyncio.gather(
            *(self._fetch_transaction(info) for info in signatures[:parse_limit])
        )
        return [tx for tx in parsed if tx is not None]

    async def _fetch_transaction(self, info: SignatureInfo) -> ChainTransaction | None:
        try:
            result = await self._call(
                "getTransaction",
                [
                    info.signature,
                    {"encoding": "jsonParsed", "maxSupportedTransactionVersion": 0},
                ],
            )
            if result is None:
                return None
            tx = ParsedTransaction.model_validate(result)
        except (RpcError, ValidationError) as e:
            logger.warning(f"Skipping transaction {info.signature[:16]}: {e}")
            return None

        kind, lamports = classify_transaction(tx)
        return ChainTransaction(
            signature=info.signature,
            slot=info.slot,
            timestamp_ms=info.block_time * 1000 if info.block_time else get_timestamp_ms(),
            kind=kind,
            success=tx.meta is not None and tx.meta.err is None,
            amount=lamports / LAMPORTS_PER_SOL if lamports else None,
        )


def classify_transaction(tx: ParsedTransaction) -> tuple[TransactionKind, int | None]:
    """
    Classify a parsed transaction from its instruction list.

    A leading system transfer makes it a transfer; otherwise a long
    instruction list is taken as a swap, sized by its first transfer.

    Returns:
        Kind and transferred lamports, if any.
    """
    instructions = tx.transaction.message.instructions
    if tx.meta is None or not instructions:
        return TransactionKind.OTHER, None

    lamports = instructions[0].transfer_lamports
    if lamports is not None:
        return TransactionKind.TRANSFER, lamports

    if len(instructions) >= SWAP_MIN_INSTRUCTIONS:
        transfers = (ix.transfer_lamports for ix in instructions)
        return TransactionKind.SWAP, next((t for t in transfers if t is not None), None)

    return TransactionKind.OTHER, None
