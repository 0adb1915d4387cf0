"""Solana network status."""

from dexarb.network.solana import RpcError, SolanaRpcClient


__all__ = ["RpcError", "SolanaRpcClient"]
