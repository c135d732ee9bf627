"""
Solana JSON-RPC access.

Synchronous httpx client for the two ledger queries the tracer consumes
(getSignaturesForAddress, getTransaction) plus getBalance for inspection.
"""

from soltrace.rpc.client import LedgerClient, SolanaRpcClient

__all__ = ["LedgerClient", "SolanaRpcClient"]
