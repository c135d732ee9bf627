"""
soltrace — native SOL transfer tracing over Solana JSON-RPC.

Starting from one account, discovers its transaction signatures within a
time window, decodes System Program transfers from each transaction and
follows every destination account up to a bounded depth.
"""

from soltrace.core.exceptions import (
    DecodeFailure,
    InvalidAddress,
    InvalidSignature,
    InvalidTimeWindow,
    MalformedResponse,
    RpcFailure,
    TraceError,
    TransactionNotFound,
)
from soltrace.tracer.engine import TransferAccumulator, trace, trace_transfers
from soltrace.transaction.instructions import TransferRecord

__version__ = "0.1.0"

__all__ = [
    "DecodeFailure",
    "InvalidAddress",
    "InvalidSignature",
    "InvalidTimeWindow",
    "MalformedResponse",
    "RpcFailure",
    "TraceError",
    "TransactionNotFound",
    "TransferAccumulator",
    "TransferRecord",
    "trace",
    "trace_transfers",
]
