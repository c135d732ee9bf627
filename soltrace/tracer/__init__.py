"""
Transfer tracing: discovery -> fetch -> decode, following destinations to a bounded depth.
"""

from soltrace.tracer.engine import (
    AccountInspection,
    TransferAccumulator,
    inspect_account,
    trace,
    trace_transfers,
)

__all__ = [
    "AccountInspection",
    "TransferAccumulator",
    "inspect_account",
    "trace",
    "trace_transfers",
]
