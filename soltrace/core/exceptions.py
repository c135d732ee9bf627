"""
Application-level exceptions.

A per-instruction decode miss is not an error and never raises; everything
here aborts at least the current trace branch.
"""

from __future__ import annotations


class TraceError(Exception):
    """Base exception for soltrace errors."""


class InvalidAddress(TraceError):
    """Account string is not a well-formed base58 public key."""

    def __init__(self, address: str, reason: str = "") -> None:
        self.address = address
        msg = f"Invalid account address: {address!r}"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)


class InvalidSignature(TraceError):
    """Transaction signature string is malformed."""

    def __init__(self, signature: str, reason: str = "") -> None:
        self.signature = signature
        msg = f"Invalid transaction signature: {signature!r}"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)


class InvalidTimeWindow(TraceError, ValueError):
    """Time window bound is not a "YYYY-MM-DD HH:MM:SS" string."""


class RpcFailure(TraceError):
    """Network, HTTP or JSON-RPC error on a ledger query."""

    def __init__(self, method: str, message: str, code: int | None = None) -> None:
        self.method = method
        self.code = code
        text = f"{method} failed: {message}"
        if code is not None:
            text = f"{text} (code={code})"
        super().__init__(text)


class TransactionNotFound(RpcFailure):
    """getTransaction returned null (unknown or not yet confirmed signature)."""

    def __init__(self, signature: str) -> None:
        self.signature = signature
        super().__init__("getTransaction", f"transaction {signature} not found")


class MalformedResponse(TraceError):
    """Wire payload does not match the documented transaction schema."""


class DecodeFailure(TraceError):
    """Recognized instruction whose payload cannot be decoded (e.g. truncated)."""
