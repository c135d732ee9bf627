"""
Solana JSON-RPC client — blocking calls over httpx.

Responsibilities:
- Build JSON-RPC 2.0 bodies with monotonically increasing ids.
- Map transport, HTTP and JSON-RPC errors onto RpcFailure.
- No retry or backoff: a failed call fails the caller.
"""

from __future__ import annotations

import itertools
from typing import Any, Protocol

import httpx

from soltrace.config.env import mask_rpc_url
from soltrace.core.exceptions import RpcFailure, TransactionNotFound
from soltrace.tracer_logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SEC = 20.0
DEFAULT_COMMITMENT = "finalized"


class LedgerClient(Protocol):
    """The ledger queries discovery and fetch depend on."""

    def get_signatures_for_address(
        self,
        address: str,
        *,
        before: str | None = None,
        until: str | None = None,
        limit: int | None = None,
        commitment: str | None = None,
    ) -> list[dict[str, Any]]:
        ...

    def get_transaction(self, signature: str, *, commitment: str | None = None) -> dict[str, Any]:
        ...


class SolanaRpcClient:
    """
    Blocking Solana JSON-RPC client.

    Example:
        with SolanaRpcClient("https://api.mainnet-beta.solana.com") as client:
            sigs = client.get_signatures_for_address(address, limit=100)
            tx = client.get_transaction(sigs[0]["signature"])
    """

    def __init__(
        self,
        rpc_url: str,
        *,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
        commitment: str = DEFAULT_COMMITMENT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Args:
            rpc_url: Solana RPC HTTP endpoint.
            timeout_sec: HTTP timeout applied to every request.
            commitment: Default commitment when a call does not pass one.
            transport: Optional httpx transport (tests use httpx.MockTransport).
        """
        if not rpc_url.strip():
            raise ValueError("rpc_url must be non-empty")
        self._rpc_url = rpc_url.strip().rstrip("/")
        self._commitment = commitment
        self._ids = itertools.count(1)
        self._client = httpx.Client(
            timeout=httpx.Timeout(timeout_sec),
            transport=transport,
        )

    @property
    def rpc_url(self) -> str:
        return self._rpc_url

    @property
    def commitment(self) -> str:
        return self._commitment

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "SolanaRpcClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _build_rpc_body(self, method: str, params: list[Any]) -> dict[str, Any]:
        return {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }

    def call(self, method: str, params: list[Any]) -> Any:
        """Perform one JSON-RPC call and return its "result"; raise RpcFailure on any error."""
        body = self._build_rpc_body(method, params)
        try:
            resp = self._client.post(self._rpc_url, json=body)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "rpc_http_status_error",
                method=method,
                status_code=e.response.status_code,
                rpc_url=mask_rpc_url(self._rpc_url),
            )
            raise RpcFailure(method, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.warning("rpc_transport_error", method=method, error=str(e))
            raise RpcFailure(method, str(e) or type(e).__name__) from e

        try:
            data = resp.json()
        except ValueError as e:
            raise RpcFailure(method, "response body is not JSON") from e
        if not isinstance(data, dict):
            raise RpcFailure(method, "response is not a JSON-RPC object")

        err = data.get("error")
        if err:
            if isinstance(err, dict):
                raise RpcFailure(method, str(err.get("message", err)), err.get("code"))
            raise RpcFailure(method, str(err))
        if "result" not in data:
            raise RpcFailure(method, "response has no result")
        return data["result"]

    def get_signatures_for_address(
        self,
        address: str,
        *,
        before: str | None = None,
        until: str | None = None,
        limit: int | None = None,
        commitment: str | None = None,
    ) -> list[dict[str, Any]]:
        """getSignaturesForAddress; newest first, as returned by the node."""
        opts: dict[str, Any] = {"commitment": commitment or self._commitment}
        if before is not None:
            opts["before"] = before
        if until is not None:
            opts["until"] = until
        if limit is not None:
            opts["limit"] = limit
        result = self.call("getSignaturesForAddress", [address, opts])
        if not isinstance(result, list):
            raise RpcFailure("getSignaturesForAddress", "result is not a list")
        return result

    def get_transaction(self, signature: str, *, commitment: str | None = None) -> dict[str, Any]:
        """
        getTransaction with json encoding.

        "processed" is not a valid commitment for this method and is sent
        as "confirmed".
        """
        level = commitment or self._commitment
        if level == "processed":
            level = "confirmed"
        opts = {
            "encoding": "json",
            "commitment": level,
            "maxSupportedTransactionVersion": 0,
        }
        result = self.call("getTransaction", [signature, opts])
        if result is None:
            raise TransactionNotFound(signature)
        if not isinstance(result, dict):
            raise RpcFailure("getTransaction", "result is not an object")
        return result

    def get_balance(self, address: str) -> int:
        """getBalance in lamports."""
        result = self.call("getBalance", [address, {"commitment": self._commitment}])
        value = result.get("value") if isinstance(result, dict) else result
        if not isinstance(value, int):
            raise RpcFailure("getBalance", "result has no integer value")
        return value
