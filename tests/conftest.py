"""
Pytest fixtures for soltrace tests.

FakeLedger is an in-memory stand-in for the two RPC queries the tracer
uses; payload builders produce getTransaction-style (json encoding) dicts.
Addresses and signatures are real base58 encodings of 32 / 64 bytes so they
pass solders validation.
"""

from __future__ import annotations

import copy
from typing import Any, Callable

import base58
import pytest

from soltrace.core.exceptions import TransactionNotFound
from soltrace.transaction.decode import encode_transfer_data
from soltrace.transaction.instructions import SYSTEM_PROGRAM_ID


def pubkey(n: int) -> str:
    """Deterministic valid base58 public key."""
    return base58.b58encode(bytes([n]) * 32).decode("ascii")


def signature(n: int) -> str:
    """Deterministic valid base58 transaction signature."""
    return base58.b58encode(bytes([n]) * 64).decode("ascii")


def build_tx(
    sig: str,
    account_keys: list[str],
    instructions: list[dict[str, Any]],
    *,
    inner_instructions: list[dict[str, Any]] | None = None,
    block_time: int | None = 1_653_048_000,
    slot: int = 135_000_000,
    meta_extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """getTransaction result with json encoding."""
    meta: dict[str, Any] = {
        "fee": 5000,
        "preBalances": [0] * len(account_keys),
        "postBalances": [0] * len(account_keys),
        "innerInstructions": inner_instructions if inner_instructions is not None else [],
        "logMessages": [],
        "preTokenBalances": [],
        "postTokenBalances": [],
    }
    if meta_extra:
        meta.update(meta_extra)
    return {
        "slot": slot,
        "transaction": {
            "signatures": [sig],
            "message": {
                "header": {
                    "numRequiredSignatures": 1,
                    "numReadonlySignedAccounts": 0,
                    "numReadonlyUnsignedAccounts": 1,
                },
                "accountKeys": account_keys,
                "recentBlockhash": pubkey(250),
                "instructions": instructions,
            },
        },
        "meta": meta,
        "blockTime": block_time,
    }


def build_transfer_tx(
    sig: str,
    source: str,
    destination: str,
    lamports: int,
    *,
    block_time: int = 1_653_048_000,
    program: str = SYSTEM_PROGRAM_ID,
) -> dict[str, Any]:
    """Transaction whose only instruction is a Transfer executed by `program`."""
    return build_tx(
        sig,
        [source, destination, program],
        [{"programIdIndex": 2, "accounts": [0, 1], "data": encode_transfer_data(lamports)}],
        block_time=block_time,
    )


class FakeLedger:
    """
    In-memory ledger implementing the LedgerClient queries.

    Signatures per address are kept newest-first, as the RPC returns them.
    Every call is recorded in `calls` as (method, argument).
    """

    def __init__(self) -> None:
        self.signatures: dict[str, list[dict[str, Any]]] = {}
        self.transactions: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, str]] = []
        self.failures: dict[str, Exception] = {}

    def add_transaction(self, raw: dict[str, Any], *, listed_for: list[str]) -> None:
        """Register a transaction and append its signature to each address's history."""
        sig = raw["transaction"]["signatures"][0]
        self.transactions[sig] = raw
        for address in listed_for:
            self.signatures.setdefault(address, []).append(
                {
                    "signature": sig,
                    "slot": raw["slot"],
                    "blockTime": raw["blockTime"],
                    "err": None,
                    "memo": None,
                    "confirmationStatus": "finalized",
                }
            )

    def fail_on(self, key: str, error: Exception) -> None:
        """Raise `error` when `key` (address or signature) is queried."""
        self.failures[key] = error

    def queried_addresses(self) -> list[str]:
        return [arg for method, arg in self.calls if method == "getSignaturesForAddress"]

    def get_signatures_for_address(
        self,
        address: str,
        *,
        before: str | None = None,
        until: str | None = None,
        limit: int | None = None,
        commitment: str | None = None,
    ) -> list[dict[str, Any]]:
        self.calls.append(("getSignaturesForAddress", address))
        if address in self.failures:
            raise self.failures[address]
        items = self.signatures.get(address, [])
        if before is not None:
            idx = [i["signature"] for i in items].index(before)
            items = items[idx + 1:]
        if until is not None:
            sigs = [i["signature"] for i in items]
            if until in sigs:
                items = items[: sigs.index(until)]
        if limit is not None:
            items = items[:limit]
        return copy.deepcopy(items)

    def get_transaction(self, signature: str, *, commitment: str | None = None) -> dict[str, Any]:
        self.calls.append(("getTransaction", signature))
        if signature in self.failures:
            raise self.failures[signature]
        if signature not in self.transactions:
            raise TransactionNotFound(signature)
        return copy.deepcopy(self.transactions[signature])


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def accounts() -> Callable[[int], str]:
    return pubkey


@pytest.fixture
def signatures() -> Callable[[int], str]:
    return signature


@pytest.fixture
def tx_builder() -> Callable[..., dict[str, Any]]:
    return build_tx


@pytest.fixture
def transfer_tx() -> Callable[..., dict[str, Any]]:
    return build_transfer_tx
