"""
Transaction fetch and instruction flattening.

fetch() resolves one signature into a TransactionRecord; flatten() walks
the top-level instructions in order, each followed by the inner
instructions whose group `index` names it.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

from solders.signature import Signature

from soltrace.core.exceptions import InvalidSignature, MalformedResponse
from soltrace.tracer_logging import get_logger
from soltrace.transaction.instructions import FlatInstruction
from soltrace.transaction.models import CompiledInstruction, TransactionRecord

if TYPE_CHECKING:
    from soltrace.rpc.client import LedgerClient

logger = get_logger(__name__)


def validate_signature(signature: str) -> str:
    """Return the stripped signature; raise InvalidSignature if it is not base58 of 64 bytes."""
    signature = (signature or "").strip()
    if not signature:
        raise InvalidSignature(signature, "empty")
    try:
        Signature.from_string(signature)
    except Exception as e:
        raise InvalidSignature(signature, str(e)) from e
    return signature


def fetch(signature: str, client: "LedgerClient", *, commitment: str | None = None) -> TransactionRecord:
    """
    Fetch and normalize one transaction.

    Raises:
        InvalidSignature: malformed signature string.
        RpcFailure: the getTransaction call failed (TransactionNotFound for null).
        MalformedResponse: result does not match the json transaction schema.
    """
    signature = validate_signature(signature)
    raw = client.get_transaction(signature, commitment=commitment)
    record = TransactionRecord.from_rpc(raw)
    logger.debug("fetch_transaction_loaded", signature=signature, slot=record.slot)
    return record


def _resolve(
    ix: CompiledInstruction,
    account_keys: list[str],
    block_time: int,
    signature: str,
) -> FlatInstruction:
    def key_at(index: int, role: str) -> str:
        if not (0 <= index < len(account_keys)):
            raise MalformedResponse(
                f"{role} index {index} out of range ({len(account_keys)} account keys) in {signature}"
            )
        return account_keys[index]

    return FlatInstruction(
        executing_program=key_at(ix.program_id_index, "programIdIndex"),
        participating_accounts=tuple(key_at(i, "account") for i in ix.accounts),
        payload=ix.data,
        block_time=block_time,
        signature=signature,
    )


def flatten(record: TransactionRecord, *, block_time: int | None = None) -> list[FlatInstruction]:
    """
    Flatten top-level and inner instructions into one ordered list.

    Inner instruction groups are matched to their parent by the group's
    explicit `index` field, never by array position. A group whose index
    names no top-level instruction is skipped with a warning.

    Args:
        record: Normalized transaction.
        block_time: Fallback when the transaction itself carries no blockTime
            (e.g. the block time from the signature listing).

    Raises:
        MalformedResponse: missing transaction data, signature or block time,
            or an out-of-range account reference.
    """
    if record.transaction is None:
        raise MalformedResponse(f"transaction in slot {record.slot} has no transaction data")
    resolved_time = record.block_time if record.block_time is not None else block_time
    if resolved_time is None:
        raise MalformedResponse(f"transaction in slot {record.slot} has no block time")
    account_keys = record.account_keys()
    signature = record.signature_id()

    inner_by_parent: dict[int, list[CompiledInstruction]] = defaultdict(list)
    if record.meta is not None and record.meta.inner_instructions:
        for group in record.meta.inner_instructions:
            inner_by_parent[group.index].extend(group.instructions)

    top_level = record.transaction.message.instructions
    orphaned = set(inner_by_parent) - set(range(len(top_level)))
    if orphaned:
        logger.warning(
            "fetch_orphan_inner_group",
            signature=signature,
            group_indexes=sorted(orphaned),
            instruction_count=len(top_level),
        )

    flat: list[FlatInstruction] = []
    for position, ix in enumerate(top_level):
        flat.append(_resolve(ix, account_keys, resolved_time, signature))
        for inner in inner_by_parent.get(position, ()):
            flat.append(_resolve(inner, account_keys, resolved_time, signature))
    return flat
