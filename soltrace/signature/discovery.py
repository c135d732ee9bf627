"""
Signature discovery — getSignaturesForAddress plus time-window filtering.

Returns signatures newest-first (ledger order). Every returned record
carries a block time: signatures without one (e.g. not yet confirmed) are
dropped with a warning instead of failing the trace.
"""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

from solders.pubkey import Pubkey

from soltrace.core.exceptions import InvalidAddress, MalformedResponse
from soltrace.signature.models import PaginationConfig, SignatureRecord, TimeWindow
from soltrace.tracer_logging import get_logger

if TYPE_CHECKING:
    from soltrace.rpc.client import LedgerClient

logger = get_logger(__name__)


def validate_address(account: str) -> str:
    """Return the stripped address; raise InvalidAddress if it is not a base58 pubkey."""
    account = (account or "").strip()
    if not account:
        raise InvalidAddress(account, "empty")
    try:
        Pubkey.from_string(account)
    except Exception as e:
        raise InvalidAddress(account, str(e)) from e
    return account


def filter_by_window(records: list[SignatureRecord], window: TimeWindow) -> list[SignatureRecord]:
    """
    Keep records whose block time lies strictly inside the window.

    With no bound set every record is kept. Records lacking a block time are
    excluded whenever a bound is set.
    """
    if not window.active:
        return list(records)
    kept: list[SignatureRecord] = []
    for record in records:
        if record.block_time is None:
            logger.warning("discovery_missing_block_time", signature=record.signature)
            continue
        if window.contains(record.block_time):
            kept.append(record)
    return kept


def _records_from_page(account: str, items: list[Any]) -> list[SignatureRecord]:
    records: list[SignatureRecord] = []
    for item in items:
        if not isinstance(item, dict):
            raise MalformedResponse(f"signature entry for {account} is not an object: {item!r}")
        try:
            records.append(SignatureRecord.from_rpc_item(item))
        except (KeyError, TypeError, ValueError) as e:
            raise MalformedResponse(f"invalid signature entry for {account}: {e}") from e
    return records


def discover(
    account: str,
    client: "LedgerClient",
    pagination: PaginationConfig | None = None,
    window: TimeWindow | None = None,
) -> list[SignatureRecord]:
    """
    Fetch signatures for `account` and restrict them to `window`.

    Args:
        account: Base58 account address.
        client: Ledger client (SolanaRpcClient or any LedgerClient).
        pagination: Cursor / page size / commitment settings.
        window: Exclusive time bounds; None or empty keeps everything.

    Raises:
        InvalidAddress: account is not a well-formed address.
        RpcFailure: the signature query failed.
        MalformedResponse: a result item lacks signature or slot.
    """
    account = validate_address(account)
    pagination = pagination or PaginationConfig()
    window = window or TimeWindow()
    start_ts = window.start_unix()

    before = pagination.before
    collected: list[SignatureRecord] = []
    for page in range(pagination.max_pages):
        items = client.get_signatures_for_address(
            account,
            before=before,
            until=pagination.until,
            limit=pagination.limit,
            commitment=pagination.commitment.value,
        )
        records = _records_from_page(account, items)
        collected.extend(records)
        logger.debug(
            "discovery_page_fetched",
            account_id=account,
            page=page,
            signature_count=len(records),
        )
        if len(records) < pagination.limit:
            break
        oldest = records[-1]
        if start_ts is not None and oldest.block_time is not None and oldest.block_time <= start_ts:
            break
        before = oldest.signature

    resolved: list[SignatureRecord] = []
    for record in collected:
        if record.block_time is None:
            logger.warning(
                "discovery_missing_block_time",
                account_id=account,
                signature=record.signature,
            )
            continue
        resolved.append(record)

    kept = filter_by_window(resolved, window)
    logger.info(
        "discovery_signatures_resolved",
        account_id=account,
        fetched=len(collected),
        kept=len(kept),
        window_start=window.start,
        window_end=window.end,
    )
    return kept
