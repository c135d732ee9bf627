"""
Trace orchestrator — depth-bounded, duplicate-suppressing walk over transfers.

For an account: discover its signatures in the window, fetch and flatten
each transaction, decode System Program transfers. Each new transfer is
appended to the accumulator and its destination is explored next
(depth-first, pre-order) with depth - 1. The walk ends when depth drops
below zero; duplicate suppression alone does not bound it.

The walk uses an explicit stack of lazy per-account generators instead of
recursion, so RPC calls happen in the same order a recursive walk would
make them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, TYPE_CHECKING

from soltrace.config import TraceSettings, get_settings
from soltrace.config.env import mask_rpc_url
from soltrace.core.exceptions import TraceError
from soltrace.rpc.client import SolanaRpcClient
from soltrace.signature import (
    PaginationConfig,
    SignatureRecord,
    TimeWindow,
    discover,
    validate_address,
)
from soltrace.tracer_logging import bind_account, get_logger
from soltrace.transaction import TransferRecord, decode_instruction, fetch, flatten

if TYPE_CHECKING:
    from soltrace.rpc.client import LedgerClient

logger = get_logger(__name__)


class TransferAccumulator:
    """
    Ordered, append-only collection of transfers with O(1) duplicate checks.

    Owned by one trace invocation; never shared between concurrent callers.
    """

    def __init__(self, records: Iterable[TransferRecord] = ()) -> None:
        self._records: list[TransferRecord] = []
        self._keys: set[tuple] = set()
        for record in records:
            self.add(record)

    def add(self, record: TransferRecord) -> bool:
        """Append record unless an equal one is present; return True if appended."""
        key = record.key()
        if key in self._keys:
            return False
        self._keys.add(key)
        self._records.append(record)
        return True

    def __contains__(self, record: object) -> bool:
        return isinstance(record, TransferRecord) and record.key() in self._keys

    def __iter__(self) -> Iterator[TransferRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def to_list(self) -> list[TransferRecord]:
        return list(self._records)


def _account_transfers(
    account: str,
    client: "LedgerClient",
    pagination: PaginationConfig,
    window: TimeWindow,
) -> Iterator[TransferRecord]:
    """Lazily yield decoded transfers of one account, in signature then instruction order."""
    signatures = discover(account, client, pagination, window)
    commitment = pagination.commitment.value
    for sig in signatures:
        record = fetch(sig.signature, client, commitment=commitment)
        for ix in flatten(record, block_time=sig.block_time):
            decoded = decode_instruction(ix)
            if decoded is not None:
                yield decoded


def trace_transfers(
    account: str,
    client: "LedgerClient",
    pagination: PaginationConfig | None = None,
    window: TimeWindow | None = None,
    depth: int = 0,
    accumulator: TransferAccumulator | None = None,
    *,
    fail_fast: bool = True,
) -> TransferAccumulator:
    """
    Collect transfers reachable from `account` within `depth` destination hops.

    Args:
        account: Root account (base58).
        client: Ledger client.
        pagination: Signature query settings, shared by every account visited.
        window: Time window, shared by every account visited.
        depth: 0 explores only the root's own signatures; negative explores nothing.
        accumulator: Existing accumulator to extend; a new one when None.
        fail_fast: When False, an error while exploring a non-root account
            abandons that branch only. Root errors always propagate.

    Raises:
        TraceError: any discovery, fetch or decode error (see fail_fast).
    """
    acc = accumulator if accumulator is not None else TransferAccumulator()
    if depth < 0:
        return acc
    pagination = pagination or PaginationConfig()
    window = window or TimeWindow()

    root = validate_address(account)
    log = bind_account(root)
    log.info("trace_started", depth=depth, window_start=window.start, window_end=window.end)

    stack: list[tuple[str, int, Iterator[TransferRecord]]] = [
        (root, depth, _account_transfers(root, client, pagination, window))
    ]
    while stack:
        current, level, transfers = stack[-1]
        try:
            record = next(transfers)
        except StopIteration:
            stack.pop()
            continue
        except TraceError as e:
            if fail_fast or len(stack) == 1:
                log.error("trace_failed", failed_account=current, error=str(e))
                raise
            logger.warning(
                "trace_branch_failed",
                account_id=current,
                remaining_depth=level,
                error_type=type(e).__name__,
                error=str(e),
            )
            stack.pop()
            continue

        if not acc.add(record):
            continue
        logger.info(
            "trace_transfer_decoded",
            account_id=current,
            source=record.source,
            destination=record.destination,
            amount=record.amount,
            signature=record.signature,
        )
        if level - 1 >= 0:
            stack.append(
                (
                    record.destination,
                    level - 1,
                    _account_transfers(record.destination, client, pagination, window),
                )
            )

    log.info("trace_finished", transfer_count=len(acc))
    return acc


def trace(
    account: str,
    range_start: str | None,
    range_end: str | None,
    depth: int,
    *,
    client: "LedgerClient | None" = None,
    settings: TraceSettings | None = None,
    pagination: PaginationConfig | None = None,
    fail_fast: bool = True,
) -> list[TransferRecord]:
    """
    Trace native SOL transfers starting from `account`.

    Time bounds are "YYYY-MM-DD HH:MM:SS" UTC strings, both exclusive.
    Without a client, one is built from settings (env) and closed afterwards.

    Example:
        transfers = trace(address, "2022-05-20 12:00:00", "2022-05-26 19:58:00", depth=2)
    """
    window = TimeWindow(start=range_start, end=range_end)
    if client is not None:
        if pagination is None:
            pagination = settings.pagination() if settings is not None else PaginationConfig()
        return trace_transfers(account, client, pagination, window, depth, fail_fast=fail_fast).to_list()

    settings = settings or get_settings()
    logger.info("trace_client_created", rpc_url=mask_rpc_url(settings.rpc_url))
    with SolanaRpcClient(
        settings.rpc_url,
        timeout_sec=settings.timeout_sec,
        commitment=settings.commitment.value,
    ) as rpc:
        return trace_transfers(
            account,
            rpc,
            pagination or settings.pagination(),
            window,
            depth,
            fail_fast=fail_fast,
        ).to_list()


@dataclass
class AccountInspection:
    """Debug view of one account: windowed signatures plus one decoded transaction."""

    account: str
    signatures: list[SignatureRecord]
    selected_signature: str | None = None
    transfers: list[TransferRecord] = field(default_factory=list)


def inspect_account(
    account: str,
    client: "LedgerClient",
    pagination: PaginationConfig | None = None,
    window: TimeWindow | None = None,
    signature_index: int = 0,
) -> AccountInspection:
    """
    List an account's signatures and decode the transfers of one of them.

    No recursion. Raises IndexError if signature_index is negative or past the
    end of a non-empty listing.
    """
    pagination = pagination or PaginationConfig()
    signatures = discover(account, client, pagination, window)
    inspection = AccountInspection(account=account.strip(), signatures=signatures)
    if not signatures:
        return inspection
    if not 0 <= signature_index < len(signatures):
        raise IndexError(f"signature index {signature_index} out of range for {len(signatures)} signatures")
    selected = signatures[signature_index]
    record = fetch(selected.signature, client, commitment=pagination.commitment.value)
    inspection.selected_signature = selected.signature
    for ix in flatten(record, block_time=selected.block_time):
        decoded = decode_instruction(ix)
        if decoded is not None:
            inspection.transfers.append(decoded)
    return inspection
