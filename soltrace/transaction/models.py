"""
Normalized transaction record — getTransaction (json encoding) to dataclasses.

The wire payload is mapped onto these types in one step by
TransactionRecord.from_rpc. Field names follow the RPC schema:

    {slot, transaction: {signatures, message: {header, accountKeys,
     recentBlockhash, instructions}}, meta: {fee, preBalances, postBalances,
     innerInstructions, logMessages, preTokenBalances, postTokenBalances,
     loadedAddresses}, blockTime}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from soltrace.core.exceptions import MalformedResponse


def _require(obj: Any, key: str, where: str) -> Any:
    if not isinstance(obj, dict):
        raise MalformedResponse(f"{where} is not an object")
    if key not in obj or obj[key] is None:
        raise MalformedResponse(f"{where} is missing '{key}'")
    return obj[key]


def _int(value: Any, where: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedResponse(f"{where} must be an integer, got {value!r}")
    return value


def _int_list(value: Any, where: str) -> list[int]:
    if not isinstance(value, list):
        raise MalformedResponse(f"{where} must be a list")
    return [_int(v, f"{where}[{i}]") for i, v in enumerate(value)]


def _str_list(value: Any, where: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise MalformedResponse(f"{where} must be a list of strings")
    return list(value)


@dataclass(frozen=True)
class MessageHeader:
    """Signature and read-only account counts of a message."""

    num_required_signatures: int
    num_readonly_signed_accounts: int
    num_readonly_unsigned_accounts: int

    @classmethod
    def from_rpc(cls, raw: Any) -> "MessageHeader":
        where = "message.header"
        return cls(
            num_required_signatures=_int(_require(raw, "numRequiredSignatures", where), where),
            num_readonly_signed_accounts=_int(_require(raw, "numReadonlySignedAccounts", where), where),
            num_readonly_unsigned_accounts=_int(_require(raw, "numReadonlyUnsignedAccounts", where), where),
        )


@dataclass(frozen=True)
class CompiledInstruction:
    """Instruction as transmitted: indices into the account-key table plus base58 data."""

    program_id_index: int
    accounts: tuple[int, ...]
    data: str

    @classmethod
    def from_rpc(cls, raw: Any, where: str) -> "CompiledInstruction":
        data = _require(raw, "data", where)
        if not isinstance(data, str):
            raise MalformedResponse(f"{where}.data must be a base58 string")
        return cls(
            program_id_index=_int(_require(raw, "programIdIndex", where), f"{where}.programIdIndex"),
            accounts=tuple(_int_list(_require(raw, "accounts", where), f"{where}.accounts")),
            data=data,
        )


@dataclass(frozen=True)
class InnerInstructionGroup:
    """Instructions invoked while executing top-level instruction `index`."""

    index: int
    instructions: tuple[CompiledInstruction, ...]

    @classmethod
    def from_rpc(cls, raw: Any, where: str) -> "InnerInstructionGroup":
        items = _require(raw, "instructions", where)
        if not isinstance(items, list):
            raise MalformedResponse(f"{where}.instructions must be a list")
        return cls(
            index=_int(_require(raw, "index", where), f"{where}.index"),
            instructions=tuple(
                CompiledInstruction.from_rpc(ix, f"{where}.instructions[{i}]")
                for i, ix in enumerate(items)
            ),
        )


@dataclass(frozen=True)
class TransactionMessage:
    header: MessageHeader
    account_keys: tuple[str, ...]
    recent_blockhash: str
    instructions: tuple[CompiledInstruction, ...]

    @classmethod
    def from_rpc(cls, raw: Any) -> "TransactionMessage":
        where = "transaction.message"
        items = _require(raw, "instructions", where)
        if not isinstance(items, list):
            raise MalformedResponse(f"{where}.instructions must be a list")
        blockhash = _require(raw, "recentBlockhash", where)
        if not isinstance(blockhash, str):
            raise MalformedResponse(f"{where}.recentBlockhash must be a string")
        return cls(
            header=MessageHeader.from_rpc(_require(raw, "header", where)),
            account_keys=tuple(_str_list(_require(raw, "accountKeys", where), f"{where}.accountKeys")),
            recent_blockhash=blockhash,
            instructions=tuple(
                CompiledInstruction.from_rpc(ix, f"{where}.instructions[{i}]")
                for i, ix in enumerate(items)
            ),
        )


@dataclass(frozen=True)
class TransactionData:
    signatures: tuple[str, ...]
    message: TransactionMessage

    @classmethod
    def from_rpc(cls, raw: Any) -> "TransactionData":
        if isinstance(raw, list):
            raise MalformedResponse("transaction is not json-encoded (got binary encoding)")
        return cls(
            signatures=tuple(_str_list(_require(raw, "signatures", "transaction"), "transaction.signatures")),
            message=TransactionMessage.from_rpc(_require(raw, "message", "transaction")),
        )


@dataclass(frozen=True)
class UiTokenAmount:
    decimals: int | None
    amount: str | None
    ui_amount_string: str | None


@dataclass(frozen=True)
class TokenBalanceEntry:
    """Raw pre/post token balance entry; account_index points into the key table."""

    account_index: int
    mint: str
    owner: str | None
    ui_token_amount: UiTokenAmount

    @classmethod
    def from_rpc(cls, raw: Any, where: str) -> "TokenBalanceEntry":
        ui = _require(raw, "uiTokenAmount", where)
        if not isinstance(ui, dict):
            raise MalformedResponse(f"{where}.uiTokenAmount is not an object")
        decimals = ui.get("decimals")
        if decimals is not None:
            decimals = _int(decimals, f"{where}.uiTokenAmount.decimals")
        return cls(
            account_index=_int(_require(raw, "accountIndex", where), f"{where}.accountIndex"),
            mint=str(_require(raw, "mint", where)),
            owner=raw.get("owner"),
            ui_token_amount=UiTokenAmount(
                decimals=decimals,
                amount=ui.get("amount"),
                ui_amount_string=ui.get("uiAmountString"),
            ),
        )


@dataclass(frozen=True)
class TokenBalance:
    """Token balance resolved against the account-key table."""

    token_account: str
    token_mint: str
    owner: str | None
    amount: str | None
    decimals: int | None


def _token_entries(raw: Any, where: str) -> tuple[TokenBalanceEntry, ...] | None:
    if raw is None:
        return None
    if not isinstance(raw, list):
        raise MalformedResponse(f"{where} must be a list")
    return tuple(TokenBalanceEntry.from_rpc(e, f"{where}[{i}]") for i, e in enumerate(raw))


@dataclass(frozen=True)
class TransactionMeta:
    fee: int
    pre_balances: tuple[int, ...]
    post_balances: tuple[int, ...]
    inner_instructions: tuple[InnerInstructionGroup, ...] | None = None
    log_messages: tuple[str, ...] | None = None
    pre_token_balances: tuple[TokenBalanceEntry, ...] | None = None
    post_token_balances: tuple[TokenBalanceEntry, ...] | None = None
    loaded_writable: tuple[str, ...] = ()
    loaded_readonly: tuple[str, ...] = ()

    @classmethod
    def from_rpc(cls, raw: Any) -> "TransactionMeta":
        where = "meta"
        inner_raw = raw.get("innerInstructions") if isinstance(raw, dict) else None
        inner: tuple[InnerInstructionGroup, ...] | None = None
        if inner_raw is not None:
            if not isinstance(inner_raw, list):
                raise MalformedResponse("meta.innerInstructions must be a list")
            inner = tuple(
                InnerInstructionGroup.from_rpc(g, f"meta.innerInstructions[{i}]")
                for i, g in enumerate(inner_raw)
            )
        logs_raw = raw.get("logMessages")
        loaded = raw.get("loadedAddresses") or {}
        if not isinstance(loaded, dict):
            raise MalformedResponse("meta.loadedAddresses is not an object")
        return cls(
            fee=_int(_require(raw, "fee", where), "meta.fee"),
            pre_balances=tuple(_int_list(_require(raw, "preBalances", where), "meta.preBalances")),
            post_balances=tuple(_int_list(_require(raw, "postBalances", where), "meta.postBalances")),
            inner_instructions=inner,
            log_messages=tuple(_str_list(logs_raw, "meta.logMessages")) if logs_raw is not None else None,
            pre_token_balances=_token_entries(raw.get("preTokenBalances"), "meta.preTokenBalances"),
            post_token_balances=_token_entries(raw.get("postTokenBalances"), "meta.postTokenBalances"),
            loaded_writable=tuple(_str_list(loaded.get("writable") or [], "meta.loadedAddresses.writable")),
            loaded_readonly=tuple(_str_list(loaded.get("readonly") or [], "meta.loadedAddresses.readonly")),
        )


@dataclass(frozen=True)
class TransactionRecord:
    """
    Normalized getTransaction result. Built once per signature, read-only after.

    `transaction` and `meta` are optional as on the wire; accessors that need
    them raise MalformedResponse when absent.
    """

    slot: int
    transaction: TransactionData | None = None
    meta: TransactionMeta | None = None
    block_time: int | None = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_rpc(cls, raw: Any) -> "TransactionRecord":
        """Map a getTransaction result onto the normalized schema; raise MalformedResponse on mismatch."""
        if not isinstance(raw, dict):
            raise MalformedResponse("transaction result is not an object")
        tx_raw = raw.get("transaction")
        meta_raw = raw.get("meta")
        block_time = raw.get("blockTime")
        if block_time is not None:
            block_time = _int(block_time, "blockTime")
        if meta_raw is not None and not isinstance(meta_raw, dict):
            raise MalformedResponse("meta is not an object")
        return cls(
            slot=_int(_require(raw, "slot", "transaction result"), "slot"),
            transaction=TransactionData.from_rpc(tx_raw) if tx_raw is not None else None,
            meta=TransactionMeta.from_rpc(meta_raw) if meta_raw is not None else None,
            block_time=block_time,
            raw=raw,
        )

    def _require_transaction(self) -> TransactionData:
        if self.transaction is None:
            raise MalformedResponse(f"transaction in slot {self.slot} has no transaction data")
        return self.transaction

    def _require_meta(self) -> TransactionMeta:
        if self.meta is None:
            raise MalformedResponse(f"transaction in slot {self.slot} has no meta")
        return self.meta

    def account_keys(self) -> list[str]:
        """Static account keys followed by loaded writable then readonly addresses."""
        keys = list(self._require_transaction().message.account_keys)
        if self.meta is not None:
            keys.extend(self.meta.loaded_writable)
            keys.extend(self.meta.loaded_readonly)
        return keys

    def signature_id(self) -> str:
        """First signature of the transaction (its id)."""
        signatures = self._require_transaction().signatures
        if not signatures:
            raise MalformedResponse(f"transaction in slot {self.slot} has no signatures")
        return signatures[0]

    def token_balances_before(self) -> list[TokenBalance]:
        return self._resolve_token_balances(self._require_meta().pre_token_balances, "preTokenBalances")

    def token_balances_after(self) -> list[TokenBalance]:
        return self._resolve_token_balances(self._require_meta().post_token_balances, "postTokenBalances")

    def balance_changes(self) -> dict[str, int]:
        """Lamport delta (post - pre) per account key."""
        meta = self._require_meta()
        keys = self.account_keys()
        if len(meta.pre_balances) != len(meta.post_balances) or len(meta.pre_balances) > len(keys):
            raise MalformedResponse(f"balance arrays do not match account keys in slot {self.slot}")
        return {
            keys[i]: meta.post_balances[i] - meta.pre_balances[i]
            for i in range(len(meta.pre_balances))
        }

    def _resolve_token_balances(
        self,
        entries: tuple[TokenBalanceEntry, ...] | None,
        where: str,
    ) -> list[TokenBalance]:
        if entries is None:
            return []
        keys = self.account_keys()
        out: list[TokenBalance] = []
        for entry in entries:
            if not (0 <= entry.account_index < len(keys)):
                raise MalformedResponse(
                    f"{where} accountIndex {entry.account_index} out of range ({len(keys)} keys)"
                )
            out.append(
                TokenBalance(
                    token_account=keys[entry.account_index],
                    token_mint=entry.mint,
                    owner=entry.owner,
                    amount=entry.ui_token_amount.ui_amount_string,
                    decimals=entry.ui_token_amount.decimals,
                )
            )
        return out
