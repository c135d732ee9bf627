"""
Instruction and transfer record types.

Known program ids live in one immutable table so other instruction
families can be added beside the System Program without touching the
decoder's control flow.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import IntEnum
from types import MappingProxyType
from typing import Any

LAMPORTS_PER_SOL = 1_000_000_000

SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"

KNOWN_PROGRAMS = MappingProxyType({
    "system": SYSTEM_PROGRAM_ID,
})


class SystemInstruction(IntEnum):
    """
    System Program instruction discriminants.

    The first 4 bytes (u32 little-endian) of a System Program instruction
    select the operation; the order below is the on-chain enum order.
    """

    CreateAccount = 0
    Assign = 1
    Transfer = 2
    CreateAccountWithSeed = 3
    AdvanceNonceAccount = 4
    WithdrawNonceAccount = 5
    InitializeNonceAccount = 6
    AuthorizeNonceAccount = 7
    Allocate = 8
    AllocateWithSeed = 9
    AssignWithSeed = 10
    TransferWithSeed = 11


@dataclass(frozen=True)
class FlatInstruction:
    """One top-level or inner instruction with account references resolved."""

    executing_program: str
    participating_accounts: tuple[str, ...]
    payload: str  # base58
    block_time: int
    signature: str


@dataclass(frozen=True)
class TransferRecord:
    """
    Decoded native SOL transfer. Equality is structural over all fields.
    """

    program: str
    amount: float  # SOL
    source: str
    destination: str
    action: str
    block_time: int
    human_time: str
    signature: str

    def key(self) -> tuple[str, str, str, str, str, float]:
        """
        Composite dedup key.

        block_time and human_time are determined by the signature, so two
        records with equal keys are structurally equal.
        """
        return (self.source, self.destination, self.signature, self.program, self.action, self.amount)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
