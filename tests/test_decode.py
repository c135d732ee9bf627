"""
Tests for the System Program instruction decoder (transaction.decode).
"""

from __future__ import annotations

import struct

import base58
import pytest

from soltrace.core.exceptions import DecodeFailure, MalformedResponse
from soltrace.transaction import (
    KNOWN_PROGRAMS,
    SYSTEM_PROGRAM_ID,
    FlatInstruction,
    SystemInstruction,
    decode_instruction,
    encode_transfer_data,
)

BLOCK_TIME = 1_653_048_000


def _flat(payload: str, accounts: tuple[str, ...], program: str = SYSTEM_PROGRAM_ID) -> FlatInstruction:
    return FlatInstruction(
        executing_program=program,
        participating_accounts=accounts,
        payload=payload,
        block_time=BLOCK_TIME,
        signature="sig-1",
    )


def _b58(raw: bytes) -> str:
    return base58.b58encode(raw).decode("ascii")


def test_system_instruction_enum_order():
    assert len(SystemInstruction) == 12
    assert SystemInstruction.CreateAccount == 0
    assert SystemInstruction.Transfer == 2
    assert SystemInstruction.TransferWithSeed == 11
    assert KNOWN_PROGRAMS["system"] == SYSTEM_PROGRAM_ID


def test_encode_transfer_data_layout():
    raw = base58.b58decode(encode_transfer_data(5_000_000_000))
    assert raw == struct.pack("<IQ", 2, 5_000_000_000)


@pytest.mark.parametrize("lamports", [0, 1, 999_999_999, 5_000_000_000, 123_456_789_012, 2**64 - 1])
def test_transfer_amount_is_lamports_over_one_billion(accounts, lamports):
    record = decode_instruction(_flat(encode_transfer_data(lamports), (accounts(1), accounts(2))))
    assert record is not None
    assert record.amount == pytest.approx(lamports / 1_000_000_000)


def test_transfer_record_fields(accounts):
    record = decode_instruction(_flat(encode_transfer_data(5_000_000_000), (accounts(1), accounts(2), accounts(3))))
    assert record.program == SYSTEM_PROGRAM_ID
    assert record.amount == 5.0
    assert record.source == accounts(1)
    assert record.destination == accounts(2)
    assert record.action == "Transfer"
    assert record.block_time == BLOCK_TIME
    assert record.human_time == "2022-05-20 12:00:00"
    assert record.signature == "sig-1"


def test_non_system_program_is_skipped(accounts):
    ix = _flat(encode_transfer_data(10), (accounts(1), accounts(2)), program=accounts(9))
    assert decode_instruction(ix) is None


def test_invalid_base58_is_skipped(accounts):
    assert decode_instruction(_flat("0OIl+/", (accounts(1), accounts(2)))) is None


@pytest.mark.parametrize("op", [SystemInstruction.CreateAccount, SystemInstruction.Assign, SystemInstruction.TransferWithSeed])
def test_other_system_instructions_are_skipped(accounts, op):
    payload = _b58(struct.pack("<IQ", op, 10))
    assert decode_instruction(_flat(payload, (accounts(1), accounts(2)))) is None


def test_unknown_discriminant_is_skipped(accounts):
    payload = _b58(struct.pack("<IQ", 99, 10))
    assert decode_instruction(_flat(payload, (accounts(1), accounts(2)))) is None


def test_payload_shorter_than_discriminant_is_skipped(accounts):
    assert decode_instruction(_flat(_b58(b"\x02\x00"), (accounts(1), accounts(2)))) is None


def test_truncated_transfer_raises(accounts):
    payload = _b58(struct.pack("<I", 2) + b"\x01\x02\x03")
    with pytest.raises(DecodeFailure):
        decode_instruction(_flat(payload, (accounts(1), accounts(2))))


def test_transfer_with_one_account_raises(accounts):
    with pytest.raises(MalformedResponse):
        decode_instruction(_flat(encode_transfer_data(10), (accounts(1),)))


def test_transfer_record_equality_and_key(accounts):
    ix = _flat(encode_transfer_data(10), (accounts(1), accounts(2)))
    a, b = decode_instruction(ix), decode_instruction(ix)
    assert a == b
    assert a.key() == b.key()
    assert a.to_dict()["destination"] == accounts(2)
