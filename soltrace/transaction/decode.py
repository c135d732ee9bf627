"""
System Program instruction decoder.

Only Transfer (discriminant 2) yields a record. Payloads of other programs,
unknown discriminants and non-base58 data are ordinary traffic and return None.
"""

from __future__ import annotations

import struct

import base58

from soltrace.core.exceptions import DecodeFailure, MalformedResponse
from soltrace.parsing.time import convert_unix_to_time
from soltrace.tracer_logging import get_logger
from soltrace.transaction.instructions import (
    KNOWN_PROGRAMS,
    LAMPORTS_PER_SOL,
    FlatInstruction,
    SystemInstruction,
    TransferRecord,
)

logger = get_logger(__name__)

_DISCRIMINANT = struct.Struct("<I")
_LAMPORTS = struct.Struct("<Q")


def encode_transfer_data(lamports: int) -> str:
    """Base58 payload of a System Program Transfer of `lamports`."""
    raw = _DISCRIMINANT.pack(SystemInstruction.Transfer) + _LAMPORTS.pack(lamports)
    return base58.b58encode(raw).decode("ascii")


def _b58decode(data: str) -> bytes | None:
    try:
        return base58.b58decode(data)
    except ValueError:
        return None


def _decode_system_instruction(ix: FlatInstruction, raw: bytes) -> TransferRecord | None:
    if len(raw) < _DISCRIMINANT.size:
        logger.debug("decode_short_payload", signature=ix.signature, length=len(raw))
        return None
    (discriminant,) = _DISCRIMINANT.unpack_from(raw, 0)
    try:
        action = SystemInstruction(discriminant)
    except ValueError:
        logger.debug("decode_unknown_discriminant", signature=ix.signature, discriminant=discriminant)
        return None
    if action is not SystemInstruction.Transfer:
        return None

    # Transfer accounts: [0] funding account, [1] recipient account
    if len(raw) < _DISCRIMINANT.size + _LAMPORTS.size:
        raise DecodeFailure(
            f"truncated Transfer payload in {ix.signature}: {len(raw)} bytes, need "
            f"{_DISCRIMINANT.size + _LAMPORTS.size}"
        )
    if len(ix.participating_accounts) < 2:
        raise MalformedResponse(
            f"Transfer in {ix.signature} has {len(ix.participating_accounts)} accounts, need 2"
        )
    (lamports,) = _LAMPORTS.unpack_from(raw, _DISCRIMINANT.size)
    return TransferRecord(
        program=ix.executing_program,
        amount=lamports / LAMPORTS_PER_SOL,
        source=ix.participating_accounts[0],
        destination=ix.participating_accounts[1],
        action=action.name,
        block_time=ix.block_time,
        human_time=convert_unix_to_time(ix.block_time),
        signature=ix.signature,
    )


def decode_instruction(ix: FlatInstruction) -> TransferRecord | None:
    """
    Decode one flattened instruction into a TransferRecord, or None.

    Raises:
        DecodeFailure: Transfer payload shorter than 12 bytes.
        MalformedResponse: Transfer with fewer than two accounts.
    """
    raw = _b58decode(ix.payload)
    if raw is None:
        logger.debug("decode_invalid_base58", signature=ix.signature)
        return None
    if ix.executing_program == KNOWN_PROGRAMS["system"]:
        return _decode_system_instruction(ix, raw)
    return None
