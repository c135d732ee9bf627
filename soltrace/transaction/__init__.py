"""
Transaction fetch, normalization and System Program decoding.
"""

from soltrace.transaction.decode import decode_instruction, encode_transfer_data
from soltrace.transaction.fetcher import fetch, flatten, validate_signature
from soltrace.transaction.instructions import (
    KNOWN_PROGRAMS,
    LAMPORTS_PER_SOL,
    SYSTEM_PROGRAM_ID,
    FlatInstruction,
    SystemInstruction,
    TransferRecord,
)
from soltrace.transaction.models import TokenBalance, TransactionRecord

__all__ = [
    "KNOWN_PROGRAMS",
    "LAMPORTS_PER_SOL",
    "SYSTEM_PROGRAM_ID",
    "FlatInstruction",
    "SystemInstruction",
    "TokenBalance",
    "TransactionRecord",
    "TransferRecord",
    "decode_instruction",
    "encode_transfer_data",
    "fetch",
    "flatten",
    "validate_signature",
]
