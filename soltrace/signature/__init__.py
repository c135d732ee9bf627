"""
Signature discovery for an account, restricted to a time window.
"""

from soltrace.signature.discovery import discover, filter_by_window, validate_address
from soltrace.signature.models import Commitment, PaginationConfig, SignatureRecord, TimeWindow

__all__ = [
    "Commitment",
    "PaginationConfig",
    "SignatureRecord",
    "TimeWindow",
    "discover",
    "filter_by_window",
    "validate_address",
]
