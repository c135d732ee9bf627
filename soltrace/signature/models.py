"""
Data models for signature discovery.

SignatureRecord mirrors one getSignaturesForAddress result item; TimeWindow
and PaginationConfig are the caller-supplied query settings, immutable for
the lifetime of a trace.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from soltrace.core.exceptions import InvalidTimeWindow
from soltrace.parsing.time import convert_time_to_unix, convert_unix_to_time


class Commitment(str, Enum):
    """How finalized a queried block must be."""

    FINALIZED = "finalized"
    CONFIRMED = "confirmed"
    PROCESSED = "processed"

    @classmethod
    def parse(cls, value: "str | Commitment") -> "Commitment":
        try:
            return cls(value)
        except ValueError as e:
            allowed = ", ".join(c.value for c in cls)
            raise ValueError(f"commitment must be one of {allowed}, got {value!r}") from e


@dataclass(frozen=True)
class SignatureRecord:
    """Transaction signature info from getSignaturesForAddress."""

    signature: str
    slot: int
    block_time: int | None  # Unix timestamp; None for transactions without one
    human_time: str | None

    @classmethod
    def from_rpc_item(cls, item: dict[str, Any]) -> "SignatureRecord":
        """Build from a single getSignaturesForAddress result item."""
        block_time = item.get("blockTime")
        if block_time is not None:
            block_time = int(block_time)
        return cls(
            signature=str(item["signature"]),
            slot=int(item["slot"]),
            block_time=block_time,
            human_time=convert_unix_to_time(block_time) if block_time is not None else None,
        )


@dataclass(frozen=True)
class TimeWindow:
    """
    Open time interval for signature filtering.

    Both bounds are "YYYY-MM-DD HH:MM:SS" UTC strings and both are exclusive.
    `start` is the earlier bound and `end` the later one. A window whose start
    is not before its end is empty and keeps nothing.
    """

    start: str | None = None
    end: str | None = None

    def __post_init__(self) -> None:
        # format check only
        self.start_unix()
        self.end_unix()

    @property
    def active(self) -> bool:
        return self.start is not None or self.end is not None

    def start_unix(self) -> int | None:
        return _bound_to_unix(self.start, "start")

    def end_unix(self) -> int | None:
        return _bound_to_unix(self.end, "end")

    def contains(self, block_time: int) -> bool:
        """True iff block_time lies strictly inside the configured bounds."""
        start_ts, end_ts = self.start_unix(), self.end_unix()
        if start_ts is not None and block_time <= start_ts:
            return False
        if end_ts is not None and block_time >= end_ts:
            return False
        return True


def _bound_to_unix(value: str | None, name: str) -> int | None:
    if value is None:
        return None
    try:
        return convert_time_to_unix(value)
    except ValueError as e:
        raise InvalidTimeWindow(f"window {name} {value!r} is not 'YYYY-MM-DD HH:MM:SS'") from e


@dataclass(frozen=True)
class PaginationConfig:
    """
    getSignaturesForAddress query settings.

    before/until are signature cursors; limit is the page size (1-1000).
    max_pages > 1 follows older pages with the `before` cursor.
    """

    before: str | None = None
    until: str | None = None
    limit: int = 1000
    commitment: Commitment = Commitment.FINALIZED
    max_pages: int = 1

    def __post_init__(self) -> None:
        if not (1 <= self.limit <= 1000):
            raise ValueError("limit must be between 1 and 1000")
        if self.max_pages < 1:
            raise ValueError("max_pages must be at least 1")
        object.__setattr__(self, "commitment", Commitment.parse(self.commitment))
