"""
Application settings.

Typed, immutable view over the environment: RPC endpoint, request timeout,
commitment and signature paging defaults used by the tracer and the CLI.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from soltrace.config.env import get_solana_rpc_url, load_soltrace_env
from soltrace.signature.models import Commitment, PaginationConfig

DEFAULT_TIMEOUT_SEC = 20.0
DEFAULT_SIGNATURE_LIMIT = 1000
DEFAULT_MAX_PAGES = 1


@dataclass(frozen=True)
class TraceSettings:
    """Resolved runtime configuration."""

    rpc_url: str
    timeout_sec: float = DEFAULT_TIMEOUT_SEC
    commitment: Commitment = Commitment.FINALIZED
    signature_limit: int = DEFAULT_SIGNATURE_LIMIT
    max_pages: int = DEFAULT_MAX_PAGES

    def __post_init__(self) -> None:
        if not self.rpc_url.strip():
            raise ValueError("rpc_url must be non-empty")
        if self.timeout_sec <= 0:
            raise ValueError("timeout_sec must be positive")
        if not (1 <= self.signature_limit <= 1000):
            raise ValueError("signature_limit must be between 1 and 1000")
        if self.max_pages < 1:
            raise ValueError("max_pages must be at least 1")

    def pagination(self) -> PaginationConfig:
        """Default signature query configuration for a trace."""
        return PaginationConfig(
            limit=self.signature_limit,
            commitment=self.commitment,
            max_pages=self.max_pages,
        )


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


def get_settings() -> TraceSettings:
    """
    Return settings resolved from the environment (and .env).

    Raises:
        ValueError: if any variable holds an invalid value.
    """
    load_soltrace_env()
    commitment_raw = (os.getenv("SOLTRACE_COMMITMENT") or Commitment.FINALIZED.value).strip().lower()
    return TraceSettings(
        rpc_url=get_solana_rpc_url(),
        timeout_sec=_env_float("SOLTRACE_TIMEOUT_SEC", DEFAULT_TIMEOUT_SEC),
        commitment=Commitment.parse(commitment_raw),
        signature_limit=_env_int("SOLTRACE_SIGNATURE_LIMIT", DEFAULT_SIGNATURE_LIMIT),
        max_pages=_env_int("SOLTRACE_MAX_PAGES", DEFAULT_MAX_PAGES),
    )
