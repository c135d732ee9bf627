"""
Command-line entry point.

    soltrace trace ACCOUNT --start "2022-05-20 12:00:00" --end "2022-05-26 19:58:00" --depth 2
    soltrace balance ACCOUNT
    soltrace show-tx SIGNATURE
    soltrace inspect ACCOUNT --index 0

Results are printed as JSON on stdout; structured logs go to stderr.
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict, replace
from typing import Any, Sequence

from soltrace.config import TraceSettings, get_settings
from soltrace.core.exceptions import TraceError
from soltrace.rpc.client import SolanaRpcClient
from soltrace.signature import Commitment, TimeWindow, validate_address
from soltrace.tracer import inspect_account, trace_transfers
from soltrace.tracer_logging import configure_structlog, get_logger
from soltrace.transaction import LAMPORTS_PER_SOL, validate_signature

logger = get_logger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="soltrace", description="Trace native SOL transfers over Solana RPC")
    ap.add_argument("--rpc-url", type=str, default=None, help="Override SOLANA_RPC_URL")
    ap.add_argument(
        "--commitment",
        choices=[c.value for c in Commitment],
        default=None,
        help="Override SOLTRACE_COMMITMENT",
    )
    ap.add_argument("--log-level", type=str, default=None, help="Override LOG_LEVEL")
    sub = ap.add_subparsers(dest="command", required=True)

    p_trace = sub.add_parser("trace", help="Follow transfers from an account")
    p_trace.add_argument("account")
    p_trace.add_argument("--start", type=str, default=None, help="Exclusive lower bound, 'YYYY-MM-DD HH:MM:SS' UTC")
    p_trace.add_argument("--end", type=str, default=None, help="Exclusive upper bound, 'YYYY-MM-DD HH:MM:SS' UTC")
    p_trace.add_argument("--depth", type=int, default=1)
    p_trace.add_argument("--limit", type=int, default=None, help="Signatures per page (1-1000)")
    p_trace.add_argument("--max-pages", type=int, default=None)
    p_trace.add_argument(
        "--keep-going",
        action="store_true",
        help="Skip accounts that fail instead of aborting the whole trace",
    )

    p_balance = sub.add_parser("balance", help="Print SOL balance of an account")
    p_balance.add_argument("account")

    p_show = sub.add_parser("show-tx", help="Print raw transaction JSON")
    p_show.add_argument("signature")

    p_inspect = sub.add_parser("inspect", help="List signatures and decode one transaction")
    p_inspect.add_argument("account")
    p_inspect.add_argument("--start", type=str, default=None)
    p_inspect.add_argument("--end", type=str, default=None)
    p_inspect.add_argument("--index", type=int, default=0)
    return ap


def _settings_from_args(args: argparse.Namespace) -> TraceSettings:
    settings = get_settings()
    overrides: dict[str, Any] = {}
    if args.rpc_url:
        overrides["rpc_url"] = args.rpc_url
    if args.commitment:
        overrides["commitment"] = Commitment.parse(args.commitment)
    if getattr(args, "limit", None) is not None:
        overrides["signature_limit"] = args.limit
    if getattr(args, "max_pages", None) is not None:
        overrides["max_pages"] = args.max_pages
    return replace(settings, **overrides) if overrides else settings


def _print_json(value: Any) -> None:
    print(json.dumps(value, indent=2, sort_keys=False))


def _run(args: argparse.Namespace, settings: TraceSettings) -> int:
    with SolanaRpcClient(
        settings.rpc_url,
        timeout_sec=settings.timeout_sec,
        commitment=settings.commitment.value,
    ) as client:
        if args.command == "trace":
            window = TimeWindow(start=args.start, end=args.end)
            acc = trace_transfers(
                args.account,
                client,
                settings.pagination(),
                window,
                args.depth,
                fail_fast=not args.keep_going,
            )
            _print_json([r.to_dict() for r in acc])
        elif args.command == "balance":
            account = validate_address(args.account)
            lamports = client.get_balance(account)
            _print_json({"account": account, "lamports": lamports, "sol": lamports / LAMPORTS_PER_SOL})
        elif args.command == "show-tx":
            signature = validate_signature(args.signature)
            _print_json(client.get_transaction(signature))
        elif args.command == "inspect":
            try:
                inspection = inspect_account(
                    args.account,
                    client,
                    settings.pagination(),
                    TimeWindow(start=args.start, end=args.end),
                    signature_index=args.index,
                )
            except IndexError as e:
                print(f"[soltrace] ERROR: {e}", file=sys.stderr)
                return 2
            _print_json(asdict(inspection))
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    ap = _build_parser()
    args = ap.parse_args(argv)
    if args.log_level:
        configure_structlog(level=args.log_level)

    try:
        settings = _settings_from_args(args)
    except ValueError as e:
        print(f"[soltrace] ERROR: {e}", file=sys.stderr)
        return 2

    try:
        return _run(args, settings)
    except TraceError as e:
        logger.error("cli_command_failed", command=args.command, error_type=type(e).__name__, error=str(e))
        print(f"[soltrace] ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
