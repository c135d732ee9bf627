"""
Tests for the argparse entry point (cli.main) with the RPC client patched
to the in-memory FakeLedger.
"""

from __future__ import annotations

import json

import pytest

from soltrace import cli
from soltrace.core.exceptions import RpcFailure


class _LedgerContext:
    def __init__(self, ledger):
        self._ledger = ledger

    def __enter__(self):
        return self._ledger

    def __exit__(self, *exc_info):
        return None


@pytest.fixture
def patched_client(monkeypatch, ledger):
    created = []

    def factory(rpc_url, **kwargs):
        created.append((rpc_url, kwargs))
        return _LedgerContext(ledger)

    monkeypatch.setattr(cli, "SolanaRpcClient", factory)
    monkeypatch.delenv("SOLTRACE_COMMITMENT", raising=False)
    monkeypatch.delenv("SOLTRACE_SIGNATURE_LIMIT", raising=False)
    return created


def test_trace_command_prints_json(patched_client, ledger, accounts, signatures, transfer_tx, capsys):
    a, b = accounts(1), accounts(2)
    ledger.add_transaction(transfer_tx(signatures(1), a, b, 5_000_000_000), listed_for=[a])

    code = cli.main([
        "--rpc-url", "http://localhost:8899",
        "trace", a,
        "--start", "2022-05-20 00:00:00",
        "--end", "2022-05-21 00:00:00",
        "--depth", "0",
    ])

    assert code == 0
    out = json.loads(capsys.readouterr().out)
    assert out == [
        {
            "program": "11111111111111111111111111111111",
            "amount": 5.0,
            "source": a,
            "destination": b,
            "action": "Transfer",
            "block_time": 1_653_048_000,
            "human_time": "2022-05-20 12:00:00",
            "signature": signatures(1),
        }
    ]
    assert patched_client[0][0] == "http://localhost:8899"


def test_trace_command_error_exit_code(patched_client, ledger, accounts, capsys):
    ledger.fail_on(accounts(1), RpcFailure("getSignaturesForAddress", "down"))
    code = cli.main(["--rpc-url", "http://localhost:8899", "trace", accounts(1)])
    assert code == 1
    assert "down" in capsys.readouterr().err


def test_trace_command_bad_window(patched_client, accounts):
    code = cli.main(["--rpc-url", "http://x", "trace", accounts(1), "--start", "yesterday"])
    assert code == 1


def test_invalid_limit_is_usage_error(patched_client, accounts):
    assert cli.main(["--rpc-url", "http://x", "trace", accounts(1), "--limit", "0"]) == 2


def test_inspect_command(patched_client, ledger, accounts, signatures, transfer_tx, capsys):
    a, b = accounts(1), accounts(2)
    ledger.add_transaction(transfer_tx(signatures(1), a, b, 1_000_000_000), listed_for=[a])
    assert cli.main(["--rpc-url", "http://x", "inspect", a]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["selected_signature"] == signatures(1)
    assert out["transfers"][0]["destination"] == b


@pytest.mark.parametrize("index", ["3", "-1"])
def test_inspect_index_out_of_range(patched_client, ledger, accounts, signatures, transfer_tx, capsys, index):
    a, b = accounts(1), accounts(2)
    ledger.add_transaction(transfer_tx(signatures(1), a, b, 1), listed_for=[a])
    assert cli.main(["--rpc-url", "http://x", "inspect", a, "--index", index]) == 2
    assert "out of range" in capsys.readouterr().err
    assert ("getTransaction", signatures(1)) not in ledger.calls


def test_show_tx_rejects_bad_signature(patched_client, capsys):
    assert cli.main(["--rpc-url", "http://x", "show-tx", "garbage"]) == 1
