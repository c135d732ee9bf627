"""
Test that tracer_logging can be imported without circular import and logger works.
"""

from __future__ import annotations

import io
import json
import sys


def test_logging_import():
    """Import get_logger from tracer_logging and use the logger."""
    from soltrace.tracer_logging import bind_account, get_logger

    logger = get_logger("test")
    assert logger is not None
    for level in ("info", "debug", "warning", "error"):
        assert hasattr(logger, level)
    logger.info("test_message", key="value")
    bind_account("9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka").warning("test_bound_message")


def test_package_import_exposes_trace():
    import soltrace

    assert callable(soltrace.trace)
    assert soltrace.__version__


def test_json_records_carry_event_type_and_timestamp(monkeypatch):
    from soltrace.tracer_logging import configure_structlog, get_logger

    buf = io.StringIO()
    monkeypatch.setattr(sys, "stderr", buf)
    try:
        configure_structlog(level="INFO", fmt="json")
        logger = get_logger("soltrace.test")
        logger.debug("hidden_below_level")
        logger.info("trace_started", depth=2)
    finally:
        monkeypatch.undo()
        configure_structlog()

    lines = [json.loads(line) for line in buf.getvalue().splitlines() if line.strip()]
    assert len(lines) == 1
    record = lines[0]
    assert record["event_type"] == "trace_started"
    assert "event" not in record
    assert record["level"] == "info"
    assert record["logger"] == "soltrace.test"
    assert record["depth"] == 2
    assert record["timestamp"].startswith("20")
