"""
Structured logging for soltrace.

JSON logs with timestamp, event_type and account_id. Use get_logger() in all
modules so trace output stays aggregation-friendly.
"""

from soltrace.tracer_logging.logger import bind_account, configure_structlog, get_logger

__all__ = ["bind_account", "configure_structlog", "get_logger"]
