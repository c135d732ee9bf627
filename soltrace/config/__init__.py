"""
Configuration management for soltrace.

Loads settings from environment variables and an optional .env file.
"""

from soltrace.config.settings import TraceSettings, get_settings  # noqa: F401

__all__ = ["TraceSettings", "get_settings"]
