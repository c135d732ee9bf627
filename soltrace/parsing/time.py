"""
UTC time string <-> unix timestamp conversion.

Format is "YYYY-MM-DD HH:MM:SS" in both directions, always interpreted as UTC.
"""

from __future__ import annotations

from datetime import datetime, timezone

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def convert_time_to_unix(value: str) -> int:
    """Parse "2022-05-20 12:00:00" (UTC) into unix seconds. Raises ValueError on bad input."""
    parsed = datetime.strptime(value.strip(), TIME_FORMAT)
    return int(parsed.replace(tzinfo=timezone.utc).timestamp())


def convert_unix_to_time(timestamp: int) -> str:
    """Format unix seconds as a UTC "YYYY-MM-DD HH:MM:SS" string."""
    return datetime.fromtimestamp(int(timestamp), tz=timezone.utc).strftime(TIME_FORMAT)
