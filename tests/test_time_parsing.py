"""
Tests for UTC time string conversion (parsing.time).
"""

from __future__ import annotations

import pytest

from soltrace.parsing.time import convert_time_to_unix, convert_unix_to_time


def test_convert_time_to_unix_is_utc():
    assert convert_time_to_unix("2022-05-20 12:00:00") == 1_653_048_000
    assert convert_time_to_unix("1970-01-01 00:00:00") == 0


def test_convert_unix_to_time_is_utc():
    assert convert_unix_to_time(1_653_048_000) == "2022-05-20 12:00:00"
    assert convert_unix_to_time(250) == "1970-01-01 00:04:10"


def test_convert_time_strips_whitespace():
    assert convert_time_to_unix("  1970-01-01 00:02:30 ") == 150


@pytest.mark.parametrize("value", ["2022-05-20", "2022/05/20 12:00:00", "not a time", ""])
def test_convert_time_rejects_other_formats(value):
    with pytest.raises(ValueError):
        convert_time_to_unix(value)
