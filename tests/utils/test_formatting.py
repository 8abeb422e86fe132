"""Tests for status-line formatting helpers."""

import pytest

from appnest.utils import humanize_seconds, pretty_bytes


@pytest.mark.parametrize(
    ("size", "expected"),
    [
        (0, "0.00 MB"),
        (1_500_000, "1.50 MB"),
        (1_000_000, "1.00 MB"),
        (123_456_789, "123.46 MB"),
    ],
)
def test_pretty_bytes(size: int, expected: str) -> None:
    """Byte counts are shown in decimal megabytes."""
    assert pretty_bytes(size) == expected


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [
        (-3, "0s"),
        (0, "0s"),
        (59, "59s"),
        (75, "1m 15s"),
        (3600, "1h 0m"),
        (3725, "1h 2m"),
    ],
)
def test_humanize_seconds(seconds: int, expected: str) -> None:
    """Elapsed time is compact and coarsens as it grows."""
    assert humanize_seconds(seconds) == expected
