"""Formatting helpers for terminal status output."""

from appnest.constants import BYTES_PER_MB

SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600


def pretty_bytes(size: int) -> str:
    """Format a byte count as decimal megabytes.

    Example:
        >>> pretty_bytes(1_500_000)
        '1.50 MB'

    """
    return f"{size / BYTES_PER_MB:.2f} MB"


def humanize_seconds(seconds: int) -> str:
    """Format elapsed seconds compactly.

    Example:
        >>> humanize_seconds(75)
        '1m 15s'

    """
    seconds = max(int(seconds), 0)
    if seconds < SECONDS_PER_MINUTE:
        return f"{seconds}s"
    if seconds < SECONDS_PER_HOUR:
        minutes, secs = divmod(seconds, SECONDS_PER_MINUTE)
        return f"{minutes}m {secs}s"
    hours, rest = divmod(seconds, SECONDS_PER_HOUR)
    return f"{hours}h {rest // SECONDS_PER_MINUTE}m"
