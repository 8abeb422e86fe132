"""Small helpers shared across appnest modules."""

from appnest.utils.formatting import humanize_seconds, pretty_bytes
from appnest.utils.naming import (
    clean_id,
    construct_app_id,
    sanitize_filename,
)

__all__ = [
    "clean_id",
    "construct_app_id",
    "humanize_seconds",
    "pretty_bytes",
    "sanitize_filename",
]
