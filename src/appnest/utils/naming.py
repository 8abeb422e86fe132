"""Naming helpers for app identifiers and bundle filenames."""

import re
from pathlib import Path

MAX_FILENAME_LENGTH = 255


def sanitize_filename(filename: str) -> str:
    """Remove invalid characters from filename for safe filesystem use.

    Args:
        filename: Filename to sanitize

    Returns:
        Sanitized filename safe for filesystem operations

    """
    sanitized = re.sub(r'[<>:"/\\|?*]', "", filename)
    sanitized = "".join(char for char in sanitized if ord(char) >= 32)

    if len(sanitized) > MAX_FILENAME_LENGTH:
        name, ext = Path(sanitized).stem, Path(sanitized).suffix
        sanitized = name[: MAX_FILENAME_LENGTH - len(ext)] + ext

    return sanitized.strip()


def clean_id(value: str) -> str:
    """Normalize an app identifier into slug form.

    Lowercases, replaces every run of characters outside ``[a-z0-9]`` with a
    single hyphen and trims hyphens from both ends. May return an empty
    string, which callers must reject.

    Example:
        >>> clean_id("  My App_2 ")
        'my-app-2'

    """
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower())
    return slug.strip("-")


def construct_app_id(owner: str, repo: str) -> str:
    """Build the default identifier for a GitHub-hosted app."""
    return clean_id(f"{owner}-{repo}")
