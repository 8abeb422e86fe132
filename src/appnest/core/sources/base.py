"""Shared release model and asset selection for all source kinds."""

from __future__ import annotations

import platform
import re
from dataclasses import dataclass, field

from appnest.constants import APPIMAGE_EXTENSION, ARCH_ALIASES
from appnest.core.asset import Asset

# Match levels returned by choose_appimage_asset
MATCH_NONE = 0
MATCH_NO_ARCH = 1
MATCH_ARCH = 2

_VERSION_PATTERN = re.compile(
    r"v?\d+(?:\.\d+)+(?:-(?:alpha|beta|rc|pre|dev)\.?\d*)?", re.IGNORECASE
)


@dataclass(frozen=True, slots=True)
class Release:
    """A resolved release: its tag and downloadable assets."""

    tag: str
    assets: list[Asset] = field(default_factory=list)


def get_system_arch() -> str:
    """Return the normalized machine architecture (e.g. ``x86_64``)."""
    machine = platform.machine().lower()
    for arch, aliases in ARCH_ALIASES.items():
        if machine in aliases:
            return arch
    return machine


def _has_token(name: str, token: str) -> bool:
    """Whether token appears in name delimited by non-alphanumerics."""
    pattern = rf"(?<![a-z0-9]){re.escape(token)}(?![a-z0-9_])"
    return re.search(pattern, name) is not None


def choose_appimage_asset(
    assets: list[Asset], arch: str | None = None
) -> tuple[int, Asset | None]:
    """Pick the AppImage asset that fits the machine.

    Args:
        assets: Candidate assets
        arch: Architecture to match (defaults to the running machine)

    Returns:
        Tuple of (match level, asset). Level 2 means the name carries the
        machine architecture, 1 means it carries no architecture marker
        at all, 0 means nothing suitable was found.

    """
    arch = arch or get_system_arch()
    wanted = ARCH_ALIASES.get(arch, (arch,))
    all_aliases = {alias for aliases in ARCH_ALIASES.values() for alias in aliases}

    fallback: Asset | None = None
    for asset in assets:
        name = asset.name.lower()
        if not name.endswith(APPIMAGE_EXTENSION.lower()):
            continue
        if any(_has_token(name, alias) for alias in wanted):
            return MATCH_ARCH, asset
        if fallback is None and not any(
            _has_token(name, alias) for alias in all_aliases
        ):
            fallback = asset

    if fallback is not None:
        return MATCH_NO_ARCH, fallback
    return MATCH_NONE, None


def guess_version(filename: str) -> str | None:
    """Extract a version-looking token from a filename.

    Example:
        >>> guess_version("Foo-1.2.3-x86_64.AppImage")
        '1.2.3'

    """
    match = _VERSION_PATTERN.search(filename)
    return match.group(0) if match else None
