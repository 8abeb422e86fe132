"""appnest self-upgrade support.

appnest updates itself with ``uv tool install --upgrade`` from the
official GitHub repository. Version checks always hit the GitHub API so a
user asking for an upgrade sees the release that is actually published.
"""

from __future__ import annotations

import os
import re
import shutil
from typing import TYPE_CHECKING

from packaging.version import InvalidVersion, Version

from appnest.constants import APP_GITHUB_OWNER, APP_GITHUB_REPO, APP_GITHUB_URL
from appnest.core.sources import GithubSource
from appnest.exceptions import SourceError
from appnest.logger import get_logger

if TYPE_CHECKING:
    import aiohttp

    from appnest.core.auth import GitHubAuthManager

logger = get_logger(__name__)

_PRERELEASE_MAP = {
    "alpha": "a",
    "beta": "b",
    "rc": "rc",
}

_PRERELEASE_RE = re.compile(
    r"""
    ^
    (?P<base>\d+\.\d+\.\d+)
    (?:-
        (?P<label>alpha|beta|rc)
        \.?(?P<num>\d*)
    )?
    $
    """,
    re.VERBOSE,
)


def normalize_version(v: str) -> str:
    """Normalize semver-like tags (``v1.2.0-beta.1``) to PEP 440."""
    v = v.strip().lstrip("v")

    match = _PRERELEASE_RE.match(v)
    if not match:
        return v

    base = match.group("base")
    label = match.group("label")
    if not label:
        return base

    num = match.group("num") or "0"
    return f"{base}{_PRERELEASE_MAP[label]}{num}"


def is_candidate_newer(current_version: str, candidate_version: str) -> bool:
    """Return True if candidate version is newer than current.

    An unparsable current version (a ``dev`` checkout, say) is upgraded to
    any parsable candidate; an unparsable candidate never is.
    """
    try:
        current = Version(normalize_version(current_version))
    except InvalidVersion:
        try:
            Version(normalize_version(candidate_version))
        except InvalidVersion:
            return candidate_version > current_version
        return True

    try:
        candidate = Version(normalize_version(candidate_version))
    except InvalidVersion:
        return False

    return candidate > current


async def fetch_latest_version(
    session: aiohttp.ClientSession,
    auth_manager: GitHubAuthManager | None = None,
) -> str | None:
    """Fetch the tag of appnest's latest GitHub release.

    Returns:
        The release tag, or None if it could not be fetched

    """
    source = GithubSource(owner=APP_GITHUB_OWNER, repo=APP_GITHUB_REPO)
    try:
        release = await source.fetch_release(session, auth_manager)
    except SourceError as e:
        logger.warning(
            "Unable to fetch latest release for %s/%s: %s",
            APP_GITHUB_OWNER,
            APP_GITHUB_REPO,
            e,
        )
        return None
    return release.tag or None


async def should_perform_self_update(
    current_version: str,
    session: aiohttp.ClientSession,
    auth_manager: GitHubAuthManager | None = None,
) -> tuple[bool, str | None]:
    """Determine if a newer release is available.

    Returns:
        A tuple of (should_upgrade, latest_version). When the latest
        version is unknown the upgrade goes ahead and latest is None.

    """
    latest_version = await fetch_latest_version(session, auth_manager)
    if not latest_version:
        logger.warning(
            "Could not determine latest appnest version; proceeding "
            "with upgrade."
        )
        return True, None

    return is_candidate_newer(current_version, latest_version), latest_version


def perform_self_update() -> bool:
    """Replace the running process with ``uv tool install --upgrade``.

    Returns:
        False if the upgrade could not be started. Does not return on
        success since the process is replaced.

    """
    uv_executable = shutil.which("uv") or "uv"
    logger.debug("Executing: uv tool install --upgrade git+%s", APP_GITHUB_URL)

    try:
        os.execvp(  # noqa: S606
            uv_executable,
            [
                uv_executable,
                "tool",
                "install",
                "--upgrade",
                f"git+{APP_GITHUB_URL}",
            ],
        )
    except OSError:
        logger.exception("Failed to execute uv upgrade")
        return False

    return False
