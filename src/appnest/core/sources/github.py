"""GitHub releases source."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

import aiohttp

from appnest.constants import GITHUB_API_ACCEPT, GITHUB_API_BASE
from appnest.core.asset import Asset
from appnest.core.auth import GitHubAuthManager
from appnest.core.sources.base import Release
from appnest.exceptions import SourceError
from appnest.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = get_logger(__name__)

HTTP_NOT_FOUND = 404

_REPO_URL_PATTERN = re.compile(
    r"^(?:https?://)?(?:www\.)?github\.com/([\w.-]+)/([\w.-]+?)(?:\.git)?/?$"
)


def parse_github_repo_url(url: str) -> tuple[str, str] | None:
    """Parse ``https://github.com/<owner>/<repo>`` into (owner, repo).

    Returns:
        (owner, repo) or None when url is not a repository URL

    """
    match = _REPO_URL_PATTERN.match(url.strip())
    if not match:
        return None
    return match.group(1), match.group(2)


@dataclass(slots=True)
class GithubSource:
    """Releases of a GitHub repository.

    Attributes:
        owner: Repository owner
        repo: Repository name
        prerelease: Select the newest release even if it is a pre-release
        tag_name: Pin a specific tag (empty for latest)

    """

    kind: ClassVar[str] = "github"

    owner: str
    repo: str
    prerelease: bool = False
    tag_name: str = ""

    def release_url(self) -> str:
        """API URL for the release this source selects."""
        base = f"{GITHUB_API_BASE}/repos/{self.owner}/{self.repo}/releases"
        if self.tag_name:
            return f"{base}/tags/{self.tag_name}"
        if self.prerelease:
            return f"{base}?per_page=1"
        return f"{base}/latest"

    async def fetch_release(
        self,
        session: aiohttp.ClientSession,
        auth_manager: GitHubAuthManager | None = None,
    ) -> Release:
        """Fetch the selected release and its assets.

        Raises:
            SourceError: If the release cannot be fetched or decoded

        """
        url = self.release_url()
        target = f"{self.owner}/{self.repo}"
        headers = {"Accept": GITHUB_API_ACCEPT}
        if auth_manager is not None:
            auth_manager.apply_auth(headers)

        logger.debug("Fetching GitHub release: %s", url)
        try:
            async with session.get(url, headers=headers) as response:
                if response.status == HTTP_NOT_FOUND:
                    msg = "no matching release found"
                    raise SourceError(msg, target=target)
                response.raise_for_status()
                data = await response.json()
        except aiohttp.ClientError as e:
            msg = f"GitHub API request failed: {e}"
            raise SourceError(msg, target=target, cause=e) from e

        if isinstance(data, list):
            if not data:
                msg = "repository has no releases"
                raise SourceError(msg, target=target)
            data = data[0]

        return self._parse_release(data, target)

    @staticmethod
    def _parse_release(data: Mapping[str, Any], target: str) -> Release:
        """Build a Release from an API release object."""
        tag = data.get("tag_name")
        if not tag:
            msg = "release has no tag name"
            raise SourceError(msg, target=target)

        assets = []
        for raw in data.get("assets") or []:
            name = raw.get("name")
            url = raw.get("browser_download_url")
            if not name or not url:
                continue
            assets.append(
                Asset(name=name, download_url=url, size=int(raw.get("size", 0)))
            )
        return Release(tag=str(tag), assets=assets)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "kind": self.kind,
            "owner": self.owner,
            "repo": self.repo,
            "prerelease": self.prerelease,
            "tag_name": self.tag_name,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GithubSource:
        """Create from a decoded dictionary."""
        return cls(
            owner=str(data["owner"]),
            repo=str(data["repo"]),
            prerelease=bool(data.get("prerelease", False)),
            tag_name=str(data.get("tag_name") or ""),
        )
