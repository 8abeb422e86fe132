"""Direct HTTP download source."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar
from urllib.parse import unquote, urlparse

import aiohttp

from appnest.core.asset import Asset
from appnest.core.sources.base import Release, guess_version
from appnest.exceptions import SourceError
from appnest.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

    from appnest.core.auth import GitHubAuthManager

logger = get_logger(__name__)

DEFAULT_HTTP_TAG = "latest"


def extract_filename_from_url(url: str) -> str:
    """Extract the last path component of a URL.

    Example:
        >>> extract_filename_from_url("https://example.com/app.AppImage?x=1")
        'app.AppImage'

    """
    return Path(unquote(urlparse(url).path)).name


@dataclass(slots=True)
class HttpSource:
    """A bundle served from a fixed URL.

    Attributes:
        url: Download URL of the bundle
        version: Version tag given by the user (optional)

    """

    kind: ClassVar[str] = "http"

    url: str
    version: str = ""

    async def fetch_release(
        self,
        session: aiohttp.ClientSession,
        auth_manager: GitHubAuthManager | None = None,  # noqa: ARG002
    ) -> Release:
        """Resolve the bundle's size with a HEAD request.

        Raises:
            SourceError: If the URL is unusable or the server refuses it

        """
        name = extract_filename_from_url(self.url)
        if not name:
            msg = "URL does not name a file"
            raise SourceError(msg, target=self.url)

        logger.debug("Resolving HTTP asset: %s", self.url)
        try:
            async with session.head(self.url, allow_redirects=True) as response:
                response.raise_for_status()
                size = int(response.headers.get("Content-Length", 0) or 0)
        except aiohttp.ClientError as e:
            msg = f"HEAD request failed: {e}"
            raise SourceError(msg, target=self.url, cause=e) from e

        tag = self.version or guess_version(name) or DEFAULT_HTTP_TAG
        return Release(
            tag=tag,
            assets=[Asset(name=name, download_url=self.url, size=size)],
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {"kind": self.kind, "url": self.url, "version": self.version}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> HttpSource:
        """Create from a decoded dictionary."""
        return cls(url=str(data["url"]), version=str(data.get("version") or ""))
