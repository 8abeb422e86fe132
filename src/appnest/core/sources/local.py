"""Local file source."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

from appnest.core.asset import Asset
from appnest.core.sources.base import Release, guess_version
from appnest.exceptions import SourceError

if TYPE_CHECKING:
    from collections.abc import Mapping

    import aiohttp

    from appnest.core.auth import GitHubAuthManager

DEFAULT_LOCAL_TAG = "local"


@dataclass(slots=True)
class LocalSource:
    """A bundle already present on this machine.

    Attributes:
        path: Absolute path of the bundle file
        version: Version tag given by the user (optional)

    """

    kind: ClassVar[str] = "local"

    path: str
    version: str = ""

    async def fetch_release(
        self,
        session: aiohttp.ClientSession | None = None,  # noqa: ARG002
        auth_manager: GitHubAuthManager | None = None,  # noqa: ARG002
    ) -> Release:
        """Describe the local file as a single-asset release.

        Raises:
            SourceError: If the path is not a readable regular file

        """
        file_path = Path(self.path).expanduser().resolve()
        if not file_path.is_file():
            msg = "file does not exist"
            raise SourceError(msg, target=str(file_path))
        try:
            size = file_path.stat().st_size
        except OSError as e:
            msg = f"cannot stat file: {e}"
            raise SourceError(msg, target=str(file_path), cause=e) from e

        tag = self.version or guess_version(file_path.name) or DEFAULT_LOCAL_TAG
        return Release(
            tag=tag,
            assets=[
                Asset(
                    name=file_path.name,
                    download_url=file_path.as_uri(),
                    size=size,
                )
            ],
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {"kind": self.kind, "path": self.path, "version": self.version}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LocalSource:
        """Create from a decoded dictionary."""
        return cls(path=str(data["path"]), version=str(data.get("version") or ""))
