"""Downloadable asset descriptor.

An Asset knows where its bytes live and how many there are. Remote assets
stream through the shared aiohttp session; ``file://`` URLs and plain paths
stream from disk through aiofiles.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import unquote, urlparse

import aiofiles
import aiohttp

from appnest.constants import CHUNK_SIZE
from appnest.exceptions import DownloadError
from appnest.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = get_logger(__name__)

REMOTE_SCHEMES = ("http", "https")


@dataclass(frozen=True, slots=True)
class Asset:
    """A downloadable artifact.

    Attributes:
        name: Asset filename
        download_url: http(s) URL, ``file://`` URL or local path
        size: Declared size in bytes (0 when unknown)

    """

    name: str
    download_url: str
    size: int

    @property
    def is_remote(self) -> bool:
        """Whether the bytes come over HTTP."""
        return urlparse(self.download_url).scheme in REMOTE_SCHEMES

    @property
    def local_path(self) -> Path:
        """Filesystem path of a local asset."""
        parsed = urlparse(self.download_url)
        if parsed.scheme == "file":
            return Path(unquote(parsed.path))
        return Path(self.download_url)

    @asynccontextmanager
    async def open_stream(
        self,
        session: aiohttp.ClientSession | None = None,
        headers: dict[str, str] | None = None,
    ) -> AsyncIterator[AsyncIterator[bytes]]:
        """Open a streaming read of the asset's bytes.

        Args:
            session: HTTP session, required for remote assets
            headers: Optional extra request headers

        Yields:
            Async iterator of byte chunks

        Raises:
            DownloadError: If the stream cannot be opened

        """
        if self.is_remote:
            if session is None:
                msg = "An HTTP session is required for remote assets"
                raise DownloadError(msg, target=self.name)
            logger.debug("Opening remote stream: %s", self.download_url)
            try:
                async with session.get(
                    self.download_url, headers=headers or {}
                ) as response:
                    response.raise_for_status()
                    yield response.content.iter_chunked(CHUNK_SIZE)
            except aiohttp.ClientError as e:
                msg = f"Request to {self.download_url} failed: {e}"
                raise DownloadError(msg, target=self.name, cause=e) from e
            return

        path = self.local_path
        logger.debug("Opening local stream: %s", path)
        try:
            f = await aiofiles.open(path, mode="rb")
        except OSError as e:
            msg = f"Cannot open {path}: {e}"
            raise DownloadError(msg, target=self.name, cause=e) from e
        try:
            yield _iter_file(f)
        finally:
            await f.close()


async def _iter_file(f) -> AsyncIterator[bytes]:  # noqa: ANN001
    """Yield chunks from an open aiofiles handle."""
    while True:
        chunk = await f.read(CHUNK_SIZE)
        if not chunk:
            break
        yield chunk
