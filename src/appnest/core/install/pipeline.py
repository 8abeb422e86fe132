"""Per-app install pipeline: download, integrate, save config.

Each stage raises its own AppnestError subclass and leaves whatever it
created on disk in place; cleaning up after a failure is the transaction
journal's job.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

import aiofiles

from appnest.constants import SCRATCH_DIR_NAME
from appnest.core.appimage import deflate_appimage
from appnest.core.progress import StatusTicker
from appnest.exceptions import (
    DownloadError,
    ExtractionError,
    InvalidStatusTransition,
)
from appnest.logger import get_logger
from appnest.types import InstallStatus

if TYPE_CHECKING:
    import aiohttp

    from appnest.config.paths import AppPaths
    from appnest.config.store import ConfigStore
    from appnest.core.asset import Asset
    from appnest.core.sources import Source
    from appnest.types import AppConfig

logger = get_logger(__name__)

EXECUTABLE_MODE = 0o755
PARTIAL_SUFFIX = ".part"


@dataclass(slots=True)
class InstallableApp:
    """One app on its way through the install pipeline.

    Attributes:
        app: Record saved once the install succeeds
        source: Where the bundle came from
        paths: Install locations
        asset: Bundle to download
        index: Position in the batch (0-based)
        count: Size of the batch
        started_at: Epoch seconds when the install started
        progress: Bytes written so far
        print_cycle: Number of status lines printed
        status: Current pipeline state

    """

    app: AppConfig
    source: Source
    paths: AppPaths
    asset: Asset
    index: int = 0
    count: int = 1
    started_at: float = 0.0
    progress: int = 0
    print_cycle: int = 0
    status: InstallStatus = InstallStatus.DOWNLOADING

    @property
    def version(self) -> str:
        """Release tag being installed."""
        return self.app.version

    @property
    def total_size(self) -> int:
        """Declared size of the bundle in bytes."""
        return self.asset.size

    def set_status(self, status: InstallStatus) -> None:
        """Move to a new state.

        Raises:
            InvalidStatusTransition: If the current state is terminal

        """
        if self.status is status:
            return
        if self.status.is_terminal:
            msg = f"cannot go from {self.status.value} to {status.value}"
            raise InvalidStatusTransition(msg, target=self.app.id)
        self.status = status

    async def install(
        self,
        store: ConfigStore,
        session: aiohttp.ClientSession | None = None,
        out: TextIO | None = None,
    ) -> None:
        """Run download, integrate and save_config in order.

        The status line is redrawn in the background until this returns
        or raises.

        Raises:
            AppnestError: From whichever stage failed

        """
        async with StatusTicker(self, out):
            await self.download(session)
            self.set_status(InstallStatus.INTEGRATING)
            await self.integrate()
            self.save_config(store)

    async def download(self, session: aiohttp.ClientSession | None = None) -> None:
        """Stream the asset into place as an executable bundle.

        Bytes go to a ``.part`` file beside the bundle, which is renamed
        over the bundle only once the stream is complete.

        Raises:
            DownloadError: If the bundle cannot be fetched or put in place

        """
        target = self.app.id
        try:
            self.paths.dir.mkdir(parents=True, exist_ok=True)
            self.paths.desktop.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(
                dir=self.paths.dir,
                prefix=f".{self.paths.appimage.name}.",
                suffix=PARTIAL_SUFFIX,
            )
            os.close(fd)
        except OSError as e:
            msg = f"Cannot prepare {self.paths.dir}: {e}"
            raise DownloadError(msg, target=target, cause=e) from e

        temp_path = Path(temp_name)
        self.progress = 0
        logger.debug("Downloading %s to %s", self.asset.name, temp_path)
        try:
            async with (
                self.asset.open_stream(session) as chunks,
                aiofiles.open(temp_path, mode="wb") as f,
            ):
                async for chunk in chunks:
                    await f.write(chunk)
                    self.progress += len(chunk)
        except OSError as e:
            msg = f"Cannot write {temp_path}: {e}"
            raise DownloadError(msg, target=target, cause=e) from e

        if self.asset.size and self.progress < self.asset.size:
            msg = (
                f"stream ended after {self.progress} of "
                f"{self.asset.size} bytes"
            )
            raise DownloadError(msg, target=target)

        try:
            temp_path.replace(self.paths.appimage)
            self.paths.appimage.chmod(EXECUTABLE_MODE)
        except OSError as e:
            msg = f"Cannot install bundle at {self.paths.appimage}: {e}"
            raise DownloadError(msg, target=target, cause=e) from e
        logger.debug(
            "Downloaded %s (%d bytes)", self.paths.appimage, self.progress
        )

    async def integrate(self) -> None:
        """Install the bundle's icon and desktop entry.

        The bundle is unpacked into a scratch directory inside the app
        directory; the scratch directory is removed however this exits.

        Raises:
            ExtractionError: If the bundle cannot be unpacked
            MetadataError: If the icon or desktop entry is missing
            IntegrationError: If they cannot be installed

        """
        scratch = self.paths.dir / SCRATCH_DIR_NAME
        try:
            scratch.mkdir()
        except OSError as e:
            msg = f"Cannot create scratch directory {scratch}: {e}"
            raise ExtractionError(msg, target=self.app.id, cause=e) from e

        try:
            deflated = await deflate_appimage(self.paths.appimage, scratch)
            metadata = deflated.extract_metadata()
            metadata.copy_icon_file(self.paths)
            metadata.install_desktop_file(self.paths, self.app.id)
        finally:
            shutil.rmtree(scratch, ignore_errors=True)

    def save_config(self, store: ConfigStore) -> None:
        """Persist the app record and register it as installed.

        Raises:
            ConfigStoreError: If a record cannot be written

        """
        store.save_app_config(self.paths.config, self.app)
        store.save_source_config(self.paths.source_config, self.source)
        config = store.read_config()
        config.installed[self.app.id] = str(self.paths.dir)
        store.save_config(config)
        logger.debug("Saved config for %s", self.app.id)
