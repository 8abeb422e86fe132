"""Removal of installed apps.

A removal is journaled like an install: the app's directory and desktop
entry are registered as pending before anything is deleted, so a removal
interrupted half-way is finished by the next run's recovery.
"""

from __future__ import annotations

import asyncio
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from appnest.config.paths import AppPaths
from appnest.constants import APP_CONFIG_FILE_NAME
from appnest.core.transactions import PendingInstallation
from appnest.exceptions import ConfigStoreError
from appnest.logger import get_logger

if TYPE_CHECKING:
    from appnest.config.store import ConfigStore
    from appnest.core.transactions import TransactionJournal
    from appnest.types import Settings

logger = get_logger(__name__)


@dataclass(slots=True)
class RemovalResult:
    """What a removal did."""

    app_id: str
    success: bool
    name: str = ""
    removed_paths: list[str] = field(default_factory=list)
    error: str = ""


class RemoveService:
    """Removes installed apps and their desktop integration."""

    def __init__(
        self,
        settings: Settings,
        store: ConfigStore,
        journal: TransactionJournal,
    ) -> None:
        """Create a new RemoveService.

        Args:
            settings: Loaded global settings
            store: Config store holding the installed-apps registry
            journal: Transaction journal guarding the removal

        """
        self.settings = settings
        self.store = store
        self.journal = journal

    async def remove_app(self, app_id: str) -> RemovalResult:
        """Remove an installed app.

        Args:
            app_id: Id of the app to remove

        Returns:
            RemovalResult; ``success`` is False when the id is unknown

        Raises:
            ConfigStoreError: If the registry cannot be updated
            JournalError: If the journal cannot be updated

        """
        config = self.store.read_config()
        app_dir_name = config.installed.get(app_id)
        if app_dir_name is None:
            return RemovalResult(
                app_id=app_id,
                success=False,
                error=f"No installed app with id '{app_id}'",
            )

        app_dir = Path(app_dir_name)
        name, desktop = self._installed_details(app_id, app_dir)

        await self.journal.add_pending(
            app_id,
            PendingInstallation(
                involved_dirs=[str(app_dir)],
                involved_files=[str(desktop)],
            ),
        )

        del config.installed[app_id]
        self.store.save_config(config)

        removed = await asyncio.to_thread(_delete_paths, app_dir, desktop)
        await self.journal.remove_pending(app_id)
        logger.info("Removed %s", app_id)
        return RemovalResult(
            app_id=app_id, success=True, name=name, removed_paths=removed
        )

    def _installed_details(
        self, app_id: str, app_dir: Path
    ) -> tuple[str, Path]:
        """Return the display name and desktop entry recorded at install.

        The per-app record is read from the registered directory, so an app
        installed before ``apps_dir`` or ``desktop_dir`` changed is still
        found. Apps without a readable record fall back to the id and the
        desktop entry the current settings would use.
        """
        fallback = AppPaths.resolve(self.settings, app_id, app_id).desktop
        try:
            app = self.store.read_app_config(app_dir / APP_CONFIG_FILE_NAME)
        except ConfigStoreError:
            logger.debug("No readable app config for %s", app_id)
            return app_id, fallback
        return app.name, Path(app.desktop) if app.desktop else fallback


def _delete_paths(app_dir: Path, desktop: Path) -> list[str]:
    removed = []
    if app_dir.exists():
        shutil.rmtree(app_dir)
        removed.append(str(app_dir))
    if desktop.exists() or desktop.is_symlink():
        desktop.unlink()
        removed.append(str(desktop))
    return removed
