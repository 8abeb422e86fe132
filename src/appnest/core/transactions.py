"""Crash-recovery journal of in-flight installations.

An entry exists for an app id from the moment its install starts touching
the filesystem until its config has been saved. Entries left behind by an
interrupted run name every directory and file the install may have created,
so the next run can remove them.

All mutations go through ``TransactionJournal.update``, which holds an
exclusive flock across the whole read-modify-write cycle.
"""

from __future__ import annotations

import asyncio
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import orjson

from appnest.config.paths import Paths
from appnest.config.store import read_json, write_json_atomic
from appnest.core.locking import JournalLock
from appnest.exceptions import JournalError
from appnest.logger import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from appnest.config.store import ConfigStore

logger = get_logger(__name__)

LOCK_SUFFIX = ".lock"


@dataclass(slots=True)
class PendingInstallation:
    """Filesystem locations an in-flight install may have created.

    Attributes:
        involved_dirs: Directories to remove recursively on recovery
        involved_files: Files to remove on recovery

    """

    involved_dirs: list[str] = field(default_factory=list)
    involved_files: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "involved_dirs": list(self.involved_dirs),
            "involved_files": list(self.involved_files),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PendingInstallation:
        """Create from a decoded dictionary.

        Raises:
            ValueError: If an entry is not a mapping of string lists

        """
        if not isinstance(data, dict):
            msg = f"Pending installation must be an object, got {data!r}"
            raise ValueError(msg)  # noqa: TRY004
        return cls(
            involved_dirs=_string_list(data, "involved_dirs"),
            involved_files=_string_list(data, "involved_files"),
        )


def _string_list(data: dict[str, Any], key: str) -> list[str]:
    value = data.get(key, [])
    if not isinstance(value, list) or not all(
        isinstance(item, str) for item in value
    ):
        msg = f"{key} must be a list of strings, got {value!r}"
        raise ValueError(msg)
    return list(value)


@dataclass(slots=True)
class Transactions:
    """Decoded journal content: app id → pending installation."""

    pending_installations: dict[str, PendingInstallation] = field(
        default_factory=dict
    )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "pending_installations": {
                app_id: pending.to_dict()
                for app_id, pending in self.pending_installations.items()
            }
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Transactions:
        """Create from a decoded dictionary."""
        raw = data.get("pending_installations") or {}
        if not isinstance(raw, dict):
            msg = "pending_installations must be an object"
            raise ValueError(msg)  # noqa: TRY004
        return cls(
            pending_installations={
                str(app_id): PendingInstallation.from_dict(entry)
                for app_id, entry in raw.items()
            }
        )


class TransactionJournal:
    """Handle on the on-disk journal.

    Holds no state between calls; every read and update goes to disk.

    Attributes:
        path: Journal file
        lock_path: Lock file guarding the journal

    """

    def __init__(self, path: Path | None = None) -> None:
        """Initialize the journal handle.

        Args:
            path: Journal file (defaults to Paths.TRANSACTIONS_FILE)

        """
        self.path = path or Paths.TRANSACTIONS_FILE
        self.lock_path = self.path.with_name(self.path.name + LOCK_SUFFIX)

    def _load(self) -> Transactions:
        if not self.path.exists():
            return Transactions()
        try:
            return Transactions.from_dict(read_json(self.path))
        except (
            orjson.JSONDecodeError,
            OSError,
            ValueError,
            AttributeError,
        ) as e:
            msg = f"Cannot decode journal: {e}"
            raise JournalError(msg, target=str(self.path), cause=e) from e

    def _store(self, transactions: Transactions) -> None:
        try:
            write_json_atomic(self.path, transactions.to_dict())
        except (orjson.JSONEncodeError, OSError) as e:
            msg = f"Cannot write journal: {e}"
            raise JournalError(msg, target=str(self.path), cause=e) from e

    def _read_locked(self) -> Transactions:
        with JournalLock(self.lock_path):
            return self._load()

    def _update_locked(
        self, mutator: Callable[[Transactions], None]
    ) -> Transactions:
        with JournalLock(self.lock_path):
            transactions = self._load()
            mutator(transactions)
            self._store(transactions)
            return transactions

    async def read(self) -> Transactions:
        """Return a snapshot of the journal.

        Raises:
            JournalError: If the journal cannot be read or decoded

        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._read_locked)

    async def update(
        self, mutator: Callable[[Transactions], None]
    ) -> Transactions:
        """Apply mutator to the journal inside one exclusive lock.

        The file is read, passed to mutator, and written back atomically.
        An exception raised by mutator aborts the write and propagates.

        Args:
            mutator: Callable modifying the decoded journal in place

        Returns:
            The journal content as written

        Raises:
            JournalError: If the journal cannot be locked, read or written

        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._update_locked, mutator)

    async def add_pending(
        self, app_id: str, pending: PendingInstallation
    ) -> None:
        """Register an install in progress."""

        def _add(transactions: Transactions) -> None:
            transactions.pending_installations[app_id] = pending

        await self.update(_add)
        logger.debug("Registered pending installation: %s", app_id)

    async def remove_pending(self, app_id: str) -> None:
        """Clear the entry for a finished install."""

        def _remove(transactions: Transactions) -> None:
            transactions.pending_installations.pop(app_id, None)

        await self.update(_remove)
        logger.debug("Cleared pending installation: %s", app_id)


def _remove_leftovers(app_id: str, pending: PendingInstallation) -> None:
    relative = [
        name
        for name in (*pending.involved_dirs, *pending.involved_files)
        if not Path(name).is_absolute()
    ]
    if relative:
        msg = f"refusing to remove relative paths {relative}"
        raise JournalError(msg, target=app_id)

    for dir_name in pending.involved_dirs:
        directory = Path(dir_name)
        if directory.exists():
            shutil.rmtree(directory)
            logger.info("Removed leftover directory: %s", directory)
    for file_name in pending.involved_files:
        file_path = Path(file_name)
        if file_path.exists() or file_path.is_symlink():
            file_path.unlink()
            logger.info("Removed leftover file: %s", file_path)


def _forget_removed_install(
    store: ConfigStore, app_id: str, pending: PendingInstallation
) -> None:
    config = store.read_config()
    installed_dir = config.installed.get(app_id)
    if installed_dir is None or installed_dir not in pending.involved_dirs:
        return
    if Path(installed_dir).exists():
        return
    del config.installed[app_id]
    store.save_config(config)
    logger.info("Dropped %s from the installed apps registry", app_id)


async def recover_pending_installations(
    journal: TransactionJournal,
    store: ConfigStore,
) -> list[str]:
    """Undo every install a previous run left unfinished.

    Each entry's directories and files are removed. When that removes the
    directory the registry lists for the app (a failed re-install), the
    registry entry goes too. The journal entry is deleted last, so an
    interrupted recovery is simply repeated. Paths that no longer exist
    are skipped.

    Args:
        journal: Journal to recover from
        store: Config store holding the installed-apps registry

    Returns:
        Sorted ids of the recovered installs

    Raises:
        JournalError: If the journal cannot be read or written, or an
            entry names a relative path
        ConfigStoreError: If the registry cannot be updated
        OSError: If a leftover path cannot be removed

    """
    snapshot = await journal.read()
    recovered: list[str] = []
    for app_id in sorted(snapshot.pending_installations):
        pending = snapshot.pending_installations[app_id]
        logger.warning("Recovering interrupted installation: %s", app_id)
        await asyncio.to_thread(_remove_leftovers, app_id, pending)
        _forget_removed_install(store, app_id, pending)
        await journal.remove_pending(app_id)
        recovered.append(app_id)
    return recovered
