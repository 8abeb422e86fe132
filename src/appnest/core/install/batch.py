"""Sequential batch install with crash-recovery bookkeeping."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TextIO

from appnest.core.progress import print_status
from appnest.core.transactions import PendingInstallation
from appnest.exceptions import AppnestError
from appnest.logger import get_logger
from appnest.types import InstallStatus

if TYPE_CHECKING:
    from collections.abc import Sequence

    import aiohttp

    from appnest.config.store import ConfigStore
    from appnest.core.install.pipeline import InstallableApp
    from appnest.core.transactions import TransactionJournal

logger = get_logger(__name__)


@dataclass(slots=True)
class BatchResult:
    """Outcome of a batch install.

    Attributes:
        installed: Ids installed successfully, in order
        failed: Id of the install that stopped the batch (at most one)
        skipped: Ids never attempted because the batch stopped
        errors: Error per failed id

    """

    installed: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: dict[str, Exception] = field(default_factory=dict)

    @property
    def total(self) -> int:
        """Number of apps in the batch."""
        return len(self.installed) + len(self.failed) + len(self.skipped)

    @property
    def success_count(self) -> int:
        """Number of apps installed."""
        return len(self.installed)

    @property
    def fail_count(self) -> int:
        """Number of apps not installed, failed or never attempted."""
        return self.total - self.success_count


async def install_apps(
    apps: Sequence[InstallableApp],
    journal: TransactionJournal,
    store: ConfigStore,
    session: aiohttp.ClientSession | None = None,
    out: TextIO | None = None,
) -> BatchResult:
    """Install apps one after another, stopping at the first failure.

    Each install is registered in the journal before it touches the
    filesystem and cleared only after its config has been saved. A failed
    install keeps its journal entry so the next run can clean it up.

    Args:
        apps: Apps to install, in order
        journal: Transaction journal
        store: Config store the pipeline saves into
        session: HTTP session for remote assets
        out: Stream for status lines (defaults to stdout)

    Returns:
        BatchResult describing what happened

    Raises:
        JournalError: If the journal cannot be updated

    """
    result = BatchResult()
    count = len(apps)
    for i, app in enumerate(apps):
        app_id = app.app.id
        app.index = i
        app.count = count
        app.started_at = time.time()
        app.set_status(InstallStatus.DOWNLOADING)
        print_status(app, out)

        await journal.add_pending(
            app_id,
            PendingInstallation(
                involved_dirs=[str(app.paths.dir)],
                involved_files=[str(app.paths.desktop)],
            ),
        )

        try:
            await app.install(store, session=session, out=out)
        except AppnestError as e:
            app.set_status(InstallStatus.FAILED)
            print_status(app, out)
            logger.error("Failed to install %s: %s", app_id, e)  # noqa: TRY400
            result.failed.append(app_id)
            result.errors[app_id] = e
            result.skipped.extend(rest.app.id for rest in apps[i + 1 :])
            break

        app.set_status(InstallStatus.INSTALLED)
        print_status(app, out)
        result.installed.append(app_id)
        await journal.remove_pending(app_id)

    return result
