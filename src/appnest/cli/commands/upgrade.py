"""Upgrade command handler.

Upgrades appnest itself. ``--check`` only compares the running version
with the latest GitHub release.
"""
# ruff: noqa: T201

from argparse import Namespace

from appnest import __version__
from appnest.cli.upgrade import perform_self_update, should_perform_self_update
from appnest.core.http_session import create_http_session
from appnest.logger import get_logger

from .base import BaseCommandHandler

logger = get_logger(__name__)


class UpgradeHandler(BaseCommandHandler):
    """Handler for the upgrade (self-update) command."""

    async def execute(self, args: Namespace) -> int:
        """Execute the upgrade command."""
        async with create_http_session(self.settings) as session:
            should_upgrade, latest = await should_perform_self_update(
                __version__, session, self.auth_manager
            )

        if args.check:
            return self._show_check(should_upgrade, latest)

        if not should_upgrade:
            print(
                "✨ You are already running the latest appnest "
                f"({latest or __version__})."
            )
            return 0

        if latest:
            print(f"🚀 Updating appnest from {__version__} to {latest}")
        else:
            print("🚀 Updating appnest...")
        if not perform_self_update():
            print("❌ Upgrade failed. Please try again or update manually.")
            return 1
        return 0

    @staticmethod
    def _show_check(
        should_upgrade: bool,  # noqa: FBT001
        latest: str | None,
    ) -> int:
        if latest is None:
            print(
                "⚠️  Could not determine the latest version. "
                f"Current: {__version__}"
            )
            return 1
        print(f"Current: {__version__}, Latest: {latest}")
        if should_upgrade:
            print("✅ A newer version is available!")
        else:
            print("✨ You are running the latest version.")
        return 0
