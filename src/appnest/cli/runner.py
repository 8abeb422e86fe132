"""CLI runner for appnest.

Orchestrates the execution of CLI commands by routing parsed
arguments to the appropriate command handlers.
"""
# ruff: noqa: T201

from argparse import Namespace
from collections.abc import Sequence
from pathlib import Path

from appnest import __version__
from appnest.config import ConfigStore, Paths, SettingsManager
from appnest.constants import TRANSACTIONS_FILE_NAME
from appnest.core.auth import GitHubAuthManager
from appnest.core.transactions import (
    TransactionJournal,
    recover_pending_installations,
)
from appnest.exceptions import AppnestError
from appnest.logger import get_logger, update_logger_from_config

from .commands import (
    AuthHandler,
    BaseCommandHandler,
    InstallCommandHandler,
    ListHandler,
    RemoveHandler,
    UpgradeHandler,
)
from .parser import CLIParser

logger = get_logger(__name__)


class CLIRunner:
    """CLI command runner and orchestrator."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize CLI runner with shared dependencies.

        Args:
            config_dir: Configuration directory (defaults to
                Paths.CONFIG_DIR)

        """
        self.config_dir = config_dir or Paths.CONFIG_DIR
        Paths.ensure_directories(self.config_dir)
        self.settings = SettingsManager(self.config_dir).load()
        update_logger_from_config(self.settings)

        self.store = ConfigStore(self.config_dir)
        self.journal = TransactionJournal(
            self.config_dir / TRANSACTIONS_FILE_NAME
        )
        self.auth_manager = GitHubAuthManager()
        self._init_command_handlers()

    def _init_command_handlers(self) -> None:
        """Create one handler instance per command."""
        deps = (self.settings, self.store, self.journal, self.auth_manager)
        self.command_handlers: dict[str, BaseCommandHandler] = {
            "install": InstallCommandHandler(*deps),
            "list": ListHandler(*deps),
            "remove": RemoveHandler(*deps),
            "auth": AuthHandler(*deps),
            "upgrade": UpgradeHandler(*deps),
        }

    async def run(self, argv: Sequence[str] | None = None) -> int:
        """Run the CLI application.

        Parses arguments, finishes any interrupted installation, and
        routes to the command handler.

        Args:
            argv: Command-line arguments (defaults to sys.argv[1:])

        Returns:
            Process exit status

        """
        args = CLIParser().parse_args(argv)

        if getattr(args, "version", False):
            print(__version__)
            return 0

        if not args.command:
            print("❌ No command specified. Use --help.")
            return 1

        try:
            recovered = await recover_pending_installations(
                self.journal, self.store
            )
            if recovered:
                print(
                    "⚠️  Cleaned up interrupted installation(s): "
                    + ", ".join(recovered)
                )
            return await self._execute_command(args)
        except AppnestError as e:
            logger.error("%s", e)  # noqa: TRY400
            print(f"❌ {e}")
            return 1
        except KeyboardInterrupt:
            print("\n⏹️  Operation cancelled by user")
            return 1

    async def _execute_command(self, args: Namespace) -> int:
        """Execute the specified command with the appropriate handler."""
        handler = self.command_handlers.get(args.command)
        if handler is None:
            print(f"❌ Unknown command: {args.command}")
            return 1
        return await handler.execute(args)
