"""Base command handler for appnest CLI commands.

This module provides the abstract base class that all command handlers
inherit from, ensuring consistent interface and shared functionality
across commands.
"""

from abc import ABC, abstractmethod
from argparse import Namespace

from appnest.config import ConfigStore
from appnest.core.auth import GitHubAuthManager
from appnest.core.transactions import TransactionJournal
from appnest.logger import get_logger
from appnest.types import Settings

logger = get_logger(__name__)


class BaseCommandHandler(ABC):
    """Abstract base class for all command handlers.

    CLIRunner acts as the composition root, creating the shared
    dependencies and injecting them into each handler.

    Note:
        Concrete handlers must implement the execute() method.
    """

    def __init__(
        self,
        settings: Settings,
        store: ConfigStore,
        journal: TransactionJournal,
        auth_manager: GitHubAuthManager,
    ) -> None:
        """Initialize the command handler with shared dependencies.

        Args:
            settings: Loaded global settings
            store: Config store for the registry and per-app records
            journal: Transaction journal
            auth_manager: GitHub authentication manager

        """
        self.settings = settings
        self.store = store
        self.journal = journal
        self.auth_manager = auth_manager

    @abstractmethod
    async def execute(self, args: Namespace) -> int:
        """Execute the command with the given arguments.

        Args:
            args: Parsed command-line arguments

        Returns:
            Process exit status

        """
