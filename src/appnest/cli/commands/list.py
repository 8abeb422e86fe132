"""List command handler."""
# ruff: noqa: T201

from argparse import Namespace

from appnest.constants import APP_CONFIG_FILE_NAME
from appnest.exceptions import ConfigStoreError
from appnest.logger import get_logger
from appnest.ui.display import cyan

from .base import BaseCommandHandler

logger = get_logger(__name__)


class ListHandler(BaseCommandHandler):
    """Show installed applications."""

    async def execute(self, args: Namespace) -> int:  # noqa: ARG002
        """Print one line per installed app."""
        entries = list(self.store.iter_installed())
        if not entries:
            print("No applications installed.")
            return 0

        for app_id, app_dir in entries:
            config_path = app_dir / APP_CONFIG_FILE_NAME
            try:
                app = self.store.read_app_config(config_path)
            except ConfigStoreError as e:
                logger.warning("Cannot read config of %s: %s", app_id, e)
                print(f"{app_id:<25} ⚠️  config unreadable")
                continue
            print(f"{app_id:<25} {cyan(app.name)} {app.version} ({app.source})")
        return 0
