"""Remove command handler."""
# ruff: noqa: T201

from argparse import Namespace

from appnest.core.remove import RemoveService
from appnest.logger import get_logger
from appnest.ui.display import print_warning, prompt_yes_no

from .base import BaseCommandHandler

logger = get_logger(__name__)


class RemoveHandler(BaseCommandHandler):
    """Thin coordinator for remove command."""

    async def execute(self, args: Namespace) -> int:
        """Execute the remove command."""
        installed = self.store.read_config().installed
        unknown = [app_id for app_id in args.apps if app_id not in installed]
        for app_id in unknown:
            print(f"❌ No installed app with id '{app_id}'")
        targets = [app_id for app_id in args.apps if app_id in installed]
        if not targets:
            return 1

        if not args.yes and not prompt_yes_no(
            f"Remove {', '.join(targets)}?"
        ):
            print_warning("Aborted...")
            return 0

        service = RemoveService(self.settings, self.store, self.journal)
        failures = len(unknown)
        for app_id in targets:
            result = await service.remove_app(app_id)
            if result.success:
                print(f"✅ Removed {result.name} ({app_id})")
            else:
                failures += 1
                print(f"❌ {result.error}")
        return 0 if failures == 0 else 1
