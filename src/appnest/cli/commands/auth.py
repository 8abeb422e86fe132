"""Auth command handler.

Manages the GitHub token kept in the system keyring.
"""
# ruff: noqa: T201

import getpass
from argparse import Namespace

import keyring.errors

from appnest.core.auth import validate_github_token
from appnest.logger import get_logger

from .base import BaseCommandHandler

logger = get_logger(__name__)


class AuthHandler(BaseCommandHandler):
    """Handler for auth command operations."""

    async def execute(self, args: Namespace) -> int:
        """Execute the auth command."""
        if args.save_token:
            return self._save_token()
        if args.remove_token:
            return self._remove_token()
        return self._show_status()

    def _save_token(self) -> int:
        """Prompt for a token, validate it and store it in the keyring."""
        try:
            token = getpass.getpass(
                prompt="Enter your GitHub token (input hidden): "
            ).strip()
            confirm_token = getpass.getpass(
                prompt="Confirm your GitHub token: "
            ).strip()
        except (EOFError, KeyboardInterrupt):
            print("❌ Token input aborted")
            return 1

        if not token:
            print("❌ Token cannot be empty")
            return 1
        if token != confirm_token:
            print("❌ Tokens do not match")
            return 1
        if not validate_github_token(token):
            print("❌ Invalid GitHub token format")
            return 1

        try:
            self.auth_manager.token_store.set(token)
        except keyring.errors.KeyringError as e:
            logger.error("Failed to save token to keyring: %s", type(e).__name__)  # noqa: TRY400
            print("❌ Could not save the token to the system keyring")
            return 1
        print("✅ GitHub token saved")
        return 0

    def _remove_token(self) -> int:
        """Remove the stored token from the keyring."""
        try:
            self.auth_manager.token_store.delete()
        except keyring.errors.PasswordDeleteError:
            print("⚠️  No GitHub token found in keyring")
            return 0
        except keyring.errors.KeyringError as e:
            logger.error("Failed to remove token: %s", type(e).__name__)  # noqa: TRY400
            print("❌ Could not remove the token from the system keyring")
            return 1
        print("✅ GitHub token removed")
        return 0

    def _show_status(self) -> int:
        """Show whether a token is configured."""
        if self.auth_manager.is_authenticated():
            print("✅ GitHub token configured")
        else:
            print("❌ No GitHub token configured")
            print("💡 Run 'appnest auth --save-token' to add one")
        return 0
