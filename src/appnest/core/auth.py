"""GitHub authentication for release API requests.

Tokens come from the ``GITHUB_TOKEN`` environment variable or, failing that,
the system keyring. Without a token GitHub's anonymous rate limit applies.
"""

from __future__ import annotations

import os
import re

import keyring
import keyring.errors

from appnest.constants import (
    GITHUB_TOKEN_ENV,
    KEYRING_SERVICE_NAME,
    KEYRING_USERNAME,
)
from appnest.logger import get_logger

logger = get_logger(__name__)

MAX_TOKEN_LENGTH: int = 255

_PREFIXED_TOKEN_PATTERNS = (
    r"^ghp_[A-Za-z0-9_]{36,251}$",  # Personal Access Tokens
    r"^gho_[A-Za-z0-9_]{36,251}$",  # OAuth Access tokens
    r"^ghu_[A-Za-z0-9_]{36,251}$",  # GitHub App user-to-server tokens
    r"^ghs_[A-Za-z0-9_]{36,251}$",  # GitHub App server-to-server tokens
    r"^ghr_[A-Za-z0-9_]{36,251}$",  # GitHub App refresh tokens
    r"^github_pat_[A-Za-z0-9_]{36,243}$",  # Fine-grained PATs
)


def validate_github_token(token: str | None) -> bool:
    """Validate GitHub token format.

    Accepts classic 40-hex tokens and the prefixed formats (``ghp_``,
    ``gho_``, ``ghu_``, ``ghs_``, ``ghr_``, ``github_pat_``).

    Args:
        token: The token to validate

    Returns:
        True if the token format is valid, False otherwise

    """
    if not token or not isinstance(token, str):
        return False

    token = token.strip()
    if not token or len(token) > MAX_TOKEN_LENGTH:
        return False

    if re.match(r"^[a-f0-9]{40}$", token):
        return True

    return any(re.match(pattern, token) for pattern in _PREFIXED_TOKEN_PATTERNS)


class KeyringTokenStore:
    """GitHub token storage in the system keyring."""

    def __init__(
        self,
        service: str = KEYRING_SERVICE_NAME,
        username: str = KEYRING_USERNAME,
    ) -> None:
        """Initialize the keyring token store.

        Args:
            service: The service name for keyring storage
            username: The username for keyring storage

        """
        self.service = service
        self.username = username

    def get(self) -> str | None:
        """Retrieve the stored token, or None if absent or unavailable."""
        try:
            token = keyring.get_password(self.service, self.username)
        except keyring.errors.KeyringError:
            # Security: Don't log exception details
            logger.debug("Keyring access failed")
            return None
        if token:
            logger.debug("GitHub token retrieved from keyring (value hidden)")
            return token
        return None

    def set(self, token: str) -> None:
        """Store the token in the keyring.

        Raises:
            keyring.errors.KeyringError: If keyring storage fails

        """
        keyring.set_password(self.service, self.username, token)
        logger.debug("Token saved to keyring")

    def delete(self) -> None:
        """Remove the token from the keyring.

        Raises:
            keyring.errors.PasswordDeleteError: If no token is stored

        """
        keyring.delete_password(self.service, self.username)
        logger.debug("Token removed from keyring")


class GitHubAuthManager:
    """Apply GitHub authentication to API request headers."""

    def __init__(self, token_store: KeyringTokenStore | None = None) -> None:
        """Initialize the auth manager.

        Args:
            token_store: Optional token storage (defaults to keyring)

        """
        self.token_store = (
            token_store if token_store is not None else KeyringTokenStore()
        )
        self._user_notified = False

    def get_token(self) -> str | None:
        """Return the token from the environment or the token store."""
        env_token = os.getenv(GITHUB_TOKEN_ENV)
        if env_token and env_token.strip():
            return env_token.strip()
        return self.token_store.get()

    def apply_auth(self, headers: dict[str, str]) -> dict[str, str]:
        """Set the Authorization header when a token is available.

        Without a token the user is told once per session about the
        anonymous rate limit.

        Args:
            headers: HTTP headers to update

        Returns:
            The updated headers

        """
        token = self.get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        elif not self._user_notified:
            self._user_notified = True
            logger.info(
                "No GitHub token configured. API rate limits apply "
                "(60 requests/hour). Use 'appnest auth --save-token' "
                "to raise the limit."
            )
        return headers

    def is_authenticated(self) -> bool:
        """Return whether a non-empty token is available."""
        token = self.get_token()
        return token is not None and len(token.strip()) > 0
