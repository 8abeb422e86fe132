"""Command handlers for the appnest CLI."""

from .auth import AuthHandler
from .base import BaseCommandHandler
from .install import InstallCommandHandler
from .list import ListHandler
from .remove import RemoveHandler
from .upgrade import UpgradeHandler

__all__ = [
    "AuthHandler",
    "BaseCommandHandler",
    "InstallCommandHandler",
    "ListHandler",
    "RemoveHandler",
    "UpgradeHandler",
]
