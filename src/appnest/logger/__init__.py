"""Logging utilities for appnest.

Structured logging with colored console output, a rotating log file and a
QueueHandler/QueueListener pair so coroutines never block on handler I/O.

Architecture:
    Application → QueueHandler → Queue → QueueListener Thread
                                              ↓
                                    Console + File Handlers

Usage:
    >>> from appnest.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Installing %s", app_id)  # Use %-style formatting

Rules:
    1. Always use: logger = get_logger(__name__)
    2. Never call logging.basicConfig()
    3. Never attach handlers to child loggers
    4. Never use f-strings in log calls
"""

from collections.abc import Mapping
from typing import Any

from appnest.logger.config import (
    update_logger_from_config as _update_config,
)
from appnest.logger.formatters import (
    ColoredConsoleFormatter,
    HybridConsoleFormatter,
    SimpleConsoleFormatter,
)
from appnest.logger.handlers import ConfigurationError
from appnest.logger.logger import (
    LoggingState,
    flush_all_handlers,
    get_logger,
    get_state,
    setup_logging,
)


__all__ = [
    "ColoredConsoleFormatter",
    "ConfigurationError",
    "HybridConsoleFormatter",
    "LoggingState",
    "SimpleConsoleFormatter",
    "flush_all_handlers",
    "get_logger",
    "setup_logging",
    "update_logger_from_config",
]


def update_logger_from_config(settings: Mapping[str, Any]) -> None:
    """Apply log levels from loaded settings to the active handlers.

    Args:
        settings: Global settings as returned by SettingsManager.load()

    """
    _update_config(get_state(), settings)
