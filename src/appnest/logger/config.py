"""Configuration loading and updating for logging system."""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING, Any

from appnest.constants import (
    CONFIG_DIR_NAME,
    DEFAULT_CONFIG_SUBDIR,
    DEFAULT_CONSOLE_LOG_LEVEL,
    DEFAULT_LOG_LEVEL,
    KEY_CONSOLE_LOG_LEVEL,
    KEY_LOG_LEVEL,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from appnest.logger.logger import LoggingState


def load_log_settings() -> tuple[str, str, Path]:
    """Load default console level, file level, and file path.

    Returns bootstrap defaults; the settings file is applied later through
    update_logger_from_config().

    Environment Variable Override:
        APPNEST_LOG_DIR: Overrides the log directory path. Used by the test
        suite to keep test logs out of the user's config directory.

    Returns:
        Tuple of (console_level, file_level, log_path)

    """
    env_log_dir = os.getenv("APPNEST_LOG_DIR")
    if env_log_dir:
        log_path = Path(env_log_dir).expanduser() / "appnest.log"
    else:
        log_path = (
            Path.home()
            / CONFIG_DIR_NAME
            / DEFAULT_CONFIG_SUBDIR
            / "logs"
            / "appnest.log"
        )

    return DEFAULT_CONSOLE_LOG_LEVEL, DEFAULT_LOG_LEVEL, log_path


def update_logger_from_config(
    state: "LoggingState", settings: "Mapping[str, Any]"
) -> None:
    """Update handler levels from loaded settings.

    Only handler levels change; handlers are never added or removed.

    Args:
        state: Shared LoggingState (from logger.logger)
        settings: Loaded global settings mapping

    """
    console_level = getattr(
        logging,
        str(settings.get(KEY_CONSOLE_LOG_LEVEL, DEFAULT_CONSOLE_LOG_LEVEL)),
        logging.WARNING,
    )
    file_level = getattr(
        logging,
        str(settings.get(KEY_LOG_LEVEL, DEFAULT_LOG_LEVEL)),
        logging.INFO,
    )

    if state.queue_listener is not None:
        for handler in state.queue_listener.handlers:
            if isinstance(handler, RotatingFileHandler):
                handler.setLevel(file_level)
            elif isinstance(handler, logging.StreamHandler):
                handler.setLevel(console_level)

    state.config_applied = True
