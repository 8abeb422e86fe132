"""Main logger module providing public API functions.

- setup_logging(): Configure logging with async-safe QueueHandler architecture
- get_logger(): Get or create logger instance
- flush_all_handlers(): Ensure all pending log records are written

The module also owns the single LoggingState shared by every ``appnest``
logger: the root logger is wired to a QueueListener exactly once per process.
"""

import atexit
import contextlib
import logging
import os
import queue
import threading
import time
from dataclasses import dataclass, field
from logging.handlers import QueueListener
from pathlib import Path

from appnest.constants import APP_NAME
from appnest.logger.config import load_log_settings
from appnest.logger.handlers import setup_root_logger

QUEUE_DRAIN_TIMEOUT = 5.0


@dataclass(slots=True)
class LoggingState:
    """Logging wiring shared by every ``appnest`` logger.

    Attributes:
        lock: Guards the one-time setup of the root logger
        root_initialized: Whether the QueueHandler is attached
        config_applied: Whether settings.conf levels have been applied
        queue_listener: Thread writing records to console and file
        log_queue: Queue between the QueueHandler and the listener

    """

    lock: threading.Lock = field(default_factory=threading.Lock)
    root_initialized: bool = False
    config_applied: bool = False
    queue_listener: QueueListener | None = None
    log_queue: queue.Queue | None = None

    def flush(self) -> None:
        """Wait for queued records, then flush the listener's handlers."""
        if self.queue_listener is None or self.log_queue is None:
            return
        deadline = time.time() + QUEUE_DRAIN_TIMEOUT
        while not self.log_queue.empty() and time.time() < deadline:
            time.sleep(0.01)
        time.sleep(0.1)

        for handler in self.queue_listener.handlers:
            with contextlib.suppress(OSError, ValueError):
                handler.flush()

    def stop(self) -> None:
        """Flush and stop the listener. Calling it again does nothing."""
        if self.queue_listener is None:
            return
        self.flush()
        self.queue_listener.stop()
        self.queue_listener = None


_state = LoggingState()


def get_state() -> LoggingState:
    """Return the process-wide logging state."""
    return _state


def flush_all_handlers() -> None:
    """Make sure every record logged so far has been written."""
    get_state().flush()


atexit.register(_state.stop)


def setup_logging(
    name: str = APP_NAME,
    console_level: str | None = None,
    file_level: str | None = None,
    log_file: Path | None = None,
    enable_file_logging: bool = True,  # noqa: FBT001, FBT002
) -> logging.Logger:
    """Configure logging and return the requested logger.

    The root ``appnest`` logger is initialized exactly once; child loggers
    (``appnest.core.install``) propagate to it.

    Environment Variables:
        LOG_LEVEL: Overrides the console level (useful when debugging tests)

    Args:
        name: Logger name, typically __name__
        console_level: Console log level ("DEBUG", "INFO", "WARNING")
        file_level: File log level ("DEBUG", "INFO")
        log_file: Path to log file
        enable_file_logging: Whether to enable file logging

    Returns:
        Logger instance

    Raises:
        ConfigurationError: If file logging setup fails

    """
    state = get_state()
    with state.lock:
        if not state.root_initialized:
            cfg_console, cfg_file, cfg_path = load_log_settings()
            console_level = (
                console_level or os.getenv("LOG_LEVEL") or cfg_console
            )
            file_level = file_level or cfg_file
            log_file = log_file or cfg_path

            setup_root_logger(
                state,
                console_level,
                file_level,
                log_file,
                enable_file_logging,
            )

    return logging.getLogger(name)


def get_logger(
    name: str = APP_NAME,
    enable_file_logging: bool = True,  # noqa: FBT001, FBT002
) -> logging.Logger:
    """Get or create logger instance.

    Use __name__ as the logger name:
        >>> logger = get_logger(__name__)

    Args:
        name: Logger name, typically __name__ for module loggers
        enable_file_logging: Whether to enable file logging (default: True)

    Returns:
        Configured logger instance

    """
    return setup_logging(name=name, enable_file_logging=enable_file_logging)

