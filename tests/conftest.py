"""Pytest configuration and fixtures for appnest tests."""

import logging
import os
import tempfile
from pathlib import Path

# Keep test logs out of the user's config directory. Must run before any
# appnest module creates its logger.
os.environ.setdefault(
    "APPNEST_LOG_DIR", tempfile.mkdtemp(prefix="appnest-test-logs-")
)

import pytest  # noqa: E402

from appnest.config import ConfigStore  # noqa: E402
from appnest.core.transactions import TransactionJournal  # noqa: E402
from appnest.types import NetworkSettings, Settings  # noqa: E402


@pytest.fixture(autouse=True)
def enable_log_propagation():
    """Enable log propagation for all loggers during tests.

    This allows pytest's caplog fixture to capture logs from all loggers,
    even those created with propagate=False in production code.
    """
    original_propagation = {}
    for name in list(logging.Logger.manager.loggerDict.keys()):
        if name.startswith("appnest"):
            logger = logging.getLogger(name)
            original_propagation[name] = logger.propagate
            logger.propagate = True

    yield

    for name, propagate_value in original_propagation.items():
        logger = logging.getLogger(name)
        logger.propagate = propagate_value


@pytest.fixture(autouse=True)
def no_github_token(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's GITHUB_TOKEN from leaking into tests."""
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with every directory under tmp_path."""
    return Settings(
        config_version="1.0.0",
        apps_dir=tmp_path / "apps",
        desktop_dir=tmp_path / "applications",
        log_level="INFO",
        console_log_level="WARNING",
        network=NetworkSettings(timeout_seconds=10),
    )


@pytest.fixture
def store(tmp_path: Path) -> ConfigStore:
    """Config store rooted in tmp_path."""
    return ConfigStore(tmp_path / "config")


@pytest.fixture
def journal(tmp_path: Path) -> TransactionJournal:
    """Transaction journal rooted in tmp_path."""
    return TransactionJournal(tmp_path / "config" / "transactions.json")
