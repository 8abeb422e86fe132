"""Configuration management for appnest.

This package provides:
- Paths: Path constants and per-app path resolution (AppPaths)
- SettingsManager: INI settings file
- ConfigStore: Installed-apps registry and per-app JSON records
"""

from appnest.config.paths import AppPaths, Paths
from appnest.config.settings import SettingsManager
from appnest.config.store import ConfigStore

__all__ = [
    "AppPaths",
    "ConfigStore",
    "Paths",
    "SettingsManager",
]
