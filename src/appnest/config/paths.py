"""Path constants and per-app path resolution for appnest.

Paths centralizes the directories appnest owns under the user's config
directory. AppPaths is the deterministic set of locations a single install
touches, computed from the settings, the app id and the app name.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from appnest.constants import (
    APP_CONFIG_FILE_NAME,
    APP_FILE_PREFIX,
    APPIMAGE_EXTENSION,
    CONFIG_DIR_NAME,
    CONFIG_FILE_NAME,
    DEFAULT_CONFIG_SUBDIR,
    DESKTOP_USER_APPLICATIONS_SUBPATH,
    ICON_FILE_NAME,
    INSTALLED_FILE_NAME,
    SOURCE_CONFIG_FILE_NAME,
    TRANSACTIONS_FILE_NAME,
)
from appnest.utils.naming import sanitize_filename

if TYPE_CHECKING:
    from appnest.types import Settings


class Paths:
    """Application paths and directory structure."""

    HOME_DIR = Path.home()
    CONFIG_DIR = HOME_DIR / CONFIG_DIR_NAME / DEFAULT_CONFIG_SUBDIR
    LOGS_DIR = CONFIG_DIR / "logs"

    SETTINGS_FILE = CONFIG_DIR / CONFIG_FILE_NAME
    INSTALLED_FILE = CONFIG_DIR / INSTALLED_FILE_NAME
    TRANSACTIONS_FILE = CONFIG_DIR / TRANSACTIONS_FILE_NAME

    DEFAULT_APPS_DIR = HOME_DIR / ".local" / "share" / DEFAULT_CONFIG_SUBDIR
    DEFAULT_DESKTOP_DIR = HOME_DIR.joinpath(*DESKTOP_USER_APPLICATIONS_SUBPATH)

    @classmethod
    def expand_path(cls, path_str: str) -> Path:
        """Expand and resolve path with ~ and relative path support.

        Example:
            >>> Paths.expand_path("~/Applications")
            Path('/home/user/Applications')

        """
        return Path(path_str).expanduser().resolve(strict=False)

    @classmethod
    def ensure_directories(cls, config_dir: Path | None = None) -> None:
        """Create the config and logs directories if they don't exist."""
        base = config_dir or cls.CONFIG_DIR
        for directory in (base, base / "logs"):
            directory.mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True, slots=True)
class AppPaths:
    """Filesystem locations touched by one app install.

    Attributes:
        dir: Directory holding the bundle and per-app config files
        appimage: Installed bundle file
        icon: Installed icon file
        desktop: Desktop entry file in the user's applications directory
        config: Per-app config file
        source_config: Per-app source descriptor file

    """

    dir: Path
    appimage: Path
    icon: Path
    desktop: Path
    config: Path
    source_config: Path

    @classmethod
    def resolve(
        cls, settings: Settings, app_id: str, app_name: str
    ) -> AppPaths:
        """Compute the paths for an app.

        Pure function of its arguments; nothing is created on disk.

        Args:
            settings: Loaded global settings (apps_dir, desktop_dir)
            app_id: Slug identifier of the app
            app_name: Display name, used for the bundle filename

        Returns:
            AppPaths for the app

        """
        app_dir = Path(settings["apps_dir"]) / app_id
        bundle_name = sanitize_filename(app_name) or app_id
        return cls(
            dir=app_dir,
            appimage=app_dir / f"{bundle_name}{APPIMAGE_EXTENSION}",
            icon=app_dir / ICON_FILE_NAME,
            desktop=Path(settings["desktop_dir"])
            / f"{APP_FILE_PREFIX}-{app_id}.desktop",
            config=app_dir / APP_CONFIG_FILE_NAME,
            source_config=app_dir / SOURCE_CONFIG_FILE_NAME,
        )
