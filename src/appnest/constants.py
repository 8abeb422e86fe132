"""Centralized constants module for appnest.

This module serves as the single source of truth for shared constants
across the appnest codebase. Constants use typing.Final annotations to
ensure immutability.

Usage:
    from appnest.constants import CONFIG_FILE_NAME
"""

from typing import Final

# =============================================================================
# Application identity
# =============================================================================

APP_NAME: Final[str] = "appnest"

# Prefix used for generated desktop entries and per-app config files
APP_FILE_PREFIX: Final[str] = "appnest"

# =============================================================================
# Configuration Constants
# =============================================================================

CONFIG_VERSION: Final[str] = "1.0.0"

# Configuration directory and file names
CONFIG_FILE_NAME: Final[str] = "settings.conf"
INSTALLED_FILE_NAME: Final[str] = "installed.json"
TRANSACTIONS_FILE_NAME: Final[str] = "transactions.json"

# Default config directory name under the user's home directory
CONFIG_DIR_NAME: Final[str] = ".config"

# Application-specific subdirectory under the config directory
DEFAULT_CONFIG_SUBDIR: Final[str] = "appnest"

# Per-app files stored inside each app directory
APP_CONFIG_FILE_NAME: Final[str] = f"{APP_FILE_PREFIX}-app.json"
SOURCE_CONFIG_FILE_NAME: Final[str] = f"{APP_FILE_PREFIX}-source.json"
ICON_FILE_NAME: Final[str] = "icon.png"

# Scratch directory created inside the app directory during integration
SCRATCH_DIR_NAME: Final[str] = "temp"

# Configuration defaults
DEFAULT_LOG_LEVEL: Final[str] = "INFO"
DEFAULT_CONSOLE_LOG_LEVEL: Final[str] = "WARNING"
DEFAULT_TIMEOUT_SECONDS: Final[int] = 10

# Date/time formats used in config headers
ISO_DATETIME_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

# Config section and key names
SECTION_DEFAULT: Final[str] = "DEFAULT"
SECTION_NETWORK: Final[str] = "network"

KEY_CONFIG_VERSION: Final[str] = "config_version"
KEY_APPS_DIR: Final[str] = "apps_dir"
KEY_DESKTOP_DIR: Final[str] = "desktop_dir"
KEY_LOG_LEVEL: Final[str] = "log_level"
KEY_CONSOLE_LOG_LEVEL: Final[str] = "console_log_level"
KEY_TIMEOUT_SECONDS: Final[str] = "timeout_seconds"

# =============================================================================
# Logging Constants
# =============================================================================

LOG_ROTATION_THRESHOLD_BYTES: Final[int] = 1024 * 1024  # 1 MB
LOG_BACKUP_COUNT: Final[int] = 3

LOG_CONSOLE_FORMAT: Final[str] = (
    "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
LOG_CONSOLE_DATE_FORMAT: Final[str] = "%H:%M:%S"
LOG_FILE_FORMAT: Final[str] = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "%(funcName)s:%(lineno)d - %(message)s"
)
LOG_FILE_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

# Color mapping for console output levels
LOG_COLORS: Final[dict[str, str]] = {
    "DEBUG": "\033[36m",  # Cyan
    "INFO": "\033[32m",  # Green
    "WARNING": "\033[33m",  # Yellow
    "ERROR": "\033[31m",  # Red
    "CRITICAL": "\033[35m",  # Magenta
    "RESET": "\033[0m",
}

# =============================================================================
# Terminal output
# =============================================================================

COLOR_GREY: Final[str] = "\033[90m"
COLOR_YELLOW: Final[str] = "\033[33m"
COLOR_GREEN: Final[str] = "\033[32m"
COLOR_RED: Final[str] = "\033[31m"
COLOR_CYAN: Final[str] = "\033[36m"
COLOR_RESET: Final[str] = "\033[0m"

# Move the cursor one line up and clear that line
ERASE_PREVIOUS_LINE: Final[str] = "\033[1A\033[2K"

SPINNER_FRAMES: Final[tuple[str, ...]] = (
    "⠋",
    "⠙",
    "⠹",
    "⠸",
    "⠼",
    "⠴",
    "⠦",
    "⠧",
    "⠇",
    "⠏",
)

TICK_SYMBOL: Final[str] = "✓"
EXCLAMATION_SYMBOL: Final[str] = "!"
RIGHT_ARROW_SYMBOL: Final[str] = "→"

# Status line refresh period in seconds
STATUS_TICK_INTERVAL: Final[float] = 0.25

# Byte formatting uses decimal megabytes
BYTES_PER_MB: Final[int] = 1_000_000

# =============================================================================
# Download / network
# =============================================================================

CHUNK_SIZE: Final[int] = 8192

GITHUB_API_BASE: Final[str] = "https://api.github.com"
GITHUB_API_ACCEPT: Final[str] = "application/vnd.github+json"
GITHUB_TOKEN_ENV: Final[str] = "GITHUB_TOKEN"

# Repository appnest upgrades itself from
APP_GITHUB_OWNER: Final[str] = "appnest"
APP_GITHUB_REPO: Final[str] = "appnest"
APP_GITHUB_URL: Final[str] = (
    f"https://github.com/{APP_GITHUB_OWNER}/{APP_GITHUB_REPO}"
)

KEYRING_SERVICE_NAME: Final[str] = "appnest-github-token"
KEYRING_USERNAME: Final[str] = "github"

# =============================================================================
# AppImage / desktop entry
# =============================================================================

APPIMAGE_EXTENSION: Final[str] = ".AppImage"
APPIMAGE_EXTRACT_ARG: Final[str] = "--appimage-extract"
SQUASHFS_ROOT_DIR: Final[str] = "squashfs-root"
DIR_ICON_NAME: Final[str] = ".DirIcon"

DESKTOP_SECTION_HEADER: Final[str] = "[Desktop Entry]"
DESKTOP_ID_KEY: Final[str] = "X-Appnest-Id"
DESKTOP_USER_APPLICATIONS_SUBPATH: Final[tuple[str, ...]] = (
    ".local",
    "share",
    "applications",
)

# Icon suffixes accepted when resolving the Icon= key inside a bundle
ICON_EXTENSIONS: Final[tuple[str, ...]] = (".png", ".svg", ".xpm")

# Architecture aliases matched against asset names, keyed by machine()
ARCH_ALIASES: Final[dict[str, tuple[str, ...]]] = {
    "x86_64": ("x86_64", "x86-64", "amd64", "x64"),
    "aarch64": ("aarch64", "arm64"),
    "armv7l": ("armv7l", "armhf", "arm32"),
    "i686": ("i686", "i386"),
}
