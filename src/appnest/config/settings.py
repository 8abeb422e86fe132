"""Global settings manager for the INI settings file."""

import configparser
from pathlib import Path

from appnest.config.parser import ConfigCommentManager, strip_inline_comment
from appnest.config.paths import Paths
from appnest.constants import (
    CONFIG_FILE_NAME,
    CONFIG_VERSION,
    DEFAULT_CONSOLE_LOG_LEVEL,
    DEFAULT_LOG_LEVEL,
    DEFAULT_TIMEOUT_SECONDS,
    KEY_APPS_DIR,
    KEY_CONFIG_VERSION,
    KEY_CONSOLE_LOG_LEVEL,
    KEY_DESKTOP_DIR,
    KEY_LOG_LEVEL,
    KEY_TIMEOUT_SECONDS,
    SECTION_DEFAULT,
    SECTION_NETWORK,
)
from appnest.exceptions import ConfigStoreError
from appnest.logger import get_logger
from appnest.types import NetworkSettings, Settings

logger = get_logger(__name__)

RawConfigDict = dict[str, str | dict[str, str]]


class SettingsManager:
    """Manages the global INI settings file."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize settings manager.

        Args:
            config_dir: Configuration directory path
                (defaults to Paths.CONFIG_DIR)

        """
        self.config_dir = config_dir or Paths.CONFIG_DIR
        self.settings_file = self.config_dir / CONFIG_FILE_NAME

    def get_defaults(self) -> RawConfigDict:
        """Get default settings values."""
        return {
            KEY_CONFIG_VERSION: CONFIG_VERSION,
            KEY_APPS_DIR: str(Paths.DEFAULT_APPS_DIR),
            KEY_DESKTOP_DIR: str(Paths.DEFAULT_DESKTOP_DIR),
            KEY_LOG_LEVEL: DEFAULT_LOG_LEVEL,
            KEY_CONSOLE_LOG_LEVEL: DEFAULT_CONSOLE_LOG_LEVEL,
            SECTION_NETWORK: {
                KEY_TIMEOUT_SECONDS: str(DEFAULT_TIMEOUT_SECONDS),
            },
        }

    def _create_parser(self, defaults: RawConfigDict) -> configparser.ConfigParser:
        """Create ConfigParser populated with defaults."""
        parser = configparser.ConfigParser(
            inline_comment_prefixes=("#", ";"),
            interpolation=None,
        )
        flat_defaults = {
            key: str(value)
            for key, value in defaults.items()
            if not isinstance(value, dict)
        }
        parser.read_dict({SECTION_DEFAULT: flat_defaults})

        for key, value in defaults.items():
            if isinstance(value, dict):
                parser.add_section(key)
                for subkey, subvalue in value.items():
                    parser.set(key, subkey, str(subvalue))

        return parser

    def load(self) -> Settings:
        """Load settings, writing the defaults file on first use.

        Returns:
            Typed settings

        Raises:
            ConfigStoreError: If the settings file cannot be parsed or written

        """
        defaults = self.get_defaults()
        parser = self._create_parser(defaults)

        if self.settings_file.exists():
            try:
                parser.read(self.settings_file, encoding="utf-8")
            except configparser.Error as e:
                msg = f"Invalid settings file {self.settings_file}: {e}"
                raise ConfigStoreError(msg, cause=e) from e
        else:
            logger.debug("Creating default settings: %s", self.settings_file)
            settings = self._convert(parser)
            self.save(settings)
            return settings

        return self._convert(parser)

    def save(self, settings: Settings) -> None:
        """Save settings to the INI file with user-friendly comments.

        Raises:
            ConfigStoreError: If the file cannot be written

        """
        comments = ConfigCommentManager()
        section_comments = comments.get_section_comments()
        key_comments = comments.get_key_comments()

        default_data = {
            KEY_CONFIG_VERSION: settings["config_version"],
            KEY_APPS_DIR: str(settings["apps_dir"]),
            KEY_DESKTOP_DIR: str(settings["desktop_dir"]),
            KEY_LOG_LEVEL: settings["log_level"],
            KEY_CONSOLE_LOG_LEVEL: settings["console_log_level"],
        }
        network_data = {
            KEY_TIMEOUT_SECONDS: str(settings["network"]["timeout_seconds"]),
        }

        lines = [comments.get_file_header()]
        for section, data in (
            (SECTION_DEFAULT, default_data),
            (SECTION_NETWORK, network_data),
        ):
            lines.append(section_comments[section])
            lines.append(f"[{section}]\n")
            for key, value in data.items():
                inline_comment = key_comments[section].get(key, "")
                if inline_comment:
                    lines.append(f"{key} = {value}  {inline_comment}\n")
                else:
                    lines.append(f"{key} = {value}\n")

        try:
            self.settings_file.parent.mkdir(parents=True, exist_ok=True)
            self.settings_file.write_text("".join(lines), encoding="utf-8")
        except OSError as e:
            msg = f"Failed to write settings file {self.settings_file}: {e}"
            raise ConfigStoreError(msg, cause=e) from e

    def _convert(self, parser: configparser.ConfigParser) -> Settings:
        """Convert a populated parser to typed Settings."""
        defaults = parser.defaults()

        def get(key: str, fallback: str) -> str:
            return strip_inline_comment(defaults.get(key, fallback))

        timeout_raw = strip_inline_comment(
            parser.get(
                SECTION_NETWORK,
                KEY_TIMEOUT_SECONDS,
                fallback=str(DEFAULT_TIMEOUT_SECONDS),
            )
        )
        try:
            timeout_seconds = int(timeout_raw)
        except ValueError:
            logger.warning(
                "Invalid %s value %r, using %s",
                KEY_TIMEOUT_SECONDS,
                timeout_raw,
                DEFAULT_TIMEOUT_SECONDS,
            )
            timeout_seconds = DEFAULT_TIMEOUT_SECONDS

        return Settings(
            config_version=get(KEY_CONFIG_VERSION, CONFIG_VERSION),
            apps_dir=Paths.expand_path(
                get(KEY_APPS_DIR, str(Paths.DEFAULT_APPS_DIR))
            ),
            desktop_dir=Paths.expand_path(
                get(KEY_DESKTOP_DIR, str(Paths.DEFAULT_DESKTOP_DIR))
            ),
            log_level=get(KEY_LOG_LEVEL, DEFAULT_LOG_LEVEL).upper(),
            console_log_level=get(
                KEY_CONSOLE_LOG_LEVEL, DEFAULT_CONSOLE_LOG_LEVEL
            ).upper(),
            network=NetworkSettings(timeout_seconds=timeout_seconds),
        )
