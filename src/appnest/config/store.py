"""JSON config store for the installed-apps registry and per-app records.

Every read goes to disk and every mutation is flushed immediately; nothing is
cached between calls so a crashed run never leaves stale in-memory state.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any

import orjson

from appnest.config.paths import Paths
from appnest.constants import INSTALLED_FILE_NAME
from appnest.core.sources import Source, source_from_dict
from appnest.exceptions import ConfigStoreError
from appnest.logger import get_logger
from appnest.types import AppConfig, AppnestConfig

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = get_logger(__name__)

JSON_OPTIONS = orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS


def write_json_atomic(path: Path, data: dict[str, Any]) -> None:
    """Serialize data and replace path with it in one rename.

    Raises:
        orjson.JSONEncodeError: If data is not serializable
        OSError: If the file cannot be written

    """
    payload = orjson.dumps(data, option=JSON_OPTIONS)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(payload)
        Path(temp_name).replace(path)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise


def read_json(path: Path) -> dict[str, Any]:
    """Read a JSON object from path.

    Raises:
        orjson.JSONDecodeError: If the content is not valid JSON
        OSError: If the file cannot be read
        ValueError: If the document is not a JSON object

    """
    data = orjson.loads(path.read_bytes())
    if not isinstance(data, dict):
        msg = f"Expected a JSON object in {path}"
        raise ValueError(msg)  # noqa: TRY004
    return data


class ConfigStore:
    """Reads and writes appnest's JSON records.

    Attributes:
        config_dir: Directory holding the installed-apps registry
        installed_file: Path of the registry file

    """

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize the store.

        Args:
            config_dir: Configuration directory (defaults to Paths.CONFIG_DIR)

        """
        self.config_dir = config_dir or Paths.CONFIG_DIR
        self.installed_file = self.config_dir / INSTALLED_FILE_NAME

    def read_config(self) -> AppnestConfig:
        """Load the installed-apps registry (empty if absent).

        Raises:
            ConfigStoreError: If the registry exists but cannot be decoded

        """
        if not self.installed_file.exists():
            return AppnestConfig()
        try:
            return AppnestConfig.from_dict(read_json(self.installed_file))
        except (orjson.JSONDecodeError, OSError, ValueError, AttributeError) as e:
            msg = f"Failed to read {self.installed_file}: {e}"
            raise ConfigStoreError(msg, cause=e) from e

    def save_config(self, config: AppnestConfig) -> None:
        """Persist the installed-apps registry.

        Raises:
            ConfigStoreError: If the registry cannot be written

        """
        try:
            write_json_atomic(self.installed_file, config.to_dict())
        except (orjson.JSONEncodeError, OSError) as e:
            msg = f"Failed to save {self.installed_file}: {e}"
            raise ConfigStoreError(msg, cause=e) from e
        logger.debug("Saved registry with %d apps", len(config.installed))

    def save_app_config(self, path: Path, app: AppConfig) -> None:
        """Persist an app record.

        Raises:
            ConfigStoreError: If the record cannot be written

        """
        try:
            write_json_atomic(path, app.to_dict())
        except (orjson.JSONEncodeError, OSError) as e:
            msg = f"Failed to save app config: {e}"
            raise ConfigStoreError(msg, target=app.id, cause=e) from e

    def read_app_config(self, path: Path) -> AppConfig:
        """Load an app record.

        Raises:
            ConfigStoreError: If the record is missing or invalid

        """
        try:
            return AppConfig.from_dict(read_json(path))
        except (
            orjson.JSONDecodeError,
            OSError,
            ValueError,
            KeyError,
            TypeError,
        ) as e:
            msg = f"Failed to read app config {path}: {e}"
            raise ConfigStoreError(msg, cause=e) from e

    def save_source_config(self, path: Path, source: Source) -> None:
        """Persist a source descriptor.

        Raises:
            ConfigStoreError: If the descriptor cannot be written

        """
        try:
            write_json_atomic(path, source.to_dict())
        except (orjson.JSONEncodeError, OSError) as e:
            msg = f"Failed to save source config {path}: {e}"
            raise ConfigStoreError(msg, cause=e) from e

    def read_source_config(self, path: Path) -> Source:
        """Load a source descriptor.

        Raises:
            ConfigStoreError: If the descriptor is missing or invalid

        """
        try:
            return source_from_dict(read_json(path))
        except (
            orjson.JSONDecodeError,
            OSError,
            ValueError,
            KeyError,
            TypeError,
        ) as e:
            msg = f"Failed to read source config {path}: {e}"
            raise ConfigStoreError(msg, cause=e) from e

    def iter_installed(self) -> Iterator[tuple[str, Path]]:
        """Yield (app id, install dir) pairs from the registry, sorted."""
        config = self.read_config()
        for app_id in sorted(config.installed):
            yield app_id, Path(config.installed[app_id])
