"""Shared data types for appnest.

Settings are TypedDicts (they come straight out of the INI parser); the
records written to disk are dataclasses with explicit to_dict/from_dict.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, TypedDict


class InstallStatus(Enum):
    """Lifecycle of one install.

    DOWNLOADING -> INTEGRATING -> INSTALLED, or FAILED from either active
    state. INSTALLED and FAILED are terminal.
    """

    DOWNLOADING = "downloading"
    INTEGRATING = "integrating"
    INSTALLED = "installed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transition is allowed."""
        return self in (InstallStatus.INSTALLED, InstallStatus.FAILED)


class NetworkSettings(TypedDict):
    """Network section of the settings file."""

    timeout_seconds: int


class Settings(TypedDict):
    """Typed view of ``settings.conf``."""

    config_version: str
    apps_dir: Path
    desktop_dir: Path
    log_level: str
    console_log_level: str
    network: NetworkSettings


@dataclass(slots=True)
class AppConfig:
    """Per-app record written to ``<app dir>/appnest-app.json``.

    Attributes:
        id: Unique slug identifier
        name: Display name
        version: Installed release tag
        appimage: Absolute path of the installed bundle
        source: Source kind tag ("github", "http" or "local")
        desktop: Absolute path of the installed desktop entry

    """

    id: str
    name: str
    version: str
    appimage: str
    source: str
    desktop: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppConfig:
        """Create from a decoded dictionary.

        Raises:
            KeyError: If a required field is missing
            TypeError: If data is not a mapping

        """
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            version=str(data["version"]),
            appimage=str(data["appimage"]),
            source=str(data["source"]),
            desktop=str(data.get("desktop") or ""),
        )


@dataclass(slots=True)
class AppnestConfig:
    """Installed-apps registry: app id → install directory."""

    installed: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {"installed": dict(self.installed)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppnestConfig:
        """Create from a decoded dictionary."""
        installed = data.get("installed") or {}
        return cls(installed={str(k): str(v) for k, v in installed.items()})
