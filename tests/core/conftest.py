"""Pytest configuration and fixtures for core module tests.

Provides:
- InstallableApp factory for local bundles
- Fake AppImage bundles: shell scripts that answer ``--appimage-extract``
- Mock aiohttp responses
"""

from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from appnest.config import AppPaths
from appnest.core.asset import Asset
from appnest.core.install import InstallableApp
from appnest.core.sources import LocalSource
from appnest.types import AppConfig, Settings

# =============================================================================
# Async Helpers
# =============================================================================


async def async_chunk_gen(
    chunks: list[bytes],
) -> AsyncGenerator[bytes, None]:
    """Async generator yielding chunks for simulating HTTP responses.

    Args:
        chunks: List of byte chunks to yield.

    Yields:
        Individual byte chunks.

    """
    for chunk in chunks:
        yield chunk


def mock_response(
    status: int = 200,
    json_data: object = None,
    headers: dict[str, str] | None = None,
) -> MagicMock:
    """Build an object usable as ``async with session.get(...) as resp``."""
    response = MagicMock()
    response.status = status
    response.headers = headers or {}
    response.json = AsyncMock(return_value=json_data)
    response.raise_for_status = MagicMock()

    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=response)
    context.__aexit__ = AsyncMock(return_value=False)
    return context


# =============================================================================
# Fake bundles
# =============================================================================

DESKTOP_ENTRY = (
    "[Desktop Entry]\n"
    "Name=Tool\n"
    "Exec=tool %U\n"
    "Icon=tool\n"
    "Type=Application\n"
)

_EXTRACT_SCRIPT = """#!/bin/sh
if [ "$1" = "--appimage-extract" ]; then
  mkdir -p squashfs-root
{body}
  exit 0
fi
exit 1
"""


def write_fake_bundle(
    path: Path,
    *,
    with_desktop: bool = True,
    with_icon: bool = True,
    total_size: int | None = None,
) -> Path:
    """Write an executable script that unpacks like an AppImage.

    Args:
        path: Where to write the bundle
        with_desktop: Whether the unpacked tree has a desktop entry
        with_icon: Whether the unpacked tree has an icon
        total_size: Pad the file with a trailing comment to this many bytes

    Returns:
        path

    """
    body = []
    if with_desktop:
        escaped = DESKTOP_ENTRY.replace("%", "%%").replace("\n", "\\n")
        body.append(f"  printf '{escaped}' > squashfs-root/tool.desktop")
    if with_icon:
        body.append("  printf 'PNG' > squashfs-root/tool.png")
        body.append("  ln -s tool.png squashfs-root/.DirIcon")
    content = _EXTRACT_SCRIPT.format(body="\n".join(body)).encode()

    if total_size is not None:
        padding = total_size - len(content) - 2
        assert padding >= 0
        content += b"#" + b"x" * padding + b"\n"
        assert len(content) == total_size

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    path.chmod(0o755)
    return path


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def make_app(settings: Settings, tmp_path: Path):
    """Factory building an InstallableApp for a local bundle."""

    def _make(
        app_id: str = "tool",
        bundle: Path | None = None,
        size: int | None = None,
    ) -> InstallableApp:
        if bundle is None:
            bundle = write_fake_bundle(tmp_path / "src" / f"{app_id}.AppImage")
        declared = size
        if declared is None:
            declared = bundle.stat().st_size if bundle.exists() else 0
        paths = AppPaths.resolve(settings, app_id, app_id.title())
        source = LocalSource(path=str(bundle), version="1.0.0")
        app = AppConfig(
            id=app_id,
            name=app_id.title(),
            version="1.0.0",
            appimage=str(paths.appimage),
            source=source.kind,
            desktop=str(paths.desktop),
        )
        asset = Asset(
            name=bundle.name, download_url=bundle.as_uri(), size=declared
        )
        return InstallableApp(app=app, source=source, paths=paths, asset=asset)

    return _make
