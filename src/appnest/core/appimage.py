"""AppImage unpacking and desktop integration.

A bundle is unpacked with its own ``--appimage-extract`` switch into a
scratch directory. The unpacked tree provides the desktop entry and the icon
that get installed next to the user's other applications.
"""

from __future__ import annotations

import asyncio
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from appnest.constants import (
    APPIMAGE_EXTRACT_ARG,
    DESKTOP_ID_KEY,
    DESKTOP_SECTION_HEADER,
    DIR_ICON_NAME,
    ICON_EXTENSIONS,
    SQUASHFS_ROOT_DIR,
)
from appnest.exceptions import ExtractionError, IntegrationError, MetadataError
from appnest.logger import get_logger

if TYPE_CHECKING:
    from appnest.config.paths import AppPaths

logger = get_logger(__name__)

EXEC_KEYS = ("Exec", "TryExec")


@dataclass(frozen=True, slots=True)
class DeflatedAppImage:
    """An unpacked bundle.

    Attributes:
        root: The ``squashfs-root`` directory produced by extraction

    """

    root: Path

    def find_desktop_file(self) -> Path:
        """Return the desktop entry at the top of the unpacked tree.

        Raises:
            MetadataError: If there is none

        """
        candidates = sorted(
            p for p in self.root.glob("*.desktop") if p.is_file()
        )
        if not candidates:
            msg = "no .desktop file at the top of the bundle"
            raise MetadataError(msg, target=str(self.root))
        if len(candidates) > 1:
            logger.debug(
                "Several desktop files found, using %s", candidates[0].name
            )
        return candidates[0]

    def find_icon_file(self, desktop_file: Path) -> Path:
        """Locate the bundle's icon.

        ``.DirIcon`` wins when it resolves to a file inside the tree;
        otherwise the desktop entry's ``Icon=`` name is looked up at the
        root with each known icon suffix.

        Raises:
            MetadataError: If no icon can be found

        """
        dir_icon = self._resolve_in_root(self.root / DIR_ICON_NAME)
        if dir_icon is not None:
            return dir_icon

        icon_name = read_desktop_value(
            desktop_file.read_text(encoding="utf-8", errors="replace"), "Icon"
        )
        if icon_name:
            candidates = [self.root / icon_name]
            candidates += [
                self.root / f"{icon_name}{suffix}" for suffix in ICON_EXTENSIONS
            ]
            for candidate in candidates:
                if candidate.suffix.lower() not in ICON_EXTENSIONS:
                    continue
                resolved = self._resolve_in_root(candidate)
                if resolved is not None:
                    return resolved

        msg = "no icon found in the bundle"
        raise MetadataError(msg, target=str(self.root))

    def _resolve_in_root(self, path: Path) -> Path | None:
        """Follow symlinks, treating absolute targets as rooted in the tree."""
        seen = 0
        current = path
        while current.is_symlink() and seen < 8:
            target = current.readlink()
            if target.is_absolute():
                current = self.root / target.relative_to("/")
            else:
                current = current.parent / target
            seen += 1
        if current.is_file():
            return current
        return None

    def extract_metadata(self) -> AppImageMetadata:
        """Find the desktop entry and icon.

        Raises:
            MetadataError: If either is missing

        """
        desktop_file = self.find_desktop_file()
        icon_file = self.find_icon_file(desktop_file)
        logger.debug(
            "Bundle metadata: desktop=%s icon=%s", desktop_file, icon_file
        )
        return AppImageMetadata(desktop_file=desktop_file, icon_file=icon_file)


@dataclass(frozen=True, slots=True)
class AppImageMetadata:
    """Desktop entry and icon found inside an unpacked bundle."""

    desktop_file: Path
    icon_file: Path

    def copy_icon_file(self, paths: AppPaths) -> None:
        """Copy the icon to ``paths.icon``.

        Raises:
            IntegrationError: If the copy fails

        """
        try:
            paths.icon.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(self.icon_file, paths.icon)
        except OSError as e:
            msg = f"Failed to copy icon to {paths.icon}: {e}"
            raise IntegrationError(msg, target=str(paths.icon), cause=e) from e
        logger.debug("Icon installed: %s", paths.icon)

    def install_desktop_file(self, paths: AppPaths, app_id: str) -> None:
        """Write the rewritten desktop entry to ``paths.desktop``.

        Raises:
            IntegrationError: If the entry cannot be read or written

        """
        try:
            content = self.desktop_file.read_text(
                encoding="utf-8", errors="replace"
            )
            paths.desktop.parent.mkdir(parents=True, exist_ok=True)
            paths.desktop.write_text(
                rewrite_desktop_entry(content, paths, app_id),
                encoding="utf-8",
            )
        except OSError as e:
            msg = f"Failed to install desktop entry: {e}"
            raise IntegrationError(
                msg, target=str(paths.desktop), cause=e
            ) from e
        logger.debug("Desktop entry installed: %s", paths.desktop)


async def deflate_appimage(bundle: Path, scratch: Path) -> DeflatedAppImage:
    """Unpack a bundle into scratch with ``<bundle> --appimage-extract``.

    Args:
        bundle: Executable bundle file
        scratch: Existing empty directory to unpack into

    Returns:
        The unpacked tree

    Raises:
        ExtractionError: If the bundle cannot be run or exits non-zero

    """
    try:
        process = await asyncio.create_subprocess_exec(
            str(bundle),
            APPIMAGE_EXTRACT_ARG,
            cwd=scratch,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
        _, stderr = await process.communicate()
    except OSError as e:
        msg = f"Failed to execute bundle: {e}"
        raise ExtractionError(msg, target=str(bundle), cause=e) from e

    if process.returncode != 0:
        stderr_text = stderr.decode("utf-8", errors="ignore").strip()
        msg = f"extraction exited with code {process.returncode}"
        if stderr_text:
            msg += f": {stderr_text}"
        raise ExtractionError(msg, target=str(bundle))

    root = scratch / SQUASHFS_ROOT_DIR
    if not root.is_dir():
        msg = f"no {SQUASHFS_ROOT_DIR} directory after extraction"
        raise ExtractionError(msg, target=str(bundle))

    logger.debug("Bundle extracted to %s", root)
    return DeflatedAppImage(root=root)


def read_desktop_value(content: str, key: str) -> str | None:
    """Return key's value from the ``[Desktop Entry]`` group, if present."""
    in_main_group = False
    for raw in content.splitlines():
        line = raw.strip()
        if line.startswith("["):
            in_main_group = line == DESKTOP_SECTION_HEADER
            continue
        if not in_main_group or "=" not in line:
            continue
        name, value = line.split("=", 1)
        if name.strip() == key:
            return value.strip()
    return None


def _split_command(value: str) -> tuple[str, str]:
    """Split an Exec value into (program, rest) keeping rest verbatim."""
    value = value.strip()
    if value.startswith('"'):
        end = value.find('"', 1)
        while end != -1 and value[end - 1] == "\\":
            end = value.find('"', end + 1)
        if end != -1:
            return value[: end + 1], value[end + 1 :]
    parts = value.split(maxsplit=1)
    if not parts:
        return "", ""
    return parts[0], value[len(parts[0]) :]


def _quote_exec_path(path: Path) -> str:
    text = str(path)
    if any(ch.isspace() for ch in text) or '"' in text:
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text


def rewrite_desktop_entry(content: str, paths: AppPaths, app_id: str) -> str:
    """Point a bundle's desktop entry at the installed files.

    ``Exec``/``TryExec`` lines in every group get the bundle path as their
    program, keeping arguments. The ``[Desktop Entry]`` group's ``Icon`` is
    set to the installed icon and ``X-Appnest-Id`` is added to it.

    Args:
        content: Original desktop entry text
        paths: Install locations of the app
        app_id: Id recorded in the entry

    Returns:
        Rewritten desktop entry text

    """
    bundle = _quote_exec_path(paths.appimage)
    output: list[str] = []
    in_main_group = False
    seen_main_group = False
    has_icon = False

    def close_main_group() -> None:
        # Keep added keys ahead of any trailing blank lines of the group
        insert_at = len(output)
        while insert_at > 0 and not output[insert_at - 1].strip():
            insert_at -= 1
        added = [f"{DESKTOP_ID_KEY}={app_id}"]
        if not has_icon:
            added.insert(0, f"Icon={paths.icon}")
        output[insert_at:insert_at] = added

    for raw in content.splitlines():
        line = raw.strip()
        if line.startswith("["):
            if in_main_group:
                close_main_group()
            in_main_group = line == DESKTOP_SECTION_HEADER
            seen_main_group = seen_main_group or in_main_group
            output.append(raw)
            continue

        if "=" in line and not line.startswith("#"):
            key, value = line.split("=", 1)
            key = key.strip()
            if key in EXEC_KEYS:
                _, rest = _split_command(value)
                output.append(f"{key}={bundle}{rest}")
                continue
            if in_main_group and key == "Icon":
                has_icon = True
                output.append(f"Icon={paths.icon}")
                continue
            if in_main_group and key == DESKTOP_ID_KEY:
                continue
        output.append(raw)

    if in_main_group:
        close_main_group()
    if not seen_main_group:
        output[:0] = [
            DESKTOP_SECTION_HEADER,
            f"Icon={paths.icon}",
            f"{DESKTOP_ID_KEY}={app_id}",
        ]

    return "\n".join(output) + "\n"
