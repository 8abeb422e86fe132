"""Tests for bundle extraction, metadata lookup and desktop rewriting."""

from pathlib import Path

import pytest

from appnest.config import AppPaths
from appnest.core.appimage import (
    DeflatedAppImage,
    deflate_appimage,
    read_desktop_value,
    rewrite_desktop_entry,
)
from appnest.exceptions import ExtractionError, MetadataError

from tests.core.conftest import DESKTOP_ENTRY, write_fake_bundle


@pytest.fixture
def paths(settings) -> AppPaths:
    """Install paths for an app called Tool."""
    return AppPaths.resolve(settings, "tool", "Tool")


@pytest.fixture
def root(tmp_path: Path) -> Path:
    """An empty squashfs-root directory."""
    path = tmp_path / "squashfs-root"
    path.mkdir()
    return path


class TestRewriteDesktopEntry:
    """rewrite_desktop_entry()."""

    def test_exec_icon_and_id(self, paths: AppPaths) -> None:
        """Exec keeps its arguments; Icon and the id point at appnest."""
        rewritten = rewrite_desktop_entry(DESKTOP_ENTRY, paths, "tool")
        lines = rewritten.splitlines()

        assert f"Exec={paths.appimage} %U" in lines
        assert f"Icon={paths.icon}" in lines
        assert lines[-1] == "X-Appnest-Id=tool"
        assert "Name=Tool" in lines

    def test_quoted_program_and_actions(self, paths: AppPaths) -> None:
        """Quoted programs are replaced whole and action groups follow."""
        content = (
            "[Desktop Entry]\n"
            'Exec="/opt/My Tool/tool" --flag\n'
            "TryExec=tool\n"
            "Icon=tool\n"
            "\n"
            "[Desktop Action new-window]\n"
            "Name=New Window\n"
            "Exec=tool --new-window\n"
            "Icon=other\n"
        )
        rewritten = rewrite_desktop_entry(content, paths, "tool")

        assert f"Exec={paths.appimage} --flag" in rewritten
        assert f"TryExec={paths.appimage}\n" in rewritten
        assert f"Exec={paths.appimage} --new-window" in rewritten
        # Icons of other groups are left alone
        assert "Icon=other" in rewritten
        main, action = rewritten.split("[Desktop Action new-window]")
        assert "X-Appnest-Id=tool" in main
        assert "X-Appnest-Id" not in action
        assert main.rstrip().endswith("X-Appnest-Id=tool")

    def test_replaces_existing_id(self, paths: AppPaths) -> None:
        """An id already present is not duplicated."""
        content = "[Desktop Entry]\nX-Appnest-Id=old\nExec=tool\n"
        rewritten = rewrite_desktop_entry(content, paths, "tool")
        assert rewritten.count("X-Appnest-Id=") == 1
        assert "X-Appnest-Id=old" not in rewritten

    def test_adds_missing_icon(self, paths: AppPaths) -> None:
        """An entry without Icon gets one."""
        rewritten = rewrite_desktop_entry(
            "[Desktop Entry]\nExec=tool\n", paths, "tool"
        )
        assert f"Icon={paths.icon}" in rewritten

    def test_path_with_spaces_is_quoted(self, settings) -> None:
        """Bundle paths with spaces are quoted in Exec."""
        settings["apps_dir"] = settings["apps_dir"] / "my apps"
        paths = AppPaths.resolve(settings, "tool", "Tool")
        rewritten = rewrite_desktop_entry(
            "[Desktop Entry]\nExec=tool %F\n", paths, "tool"
        )
        assert f'Exec="{paths.appimage}" %F' in rewritten

    def test_comments_preserved(self, paths: AppPaths) -> None:
        """Comment lines pass through untouched."""
        content = "# Exec=ignored\n[Desktop Entry]\nExec=tool\n"
        rewritten = rewrite_desktop_entry(content, paths, "tool")
        assert rewritten.startswith("# Exec=ignored\n")


def test_read_desktop_value_only_main_group() -> None:
    """Values come from [Desktop Entry], not from action groups."""
    content = "[Desktop Action x]\nIcon=wrong\n[Desktop Entry]\nIcon=right\n"
    assert read_desktop_value(content, "Icon") == "right"
    assert read_desktop_value(content, "Missing") is None


class TestExtractMetadata:
    """DeflatedAppImage.extract_metadata()."""

    def test_dir_icon_symlink(self, root: Path) -> None:
        """.DirIcon wins and symlinks are followed."""
        (root / "tool.desktop").write_text(DESKTOP_ENTRY, encoding="utf-8")
        (root / "tool.png").write_bytes(b"PNG")
        (root / ".DirIcon").symlink_to("tool.png")

        metadata = DeflatedAppImage(root).extract_metadata()

        assert metadata.desktop_file == root / "tool.desktop"
        assert metadata.icon_file.read_bytes() == b"PNG"

    def test_absolute_symlink_is_rooted_in_tree(self, root: Path) -> None:
        """Absolute link targets are resolved inside squashfs-root."""
        (root / "tool.desktop").write_text(DESKTOP_ENTRY, encoding="utf-8")
        icons = root / "usr" / "share" / "icons"
        icons.mkdir(parents=True)
        (icons / "tool.svg").write_text("<svg/>", encoding="utf-8")
        (root / ".DirIcon").symlink_to("/usr/share/icons/tool.svg")

        metadata = DeflatedAppImage(root).extract_metadata()

        assert metadata.icon_file == icons / "tool.svg"

    def test_icon_key_fallback(self, root: Path) -> None:
        """Without .DirIcon the Icon= name is tried with known suffixes."""
        (root / "tool.desktop").write_text(DESKTOP_ENTRY, encoding="utf-8")
        (root / "tool.svg").write_text("<svg/>", encoding="utf-8")

        metadata = DeflatedAppImage(root).extract_metadata()

        assert metadata.icon_file == root / "tool.svg"

    def test_missing_desktop_file(self, root: Path) -> None:
        """No top-level desktop entry raises MetadataError."""
        (root / "tool.png").write_bytes(b"PNG")
        with pytest.raises(MetadataError, match=r"\.desktop"):
            DeflatedAppImage(root).extract_metadata()

    def test_missing_icon(self, root: Path) -> None:
        """No resolvable icon raises MetadataError."""
        (root / "tool.desktop").write_text(DESKTOP_ENTRY, encoding="utf-8")
        (root / ".DirIcon").symlink_to("nowhere.png")
        with pytest.raises(MetadataError, match="icon"):
            DeflatedAppImage(root).extract_metadata()

    def test_copy_and_install(self, root: Path, paths: AppPaths) -> None:
        """copy_icon_file and install_desktop_file write to AppPaths."""
        (root / "tool.desktop").write_text(DESKTOP_ENTRY, encoding="utf-8")
        (root / "tool.png").write_bytes(b"PNG")
        metadata = DeflatedAppImage(root).extract_metadata()

        metadata.copy_icon_file(paths)
        metadata.install_desktop_file(paths, "tool")

        assert paths.icon.read_bytes() == b"PNG"
        assert "X-Appnest-Id=tool" in paths.desktop.read_text(encoding="utf-8")


class TestDeflate:
    """deflate_appimage()."""

    @pytest.mark.asyncio
    async def test_extracts_into_scratch(self, tmp_path: Path) -> None:
        """The bundle runs with cwd set to the scratch directory."""
        bundle = write_fake_bundle(tmp_path / "tool.AppImage")
        scratch = tmp_path / "scratch"
        scratch.mkdir()

        deflated = await deflate_appimage(bundle, scratch)

        assert deflated.root == scratch / "squashfs-root"
        assert (deflated.root / "tool.desktop").is_file()

    @pytest.mark.asyncio
    async def test_non_zero_exit(self, tmp_path: Path) -> None:
        """A bundle exiting with an error raises ExtractionError."""
        bundle = tmp_path / "broken.AppImage"
        bundle.write_text("#!/bin/sh\necho boom >&2\nexit 3\n")
        bundle.chmod(0o755)
        scratch = tmp_path / "scratch"
        scratch.mkdir()

        with pytest.raises(ExtractionError, match="code 3: boom"):
            await deflate_appimage(bundle, scratch)

    @pytest.mark.asyncio
    async def test_not_executable(self, tmp_path: Path) -> None:
        """A bundle that cannot be executed raises ExtractionError."""
        bundle = tmp_path / "plain.AppImage"
        bundle.write_bytes(b"\x00\x01")
        bundle.chmod(0o644)
        scratch = tmp_path / "scratch"
        scratch.mkdir()

        with pytest.raises(ExtractionError):
            await deflate_appimage(bundle, scratch)

    @pytest.mark.asyncio
    async def test_no_squashfs_root(self, tmp_path: Path) -> None:
        """Exiting cleanly without unpacking anything is still an error."""
        bundle = tmp_path / "noop.AppImage"
        bundle.write_text("#!/bin/sh\nexit 0\n")
        bundle.chmod(0o755)
        scratch = tmp_path / "scratch"
        scratch.mkdir()

        with pytest.raises(ExtractionError, match="squashfs-root"):
            await deflate_appimage(bundle, scratch)
