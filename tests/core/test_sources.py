"""Tests for release sources and asset selection."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import aiohttp
import pytest

from appnest.core.asset import Asset
from appnest.core.auth import GitHubAuthManager
from appnest.core.sources import (
    MATCH_ARCH,
    MATCH_NO_ARCH,
    MATCH_NONE,
    GithubSource,
    HttpSource,
    LocalSource,
    choose_appimage_asset,
    extract_filename_from_url,
    guess_version,
    parse_github_repo_url,
    source_from_dict,
)
from appnest.exceptions import SourceError

from tests.core.conftest import mock_response


def _asset(name: str) -> Asset:
    return Asset(name=name, download_url=f"https://example.com/{name}", size=1)


class TestChooseAppImageAsset:
    """choose_appimage_asset() match levels."""

    def test_arch_match_preferred(self) -> None:
        """An AppImage naming the machine architecture wins."""
        assets = [
            _asset("Tool-1.0.tar.gz"),
            _asset("Tool-1.0.AppImage"),
            _asset("Tool-1.0-aarch64.AppImage"),
            _asset("Tool-1.0-x86_64.AppImage"),
        ]
        level, asset = choose_appimage_asset(assets, arch="x86_64")
        assert level == MATCH_ARCH
        assert asset is not None
        assert asset.name == "Tool-1.0-x86_64.AppImage"

    def test_alias_match(self) -> None:
        """Architecture aliases such as amd64 count as a match."""
        level, asset = choose_appimage_asset(
            [_asset("tool_amd64.appimage")], arch="x86_64"
        )
        assert level == MATCH_ARCH
        assert asset is not None

    def test_no_arch_marker(self) -> None:
        """An AppImage without any architecture marker is level 1."""
        assets = [_asset("Tool-arm64.AppImage"), _asset("Tool.AppImage")]
        level, asset = choose_appimage_asset(assets, arch="x86_64")
        assert level == MATCH_NO_ARCH
        assert asset is not None
        assert asset.name == "Tool.AppImage"

    def test_only_other_arch(self) -> None:
        """AppImages for other architectures are never chosen."""
        level, asset = choose_appimage_asset(
            [_asset("Tool-aarch64.AppImage"), _asset("Tool.zsync")],
            arch="x86_64",
        )
        assert (level, asset) == (MATCH_NONE, None)

    def test_x86_64_not_mistaken_for_i686(self) -> None:
        """x86-64 assets do not satisfy a 32-bit machine."""
        level, _ = choose_appimage_asset(
            [_asset("Tool-x86-64.AppImage")], arch="i686"
        )
        assert level == MATCH_NONE

    def test_defaults_to_running_machine(self) -> None:
        """Without arch the running machine is used."""
        with patch("platform.machine", return_value="AMD64"):
            level, _ = choose_appimage_asset([_asset("t-x86_64.AppImage")])
        assert level == MATCH_ARCH


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("Tool-1.2.3-x86_64.AppImage", "1.2.3"),
        ("tool_v2.0.AppImage", "v2.0"),
        ("Tool-1.0.0-beta.1.AppImage", "1.0.0-beta.1"),
        ("Tool.AppImage", None),
    ],
)
def test_guess_version(filename: str, expected: str | None) -> None:
    """Versions are pulled from filenames when present."""
    assert guess_version(filename) == expected


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://github.com/pbek/QOwnNotes", ("pbek", "QOwnNotes")),
        ("https://github.com/owner/repo.git", ("owner", "repo")),
        ("github.com/owner/repo/", ("owner", "repo")),
        ("https://gitlab.com/owner/repo", None),
        ("https://github.com/owner", None),
    ],
)
def test_parse_github_repo_url(url: str, expected) -> None:
    """Only repository URLs on github.com are accepted."""
    assert parse_github_repo_url(url) == expected


def test_extract_filename_from_url() -> None:
    """The filename is the unquoted last path component."""
    url = "https://example.com/dl/My%20Tool-1.0.AppImage?token=x"
    assert extract_filename_from_url(url) == "My Tool-1.0.AppImage"


class TestGithubSource:
    """GithubSource release lookups."""

    def test_release_urls(self) -> None:
        """latest, pinned tag and prerelease map to different endpoints."""
        base = "https://api.github.com/repos/o/r/releases"
        assert GithubSource("o", "r").release_url() == f"{base}/latest"
        assert (
            GithubSource("o", "r", tag_name="v1").release_url()
            == f"{base}/tags/v1"
        )
        assert (
            GithubSource("o", "r", prerelease=True).release_url()
            == f"{base}?per_page=1"
        )

    @pytest.mark.asyncio
    async def test_fetch_latest(self) -> None:
        """Assets and tag come from the API payload."""
        payload = {
            "tag_name": "v1.0",
            "assets": [
                {
                    "name": "Tool-x86_64.AppImage",
                    "browser_download_url": "https://dl/Tool-x86_64.AppImage",
                    "size": 42,
                },
                {"name": "broken"},
            ],
        }
        session = MagicMock()
        session.get.return_value = mock_response(json_data=payload)

        release = await GithubSource("o", "r").fetch_release(session)

        assert release.tag == "v1.0"
        assert release.assets == [
            Asset(
                name="Tool-x86_64.AppImage",
                download_url="https://dl/Tool-x86_64.AppImage",
                size=42,
            )
        ]

    @pytest.mark.asyncio
    async def test_prerelease_takes_first_entry(self) -> None:
        """The releases list endpoint yields its first release."""
        session = MagicMock()
        session.get.return_value = mock_response(
            json_data=[{"tag_name": "v2.0-rc1", "assets": []}]
        )
        source = GithubSource("o", "r", prerelease=True)
        release = await source.fetch_release(session)
        assert release.tag == "v2.0-rc1"

    @pytest.mark.asyncio
    async def test_not_found(self) -> None:
        """A 404 becomes a SourceError."""
        session = MagicMock()
        session.get.return_value = mock_response(status=404)
        with pytest.raises(SourceError, match="o/r"):
            await GithubSource("o", "r").fetch_release(session)

    @pytest.mark.asyncio
    async def test_client_error(self) -> None:
        """Transport errors become SourceError with the cause chained."""
        session = MagicMock()
        session.get.side_effect = aiohttp.ClientConnectionError("down")
        with pytest.raises(SourceError) as exc_info:
            await GithubSource("o", "r").fetch_release(session)
        assert isinstance(exc_info.value.__cause__, aiohttp.ClientError)

    @pytest.mark.asyncio
    async def test_auth_header_applied(self, monkeypatch) -> None:
        """A configured token is sent as a bearer header."""
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_" + "a" * 36)
        session = MagicMock()
        session.get.return_value = mock_response(
            json_data={"tag_name": "v1", "assets": []}
        )
        await GithubSource("o", "r").fetch_release(
            session, GitHubAuthManager(token_store=MagicMock())
        )
        headers = session.get.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer ghp_" + "a" * 36


class TestHttpSource:
    """HttpSource release lookups."""

    @pytest.mark.asyncio
    async def test_size_from_head(self) -> None:
        """Content-Length gives the size; the filename gives the version."""
        session = MagicMock()
        session.head.return_value = mock_response(
            headers={"Content-Length": "2048"}
        )
        source = HttpSource(url="https://example.com/Tool-3.1.AppImage")

        release = await source.fetch_release(session)

        assert release.tag == "3.1"
        assert release.assets[0].size == 2048
        assert release.assets[0].name == "Tool-3.1.AppImage"

    @pytest.mark.asyncio
    async def test_missing_length_and_explicit_version(self) -> None:
        """No Content-Length means size 0; a given version wins."""
        session = MagicMock()
        session.head.return_value = mock_response()
        source = HttpSource(
            url="https://example.com/Tool.AppImage", version="nightly"
        )
        release = await source.fetch_release(session)
        assert release.tag == "nightly"
        assert release.assets[0].size == 0

    @pytest.mark.asyncio
    async def test_fallback_tag(self) -> None:
        """Without any version information the tag is 'latest'."""
        session = MagicMock()
        session.head.return_value = mock_response()
        source = HttpSource(url="https://example.com/Tool.AppImage")
        assert (await source.fetch_release(session)).tag == "latest"


class TestLocalSource:
    """LocalSource release lookups."""

    @pytest.mark.asyncio
    async def test_local_file(self, tmp_path: Path) -> None:
        """Size from stat, file:// URL and the 'local' tag."""
        bundle = tmp_path / "Tool.AppImage"
        bundle.write_bytes(b"x" * 12)

        release = await LocalSource(path=str(bundle)).fetch_release()

        assert release.tag == "local"
        asset = release.assets[0]
        assert asset.size == 12
        assert asset.download_url == bundle.resolve().as_uri()
        assert asset.local_path == bundle.resolve()

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path: Path) -> None:
        """A path that does not exist raises SourceError."""
        with pytest.raises(SourceError):
            await LocalSource(path=str(tmp_path / "nope")).fetch_release()


class TestSourceFromDict:
    """Decoding stored source descriptors."""

    def test_each_kind(self) -> None:
        """Every variant decodes back to an equal object."""
        for source in (
            GithubSource("o", "r", prerelease=True, tag_name="v1"),
            HttpSource(url="https://example.com/a.AppImage", version="1"),
            LocalSource(path="/tmp/a.AppImage"),
        ):
            assert source_from_dict(source.to_dict()) == source

    def test_unknown_kind(self) -> None:
        """An unknown kind tag is rejected."""
        with pytest.raises(ValueError, match="ftp"):
            source_from_dict({"kind": "ftp"})
