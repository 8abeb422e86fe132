"""Tests for appnest self-upgrade."""

from argparse import Namespace
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from appnest import __version__
from appnest.cli import CLIParser
from appnest.cli.commands import UpgradeHandler
from appnest.cli.upgrade import (
    fetch_latest_version,
    is_candidate_newer,
    normalize_version,
    perform_self_update,
    should_perform_self_update,
)
from appnest.constants import APP_GITHUB_URL

from tests.core.conftest import mock_response

HANDLER = "appnest.cli.commands.upgrade"


@pytest.mark.parametrize(
    ("tag", "expected"),
    [
        ("v1.2.3", "1.2.3"),
        ("1.2.3-alpha", "1.2.3a0"),
        ("1.2.3-beta2", "1.2.3b2"),
        ("v1.2.3-rc.1", "1.2.3rc1"),
        ("nightly", "nightly"),
    ],
)
def test_normalize_version(tag: str, expected: str) -> None:
    assert normalize_version(tag) == expected


@pytest.mark.parametrize(
    ("current", "candidate", "newer"),
    [
        ("1.0.0", "v1.1.0", True),
        ("1.1.0", "v1.1.0", False),
        ("1.1.0", "v1.0.0", False),
        ("1.1.0-beta", "1.1.0", True),
        ("dev", "v1.0.0", True),
        ("1.0.0", "nightly", False),
    ],
)
def test_is_candidate_newer(current: str, candidate: str, newer: bool) -> None:
    assert is_candidate_newer(current, candidate) is newer


@pytest.mark.asyncio
async def test_fetch_latest_version_reads_release_tag() -> None:
    """The latest release of appnest's own repository is queried."""
    session = MagicMock()
    session.get.return_value = mock_response(
        json_data={"tag_name": "v9.9.9", "assets": []}
    )

    assert await fetch_latest_version(session) == "v9.9.9"
    url = session.get.call_args.args[0]
    assert url.endswith("/repos/appnest/appnest/releases/latest")


@pytest.mark.asyncio
async def test_fetch_latest_version_failure_is_none() -> None:
    """Network errors degrade to an unknown latest version."""
    session = MagicMock()
    session.get.side_effect = aiohttp.ClientConnectionError("down")

    assert await fetch_latest_version(session) is None


@pytest.mark.asyncio
async def test_should_update_when_latest_unknown() -> None:
    with patch(
        "appnest.cli.upgrade.fetch_latest_version",
        AsyncMock(return_value=None),
    ):
        assert await should_perform_self_update("1.0.0", MagicMock()) == (
            True,
            None,
        )


@pytest.mark.asyncio
async def test_should_not_update_when_current() -> None:
    with patch(
        "appnest.cli.upgrade.fetch_latest_version",
        AsyncMock(return_value="v1.0.0"),
    ):
        assert await should_perform_self_update("1.0.0", MagicMock()) == (
            False,
            "v1.0.0",
        )


def test_perform_self_update_execs_uv() -> None:
    """The process is replaced by a uv tool upgrade from git."""
    with (
        patch("appnest.cli.upgrade.shutil.which", return_value="/bin/uv"),
        patch("appnest.cli.upgrade.os.execvp") as execvp,
    ):
        perform_self_update()

    execvp.assert_called_once_with(
        "/bin/uv",
        ["/bin/uv", "tool", "install", "--upgrade", f"git+{APP_GITHUB_URL}"],
    )


def test_perform_self_update_reports_exec_failure() -> None:
    with patch(
        "appnest.cli.upgrade.os.execvp", side_effect=FileNotFoundError("uv")
    ):
        assert perform_self_update() is False


@pytest.mark.parametrize("alias", ["upgrade", "self-update", "self-upgrade"])
def test_parser_aliases(alias: str) -> None:
    args = CLIParser().parse_args([alias, "--check"])
    assert args.command == "upgrade"
    assert args.check is True


class TestUpgradeHandler:
    """UpgradeHandler decides between checking and upgrading."""

    @pytest.fixture
    def handler(self, settings, store, journal) -> UpgradeHandler:
        return UpgradeHandler(settings, store, journal, MagicMock())

    @pytest.mark.asyncio
    async def test_check_reports_newer(
        self, handler: UpgradeHandler, capsys
    ) -> None:
        with (
            patch(
                f"{HANDLER}.should_perform_self_update",
                AsyncMock(return_value=(True, "v9.9.9")),
            ),
            patch(f"{HANDLER}.perform_self_update") as update,
        ):
            assert await handler.execute(Namespace(check=True)) == 0

        out = capsys.readouterr().out
        assert f"Current: {__version__}, Latest: v9.9.9" in out
        assert "newer version is available" in out
        update.assert_not_called()

    @pytest.mark.asyncio
    async def test_check_without_latest_fails(
        self, handler: UpgradeHandler, capsys
    ) -> None:
        with patch(
            f"{HANDLER}.should_perform_self_update",
            AsyncMock(return_value=(True, None)),
        ):
            assert await handler.execute(Namespace(check=True)) == 1
        assert "Could not determine" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_already_latest(
        self, handler: UpgradeHandler, capsys
    ) -> None:
        with (
            patch(
                f"{HANDLER}.should_perform_self_update",
                AsyncMock(return_value=(False, "v1.0.0")),
            ),
            patch(f"{HANDLER}.perform_self_update") as update,
        ):
            assert await handler.execute(Namespace(check=False)) == 0

        assert "already running the latest" in capsys.readouterr().out
        update.assert_not_called()

    @pytest.mark.asyncio
    async def test_upgrade_runs_self_update(
        self, handler: UpgradeHandler, capsys
    ) -> None:
        with (
            patch(
                f"{HANDLER}.should_perform_self_update",
                AsyncMock(return_value=(True, "v9.9.9")),
            ),
            patch(
                f"{HANDLER}.perform_self_update", return_value=False
            ) as update,
        ):
            assert await handler.execute(Namespace(check=False)) == 1

        update.assert_called_once_with()
        out = capsys.readouterr().out
        assert "to v9.9.9" in out
        assert "Upgrade failed" in out
