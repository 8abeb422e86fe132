"""Install command handler.

Resolves the requested source to a release and an asset, confirms with the
user, then hands a single-app batch to the install pipeline.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING

from appnest.config import AppPaths
from appnest.constants import APPIMAGE_EXTENSION
from appnest.core.http_session import create_http_session
from appnest.core.install import InstallableApp, install_apps
from appnest.core.sources import (
    MATCH_NO_ARCH,
    MATCH_NONE,
    GithubSource,
    HttpSource,
    LocalSource,
    choose_appimage_asset,
    extract_filename_from_url,
    parse_github_repo_url,
)
from appnest.exceptions import SourceError
from appnest.logger import get_logger
from appnest.types import AppConfig
from appnest.ui.display import (
    print_batch_result,
    print_install_summary,
    print_warning,
    prompt_yes_no,
)
from appnest.utils import clean_id, construct_app_id

from .base import BaseCommandHandler

if TYPE_CHECKING:
    from argparse import Namespace

    from appnest.core.sources import Source

logger = get_logger(__name__)

_VERSION_TAIL = re.compile(r"[-_ ]v?\d+(?:\.\d+)+.*$")


def derive_app_name(filename: str) -> str:
    """Guess a display name from a bundle filename.

    Example:
        >>> derive_app_name("Tool-1.2.0-x86_64.AppImage")
        'Tool'

    """
    stem = filename
    if stem.lower().endswith(APPIMAGE_EXTENSION.lower()):
        stem = stem[: -len(APPIMAGE_EXTENSION)]
    return _VERSION_TAIL.sub("", stem) or stem


class InstallCommandHandler(BaseCommandHandler):
    """Handler for ``install github|http|local``."""

    async def execute(self, args: Namespace) -> int:
        """Execute install command."""
        source, app_id, app_name = self.build_source(args)
        logger.debug(
            "Install request: kind=%s id=%s name=%s",
            source.kind,
            app_id,
            app_name,
        )

        async with create_http_session(self.settings) as session:
            release = await source.fetch_release(session, self.auth_manager)
            logger.debug("Selected release tag: %s", release.tag)

            match_level, asset = choose_appimage_asset(release.assets)
            if match_level == MATCH_NONE or asset is None:
                msg = f"no valid asset in release {release.tag}"
                raise SourceError(msg, target=app_id)
            if match_level == MATCH_NO_ARCH:
                print_warning(
                    "No architecture specified in the asset name, "
                    "cannot determine compatibility"
                )

            paths = AppPaths.resolve(self.settings, app_id, app_name)
            if app_id in self.store.read_config().installed:
                print_warning(f"Application with id {app_id} already exists")
                if not args.yes and not prompt_yes_no(
                    "Do you want to re-install this application?"
                ):
                    print_warning("Aborted...")
                    return 0

            print_install_summary(
                [
                    ("Name", app_name),
                    ("Identifier", app_id),
                    ("Version", release.tag),
                    ("Filename", asset.name),
                    ("AppImage", str(paths.appimage)),
                    (".desktop file", str(paths.desktop)),
                ]
            )
            if not args.yes and not prompt_yes_no("Do you want to proceed?"):
                print_warning("Aborted...")
                return 0

            app = AppConfig(
                id=app_id,
                name=app_name,
                version=release.tag,
                appimage=str(paths.appimage),
                source=source.kind,
                desktop=str(paths.desktop),
            )
            result = await install_apps(
                [
                    InstallableApp(
                        app=app, source=source, paths=paths, asset=asset
                    )
                ],
                self.journal,
                self.store,
                session=session,
            )

        print_batch_result(result, {app_id: app_name})
        return 0 if result.fail_count == 0 else 1

    def build_source(self, args: Namespace) -> tuple[Source, str, str]:
        """Build the source and settle the app id and name.

        Returns:
            Tuple of (source, app id, app name)

        Raises:
            SourceError: If the target is invalid or the id is empty

        """
        source: Source
        match args.source_kind:
            case "github":
                parsed = parse_github_repo_url(args.url)
                if parsed is None:
                    msg = "invalid GitHub repository URL"
                    raise SourceError(msg, target=args.url)
                owner, repo = parsed
                source = GithubSource(
                    owner=owner,
                    repo=repo,
                    prerelease=args.prerelease,
                    tag_name=args.tag or "",
                )
                app_name = args.name or repo
                app_id = args.id or construct_app_id(owner, repo)
            case "http":
                filename = extract_filename_from_url(args.url)
                source = HttpSource(url=args.url, version=args.app_version)
                app_name = args.name or derive_app_name(filename)
                app_id = args.id or app_name
            case "local":
                file_path = Path(args.path).expanduser().resolve()
                source = LocalSource(
                    path=str(file_path), version=args.app_version
                )
                app_name = args.name or derive_app_name(file_path.name)
                app_id = args.id or app_name
            case _:
                msg = f"unknown source kind {args.source_kind!r}"
                raise SourceError(msg)

        app_id = clean_id(app_id)
        if not app_id:
            msg = "invalid application id"
            raise SourceError(msg, target=app_name)
        return source, app_id, app_name
