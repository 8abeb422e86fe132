"""CLI argument parser for appnest.

Handles parsing of command-line arguments and provides a clean
interface for defining CLI commands and their options.
"""

import argparse
from argparse import Namespace
from collections.abc import Sequence


class CLIParser:
    """Command-line argument parser for appnest."""

    def parse_args(self, argv: Sequence[str] | None = None) -> Namespace:
        """Parse command-line arguments.

        Args:
            argv: Arguments to parse (defaults to sys.argv[1:])

        Returns:
            Namespace: Parsed arguments namespace.

        """
        return self.build().parse_args(argv)

    def build(self) -> argparse.ArgumentParser:
        """Build the complete parser with all subcommands."""
        parser = self._create_main_parser()
        self._add_global_options(parser)
        self._add_subcommands(parser)
        return parser

    def _create_main_parser(self) -> argparse.ArgumentParser:
        """Create the main argument parser."""
        return argparse.ArgumentParser(
            prog="appnest",
            description="appnest AppImage Installer",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Install the latest release of a GitHub repository
  %(prog)s install github https://github.com/pbek/QOwnNotes

  # Install from a direct download URL or a local file
  %(prog)s install http https://example.com/Tool-1.2.0-x86_64.AppImage
  %(prog)s install local ~/Downloads/Tool.AppImage --name Tool

  # Other commands
  %(prog)s list
  %(prog)s remove pbek-qownnotes

  # Auth Token Management (uses the system keyring)
  %(prog)s auth --save-token
  %(prog)s auth --status

  # Upgrade appnest itself
  %(prog)s upgrade --check
  %(prog)s self-update
            """,
        )

    def _add_global_options(self, parser: argparse.ArgumentParser) -> None:
        """Add the long-only --version flag to the main parser."""
        parser.add_argument(
            "--version",
            action="store_true",
            help="Show appnest version and exit",
        )

    def _add_subcommands(self, parser: argparse.ArgumentParser) -> None:
        """Add all subcommands to the parser."""
        subparsers = parser.add_subparsers(
            dest="command", help="Available commands"
        )

        self._add_install_command(subparsers)
        self._add_list_command(subparsers)
        self._add_remove_command(subparsers)
        self._add_auth_command(subparsers)
        self._add_upgrade_command(subparsers)

    @staticmethod
    def _add_common_install_options(
        parser: argparse.ArgumentParser,
    ) -> None:
        parser.add_argument("--id", help="Application identifier")
        parser.add_argument("--name", help="Application name")
        parser.add_argument(
            "-y",
            "--assume-yes",
            dest="yes",
            action="store_true",
            help="Automatically answer yes for questions",
        )

    def _add_install_command(self, subparsers) -> None:  # noqa: ANN001
        """Add install command parser with one subcommand per source."""
        install_parser = subparsers.add_parser(
            "install",
            aliases=["add"],
            help="Install an application",
        )
        install_parser.set_defaults(command="install")
        sources = install_parser.add_subparsers(
            dest="source_kind", required=True, help="Where to install from"
        )

        github_parser = sources.add_parser(
            "github",
            aliases=["gh"],
            help="Install an application from GitHub releases",
        )
        github_parser.add_argument("url", help="GitHub repository URL")
        self._add_common_install_options(github_parser)
        github_parser.add_argument("--tag", default="", help="Tag name")
        github_parser.add_argument(
            "--prerelease",
            action="store_true",
            help="Select pre-release tags",
        )
        github_parser.set_defaults(source_kind="github")

        http_parser = sources.add_parser(
            "http",
            aliases=["url"],
            help="Install an application from a download URL",
        )
        http_parser.add_argument("url", help="AppImage download URL")
        self._add_common_install_options(http_parser)
        http_parser.add_argument(
            "--version", dest="app_version", default="", help="App version"
        )
        http_parser.set_defaults(source_kind="http")

        local_parser = sources.add_parser(
            "local",
            help="Install an application from a local AppImage file",
        )
        local_parser.add_argument("path", help="Path to the AppImage file")
        self._add_common_install_options(local_parser)
        local_parser.add_argument(
            "--version", dest="app_version", default="", help="App version"
        )
        local_parser.set_defaults(source_kind="local")

    def _add_list_command(self, subparsers) -> None:  # noqa: ANN001
        """Add list command parser."""
        list_parser = subparsers.add_parser(
            "list", aliases=["ls"], help="List installed applications"
        )
        list_parser.set_defaults(command="list")

    def _add_remove_command(self, subparsers) -> None:  # noqa: ANN001
        """Add remove command parser."""
        remove_parser = subparsers.add_parser(
            "remove",
            aliases=["rm", "uninstall"],
            help="Remove installed applications",
            epilog="""
Examples:
  %(prog)s pbek-qownnotes
  %(prog)s app-one app-two -y
            """,
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        remove_parser.add_argument(
            "apps", nargs="+", help="Application identifiers to remove"
        )
        remove_parser.add_argument(
            "-y",
            "--assume-yes",
            dest="yes",
            action="store_true",
            help="Automatically answer yes for questions",
        )
        remove_parser.set_defaults(command="remove")

    def _add_auth_command(self, subparsers) -> None:  # noqa: ANN001
        """Add auth command parser."""
        auth_parser = subparsers.add_parser(
            "auth", help="Manage GitHub authentication"
        )
        auth_group = auth_parser.add_mutually_exclusive_group(required=True)
        auth_group.add_argument(
            "--save-token",
            action="store_true",
            help="Save GitHub authentication token",
        )
        auth_group.add_argument(
            "--remove-token",
            action="store_true",
            help="Remove GitHub authentication token",
        )
        auth_group.add_argument(
            "--status", action="store_true", help="Show authentication status"
        )

    def _add_upgrade_command(self, subparsers) -> None:  # noqa: ANN001
        """Add upgrade command parser."""
        upgrade_parser = subparsers.add_parser(
            "upgrade",
            aliases=["self-update", "self-upgrade"],
            help="Upgrade appnest to the latest release",
        )
        upgrade_parser.set_defaults(command="upgrade")
        upgrade_parser.add_argument(
            "--check",
            action="store_true",
            help="Only check whether a newer version is available",
        )
