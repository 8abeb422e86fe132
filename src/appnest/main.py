"""Main CLI entry point for appnest AppImage installer.

This module provides the minimal entry point for the command-line
interface, delegating all functionality to specialized command
handlers and CLI components.
"""

import sys

import uvloop

from appnest.cli import CLIRunner
from appnest.logger import get_logger

logger = get_logger(__name__)


async def async_main() -> int:
    """Run the CLI asynchronously.

    Returns:
        Process exit status

    """
    logger.debug("CLI started")
    runner = CLIRunner()
    try:
        status = await runner.run()
    except Exception:
        logger.exception("CLI encountered an error")
        raise
    logger.debug("CLI finished with status %d", status)
    return status


def main() -> None:
    """Run the CLI application under uvloop.

    Raises:
        SystemExit: Always, with the command's exit status.

    """
    try:
        status = uvloop.run(async_main())
    except KeyboardInterrupt:
        logger.info("CLI cancelled by user")
        sys.exit(1)
    except Exception:
        logger.exception("❌ Unexpected error")
        sys.exit(1)
    sys.exit(status)


if __name__ == "__main__":
    main()
