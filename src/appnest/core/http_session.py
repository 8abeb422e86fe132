"""HTTP session utilities for appnest.

This module provides utilities for creating configured HTTP sessions
with proper timeout and connection settings.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import aiohttp

from appnest.constants import DEFAULT_TIMEOUT_SECONDS
from appnest.types import Settings

# Installs are sequential, so a small pool is enough
CONNECTION_LIMIT = 4


@asynccontextmanager
async def create_http_session(
    settings: Settings,
) -> AsyncIterator[aiohttp.ClientSession]:
    """Create configured HTTP session.

    Args:
        settings: Loaded global settings

    Yields:
        Configured aiohttp.ClientSession

    """
    network_cfg = settings.get("network", {})
    timeout_seconds = int(
        network_cfg.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)
    )

    # No total timeout: a large bundle may legitimately take minutes
    timeout = aiohttp.ClientTimeout(
        total=None,
        sock_read=timeout_seconds * 3,
        sock_connect=timeout_seconds,
    )
    connector = aiohttp.TCPConnector(limit=CONNECTION_LIMIT)

    async with aiohttp.ClientSession(
        timeout=timeout,
        connector=connector,
    ) as session:
        yield session
