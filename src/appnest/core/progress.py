"""Single-line install status display.

The download loop only bumps a byte counter; StatusTicker redraws the
status line from that counter on a fixed period while an install runs.
"""

from __future__ import annotations

import asyncio
import contextlib
import sys
import time
from typing import TYPE_CHECKING, Protocol, Self, TextIO

from appnest.constants import (
    COLOR_GREEN,
    COLOR_GREY,
    COLOR_RED,
    COLOR_RESET,
    COLOR_YELLOW,
    ERASE_PREVIOUS_LINE,
    EXCLAMATION_SYMBOL,
    SPINNER_FRAMES,
    STATUS_TICK_INTERVAL,
    TICK_SYMBOL,
)
from appnest.types import InstallStatus
from appnest.utils.formatting import humanize_seconds, pretty_bytes

if TYPE_CHECKING:
    import types


class StatusSubject(Protocol):
    """What the status line needs to know about an install."""

    index: int
    count: int
    started_at: float
    progress: int
    print_cycle: int
    status: InstallStatus

    @property
    def version(self) -> str: ...

    @property
    def total_size(self) -> int: ...


def _grey(text: str) -> str:
    return f"{COLOR_GREY}{text}{COLOR_RESET}"


def render_status_line(subject: StatusSubject, now: float | None = None) -> str:
    """Build the status line for an install, without a trailing newline.

    Args:
        subject: Install whose state is shown
        now: Current time in seconds (defaults to time.time())

    Returns:
        Formatted line

    """
    now = time.time() if now is None else now
    prefix = _grey(f"[{subject.index + 1}/{subject.count}]")
    suffix = _grey(f"({humanize_seconds(int(now - subject.started_at))})")
    spinner = SPINNER_FRAMES[subject.print_cycle % len(SPINNER_FRAMES)]

    match subject.status:
        case InstallStatus.DOWNLOADING:
            glyph = f"{COLOR_YELLOW}{spinner}{COLOR_RESET}"
            counts = (
                f"({pretty_bytes(subject.progress)} / "
                f"{pretty_bytes(subject.total_size)})"
            )
            return f"{prefix} {glyph} {subject.version} {counts} {suffix}"
        case InstallStatus.INTEGRATING:
            glyph = f"{COLOR_YELLOW}{spinner}{COLOR_RESET}"
        case InstallStatus.INSTALLED:
            glyph = f"{COLOR_GREEN}{TICK_SYMBOL}{COLOR_RESET}"
        case InstallStatus.FAILED:
            glyph = f"{COLOR_RED}{EXCLAMATION_SYMBOL}{COLOR_RESET}"
    return f"{prefix} {glyph} {subject.version} {suffix}"


def print_status(subject: StatusSubject, out: TextIO | None = None) -> None:
    """Print the status line, replacing the one printed before it."""
    out = out or sys.stdout
    if subject.print_cycle > 0:
        out.write(ERASE_PREVIOUS_LINE)
    subject.print_cycle += 1
    out.write(render_status_line(subject) + "\n")
    out.flush()


class StatusTicker:
    """Async context manager redrawing a status line periodically.

    Example:
        >>> async with StatusTicker(app, out):
        ...     await app.download()

    """

    def __init__(
        self,
        subject: StatusSubject,
        out: TextIO | None = None,
        interval: float = STATUS_TICK_INTERVAL,
    ) -> None:
        """Initialize the ticker.

        Args:
            subject: Install whose state is shown
            out: Stream to draw on (defaults to stdout)
            interval: Seconds between redraws

        """
        self.subject = subject
        self.out = out
        self.interval = interval
        self._task: asyncio.Task[None] | None = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            print_status(self.subject, self.out)

    async def __aenter__(self) -> Self:
        """Start redrawing in a background task."""
        self._task = asyncio.create_task(self._run())
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        """Stop redrawing. Runs on every exit path."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
