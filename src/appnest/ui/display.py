"""Presentation helpers for CLI output.

Uses print() directly so messages are visible regardless of the console
log level.
"""
# ruff: noqa: T201

from __future__ import annotations

from typing import TYPE_CHECKING

from appnest.constants import (
    COLOR_CYAN,
    COLOR_GREEN,
    COLOR_RESET,
    COLOR_YELLOW,
    RIGHT_ARROW_SYMBOL,
    TICK_SYMBOL,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from appnest.core.install import BatchResult


def cyan(text: str) -> str:
    """Wrap text in the highlight colour."""
    return f"{COLOR_CYAN}{text}{COLOR_RESET}"


def print_table(rows: Sequence[tuple[str, str]]) -> None:
    """Print label/value rows with aligned values."""
    if not rows:
        return
    width = max(len(label) for label, _ in rows)
    for label, value in rows:
        print(f"{RIGHT_ARROW_SYMBOL} {label:<{width}}  {value}")


def print_install_summary(rows: Sequence[tuple[str, str]]) -> None:
    """Print the pre-install summary table surrounded by blank lines."""
    print()
    print_table([(label, cyan(value)) for label, value in rows])
    print()


def print_warning(message: str) -> None:
    """Print a warning line."""
    print(f"{COLOR_YELLOW}⚠️  {message}{COLOR_RESET}")


def print_batch_result(result: BatchResult, names: dict[str, str]) -> None:
    """Print the outcome of a batch install."""
    print()
    for app_id in result.installed:
        print(
            f"{COLOR_GREEN}{TICK_SYMBOL}{COLOR_RESET} Installed "
            f"{cyan(names.get(app_id, app_id))} successfully!"
        )
    for app_id in result.failed:
        error = result.errors.get(app_id)
        print(f"❌ Failed to install {names.get(app_id, app_id)}")
        if error is not None:
            print(f"   {RIGHT_ARROW_SYMBOL} {error}")
    if result.skipped:
        print(f"⏭️  Not attempted: {', '.join(result.skipped)}")


def prompt_yes_no(
    question: str,
    input_func: Callable[[str], str] = input,
    *,
    default: bool = False,
) -> bool:
    """Ask a yes/no question on the terminal.

    Args:
        question: Question text
        input_func: Function reading one line of input
        default: Answer used for an empty reply

    Returns:
        True for yes

    """
    hint = "Y/n" if default else "y/N"
    while True:
        try:
            reply = input_func(f"{question} ({hint}): ").strip().lower()
        except EOFError:
            return default
        if not reply:
            return default
        if reply in ("y", "yes"):
            return True
        if reply in ("n", "no"):
            return False
