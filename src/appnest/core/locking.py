"""File locking using fcntl.flock.

JournalLock serializes read-modify-write cycles on the transaction journal
across processes. The lock blocks until it is granted; callers running on
the event loop enter it from an executor thread.
"""

from __future__ import annotations

import fcntl
from pathlib import (
    Path,  # noqa: TC003 - Path used at runtime for file operations
)
from typing import IO, TYPE_CHECKING, Self

from appnest.exceptions import JournalError

if TYPE_CHECKING:
    import types


class JournalLock:
    """Context manager holding an exclusive flock on a lock file.

    Attributes:
        _lock_path: Path to the lock file.
        _lock_file: Open file object for the lock file (None when unlocked).

    Example:
        >>> from pathlib import Path
        >>> with JournalLock(Path("/tmp/transactions.json.lock")):
        ...     pass  # exclusive access to the journal

    """

    def __init__(self, lock_path: Path) -> None:
        """Initialize JournalLock with lock file path.

        Args:
            lock_path: Path to the lock file to be created/used.

        """
        self._lock_path = lock_path
        self._lock_file: IO[str] | None = None

    @property
    def locked(self) -> bool:
        """Whether this instance currently holds the lock."""
        return self._lock_file is not None

    def __enter__(self) -> Self:
        """Acquire the lock, waiting for other holders to release it.

        Raises:
            JournalError: If the lock file cannot be opened or locked.

        """
        lock_file = None
        try:
            self._lock_path.parent.mkdir(parents=True, exist_ok=True)
            lock_file = self._lock_path.open("a", encoding="utf-8")
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
        except OSError as e:
            if lock_file is not None:
                lock_file.close()
            msg = f"Failed to acquire lock: {e}"
            raise JournalError(
                msg, target=str(self._lock_path), cause=e
            ) from e
        self._lock_file = lock_file
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        """Release the lock. Safe to call even if it was never acquired."""
        if self._lock_file is not None:
            fcntl.flock(self._lock_file.fileno(), fcntl.LOCK_UN)
            self._lock_file.close()
            self._lock_file = None
