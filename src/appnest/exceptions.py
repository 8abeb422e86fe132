"""Exception classes for appnest operations."""


class AppnestError(Exception):
    """Base exception for appnest operations."""

    error_prefix: str = "Operation failed"

    def __init__(
        self,
        message: str,
        target: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        """Initialize error with message and optional target.

        Args:
            message: Error message describing the failure.
            target: Optional name of the target that failed.
            cause: Optional underlying exception.

        """
        super().__init__(message)
        self.message = message
        self.target = target
        self.cause = cause

    def __str__(self) -> str:
        """Return formatted error message."""
        if self.target:
            return f"{self.error_prefix} for '{self.target}': {self.message}"
        return f"{self.error_prefix}: {self.message}"


class SourceError(AppnestError):
    """Raised when a release cannot be resolved from its source."""

    error_prefix = "Source resolution failed"


class DownloadError(AppnestError):
    """Raised when the bundle cannot be downloaded into place."""

    error_prefix = "Download failed"


class ExtractionError(AppnestError):
    """Raised when the bundle filesystem image cannot be unpacked."""

    error_prefix = "Extraction failed"


class MetadataError(AppnestError):
    """Raised when embedded icon or desktop file is missing."""

    error_prefix = "Metadata missing"


class IntegrationError(AppnestError):
    """Raised when icon or desktop entry cannot be installed."""

    error_prefix = "Desktop integration failed"


class ConfigStoreError(AppnestError):
    """Raised when a config file cannot be read or written."""

    error_prefix = "Config store error"


class JournalError(AppnestError):
    """Raised when the transaction journal cannot be read or written."""

    error_prefix = "Transaction journal error"


class InvalidStatusTransition(AppnestError):
    """Raised on a status change out of a terminal install state."""

    error_prefix = "Invalid status transition"
