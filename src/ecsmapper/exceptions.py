"""Package exceptions."""

from __future__ import annotations

from dataclasses import dataclass


class PackageError(Exception):
    """Root exception for the package."""


@dataclass(frozen=True)
class SettingsError(PackageError):
    """Raised when settings cannot be loaded or validated."""

    message: str = "Failed to load settings"
    exc: BaseException | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.exc}" if self.exc else self.message


@dataclass(frozen=True)
class AsyncExecutionError(PackageError):
    """Raised when a coroutine fails inside the background runner."""

    result: BaseException
    message: str = "Async operation failed"

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.result}"


@dataclass(frozen=True)
class DependencyError(PackageError):
    """Raised when runtime dependencies are missing."""

    missing_package: list[str]
    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Missing runtime dependencies for '{self.message}': {', '.join(self.missing_package)}"


@dataclass(frozen=True)
class InputParseError(PackageError):
    """Raised when pasted sample text is not valid JSON."""

    message: str = "Invalid JSON. Please paste a valid JSON object or array."
    exc: BaseException | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class PayloadShapeError(PackageError):
    """Raised when valid JSON is neither an object nor an array of objects."""

    message: str = "JSON must be an object or an array of objects."

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class BackendError(PackageError):
    """Raised when a call to the mapping service fails."""

    message: str
    status_code: int | None = None
    detail: str | None = None

    def __str__(self) -> str:
        """Return error message payload."""
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message

    def user_message(self, fallback: str) -> str:
        """Return the backend-supplied detail, or `fallback` when there is none.

        Args:
            fallback (str): Generic message shown when the backend gave no detail.

        Returns:
            str: Human-readable message.
        """
        return self.detail or fallback


@dataclass(frozen=True)
class EndpointNotImplementedError(BackendError):
    """Raised when the backend answers 404 for an endpoint it does not expose yet."""


@dataclass(frozen=True)
class MappingValidationError(PackageError):
    """Raised when a mapping edit is rejected before reaching the backend."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass
class ExportError(PackageError):
    """Raised when an export file cannot be written."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message
