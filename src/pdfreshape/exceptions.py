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
    """Raised when an async operation fails in compatibility runner."""

    result: BaseException
    message: str = "Async operation failed"

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message}: {self.result}"


@dataclass(frozen=True)
class DependencyError(PackageError):
    """Raised when optional runtime dependencies are missing."""

    missing_package: list[str]
    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return f"Missing runtime dependencies for '{self.message}': {', '.join(self.missing_package)}"


@dataclass(frozen=True)
class MalformedDocumentError(PackageError):
    """Raised when input bytes cannot be parsed as a document."""

    message: str = "Input is not a readable document"

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class RenderFailureError(PackageError):
    """Raised when a page cannot be rendered to a raster image."""

    page_index: int
    message: str = "Failed to render page"

    def __str__(self) -> str:
        """Return error message payload."""
        return f"{self.message} (page index {self.page_index})"


@dataclass(frozen=True)
class NoOutlineError(PackageError):
    """Raised when an outline split is requested on a document without bookmarks."""

    message: str = "This document does not contain bookmarks/outline"

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class InvalidRangeError(PackageError):
    """Raised when caller-supplied sizes, margins or levels are not actionable."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class SerializationError(PackageError):
    """Raised when a document cannot be written to bytes."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class EncodingError(PackageError):
    """Raised when a raster image cannot be encoded or embedded."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message


@dataclass(frozen=True)
class MissingCollaboratorError(PackageError):
    """Raised when an operation is invoked without a collaborator it needs."""

    message: str

    def __str__(self) -> str:
        """Return error message payload."""
        return self.message
