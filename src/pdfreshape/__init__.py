"""PDFReshape package."""

from pdfreshape import _bootstrap  # noqa: F401
from pdfreshape.async_runner import run_async
from pdfreshape.exceptions import (
    AsyncExecutionError,
    DependencyError,
    EncodingError,
    InvalidRangeError,
    MalformedDocumentError,
    MissingCollaboratorError,
    NoOutlineError,
    PackageError,
    RenderFailureError,
    SerializationError,
    SettingsError,
)
from pdfreshape.logging import configure_logging, get_logger
from pdfreshape.settings import Settings, get_settings

__version__ = "0.1.0"

# Initialize package logger at import time via `get_logger`.
logger = get_logger("pdfreshape")

__all__ = [
    "AsyncExecutionError",
    "DependencyError",
    "EncodingError",
    "InvalidRangeError",
    "MalformedDocumentError",
    "MissingCollaboratorError",
    "NoOutlineError",
    "PackageError",
    "RenderFailureError",
    "SerializationError",
    "Settings",
    "SettingsError",
    "__version__",
    "configure_logging",
    "get_logger",
    "get_settings",
    "logger",
    "run_async",
]
