"""Runtime dependency checks for CLI commands."""

from __future__ import annotations

import importlib.util

from pdfreshape.exceptions import DependencyError

# Import module needed by each CLI command, keyed by distribution name.
_BACKEND_MODULES = {"pymupdf": "pymupdf"}


def _is_module_available(module_name: str) -> bool:
    """Check whether a module can be imported.

    Args:
        module_name (str): Python module name.

    Returns:
        bool: True if import spec exists.
    """
    return importlib.util.find_spec(module_name) is not None


def _collect_missing_dependencies(modules_by_package: dict[str, str]) -> list[str]:
    """Collect missing packages for a module mapping.

    Args:
        modules_by_package (Mapping[str, str]): Mapping of package name -> import module.

    Returns:
        list[str]: Missing package names.
    """
    return [package for package, module in modules_by_package.items() if not _is_module_available(module)]


def ensure_package_dependencies() -> None:
    """Validate required dependencies at package import time.

    Raises:
        DependencyError: If required runtime dependencies are missing.
    """
    missing = _collect_missing_dependencies(
        {
            "pydantic": "pydantic",
            "pydantic-settings": "pydantic_settings",
            "structlog": "structlog",
        },
    )
    if missing:
        raise DependencyError(missing_package=missing, message="package import")


def ensure_backend_dependencies(command: str) -> None:
    """Validate the document backend is importable before running a CLI command.

    Args:
        command (str): CLI command name, used in the error message.

    Raises:
        DependencyError: If the document backend is missing.
    """
    missing = _collect_missing_dependencies(_BACKEND_MODULES)
    if missing:
        raise DependencyError(missing_package=missing, message=command)
