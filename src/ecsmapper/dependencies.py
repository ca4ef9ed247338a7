"""Runtime dependency checks for the package and its CLI commands."""

from __future__ import annotations

import importlib.util

from ecsmapper.exceptions import DependencyError


def _is_module_available(module_name: str) -> bool:
    """Check whether a module can be imported.

    Args:
        module_name (str): Python module name.

    Returns:
        bool: True if import spec exists.
    """
    return importlib.util.find_spec(module_name) is not None


def _collect_missing_dependencies(modules_by_package: dict[str, str]) -> list[str]:
    """Collect missing distributions for a module mapping.

    Args:
        modules_by_package (dict[str, str]): Mapping of distribution name -> import module.

    Returns:
        list[str]: Missing distribution names.
    """
    return [package for package, module in modules_by_package.items() if not _is_module_available(module)]


def ensure_package_dependencies() -> None:
    """Validate required dependencies at package import time.

    Raises:
        DependencyError: If required runtime dependencies are missing.
    """
    missing = _collect_missing_dependencies(
        {
            "httpx": "httpx",
            "pydantic": "pydantic",
            "pydantic-settings": "pydantic_settings",
            "structlog": "structlog",
        },
    )
    if missing:
        raise DependencyError(missing_package=missing, message="package import")


def ensure_cli_dependencies() -> None:
    """Validate the extra runtime dependencies used by the `ecsmapper` command.

    Raises:
        DependencyError: If one or more required modules are missing.
    """
    missing = _collect_missing_dependencies(
        {
            "rich": "rich",
        },
    )
    if missing:
        raise DependencyError(missing_package=missing, message="cli")
