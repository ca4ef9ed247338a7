"""ECS field-mapping client package."""

from ecsmapper.dependencies import ensure_package_dependencies

ensure_package_dependencies()

from ecsmapper.async_runner import run_async  # noqa: E402
from ecsmapper.exceptions import (  # noqa: E402
    AsyncExecutionError,
    BackendError,
    DependencyError,
    EndpointNotImplementedError,
    ExportError,
    InputParseError,
    MappingValidationError,
    PackageError,
    PayloadShapeError,
    SettingsError,
)
from ecsmapper.logging import configure_logging, get_logger  # noqa: E402
from ecsmapper.settings import Settings, get_settings  # noqa: E402

__version__ = "0.1.0"

# Initialize package logger at import time via `get_logger`.
logger = get_logger("ecsmapper")

__all__ = [
    "AsyncExecutionError",
    "BackendError",
    "DependencyError",
    "EndpointNotImplementedError",
    "ExportError",
    "InputParseError",
    "MappingValidationError",
    "PackageError",
    "PayloadShapeError",
    "Settings",
    "SettingsError",
    "__version__",
    "configure_logging",
    "get_logger",
    "get_settings",
    "logger",
    "run_async",
]
