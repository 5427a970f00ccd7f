"""SurrealKit: schema lifecycle, reconciliation and declarative testing for SurrealDB."""

from surrealkit.config import Settings, load_settings
from surrealkit.errors import (
    CapabilityError,
    CaseError,
    ConfigurationError,
    ExecutionError,
    SpecLoadError,
    StateIOError,
    SuiteExecutionError,
    SurrealKitError,
)

__version__ = "0.4.0"

__all__ = [
    "CapabilityError",
    "CaseError",
    "ConfigurationError",
    "ExecutionError",
    "Settings",
    "SpecLoadError",
    "StateIOError",
    "SuiteExecutionError",
    "SurrealKitError",
    "__version__",
    "load_settings",
]
