"""Exception hierarchy shared by the SurrealKit engine.

Configuration, capability and local I/O errors are fatal to the operation
that raised them.  :class:`ExecutionError` and its subclasses are the
recoverable family: callers decide between fail-fast and log-and-continue.
Assertion failures are never raised; they are reported as data.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from surrealkit.models.report import SuiteReport


class SurrealKitError(Exception):
    """Base class for every error raised by SurrealKit."""


class ConfigurationError(SurrealKitError):
    """A required setting, credential or spec field is missing or invalid."""


class SpecLoadError(ConfigurationError):
    """A suite or global test config document could not be read, parsed or validated."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        self.path = str(path) if path is not None else None
        if self.path:
            message = f"{self.path}: {message}"
        super().__init__(message)


class CapabilityError(SurrealKitError):
    """The target server does not support a requested feature."""


class MissingScopeError(SurrealKitError):
    """An entity lacks the owning scope required to render its statement."""


class StateIOError(SurrealKitError):
    """Reading or writing local state on disk failed."""

    def __init__(self, action: str, path: Path | str) -> None:
        self.path = str(path)
        super().__init__(f"{action} {self.path}")


class ExecutionError(SurrealKitError):
    """A statement or request failed while being executed."""


class QueryError(ExecutionError):
    """The database reported an error for one of the submitted statements."""


class AuthenticationError(ExecutionError):
    """Signin or token authentication was rejected."""


class TransportError(ExecutionError):
    """The remote endpoint could not be reached."""


class SharedDatabaseError(ExecutionError):
    """Pruning was refused because the database is marked as shared."""


class CaseError(SurrealKitError):
    """A test case could not be evaluated."""


class SuiteExecutionError(SurrealKitError):
    """A suite aborted; ``completed`` holds the suites that had already settled."""

    def __init__(
        self,
        suite_path: str,
        message: str,
        completed: list[SuiteReport] | None = None,
    ) -> None:
        self.suite_path = suite_path
        self.completed: list[SuiteReport] = list(completed or [])
        super().__init__(f"suite {suite_path}: {message}")
