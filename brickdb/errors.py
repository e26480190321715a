"""Custom exception hierarchy for brickdb.

All public errors inherit from ``BrickDBError`` so callers can catch the base
class for any brickdb-specific failure.

The execution layer (:class:`~brickdb.db.database.Database`) never lets these
escape: it logs them, keeps the last one for inspection and hands back an
:class:`~brickdb.db.result.ExecutionResult`.  Code that drives the compiler or
the settings layer directly sees them raised.
"""
from __future__ import annotations

from typing import Any


class BrickDBError(Exception):
    """Base exception for all brickdb errors.

    Args:
        message: Human-readable description.
        code: Driver or SQLSTATE error code, when one is known.
        sql: The (interpolated) statement being run when the error occurred.
    """

    #: Short label used when formatting the error for logs.
    label: str = "Error"

    def __init__(
        self,
        message: str,
        code: str | int | None = None,
        sql: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.sql = sql

    def describe(self, source: str | None = None) -> str:
        """Return a one-line description such as ``Database Error (query): …``."""
        where = f" ({source})" if source else ""
        text = f"{self.label}{where}: {self.message}"
        if self.sql:
            text += f" | SQL: {self.sql}"
        return text

    def to_error_response(self) -> dict[str, Any]:
        """Return a structured error payload (e.g. for an API response)."""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "code": self.code,
            "sql": self.sql,
        }


class DatabaseConnectionError(BrickDBError):
    """Raised when the driver is unreachable or the credentials are invalid."""

    label = "Database Connection Error"


class StatementError(BrickDBError):
    """Raised for malformed SQL, constraint violations and failed writes."""

    label = "Database Error"


class GeneralError(BrickDBError):
    """Raised for any other runtime fault during execution."""

    label = "General Error"


class ConfigError(BrickDBError):
    """Raised when connection settings are missing or invalid.

    Args:
        message: Human-readable description.
        field: The settings field (or environment variable) at fault.
    """

    label = "Configuration Error"

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class CompilationError(BrickDBError):
    """Raised when a statement cannot be compiled at all.

    Clause compilers degrade gracefully on odd input; this is reserved for
    structural problems such as an unregistered dialect or an INSERT without
    values.

    Args:
        message: Human-readable description.
        clause: The clause or statement being compiled.
    """

    label = "Compilation Error"

    def __init__(self, message: str, clause: str | None = None) -> None:
        super().__init__(message)
        self.clause = clause
