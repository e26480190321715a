"""Typed outcome of an execution-level call."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from brickdb.errors import BrickDBError


@dataclass(frozen=True)
class ExecutionResult:
    """What a :class:`~brickdb.db.database.Database` call produced.

    Truthy on success, so ``if db.insert(...):`` reads naturally.

    Attributes:
        ok: Whether the call succeeded.
        value: Call-specific payload (e.g. the last insert id), if any.
        row_count: Rows selected or affected.
        error: The error that made the call fail; ``None`` for a silent
            failure such as a DELETE that matched no rows.
    """

    ok: bool
    value: Any = None
    row_count: int = 0
    error: BrickDBError | None = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, value: Any = None, row_count: int = 0) -> ExecutionResult:
        return cls(ok=True, value=value, row_count=row_count)

    @classmethod
    def failure(cls, error: BrickDBError | None = None, row_count: int = 0) -> ExecutionResult:
        return cls(ok=False, row_count=row_count, error=error)
