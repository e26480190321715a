"""Debug traces for executed statements.

When a :class:`~brickdb.db.database.Database` call is made with
``debug=True`` a :class:`DebugTrace` is recorded: the statement with its
values interpolated (for display only, never executed), the bound params,
timing, row count and any error.  Writes run in debug mode are rolled back,
so the trace is flagged as *simulated*.

The :class:`DebugRecorder` either emits traces straight to the
``brickdb.db.debug`` logger at DEBUG level (``mode="log"``) or keeps them for
later retrieval with :meth:`DebugRecorder.content` (``mode="register"``).
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any, Literal

logger = logging.getLogger(__name__)

DebugMode = Literal["log", "register"]

_WRITE_STATEMENT = re.compile(r"INSERT|UPDATE|DELETE", re.IGNORECASE)


def format_value(value: Any) -> str:
    """Render ``value`` as an SQL literal for display."""
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, datetime):
        return f"'{value:%Y-%m-%d %H:%M:%S}'"
    if isinstance(value, date):
        return f"'{value.isoformat()}'"
    if isinstance(value, (list, tuple, set, frozenset)):
        return "(" + ", ".join(format_value(v) for v in value) + ")"
    return "'" + str(value).replace("'", "''") + "'"


def interpolate_query(sql: str, params: dict[str, Any] | None) -> str:
    """Substitute ``:name`` placeholders in ``sql`` with their values.

    Longer names are replaced first so ``:a_id`` never clobbers ``:a_id_2``.
    The result is for logs and traces only.
    """
    if not params:
        return sql
    for key in sorted(params, key=len, reverse=True):
        literal = format_value(params[key])
        sql = re.sub(rf":{re.escape(key)}\b", lambda _m, lit=literal: lit, sql)
    return sql


@dataclass
class DebugTrace:
    """Everything known about one debugged call.

    Attributes:
        source: The ``Database`` method that ran (``"query"``, ``"execute"``…).
        sql: The interpolated statement.
        params: Bound values.
        elapsed: Execution time in seconds, if the statement ran.
        row_count: Row count reported for the call.
        error: Error description, if the call failed.
        simulated: True for writes rolled back because of debug mode.
    """

    source: str
    sql: str
    params: dict[str, Any] = field(default_factory=dict)
    elapsed: float | None = None
    row_count: int | None = None
    error: str | None = None
    simulated: bool = False

    def render(self) -> str:
        """Return a plain-text block describing the trace."""
        head = self.source.upper()
        lines: list[str] = []
        if self.simulated:
            lines.append("DEBUG mode enabled. The INSERT, UPDATE and DELETE queries are only simulated.")
        if self.error:
            lines += [f"--DEBUG {head} ERROR--", self.error]
        if self.elapsed is not None:
            lines += [f"--DEBUG {head} TIMER--", f"{self.elapsed:.6f} s"]
        lines += [f"--DEBUG {head} SQL--", self.sql]
        if self.params:
            lines += [f"--DEBUG {head} PARAMS--", repr(self.params)]
        if self.row_count is not None:
            lines += [f"--DEBUG {head} ROW COUNT--", str(self.row_count)]
        lines.append(f"--DEBUG {head} END--")
        return "\n".join(lines)


class DebugRecorder:
    """Collects or logs :class:`DebugTrace` objects.

    Args:
        mode: ``"log"`` to emit each trace immediately, ``"register"`` to keep
            them for :meth:`content`.
    """

    def __init__(self, mode: DebugMode = "log") -> None:
        self.mode: DebugMode = mode
        self._traces: list[DebugTrace] = []

    @property
    def traces(self) -> list[DebugTrace]:
        return list(self._traces)

    def record(
        self,
        source: str,
        sql: str,
        params: dict[str, Any] | None = None,
        *,
        elapsed: float | None = None,
        row_count: int | None = None,
        error: str | None = None,
        simulated: bool | None = None,
    ) -> DebugTrace:
        """Build a trace for one call and log or register it."""
        params = dict(params or {})
        if simulated is None:
            simulated = bool(_WRITE_STATEMENT.search(sql))
        trace = DebugTrace(
            source=source,
            sql=interpolate_query(sql, params),
            params=params,
            elapsed=elapsed,
            row_count=row_count,
            error=error,
            simulated=simulated,
        )
        if self.mode == "log":
            logger.debug("%s", trace.render())
        else:
            self._traces.append(trace)
        return trace

    def content(self, fmt: Literal["text", "json"] = "text") -> str:
        """Return the registered traces as text blocks or a JSON array."""
        if fmt == "json":
            return json.dumps([asdict(t) for t in self._traces], default=str)
        return "\n\n".join(t.render() for t in self._traces)

    def clear(self) -> None:
        self._traces.clear()
