"""Execution layer: compiled statements → SQLAlchemy connection.

``Database`` owns one SQLAlchemy :class:`~sqlalchemy.engine.Connection` and
exposes record-level helpers (``select``, ``insert``, ``update``, ``delete``)
on top of a :class:`~brickdb.compile.builder.StatementBuilder` for the
connection's dialect.

No driver exception escapes a public method.  Failures are logged, kept as
:attr:`Database.last_error`, and reported through a falsy
:class:`~brickdb.db.result.ExecutionResult` (or ``None`` / ``False`` for the
fetch-style helpers).

Reads leave the connection's autobegun transaction open so their rows can be
fetched lazily; the next call closes it before doing anything else.
"""
from __future__ import annotations

import logging
import re
import time
from typing import Any

from sqlalchemy import bindparam, create_engine, text
from sqlalchemy.engine import Connection, CursorResult, Engine, Result, Row
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import TextClause

from brickdb.compile.base import SQLCompiler
from brickdb.compile.builder import ColumnList, StatementBuilder
from brickdb.compile.registry import CompilerFactory
from brickdb.compile.row_count import DEFAULT_COUNT_TARGET, build_count_query
from brickdb.db.debug import DebugMode, DebugRecorder, DebugTrace, interpolate_query
from brickdb.db.result import ExecutionResult
from brickdb.db.transaction import TransactionGuard
from brickdb.errors import (
    BrickDBError,
    CompilationError,
    ConfigError,
    DatabaseConnectionError,
    GeneralError,
    StatementError,
)
from brickdb.schema.dialect import Dialect
from brickdb.schema.filters import FilterInput
from brickdb.schema.settings import ConnectionSettings
from brickdb.utils import convert_query_to_simple_array

logger = logging.getLogger(__name__)

_FIRST_KEYWORD = re.compile(r"^\s*\(?\s*(\w+)")


def _statement_kind(sql: str) -> str:
    match = _FIRST_KEYWORD.match(sql)
    return match.group(1).upper() if match else ""


def _to_error(exc: BaseException, sql: str | None) -> BrickDBError:
    """Map any exception raised while running ``sql`` to a brickdb error."""
    if isinstance(exc, BrickDBError):
        if sql and not exc.sql:
            exc.sql = sql
        return exc
    if isinstance(exc, SQLAlchemyError):
        orig = getattr(exc, "orig", None)
        message = str(orig) if orig is not None else str(exc)
        return StatementError(message, code=getattr(exc, "code", None), sql=sql)
    return GeneralError(str(exc), sql=sql)


class Database:
    """A connection plus the statement builder for its dialect.

    Args:
        settings: Where to connect.  Optional when ``engine`` is given.
        engine: An existing SQLAlchemy engine to connect through.
        debug_mode: ``"log"`` to log debug traces, ``"register"`` to keep
            them for :meth:`get_debug_content`.
        engine_options: Extra keyword arguments for
            :func:`sqlalchemy.create_engine`.

    Raises:
        ConfigError: If neither ``settings`` nor ``engine`` is given, or the
            engine's backend is not a supported dialect.

    A failed connection does not raise; :meth:`is_connected` reports it and
    :attr:`last_error` holds the :class:`DatabaseConnectionError`.
    """

    def __init__(
        self,
        settings: ConnectionSettings | None = None,
        *,
        engine: Engine | None = None,
        debug_mode: DebugMode = "log",
        engine_options: dict[str, Any] | None = None,
    ) -> None:
        if settings is None and engine is None:
            raise ConfigError("Either connection settings or an engine is required.")
        if settings is not None:
            dialect = settings.dialect
        else:
            try:
                dialect = Dialect.parse(engine.dialect.name)
            except ValueError as exc:
                raise ConfigError(str(exc), field="dialect") from exc

        self._settings = settings
        self._builder = StatementBuilder(CompilerFactory.create(dialect))
        self._debug = DebugRecorder(debug_mode)
        self._engine: Engine | None = engine
        self._owns_engine = engine is None
        self._connection: Connection | None = None
        self._guard: TransactionGuard | None = None
        self._result: Result[Any] | None = None
        self._row_count = 0
        self._last_insert_id: Any = None
        self._last_sql: str | None = None
        self._last_error: BrickDBError | None = None

        self._connect(engine_options or {})

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    def _connect(self, engine_options: dict[str, Any]) -> None:
        try:
            if self._engine is None:
                self._engine = create_engine(self._settings.to_url(), **engine_options)
            self._connection = self._engine.connect()
        except (SQLAlchemyError, ImportError) as exc:
            orig = getattr(exc, "orig", None)
            self._set_error(
                DatabaseConnectionError(str(orig) if orig is not None else str(exc)),
                "connect",
            )
            return

        self._guard = TransactionGuard(self._connection)
        logger.debug(
            "Connected to %s", self._engine.url.render_as_string(hide_password=True)
        )
        for sql in self.compiler.session_setup_sql():
            self.execute(sql)

    def is_connected(self) -> bool:
        return self._connection is not None and not self._connection.closed

    def close(self) -> None:
        """Roll back any open transaction and release the connection."""
        self._result = None
        if self._connection is not None:
            self._connection.close()
            self._connection = None
            self._guard = None
        if self._engine is not None and self._owns_engine:
            self._engine.dispose()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def dialect(self) -> Dialect:
        return self._builder.compiler.dialect

    @property
    def compiler(self) -> SQLCompiler:
        return self._builder.compiler

    @property
    def builder(self) -> StatementBuilder:
        return self._builder

    @property
    def connection(self) -> Connection | None:
        """The underlying SQLAlchemy connection, for anything not covered here."""
        return self._connection

    @property
    def row_count(self) -> int:
        """Rows selected by the last read or affected by the last write."""
        return self._row_count

    @property
    def last_insert_id(self) -> Any:
        """Id generated by the last successful INSERT, where the driver reports one."""
        return self._last_insert_id

    @property
    def last_sql(self) -> str | None:
        return self._last_sql

    @property
    def last_error(self) -> BrickDBError | None:
        return self._last_error

    @property
    def error(self) -> str:
        """The last error as a one-line description (``""`` if none)."""
        return self._last_error.describe() if self._last_error else ""

    def set_debug_mode(self, mode: DebugMode) -> None:
        self._debug.mode = mode

    def get_debug_content(self, fmt: str = "text") -> str:
        """Return the debug traces registered so far (``"text"`` or ``"json"``)."""
        return self._debug.content("json" if fmt == "json" else "text")

    @property
    def debug_traces(self) -> list[DebugTrace]:
        return self._debug.traces

    # ------------------------------------------------------------------
    # Raw statements
    # ------------------------------------------------------------------

    def execute(
        self,
        sql: str,
        params: dict[str, Any] | None = None,
        *,
        debug: bool = False,
        expanding: frozenset[str] = frozenset(),
    ) -> ExecutionResult:
        """Run a write statement under the transaction guard.

        Outside an explicit transaction each statement gets its own
        transaction, committed on success; with ``debug=True`` it is rolled
        back instead.  An INSERT that affects no row fails with a
        :class:`StatementError`; a DELETE that affects no row fails silently
        (falsy result, no error).

        Returns:
            The result; for INSERTs on dialects that report it, ``value`` is
            the last insert id.
        """
        params = dict(params or {})
        self._result = None
        self._row_count = 0
        self._last_sql = sql
        if not self._ensure_connected("execute", sql, params, debug):
            return ExecutionResult.failure(self._last_error)

        kind = _statement_kind(sql)
        value: Any = True
        matched = True
        elapsed: float | None = None
        try:
            with self._guard.statement_scope(sql, simulate=debug):
                start = time.perf_counter()
                result = self._run(sql, params, expanding)
                elapsed = time.perf_counter() - start
                if result.returns_rows:
                    frozen = result.freeze()
                    self._result = frozen()
                    self._row_count = len(frozen().all())
                else:
                    self._row_count = max(result.rowcount, 0)
                if kind == "INSERT":
                    if self._row_count < 1:
                        raise StatementError("Failed to insert record(s).")
                    value = self._insert_id(result)
                elif kind == "DELETE" and self._row_count < 1:
                    matched = False
        except Exception as exc:
            return self._fail("execute", exc, sql, params, debug=debug, elapsed=elapsed)

        if debug:
            self._debug.record(
                "execute", sql, params, elapsed=elapsed, row_count=self._row_count
            )
        if not matched:
            return ExecutionResult.failure(row_count=0)
        return ExecutionResult.success(value, self._row_count)

    def query(
        self,
        sql: str,
        params: dict[str, Any] | None = None,
        *,
        debug: bool = False,
        count_target: str = DEFAULT_COUNT_TARGET,
        expanding: frozenset[str] = frozenset(),
    ) -> ExecutionResult:
        """Run a SELECT and compute its row count.

        Rows are read afterwards with :meth:`fetch` / :meth:`fetch_all`.
        ``row_count`` comes from a rewritten ``COUNT`` query where that is
        safe, otherwise from running the statement and counting its rows.
        If the count fails, the call fails with its error.
        """
        params = dict(params or {})
        self._result = None
        self._row_count = 0
        self._last_sql = sql
        if not self._ensure_connected("query", sql, params, debug):
            return ExecutionResult.failure(self._last_error)

        elapsed: float | None = None
        try:
            self._guard.release_implicit()
            start = time.perf_counter()
            self._result = self._run(sql, params, expanding)
            elapsed = time.perf_counter() - start
            self._row_count = self._count_rows(sql, params, count_target, expanding)
        except Exception as exc:
            self._result = None
            self._row_count = 0
            return self._fail("query", exc, sql, params, debug=debug, elapsed=elapsed)

        if debug:
            self._debug.record(
                "query",
                sql,
                params,
                elapsed=elapsed,
                row_count=self._row_count,
                simulated=False,
            )
        return ExecutionResult.success(True, self._row_count)

    def query_row(
        self,
        sql: str,
        params: dict[str, Any] | None = None,
        *,
        debug: bool = False,
        as_dict: bool = False,
    ) -> Row[Any] | dict[str, Any] | None:
        """Run a SELECT and return its first row, or ``None``."""
        if not self.query(sql, params, debug=debug):
            return None
        return self.fetch(as_dict=as_dict)

    def query_value(
        self,
        sql: str,
        params: dict[str, Any] | None = None,
        *,
        debug: bool = False,
    ) -> Any:
        """Run a SELECT and return the first column of its first row, or ``None``."""
        row = self.query_row(sql, params, debug=debug)
        return row[0] if row is not None else None

    # ------------------------------------------------------------------
    # Record helpers
    # ------------------------------------------------------------------

    def select(
        self,
        from_: str,
        values: ColumnList = "*",
        where: FilterInput = None,
        *,
        distinct: bool | str = False,
        order_by: ColumnList | None = None,
        group_by: ColumnList | None = None,
        limit: Any = None,
        params: dict[str, Any] | None = None,
        debug: bool = False,
    ) -> ExecutionResult:
        """Compile a SELECT (see :meth:`StatementBuilder.select`) and run it.

        ``params`` binds placeholders written into raw predicates of ``where``.
        """
        try:
            compiled = self._builder.select(
                from_,
                values,
                where,
                distinct=distinct,
                order_by=order_by,
                group_by=group_by,
                limit=limit,
            )
        except CompilationError as exc:
            return self._fail("select", exc, None, {}, debug=debug)
        return self.query(
            compiled.sql,
            compiled.merge_runtime_params(params or {}),
            debug=debug,
            count_target=compiled.count_target,
            expanding=compiled.expanding,
        )

    def select_row(
        self,
        from_: str,
        values: ColumnList = "*",
        where: FilterInput = None,
        *,
        params: dict[str, Any] | None = None,
        debug: bool = False,
        as_dict: bool = False,
    ) -> Row[Any] | dict[str, Any] | None:
        """Return the first matching row, or ``None``."""
        if not self.select(from_, values, where, limit=1, params=params, debug=debug):
            return None
        return self.fetch(as_dict=as_dict)

    def select_value(
        self,
        from_: str,
        field: str,
        where: FilterInput = None,
        *,
        params: dict[str, Any] | None = None,
        debug: bool = False,
    ) -> Any:
        """Return ``field`` from the first matching row, or ``None``."""
        row = self.select_row(from_, field, where, params=params, debug=debug)
        return row[0] if row is not None else None

    def select_count(
        self,
        from_: str,
        values: dict[str, str] | str | None = None,
        where: FilterInput = None,
        *,
        debug: bool = False,
    ) -> Row[Any] | None:
        """Run ``COUNT`` expressions over ``from_``; one row aliased per expression.

        With no ``values`` the row has a single ``rows_count`` column.
        """
        compiled = self._builder.select_count(from_, values, where)
        if not self.query(
            compiled.sql, compiled.params, debug=debug, expanding=compiled.expanding
        ):
            return None
        return self.fetch()

    def insert(
        self, table: str, values: dict[str, Any], *, debug: bool = False
    ) -> ExecutionResult:
        """Insert one record; ``value`` of the result is the new id where known."""
        try:
            compiled = self._builder.insert(table, values)
        except CompilationError as exc:
            return self._fail("insert", exc, None, {}, debug=debug)
        return self.execute(compiled.sql, compiled.params, debug=debug)

    def update(
        self,
        table: str,
        values: dict[str, Any],
        where: FilterInput = None,
        *,
        params: dict[str, Any] | None = None,
        debug: bool = False,
    ) -> ExecutionResult:
        """Update the records matching ``where``."""
        try:
            compiled = self._builder.update(table, values, where)
        except CompilationError as exc:
            return self._fail("update", exc, None, {}, debug=debug)
        return self.execute(
            compiled.sql,
            compiled.merge_runtime_params(params or {}),
            debug=debug,
            expanding=compiled.expanding,
        )

    def delete(
        self,
        from_: str,
        where: FilterInput = None,
        *,
        params: dict[str, Any] | None = None,
        debug: bool = False,
    ) -> ExecutionResult:
        """Delete the records matching ``where``; falsy if none matched."""
        compiled = self._builder.delete(from_, where)
        return self.execute(
            compiled.sql,
            compiled.merge_runtime_params(params or {}),
            debug=debug,
            expanding=compiled.expanding,
        )

    def get_maximum_value(self, table: str, field: str, *, debug: bool = False) -> Any:
        """Return the highest value of ``field`` in ``table``, or ``1`` if it is empty."""
        if not self.select(table, field, order_by=f"{field} DESC", limit=1, debug=debug):
            return 1
        row = self.fetch()
        return row[0] if row is not None and row[0] is not None else 1

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def fetch(self, *, as_dict: bool = False) -> Row[Any] | dict[str, Any] | None:
        """Return the next row of the last read, or ``None`` when exhausted."""
        if self._result is None:
            return None
        try:
            row = self._result.fetchone()
        except SQLAlchemyError as exc:
            self._set_error(_to_error(exc, self._last_sql), "fetch")
            return None
        if row is None:
            return None
        return dict(row._mapping) if as_dict else row

    def fetch_all(self, *, as_dict: bool = False) -> list[Any]:
        """Return the remaining rows of the last read."""
        if self._result is None:
            return []
        try:
            rows = self._result.fetchall()
        except SQLAlchemyError as exc:
            self._set_error(_to_error(exc, self._last_sql), "fetch_all")
            return []
        if as_dict:
            return [dict(row._mapping) for row in rows]
        return list(rows)

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def get_tables(self, *, debug: bool = False) -> list[str]:
        """Return the names of the base tables (views excluded)."""
        if not self.query(self.compiler.list_tables_sql(), debug=debug):
            return []
        return [row[0] for row in self.fetch_all()]

    def get_columns(self, table: str, *, debug: bool = False) -> list[dict[str, Any]]:
        """Return the catalogue rows describing the columns of ``table``."""
        sql, params = self.compiler.columns_sql(table)
        if not self.query(sql, params, debug=debug):
            return []
        return self.fetch_all(as_dict=True)

    def get_column_names(self, table: str, *, debug: bool = False) -> list[str]:
        """Return the column names of ``table`` in catalogue order."""
        columns = self.get_columns(table, debug=debug)
        if not columns:
            return []
        wanted = self.compiler.column_name_field.lower()
        field = next((key for key in columns[0] if key.lower() == wanted), wanted)
        return [str(name).strip() for name in convert_query_to_simple_array(columns, field)]

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def in_transaction(self) -> bool:
        return self._guard is not None and self._guard.active

    def transaction_begin(self) -> bool:
        """Open an explicit transaction; beginning twice is a successful no-op."""
        return self._transaction_call("transaction_begin", "begin")

    def transaction_commit(self) -> bool:
        return self._transaction_call("transaction_commit", "commit")

    def transaction_rollback(self) -> bool:
        return self._transaction_call("transaction_rollback", "rollback")

    def _transaction_call(self, source: str, action: str) -> bool:
        if not self._ensure_connected(source, None, {}, False):
            return False
        self._result = None
        try:
            getattr(self._guard, action)()
        except Exception as exc:
            self._set_error(_to_error(exc, None), source)
            return False
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _prepare(self, sql: str, params: dict[str, Any], expanding: frozenset[str]) -> TextClause:
        statement = text(sql)
        names = set(expanding) | {
            name for name, value in params.items() if isinstance(value, (list, tuple))
        }
        bound = [
            bindparam(name, expanding=True)
            for name in sorted(names)
            if re.search(rf":{re.escape(name)}\b", sql)
        ]
        if bound:
            statement = statement.bindparams(*bound)
        return statement

    def _run(
        self, sql: str, params: dict[str, Any], expanding: frozenset[str] = frozenset()
    ) -> CursorResult[Any]:
        return self._connection.execute(self._prepare(sql, params, expanding), params)

    def _count_rows(
        self,
        sql: str,
        params: dict[str, Any],
        count_target: str = DEFAULT_COUNT_TARGET,
        expanding: frozenset[str] = frozenset(),
    ) -> int:
        """Count the rows ``sql`` yields without consuming the caller's result."""
        count_sql = build_count_query(sql, count_target)
        if count_sql is None:
            return len(self._run(sql, params, expanding).all())
        return int(self._run(count_sql, params, expanding).scalar() or 0)

    def _insert_id(self, result: CursorResult[Any]) -> Any:
        if not self.compiler.supports_last_insert_id:
            return True
        try:
            self._last_insert_id = result.lastrowid
        except SQLAlchemyError:
            logger.debug("Driver did not report a last insert id.")
            return True
        return self._last_insert_id

    def _ensure_connected(
        self, source: str, sql: str | None, params: dict[str, Any], debug: bool
    ) -> bool:
        if self.is_connected():
            return True
        self._fail(source, DatabaseConnectionError("Not connected."), sql, params, debug=debug)
        return False

    def _fail(
        self,
        source: str,
        exc: BaseException,
        sql: str | None,
        params: dict[str, Any],
        *,
        debug: bool,
        elapsed: float | None = None,
    ) -> ExecutionResult:
        shown = interpolate_query(sql, params) if sql else None
        error = _to_error(exc, shown)
        self._set_error(error, source)
        if debug and sql:
            self._debug.record(
                source, sql, params, elapsed=elapsed, error=error.describe(source)
            )
        return ExecutionResult.failure(error)

    def _set_error(self, error: BrickDBError, source: str) -> None:
        self._last_error = error
        logger.error("%s", error.describe(source))
