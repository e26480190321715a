"""brickdb – dialect-aware statement compilation and execution.

Build statements from structured filters and limits; run them through one
SQLAlchemy connection with a predictable transaction policy.

Public API
----------
``connect``
    Open a :class:`Database` from explicit settings or ``BRICKDB_*``
    environment variables.

``compile_select``
    Compile a SELECT for a dialect without touching a database.

Re-exported types
-----------------
``Database``, ``StatementBuilder``, ``CompiledSQL``, ``ConnectionSettings``,
``Dialect``, ``LimitSpec``, the pagination and rendering helpers, and all
error classes.

Extensibility
-------------
Another backend can be supported by registering a compiler::

    from brickdb.compile.registry import CompilerFactory

    @CompilerFactory.register("mysql")
    class MariaDBCompiler(MySQLCompiler):
        ...

``Database`` and ``compile_select`` then pick it up for that dialect.
"""

from __future__ import annotations

import logging
from typing import Any

from brickdb.compile.base import CompiledSQL, SQLCompiler
from brickdb.compile.builder import ColumnList, StatementBuilder
from brickdb.compile.firebird import FirebirdCompiler
from brickdb.compile.mysql import MySQLCompiler
from brickdb.compile.oracle import OracleCompiler
from brickdb.compile.postgres import PostgresCompiler
from brickdb.compile.registry import CompilerFactory
from brickdb.compile.sqlite import SQLiteCompiler
from brickdb.db.database import Database
from brickdb.db.result import ExecutionResult
from brickdb.errors import (
    BrickDBError,
    CompilationError,
    ConfigError,
    DatabaseConnectionError,
    GeneralError,
    StatementError,
)
from brickdb.pagination import (
    Page,
    PaginationOptions,
    Paginator,
    QuerySource,
    SelectSource,
    render_pagination,
)
from brickdb.render import records_to_html
from brickdb.schema.dialect import Dialect
from brickdb.schema.filters import FilterInput, KeyedPredicate, RawPredicate
from brickdb.schema.limits import LimitSpec
from brickdb.schema.settings import ConnectionSettings
from brickdb.utils import convert_query_to_simple_array, empty_to_null

logging.getLogger(__name__).addHandler(logging.NullHandler())

# ---------------------------------------------------------------------------
# Register built-in compilers with CompilerFactory
# ---------------------------------------------------------------------------

CompilerFactory.register_class(Dialect.MYSQL, MySQLCompiler)
CompilerFactory.register_class(Dialect.POSTGRES, PostgresCompiler)
CompilerFactory.register_class(Dialect.ORACLE, OracleCompiler)
CompilerFactory.register_class(Dialect.FIREBIRD, FirebirdCompiler)
CompilerFactory.register_class(Dialect.SQLITE, SQLiteCompiler)

__all__ = [
    # Entry points
    "connect",
    "compile_select",
    # Execution
    "Database",
    "ExecutionResult",
    # Inputs
    "ConnectionSettings",
    "Dialect",
    "FilterInput",
    "KeyedPredicate",
    "LimitSpec",
    "RawPredicate",
    # Compilation
    "CompiledSQL",
    "CompilerFactory",
    "SQLCompiler",
    "StatementBuilder",
    "FirebirdCompiler",
    "MySQLCompiler",
    "OracleCompiler",
    "PostgresCompiler",
    "SQLiteCompiler",
    # Pagination and rendering
    "Page",
    "PaginationOptions",
    "Paginator",
    "QuerySource",
    "SelectSource",
    "render_pagination",
    "records_to_html",
    # Utilities
    "convert_query_to_simple_array",
    "empty_to_null",
    # Errors
    "BrickDBError",
    "CompilationError",
    "ConfigError",
    "DatabaseConnectionError",
    "GeneralError",
    "StatementError",
]


def connect(settings: ConnectionSettings | None = None, **options: Any) -> Database:
    """Open a :class:`Database`.

    Args:
        settings: Connection settings; read from ``BRICKDB_*`` environment
            variables when omitted.
        **options: Passed on to :class:`Database` (``debug_mode``,
            ``engine_options``).

    Raises:
        ConfigError: If no settings are given and the environment does not
            describe a connection.
    """
    if settings is None:
        settings = ConnectionSettings.from_env()
    return Database(settings, **options)


def compile_select(
    dialect: Dialect | str,
    from_: str,
    values: ColumnList = "*",
    where: FilterInput = None,
    **extras: Any,
) -> CompiledSQL:
    """Compile a SELECT for ``dialect``.

    ``extras`` are the keyword options of :meth:`StatementBuilder.select`
    (``distinct``, ``order_by``, ``group_by``, ``limit``)::

        compiled = brickdb.compile_select(
            "firebird", "customers", where={"country": "Indonesia"}, limit=(20, 10)
        )
        # SELECT FIRST 10 SKIP 20 * FROM customers WHERE country = :a_country

    Raises:
        CompilationError: If no compiler is registered for ``dialect``.
    """
    compiler = CompilerFactory.create(dialect)
    return StatementBuilder(compiler).select(from_, values, where, **extras)
