"""Compiler abstractions: compiled fragments and the SQLCompiler ABC.

The Template Method pattern (GoF) is used:

- ``SQLCompiler`` defines the default (MySQL-flavoured) rendering of each
  dialect-sensitive piece: LIMIT fragments, joined DELETE statements and the
  catalogue queries used for introspection.
- ``PostgresCompiler``, ``OracleCompiler``, ``FirebirdCompiler`` and
  ``SQLiteCompiler`` override only the steps their backend does differently.

Every dialect uses ``:name`` placeholders: statements are executed through
SQLAlchemy's :func:`~sqlalchemy.text`, which translates them to the DB-API
driver's own paramstyle.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from brickdb.schema.dialect import Dialect
from brickdb.schema.limits import LimitSpec

# e.g. 'film_actor LEFT JOIN film ON film_actor.film_id = film.film_id'
_JOINED_FROM = re.compile(
    r"([a-z_-]+) (?:INNER|LEFT|RIGHT) JOIN ([a-z_-]+) ON ([a-z_.-]+)\s*=\s*([a-z_.-]+)",
    re.IGNORECASE,
)


class ClausePosition(str, Enum):
    """Where a LIMIT fragment is spliced into a SELECT statement."""

    PREFIX = "prefix"  # right after ``SELECT``
    SUFFIX = "suffix"  # at the very end


@dataclass(frozen=True)
class LimitFragment:
    """A compiled LIMIT fragment and where it belongs.

    Attributes:
        sql: The fragment, including its own leading/trailing space.
        position: :attr:`ClausePosition.PREFIX` or :attr:`ClausePosition.SUFFIX`.
    """

    sql: str
    position: ClausePosition = ClausePosition.SUFFIX

    @property
    def is_prefix(self) -> bool:
        return self.position is ClausePosition.PREFIX


@dataclass
class CompiledClause:
    """A compiled WHERE fragment and its bound values.

    Attributes:
        sql: ``" WHERE …"`` or the empty string.
        params: Placeholder name → value.
        expanding: Placeholder names bound to a list (``IN`` operands).
    """

    sql: str = ""
    params: dict[str, Any] = field(default_factory=dict)
    expanding: frozenset[str] = frozenset()

    def __bool__(self) -> bool:
        return bool(self.sql)


@dataclass
class CompiledSQL:
    """The output of a statement build.

    Attributes:
        sql: The compiled SQL string with ``:name`` placeholders.
        params: Values for the placeholders.
        dialect: The target dialect.
        expanding: Placeholder names that must be bound as expanding lists.
        count_target: Expression used by the row-count rewrite
            (``"*"`` or ``"DISTINCT <expr>"``).
    """

    sql: str
    params: dict[str, Any]
    dialect: Dialect
    expanding: frozenset[str] = frozenset()
    count_target: str = "*"

    def merge_runtime_params(self, runtime: dict[str, Any]) -> dict[str, Any]:
        """Return a merged param dict ready for query execution.

        Args:
            runtime: Extra parameter values supplied by the caller for
                placeholders written into raw predicates.

        Returns:
            A single dict combining compiled params and runtime params.
        """
        return {**self.params, **runtime}


class SQLCompiler:
    """Base class for dialect-specific SQL compilers.

    The defaults implement MySQL behaviour; subclasses override the pieces
    their backend renders differently.  The ``StatementBuilder`` uses this
    interface via the Strategy / Template Method patterns.
    """

    #: The dialect this compiler targets.
    dialect: Dialect = Dialect.MYSQL

    #: Whether the driver reports a reliable last-insert id for text INSERTs.
    supports_last_insert_id: bool = False

    #: Key of the column-name field in :meth:`columns_sql` result rows.
    column_name_field: str = "Field"

    # ------------------------------------------------------------------
    # Placeholders
    # ------------------------------------------------------------------

    def param_placeholder(self, name: str) -> str:
        """Return the SQL placeholder string for a named parameter."""
        return f":{name}"

    # ------------------------------------------------------------------
    # LIMIT
    # ------------------------------------------------------------------

    def limit_clause(self, limit: LimitSpec) -> LimitFragment:
        """Return the dialect's LIMIT fragment for ``limit``."""
        if limit.is_pair:
            return LimitFragment(f" LIMIT {limit.count} OFFSET {limit.offset}")
        return LimitFragment(f" LIMIT {limit.count}")

    def raw_limit_clause(self, raw: str) -> LimitFragment:
        """Return a LIMIT fragment for input that is not a parseable limit.

        The text is passed through in the single-count form; the result may
        not be valid SQL.
        """
        return LimitFragment(f" LIMIT {raw}")

    # ------------------------------------------------------------------
    # DELETE
    # ------------------------------------------------------------------

    def delete_statement(self, from_: str, where_sql: str) -> str:
        """Return a DELETE statement for ``from_`` (optionally a joined source).

        Args:
            from_: Table name, or ``"a LEFT JOIN b ON b.x = a.y"``.
            where_sql: Compiled WHERE fragment (``" WHERE …"`` or ``""``).
        """
        table_src = ""
        match = _JOINED_FROM.search(from_)
        if match:
            table_src = f"{match.group(1)} "
        return f"DELETE {table_src}FROM {from_.strip()}{where_sql}"

    @staticmethod
    def match_joined_from(from_: str) -> re.Match[str] | None:
        """Match ``a <JOIN> b ON x = y``; groups are ``a, b, x, y``."""
        return _JOINED_FROM.search(from_)

    @staticmethod
    def exists_delete(head: str, match: re.Match[str], where_sql: str) -> str:
        """Render a joined delete as ``<head> WHERE EXISTS (SELECT * FROM b …)``."""
        _, joined, left_col, right_col = match.groups()
        sql = f"{head} WHERE EXISTS (SELECT * FROM {joined} WHERE {right_col} = {left_col}"
        if where_sql:
            sql += " AND " + where_sql.strip()[len("WHERE "):]
        return sql + ")"

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def list_tables_sql(self) -> str:
        """Return a statement whose first column lists the base tables."""
        return "SHOW FULL TABLES WHERE Table_Type != 'VIEW'"

    def columns_sql(self, table: str) -> tuple[str, dict[str, Any]]:
        """Return ``(sql, params)`` describing the columns of ``table``."""
        return f"SHOW COLUMNS FROM {table.strip()}", {}

    def session_setup_sql(self) -> list[str]:
        """Statements to run once right after connecting."""
        return []
