"""Statement assembly: structured inputs → parameterized SQL.

``StatementBuilder`` is the top-level orchestrator.  It wires the
:class:`~brickdb.compile.where.WhereClauseBuilder` and the dialect's
:class:`~brickdb.compile.base.SQLCompiler` together and assembles complete
SELECT / INSERT / UPDATE / DELETE statements.  All dialect-specific
behaviour is delegated to the injected compiler.

SELECT layout
-------------
::

    SELECT [prefix-limit][DISTINCT ]<values> FROM <from>
        [ WHERE …][ GROUP BY …][ ORDER BY …][suffix-limit]

Where the limit goes depends on the fragment the compiler returns: Firebird's
``FIRST n SKIP o`` is a prefix, every other dialect's limit is a suffix.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

from brickdb.compile.base import CompiledClause, CompiledSQL, LimitFragment, SQLCompiler
from brickdb.compile.row_count import DEFAULT_COUNT_TARGET
from brickdb.compile.where import WhereClauseBuilder
from brickdb.errors import CompilationError
from brickdb.schema.filters import FilterInput
from brickdb.schema.limits import LimitSpec

_NON_WORD = re.compile(r"\W")
_SELECT_HEAD = re.compile(r"^\s*SELECT\s+", re.IGNORECASE)
_TRAILING_LIMIT = re.compile(
    r"\s+(?:LIMIT\s+\S.*|OFFSET\s+\d+\s+ROWS\s+FETCH\s.*|FETCH\s+NEXT\s.*)$",
    re.IGNORECASE | re.DOTALL,
)
_PREFIX_LIMIT = re.compile(
    r"^(\s*SELECT\s+)FIRST\s+\d+\s+(?:SKIP\s+\d+\s+)?", re.IGNORECASE
)

#: Values accepted for a SELECT list, ORDER BY or GROUP BY.
ColumnList = str | Sequence[str]


def join_columns(values: ColumnList) -> str:
    """Join a column list with ``", "``; strings are stripped and kept whole."""
    if isinstance(values, str):
        return values.strip()
    return ", ".join(values)


class StatementBuilder:
    """Compiles structured inputs to parameterized SQL for one dialect.

    Args:
        compiler: Dialect-specific compiler instance.
    """

    def __init__(self, compiler: SQLCompiler) -> None:
        self._compiler = compiler
        self._where = WhereClauseBuilder(compiler)

    @property
    def compiler(self) -> SQLCompiler:
        return self._compiler

    # ------------------------------------------------------------------
    # Clauses
    # ------------------------------------------------------------------

    def where(self, where: FilterInput) -> CompiledClause:
        """Compile a filter to a ``WHERE`` fragment."""
        return self._where.build(where)

    def limit(self, limit: Any) -> LimitFragment:
        """Compile ``limit`` to the dialect's fragment.

        Input that :meth:`LimitSpec.coerce` cannot read is passed through
        raw instead of raising.
        """
        try:
            spec = LimitSpec.coerce(limit)
        except ValueError:
            return self._compiler.raw_limit_clause(str(limit).strip())
        return self._compiler.limit_clause(spec)

    # ------------------------------------------------------------------
    # SELECT
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
    ) -> CompiledSQL:
        """Compile a SELECT statement.

        Args:
            from_: Table name, possibly with joins.
            values: Column list, as a string or a sequence.
            where: Filter, see :mod:`brickdb.schema.filters`.
            distinct: ``True`` for ``SELECT DISTINCT``.  A string both turns
                DISTINCT on and names the expression the row count should
                count (``SELECT DISTINCT <expr>`` in a derived table).
            order_by: ORDER BY columns.
            group_by: GROUP BY columns.
            limit: Anything :meth:`limit` accepts (``10``, ``"5, 20"``, …).

        Returns:
            :class:`CompiledSQL` with the statement and its params.
        """
        clause = self.where(where)
        fragment = self.limit(limit) if _has_limit(limit) else None

        parts: list[str] = ["SELECT "]
        if fragment is not None and fragment.is_prefix:
            parts.append(fragment.sql)
        if distinct:
            parts.append("DISTINCT ")
        parts.append(join_columns(values))
        parts.append(f" FROM {from_.strip()}")
        parts.append(clause.sql)
        if group_by is not None:
            parts.append(f" GROUP BY {join_columns(group_by)}")
        if order_by is not None:
            parts.append(f" ORDER BY {join_columns(order_by)}")
        if fragment is not None and not fragment.is_prefix:
            parts.append(fragment.sql)

        count_target = DEFAULT_COUNT_TARGET
        if isinstance(distinct, str) and distinct.strip():
            count_target = f"DISTINCT {distinct.strip()}"

        return CompiledSQL(
            sql="".join(parts),
            params=clause.params,
            dialect=self._compiler.dialect,
            expanding=clause.expanding,
            count_target=count_target,
        )

    def select_row(
        self,
        from_: str,
        values: ColumnList = "*",
        where: FilterInput = None,
    ) -> CompiledSQL:
        """Compile a SELECT capped to one row."""
        return self.select(from_, values, where, limit=1)

    def select_count(
        self,
        from_: str,
        values: Mapping[str, str] | str | None = None,
        where: FilterInput = None,
    ) -> CompiledSQL:
        """Compile a SELECT of ``COUNT`` expressions.

        Args:
            from_: Table name, possibly with joins.
            values: ``{expr: alias}`` (default ``{"*": "rows_count"}``) or a
                string such as ``"id AS ids, DISTINCT city AS cities"``.
            where: Filter.
        """
        if values is None:
            values = {"*": "rows_count"}
        if isinstance(values, str):
            counts = [
                "COUNT(" + part.replace(" AS ", ") AS ", 1)
                if " AS " in part else f"COUNT({part})"
                for part in values.split(", ")
            ]
        else:
            counts = [f"COUNT({expr}) AS {alias}" for expr, alias in values.items()]
        return self.select(from_, counts, where)

    # ------------------------------------------------------------------
    # INSERT / UPDATE / DELETE
    # ------------------------------------------------------------------

    def insert(self, table: str, values: Mapping[str, Any]) -> CompiledSQL:
        """Compile ``INSERT INTO table (cols) VALUES (:cols)``.

        Raises:
            CompilationError: If ``values`` is empty.
        """
        if not values:
            raise CompilationError(
                f'The values to insert into "{table}" cannot be empty.', clause="INSERT"
            )
        names = {column: _param_name(column) for column in values}
        placeholders = ", ".join(self._compiler.param_placeholder(n) for n in names.values())
        sql = (
            f"INSERT INTO {table.strip()} ({', '.join(names)}) VALUES ({placeholders})"
        )
        return CompiledSQL(
            sql=sql,
            params={names[column]: value for column, value in values.items()},
            dialect=self._compiler.dialect,
        )

    def update(
        self,
        table: str,
        values: Mapping[str, Any],
        where: FilterInput = None,
    ) -> CompiledSQL:
        """Compile ``UPDATE table SET col = :col, … [WHERE …]``.

        A SET placeholder that would take the name of a WHERE placeholder is
        renamed to ``set_<name>``.

        Raises:
            CompilationError: If ``values`` is empty.
        """
        if not values:
            raise CompilationError(
                f'The values to update in "{table}" cannot be empty.', clause="UPDATE"
            )
        clause = self.where(where)
        params: dict[str, Any] = dict(clause.params)
        assignments: list[str] = []
        for column, value in values.items():
            name = _param_name(column)
            while name in params:
                name = f"set_{name}"
            assignments.append(f"{column} = {self._compiler.param_placeholder(name)}")
            params[name] = value

        return CompiledSQL(
            sql=f"UPDATE {table.strip()} SET {', '.join(assignments)}{clause.sql}",
            params=params,
            dialect=self._compiler.dialect,
            expanding=clause.expanding,
        )

    def delete(self, from_: str, where: FilterInput = None) -> CompiledSQL:
        """Compile a DELETE; joined sources use the dialect's multi-table form."""
        clause = self.where(where)
        return CompiledSQL(
            sql=self._compiler.delete_statement(from_, clause.sql),
            params=clause.params,
            dialect=self._compiler.dialect,
            expanding=clause.expanding,
        )

    # ------------------------------------------------------------------
    # Raw SQL helpers
    # ------------------------------------------------------------------

    def apply_limit(self, sql: str, limit: Any) -> str:
        """Replace any row limit on a raw SELECT with ``limit``.

        An existing trailing ``LIMIT …`` / ``OFFSET … FETCH …`` or leading
        ``FIRST … [SKIP …]`` is removed before the dialect fragment is spliced
        in at its proper position.
        """
        sql = _TRAILING_LIMIT.sub("", sql.rstrip().rstrip(";"))
        sql = _PREFIX_LIMIT.sub(r"\1", sql)
        fragment = self.limit(limit)
        if fragment.is_prefix:
            head = _SELECT_HEAD.match(sql)
            if head is None:
                return sql
            return sql[: head.end()] + fragment.sql + sql[head.end():]
        return sql + fragment.sql


def _has_limit(limit: Any) -> bool:
    return limit is not None and limit is not False and limit != ""


def _param_name(column: str) -> str:
    return _NON_WORD.sub("_", column.strip())
