"""Oracle dialect compiler."""

from __future__ import annotations

from typing import Any

from brickdb.compile.base import LimitFragment, SQLCompiler
from brickdb.schema.dialect import Dialect
from brickdb.schema.limits import LimitSpec


class OracleCompiler(SQLCompiler):
    """Compiles statements for Oracle (12c+ row-limiting clause).

    ``LIMIT`` does not exist; rows are capped with
    ``[OFFSET o ROWS] FETCH NEXT n ROWS ONLY`` at the end of the statement.
    Sessions are switched to ISO dates right after connecting so DATE columns
    compare and render consistently across backends.
    """

    dialect = Dialect.ORACLE
    column_name_field = "column_name"

    def limit_clause(self, limit: LimitSpec) -> LimitFragment:
        if limit.is_pair:
            return LimitFragment(
                f" OFFSET {limit.offset} ROWS FETCH NEXT {limit.count} ROWS ONLY"
            )
        return LimitFragment(f" FETCH NEXT {limit.count} ROWS ONLY")

    def raw_limit_clause(self, raw: str) -> LimitFragment:
        return LimitFragment(f" FETCH NEXT {raw} ROWS ONLY")

    def delete_statement(self, from_: str, where_sql: str) -> str:
        match = self.match_joined_from(from_)
        if match is None:
            return f"DELETE FROM {from_.strip()}{where_sql}"
        return self.exists_delete(f"DELETE {match.group(1)}", match, where_sql)

    def list_tables_sql(self) -> str:
        return "SELECT table_name FROM user_tables ORDER BY table_name"

    def columns_sql(self, table: str) -> tuple[str, dict[str, Any]]:
        return (
            "SELECT * FROM user_tab_columns WHERE table_name = :table_name",
            {"table_name": table},
        )

    def session_setup_sql(self) -> list[str]:
        return ["ALTER SESSION SET NLS_DATE_FORMAT = 'YYYY-MM-DD'"]
