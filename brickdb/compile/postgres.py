"""PostgreSQL dialect compiler."""

from __future__ import annotations

from typing import Any

from brickdb.compile.base import SQLCompiler
from brickdb.schema.dialect import Dialect


class PostgresCompiler(SQLCompiler):
    """Compiles statements for PostgreSQL.

    LIMIT rendering is shared with MySQL.  Joined deletes use
    ``DELETE FROM a USING b WHERE <join condition> …`` and introspection goes
    through ``information_schema``.
    """

    dialect = Dialect.POSTGRES
    column_name_field = "column_name"

    def delete_statement(self, from_: str, where_sql: str) -> str:
        match = self.match_joined_from(from_)
        if match is None:
            return f"DELETE FROM {from_.strip()}{where_sql}"
        table, joined, left_col, right_col = match.groups()
        sql = f"DELETE FROM {table} USING {joined} WHERE {left_col} = {right_col}"
        if where_sql:
            sql += " AND " + where_sql.strip()[len("WHERE "):]
        return sql

    def list_tables_sql(self) -> str:
        return (
            "SELECT table_name FROM information_schema.tables "
            "WHERE table_type = 'BASE TABLE' "
            "AND table_schema NOT IN ('pg_catalog', 'information_schema')"
        )

    def columns_sql(self, table: str) -> tuple[str, dict[str, Any]]:
        return (
            "SELECT * FROM information_schema.columns "
            "WHERE table_name = :table_name ORDER BY ordinal_position",
            {"table_name": table},
        )
