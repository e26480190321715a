"""SQLite dialect compiler."""
from __future__ import annotations

from typing import Any

from brickdb.compile.base import SQLCompiler
from brickdb.schema.dialect import Dialect


class SQLiteCompiler(SQLCompiler):
    """Compiles statements for SQLite.

    LIMIT rendering is shared with MySQL.  SQLite has no multi-table DELETE,
    so joined deletes are rewritten to ``DELETE FROM a WHERE EXISTS (…)``.
    The stdlib ``sqlite3`` driver reports ``lastrowid`` after an INSERT.
    """

    dialect = Dialect.SQLITE
    supports_last_insert_id = True
    column_name_field = "name"

    def delete_statement(self, from_: str, where_sql: str) -> str:
        match = self.match_joined_from(from_)
        if match is None:
            return f"DELETE FROM {from_.strip()}{where_sql}"
        return self.exists_delete(f"DELETE FROM {match.group(1)}", match, where_sql)

    def list_tables_sql(self) -> str:
        return (
            "SELECT name FROM sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
        )

    def columns_sql(self, table: str) -> tuple[str, dict[str, Any]]:
        return "SELECT * FROM pragma_table_info(:table_name)", {"table_name": table.strip()}
