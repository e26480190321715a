"""Firebird dialect compiler."""

from __future__ import annotations

from typing import Any

from brickdb.compile.base import ClausePosition, LimitFragment, SQLCompiler
from brickdb.schema.dialect import Dialect
from brickdb.schema.limits import LimitSpec

_COLUMNS_SQL = """\
SELECT
    TRIM(R.RDB$FIELD_NAME) AS FIELD_NAME,
    TRIM(R.RDB$DEFAULT_VALUE) AS DEFAULT_VALUE,
    TRIM(R.RDB$NULL_FLAG) AS NULL_FLAG,
    TRIM(F.RDB$FIELD_LENGTH / RCS.RDB$BYTES_PER_CHARACTER) AS FIELD_LENGTH,
    TRIM(F.RDB$FIELD_PRECISION) AS FIELD_PRECISION,
    TRIM(F.RDB$FIELD_SCALE) AS FIELD_SCALE,
    TRIM(CASE F.RDB$FIELD_TYPE
        WHEN 7 THEN 'SMALLINT'
        WHEN 8 THEN 'INTEGER'
        WHEN 10 THEN 'FLOAT'
        WHEN 12 THEN 'DATE'
        WHEN 13 THEN 'TIME'
        WHEN 14 THEN 'CHAR'
        WHEN 16 THEN 'BIGINT'
        WHEN 27 THEN 'DOUBLE'
        WHEN 35 THEN 'TIMESTAMP'
        WHEN 37 THEN 'VARCHAR'
        WHEN 261 THEN 'BLOB'
        ELSE 'UNKNOWN'
    END) AS FIELD_TYPE,
    TRIM(F.RDB$FIELD_SUB_TYPE) AS FIELD_SUB_TYPE
FROM
    RDB$FIELDS F
    LEFT JOIN RDB$RELATION_FIELDS R ON R.RDB$FIELD_SOURCE = F.RDB$FIELD_NAME
    LEFT JOIN RDB$CHARACTER_SETS RCS ON RCS.RDB$CHARACTER_SET_ID = F.RDB$CHARACTER_SET_ID
WHERE R.RDB$RELATION_NAME = :table_name
ORDER BY R.RDB$FIELD_POSITION"""


class FirebirdCompiler(SQLCompiler):
    """Compiles statements for Firebird.

    Row limiting is a *prefix*: ``SELECT FIRST n [SKIP o] …``, so the limit
    fragment is marked :attr:`ClausePosition.PREFIX` and the statement
    builder splices it right after ``SELECT``.  Firebird stores unquoted
    identifiers upper-cased, hence the upper-cased catalogue lookups.
    """

    dialect = Dialect.FIREBIRD
    column_name_field = "field_name"

    def limit_clause(self, limit: LimitSpec) -> LimitFragment:
        if limit.is_pair:
            return LimitFragment(
                f"FIRST {limit.count} SKIP {limit.offset} ", ClausePosition.PREFIX
            )
        return LimitFragment(f"FIRST {limit.count} ", ClausePosition.PREFIX)

    def raw_limit_clause(self, raw: str) -> LimitFragment:
        return LimitFragment(f"FIRST {raw} ", ClausePosition.PREFIX)

    def delete_statement(self, from_: str, where_sql: str) -> str:
        match = self.match_joined_from(from_)
        if match is None:
            return f"DELETE FROM {from_.strip()}{where_sql}"
        return self.exists_delete(f"DELETE FROM {match.group(1)}", match, where_sql)

    def list_tables_sql(self) -> str:
        return (
            "SELECT TRIM(RDB$RELATION_NAME) FROM RDB$RELATIONS "
            "WHERE RDB$VIEW_BLR IS NULL "
            "AND (RDB$SYSTEM_FLAG IS NULL OR RDB$SYSTEM_FLAG = 0)"
        )

    def columns_sql(self, table: str) -> tuple[str, dict[str, Any]]:
        return _COLUMNS_SQL, {"table_name": table.strip().upper()}
