"""brickdb compilation layer: filters and limits → parameterized SQL."""
from brickdb.compile.base import CompiledClause, CompiledSQL, LimitFragment, SQLCompiler
from brickdb.compile.builder import StatementBuilder
from brickdb.compile.firebird import FirebirdCompiler
from brickdb.compile.mysql import MySQLCompiler
from brickdb.compile.oracle import OracleCompiler
from brickdb.compile.postgres import PostgresCompiler
from brickdb.compile.row_count import build_count_query, has_limit_tokens
from brickdb.compile.sqlite import SQLiteCompiler
from brickdb.compile.where import WhereClauseBuilder

__all__ = [
    "CompiledClause",
    "CompiledSQL",
    "LimitFragment",
    "SQLCompiler",
    "StatementBuilder",
    "WhereClauseBuilder",
    "FirebirdCompiler",
    "MySQLCompiler",
    "OracleCompiler",
    "PostgresCompiler",
    "SQLiteCompiler",
    "build_count_query",
    "has_limit_tokens",
]
