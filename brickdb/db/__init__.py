"""brickdb execution layer: connection, transactions and debug traces."""
from brickdb.db.database import Database
from brickdb.db.debug import DebugRecorder, DebugTrace, interpolate_query
from brickdb.db.result import ExecutionResult
from brickdb.db.transaction import TransactionGuard, is_auto_commit_sql

__all__ = [
    "Database",
    "DebugRecorder",
    "DebugTrace",
    "ExecutionResult",
    "TransactionGuard",
    "interpolate_query",
    "is_auto_commit_sql",
]
