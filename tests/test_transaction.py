"""Unit tests for the transaction guard, against a raw SQLite connection."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Connection

from brickdb.db.transaction import TransactionGuard, is_auto_commit_sql
from brickdb.errors import StatementError


@pytest.fixture
def conn() -> Iterator[Connection]:
    engine = create_engine("sqlite://")
    with engine.connect() as connection:
        connection.execute(text("CREATE TABLE t (id INTEGER PRIMARY KEY, v TEXT)"))
        connection.commit()
        yield connection
    engine.dispose()


def _count(conn: Connection) -> int:
    return conn.execute(text("SELECT COUNT(*) FROM t")).scalar()


@pytest.mark.parametrize(
    "sql",
    [
        "CREATE TABLE x (id INT)",
        "create index ix on t (v)",
        "ALTER TABLE t ADD COLUMN w TEXT",
        "DROP VIEW v",
        "TRUNCATE TABLE t",
        "LOCK TABLES t WRITE",
        "RENAME TABLE a TO b",
        "INSTALL PLUGIN p SONAME 'p.so'",
        "UNINSTALL PLUGIN p",
    ],
)
def test_auto_commit_statements(sql):
    assert is_auto_commit_sql(sql)


@pytest.mark.parametrize(
    "sql",
    [
        "INSERT INTO t (v) VALUES ('x')",
        "UPDATE t SET v = 'y'",
        "DELETE FROM t",
        "SELECT * FROM t",
        "ALTER SESSION SET NLS_DATE_FORMAT = 'YYYY-MM-DD'",
    ],
)
def test_regular_statements(sql):
    assert not is_auto_commit_sql(sql)


def test_begin_commit(conn: Connection):
    guard = TransactionGuard(conn)
    guard.begin()
    assert guard.active
    conn.execute(text("INSERT INTO t (v) VALUES ('a')"))
    guard.commit()
    assert not guard.active
    assert _count(conn) == 1


def test_begin_rollback(conn: Connection):
    guard = TransactionGuard(conn)
    guard.begin()
    conn.execute(text("INSERT INTO t (v) VALUES ('a')"))
    guard.rollback()
    assert not guard.active
    assert _count(conn) == 0


def test_nested_begin_is_noop(conn: Connection):
    guard = TransactionGuard(conn)
    guard.begin()
    guard.begin()
    conn.execute(text("INSERT INTO t (v) VALUES ('a')"))
    guard.rollback()
    assert not guard.active
    assert _count(conn) == 0


def test_commit_without_transaction_raises(conn: Connection):
    guard = TransactionGuard(conn)
    with pytest.raises(StatementError, match="no active transaction"):
        guard.commit()
    with pytest.raises(StatementError):
        guard.rollback()


def test_begin_closes_leftover_autobegun_transaction(conn: Connection):
    guard = TransactionGuard(conn)
    _count(conn)
    assert conn.in_transaction()
    guard.begin()
    assert guard.active


def test_statement_scope_commits(conn: Connection):
    guard = TransactionGuard(conn)
    with guard.statement_scope("INSERT INTO t (v) VALUES ('a')") as own:
        assert own
        conn.execute(text("INSERT INTO t (v) VALUES ('a')"))
    conn.rollback()
    assert _count(conn) == 1


def test_statement_scope_simulate_rolls_back(conn: Connection):
    guard = TransactionGuard(conn)
    with guard.statement_scope("INSERT INTO t (v) VALUES ('a')", simulate=True):
        conn.execute(text("INSERT INTO t (v) VALUES ('a')"))
    assert _count(conn) == 0


def test_statement_scope_rolls_back_on_error(conn: Connection):
    guard = TransactionGuard(conn)
    with pytest.raises(RuntimeError):
        with guard.statement_scope("INSERT INTO t (v) VALUES ('a')"):
            conn.execute(text("INSERT INTO t (v) VALUES ('a')"))
            raise RuntimeError("boom")
    assert _count(conn) == 0


def test_statement_scope_inside_explicit_transaction_defers(conn: Connection):
    guard = TransactionGuard(conn)
    guard.begin()
    with guard.statement_scope("INSERT INTO t (v) VALUES ('a')") as own:
        assert not own
        conn.execute(text("INSERT INTO t (v) VALUES ('a')"))
    assert guard.active
    guard.rollback()
    assert _count(conn) == 0


def test_statement_scope_does_not_wrap_ddl(conn: Connection):
    guard = TransactionGuard(conn)
    sql = "CREATE TABLE u (id INTEGER)"
    with guard.statement_scope(sql) as own:
        assert not own
        conn.execute(text(sql))
    assert not conn.in_transaction()
    conn.execute(text("INSERT INTO u (id) VALUES (1)"))
