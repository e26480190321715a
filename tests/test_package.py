"""Tests for the package-level entry points and the error hierarchy."""

from __future__ import annotations

import pytest

import brickdb
from brickdb.errors import (
    BrickDBError,
    CompilationError,
    ConfigError,
    DatabaseConnectionError,
    GeneralError,
    StatementError,
)


def test_compile_select_firebird():
    compiled = brickdb.compile_select(
        "firebird", "customers", where={"country": "Indonesia"}, limit=(20, 10)
    )
    assert compiled.sql == "SELECT FIRST 10 SKIP 20 * FROM customers WHERE country = :a_country"
    assert compiled.params == {"a_country": "Indonesia"}


def test_compile_select_unknown_dialect():
    with pytest.raises(CompilationError):
        brickdb.compile_select("db2", "customers")


def test_merge_runtime_params():
    compiled = brickdb.compile_select("postgres", "orders", where=["customer_id = :cid", ("amount >", 5)])
    assert compiled.merge_runtime_params({"cid": 7}) == {"a_amount": 5, "cid": 7}


def test_connect_from_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("BRICKDB_DIALECT", "sqlite")
    with brickdb.connect() as db:
        assert db.is_connected()
        assert db.query_value("SELECT 2 + 3") == 5


def test_connect_without_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("BRICKDB_DIALECT", raising=False)
    with pytest.raises(ConfigError):
        brickdb.connect()


@pytest.mark.parametrize(
    "cls,label",
    [
        (DatabaseConnectionError, "Database Connection Error"),
        (StatementError, "Database Error"),
        (GeneralError, "General Error"),
    ],
)
def test_error_describe(cls, label):
    error = cls("boom", code="42S02", sql="SELECT 1")
    assert isinstance(error, BrickDBError)
    assert error.describe("query") == f"{label} (query): boom | SQL: SELECT 1"
    assert error.describe() == f"{label}: boom | SQL: SELECT 1"
    assert error.to_error_response() == {
        "error": cls.__name__,
        "message": "boom",
        "code": "42S02",
        "sql": "SELECT 1",
    }


def test_config_error_field():
    error = ConfigError("missing", field="BRICKDB_HOST")
    assert error.field == "BRICKDB_HOST"
    assert str(error) == "missing"
