"""Shared pytest fixtures for brickdb unit and integration tests."""
from __future__ import annotations

from collections.abc import Iterator

import pytest

from brickdb.compile.builder import StatementBuilder
from brickdb.compile.registry import CompilerFactory
from brickdb.db.database import Database
from brickdb.schema.settings import ConnectionSettings
from tests.fixtures import CUSTOMERS, ORDERS, load_ddl


def _builder(dialect: str) -> StatementBuilder:
    return StatementBuilder(CompilerFactory.create(dialect))


@pytest.fixture(scope="session")
def mysql() -> StatementBuilder:
    return _builder("mysql")


@pytest.fixture(scope="session")
def pgsql() -> StatementBuilder:
    return _builder("postgres")


@pytest.fixture(scope="session")
def oracle() -> StatementBuilder:
    return _builder("oracle")


@pytest.fixture(scope="session")
def firebird() -> StatementBuilder:
    return _builder("firebird")


@pytest.fixture(scope="session")
def sqlite() -> StatementBuilder:
    return _builder("sqlite")


@pytest.fixture(params=["mysql", "postgres", "oracle", "firebird", "sqlite"])
def any_builder(request: pytest.FixtureRequest) -> StatementBuilder:
    """One builder per supported dialect."""
    return _builder(request.param)


@pytest.fixture
def empty_db() -> Iterator[Database]:
    """In-memory SQLite database with the sample schema and no rows."""
    db = Database(ConnectionSettings(dialect="sqlite"))
    for statement in load_ddl("sqlite"):
        assert db.execute(statement), db.error
    yield db
    db.close()


@pytest.fixture
def db(empty_db: Database) -> Database:
    """In-memory SQLite database seeded with the sample customers and orders."""
    for row in CUSTOMERS:
        assert empty_db.insert("customers", row), empty_db.error
    for row in ORDERS:
        assert empty_db.insert("orders", row), empty_db.error
    return empty_db
