"""Integration tests: Database against an in-memory SQLite database."""

from __future__ import annotations

import logging

import pytest
from sqlalchemy import create_engine

from brickdb.db.database import Database
from brickdb.errors import ConfigError, DatabaseConnectionError, StatementError
from brickdb.schema.dialect import Dialect
from brickdb.schema.settings import ConnectionSettings
from tests.fixtures import CUSTOMERS

# ---------------------------------------------------------------------------
# Connection
# ---------------------------------------------------------------------------


def test_connects_from_settings(db: Database):
    assert db.is_connected()
    assert db.dialect is Dialect.SQLITE
    assert db.error == ""


def test_connects_through_existing_engine():
    engine = create_engine("sqlite://")
    with Database(engine=engine) as db:
        assert db.dialect is Dialect.SQLITE
        assert db.query_value("SELECT 1") == 1
    assert not db.is_connected()
    engine.dispose()


def test_requires_settings_or_engine():
    with pytest.raises(ConfigError):
        Database()


def test_connection_failure_is_reported_not_raised(tmp_path, caplog):
    missing = tmp_path / "missing" / "db.sqlite"
    with caplog.at_level(logging.ERROR, logger="brickdb"):
        db = Database(ConnectionSettings(dialect="sqlite", database=str(missing)))
    assert not db.is_connected()
    assert isinstance(db.last_error, DatabaseConnectionError)
    assert "Database Connection Error" in caplog.text

    result = db.query("SELECT 1")
    assert not result
    assert isinstance(result.error, DatabaseConnectionError)
    assert db.fetch() is None


def test_missing_driver_is_a_connection_error():
    db = Database(ConnectionSettings(dialect="mysql", driver="mysql+nosuchdriver", database="x"))
    assert not db.is_connected()
    assert isinstance(db.last_error, DatabaseConnectionError)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


def test_query_and_fetch(db: Database):
    result = db.query(
        "SELECT id, name FROM customers WHERE country = :country ORDER BY id",
        {"country": "Germany"},
    )
    assert result
    assert result.row_count == 3
    assert db.row_count == 3
    first = db.fetch()
    assert first.name == "Hans Gerber"
    assert db.fetch(as_dict=True) == {"id": 5, "name": "Greta Geller"}
    assert [row.id for row in db.fetch_all()] == [12]
    assert db.fetch() is None


def test_select_with_structured_filter(db: Database):
    result = db.select(
        "customers",
        "id, name",
        ["zip_code IS NOT NULL", ("id >", 3), ("name LIKE", "%Ge%")],
        order_by="id",
    )
    assert result.row_count == 3
    assert [r["name"] for r in db.fetch_all(as_dict=True)] == [
        "Hans Gerber", "Greta Geller", "Gerd Geiger",
    ]


def test_select_with_list_value(db: Database):
    assert db.select("customers", "id", {"id IN": [1, 2, 99]}).row_count == 2


def test_select_limit_and_offset(db: Database):
    result = db.select("customers", "id", order_by="id", limit=(4, 3))
    assert result.row_count == 3
    assert [row.id for row in db.fetch_all()] == [5, 6, 7]


def test_select_distinct_counts_distinct_rows(db: Database):
    assert db.select("customers", "country", distinct=True).row_count == 6
    assert db.select("customers", "country", distinct="country").row_count == 6


def test_grouped_select_counts_groups(db: Database):
    result = db.select("customers", "country, COUNT(*) AS n", group_by="country")
    assert result.row_count == 6


def test_select_row_and_value(db: Database):
    row = db.select_row("customers", "name, city", {"id": 7}, as_dict=True)
    assert row == {"name": "Claire Dubois", "city": "Paris"}
    assert db.select_value("customers", "city", {"id": 8}) == "Rome"
    assert db.select_row("customers", "*", {"id": 999}) is None
    assert db.select_value("customers", "city", {"id": 999}) is None


def test_select_count(db: Database):
    assert db.select_count("customers").rows_count == 12
    assert db.row_count == 1
    row = db.select_count("customers", {"id": "ids", "DISTINCT country": "countries"}, {"active": 1})
    assert (row.ids, row.countries) == (9, 5)


def test_query_row_and_value(db: Database):
    assert db.query_row("SELECT name FROM customers WHERE id = :id", {"id": 2}).name == "Budi Santoso"
    assert db.query_value("SELECT COUNT(*) FROM orders") == len([1, 2, 3, 4, 5, 6])


def test_joined_select(db: Database):
    result = db.select(
        "customers INNER JOIN orders ON orders.customer_id = customers.id",
        "customers.name, orders.amount",
        {"orders.amount >": 50},
        order_by="orders.amount",
    )
    assert result.row_count == 3
    assert db.fetch_all(as_dict=True)[0] == {"name": "Ayu Lestari", "amount": 80.5}


def test_maximum_value(db: Database, empty_db_factory):
    assert db.get_maximum_value("customers", "id") == 12
    assert empty_db_factory().get_maximum_value("customers", "id") == 1


@pytest.fixture
def empty_db_factory():
    opened: list[Database] = []

    def factory() -> Database:
        db = Database(ConnectionSettings(dialect="sqlite"))
        db.execute("CREATE TABLE customers (id INTEGER PRIMARY KEY, name TEXT)")
        opened.append(db)
        return db

    yield factory
    for db in opened:
        db.close()


def test_bad_sql_is_a_statement_error(db: Database, caplog):
    with caplog.at_level(logging.ERROR, logger="brickdb"):
        result = db.query("SELECT * FROM no_such_table WHERE id = :id", {"id": 1})
    assert not result
    assert isinstance(result.error, StatementError)
    assert db.last_error is result.error
    assert "no_such_table" in db.error
    assert "id = 1" in result.error.sql
    assert "Database Error (query)" in caplog.text


def test_failed_row_count_fails_the_query(db: Database):
    # The greedy FROM split leaves a broken count statement for this subquery.
    sql = (
        "SELECT c.id FROM customers c WHERE c.id IN "
        "(SELECT customer_id FROM orders WHERE orders.customer_id = c.id)"
    )
    result = db.query(sql)
    assert not result
    assert isinstance(result.error, StatementError)
    assert db.last_error is result.error
    assert db.error
    assert db.row_count == 0
    assert db.fetch() is None


# ---------------------------------------------------------------------------
# Row counting
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("rows", [0, 1, 1000])
def test_count_rewrite_agrees_with_full_fetch(empty_db: Database, rows):
    empty_db.transaction_begin()
    for i in range(rows):
        country = None if i % 3 == 0 else ("X" if i % 2 else "Y")
        empty_db.insert("customers", {"name": f"c{i}", "country": country})
    assert empty_db.transaction_commit()

    for sql in (
        "SELECT * FROM customers",
        "SELECT id, name FROM customers ORDER BY name",
        "SELECT DISTINCT country FROM customers",
    ):
        result = empty_db.query(sql)
        assert result.row_count == len(empty_db.fetch_all()), sql

    result = empty_db.select("customers", "country", distinct="country")
    assert result.row_count == len(empty_db.fetch_all())


def test_distinct_count_includes_null(empty_db: Database):
    for name, country in (("a", "A"), ("b", "B"), ("c", None)):
        assert empty_db.insert("customers", {"name": name, "country": country})
    result = empty_db.select("customers", "country", distinct="country")
    assert result.row_count == 3
    assert len(empty_db.fetch_all()) == 3


def test_limited_query_is_counted_by_fetching(db: Database):
    assert db.query("SELECT * FROM customers ORDER BY id LIMIT 5").row_count == 5
    assert db.query("SELECT * FROM customers ORDER BY id LIMIT 5 OFFSET 10").row_count == 2


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


def test_insert_returning_runs_once(db: Database):
    result = db.execute(
        "INSERT INTO customers (name, country) VALUES (:name, :country) RETURNING id",
        {"name": "Returned", "country": "Spain"},
    )
    assert result
    assert db.row_count == 1
    assert db.fetch()[0] == len(CUSTOMERS) + 1
    assert db.select_count("customers", where={"name": "Returned"}).rows_count == 1
    assert db.select_count("customers").rows_count == len(CUSTOMERS) + 1


def test_insert_returns_last_insert_id(db: Database):
    result = db.insert("customers", {"name": "New One", "country": "Spain"})
    assert result
    assert result.value == len(CUSTOMERS) + 1
    assert db.last_insert_id == len(CUSTOMERS) + 1
    assert db.row_count == 1


def test_insert_without_values_fails(db: Database):
    result = db.insert("customers", {})
    assert not result
    assert "cannot be empty" in result.error.message


def test_insert_constraint_violation(db: Database):
    result = db.insert("customers", {"id": 1, "name": "Duplicate"})
    assert not result
    assert isinstance(result.error, StatementError)
    assert db.select_count("customers").rows_count == len(CUSTOMERS)


def test_insert_select_of_no_rows_fails(db: Database):
    result = db.execute("INSERT INTO orders (customer_id, amount) SELECT id, 1 FROM customers WHERE id > 100")
    assert not result
    assert "Failed to insert" in result.error.message


def test_update(db: Database):
    result = db.update("customers", {"city": "Bonn"}, {"city": "Berlin"})
    assert result.row_count == 2
    assert db.select("customers", "id", {"city": "Bonn"}).row_count == 2


def test_raw_predicates_take_runtime_params(db: Database):
    assert db.select("orders", "id", ["customer_id = :cid"], params={"cid": 6}).row_count == 2
    assert db.select_value("customers", "city", ["id = :cid"], params={"cid": 1}) == "Jakarta"

    result = db.update("customers", {"city": "Bonn"}, ["city = :old"], params={"old": "Berlin"})
    assert result.row_count == 2

    result = db.delete("orders", ["customer_id = :cid"], params={"cid": 6})
    assert result.row_count == 2
    assert db.select_count("orders").rows_count == 4


def test_update_without_values_fails(db: Database):
    assert not db.update("customers", {}, {"id": 1})


def test_delete(db: Database):
    result = db.delete("orders", {"customer_id": 6})
    assert result
    assert result.row_count == 2
    assert db.select_count("orders").rows_count == 4


def test_delete_matching_nothing_fails_silently(db: Database):
    db.query("SELECT 1")
    result = db.delete("orders", {"customer_id": 999})
    assert not result
    assert result.error is None
    assert db.last_error is None


def test_joined_delete(db: Database):
    result = db.delete(
        "customers INNER JOIN orders ON orders.customer_id = customers.id",
        {"orders.amount <": 12},
    )
    assert result.row_count == 1
    assert db.select_value("customers", "id", {"id": 11}) is None


def test_ddl_runs_outside_transactions(db: Database):
    assert db.execute("CREATE TABLE notes (id INTEGER PRIMARY KEY, body TEXT)")
    assert "notes" in db.get_tables()


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


def test_transaction_commit(db: Database):
    assert db.transaction_begin()
    assert db.in_transaction()
    db.insert("orders", {"customer_id": 2, "amount": 5})
    db.update("customers", {"active": 0}, {"id": 2})
    assert db.transaction_commit()
    assert not db.in_transaction()
    assert db.select_count("orders").rows_count == 7


def test_transaction_rollback(db: Database):
    db.transaction_begin()
    db.delete("orders")
    assert db.select_count("orders").rows_count == 0
    assert db.transaction_rollback()
    assert db.select_count("orders").rows_count == 6


def test_nested_begin_is_a_successful_noop(db: Database):
    assert db.transaction_begin()
    assert db.transaction_begin()
    db.delete("orders", {"customer_id": 1})
    assert db.transaction_rollback()
    assert not db.in_transaction()
    assert db.select_count("orders").rows_count == 6


def test_commit_without_transaction_fails(db: Database):
    assert not db.transaction_commit()
    assert isinstance(db.last_error, StatementError)


def test_failed_statement_inside_transaction_keeps_it_open(db: Database):
    db.transaction_begin()
    db.insert("orders", {"customer_id": 3, "amount": 1})
    assert not db.insert("customers", {"id": 1, "name": "Duplicate"})
    assert db.in_transaction()
    db.transaction_rollback()
    assert db.select_count("orders").rows_count == 6


# ---------------------------------------------------------------------------
# Debug mode
# ---------------------------------------------------------------------------


def test_debug_writes_are_simulated(db: Database):
    db.set_debug_mode("register")
    result = db.delete("orders", {"customer_id": 1}, debug=True)
    assert result.row_count == 2
    assert db.select_count("orders").rows_count == 6

    trace = db.debug_traces[-1]
    assert trace.simulated
    assert trace.sql == "DELETE FROM orders WHERE customer_id = 1"
    assert "only simulated" in db.get_debug_content()


def test_debug_query_trace(db: Database):
    db.set_debug_mode("register")
    db.select("customers", "id", {"country": "France"}, debug=True)
    trace = db.debug_traces[-1]
    assert trace.source == "query"
    assert trace.row_count == 2
    assert not trace.simulated
    assert trace.elapsed is not None
    assert '"row_count": 2' in db.get_debug_content("json")


def test_debug_error_trace(db: Database):
    db.set_debug_mode("register")
    db.query("SELECT nope FROM customers", debug=True)
    assert "--DEBUG QUERY ERROR--" in db.get_debug_content()


# ---------------------------------------------------------------------------
# Introspection
# ---------------------------------------------------------------------------


def test_get_tables_excludes_views(db: Database):
    assert db.get_tables() == ["customers", "orders"]


def test_get_columns(db: Database):
    columns = db.get_columns("orders")
    assert [c["name"] for c in columns] == ["id", "customer_id", "amount"]
    assert db.get_column_names("customers") == [
        "id", "name", "city", "country", "zip_code", "active",
    ]


def test_get_column_names_of_unknown_table(db: Database):
    assert db.get_column_names("nope") == []
