"""Test fixtures: sample schema DDL and seed rows."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

_FIXTURES_DIR = Path(__file__).parent

CUSTOMERS: list[dict[str, Any]] = [
    {"id": 1, "name": "Ayu Lestari", "city": "Jakarta", "country": "Indonesia", "zip_code": "10110", "active": 1},
    {"id": 2, "name": "Budi Santoso", "city": "Bandung", "country": "Indonesia", "zip_code": "40111", "active": 1},
    {"id": 3, "name": "Citra Dewi", "city": "Jakarta", "country": "Indonesia", "zip_code": None, "active": 0},
    {"id": 4, "name": "Hans Gerber", "city": "Berlin", "country": "Germany", "zip_code": "10115", "active": 1},
    {"id": 5, "name": "Greta Geller", "city": "Hamburg", "country": "Germany", "zip_code": "20095", "active": 1},
    {"id": 6, "name": "Jean Martin", "city": "Lyon", "country": "France", "zip_code": "69001", "active": 0},
    {"id": 7, "name": "Claire Dubois", "city": "Paris", "country": "France", "zip_code": "75001", "active": 1},
    {"id": 8, "name": "Sofia Rossi", "city": "Rome", "country": "Italy", "zip_code": None, "active": 1},
    {"id": 9, "name": "Marco Bianchi", "city": "Milan", "country": "Italy", "zip_code": "20121", "active": 1},
    {"id": 10, "name": "Ana Souza", "city": "Lisbon", "country": "Portugal", "zip_code": "1100", "active": 1},
    {"id": 11, "name": "Lars Nilsson", "city": "Oslo", "country": "Norway", "zip_code": "0150", "active": 0},
    {"id": 12, "name": "Gerd Geiger", "city": "Berlin", "country": "Germany", "zip_code": "10117", "active": 1},
]

ORDERS: list[dict[str, Any]] = [
    {"id": 1, "customer_id": 1, "amount": 120.0},
    {"id": 2, "customer_id": 1, "amount": 80.5},
    {"id": 3, "customer_id": 4, "amount": 42.0},
    {"id": 4, "customer_id": 6, "amount": 15.0},
    {"id": 5, "customer_id": 6, "amount": 99.9},
    {"id": 6, "customer_id": 11, "amount": 10.0},
]


def load_ddl(target: Literal["sqlite", "postgres"] = "sqlite") -> list[str]:
    """Return the sample DDL statements for the given backend.

    Args:
        target: ``'sqlite'`` (default) or ``'postgres'``.

    Returns:
        One string per statement, ready to execute in order.
    """
    text = (_FIXTURES_DIR / f"ddl_{target}.sql").read_text()
    return [stmt.strip() for stmt in text.split(";") if stmt.strip()]
