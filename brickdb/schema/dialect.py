"""SQL dialect identifiers.

A :class:`Dialect` selects which :class:`~brickdb.compile.base.SQLCompiler`
strategy the statement builder and the execution layer use.  It is fixed for
the lifetime of a connection.
"""
from __future__ import annotations

from enum import Enum


class Dialect(str, Enum):
    """Supported database backends."""

    MYSQL = "mysql"
    POSTGRES = "postgres"
    ORACLE = "oracle"
    FIREBIRD = "firebird"
    SQLITE = "sqlite"

    @classmethod
    def parse(cls, value: str | Dialect) -> Dialect:
        """Return the dialect for ``value``, accepting common aliases.

        ``"pgsql"``, ``"postgresql"``, ``"oci"`` and ``"oracleci"`` are
        accepted alongside the canonical names.

        Raises:
            ValueError: If ``value`` names no known dialect.
        """
        if isinstance(value, Dialect):
            return value
        key = value.strip().lower()
        return cls(_ALIASES.get(key, key))


_ALIASES: dict[str, str] = {
    "pgsql": "postgres",
    "postgresql": "postgres",
    "oci": "oracle",
    "oracleci": "oracle",
    "mariadb": "mysql",
    "sqlite3": "sqlite",
}
