"""Transaction guard.

Wraps a SQLAlchemy :class:`~sqlalchemy.engine.Connection` with explicit
begin / commit / rollback and the policy :meth:`Database.execute` relies on:

* statements that force an implicit commit on the server (DDL, ``TRUNCATE
  TABLE``, ``LOCK TABLES``, …) are never wrapped in a transaction;
* beginning while a transaction is already active is a no-op.

SQLAlchemy 2.x connections *autobegin* on first use.  The guard therefore
tracks the explicit transaction it opened itself and closes any leftover
autobegun one before starting a new unit of work.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.engine import Connection, RootTransaction

from brickdb.errors import StatementError

logger = logging.getLogger(__name__)

# https://dev.mysql.com/doc/refman/8.0/en/implicit-commit.html
_AUTO_COMMIT_PATTERNS = (
    re.compile(r"ALTER (DATABASE|EVENT|PROCEDURE|SERVER|TABLE|TABLESPACE|VIEW)", re.IGNORECASE),
    re.compile(
        r"CREATE (DATABASE|EVENT|INDEX|PROCEDURE|SERVER|TABLE|TABLESPACE|TRIGGER|VIEW)",
        re.IGNORECASE,
    ),
    re.compile(
        r"DROP (DATABASE|EVENT|INDEX|PROCEDURE|SERVER|TABLE|TABLESPACE|TRIGGER|VIEW)"
        r"|INSTALL PLUGIN|LOCK TABLES|RENAME TABLE|TRUNCATE TABLE|UNINSTALL PLUGIN",
        re.IGNORECASE,
    ),
)


def is_auto_commit_sql(sql: str) -> bool:
    """True if the server commits implicitly around ``sql``."""
    return any(pattern.search(sql) for pattern in _AUTO_COMMIT_PATTERNS)


class TransactionGuard:
    """Explicit transaction state for one connection.

    Args:
        connection: The SQLAlchemy connection to manage.
    """

    def __init__(self, connection: Connection) -> None:
        self._connection = connection
        self._transaction: RootTransaction | None = None

    @property
    def active(self) -> bool:
        """True while an explicit transaction is open."""
        return self._transaction is not None and self._transaction.is_active

    def release_implicit(self) -> None:
        """Commit an autobegun transaction left open by a previous read."""
        if not self.active and self._connection.in_transaction():
            self._connection.commit()

    def begin(self) -> None:
        """Open an explicit transaction; no-op if one is already active."""
        if self.active:
            logger.debug("Transaction already active; nested begin ignored.")
            return
        self.release_implicit()
        self._transaction = self._connection.begin()

    def commit(self) -> None:
        """Commit the explicit transaction.

        Raises:
            StatementError: If no transaction is active.
        """
        transaction = self._require_active("commit")
        try:
            transaction.commit()
        finally:
            self._transaction = None

    def rollback(self) -> None:
        """Roll the explicit transaction back.

        Raises:
            StatementError: If no transaction is active.
        """
        transaction = self._require_active("roll back")
        try:
            transaction.rollback()
        finally:
            self._transaction = None

    @contextmanager
    def statement_scope(self, sql: str, *, simulate: bool = False) -> Iterator[bool]:
        """Run one write statement under the guard's policy.

        Yields ``True`` when the statement got its own transaction.  On normal
        exit that transaction is committed, or rolled back when ``simulate``
        is set; on error it is rolled back and the error re-raised.  Inside an
        already active explicit transaction nothing is committed or rolled
        back here.
        """
        if self.active:
            yield False
            return

        self.release_implicit()
        if is_auto_commit_sql(sql):
            try:
                yield False
            except BaseException:
                if self._connection.in_transaction():
                    self._connection.rollback()
                raise
            if self._connection.in_transaction():
                self._connection.commit()
            return

        transaction = self._connection.begin()
        try:
            yield True
        except BaseException:
            if transaction.is_active:
                transaction.rollback()
            raise
        if simulate:
            transaction.rollback()
        else:
            transaction.commit()

    def _require_active(self, action: str) -> RootTransaction:
        transaction = self._transaction
        if transaction is None or not transaction.is_active:
            raise StatementError(f"Cannot {action}: there is no active transaction.")
        return transaction
