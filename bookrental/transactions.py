"""Running work inside a database transaction."""

from __future__ import annotations

import sqlite3
from collections.abc import Callable, Iterator
from contextlib import contextmanager, suppress
from typing import TypeVar

T = TypeVar("T")


class TransactionError(Exception):
    """A transaction could not be started or committed."""


class TransactionManager:
    """Begins, commits and rolls back transactions on one connection."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self.connection = connection

    def begin(self) -> sqlite3.Connection:
        """Start a transaction and return the connection it runs on."""
        try:
            self.connection.execute("BEGIN")
        except sqlite3.Error as exc:
            raise TransactionError(f"error starting transaction: {exc}") from exc
        return self.connection

    def _rollback(self) -> None:
        with suppress(sqlite3.Error):
            if self.connection.in_transaction:
                self.connection.rollback()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Commit when the block finishes; roll back if it raises."""
        tx = self.begin()
        try:
            yield tx
        except BaseException:
            self._rollback()
            raise
        try:
            tx.commit()
        except sqlite3.Error as exc:
            self._rollback()
            raise TransactionError(f"error committing transaction: {exc}") from exc

    def with_transaction(self, fn: Callable[[sqlite3.Connection], T]) -> T:
        """Call fn with the transaction and return its result."""
        with self.transaction() as tx:
            return fn(tx)