"""SQLite connection management with context manager."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Optional


class Transaction:
    """Statement runner bound to one open connection.

    Handed to transaction bodies so every read inside the body sees the
    body's own uncommitted writes.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def run_write(self, sql: str, params: tuple = ()) -> int:
        """Run an INSERT/UPDATE/DELETE and return the rows affected."""
        return self.conn.execute(sql, params).rowcount

    def insert(self, sql: str, params: tuple = ()) -> int:
        """Run an INSERT and return the new row id."""
        return self.conn.execute(sql, params).lastrowid

    def query_one(self, sql: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        return self.conn.execute(sql, params).fetchone()

    def query_all(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        return self.conn.execute(sql, params).fetchall()


class DatabaseConnection:
    """Manages SQLite connections with foreign key enforcement."""

    def __init__(self, db_path: str | Path, timeout: float = 5.0):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.timeout = timeout

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            str(self.db_path), timeout=self.timeout, isolation_level=None,
        )
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def get_connection(self, immediate: bool = False):
        """Yield a connection inside a transaction that commits or rolls back.

        With ``immediate`` the write lock is taken up front, so reads made
        before the first write cannot be invalidated by another writer.
        """
        conn = self._connect()
        try:
            conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
            yield conn
            conn.execute("COMMIT")
        except Exception:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        finally:
            conn.close()

    def transaction(self, body: Callable[[Transaction], Any]) -> Any:
        """Run ``body(tx)`` atomically and return its result.

        Every statement issued through ``tx`` lands or none does; an
        exception raised by ``body`` rolls back and propagates.
        """
        with self.get_connection(immediate=True) as conn:
            return body(Transaction(conn))

    def run_write(self, sql: str, params: tuple = ()) -> int:
        """Run a single write statement and return the rows affected."""
        with self.get_connection() as conn:
            return conn.execute(sql, params).rowcount

    def query_one(self, sql: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        with self.get_connection() as conn:
            return conn.execute(sql, params).fetchone()

    def query_all(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        with self.get_connection() as conn:
            return conn.execute(sql, params).fetchall()

    def execute(self, sql: str, params: tuple = ()):
        """Run a single statement and return the fetched rows."""
        with self.get_connection() as conn:
            cursor = conn.execute(sql, params)
            return cursor.fetchall()
