"""SQLite driver using stdlib sqlite3.

Used for local databases and as the engine behind the integration tests.
The connection runs in autocommit mode so that transaction statements
issued as plain SQL (``BEGIN``/``COMMIT``/``ROLLBACK``) control the
transaction, as they do on the ODBC driver.
"""

from __future__ import annotations

import sqlite3
from typing import Any

from ifx_odbc.core.catalog import SqliteDialect
from ifx_odbc.core.connection import ConnectionConfig
from ifx_odbc.core.exceptions import ConnectionError, ExecutionError  # noqa: A004


class SqliteDriver:
    """Synchronous SQLite driver."""

    _dialect = SqliteDialect()

    @property
    def dialect(self) -> SqliteDialect:
        return self._dialect

    def connect(self, config: ConnectionConfig) -> sqlite3.Connection:
        """Open ``config.database`` (or a bare DSN used as a path; default in-memory)."""
        database = config.database or config.dsn or ":memory:"
        try:
            conn = sqlite3.connect(database, timeout=config.timeout, isolation_level=None)
        except sqlite3.Error as e:
            raise ConnectionError(f"Failed to connect to {database}: {e}") from e
        conn.row_factory = sqlite3.Row
        return conn

    def execute(self, connection: sqlite3.Connection, sql: str) -> sqlite3.Cursor:
        """Execute SQL and return a cursor."""
        try:
            return connection.execute(sql)
        except sqlite3.Error as e:
            raise ExecutionError(str(e)) from e

    def fetch(self, result: sqlite3.Cursor) -> dict[str, Any] | None:
        """Fetch the next row as a dict, or None when no rows remain."""
        if result.description is None:
            return None
        try:
            row = result.fetchone()
        except sqlite3.Error as e:
            raise ExecutionError(str(e)) from e
        if row is None:
            return None
        return dict(row)

    def close_result(self, result: sqlite3.Cursor) -> None:
        result.close()

    def disconnect(self, connection: sqlite3.Connection) -> None:
        connection.close()
