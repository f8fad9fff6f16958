"""ODBC driver using pyodbc (Informix CLI or any ODBC data source)."""

from __future__ import annotations

import logging
from typing import Any

from ifx_odbc.core.catalog import InformixDialect
from ifx_odbc.core.connection import ConnectionConfig
from ifx_odbc.core.dsn import build_connection_string, resolve_config
from ifx_odbc.core.exceptions import (  # noqa: A004
    ConfigurationError,
    ConnectionError,
    ExecutionError,
)

logger = logging.getLogger(__name__)


def _diagnostic(error: Exception) -> str:
    """Format a pyodbc error as ``[SQLSTATE] message``."""
    args = getattr(error, "args", ())
    if len(args) >= 2:
        return f"[{args[0]}] {args[1]}"
    return str(error)


class OdbcDriver:
    """Synchronous ODBC driver.

    The DSN section of odbc.ini supplies any connection detail the caller
    did not give, and the full connection string is handed to the driver
    manager. Connections run in autocommit mode; transactions are driven
    with ``BEGIN WORK``/``COMMIT WORK``/``ROLLBACK WORK``.
    """

    _dialect = InformixDialect()

    @property
    def dialect(self) -> InformixDialect:
        return self._dialect

    def connect(self, config: ConnectionConfig) -> Any:
        import pyodbc

        if not config.dsn:
            raise ConfigurationError("Connection string must contain DSN")
        conn_str = build_connection_string(resolve_config(config))
        try:
            conn = pyodbc.connect(conn_str, autocommit=True, timeout=config.timeout)
        except pyodbc.Error as e:
            raise ConnectionError(f"Failed to connect: {_diagnostic(e)}") from e
        # Query timeout, fixed for the lifetime of the connection.
        conn.timeout = config.timeout
        return conn

    def execute(self, connection: Any, sql: str) -> Any:
        import pyodbc

        cursor = connection.cursor()
        try:
            cursor.execute(sql)
        except pyodbc.Error as e:
            cursor.close()
            raise ExecutionError(f"SQL error {_diagnostic(e)}") from e
        return cursor

    def fetch(self, result: Any) -> dict[str, Any] | None:
        import pyodbc

        if result.description is None:
            return None
        try:
            row = result.fetchone()
        except pyodbc.Error as e:
            raise ExecutionError(f"Fetch failed: {_diagnostic(e)}") from e
        if row is None:
            return None
        columns = [desc[0] for desc in result.description]
        return dict(zip(columns, row, strict=True))

    def close_result(self, result: Any) -> None:
        import pyodbc

        try:
            result.close()
        except pyodbc.ProgrammingError:
            logger.debug("Result already closed")

    def disconnect(self, connection: Any) -> None:
        import pyodbc

        try:
            connection.close()
        except pyodbc.ProgrammingError:
            logger.debug("Connection already closed")
