"""Driver protocol.

Every driver module MUST implement this protocol. The core only ever
talks to a database through these five primitives plus the dialect.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from ifx_odbc.core.catalog import Dialect
from ifx_odbc.core.connection import ConnectionConfig


@runtime_checkable
class Driver(Protocol):
    """Synchronous, blocking database driver."""

    @property
    def dialect(self) -> Dialect:
        """Transaction and catalog SQL for the engine behind this driver."""
        ...

    def connect(self, config: ConnectionConfig) -> Any:
        """Open a native connection. Raises ConnectionError on failure."""
        ...

    def execute(self, connection: Any, sql: str) -> Any:
        """Run *sql* and return a native result handle.

        Raises ExecutionError carrying the driver's diagnostic text.
        """
        ...

    def fetch(self, result: Any) -> Mapping[str, Any] | None:
        """Return the next row as a name -> value mapping, None at end of data."""
        ...

    def close_result(self, result: Any) -> None:
        """Release a result handle. Must tolerate repeated calls."""
        ...

    def disconnect(self, connection: Any) -> None:
        """Release a native connection. Must tolerate repeated calls."""
        ...
