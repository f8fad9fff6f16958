"""Transaction management.

Provides a context manager for executing multiple SQL statements atomically
on one Connection. Commits on success, rolls back on exception.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import TYPE_CHECKING, Any

from ifx_odbc.core.enums import RowShape
from ifx_odbc.core.exceptions import TransactionStateError

if TYPE_CHECKING:
    from ifx_odbc.core.connection import Connection
    from ifx_odbc.core.resultset import ResultSet


class _TxState(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class Transaction:
    """Transaction context manager. Create with ``Connection.transaction()``."""

    def __init__(self, connection: Connection) -> None:
        self._connection = connection
        self._state = _TxState.IDLE

    @property
    def state(self) -> str:
        return self._state.value

    def __enter__(self) -> Transaction:
        if self._state != _TxState.IDLE:
            raise TransactionStateError(self._state.value, "begin")
        self._connection.begintransaction()
        self._state = _TxState.ACTIVE
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if self._state != _TxState.ACTIVE:
            return
        if exc_type is not None:
            self._connection.rollback()
            self._state = _TxState.ROLLED_BACK
        else:
            self._connection.commit()
            self._state = _TxState.COMMITTED

    def execute(
        self,
        sql: str,
        params: Mapping[str, Any] | Sequence[Any] | Any = None,
    ) -> ResultSet:
        """Execute SQL within this transaction."""
        self._check_active("execute")
        return self._connection.execute(sql, params)

    def allrows(
        self,
        sql: str,
        params: Mapping[str, Any] | Sequence[Any] | Any = None,
        *,
        as_: RowShape | str = RowShape.DICTS,
    ) -> list[Any]:
        """Fetch all rows within transaction context."""
        self._check_active("execute")
        return self._connection.allrows(sql, params, as_=as_)

    def fetch_one(
        self,
        sql: str,
        params: Mapping[str, Any] | Sequence[Any] | Any = None,
    ) -> dict[str, Any] | None:
        """Fetch a single row within transaction context."""
        self._check_active("execute")
        return self._connection.fetch_one(sql, params)

    def commit(self) -> None:
        """Explicitly commit the transaction."""
        self._check_active("commit")
        self._connection.commit()
        self._state = _TxState.COMMITTED

    def rollback(self) -> None:
        """Explicitly roll back the transaction."""
        self._check_active("rollback")
        self._connection.rollback()
        self._state = _TxState.ROLLED_BACK

    def _check_active(self, action: str) -> None:
        if self._state != _TxState.ACTIVE:
            raise TransactionStateError(self._state.value, action)
