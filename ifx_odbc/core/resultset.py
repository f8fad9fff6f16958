"""ResultSet: sequential access to the rows of one statement execution.

Column names are not described up front. They are taken from the key set
of the first row fetched, whether that fetch happens in ``columns()`` or in
one of the ``next*`` methods. ``columns()`` keeps the row it peeked at as a
pending row, so the next data fetch still returns it.

End of data is reported as ``None`` (or ``False`` from ``nextrow``) and
stays that way: once the driver has said "no more rows" it is not asked
again.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from ifx_odbc.core.enums import RowShape
from ifx_odbc.core.exceptions import ExecutionError, IfxOdbcError
from ifx_odbc.core.lifecycle import Resource
from ifx_odbc.core.rows import NativeRow, RowSchema
from ifx_odbc.core.traversal import Binding, Body, iterate

if TYPE_CHECKING:
    from ifx_odbc.adapters.protocol import Driver
    from ifx_odbc.core.statement import Statement

logger = logging.getLogger(__name__)


class ResultSet(Resource):
    """Cursor over the rows produced by one ``Statement.execute`` call."""

    kind = "ResultSet"
    prefix = "rs"

    def __init__(
        self, statement: Statement, handle: Any, driver: Driver, sql: str | None = None
    ) -> None:
        super().__init__(statement)
        self._statement = statement
        self._sql = sql
        self._handle = handle
        self._driver = driver
        self._schema = RowSchema()
        self._pending: NativeRow | None = None
        self._exhausted = False
        self._row_count = 0
        # Set for the implicit Statement of Connection.execute.
        self.closes_statement = False

    @property
    def statement(self) -> Statement:
        """The Statement that produced this result."""
        return self._statement

    @property
    def rowcount(self) -> int:
        """Number of rows handed to the caller so far."""
        return self._row_count

    @property
    def sql(self) -> str | None:
        """The substituted SQL that produced this result."""
        return self._sql

    # -- fetching -----------------------------------------------------------

    def _raw_fetch(self) -> NativeRow | None:
        if self._exhausted:
            return None
        try:
            row = self._driver.fetch(self._handle)
        except IfxOdbcError:
            raise
        except Exception as e:
            raise ExecutionError(f"Fetch failed: {e}", self._sql) from e
        if row is None:
            self._exhausted = True
            return None
        self._schema.learn(row)
        return row

    def _next_native(self) -> NativeRow | None:
        self._check_open()
        if self._pending is not None:
            row: NativeRow | None = self._pending
            self._pending = None
        else:
            row = self._raw_fetch()
            if row is None:
                return None
        self._row_count += 1
        return row

    def columns(self) -> list[str]:
        """Column names, peeking at the first row if they are not known yet.

        Returns an empty list for a result without rows.
        """
        self._check_open()
        if not self._schema.known and self._pending is None:
            self._pending = self._raw_fetch()
        return self._schema.columns

    def nextlist(self) -> list[Any] | None:
        """Next row as a list in column order, or ``None`` at end of data."""
        row = self._next_native()
        if row is None:
            return None
        return self._schema.as_list(row)

    def next(self) -> list[Any] | None:
        """Alias of :meth:`nextlist`."""
        return self.nextlist()

    def nextdict(self) -> dict[str, Any] | None:
        """Next row as a name-keyed dict, or ``None`` at end of data."""
        row = self._next_native()
        if row is None:
            return None
        return self._schema.as_dict(row)

    def fetch(self, as_: RowShape | str = RowShape.DICTS) -> Any:
        """Next row in the requested shape, or ``None`` at end of data."""
        if RowShape(as_) is RowShape.LISTS:
            return self.nextlist()
        return self.nextdict()

    def nextrow(self, var: Binding, as_: RowShape | str = RowShape.DICTS) -> bool:
        """Store the next row in ``var.value``; return False at end of data."""
        row = self.fetch(as_)
        if row is None:
            return False
        var.value = row
        return True

    # -- convenience --------------------------------------------------------

    def fetchall(self) -> list[list[Any]]:
        """Header row followed by every remaining data row, as lists."""
        result: list[list[Any]] = [self.columns()]
        while True:
            row = self.nextlist()
            if row is None:
                return result
            result.append(row)

    def foreach(self, body: Body, *, as_: RowShape | str = RowShape.LISTS) -> int:
        """Call ``body(row)`` for each remaining row.

        ``body`` may return ``Signal.STOP`` to end early; the ResultSet stays
        open. If ``body`` raises, the ResultSet is closed and the exception
        propagates. Returns the number of rows visited.
        """
        return iterate(self, body, as_)

    def __iter__(self) -> Iterator[list[Any]]:
        while True:
            row = self.nextlist()
            if row is None:
                return
            yield row

    def __enter__(self) -> ResultSet:
        return self

    # -- lifecycle ----------------------------------------------------------

    def _release(self) -> None:
        self._pending = None
        try:
            self._driver.close_result(self._handle)
        except Exception:
            logger.warning("Failed to close result %s", self.name, exc_info=True)
        if self.closes_statement:
            self._statement.close()
