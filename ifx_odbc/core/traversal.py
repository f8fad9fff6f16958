"""Traversal helpers built on ResultSet fetches."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ifx_odbc.core.enums import RowShape, Signal

if TYPE_CHECKING:
    from ifx_odbc.core.resultset import ResultSet

Body = Callable[[Any], "Signal | None"]


@dataclass
class Binding:
    """Output slot written by ``nextrow`` and ``columns_var`` captures."""

    value: Any = None


def drain(rs: ResultSet, as_: RowShape | str = RowShape.DICTS) -> list[Any]:
    """Fetch every remaining row of *rs* in the requested shape."""
    shape = RowShape(as_)
    rows: list[Any] = []
    while True:
        row = rs.fetch(shape)
        if row is None:
            return rows
        rows.append(row)


def iterate(
    rs: ResultSet,
    body: Body,
    as_: RowShape | str = RowShape.DICTS,
    columns_var: Binding | None = None,
) -> int:
    """Call *body* for each row of *rs*; return the number of rows visited.

    ``body`` returning ``Signal.STOP`` ends the loop; anything else moves on
    to the next row. If ``body`` (or a fetch) raises, *rs* is closed and the
    exception propagates. On normal completion nothing is closed.
    """
    shape = RowShape(as_)
    visited = 0
    try:
        if columns_var is not None:
            columns_var.value = rs.columns()
        while True:
            row = rs.fetch(shape)
            if row is None:
                break
            visited += 1
            if body(row) is Signal.STOP:
                break
    except Exception:
        rs.close()
        raise
    return visited
