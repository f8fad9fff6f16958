"""Row materialization.

Drivers hand back each row as a mapping of column name to value. A
:class:`RowSchema` fixes the column order from the first row it sees and
turns later rows into lists in exactly that order.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

NativeRow = Mapping[str, Any]


class RowSchema:
    """Column order of a result, learned from the first row.

    ``known`` is tracked separately from ``columns`` because a result with
    no rows never learns its columns and reports an empty list.
    """

    def __init__(self) -> None:
        self._columns: tuple[str, ...] = ()
        self._known = False

    @property
    def known(self) -> bool:
        return self._known

    @property
    def columns(self) -> list[str]:
        return list(self._columns)

    def learn(self, row: NativeRow) -> None:
        """Fix the column order from *row* unless it is already known."""
        if not self._known:
            self._columns = tuple(row.keys())
            self._known = True

    def as_list(self, row: NativeRow) -> list[Any]:
        """Values of *row* in column order; missing columns become ``None``."""
        self.learn(row)
        return [row.get(col) for col in self._columns]

    def as_dict(self, row: NativeRow) -> dict[str, Any]:
        """*row* as a plain dict, keyed as the driver returned it.

        Keys are neither reordered nor filled in; only :meth:`as_list`
        follows the learned column order.
        """
        self.learn(row)
        return dict(row)
