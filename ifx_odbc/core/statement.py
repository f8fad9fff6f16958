"""Statement: a SQL template bound to a connection.

A Statement holds no native state. Each ``execute`` re-renders the
template with the supplied values and sends the resulting SQL text to the
driver, producing a new ResultSet owned by this Statement.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ifx_odbc.config import is_debug_enabled
from ifx_odbc.core.enums import ParamType, RowShape
from ifx_odbc.core.exceptions import ExecutionError, IfxOdbcError, MultipleRowsError
from ifx_odbc.core.lifecycle import Resource
from ifx_odbc.core.params import Scope, placeholder_names, positional_count, render
from ifx_odbc.core.quoting import normalize_hint
from ifx_odbc.core.resultset import ResultSet
from ifx_odbc.core.traversal import Binding, Body, drain, iterate

if TYPE_CHECKING:
    from ifx_odbc.core.connection import Connection

logger = logging.getLogger(__name__)


@dataclass
class ParamInfo:
    """Description of one placeholder, as reported by ``Statement.params()``."""

    direction: str = "in"
    type: str = "varchar"
    precision: int = 0
    scale: int = 0
    nullable: bool = True


def _log_sql(sql: str) -> None:
    level = logging.INFO if is_debug_enabled() else logging.DEBUG
    logger.log(level, "Executing SQL: %s", sql)


class Statement(Resource):
    """Prepared SQL template. Create with ``Connection.prepare``."""

    kind = "Statement"
    prefix = "stmt"

    def __init__(self, connection: Connection, sql: str) -> None:
        # Scan now so a malformed template fails at prepare time.
        self._names = placeholder_names(sql)
        self._positional = positional_count(sql)
        super().__init__(connection)
        self._connection = connection
        self._sql = sql
        self._types: dict[str | int, str] = {}
        self._info: dict[str | int, ParamInfo] = {}

    @property
    def connection(self) -> Connection:
        """The Connection this statement belongs to."""
        return self._connection

    @property
    def sql(self) -> str:
        """The unsubstituted SQL template."""
        return self._sql

    # -- parameter types ----------------------------------------------------

    def paramtype(
        self,
        name: str | int,
        type_name: ParamType | str,
        precision: int | None = None,
        scale: int | None = None,
    ) -> None:
        """Declare the type of a parameter (name, or 1-based ``?`` position).

        Only ``numeric`` changes the quoting; every other type name quotes.
        """
        self._check_open()
        hint = normalize_hint(type_name) or ParamType.STRING.value
        self._types[name] = hint
        self._info[name] = ParamInfo(
            type=hint,
            precision=precision or 0,
            scale=scale or 0,
        )

    def set_bind_types(self, types: Iterable[ParamType | str]) -> None:
        """Declare the types of the ``?`` placeholders, in order."""
        self._check_open()
        for key in [k for k in self._types if isinstance(k, int)]:
            del self._types[key]
            self._info.pop(key, None)
        for position, type_name in enumerate(types, start=1):
            self.paramtype(position, type_name)

    def params(self) -> dict[str | int, ParamInfo]:
        """Describe every placeholder of the template.

        Named placeholders are keyed by name, ``?`` placeholders by 1-based
        position. Undeclared parameters are reported as ``varchar``.
        """
        keys: list[str | int] = [*self._names, *range(1, self._positional + 1)]
        return {key: self._info.get(key, ParamInfo()) for key in keys}

    # -- execution ----------------------------------------------------------

    def execute(
        self,
        params: Mapping[str, Any] | Sequence[Any] | Any = None,
        *,
        force_string: bool = False,
        scopes: Sequence[Scope] = (),
    ) -> ResultSet:
        """Render the template with *params* and run it.

        Named placeholders missing from *params* are looked up in *scopes*
        (nearest first, bounded depth).

        Raises:
            TemplateError: The values do not fit the template. Nothing is sent.
            ExecutionError: The driver rejected the SQL.
        """
        self._check_open()
        sql = render(
            self._sql,
            params,
            types=self._types,
            force_string=force_string,
            scopes=scopes,
        )
        connection = self._connection
        driver = connection.driver
        _log_sql(sql)
        try:
            handle = driver.execute(connection.native_handle, sql)
        except ExecutionError as e:
            raise ExecutionError(e.detail, sql) from e
        except IfxOdbcError:
            raise
        except Exception as e:
            raise ExecutionError(str(e), sql) from e
        return ResultSet(self, handle, driver, sql)

    def execute_string(self, params: Mapping[str, Any] | Sequence[Any] | Any = None) -> ResultSet:
        """Execute with every value quoted as a string."""
        return self.execute(params, force_string=True)

    def allrows(
        self,
        params: Mapping[str, Any] | Sequence[Any] | Any = None,
        *,
        as_: RowShape | str = RowShape.DICTS,
        scopes: Sequence[Scope] = (),
    ) -> list[Any]:
        """Execute and return every row; the ResultSet is closed afterwards."""
        with self.execute(params, scopes=scopes) as rs:
            return drain(rs, as_)

    def foreach(
        self,
        body: Body,
        params: Mapping[str, Any] | Sequence[Any] | Any = None,
        *,
        as_: RowShape | str = RowShape.DICTS,
        columns_var: Binding | None = None,
        scopes: Sequence[Scope] = (),
    ) -> int:
        """Execute and call ``body(row)`` per row; return the rows visited.

        The ResultSet is closed when the loop ends, whether it ran out of
        rows, was stopped with ``Signal.STOP``, or ``body`` raised.
        """
        with self.execute(params, scopes=scopes) as rs:
            return iterate(rs, body, as_, columns_var)

    def fetch_one(
        self,
        params: Mapping[str, Any] | Sequence[Any] | Any = None,
    ) -> dict[str, Any] | None:
        """Fetch a single row as a dict.

        Returns None if zero rows match.
        Raises MultipleRowsError if more than one row matches.
        """
        with self.execute(params) as rs:
            row = rs.nextdict()
            if row is None:
                return None
            extra = len(drain(rs, RowShape.LISTS))
            if extra:
                raise MultipleRowsError(self._sql, 1 + extra)
            return row

    def fetch_scalar(self, params: Mapping[str, Any] | Sequence[Any] | Any = None) -> Any:
        """Fetch a single scalar value (first column of first row)."""
        with self.execute(params) as rs:
            row = rs.nextlist()
            if not row:
                return None
            return row[0]

    def resultsets(self) -> list[ResultSet]:
        """ResultSets produced by this statement that are still open."""
        return [child for child in self._children if isinstance(child, ResultSet)]

    def __enter__(self) -> Statement:
        return self
