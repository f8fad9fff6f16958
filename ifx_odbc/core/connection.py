"""Connection configuration and management.

ConnectionConfig is a Pydantic model for type-safe connection config.
Connection owns the native connection handle and every Statement prepared
on it; drivers are loaded by name through a lazy import map.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel

from ifx_odbc.core.catalog import ColumnInfo, Dialect
from ifx_odbc.core.dsn import CONFIG_KEYS, parse_connection_string
from ifx_odbc.core.enums import RowShape
from ifx_odbc.core.exceptions import (  # noqa: A004
    AdapterError,
    ConfigurationError,
    ConnectionError,
    IfxOdbcError,
)
from ifx_odbc.core.lifecycle import Resource
from ifx_odbc.core.params import Scope
from ifx_odbc.core.statement import Statement
from ifx_odbc.core.transaction import Transaction
from ifx_odbc.core.traversal import Binding, Body

if TYPE_CHECKING:
    from ifx_odbc.adapters.protocol import Driver
    from ifx_odbc.core.resultset import ResultSet
    from ifx_odbc.core.sanitizer import SQLSanitizer

logger = logging.getLogger(__name__)

ISOLATION_LEVELS = ("", "readuncommitted", "readcommitted", "repeatableread", "serializable")


class ConnectionConfig(BaseModel):
    """Configuration for database connections."""

    driver: str = "odbc"
    dsn: str | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    host: str | None = None
    server: str | None = None
    service: str | None = None
    protocol: str | None = None
    timeout: int = 30
    encoding: str = ""
    isolation: str = ""
    readonly: bool = False
    extra: dict[str, str] = {}

    @classmethod
    def from_connection_string(cls, conn_str: str, driver: str = "odbc") -> ConnectionConfig:
        """Build a config from ``DSN=...;UID=...;PWD=...`` text.

        Keys without a config field (``DRIVER``, ``CLIENT_LOCALE`` ...) are
        kept in ``extra`` and passed through to the driver manager.
        """
        parsed = parse_connection_string(conn_str)
        by_key = {key: field for field, key in CONFIG_KEYS.items()}
        fields: dict[str, Any] = {"driver": driver}
        extra: dict[str, str] = {}
        for key, value in parsed.items():
            if key in by_key:
                fields[by_key[key]] = value
            else:
                extra[key] = value
        return cls(**fields, extra=extra)


# Driver name -> (module_path, class_name)
_DRIVER_MAP: dict[str, tuple[str, str]] = {
    "odbc": ("ifx_odbc.adapters.odbc", "OdbcDriver"),
    "informix": ("ifx_odbc.adapters.odbc", "OdbcDriver"),
    "sqlite": ("ifx_odbc.adapters.sqlite", "SqliteDriver"),
}


def _load_driver(driver: str) -> Any:
    """Load a driver by name."""
    driver_lower = driver.lower()
    if driver_lower not in _DRIVER_MAP:
        raise AdapterError(f"Unsupported database driver: {driver}")

    module_path, cls_name = _DRIVER_MAP[driver_lower]
    try:
        module = importlib.import_module(module_path)
        return getattr(module, cls_name)()
    except (ImportError, AttributeError) as e:
        raise AdapterError(f"Failed to load driver '{driver}': {e}") from e


class Connection(Resource):
    """An open database connection.

    Closing the connection closes every Statement prepared on it (and their
    ResultSets) before the native handle is released.
    """

    kind = "Connection"
    prefix = "conn"

    def __init__(
        self,
        config: ConnectionConfig,
        driver: Driver | None = None,
        sanitizer: SQLSanitizer | None = None,
    ) -> None:
        super().__init__()
        self.config = config
        self._driver = driver if driver is not None else _load_driver(config.driver)
        self._sanitizer = sanitizer
        self._options: dict[str, Any] = {
            "encoding": config.encoding,
            "isolation": config.isolation,
            "readonly": config.readonly,
            "timeout": config.timeout,
        }
        try:
            self._handle = self._driver.connect(config)
        except IfxOdbcError:
            self._closed = True
            raise
        except Exception as e:
            self._closed = True
            raise ConnectionError(f"Failed to connect: {e}") from e
        logger.info("Connected %s to %s", self.name, config.dsn or config.database or config.driver)

    @property
    def driver(self) -> Driver:
        return self._driver

    @property
    def dialect(self) -> Dialect:
        return self._driver.dialect

    @property
    def native_handle(self) -> Any:
        """The driver's connection object, for advanced use."""
        self._check_open()
        return self._handle

    # -- statements ---------------------------------------------------------

    def prepare(self, sql: str) -> Statement:
        """Create a Statement for *sql*. The template is scanned immediately."""
        self._check_open()
        if self._sanitizer is not None:
            sql = self._sanitizer.sanitize(sql)
        return Statement(self, sql)

    def statements(self) -> list[Statement]:
        """Statements prepared on this connection that are still open."""
        return [child for child in self._children if isinstance(child, Statement)]

    def execute(
        self,
        sql: str,
        params: Mapping[str, Any] | Sequence[Any] | Any = None,
        *,
        scopes: Sequence[Scope] = (),
    ) -> ResultSet:
        """Prepare and execute *sql*.

        The implicit Statement is closed together with the returned ResultSet.
        """
        stmt = self.prepare(sql)
        try:
            rs = stmt.execute(params, scopes=scopes)
        except BaseException:
            stmt.close()
            raise
        rs.closes_statement = True
        return rs

    def allrows(
        self,
        sql: str,
        params: Mapping[str, Any] | Sequence[Any] | Any = None,
        *,
        as_: RowShape | str = RowShape.DICTS,
        scopes: Sequence[Scope] = (),
    ) -> list[Any]:
        """Run *sql* and return every row. Statement and ResultSet are closed."""
        with self.prepare(sql) as stmt:
            return stmt.allrows(params, as_=as_, scopes=scopes)

    def foreach(
        self,
        sql: str,
        body: Body,
        params: Mapping[str, Any] | Sequence[Any] | Any = None,
        *,
        as_: RowShape | str = RowShape.DICTS,
        columns_var: Binding | None = None,
        scopes: Sequence[Scope] = (),
    ) -> int:
        """Run *sql* and call ``body(row)`` per row; return the rows visited."""
        with self.prepare(sql) as stmt:
            return stmt.foreach(body, params, as_=as_, columns_var=columns_var, scopes=scopes)

    def fetch_one(
        self,
        sql: str,
        params: Mapping[str, Any] | Sequence[Any] | Any = None,
    ) -> dict[str, Any] | None:
        with self.prepare(sql) as stmt:
            return stmt.fetch_one(params)

    def fetch_scalar(
        self,
        sql: str,
        params: Mapping[str, Any] | Sequence[Any] | Any = None,
    ) -> Any:
        with self.prepare(sql) as stmt:
            return stmt.fetch_scalar(params)

    def _internal(self, sql: str) -> list[dict[str, Any]]:
        # Fixed SQL built by the dialect; the sanitizer does not apply.
        self._check_open()
        with Statement(self, sql) as stmt:
            return stmt.allrows()

    # -- catalog ------------------------------------------------------------

    def tables(self, pattern: str = "%") -> list[str]:
        """Names of user tables matching *pattern* (``*``/``?`` globs allowed)."""
        rows = self._internal(self.dialect.tables_sql(pattern))
        return [str(row["tabname"]).rstrip() for row in rows]

    def columns(self, table: str, pattern: str = "%") -> dict[str, ColumnInfo]:
        """Columns of *table* matching *pattern*, in table order."""
        rows = self._internal(self.dialect.columns_sql(table, pattern))
        return {
            str(row["colname"]).rstrip(): ColumnInfo(
                type=str(row["coltype"]).strip(),
                precision=int(row["collength"] or 0),
            )
            for row in rows
        }

    def primarykeys(self, table: str) -> list[str]:
        """Primary key columns of *table*.

        Returns an empty list when the constraint catalog cannot be queried.
        """
        self._check_open()
        try:
            rows = self._internal(self.dialect.primarykeys_sql(table))
        except (IfxOdbcError, NotImplementedError):
            logger.warning("Primary key lookup failed for %s", table, exc_info=True)
            return []
        return [str(row["colname"]).rstrip() for row in rows]

    def foreignkeys(self, primary: str | None = None, foreign: str | None = None) -> list[Any]:
        """Not implemented: always returns an empty list."""
        self._check_open()
        return []

    # -- transactions -------------------------------------------------------

    def _run_fixed(self, sql: str) -> None:
        self._check_open()
        with Statement(self, sql) as stmt:
            stmt.execute().close()

    def begintransaction(self) -> None:
        self._run_fixed(self.dialect.begin_sql)

    def commit(self) -> None:
        self._run_fixed(self.dialect.commit_sql)

    def rollback(self) -> None:
        self._run_fixed(self.dialect.rollback_sql)

    def transaction(self) -> Transaction:
        """Create a transaction context manager on this connection."""
        self._check_open()
        return Transaction(self)

    # -- options ------------------------------------------------------------

    def configure(self, option: str | None = None, **options: Any) -> Any:
        """Get or set connection options.

        ``configure()`` returns all options, ``configure("timeout")`` one
        value, and ``configure(readonly=True)`` updates options.
        Known options: encoding, isolation, readonly, timeout.
        """
        self._check_open()
        if options:
            for key in options:
                self._check_option(key)
            for key, value in options.items():
                self._set_option(key, value)
            return None
        if option is not None:
            self._check_option(option)
            return self._options[option]
        return dict(self._options)

    def _check_option(self, name: str) -> None:
        if name not in self._options:
            raise ConfigurationError(
                f'unknown option "{name}": must be encoding, isolation, readonly, or timeout'
            )

    def _set_option(self, name: str, value: Any) -> None:
        if name == "timeout":
            if value != self._options["timeout"]:
                raise ConfigurationError("timeout is fixed once the connection is open")
            return
        if name == "isolation":
            value = str(value).lower()
            if value not in ISOLATION_LEVELS:
                raise ConfigurationError(
                    f"Unknown isolation level {value!r}: must be one of {', '.join(ISOLATION_LEVELS[1:])}"
                )
        elif name == "readonly":
            value = bool(value)
        else:
            value = str(value)
        self._options[name] = value

    def info(self) -> dict[str, Any]:
        """Summary of this connection for diagnostics (no password)."""
        return {
            "name": self.name,
            "driver": self.config.driver,
            "dialect": self.dialect.name,
            "dsn": self.config.dsn,
            "database": self.config.database,
            "user": self.config.user,
            "closed": self.closed,
            "statements": len(self.statements()),
        }

    # -- lifecycle ----------------------------------------------------------

    def __enter__(self) -> Connection:
        return self

    def _release(self) -> None:
        try:
            self._driver.disconnect(self._handle)
        except Exception:
            logger.warning("Disconnect failed for %s", self.name, exc_info=True)
        logger.info("Disconnected %s", self.name)


def connect(
    target: str | ConnectionConfig,
    user: str | None = None,
    password: str | None = None,
    *,
    driver: str = "odbc",
    sanitizer: SQLSanitizer | None = None,
    **options: Any,
) -> Connection:
    """Open a Connection.

    *target* is a ``KEY=VALUE;...`` connection string, a bare DSN name (no
    ``=``), or a ready ConnectionConfig. *user* and *password* override the
    target's values; remaining keyword arguments set config fields such as
    ``timeout`` or ``readonly``.

    Example::

        with connect("DSN=stores;UID=informix", password="secret") as db:
            rows = db.allrows("SELECT * FROM customer WHERE state = ?", ["CA"])
    """
    if isinstance(target, ConnectionConfig):
        config = target
    elif "=" in target:
        config = ConnectionConfig.from_connection_string(target, driver=driver)
    else:
        config = ConnectionConfig(driver=driver, dsn=target)

    unknown = sorted(set(options) - set(ConnectionConfig.model_fields))
    if unknown:
        raise ConfigurationError(f"Unknown connection option(s): {', '.join(unknown)}")
    updates: dict[str, Any] = dict(options)
    if user is not None:
        updates["user"] = user
    if password is not None:
        updates["password"] = password
    if updates:
        config = ConnectionConfig.model_validate({**config.model_dump(), **updates})
    return Connection(config, sanitizer=sanitizer)
