"""ifx_odbc - Informix database access over ODBC with SQL templating."""

from __future__ import annotations

from ifx_odbc.core.catalog import ColumnInfo, Dialect, InformixDialect, SqliteDialect
from ifx_odbc.core.connection import Connection, ConnectionConfig, connect
from ifx_odbc.core.dsn import (
    build_connection_string,
    datasources,
    drivers,
    parse_connection_string,
    read_dsn,
    resolve_config,
)
from ifx_odbc.core.enums import ParamType, RowShape, Signal
from ifx_odbc.core.exceptions import (
    AdapterError,
    ClosedResourceError,
    ConfigurationError,
    ConnectionError,  # noqa: A004
    ExecutionError,
    IfxOdbcError,
    MissingParameter,
    MultipleRowsError,
    ParameterCountMismatch,
    ParameterTypeError,
    SQLSanitizationError,
    TemplateError,
    TransactionError,
    TransactionStateError,
    UnterminatedLiteralError,
)
from ifx_odbc.core.params import render
from ifx_odbc.core.quoting import quote
from ifx_odbc.core.resultset import ResultSet
from ifx_odbc.core.sanitizer import SQLSanitizer
from ifx_odbc.core.statement import ParamInfo, Statement
from ifx_odbc.core.transaction import Transaction
from ifx_odbc.core.traversal import Binding

__all__ = [
    # Connection
    "connect",
    "Connection",
    "ConnectionConfig",
    # Statements and results
    "Statement",
    "ParamInfo",
    "ResultSet",
    "Binding",
    # Templating
    "render",
    "quote",
    # Sanitizer
    "SQLSanitizer",
    # Transaction
    "Transaction",
    # Catalog
    "ColumnInfo",
    "Dialect",
    "InformixDialect",
    "SqliteDialect",
    # Data sources
    "parse_connection_string",
    "build_connection_string",
    "read_dsn",
    "resolve_config",
    "datasources",
    "drivers",
    # Enums
    "RowShape",
    "ParamType",
    "Signal",
    # Exceptions
    "IfxOdbcError",
    "TemplateError",
    "ParameterCountMismatch",
    "MissingParameter",
    "ParameterTypeError",
    "UnterminatedLiteralError",
    "ExecutionError",
    "MultipleRowsError",
    "SQLSanitizationError",
    "ClosedResourceError",
    "TransactionError",
    "TransactionStateError",
    "ConfigurationError",
    "AdapterError",
    "ConnectionError",
]
