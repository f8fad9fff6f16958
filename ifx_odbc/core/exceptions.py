"""ifx_odbc exception hierarchy.

Raw driver exceptions never leave the public API: adapters and the
statement layer wrap them and chain the original with ``raise ... from``.
"""

from __future__ import annotations

# Executed SQL attached to execution errors is cut to this many characters.
SQL_ERROR_EXCERPT = 500


class IfxOdbcError(Exception):
    """Base exception for all ifx_odbc errors."""


# --- Templating ---


class TemplateError(IfxOdbcError):
    """Base for SQL templating errors. Nothing is sent to the driver."""


class ParameterCountMismatch(TemplateError):
    """Raised when positional values and ``?`` placeholders differ in number."""

    def __init__(self, template: str, expected: int, supplied: int) -> None:
        self.template = template
        self.expected = expected
        self.supplied = supplied
        if supplied > expected:
            detail = "More bind values than placeholders in SQL"
        else:
            detail = "Not enough bind values for SQL"
        super().__init__(
            f"{detail}: {template} (expected {expected}, got {supplied})"
        )


class MissingParameter(TemplateError):
    """Raised when a named placeholder cannot be resolved."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f'No value supplied for parameter "{name}"')


class ParameterTypeError(TemplateError):
    """Raised when a value does not fit its explicit ``numeric`` type hint."""

    def __init__(self, name: str | int, value: object) -> None:
        self.name = name
        self.value = value
        super().__init__(
            f"Parameter {name!r} is declared numeric but got {value!r}"
        )


class UnterminatedLiteralError(TemplateError):
    """Raised when SQL text ends inside a quoted literal or block comment."""

    def __init__(self, what: str) -> None:
        self.what = what
        super().__init__(f"Unterminated {what} detected in SQL")


# --- Execution ---


class ExecutionError(IfxOdbcError):
    """Raised when the driver rejects a SQL statement.

    The connection stays usable. ``sql`` holds the final substituted SQL
    (truncated) when the error passed through a Statement.
    """

    prefix = "SQL execution failed: "

    def __init__(self, detail: str, sql: str | None = None) -> None:
        self.detail = detail
        self.sql = sql[:SQL_ERROR_EXCERPT] if sql is not None else None
        message = f"{self.prefix}{detail}"
        if self.sql is not None:
            message += f"\nSQL: {self.sql}"
        super().__init__(message)


class MultipleRowsError(ExecutionError):
    """Raised when fetch_one encounters more than one row."""

    prefix = ""

    def __init__(self, sql: str, row_count: int) -> None:
        self.row_count = row_count
        super().__init__(f"fetch_one returned {row_count} rows (expected 0 or 1)", sql)


class SQLSanitizationError(ExecutionError):
    """Raised when a SQL template fails a sanitization check."""

    prefix = "SQL sanitization failed: "


# --- Lifecycle ---


class ClosedResourceError(IfxOdbcError):
    """Raised on use of a closed Connection, Statement or ResultSet."""

    def __init__(self, kind: str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"{kind} '{name}' has been closed")


# --- Transaction ---


class TransactionError(IfxOdbcError):
    """Base for transaction errors."""


class TransactionStateError(TransactionError):
    """Raised on invalid transaction state transitions."""

    def __init__(self, current_state: str, attempted_action: str) -> None:
        self.current_state = current_state
        self.attempted_action = attempted_action
        super().__init__(f"Cannot {attempted_action} transaction in state '{current_state}'")


# --- Configuration ---


class ConfigurationError(IfxOdbcError):
    """Raised for malformed connection strings or unknown options."""


# --- Adapter ---


class AdapterError(IfxOdbcError):
    """Base for driver adapter errors."""


class ConnectionError(AdapterError):  # noqa: A001
    """Raised on connection failures."""
