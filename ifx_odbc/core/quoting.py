"""Escaping and quoting of literal values.

The quoting policy, in order of precedence:

1. ``force_string`` quotes everything.
2. An explicit type hint for the parameter quotes unless the hint is
   exactly ``"numeric"``.
3. Otherwise the value is auto-detected: text that is, in its entirety, a
   valid integer or floating-point literal is emitted bare.

Auto-detection has a known limitation: identifier-like codes with leading
zeros (``"0001234"``) are clean numeric text and are emitted unquoted, so
the engine may read them as numbers. Give such parameters the ``"string"``
hint to keep them quoted.
"""

from __future__ import annotations

import re
from typing import Any

from ifx_odbc.core.enums import ParamType
from ifx_odbc.core.exceptions import ParameterTypeError

_NUMERIC_LITERAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


def to_text(value: Any) -> str:
    """Render *value* as the text that goes between (or without) quotes."""
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def is_numeric_literal(text: str) -> bool:
    """Return True if *text* is entirely an integer or float literal."""
    return _NUMERIC_LITERAL.fullmatch(text) is not None


def quote(value: Any) -> str:
    """Double every single quote in *value* and wrap it in single quotes."""
    return "'" + to_text(value).replace("'", "''") + "'"


def should_quote(value: Any, hint: str | None = None, force_string: bool = False) -> bool:
    """Decide whether *value* is emitted as a quoted string literal."""
    if force_string:
        return True
    if hint is not None:
        return hint != ParamType.NUMERIC.value
    return not is_numeric_literal(to_text(value))


def literal(
    value: Any,
    hint: str | None = None,
    force_string: bool = False,
    *,
    name: str | int = "?",
) -> str:
    """Render *value* as a SQL literal following the quoting policy.

    ``None`` becomes ``NULL`` (or ``''`` when every value is forced to a
    string).

    Raises:
        ParameterTypeError: If a ``numeric`` hint is given a value that is
            not a numeric literal.
    """
    if value is None:
        return "''" if force_string else "NULL"
    if should_quote(value, hint, force_string):
        return quote(value)
    text = to_text(value)
    if not is_numeric_literal(text):
        raise ParameterTypeError(name, value)
    return text


def normalize_hint(hint: ParamType | str | None) -> str | None:
    """Return the hint as a lower-case type name (``None`` stays ``None``)."""
    if hint is None:
        return None
    if isinstance(hint, ParamType):
        return hint.value
    return str(hint).strip().lower()


def like_pattern(pattern: str) -> str:
    """Translate a glob (``*``, ``?``) into a SQL LIKE pattern (``%``, ``_``)."""
    return pattern.replace("*", "%").replace("?", "_")
