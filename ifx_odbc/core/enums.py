"""Enumerations shared across the access layer."""

from __future__ import annotations

from enum import Enum


class RowShape(str, Enum):
    """Shape of a materialized row: ordered list or name-keyed dict."""

    LISTS = "lists"
    DICTS = "dicts"


class ParamType(str, Enum):
    """Explicit parameter type hints understood by the quoting policy."""

    STRING = "string"
    NUMERIC = "numeric"


class Signal(Enum):
    """Value returned by an iteration body to steer the traversal."""

    CONTINUE = "continue"
    STOP = "stop"
