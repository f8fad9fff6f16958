"""Placeholder scanning and textual parameter substitution.

Templates use either positional ``?`` placeholders or named ``:name``
placeholders, never both. Placeholders inside string literals, quoted
identifiers and comments are left alone, as are ``::type`` casts and
``database:table`` references.

Substitution is purely textual: the rendered SQL is sent to the driver as
is, so every value goes through :func:`ifx_odbc.core.quoting.literal`.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Union

from ifx_odbc.core.exceptions import MissingParameter, ParameterCountMismatch, TemplateError
from ifx_odbc.core.lexer import CODE, tokenize
from ifx_odbc.core.quoting import literal, normalize_hint

# Matches :name but not ::typecast and not inside words (db:table)
# Negative lookbehind for : (handles ::), \w (handles mid-word colons)
_PARAM_PATTERN = re.compile(r"(?<![:\w]):([A-Za-z_][A-Za-z0-9_]*)(?![A-Za-z0-9_])|\?")

# Default number of enclosing scopes searched for unbound named parameters.
MAX_SCOPE_DEPTH = 3

Scope = Union[Mapping[str, Any], Callable[[str], Any]]
ParamTypes = Mapping[Union[str, int], str]


@dataclass(frozen=True)
class Placeholder:
    """A placeholder occurrence: ``name`` is ``None`` for ``?``."""

    name: str | None
    start: int
    end: int

    @property
    def positional(self) -> bool:
        return self.name is None


@lru_cache(maxsize=256)
def _scan(sql: str) -> tuple[Placeholder, ...]:
    found: list[Placeholder] = []
    for token in tokenize(sql):
        if token.kind != CODE:
            continue
        for match in _PARAM_PATTERN.finditer(token.text):
            found.append(
                Placeholder(
                    match.group(1),
                    token.start + match.start(),
                    token.start + match.end(),
                )
            )
    return tuple(found)


def scan_placeholders(sql: str) -> list[Placeholder]:
    """Return every placeholder in *sql*, left to right."""
    return list(_scan(sql))


def placeholder_names(sql: str) -> list[str]:
    """Distinct named placeholders in order of first appearance."""
    seen: dict[str, None] = {}
    for ph in _scan(sql):
        if ph.name is not None:
            seen.setdefault(ph.name, None)
    return list(seen)


def positional_count(sql: str) -> int:
    """Number of ``?`` placeholders in *sql*."""
    return sum(1 for ph in _scan(sql) if ph.positional)


def coerce_params(
    params: Mapping[str, Any] | Sequence[Any] | Any,
) -> Mapping[str, Any] | tuple[Any, ...] | None:
    """Normalize *params* to a mapping, tuple, or None.

    * ``None`` / mapping -> returned as-is (named substitution).
    * ``tuple`` / ``list`` -> converted to ``tuple`` (positional substitution).
    * Any other scalar (including ``str``) -> wrapped in a one-element tuple.
    """
    if params is None or isinstance(params, Mapping):
        return params
    if isinstance(params, (tuple, list)):
        return tuple(params)
    return (params,)


def _lookup(
    name: str,
    params: Mapping[str, Any] | None,
    scopes: Sequence[Scope],
    depth: int,
) -> Any:
    if params is not None and name in params:
        return params[name]
    for scope in list(scopes)[:depth]:
        if isinstance(scope, Mapping):
            if name in scope:
                return scope[name]
            continue
        try:
            return scope(name)
        except LookupError:
            continue
    raise MissingParameter(name)


def render(
    template: str,
    params: Mapping[str, Any] | Sequence[Any] | Any = None,
    *,
    types: ParamTypes | None = None,
    force_string: bool = False,
    scopes: Sequence[Scope] = (),
    max_scope_depth: int = MAX_SCOPE_DEPTH,
) -> str:
    """Substitute placeholders in *template* with escaped literals.

    Args:
        template: SQL text with ``?`` or ``:name`` placeholders (or none).
        params: Mapping for named templates, sequence (or single scalar) for
            positional ones.
        types: Explicit type hints keyed by name, or by 1-based position for
            ``?`` placeholders.
        force_string: Quote every value regardless of hints.
        scopes: Fallback lookups for named parameters missing from *params*,
            nearest first. Each is a mapping or a callable raising
            ``KeyError`` for unknown names.
        max_scope_depth: How many of *scopes* are searched.

    Returns:
        The fully substituted SQL.

    Raises:
        ParameterCountMismatch: Positional value count differs from the
            placeholder count.
        MissingParameter: A named placeholder could not be resolved.
        ParameterTypeError: A ``numeric`` hint got a non-numeric value.
        TemplateError: The template mixes placeholder styles, or the
            parameter container does not fit the template.
    """
    placeholders = _scan(template)
    types = types or {}
    coerced = coerce_params(params)

    named = [ph for ph in placeholders if not ph.positional]
    positional = [ph for ph in placeholders if ph.positional]
    if named and positional:
        raise TemplateError(f"SQL mixes positional and named placeholders: {template}")

    replacements: list[str] = []
    if named:
        if coerced is not None and not isinstance(coerced, Mapping):
            raise TemplateError(
                f"Named placeholders need a mapping of values, got a sequence: {template}"
            )
        resolved: dict[str, str] = {}
        for ph in named:
            name = str(ph.name)
            if name not in resolved:
                value = _lookup(name, coerced, scopes, max_scope_depth)
                hint = normalize_hint(types.get(name))
                resolved[name] = literal(value, hint, force_string, name=name)
            replacements.append(resolved[name])
    else:
        if isinstance(coerced, Mapping):
            if positional:
                raise TemplateError(
                    f"Positional placeholders need a sequence of values, got a mapping: {template}"
                )
            values: tuple[Any, ...] = ()
        else:
            values = coerced or ()
        if len(values) != len(positional):
            raise ParameterCountMismatch(template, len(positional), len(values))
        for position, value in enumerate(values, start=1):
            hint = normalize_hint(types.get(position))
            replacements.append(literal(value, hint, force_string, name=position))

    parts: list[str] = []
    last = 0
    for ph, text in zip(placeholders, replacements, strict=True):
        parts.append(template[last : ph.start])
        # keep "-" followed by "-5" from turning into a line comment
        if text.startswith("-") and parts[-1].endswith("-"):
            parts.append(" ")
        parts.append(text)
        last = ph.end
    parts.append(template[last:])
    return "".join(parts)
