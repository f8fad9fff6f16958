"""Optional SQL template sanitizer.

A connection created with a sanitizer applies it to every template passed
to ``prepare``; the check runs on the template, before any value is
substituted.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ifx_odbc.core.exceptions import SQLSanitizationError, UnterminatedLiteralError
from ifx_odbc.core.lexer import CODE, COMMENT, Token, tokenize

# Matches the first SQL keyword (used for verb allow-listing)
_FIRST_KEYWORD = re.compile(r"^\s*(\w+)")


def _tokens(sql: str) -> list[Token]:
    try:
        return tokenize(sql)
    except UnterminatedLiteralError as e:
        raise SQLSanitizationError(str(e)) from e


def _strip_comments(sql: str) -> str:
    """Remove SQL comments while preserving string literals and identifiers.

    A block comment becomes a single space so adjacent words stay apart.
    """
    parts: list[str] = []
    for token in _tokens(sql):
        if token.kind != COMMENT:
            parts.append(token.text)
        elif token.text.startswith("/*"):
            parts.append(" ")
    return "".join(parts)


def _check_single_statement(sql: str) -> None:
    """Raise if *sql* contains a semicolon followed by non-whitespace content."""
    tokens = _tokens(sql)
    for index, token in enumerate(tokens):
        if token.kind != CODE or ";" not in token.text:
            continue
        tail = token.text[token.text.index(";") + 1 :]
        rest = tail + "".join(t.text for t in tokens[index + 1 :] if t.kind != COMMENT)
        if rest.strip().strip(";").strip():
            raise SQLSanitizationError("Multiple SQL statements are not permitted")


def _check_verb(sql: str, allowed: frozenset[str]) -> None:
    """Raise if the leading SQL keyword is not in *allowed*."""
    m = _FIRST_KEYWORD.match(sql)
    if m:
        verb = m.group(1).upper()
        if verb not in allowed:
            raise SQLSanitizationError(
                f"SQL verb '{verb}' is not permitted; allowed: {sorted(allowed)}"
            )


@dataclass
class SQLSanitizer:
    """Configurable sanitizer for SQL templates.

    The sanitizer is defense in depth only. Values must still travel as
    placeholders (``?`` or ``:name``) so that they are escaped by the
    templater; never concatenate user input into a template.

    Attributes:
        strip_comments: Strip ``--`` and ``/* */`` comments from the template.
        block_multiple_statements: Reject templates with a statement-
            terminating ``;`` followed by more SQL (``SELECT 1; DROP TABLE t``).
        allowed_verbs: If not ``None``, only templates whose first keyword is
            in this set are accepted.
    """

    strip_comments: bool = True
    block_multiple_statements: bool = True
    allowed_verbs: frozenset[str] | None = None

    def sanitize(self, sql: str) -> str:
        """Apply all configured checks to *sql* and return the (cleaned) SQL.

        Raises:
            SQLSanitizationError: If any enabled check fails.
        """
        if self.strip_comments:
            sql = _strip_comments(sql)
        if self.block_multiple_statements:
            _check_single_statement(sql)
        if self.allowed_verbs is not None:
            _check_verb(sql, frozenset(v.upper() for v in self.allowed_verbs))
        return sql
