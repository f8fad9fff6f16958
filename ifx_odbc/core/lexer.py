"""SQL tokenizer shared by the placeholder scanner and the sanitizer.

Splits SQL text into four token kinds:

* ``string``     -- single-quoted literal, ``''`` escapes a quote
* ``identifier`` -- double-quoted identifier, ``""`` escapes a quote
* ``comment``    -- ``--`` line comment (without the newline) or ``/* */`` block
* ``code``       -- everything else

Concatenating the text of all tokens reproduces the input exactly.
"""

from __future__ import annotations

from typing import NamedTuple

from ifx_odbc.core.exceptions import UnterminatedLiteralError

CODE = "code"
STRING = "string"
IDENTIFIER = "identifier"
COMMENT = "comment"

_QUOTES = {"'": (STRING, "string literal"), '"': (IDENTIFIER, "double-quoted identifier")}


class Token(NamedTuple):
    kind: str
    text: str
    start: int


def _scan_quoted(sql: str, i: int, quote: str, what: str) -> int:
    """Return the index just past the quoted run starting at *i*."""
    n = len(sql)
    j = i + 1
    while j < n:
        if sql[j] == quote:
            j += 1
            if j >= n or sql[j] != quote:
                return j  # end of literal
            j += 1  # doubled quote escape
        else:
            j += 1
    raise UnterminatedLiteralError(what)


def tokenize(sql: str) -> list[Token]:
    """Split *sql* into tokens.

    Raises:
        UnterminatedLiteralError: If a string literal, quoted identifier or
            block comment is not closed.
    """
    tokens: list[Token] = []
    i = 0
    n = len(sql)
    last = 0

    def flush(upto: int) -> None:
        if upto > last:
            tokens.append(Token(CODE, sql[last:upto], last))

    while i < n:
        ch = sql[i]
        if ch in _QUOTES:
            kind, what = _QUOTES[ch]
            flush(i)
            j = _scan_quoted(sql, i, ch, what)
            tokens.append(Token(kind, sql[i:j], i))
            last = i = j
        elif sql.startswith("--", i):
            flush(i)
            j = sql.find("\n", i)
            if j == -1:
                j = n
            tokens.append(Token(COMMENT, sql[i:j], i))
            last = i = j
        elif sql.startswith("/*", i):
            flush(i)
            j = sql.find("*/", i + 2)
            if j == -1:
                raise UnterminatedLiteralError("block comment")
            tokens.append(Token(COMMENT, sql[i : j + 2], i))
            last = i = j + 2
        else:
            i += 1

    flush(n)
    return tokens
