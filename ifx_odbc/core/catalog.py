"""Catalog and transaction SQL per database dialect.

Catalog queries are plain SQL run through the normal execute/fetch path.
Every dialect returns the same column names so the connection can read
the results without knowing the engine:

* tables       -> ``tabname``
* columns      -> ``colname``, ``coltype``, ``collength``
* primary keys -> ``colname``
"""

from __future__ import annotations

from dataclasses import dataclass

from ifx_odbc.core.quoting import like_pattern, quote


@dataclass(frozen=True)
class ColumnInfo:
    """Column description returned by ``Connection.columns``."""

    type: str
    precision: int


class Dialect:
    """Base dialect: ANSI transaction statements, no catalog support."""

    name = "ansi"
    begin_sql = "BEGIN"
    commit_sql = "COMMIT"
    rollback_sql = "ROLLBACK"

    def tables_sql(self, pattern: str) -> str:
        raise NotImplementedError(f"{self.name} dialect has no table catalog")

    def columns_sql(self, table: str, pattern: str) -> str:
        raise NotImplementedError(f"{self.name} dialect has no column catalog")

    def primarykeys_sql(self, table: str) -> str:
        raise NotImplementedError(f"{self.name} dialect has no constraint catalog")


class InformixDialect(Dialect):
    """Informix system catalog (systables, syscolumns, sysconstraints)."""

    name = "informix"
    begin_sql = "BEGIN WORK"
    commit_sql = "COMMIT WORK"
    rollback_sql = "ROLLBACK WORK"

    def tables_sql(self, pattern: str) -> str:
        return (
            "SELECT tabname FROM systables"
            f" WHERE tabtype = 'T' AND tabname LIKE {quote(like_pattern(pattern))}"
        )

    def columns_sql(self, table: str, pattern: str) -> str:
        return (
            "SELECT c.colname, c.coltype, c.collength"
            " FROM syscolumns c, systables t"
            f" WHERE c.tabid = t.tabid AND t.tabname = {quote(table)}"
            f" AND c.colname LIKE {quote(like_pattern(pattern))}"
            " ORDER BY c.colno"
        )

    def primarykeys_sql(self, table: str) -> str:
        parts = ", ".join(f"idx.part{i}" for i in range(1, 9))
        return (
            "SELECT col.colname"
            " FROM sysconstraints con, systables tab, sysindexes idx, syscolumns col"
            " WHERE con.tabid = tab.tabid"
            " AND con.idxname = idx.idxname"
            " AND tab.tabid = col.tabid"
            " AND con.constrtype = 'P'"
            f" AND tab.tabname = {quote(table)}"
            f" AND col.colno IN ({parts})"
        )


class SqliteDialect(Dialect):
    """SQLite catalog (sqlite_master and the pragma_table_info function)."""

    name = "sqlite"

    def tables_sql(self, pattern: str) -> str:
        return (
            "SELECT name AS tabname FROM sqlite_master"
            f" WHERE type = 'table' AND name LIKE {quote(like_pattern(pattern))}"
            " ORDER BY name"
        )

    def columns_sql(self, table: str, pattern: str) -> str:
        return (
            "SELECT name AS colname, type AS coltype, 0 AS collength"
            f" FROM pragma_table_info({quote(table)})"
            f" WHERE name LIKE {quote(like_pattern(pattern))}"
            " ORDER BY cid"
        )

    def primarykeys_sql(self, table: str) -> str:
        return (
            "SELECT name AS colname"
            f" FROM pragma_table_info({quote(table)})"
            " WHERE pk > 0 ORDER BY pk"
        )
