"""Integration test for the SQLite driver.

Covers: templated statements, row traversal, catalog queries and
transactions end-to-end against a real SQLite database.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from ifx_odbc import (
    Binding,
    ClosedResourceError,
    ColumnInfo,
    Connection,
    ExecutionError,
    ParamType,
    Signal,
    connect,
)

# --- Fixtures ---


@pytest.fixture
def db(sqlite_conn: Connection) -> Iterator[Connection]:
    """SQLite connection with a small Informix-like catalog table."""
    sqlite_conn.allrows(
        "CREATE TABLE systables (tabid INTEGER PRIMARY KEY, tabname TEXT NOT NULL, "
        "tabtype TEXT DEFAULT 'T')"
    )
    stmt = sqlite_conn.prepare("INSERT INTO systables (tabid, tabname) VALUES (?, ?)")
    for tabid, tabname in enumerate(
        ["systables", "syscolumns", "sysindices", "systabauth", "customer"], start=1
    ):
        stmt.execute([tabid, tabname])
    stmt.close()
    yield sqlite_conn


# --- Integration Tests ---


@pytest.mark.integration
class TestSqliteQueries:
    def test_named_numeric_hints(self, db: Connection) -> None:
        stmt = db.prepare(
            "SELECT tabname FROM systables WHERE tabid < :max ORDER BY tabid LIMIT :n"
        )
        stmt.paramtype("n", ParamType.NUMERIC)
        stmt.paramtype("max", ParamType.NUMERIC)
        rows = stmt.allrows({"n": 3, "max": 10}, as_="lists")
        assert rows == [["systables"], ["syscolumns"], ["sysindices"]]

    def test_quotes_round_trip(self, db: Connection) -> None:
        db.allrows(
            "INSERT INTO systables (tabid, tabname) VALUES (:id, :name)",
            {"id": 99, "name": "O'Brien's --table"},
        )
        name = db.fetch_scalar("SELECT tabname FROM systables WHERE tabid = ?", [99])
        assert name == "O'Brien's --table"

    def test_string_hint_keeps_text(self, db: Connection) -> None:
        stmt = db.prepare("SELECT typeof(:v) AS t")
        assert stmt.fetch_scalar({"v": "0042"}) == "integer"
        stmt.paramtype("v", "string")
        assert stmt.fetch_scalar({"v": "0042"}) == "text"

    def test_null_value(self, db: Connection) -> None:
        assert db.fetch_scalar("SELECT :v IS NULL", {"v": None}) == 1

    def test_columns_before_rows(self, db: Connection) -> None:
        rs = db.execute("SELECT tabid, tabname FROM systables ORDER BY tabid")
        assert rs.columns() == ["tabid", "tabname"]
        assert rs.nextlist() == [1, "systables"]
        assert rs.nextdict() == {"tabid": 2, "tabname": "syscolumns"}
        rs.close()

    def test_fetchall(self, db: Connection) -> None:
        rs = db.execute("SELECT tabid FROM systables WHERE tabid <= 2 ORDER BY tabid")
        assert rs.fetchall() == [["tabid"], [1], [2]]

    def test_foreach_stop(self, db: Connection) -> None:
        seen: list[str] = []

        def body(row: dict[str, object]) -> Signal | None:
            seen.append(str(row["tabname"]))
            return Signal.STOP if len(seen) == 2 else None

        columns = Binding()
        db.foreach(
            "SELECT tabname FROM systables ORDER BY tabid", body, columns_var=columns
        )
        assert seen == ["systables", "syscolumns"]
        assert columns.value == ["tabname"]
        assert db.statements() == []

    def test_execution_error_keeps_connection(self, db: Connection) -> None:
        with pytest.raises(ExecutionError, match="no such table") as exc:
            db.execute("SELECT * FROM missing WHERE a = ?", ["x"])
        assert exc.value.sql == "SELECT * FROM missing WHERE a = 'x'"
        assert db.fetch_scalar("SELECT COUNT(*) FROM systables") == 5


@pytest.mark.integration
class TestSqliteCatalog:
    def test_tables(self, db: Connection) -> None:
        assert db.tables() == ["systables"]
        assert db.tables("sys*") == ["systables"]
        assert db.tables("nothing*") == []

    def test_columns(self, db: Connection) -> None:
        cols = db.columns("systables")
        assert list(cols) == ["tabid", "tabname", "tabtype"]
        assert cols["tabid"] == ColumnInfo(type="INTEGER", precision=0)
        assert list(db.columns("systables", "tab?ame")) == ["tabname"]

    def test_primarykeys(self, db: Connection) -> None:
        assert db.primarykeys("systables") == ["tabid"]
        assert db.primarykeys("missing") == []


@pytest.mark.integration
class TestSqliteTransactions:
    def test_rollback(self, db: Connection) -> None:
        with pytest.raises(RuntimeError), db.transaction() as tx:
            tx.execute("DELETE FROM systables")
            raise RuntimeError("undo")
        assert db.fetch_scalar("SELECT COUNT(*) FROM systables") == 5

    def test_commit(self, db: Connection) -> None:
        with db.transaction() as tx:
            tx.execute("DELETE FROM systables WHERE tabid = ?", [5])
        assert db.fetch_scalar("SELECT COUNT(*) FROM systables") == 4

    def test_manual_statements(self, db: Connection) -> None:
        db.begintransaction()
        db.allrows("DELETE FROM systables")
        db.rollback()
        assert db.fetch_scalar("SELECT COUNT(*) FROM systables") == 5


@pytest.mark.integration
class TestSqliteFileDatabase:
    def test_connection_string_and_reopen(self, tmp_path: Path) -> None:
        path = tmp_path / "test.db"
        with connect(f"DATABASE={path}", driver="sqlite") as conn:
            conn.allrows("CREATE TABLE t (a TEXT)")
            conn.allrows("INSERT INTO t VALUES (?)", ["kept"])
            stmt = conn.prepare("SELECT a FROM t")
            rs = stmt.execute()

        assert rs.closed and stmt.closed
        with pytest.raises(ClosedResourceError):
            rs.nextlist()

        with connect(str(path), driver="sqlite") as conn:
            assert conn.allrows("SELECT a FROM t") == [{"a": "kept"}]
