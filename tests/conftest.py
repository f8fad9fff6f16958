"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest

from ifx_odbc.core.catalog import InformixDialect
from ifx_odbc.core.connection import Connection, ConnectionConfig
from ifx_odbc.core.exceptions import ExecutionError


class FakeResult:
    def __init__(self, sql: str, rows: list[dict[str, Any]]) -> None:
        self.sql = sql
        self.rows = list(rows)


class FakeDriver:
    """In-memory driver that records every call made by the core.

    ``script`` maps a SQL prefix to the rows that statement returns; SQL
    starting with one of ``fail_prefixes`` is rejected like a driver error.
    """

    def __init__(self, script: dict[str, list[dict[str, Any]]] | None = None) -> None:
        self.script = script or {}
        self.executed: list[str] = []
        self.events: list[str] = []
        self.connected = 0
        self.fetch_calls = 0
        self.fail_prefixes = ["FAIL"]

    @property
    def dialect(self) -> InformixDialect:
        return InformixDialect()

    def connect(self, config: ConnectionConfig) -> str:
        self.connected += 1
        self.events.append("connect")
        return "native-conn"

    def execute(self, connection: Any, sql: str) -> FakeResult:
        self.executed.append(sql)
        if sql.startswith(tuple(self.fail_prefixes)):
            raise ExecutionError("[42000] syntax error")
        rows: list[dict[str, Any]] = []
        for prefix, scripted in self.script.items():
            if sql.startswith(prefix):
                rows = scripted
                break
        return FakeResult(sql, rows)

    def fetch(self, result: FakeResult) -> dict[str, Any] | None:
        self.fetch_calls += 1
        if not result.rows:
            return None
        return result.rows.pop(0)

    def close_result(self, result: FakeResult) -> None:
        self.events.append(f"close_result:{result.sql}")

    def disconnect(self, connection: Any) -> None:
        self.events.append("disconnect")


@pytest.fixture
def fake_driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def fake_conn(fake_driver: FakeDriver) -> Iterator[Connection]:
    """Connection backed by the recording FakeDriver."""
    conn = Connection(ConnectionConfig(dsn="fake"), driver=fake_driver)
    yield conn
    conn.close()


@pytest.fixture
def sqlite_config() -> ConnectionConfig:
    """SQLite in-memory connection config."""
    return ConnectionConfig(driver="sqlite", database=":memory:")


@pytest.fixture
def sqlite_conn(sqlite_config: ConnectionConfig) -> Iterator[Connection]:
    """Open in-memory SQLite connection, closed after the test."""
    conn = Connection(sqlite_config)
    yield conn
    conn.close()
