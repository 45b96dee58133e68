from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class PooledSqliteConnection:
    """sqlite3 connection wrapper whose ``close`` hands it back to the pool."""

    def __init__(self, pool: SqliteTestPool, connection: sqlite3.Connection) -> None:
        self._pool = pool
        self._connection = connection
        self.cursors: list[sqlite3.Cursor] = []

    def cursor(self) -> sqlite3.Cursor:
        cursor = self._connection.cursor()
        self.cursors.append(cursor)
        return cursor

    def close(self) -> None:
        self._connection.commit()
        self._pool.give_back(self)

    def execute(self, sql: str, parameters: Any = ()) -> sqlite3.Cursor:
        return self._connection.execute(sql, parameters)


class SqliteTestPool:
    """Minimal pool over a file database, counting borrows and returns."""

    def __init__(self, database: Path) -> None:
        self.database = database
        self.idle: list[PooledSqliteConnection] = []
        self.borrowed = 0
        self.returned = 0
        self._closed = False

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def is_running(self) -> bool:
        return not self._closed

    def borrow(self) -> PooledSqliteConnection:
        self.borrowed += 1
        if self.idle:
            return self.idle.pop()
        connection = sqlite3.connect(str(self.database), check_same_thread=False)
        return PooledSqliteConnection(self, connection)

    def give_back(self, connection: PooledSqliteConnection) -> None:
        self.returned += 1
        self.idle.append(connection)

    @property
    def outstanding(self) -> int:
        return self.borrowed - self.returned

    def close(self) -> None:
        self._closed = True
        for connection in self.idle:
            connection._connection.close()
        self.idle.clear()


@pytest.fixture
def sqlite_pool(tmp_path: Path) -> Any:
    pool = SqliteTestPool(tmp_path / "querybridge.db")
    yield pool
    pool.close()


@pytest.fixture
def mock_cursor() -> MagicMock:
    """A DB-API cursor returning two rows for any statement."""
    cursor = MagicMock(name="cursor")
    cursor.description = [("id", None), ("name", None)]
    cursor.fetchall.return_value = [(1, "alpha"), (2, "beta")]
    cursor.rowcount = -1
    return cursor


@pytest.fixture
def mock_connection(mock_cursor: MagicMock) -> MagicMock:
    connection = MagicMock(name="connection")
    connection.cursor.return_value = mock_cursor
    return connection


@pytest.fixture
def mock_pool(mock_connection: MagicMock) -> MagicMock:
    pool = MagicMock(name="pool")
    pool.is_closed = False
    pool.is_running = True
    pool.borrow.return_value = mock_connection
    return pool
