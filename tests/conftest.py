from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from dbfactory.config import ConnectionStrings, ConnectionStringSettings


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    path = tmp_path / "app.db"
    conn = sqlite3.connect(path)
    conn.executescript(
        """
        CREATE TABLE items (id INTEGER PRIMARY KEY, name TEXT NOT NULL);
        INSERT INTO items (id, name) VALUES (10, 'ten'), (20, 'twenty');
        """
    )
    conn.commit()
    conn.close()
    return path


@pytest.fixture
def connection_strings(db_path: Path) -> ConnectionStrings:
    return ConnectionStrings(
        [
            ConnectionStringSettings("Other", "Server=db01;Database=other", "pymssql"),
            ConnectionStringSettings("Local", f"Data Source={db_path}", "sqlite3"),
        ]
    )


@pytest.fixture
def read_names(db_path: Path):
    """Read the items table through a separate connection."""

    def _read() -> dict:
        conn = sqlite3.connect(db_path)
        try:
            return dict(conn.execute("SELECT id, name FROM items ORDER BY id").fetchall())
        finally:
            conn.close()

    return _read
