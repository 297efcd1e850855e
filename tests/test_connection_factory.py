"""Tests for the provider registry and the SQLite driver helpers."""

from __future__ import annotations

import pytest

from dbfactory.infra.db import (
    PymssqlDriver,
    PyodbcDriver,
    SqliteDriver,
    get_driver,
    register_driver,
)
from dbfactory.infra.db import connection_factory
from dbfactory.infra.db.sqlite import database_path


@pytest.mark.parametrize(
    "provider, expected",
    [
        ("", PymssqlDriver),
        ("pymssql", PymssqlDriver),
        ("System.Data.SqlClient", PymssqlDriver),
        ("PYODBC", PyodbcDriver),
        (" odbc ", PyodbcDriver),
        ("sqlite3", SqliteDriver),
    ],
)
def test_get_driver(provider: str, expected: type) -> None:
    assert isinstance(get_driver(provider), expected)


def test_unknown_provider_raises() -> None:
    with pytest.raises(KeyError, match="oracle"):
        get_driver("oracle")


def test_register_driver(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(connection_factory, "_registry", dict(connection_factory._registry))

    register_driver("Custom", SqliteDriver)

    assert isinstance(get_driver("custom"), SqliteDriver)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("Data Source=/tmp/app.db", "/tmp/app.db"),
        ("Data Source=/tmp/app.db;Version=3;", "/tmp/app.db"),
        ("/tmp/app.db", "/tmp/app.db"),
        (":memory:", ":memory:"),
    ],
)
def test_sqlite_database_path(value: str, expected: str) -> None:
    assert database_path(value) == expected


def test_sqlite_database_path_requires_data_source() -> None:
    with pytest.raises(ValueError):
        database_path("Version=3")
