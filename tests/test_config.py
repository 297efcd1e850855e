"""Tests for the connection-string store."""

from __future__ import annotations

from pathlib import Path

import pytest

from dbfactory.config import ConnectionStrings, ConnectionStringSettings, load_connection_strings
from dbfactory.errors import ConfigurationError


def test_find_is_case_insensitive() -> None:
    strings = ConnectionStrings([ConnectionStringSettings("Promos", "Server=a")])

    assert strings.get_connection_string("PROMOS") == "Server=a"
    assert strings.get_connection_string("promos") == "Server=a"


def test_missing_name_resolves_to_empty_string() -> None:
    strings = ConnectionStrings([ConnectionStringSettings("Promos", "Server=a")])

    assert strings.get_connection_string("mesas") == ""
    assert strings.find("mesas") is None


def test_first_duplicate_wins() -> None:
    strings = ConnectionStrings(
        [
            ConnectionStringSettings("main", "Server=first"),
            ConnectionStringSettings("MAIN", "Server=second"),
        ]
    )

    assert strings.get_connection_string("Main") == "Server=first"


def test_entries_with_empty_connection_string_are_skipped() -> None:
    strings = ConnectionStrings(
        [
            ConnectionStringSettings("main", ""),
            ConnectionStringSettings("main", "Server=real"),
        ]
    )

    assert strings.get_connection_string("main") == "Server=real"


def test_from_mapping_reads_prefixed_keys_in_order() -> None:
    strings = ConnectionStrings.from_mapping(
        {
            "PATH": "/usr/bin",
            "CONNECTIONSTRINGS__PROMOS": "Server=db01",
            "CONNECTIONSTRINGS__LOCAL__PROVIDER": "sqlite3",
            "CONNECTIONSTRINGS__LOCAL": "Data Source=local.db",
            "CONNECTIONSTRINGS__PROMOS__PROVIDER": "pyodbc",
        }
    )

    assert [entry.name for entry in strings] == ["PROMOS", "LOCAL"]
    assert strings.find("promos") == ConnectionStringSettings("PROMOS", "Server=db01", "pyodbc")
    assert strings.find("local").provider == "sqlite3"


def test_from_mapping_groups_names_case_insensitively() -> None:
    strings = ConnectionStrings.from_mapping(
        {
            "CONNECTIONSTRINGS__Local": "Data Source=local.db",
            "CONNECTIONSTRINGS__LOCAL__PROVIDER": "sqlite3",
        }
    )

    assert len(strings) == 1
    assert strings.find("local") == ConnectionStringSettings(
        "Local", "Data Source=local.db", "sqlite3"
    )


def test_provider_without_connection_string_does_not_match() -> None:
    strings = ConnectionStrings.from_mapping({"CONNECTIONSTRINGS__GHOST__PROVIDER": "pymssql"})

    assert len(strings) == 1
    assert strings.get_connection_string("ghost") == ""


def test_load_from_env_file(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "CONNECTIONSTRINGS__MAIN=Server=db01;Database=promos\n"
        "CONNECTIONSTRINGS__MAIN__PROVIDER=pymssql\n"
        "OTHER=1\n"
    )

    strings = load_connection_strings(env_file)

    assert strings.get_connection_string("main") == "Server=db01;Database=promos"
    assert strings.find("main").provider == "pymssql"


def test_load_from_missing_env_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_connection_strings(tmp_path / "missing.env")


def test_load_from_explicit_environ() -> None:
    strings = load_connection_strings(environ={"CONNECTIONSTRINGS__X": "Data Source=x.db"})

    assert strings.get_connection_string("x") == "Data Source=x.db"
