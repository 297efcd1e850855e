"""
SQLite driver for local file databases.

The connection string is either ``Data Source=<path>`` or a bare path
(``:memory:`` works too, but every reconnect starts from an empty
database).  SQLite binds ``@name`` parameters natively but matches names
case-sensitively, so bound tokens are respelled the way they were bound
and passed together with a name/value mapping.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Tuple, Type

from ...command import Command
from .base import Driver, rewrite_parameters, split_connection_string

logger = logging.getLogger(__name__)


def database_path(connection_string: str) -> str:
    """Return the database path named by ``connection_string``."""
    value = (connection_string or "").strip()
    if "=" in value:
        kv = split_connection_string(value)
        value = kv.get("data source") or kv.get("datasource") or kv.get("filename") or ""
    if not value:
        raise ValueError("No Data Source= found in connection string")
    return value


class SqliteDriver(Driver):
    """SQLite through the standard ``sqlite3`` module."""

    name = "sqlite3"
    paramstyle = "named"

    def connect(self, connection_string: str, *, autocommit: bool) -> Any:
        path = database_path(connection_string)
        logger.info("[driver] Connecting", extra={"driver": self.name, "database": path})
        # isolation_level=None leaves transaction control to begin()
        return sqlite3.connect(path, isolation_level=None)

    def begin(self, connection: Any) -> None:
        connection.execute("BEGIN")

    @property
    def broken_errors(self) -> Tuple[Type[BaseException], ...]:
        return (sqlite3.InterfaceError,)

    def prepare_text(self, command: Command) -> Tuple[str, Any]:
        sql = rewrite_parameters(command.text, self.bound_names(command), lambda name: f"@{name}")
        return sql, self.values_by_name(command)
