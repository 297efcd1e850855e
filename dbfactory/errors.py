"""
Exceptions raised by ``dbfactory`` itself.

Errors coming from the database drivers (``pymssql``, ``pyodbc``,
``sqlite3``) are never wrapped; they reach the caller unchanged.
"""

from __future__ import annotations


class DbFactoryError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(DbFactoryError):
    """The connection-string store could not be read."""


class ConnectionStringNotFoundError(DbFactoryError, LookupError):
    """No configured entry matches the requested connection name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"No connection string configured for name: {name}")
        self.name = name


class SessionDisposedError(DbFactoryError, RuntimeError):
    """The session was disposed and cannot run another command."""


class TransactionError(DbFactoryError, RuntimeError):
    """A transaction operation was requested with no active transaction."""
