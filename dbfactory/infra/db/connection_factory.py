"""
Provider registry.

Maps the provider name of a configured connection string to the
``Driver`` that opens it.  Names are matched case-insensitively; an
empty provider means SQL Server through ``pymssql``.
"""

from __future__ import annotations

from typing import Callable, Dict

from .base import Driver
from .mssql import PymssqlDriver, PyodbcDriver
from .sqlite import SqliteDriver

DEFAULT_PROVIDER = "pymssql"

# Registry mapping provider names to callables that return a ``Driver``.
_registry: Dict[str, Callable[[], Driver]] = {
    "pymssql": PymssqlDriver,
    "mssql": PymssqlDriver,
    "system.data.sqlclient": PymssqlDriver,
    "microsoft.data.sqlclient": PymssqlDriver,
    "pyodbc": PyodbcDriver,
    "odbc": PyodbcDriver,
    "sqlite": SqliteDriver,
    "sqlite3": SqliteDriver,
}


def get_driver(provider: str = "") -> Driver:
    """Return a new driver for ``provider``.

    Args:
        provider: Provider name from the connection-string entry.  Empty
            selects ``DEFAULT_PROVIDER``.

    Returns:
        A ``Driver`` instance.

    Raises:
        KeyError: If the provider is not registered.
    """
    key = (provider or DEFAULT_PROVIDER).strip().lower()
    try:
        factory = _registry[key]
    except KeyError:
        raise KeyError(f"No driver registered for provider: {provider}") from None
    return factory()


def register_driver(provider: str, factory: Callable[[], Driver]) -> None:
    """Register (or replace) the driver factory for ``provider``."""
    _registry[provider.strip().lower()] = factory
