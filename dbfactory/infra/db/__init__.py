"""
Database drivers.

Each driver adapts one DB-API module (``pymssql``, ``pyodbc`` or
``sqlite3``) to ``Session``.  ``get_driver`` picks one by provider name.
"""

from .base import Driver  # noqa: F401
from .connection_factory import get_driver, register_driver  # noqa: F401
from .mssql import PymssqlDriver, PyodbcDriver, parse_connection_string  # noqa: F401
from .sqlite import SqliteDriver  # noqa: F401
