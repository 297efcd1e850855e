"""
Small database-access helper for SQL Server.

A ``Session`` resolves a named connection string, opens a connection
(optionally inside a transaction) and runs one mutable command in one of
five ways: row count, integer scalar, row reader, table or dataset.
See ``dbfactory.session`` for the lifecycle rules.
"""

from .command import Command, CommandType, Parameter  # noqa: F401
from .config import ConnectionStrings, ConnectionStringSettings, load_connection_strings  # noqa: F401
from .errors import (  # noqa: F401
    ConfigurationError,
    ConnectionStringNotFoundError,
    DbFactoryError,
    SessionDisposedError,
    TransactionError,
)
from .results import DataSet, DataTable, RowReader  # noqa: F401
from .session import ConnectionState, Session, Transaction  # noqa: F401

__version__ = "0.1.0"
