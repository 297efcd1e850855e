"""
Connection-string configuration.

Example:

    from dbfactory.config import load_connection_strings
    connection_strings = load_connection_strings(".env")
    print(connection_strings.get_connection_string("promos"))
"""

from .env import (  # noqa: F401
    ConnectionStrings,
    ConnectionStringSettings,
    load_connection_strings,
)
