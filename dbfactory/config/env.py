"""
Connection-string configuration.

Connection strings are named entries read from the process environment
or from a dotenv file.  Each entry uses two variables:

* ``CONNECTIONSTRINGS__<NAME>`` – the connection string itself.
* ``CONNECTIONSTRINGS__<NAME>__PROVIDER`` – optional provider name used to
  pick the database driver (``pymssql`` when omitted).

Example ``.env``::

    CONNECTIONSTRINGS__PROMOS=Server=db01,1433;Database=promos;User Id=app;Password=secret
    CONNECTIONSTRINGS__LOCAL=Data Source=./local.db
    CONNECTIONSTRINGS__LOCAL__PROVIDER=sqlite3

Nothing is loaded at import time.  Build a ``ConnectionStrings`` with
``load_connection_strings`` and hand it to each ``Session``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Union

from dotenv import dotenv_values, load_dotenv

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

PREFIX = "CONNECTIONSTRINGS__"
PROVIDER_SUFFIX = "__PROVIDER"


@dataclass(frozen=True)
class ConnectionStringSettings:
    """One configured connection entry."""

    name: str
    connection_string: str
    provider: str = ""


class ConnectionStrings:
    """Ordered collection of ``ConnectionStringSettings``.

    Lookups scan the entries in stored order and compare names
    case-insensitively, so with duplicate names the first entry wins.
    """

    def __init__(self, entries: Optional[Iterable[ConnectionStringSettings]] = None) -> None:
        self._entries: List[ConnectionStringSettings] = list(entries or [])

    def __iter__(self) -> Iterator[ConnectionStringSettings]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        names = [entry.name for entry in self._entries]
        return f"ConnectionStrings({names!r})"

    def find(self, name: str) -> Optional[ConnectionStringSettings]:
        """Return the first entry named ``name`` (any case), or ``None``.

        Entries with an empty name or an empty connection string never
        match.
        """
        wanted = (name or "").lower()
        for entry in self._entries:
            if entry.connection_string and entry.name and entry.name.lower() == wanted:
                return entry
        return None

    def get_connection_string(self, name: str) -> str:
        """Return the connection string for ``name`` or ``""`` if absent."""
        entry = self.find(name)
        return entry.connection_string if entry else ""

    @classmethod
    def from_mapping(cls, values: Mapping[str, Optional[str]]) -> "ConnectionStrings":
        """Build entries from ``CONNECTIONSTRINGS__*`` keys of a flat mapping.

        Names are grouped case-insensitively and keep the spelling of the
        first key seen; entries are ordered the same way.  Keys without
        the prefix are ignored.
        """
        strings: Dict[str, str] = {}
        providers: Dict[str, str] = {}
        spelling: Dict[str, str] = {}
        for key, value in values.items():
            if not key.upper().startswith(PREFIX):
                continue
            rest = key[len(PREFIX):]
            if rest.upper().endswith(PROVIDER_SUFFIX):
                name = rest[: -len(PROVIDER_SUFFIX)]
                target = providers
            else:
                name = rest
                target = strings
            if not name:
                continue
            folded = name.lower()
            spelling.setdefault(folded, name)
            target[folded] = value or ""
        entries = [
            ConnectionStringSettings(
                name=name,
                connection_string=strings.get(folded, ""),
                provider=providers.get(folded, ""),
            )
            for folded, name in spelling.items()
        ]
        return cls(entries)


def load_connection_strings(
    env_file: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ConnectionStrings:
    """Load connection strings from a dotenv file or the environment.

    Args:
        env_file: Path of a dotenv file to read.  When given, only that
            file is consulted and its line order is kept.
        environ: Mapping used when ``env_file`` is not given.  Defaults to
            ``os.environ`` after ``load_dotenv()`` has run.

    Raises:
        ConfigurationError: If ``env_file`` does not exist or cannot be read.

    Returns:
        ConnectionStrings: The configured entries.
    """
    if env_file is not None:
        path = Path(env_file)
        if not path.is_file():
            raise ConfigurationError(f"Connection string file not found: {path}")
        try:
            values = dotenv_values(path)
        except (OSError, UnicodeDecodeError) as err:
            raise ConfigurationError(f"Cannot read connection string file: {path}") from err
        source = str(path)
    else:
        if environ is None:
            load_dotenv()
            environ = os.environ
        values = environ
        source = "environment"
    connection_strings = ConnectionStrings.from_mapping(values)
    logger.info(
        "[config] Connection strings loaded",
        extra={"source": source, "names": [entry.name for entry in connection_strings]},
    )
    return connection_strings
