"""
Driver base class and helpers shared by the concrete drivers.

A driver adapts one DB-API 2.0 module to ``Session``: it opens
connections, starts transactions and renders a ``Command`` into the SQL
and arguments its module expects.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from ...command import Command, CommandType

# A single-quoted literal, or an @name token not preceded by @ or a word
# character (so @@IDENTITY and e-mail addresses are left alone).
_TOKEN_RE = re.compile(r"'(?:[^']|'')*'|(?<![@\w])@([A-Za-z_][A-Za-z0-9_]*)")


def split_connection_string(value: str) -> Dict[str, str]:
    """Split ``key=value;key=value`` pairs into a dict with lower-case keys."""
    pairs: Dict[str, str] = {}
    for part in value.split(";"):
        part = part.strip()
        if not part or "=" not in part:
            continue
        key, val = part.split("=", 1)
        pairs[key.strip().lower()] = val.strip()
    return pairs


def rewrite_parameters(sql: str, bound: Dict[str, str], replace: Callable[[str], str]) -> str:
    """Replace bound ``@name`` tokens in ``sql``.

    Args:
        sql: Command text.
        bound: Lower-case parameter name mapped to the name it was bound with.
        replace: Called with the bound name; returns the placeholder text.

    Tokens inside string literals and tokens whose name is not bound are
    kept verbatim.
    """

    def replacer(match: re.Match[str]) -> str:
        token = match.group(1)
        if token is None:
            return match.group(0)
        name = bound.get(token.lower())
        if name is None:
            return match.group(0)
        return replace(name)

    return _TOKEN_RE.sub(replacer, sql)


class Driver:
    """Base driver.  Subclasses set ``name`` and implement ``connect``."""

    name = "base"
    paramstyle = "named"

    def connect(self, connection_string: str, *, autocommit: bool) -> Any:
        raise NotImplementedError

    def begin(self, connection: Any) -> None:
        """Start a transaction on a connection opened with autocommit off.

        DB-API connections open a transaction implicitly, so the default
        does nothing.
        """

    @property
    def broken_errors(self) -> Tuple[Type[BaseException], ...]:
        """Exception classes meaning the connection itself is unusable."""
        return ()

    def prepare(self, command: Command) -> Tuple[str, Optional[Any]]:
        """Return ``(sql, args)`` for ``command``; ``args`` is ``None`` when unbound."""
        command.validate()
        if command.command_type is CommandType.STORED_PROCEDURE:
            return self.prepare_procedure(command)
        if not command.parameters:
            return command.text, None
        return self.prepare_text(command)

    def prepare_text(self, command: Command) -> Tuple[str, Any]:
        raise NotImplementedError

    def prepare_procedure(self, command: Command) -> Tuple[str, Any]:
        raise ValueError(f"Driver {self.name} does not support stored procedures")

    @staticmethod
    def bound_names(command: Command) -> Dict[str, str]:
        names: Dict[str, str] = {}
        for param in command.parameters:
            names.setdefault(param.name.lower(), param.name)
        return names

    @staticmethod
    def values_by_name(command: Command) -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        for param in command.parameters:
            values.setdefault(param.name, param.value)
        return values

    @staticmethod
    def referenced_names(sql: str, bound: Dict[str, str]) -> List[str]:
        """Bound parameter names in order of appearance in ``sql``."""
        found: List[str] = []
        for match in _TOKEN_RE.finditer(sql):
            token = match.group(1)
            if token is not None and token.lower() in bound:
                found.append(bound[token.lower()])
        return found
