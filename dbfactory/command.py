"""
Command text, command type and bound parameters.

A ``Command`` is the mutable unit a ``Session`` executes.  Callers set
its text, pick a ``CommandType`` and attach parameters; the driver turns
all three into SQL and arguments at execution time.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Tuple, Union


class CommandType(enum.Enum):
    """How the command text is interpreted."""

    TEXT = "text"
    STORED_PROCEDURE = "stored_procedure"


def normalize_name(name: str) -> str:
    """Strip the ``@`` prefix SQL Server parameter names often carry."""
    return name.lstrip("@")


@dataclass
class Parameter:
    """A named parameter value.

    ``value`` is handed to the driver as is, so driver-specific objects
    (e.g. ``pymssql.output(int)``) can be bound too.
    """

    name: str
    value: Any = None

    def __post_init__(self) -> None:
        self.name = normalize_name(self.name)


ParameterLike = Union[Parameter, Tuple[str, Any]]


class Command:
    """Command text, type and ordered parameters."""

    def __init__(self, text: str = "", command_type: CommandType = CommandType.TEXT) -> None:
        self.text = text
        self.command_type = command_type
        self._parameters: List[Parameter] = []

    def __repr__(self) -> str:
        return (
            f"Command(text={self.text!r}, command_type={self.command_type.name}, "
            f"parameters={self.parameter_names()!r})"
        )

    @property
    def parameters(self) -> Tuple[Parameter, ...]:
        return tuple(self._parameters)

    def parameter_names(self) -> List[str]:
        return [param.name for param in self._parameters]

    def add_parameter(self, name: str, value: Any) -> None:
        """Append one named value."""
        self._parameters.append(Parameter(name, value))

    def add_parameter_object(self, parameter: Any) -> None:
        """Append a ``Parameter`` or any object with ``name``/``value``."""
        if not isinstance(parameter, Parameter):
            parameter = Parameter(parameter.name, parameter.value)
        self._parameters.append(parameter)

    def set_parameters(self, parameters: Union[Iterable[ParameterLike], Mapping[str, Any]]) -> None:
        """Replace every parameter with ``parameters``, keeping input order."""
        self.clear_parameters()
        if isinstance(parameters, Mapping):
            parameters = list(parameters.items())
        for param in parameters:
            if isinstance(param, tuple):
                name, value = param
                self.add_parameter(name, value)
            else:
                self.add_parameter_object(param)

    def clear_parameters(self) -> None:
        self._parameters.clear()

    def validate(self) -> None:
        """Raise ``ValueError`` when there is nothing to execute."""
        if not self.text or not self.text.strip():
            raise ValueError("Command text is empty")
