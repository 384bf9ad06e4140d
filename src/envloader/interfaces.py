"""Core data types for envloader.

A declaration is either a raw default value or a descriptor record. Both are
normalised into a ``VariableSpec`` when the ``Environment`` is built.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union

# Value types a variable may resolve to
ConfigValue = Union[str, int, float, bool, list[str]]


@dataclass(frozen=True)
class VariableSpec:
    """Declared shape of one environment variable.

    Attributes:
        value: Default used when the variable is not set in the environment.
               Its type decides how an override string is coerced.
        required: Whether ``check()`` reports the variable when it is unset
        is_directory: Whether the resolved value is a path that must exist
        description: Free-form help text shown by ``describe()``
    """
    value: Any = ""
    required: bool = False
    is_directory: bool = False
    description: Optional[str] = None

    @classmethod
    def from_declaration(cls, declaration: Any) -> "VariableSpec":
        """Build a spec from a raw default or a descriptor mapping.

        A mapping is only treated as a descriptor when it has a ``value`` key;
        ``isDirectory`` and ``is_directory`` are both accepted.
        """
        if isinstance(declaration, VariableSpec):
            return declaration

        if isinstance(declaration, Mapping) and "value" in declaration:
            is_directory = declaration.get(
                "isDirectory", declaration.get("is_directory", False)
            )
            return cls(
                value=declaration["value"],
                required=bool(declaration.get("required", False)),
                is_directory=bool(is_directory),
                description=declaration.get("description"),
            )

        return cls(value=declaration)


@dataclass(frozen=True)
class VariableState:
    """Snapshot of one variable as reported by ``get_variables()``.

    Attributes:
        value: Resolved value
        required: Declared required flag
        exists: Whether an environment override was present
    """
    value: ConfigValue
    required: bool
    exists: bool


@dataclass(frozen=True)
class DirectoryState:
    """Result of a filesystem check for one directory variable."""
    value: str
    exists: bool
