"""envloader - typed configuration from environment variables.

Declare defaults once, resolve them against the process environment, then
validate required variables and directory paths:

    from envloader import Environment

    env = Environment({
        "PORT": 8080,
        "CACHE_DIR": {"value": "./cache", "isDirectory": True},
    })

    errors = await env.check()
    if errors:
        raise errors
"""

from .environment import Environment, coerce
from .errors import (
    EnvironmentCheckError,
    EnvironmentCreateDirectoryError,
    EnvironmentDirectoryError,
    EnvironmentErrors,
    EnvironmentRequiredError,
)
from .interfaces import ConfigValue, DirectoryState, VariableSpec, VariableState

__version__ = "0.1.0"

__all__ = [
    "Environment",
    "coerce",
    "ConfigValue",
    "VariableSpec",
    "VariableState",
    "DirectoryState",
    "EnvironmentCheckError",
    "EnvironmentRequiredError",
    "EnvironmentDirectoryError",
    "EnvironmentCreateDirectoryError",
    "EnvironmentErrors",
]
