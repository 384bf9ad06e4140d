"""Environment - typed configuration resolved from environment variables.

Usage:
    env = Environment({
        "APP_ENV": "development",
        "WORKERS": 4,
        "DEBUG": False,
        "HOSTS": ["localhost"],
        "DATA_DIR": {"value": "./data", "isDirectory": True},
        "API_KEY": {"value": "", "required": True},
    })

    env["WORKERS"]                  # 4, or the parsed WORKERS override
    errors = await env.check()      # None when everything is in place
    await env.create_directories()
"""

import asyncio
import logging
import math
import os
import re
from collections.abc import Mapping
from typing import Any, Callable, Iterator, Optional

from .errors import (
    EnvironmentCheckError,
    EnvironmentCreateDirectoryError,
    EnvironmentDirectoryError,
    EnvironmentErrors,
    EnvironmentRequiredError,
)
from .interfaces import ConfigValue, DirectoryState, VariableSpec, VariableState
from .utils import shell_value, wrap_text

logger = logging.getLogger(__name__)

# Longest numeric prefix, the way a permissive float parser reads it
_NUMBER_PREFIX = re.compile(
    r"\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))"
)

_TRUE_STRINGS = ("true", "yes")


def parse_bool(text: Optional[str]) -> bool:
    """Return True only for "true" or "yes", in any letter case."""
    if text is None:
        return False
    return text.lower() in _TRUE_STRINGS


def parse_number(text: str) -> float:
    """Parse the leading number in ``text``, or NaN if there is none."""
    match = _NUMBER_PREFIX.match(text)
    if not match:
        return math.nan
    return float(match.group(1).replace("Infinity", "inf"))


def parse_list(text: str) -> list[str]:
    """Split on commas and strip whitespace around each item."""
    return [item.strip() for item in text.split(",")]


def coerce(default: Any, text: str) -> ConfigValue:
    """Convert an override string to the type of ``default``.

    Unparseable numbers become NaN rather than raising.
    """
    # bool before int: bool is an int subclass
    if isinstance(default, bool):
        return parse_bool(text)
    if isinstance(default, (int, float)):
        number = parse_number(text)
        if math.isnan(number):
            logger.warning(f"Could not parse {text!r} as a number, using NaN")
            return number
        if isinstance(default, int) and math.isfinite(number) and number.is_integer():
            return int(number)
        return number
    if isinstance(default, (list, tuple)):
        return parse_list(text)
    return text


class Environment(Mapping):
    """Configuration values resolved from declared defaults and the environment.

    The environment source is read once, at construction. The resolved
    values behave as a read-only mapping in declaration order.
    """

    def __init__(
        self,
        defaults: Mapping[str, Any],
        environ: Optional[Mapping[str, str]] = None,
    ):
        """Resolve every declared variable.

        Args:
            defaults: Variable name to raw default or descriptor mapping
            environ: Source of overrides. Defaults to ``os.environ``.
        """
        source = os.environ if environ is None else environ

        self._specs: dict[str, VariableSpec] = {
            key: VariableSpec.from_declaration(declaration)
            for key, declaration in defaults.items()
        }
        self._overrides: dict[str, str] = {
            key: source[key] for key in self._specs if key in source
        }
        self._values: dict[str, ConfigValue] = {}

        for key, spec in self._specs.items():
            if key in self._overrides:
                self._values[key] = coerce(spec.value, self._overrides[key])
                logger.debug(f"{key} overridden from environment: {self._values[key]!r}")
            elif isinstance(spec.value, (list, tuple)):
                self._values[key] = list(spec.value)
            else:
                self._values[key] = spec.value

    def __getitem__(self, key: str) -> ConfigValue:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Environment({self._values!r})"

    @property
    def specs(self) -> dict[str, VariableSpec]:
        """Normalised declarations, keyed by variable name."""
        return dict(self._specs)

    def as_dict(self) -> dict[str, ConfigValue]:
        """Shallow copy of the resolved values."""
        return dict(self._values)

    def get_variables(self) -> dict[str, VariableState]:
        """Report value, required flag and override presence per variable.

        ``exists`` reflects the environment as read at construction. Later
        changes to ``os.environ`` are not seen here, unlike a loader that
        re-reads the process environment on every call.
        """
        return {
            key: VariableState(
                value=self._values[key],
                required=spec.required,
                exists=key in self._overrides,
            )
            for key, spec in self._specs.items()
        }

    async def get_directories(
        self,
        callback: Optional[Callable[[dict[str, DirectoryState]], Any]] = None,
    ) -> dict[str, DirectoryState]:
        """Check whether each directory variable exists on disk.

        The checks run concurrently and are never cached. A failing stat is
        reported as a missing directory.
        """
        keys = [key for key, spec in self._specs.items() if spec.is_directory]
        states = await asyncio.gather(
            *(self._stat_directory(str(self._values[key])) for key in keys)
        )
        directories = dict(zip(keys, states))

        if callback:
            callback(directories)
        return directories

    async def create_directories(
        self,
        callback: Optional[Callable[[Optional[EnvironmentCheckError]], Any]] = None,
    ) -> None:
        """Create missing directories one at a time in declaration order.

        Stops at the first failure. Directories created before it are kept.

        Raises:
            EnvironmentCreateDirectoryError: If a directory could not be created
        """
        directories = await self.get_directories()
        error: Optional[EnvironmentCreateDirectoryError] = None
        cause: Optional[Exception] = None

        for key, directory in directories.items():
            if directory.exists:
                continue
            try:
                await asyncio.to_thread(os.mkdir, directory.value)
            except (OSError, ValueError) as e:
                cause = e
                error = EnvironmentCreateDirectoryError(key, directory.value, str(e))
                logger.error(error.message)
                break
            logger.info(f"Created directory {key}={directory.value}")

        if callback:
            callback(error)
        if error:
            raise error from cause

    async def check(
        self,
        options: Optional[dict] = None,
        callback: Optional[Callable[[Optional[EnvironmentErrors]], Any]] = None,
    ) -> Optional[EnvironmentErrors]:
        """Validate required variables and directory paths.

        Args:
            options: Reserved, currently ignored
            callback: Called with the same value that is returned

        Returns:
            EnvironmentErrors listing every problem, or None if there are none.
        """
        found: list[EnvironmentCheckError] = []

        for key, variable in self.get_variables().items():
            if variable.required and not variable.exists:
                found.append(EnvironmentRequiredError(key))

        directories = await self.get_directories()
        for key, directory in directories.items():
            if not directory.exists:
                found.append(
                    EnvironmentDirectoryError(key, os.path.abspath(directory.value))
                )

        errors = EnvironmentErrors(found) if found else None
        if errors:
            logger.debug(errors.message)

        if callback:
            callback(errors)
        return errors

    def to_shell(self) -> str:
        """Render the resolved values as ``export NAME=VALUE`` lines."""
        return "\n".join(
            f"export {key}={shell_value(value)}" for key, value in self._values.items()
        )

    def describe(self, width: int = 75) -> str:
        """Human-readable listing of every variable and its description."""
        blocks = []
        for key, spec in self._specs.items():
            header = f"{key}={shell_value(self._values[key])}"
            if spec.required:
                header += " [required]"
            if spec.is_directory:
                header += " [directory]"
            lines = [header]
            if spec.description:
                wrapped = wrap_text(spec.description, width=max(width - 4, 1))
                lines.extend(f"    {line}" for line in wrapped.splitlines())
            blocks.append("\n".join(lines))
        return "\n".join(blocks)

    @staticmethod
    async def _stat_directory(path: str) -> DirectoryState:
        try:
            await asyncio.to_thread(os.lstat, path)
        except (OSError, ValueError):
            return DirectoryState(value=path, exists=False)
        return DirectoryState(value=path, exists=True)
