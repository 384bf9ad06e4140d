"""Error types reported by environment checks."""

from typing import Iterable, Iterator


class EnvironmentCheckError(Exception):
    """Base class for all envloader errors.

    ``name`` is the class name so callers can branch on it without
    importing every subclass.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def name(self) -> str:
        return type(self).__name__


class EnvironmentRequiredError(EnvironmentCheckError):
    """A required variable was not set in the environment."""

    def __init__(self, variable: str):
        super().__init__(f"Variable is required: {variable}")
        self.variable = variable


class EnvironmentDirectoryError(EnvironmentCheckError):
    """A directory variable points at a path that does not exist."""

    def __init__(self, variable: str, path: str):
        super().__init__(f'Path does not exist: {variable}="{path}"')
        self.variable = variable
        self.path = path


class EnvironmentCreateDirectoryError(EnvironmentCheckError):
    """Creating a missing directory failed."""

    def __init__(self, variable: str, path: str, reason: str = ""):
        message = f'Could not create directory: {variable}="{path}"'
        if reason:
            message += f" ({reason})"
        super().__init__(message)
        self.variable = variable
        self.path = path


class EnvironmentErrors(EnvironmentCheckError):
    """Ordered collection of errors found by ``Environment.check()``."""

    def __init__(self, errors: Iterable[EnvironmentCheckError]):
        self.errors = list(errors)
        summary = "; ".join(e.message for e in self.errors)
        super().__init__(f"{len(self.errors)} environment error(s): {summary}")

    def __len__(self) -> int:
        return len(self.errors)

    def __iter__(self) -> Iterator[EnvironmentCheckError]:
        return iter(self.errors)

    def __getitem__(self, index: int) -> EnvironmentCheckError:
        return self.errors[index]

    def __bool__(self) -> bool:
        return bool(self.errors)
