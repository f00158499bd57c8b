"""Shared error types for the scaffolding workflow."""

from __future__ import annotations

from pathlib import Path


class ScaffoldError(RuntimeError):
    """Base class for every failure surfaced by the scaffolding procedure.

    ``step`` names the action that failed so the CLI can attribute the error,
    ``path`` points at the filesystem location involved (when there is one).
    Each subclass carries a stable ``exit_code`` used by the command line.
    """

    exit_code = 1

    def __init__(
        self,
        message: str,
        *,
        step: str | None = None,
        path: str | Path | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.step = step
        self.path = Path(path) if path is not None else None

    @property
    def kind(self) -> str:
        return type(self).__name__


class AlreadyExists(ScaffoldError):
    """The canonical unit path is already occupied."""

    exit_code = 3


class UnitNotFound(ScaffoldError):
    """The unit directory required by an operation does not exist."""

    exit_code = 4


class TemplateMissing(ScaffoldError):
    """A template source file is absent; the environment is misconfigured."""

    exit_code = 5


class FilesystemError(ScaffoldError):
    exit_code = 6


class CollaboratorError(ScaffoldError):
    """The external package manager failed or could not be started."""

    exit_code = 7


class DependencyRegistrationError(ScaffoldError):
    exit_code = 8


class InvalidIdentifier(ScaffoldError):
    """The identifier is not safe for path and name substitution."""

    exit_code = 9


class ConfigurationError(ScaffoldError):
    exit_code = 10


class ScaffoldLocked(ScaffoldError):
    """Another scaffolding run holds the advisory lock."""

    exit_code = 11


__all__ = [
    "AlreadyExists",
    "CollaboratorError",
    "ConfigurationError",
    "DependencyRegistrationError",
    "FilesystemError",
    "InvalidIdentifier",
    "ScaffoldError",
    "ScaffoldLocked",
    "TemplateMissing",
    "UnitNotFound",
]
