"""Error taxonomy and configuration contracts for the scaffolding workflow."""

from __future__ import annotations

from .errors import (
    AlreadyExists,
    CollaboratorError,
    ConfigurationError,
    DependencyRegistrationError,
    FilesystemError,
    InvalidIdentifier,
    ScaffoldError,
    ScaffoldLocked,
    TemplateMissing,
    UnitNotFound,
)

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
