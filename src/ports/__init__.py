"""Facades over external collaborators."""

from __future__ import annotations

from .package_manager_port import (
    CargoPackageManager,
    CommandResult,
    PackageManager,
    get_package_manager,
    register_backend,
)

__all__ = [
    "CargoPackageManager",
    "CommandResult",
    "PackageManager",
    "get_package_manager",
    "register_backend",
]
